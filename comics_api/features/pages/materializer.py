# comics_api/features/pages/materializer.py
from __future__ import annotations

import time
from typing import Callable, Optional

import requests

from comics_api.config import config
from comics_api.errors import StorageError
from comics_api.lib.imaging import sniff_image
from comics_api.lib.storage import upload_bytes_to_gcs
from comics_api.logger import get_logger

log = get_logger(__name__)


def page_object_key(story_id: str, page_number: int, stamp_ms: int, ext: str = ".jpg") -> str:
    return f"{story_id}/page-{page_number}-{stamp_ms}{ext}"


class ResultMaterializer:
    """
    Copies a generated image from the image service's short-lived URL into
    the bucket. Keys are salted with the time in ms so a redraw never
    overwrites an earlier upload.
    """

    def __init__(
        self,
        *,
        http: Optional[requests.Session] = None,
        upload: Callable[..., dict] = upload_bytes_to_gcs,
        clock_ms: Callable[[], int] = lambda: int(time.time() * 1000),
        timeout: Optional[int] = None,
    ):
        self.http = http or requests.Session()
        self.upload = upload
        self.clock_ms = clock_ms
        self.timeout = timeout or config.download_timeout

    def _fetch(self, url: str) -> bytes:
        try:
            r = self.http.get(url, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            raise StorageError("Failed to fetch generated image", detail=f"GET {url}: {e}")
        return r.content

    def persist(self, remote_url: str, *, story_id: str, page_number: int) -> str:
        data = self._fetch(remote_url)
        try:
            ext, content_type = sniff_image(data)
        except ValueError as e:
            raise StorageError("Generated image could not be read", detail=str(e))

        key = page_object_key(story_id, page_number, self.clock_ms(), ext)
        try:
            info = self.upload(data, key, content_type=content_type)
        except Exception as e:
            log.exception(f"upload of {key} failed")
            raise StorageError("Failed to store generated image", detail=str(e))

        log.info(f"stored page {page_number} of story {story_id} at {info['gs_uri']}")
        return info["public_url"]

    def close(self) -> None:
        self.http.close()
