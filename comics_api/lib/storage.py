# comics_api/lib/storage.py
from __future__ import annotations

from typing import Optional

from google.cloud import storage

from comics_api.config import config
from comics_api import logger

log = logger.get_logger(__name__)

_storage = None
def _client():
    global _storage
    if _storage is None:
        _storage = storage.Client()
    return _storage


def public_url_for(object_name: str, *, bucket: Optional[str] = None) -> str:
    key = object_name.lstrip("/")
    if config.assets_base_url:
        return f"{config.assets_base_url}/{key}"
    return f"https://storage.googleapis.com/{bucket or config.gcs_bucket}/{key}"


def upload_bytes_to_gcs(
    data: bytes,
    object_name: str,
    *,
    content_type: str = "application/octet-stream",
    bucket: Optional[str] = None,
    client=None,
) -> dict:
    """
    Upload raw bytes as `object_name`. Page images are immutable (every
    upload gets a fresh key) so they are cached aggressively.
    """
    bucket_name = bucket or config.gcs_bucket
    if not bucket_name:
        raise RuntimeError("GCS_BUCKET not configured")

    blob = (client or _client()).bucket(bucket_name).blob(object_name)
    blob.cache_control = "public, max-age=31536000, immutable"
    blob.upload_from_string(data, content_type=content_type)
    log.debug(f"uploaded {len(data)} bytes to gs://{bucket_name}/{object_name}")

    return {
        "bucket": bucket_name,
        "object": object_name,
        "gs_uri": f"gs://{bucket_name}/{object_name}",
        "public_url": public_url_for(object_name, bucket=bucket_name),
        "content_type": content_type,
    }
