# comics_api/features/pages/gateway.py
from __future__ import annotations

from typing import Callable, List, Optional

import openai

from comics_api.config import ImageModelConfig
from comics_api.errors import CreditExhausted, EmptyResult, InternalError, UpstreamError
from comics_api.lib.openai_client import make_image_client
from comics_api.logger import get_logger

log = get_logger(__name__)

PAYMENT_REQUIRED = 402


class ImageGateway:
    """
    Single-attempt boundary around the image service.

    The model and its page size are fixed at construction; callers only
    supply the prompt, reference images and (optionally) their own key.
    """

    def __init__(
        self,
        model: ImageModelConfig,
        *,
        client_factory: Callable[[Optional[str]], object] = make_image_client,
    ):
        self.model = model
        self._client_factory = client_factory

    @property
    def width(self) -> int:
        return self.model.width

    @property
    def height(self) -> int:
        return self.model.height

    def generate(self, prompt: str, reference_images: List[str], api_key: Optional[str] = None) -> str:
        """Returns the transient URL of the generated image."""
        extra = {
            "width": self.width,
            "height": self.height,
            "temperature": self.model.temperature,
        }
        if reference_images:
            extra["reference_images"] = list(reference_images)

        log.info(
            f"image request model={self.model.name} size={self.width}x{self.height} "
            f"refs={len(reference_images)} byok={bool(api_key)}"
        )
        try:
            client = self._client_factory(api_key)
            resp = client.images.generate(
                model=self.model.name,
                prompt=prompt,
                n=1,
                extra_body=extra,
            )
        except openai.APIStatusError as e:
            log.error(f"image service error status={e.status_code}: {e.message}")
            if e.status_code == PAYMENT_REQUIRED:
                raise CreditExhausted()
            raise UpstreamError(e.status_code, e.message)
        except Exception as e:
            log.exception("image service call failed")
            raise InternalError(str(e) or e.__class__.__name__)

        data = getattr(resp, "data", None) or []
        url = getattr(data[0], "url", None) if data else None
        if not url:
            log.error("image service returned no image url")
            raise EmptyResult()
        return url
