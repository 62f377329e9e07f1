# comics_api/lib/openai_client.py
from typing import Optional

from openai import OpenAI
from comics_api.config import config


def make_image_client(api_key: Optional[str] = None) -> OpenAI:
    """
    Client for the OpenAI-compatible image endpoint. A caller-supplied key
    wins over the server default. No SDK-level retries: one attempt per page.
    """
    key = api_key or config.image_api_key
    if not key:
        raise ValueError("image service credential not configured (TOGETHER_API_KEY_DEFAULT)")
    return OpenAI(
        api_key=key,
        base_url=config.image_api_base_url,
        timeout=config.image_request_timeout,
        max_retries=0,
    )
