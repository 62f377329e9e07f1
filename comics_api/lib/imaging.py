from __future__ import annotations

import io
from typing import Tuple

from PIL import Image, UnidentifiedImageError

_FORMATS = {
    "PNG": (".png", "image/png"),
    "JPEG": (".jpg", "image/jpeg"),
    "WEBP": (".webp", "image/webp"),
    "GIF": (".gif", "image/gif"),
}


def sniff_image(data: bytes) -> Tuple[str, str]:
    """
    Returns (extension, content_type) for image bytes.
    Raises ValueError when the bytes are empty, truncated or not an image.
    """
    if not data:
        raise ValueError("empty image payload")
    try:
        with Image.open(io.BytesIO(data)) as im:
            fmt = im.format
            im.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ValueError(f"not a decodable image: {e}") from e
    if fmt not in _FORMATS:
        raise ValueError(f"unsupported image format: {fmt}")
    return _FORMATS[fmt]
