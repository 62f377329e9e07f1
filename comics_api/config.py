# comics_api/config.py
import os
from dataclasses import dataclass
from typing import List


def _env_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}

def _env_csv(name: str, default: str = "*") -> List[str]:
    raw = os.getenv(name, default)
    return [x.strip() for x in raw.split(",") if x.strip()]

def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


@dataclass(frozen=True)
class ImageModelConfig:
    """One image model and the fixed canvas it renders pages at."""
    name: str
    width: int
    height: int
    temperature: float = 0.1


# Two supported models; pages are never sized per request.
FLASH_IMAGE_MODEL = ImageModelConfig(name="google/flash-image-2.5", width=864, height=1184)
PRO_IMAGE_MODEL = ImageModelConfig(name="google/gemini-3-pro-image", width=896, height=1200)


@dataclass(frozen=True)
class Config:
    # Database
    database_url: str
    # Image service (OpenAI-compatible endpoint)
    image_api_key: str
    image_api_base_url: str
    image_model: ImageModelConfig
    image_request_timeout: int
    # Durable storage
    gcs_bucket: str
    assets_base_url: str
    download_timeout: int
    # Free tier quota
    free_tier_limit: int
    free_tier_window_days: int
    # Slugs
    slug_max_attempts: int
    # API / CORS
    allowed_origins: List[str]
    # Logging
    log_level: str


def load_config() -> Config:
    use_new_model = _env_bool("USE_NEW_IMAGE_MODEL", False)
    free_tier_limit = _env_int("FREE_TIER_LIMIT", 1)
    if free_tier_limit < 1:
        raise ValueError(f"FREE_TIER_LIMIT must be at least 1, got {free_tier_limit}")
    return Config(
        database_url = os.getenv("DATABASE_URL", "sqlite:///./comics.db"),
        image_api_key = os.getenv("TOGETHER_API_KEY_DEFAULT", ""),
        image_api_base_url = os.getenv("IMAGE_API_BASE_URL", "https://api.together.xyz/v1"),
        image_model = PRO_IMAGE_MODEL if use_new_model else FLASH_IMAGE_MODEL,
        image_request_timeout = _env_int("IMAGE_REQUEST_TIMEOUT", 300),
        gcs_bucket = os.getenv("GCS_BUCKET", "ai-comic-pages"),
        assets_base_url = os.getenv("ASSETS_BASE_URL", "").rstrip("/"),
        download_timeout = _env_int("DOWNLOAD_TIMEOUT", 60),
        free_tier_limit = free_tier_limit,
        free_tier_window_days = _env_int("FREE_TIER_WINDOW_DAYS", 7),
        slug_max_attempts = _env_int("SLUG_MAX_ATTEMPTS", 10),
        allowed_origins = _env_csv("ALLOWED_ORIGINS", "*"),
        log_level = os.getenv("LOG_LEVEL", "INFO"),
    )

# Load once
config = load_config()
