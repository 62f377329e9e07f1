# comics_api/__init__.py
from .config import config
from .logger import get_logger
