# covergen/__init__.py
from .config import config
from .logger import get_logger

__version__ = config.app_version

__all__ = ["config", "get_logger", "__version__"]
