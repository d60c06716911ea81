from .logging import get_logger, setup_logging
from .settings import Settings, get_settings

__all__ = ["Settings", "get_logger", "get_settings", "setup_logging"]
