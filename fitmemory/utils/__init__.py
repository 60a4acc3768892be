# Utility modules
from .config import Settings, get_settings
from .datetime_utils import ensure_utc, format_datetime, now_utc, parse_datetime
from .logging_utils import get_logger

__all__ = [
    "Settings",
    "get_settings",
    "get_logger",
    "now_utc",
    "ensure_utc",
    "parse_datetime",
    "format_datetime",
]
