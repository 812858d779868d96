# 🧰 real_price/shared/utils/__init__.py
"""
🧰 Спільні утиліти: логування та грошові хелпери.
"""

from __future__ import annotations

from .logger import LOG_NAME, get_logger, init_logging, init_logging_from_config
from .money import extract_price_value, format_price, to_float

__all__ = [
    "LOG_NAME",
    "get_logger",
    "init_logging",
    "init_logging_from_config",
    "extract_price_value",
    "format_price",
    "to_float",
]
