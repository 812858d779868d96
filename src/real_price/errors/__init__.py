# 🚨 real_price/errors/__init__.py
"""
🚨 Доменні помилки та стратегії їх конвертації.
"""

from __future__ import annotations

from .custom_errors import (
    AppError,
    ErrorCode,
    MalformedResponse,
    MissingCredential,
    NotFound,
    RateLimitExceeded,
    RetryableError,
    TransportError,
    ValidationChallenge,
)
from .strategies import HttpxErrorStrategy, MarketplaceCodeStrategy, convert_exception

__all__ = [
    "AppError",
    "ErrorCode",
    "MalformedResponse",
    "MissingCredential",
    "NotFound",
    "RateLimitExceeded",
    "RetryableError",
    "TransportError",
    "ValidationChallenge",
    "HttpxErrorStrategy",
    "MarketplaceCodeStrategy",
    "convert_exception",
]
