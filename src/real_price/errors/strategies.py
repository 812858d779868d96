# 📜 real_price/errors/strategies.py
"""
📜 Стратегії конвертації сторонніх винятків у доменні `AppError`.

🔹 `HttpxErrorStrategy` — таймаути/зʼєднання → `TransportError`, 404 → `NotFound`, 429 → `RateLimitExceeded`.
🔹 `MarketplaceCodeStrategy` — коди `ret[0]` з JSONP-конверта → відповідна доменна помилка.
🔹 `convert_exception()` проганяє ланцюжок стратегій, нерозпізнане → `TransportError`.
"""

from __future__ import annotations

# 🌐 Зовнішні бібліотеки
import httpx                                                        # 🌐 HTTP-клієнт (винятки)

# 🔠 Системні імпорти
import logging
from typing import Optional, Protocol, Sequence

# 🧩 Внутрішні модулі проєкту
from .custom_errors import (
    AppError,
    MalformedResponse,
    NotFound,
    RateLimitExceeded,
    TransportError,
    ValidationChallenge,
)

logger = logging.getLogger("real_price.errors.strategies")

RATE_LIMIT_CODE = "FAIL_SYS_ILLEGAL_ACCESS"
VALIDATION_CODE = "FAIL_SYS_USER_VALIDATE"


# ================================
# 🧠 КОНТРАКТ СТРАТЕГІЙ
# ================================
class IErrorHandlingStrategy(Protocol):
    """🧠 Контракт з єдиним методом `handle`."""

    def handle(self, error: Exception, *, product_id: Optional[str] = None) -> Optional[AppError]:
        """Вертає `AppError`, якщо виняток розпізнано, або None."""


# ================================
# 🌐 HTTPX-СТРАТЕГІЯ
# ================================
class HttpxErrorStrategy:
    """🌐 Перетворює httpx-помилки на доменні."""

    def handle(self, error: Exception, *, product_id: Optional[str] = None) -> Optional[AppError]:
        if isinstance(error, httpx.TimeoutException):               # ⏱️ Таймаути (connect/read/write/pool)
            url = _request_url(error)
            logger.debug("⏱️ httpx timeout", extra={"url": url, "product_id": product_id})
            return TransportError("Request timed out", url=url, details=str(error), product_id=product_id)

        if isinstance(error, httpx.HTTPStatusError):                # 🔢 Неочікуваний статус
            url = _request_url(error)
            status = error.response.status_code
            logger.debug("🔢 httpx status error", extra={"url": url, "status": status, "product_id": product_id})
            if status == 404:
                return NotFound("Item not found", details=url, product_id=product_id)
            if status == 429:
                return RateLimitExceeded("HTTP 429 Too Many Requests", details=url, product_id=product_id)
            return TransportError(
                f"Unexpected HTTP status {status}",
                url=url,
                status_code=status,
                details=str(error),
                product_id=product_id,
            )

        if isinstance(error, httpx.RequestError):                   # 🌐 Зʼєднання, DNS, протокол
            url = _request_url(error)
            logger.debug("🌐 httpx request error", extra={"url": url, "product_id": product_id})
            return TransportError("Network request failed", url=url, details=str(error), product_id=product_id)
        return None


# ================================
# 🏷️ КОДИ МАРКЕТПЛЕЙСУ
# ================================
class MarketplaceCodeStrategy:
    """🏷️ Класифікує `FAIL_*` коди з конверта `{ret: [...], data: {...}}`."""

    def classify(self, ret_code: str, *, product_id: Optional[str] = None) -> AppError:
        if RATE_LIMIT_CODE in ret_code:
            return RateLimitExceeded(ret_code, product_id=product_id)
        if VALIDATION_CODE in ret_code:
            return ValidationChallenge(ret_code, product_id=product_id)
        if "NOT_FOUND" in ret_code.upper() or "NOT_EXIST" in ret_code.upper():
            return NotFound(ret_code, product_id=product_id)
        return MalformedResponse("Marketplace returned failure code", details=ret_code, product_id=product_id)

    def handle(self, error: Exception, *, product_id: Optional[str] = None) -> Optional[AppError]:
        message = str(error)
        if message.startswith("FAIL_"):
            return self.classify(message, product_id=product_id)
        return None


DEFAULT_STRATEGIES: Sequence[IErrorHandlingStrategy] = (HttpxErrorStrategy(), MarketplaceCodeStrategy())


def convert_exception(
    error: Exception,
    *,
    product_id: Optional[str] = None,
    strategies: Sequence[IErrorHandlingStrategy] = DEFAULT_STRATEGIES,
) -> AppError:
    """🔁 Повертає доменну помилку: `AppError` як є, інакше перша стратегія, що спрацювала."""
    if isinstance(error, AppError):
        return error
    for strategy in strategies:
        converted = strategy.handle(error, product_id=product_id)
        if converted is not None:
            return converted
    logger.warning("⚠️ Нерозпізнаний виняток %s: %s", type(error).__name__, error, extra={"product_id": product_id})
    return TransportError("Unexpected failure", details=f"{type(error).__name__}: {error}", product_id=product_id)


def _request_url(error: Exception) -> str:
    """🔗 Безпечно дістає URL з httpx-винятку (request може бути не привʼязаний)."""
    try:
        return str(error.request.url)  # type: ignore[attr-defined]
    except (AttributeError, RuntimeError):
        return "N/A"


__all__ = [
    "IErrorHandlingStrategy",
    "HttpxErrorStrategy",
    "MarketplaceCodeStrategy",
    "DEFAULT_STRATEGIES",
    "convert_exception",
    "RATE_LIMIT_CODE",
    "VALIDATION_CODE",
]
