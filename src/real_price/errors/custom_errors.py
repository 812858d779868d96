# 🚨 real_price/errors/custom_errors.py
"""
🚨 Ієрархія доменних помилок конвеєра реальних цін.

🔹 `RateLimitExceeded` / `ValidationChallenge` — повторювані через backoff (`RetryableError`).
🔹 `MissingCredential`, `MalformedResponse`, `TransportError` — переводять резолвер на fallback-рівень.
🔹 `NotFound` — термінальна помилка, fallback для неї не існує.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import logging                                                      # 🧾 Логування створення помилок
from typing import Dict, Optional                                   # 📐 Типізація

logger = logging.getLogger("real_price.errors.custom_errors")


# ================================
# ⚠️ КОДИ ПОМИЛОК
# ================================
class ErrorCode:
    """⚠️ Стабільні коди для логів/метрик."""

    RATE_LIMIT = "rate_limit_exceeded"
    VALIDATION = "validation_challenge"
    CREDENTIAL = "missing_credential"
    MALFORMED = "malformed_response"
    TRANSPORT = "transport_error"
    NOT_FOUND = "not_found"
    UNKNOWN = "unknown_error"


# ================================
# 🧠 БАЗОВИЙ ВИНЯТОК
# ================================
class AppError(Exception):
    """🧠 Базова помилка застосунку з деталями та ідентифікатором товару."""

    code: str = ErrorCode.UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        details: Optional[str] = None,
        product_id: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.product_id = product_id
        logger.debug("🧾 %s created", type(self).__name__, extra={"product_id": product_id, "details": details})

    def to_log_extra(self) -> Dict[str, object]:
        """📦 Формує словник для `logger.extra`."""
        extra: Dict[str, object] = {"error_code": self.code}
        if self.product_id:
            extra["product_id"] = self.product_id
        if self.details:
            extra["details"] = self.details
        return extra

    def __str__(self) -> str:
        return self.message if not self.details else f"{self.message} ({self.details})"


class RetryableError(AppError):
    """🔁 Помилки, які AdmissionController повторює з експоненційною затримкою."""


# ================================
# 🚦 ЛІМІТИ ТА ВАЛІДАЦІЯ
# ================================
class RateLimitExceeded(RetryableError):
    """🚦 Віддалена сторона обмежила частоту запитів (`FAIL_SYS_ILLEGAL_ACCESS`, HTTP 429)."""

    code = ErrorCode.RATE_LIMIT


class ValidationChallenge(RetryableError):
    """🧩 Віддалена сторона вимагає проходження перевірки (`FAIL_SYS_USER_VALIDATE`)."""

    code = ErrorCode.VALIDATION


# ================================
# 🔀 ПОМИЛКИ, ЩО ВЕДУТЬ НА FALLBACK
# ================================
class MissingCredential(AppError):
    """🔑 Немає токена сесії — підписаний запит неможливий."""

    code = ErrorCode.CREDENTIAL


class MalformedResponse(AppError):
    """🧾 Відповідь має неочікувану форму (JSONP, JSON, FAIL_-код тощо)."""

    code = ErrorCode.MALFORMED


class TransportError(AppError):
    """🌐 Мережевий збій: таймаут, зʼєднання, неочікуваний HTTP-статус."""

    code = ErrorCode.TRANSPORT

    def __init__(
        self,
        message: str,
        *,
        details: Optional[str] = None,
        product_id: Optional[str] = None,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message, details=details, product_id=product_id)
        self.url = url
        self.status_code = status_code

    def to_log_extra(self) -> Dict[str, object]:
        extra = super().to_log_extra()
        if self.url:
            extra["url"] = self.url
        if self.status_code is not None:
            extra["status_code"] = self.status_code
        return extra


# ================================
# 🛑 ТЕРМІНАЛЬНІ ПОМИЛКИ
# ================================
class NotFound(AppError):
    """🛑 Товар не існує — жоден рівень fallback не допоможе."""

    code = ErrorCode.NOT_FOUND


__all__ = [
    "ErrorCode",
    "AppError",
    "RetryableError",
    "RateLimitExceeded",
    "ValidationChallenge",
    "MissingCredential",
    "MalformedResponse",
    "TransportError",
    "NotFound",
]
