# 🚦 real_price/infrastructure/rate_limiting/admission_controller.py
"""
🚦 AdmissionController — ковзне вікно запитів + експоненційний backoff для одного класу викликів.

🔹 `admit_slot()` ніколи не відхиляє викликача — лише призупиняє до звільнення слота.
🔹 `run_with_backoff()` повторює лише `RateLimitExceeded` / `ValidationChallenge`.
🔹 Стан backoff спільний для всіх задач, що використовують екземпляр (throttling класу викликів).
"""

from __future__ import annotations

# 🔠 Системні імпорти
import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Deque, Mapping, Optional, TypeVar

# 🧩 Внутрішні модулі проєкту
from real_price.errors.custom_errors import RetryableError
from real_price.shared.utils.logger import LOG_NAME

logger = logging.getLogger(f"{LOG_NAME}.rate_limiting")

T = TypeVar("T")

Clock = Callable[[], float]                                         # ⏱️ Монотонні секунди
Sleeper = Callable[[float], Awaitable[Any]]                         # 😴 async sleep(секунди)


# ================================
# ⚙️ КОНФІГ
# ================================
@dataclass(frozen=True, slots=True)
class AdmissionConfig:
    """Параметри одного класу викликів (усі тривалості — мілісекунди)."""

    max_requests: int = 2
    window_ms: int = 1000
    initial_backoff_ms: int = 1000
    max_backoff_ms: int = 32000

    def __post_init__(self) -> None:
        if self.max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if self.window_ms <= 0 or self.initial_backoff_ms <= 0:
            raise ValueError("window_ms and initial_backoff_ms must be positive")
        if self.max_backoff_ms < self.initial_backoff_ms:
            raise ValueError("max_backoff_ms must be >= initial_backoff_ms")

    @classmethod
    def from_mapping(cls, node: Optional[Mapping[str, Any]], default: Optional["AdmissionConfig"] = None) -> "AdmissionConfig":
        """Будує конфіг із розділу YAML; відсутні ключі беруться з `default`."""
        base = default or cls()
        node = node or {}
        return cls(
            max_requests=int(node.get("max_requests", base.max_requests)),
            window_ms=int(node.get("window_ms", base.window_ms)),
            initial_backoff_ms=int(node.get("initial_backoff_ms", base.initial_backoff_ms)),
            max_backoff_ms=int(node.get("max_backoff_ms", base.max_backoff_ms)),
        )


# ================================
# 🚦 КОНТРОЛЕР
# ================================
class AdmissionController:
    """🚦 Пейсинг вихідних викликів та retry/backoff навколо дії викликача."""

    def __init__(
        self,
        config: Optional[AdmissionConfig] = None,
        *,
        name: str = "default",
        clock: Clock = time.monotonic,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self._config = config or AdmissionConfig()
        self._name = name
        self._clock = clock
        self._sleep = sleep
        self._timestamps: Deque[float] = deque()                   # 🕒 Журнал допусків (секунди)
        self._backoff_ms: int = self._config.initial_backoff_ms   # ⏭️ Наступна пауза
        self._last_wait_ms: int = 0                                 # ⏮️ Остання фактична пауза
        logger.debug("⚙️ AdmissionController[%s] init: %s", name, self._config)

    @property
    def name(self) -> str:
        return self._name

    @property
    def config(self) -> AdmissionConfig:
        return self._config

    @property
    def current_backoff_ms(self) -> int:
        return self._backoff_ms

    def reset(self) -> None:
        """Скидає журнал та backoff до початкових значень."""
        self._timestamps.clear()
        self._backoff_ms = self._config.initial_backoff_ms
        self._last_wait_ms = 0

    # ================================
    # 🎟️ СЛОТИ
    # ================================
    async def admit_slot(self) -> None:
        """Чекає, доки в ковзному вікні звільниться місце, і фіксує допуск."""
        window_sec = self._config.window_ms / 1000
        while True:
            now = self._clock()
            while self._timestamps and now - self._timestamps[0] >= window_sec:
                self._timestamps.popleft()                          # 🧹 Виходять з вікна

            if len(self._timestamps) < self._config.max_requests:
                self._timestamps.append(now)
                return

            wait_sec = window_sec - (now - self._timestamps[0])
            logger.debug("⏳ [%s] вікно заповнене, чекаємо %.3fs", self._name, wait_sec)
            await self._sleep(max(wait_sec, 0.0))

    # ================================
    # 🔁 BACKOFF
    # ================================
    async def run_with_backoff(self, action: Callable[[], Awaitable[T]]) -> T:
        """
        Виконує `action` через слот; повторює retryable-помилки з подвоєнням паузи.

        Помилка пробивається назовні, якщо попередня пауза вже була максимальною
        (послідовність пауз 1s, 2s, 4s, …, max, далі — відмова), або якщо вона
        не повторювана (у цьому разі стан backoff не змінюється).
        """
        while True:
            await self.admit_slot()
            try:
                result = await action()
            except RetryableError as exc:
                if self._last_wait_ms >= self._config.max_backoff_ms:
                    logger.warning(
                        "🛑 [%s] backoff досяг максимуму (%dms), здаємось: %s",
                        self._name,
                        self._config.max_backoff_ms,
                        exc,
                        extra=exc.to_log_extra(),
                    )
                    raise
                delay_ms = self._backoff_ms
                logger.info("🚦 [%s] %s → backoff %dms", self._name, exc, delay_ms, extra=exc.to_log_extra())
                await self._sleep(delay_ms / 1000)
                self._last_wait_ms = delay_ms
                self._backoff_ms = min(self._backoff_ms * 2, self._config.max_backoff_ms)
                continue
            self._backoff_ms = self._config.initial_backoff_ms      # ✅ Успіх скидає backoff
            self._last_wait_ms = 0
            return result


__all__ = ["AdmissionConfig", "AdmissionController"]
