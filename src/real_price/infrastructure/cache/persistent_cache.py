# 💾 real_price/infrastructure/cache/persistent_cache.py
"""
💾 PersistentCache — TTL + ліміт записів, знімок у довговічному сховищі, глобальний перемикач.

🔹 Витіснення строго FIFO за порядком вставки (читання НЕ просуває запис, це не LRU).
🔹 Кожна мутація одразу зберігає повний знімок (без батчингу).
🔹 Вимкнення кешу не чіпає збережені дані — лише блокує майбутні `get`/`set`.
🔹 `clear()` дозволено завжди, навіть коли кеш вимкнено.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

# 🧩 Внутрішні модулі проєкту
from real_price.domain.products.entities import Product
from real_price.domain.products.interfaces import IKeyValueStorage
from real_price.shared.utils.logger import LOG_NAME

from .serialization import product_from_dict, product_to_dict

logger = logging.getLogger(f"{LOG_NAME}.cache")

STORAGE_KEY = "aliexpress_cache"
DAY_MS = 86_400_000


# ================================
# ⚙️ КОНФІГ КАТЕГОРІЙ
# ================================
@dataclass(frozen=True, slots=True)
class CacheConfig:
    """Параметри однієї логічної категорії кешу."""

    duration_ms: int = DAY_MS
    max_entries: int = 10_000

    @property
    def is_usable(self) -> bool:
        return self.duration_ms > 0 and self.max_entries > 0

    @classmethod
    def from_mapping(cls, node: Optional[Mapping[str, Any]]) -> "CacheConfig":
        node = node or {}
        return cls(
            duration_ms=int(node.get("duration_ms", DAY_MS)),
            max_entries=int(node.get("max_entries", 10_000)),
        )


DEFAULT_CACHE_CONFIG: Dict[str, CacheConfig] = {
    "variants": CacheConfig(),                                      # ⏳ 24 години
    "shipping": CacheConfig(),
    "context": CacheConfig(),
}


@dataclass(frozen=True, slots=True)
class CacheEntry:
    key: str
    data: Product
    timestamp: int                                                  # 🕒 Epoch ms
    expires_at: int

    def is_expired(self, now_ms: int) -> bool:
        return now_ms > self.expires_at


def _epoch_ms() -> int:
    return int(time.time() * 1000)


# ================================
# 💾 КЕШ
# ================================
class PersistentCache:
    """💾 Обмежений кеш Product зі знімком у `IKeyValueStorage`."""

    def __init__(
        self,
        storage: IKeyValueStorage,
        *,
        storage_key: str = STORAGE_KEY,
        disabled: bool = False,
        default_config: Optional[CacheConfig] = None,
        clock: Callable[[], int] = _epoch_ms,
    ) -> None:
        self._storage = storage
        self._storage_key = storage_key
        self._disabled = bool(disabled)
        self._default_config = default_config or DEFAULT_CACHE_CONFIG["variants"]
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}                  # 🗂️ dict зберігає порядок вставки
        self._stats: Dict[str, int] = {"hits": 0, "misses": 0, "evictions": 0, "expirations": 0}
        logger.debug("⚙️ PersistentCache init (key=%s, disabled=%s)", storage_key, self._disabled)

    # ================================
    # 🎚️ ПЕРЕМИКАЧ
    # ================================
    @property
    def is_disabled(self) -> bool:
        return self._disabled

    def set_disabled(self, disabled: bool) -> None:
        """Вмикає/вимикає кеш; памʼять і збережений знімок не змінюються."""
        self._disabled = bool(disabled)
        logger.info("🎚️ Кеш %s", "вимкнено" if self._disabled else "увімкнено")

    # ================================
    # 📥 ЗАВАНТАЖЕННЯ
    # ================================
    async def initialize(self) -> None:
        """Завантажує знімок; прострочені записи відкидаються одразу."""
        if self._disabled:
            logger.info("🎚️ Кеш вимкнено — пропускаємо завантаження знімку.")
            self._entries.clear()
            return

        try:
            raw = await self._storage.load(self._storage_key)
        except Exception:                                           # noqa: BLE001
            logger.exception("❌ Не вдалося прочитати знімок кешу")
            return
        if not raw:
            logger.info("📭 Знімок кешу відсутній")
            return

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("⚠️ Пошкоджений знімок кешу: %s", exc)
            return
        if not isinstance(parsed, dict):
            logger.warning("⚠️ Знімок кешу має бути обʼєктом, отримано %s", type(parsed).__name__)
            return

        now = self._clock()
        self._entries.clear()
        dropped = 0
        for key, item in parsed.items():
            try:
                expires_at = int(item["expiresAt"])
                if now > expires_at:
                    dropped += 1
                    continue
                self._entries[key] = CacheEntry(
                    key=key,
                    data=product_from_dict(item["data"]),
                    timestamp=int(item.get("timestamp", now)),
                    expires_at=expires_at,
                )
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                dropped += 1
                logger.debug("🧹 Пропущено битий запис %s: %s", key, exc)
        logger.info("📖 Кеш завантажено: %d запис(ів), відкинуто %d", len(self._entries), dropped)

    # ================================
    # 🔑 ДОСТУП
    # ================================
    async def get(self, key: str) -> Optional[Product]:
        """Повертає кешований Product або None (прострочений запис видаляється і знімок зберігається)."""
        if self._disabled:
            return None
        entry = self._entries.get(key)
        if entry is None:
            self._stats["misses"] += 1
            return None

        if entry.is_expired(self._clock()):
            del self._entries[key]
            self._stats["expirations"] += 1
            self._stats["misses"] += 1
            logger.debug("⌛ Запис кешу прострочено та видалено: %s", key)
            await self._persist()
            return None

        self._stats["hits"] += 1
        return entry.data

    async def set(self, key: str, data: Product, config: Optional[CacheConfig] = None) -> None:
        """Вставляє/перезаписує запис; на межі ємності витісняє найстаріший вставлений."""
        if self._disabled:
            return

        if config is None or not config.is_usable:
            if config is not None:
                logger.debug("⚙️ Некоректний CacheConfig для %s — використовуємо дефолт", key)
            config = self._default_config

        exists = key in self._entries
        if not exists and len(self._entries) >= config.max_entries:
            oldest_key = next(iter(self._entries), None)
            if oldest_key is not None:
                del self._entries[oldest_key]
                self._stats["evictions"] += 1
                logger.debug("🚪 Ліміт %d — витіснено найстаріший %s", config.max_entries, oldest_key)

        now = self._clock()
        self._entries[key] = CacheEntry(key=key, data=data, timestamp=now, expires_at=now + config.duration_ms)
        logger.debug("💾 set %s (existed=%s, size=%d)", key, exists, len(self._entries))
        await self._persist()

    async def clear(self) -> None:
        """Очищає памʼять і зберігає порожній знімок незалежно від перемикача."""
        self._entries.clear()
        logger.info("🧼 Кеш очищено")
        await self._persist(force=True)

    # ================================
    # 📈 ДІАГНОСТИКА
    # ================================
    def stats(self) -> Dict[str, int]:
        return {"size": len(self._entries), **self._stats}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    # ================================
    # 💽 ЗБЕРЕЖЕННЯ
    # ================================
    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        return {
            key: {"data": product_to_dict(entry.data), "timestamp": entry.timestamp, "expiresAt": entry.expires_at}
            for key, entry in self._entries.items()
        }

    async def _persist(self, *, force: bool = False) -> None:
        if self._disabled and not force:
            logger.debug("🎚️ Збереження пропущено: кеш вимкнено")
            return
        payload = json.dumps(self.snapshot(), ensure_ascii=False)
        try:
            await self._storage.save(self._storage_key, payload)
        except Exception:                                           # noqa: BLE001
            logger.exception("❌ Не вдалося зберегти знімок кешу (%d записів)", len(self._entries))


__all__ = ["CacheConfig", "CacheEntry", "DEFAULT_CACHE_CONFIG", "PersistentCache", "STORAGE_KEY"]
