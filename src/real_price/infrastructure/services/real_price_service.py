# 💲 real_price/infrastructure/services/real_price_service.py
"""
💲 RealPriceService — вхідний фасад конвеєра реальних цін.

🎯 Призначення:
    • `resolve()` — Product для одного товару (кеш + багаторівневий fallback);
    • `price_items()` — пакетна обробка: кожен товар незалежний, збій одного не чіпає інших;
    • адміністрування кешу (`clear_cache`, `set_cache_disabled`) і статистика сторінки.

⚙️ Нотатки:
    • вподобання «кеш вимкнено» зберігається у сховищі під `aliexpress_disable_cache`
      і відновлюється в `initialize()`;
    • фасад не володіє обʼєктами — граф будує `Container`.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

# 🧩 Внутрішні модулі проєкту
from real_price.domain.pricing import PageContext, PriceContextEngine, PriceRange
from real_price.domain.products.entities import Product, Variant
from real_price.domain.products.interfaces import BasicSnippet, IKeyValueStorage
from real_price.errors import AppError, convert_exception
from real_price.infrastructure.cache import PersistentCache
from real_price.shared.utils.logger import LOG_NAME

from .product_data_resolver import ProductDataResolver

logger = logging.getLogger(f"{LOG_NAME}.service")

DISABLE_PREF_KEY = "aliexpress_disable_cache"

BatchItem = Union[str, Tuple[str, Optional[BasicSnippet]]]


@dataclass(frozen=True, slots=True)
class PricedItem:
    """Результат для одного товару в пакеті: або дані, або помилка."""

    product_id: str
    product: Optional[Product] = None
    best_variant: Optional[Variant] = None
    price_range: Optional[PriceRange] = None
    free_shipping_threshold: Optional[float] = None
    error: Optional[AppError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.product is not None


class RealPriceService:
    """💲 Фасад: резолвер + кеш + PriceContextEngine."""

    def __init__(
        self,
        resolver: ProductDataResolver,
        cache: PersistentCache,
        *,
        engine: Optional[PriceContextEngine] = None,
        preferences: Optional[IKeyValueStorage] = None,
        closers: Sequence[object] = (),
    ) -> None:
        self._resolver = resolver
        self._cache = cache
        self._engine = engine or PriceContextEngine()
        self._preferences = preferences
        self._closers = tuple(closers)
        self._initialized = False

    # ================================
    # 🔄 ЖИТТЄВИЙ ЦИКЛ
    # ================================
    async def initialize(self) -> None:
        """Відновлює вподобання «кеш вимкнено» та завантажує знімок кешу."""
        if self._initialized:
            return
        stored = await self._load_disabled_pref()
        if stored is not None:
            self._cache.set_disabled(stored)
        await self._cache.initialize()
        self._initialized = True
        logger.info("🚀 RealPriceService готовий (cache_disabled=%s, entries=%d)", self._cache.is_disabled, len(self._cache))

    async def close(self) -> None:
        for resource in self._closers:
            closer = getattr(resource, "close", None)
            if closer is None:
                continue
            try:
                await closer()
            except Exception:                                       # noqa: BLE001
                logger.exception("❌ Помилка закриття %s", type(resource).__name__)
        self._initialized = False

    # ================================
    # 🔎 ТОВАРИ
    # ================================
    async def resolve(self, product_id: str, basic_snippet: Optional[BasicSnippet] = None) -> Product:
        return await self._resolver.resolve(product_id, basic_snippet)

    async def price_items(
        self,
        batch: Iterable[BatchItem],
        page_price_texts: Iterable[str] = (),
    ) -> List[PricedItem]:
        """
        Обробляє пакет конкурентно (одна задача на товар) і повертає результати в порядку входу.

        Контекст сторінки рахується один раз із `page_price_texts` і використовується
        для вибору найкращого варіанта кожного товару.
        """
        items = [_normalize_item(item) for item in batch]
        context = self._engine.calculate_page_context(page_price_texts)
        results = await asyncio.gather(
            *(self._resolver.resolve(product_id, snippet) for product_id, snippet in items),
            return_exceptions=True,
        )

        priced: List[PricedItem] = []
        for (product_id, _), outcome in zip(items, results):
            if isinstance(outcome, Product):
                variants = list(outcome.variants)
                priced.append(
                    PricedItem(
                        product_id=product_id,
                        product=outcome,
                        best_variant=self._engine.find_best_matching_variant(variants, context),
                        price_range=self._engine.get_price_range(variants),
                        free_shipping_threshold=self._engine.get_free_shipping_threshold(variants),
                    )
                )
                continue
            if not isinstance(outcome, Exception):                  # 🛑 CancelledError / KeyboardInterrupt
                raise outcome
            error = convert_exception(outcome, product_id=product_id)
            logger.warning("⚠️ %s: %s", product_id, error, extra=error.to_log_extra())
            priced.append(PricedItem(product_id=product_id, error=error))

        logger.info("📦 Пакет оброблено: %d/%d успішно", sum(1 for p in priced if p.ok), len(priced))
        return priced

    # ================================
    # 💾 КЕШ
    # ================================
    async def clear_cache(self) -> None:
        await self._cache.clear()

    async def set_cache_disabled(self, disabled: bool, *, clear: bool = False) -> None:
        """Перемикає кеш і зберігає вподобання; `clear=True` одразу очищає знімок."""
        self._cache.set_disabled(disabled)
        await self._save_disabled_pref(disabled)
        if disabled and clear:
            await self._cache.clear()

    @property
    def cache_disabled(self) -> bool:
        return self._cache.is_disabled

    async def _load_disabled_pref(self) -> Optional[bool]:
        if self._preferences is None:
            return None
        try:
            raw = await self._preferences.load(DISABLE_PREF_KEY)
        except Exception:                                           # noqa: BLE001
            logger.exception("❌ Не вдалося прочитати %s", DISABLE_PREF_KEY)
            return None
        if raw is None:
            return None
        try:
            return bool(json.loads(raw))
        except json.JSONDecodeError:
            logger.warning("⚠️ Некоректне значення %s: %r", DISABLE_PREF_KEY, raw)
            return None

    async def _save_disabled_pref(self, disabled: bool) -> None:
        if self._preferences is None:
            return
        try:
            await self._preferences.save(DISABLE_PREF_KEY, json.dumps(bool(disabled)))
        except Exception:                                           # noqa: BLE001
            logger.exception("❌ Не вдалося зберегти %s", DISABLE_PREF_KEY)

    # ================================
    # 📊 КОНТЕКСТ СТОРІНКИ
    # ================================
    def calculate_page_context(self, raw_price_texts: Iterable[str]) -> Optional[PageContext]:
        return self._engine.calculate_page_context(raw_price_texts)

    def find_best_matching_variant(self, variants: Sequence[Variant], context: Optional[PageContext]) -> Optional[Variant]:
        return self._engine.find_best_matching_variant(variants, context)

    def get_price_range(self, variants: Sequence[Variant]) -> PriceRange:
        return self._engine.get_price_range(variants)

    def get_free_shipping_threshold(self, variants: Sequence[Variant]) -> Optional[float]:
        return self._engine.get_free_shipping_threshold(variants)


def _normalize_item(item: BatchItem) -> Tuple[str, Optional[BasicSnippet]]:
    if isinstance(item, tuple):
        product_id, snippet = item
        return str(product_id), snippet
    return str(item), None


__all__ = ["DISABLE_PREF_KEY", "PricedItem", "RealPriceService"]
