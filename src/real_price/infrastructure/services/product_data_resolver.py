# 🧭 real_price/infrastructure/services/product_data_resolver.py
"""
🧭 ProductDataResolver — багаторівневе отримання Product для одного товару.

Порядок:
    1) кеш `product_<id>`;
    2) базовий Product зі сніпета (якщо передано);
    3) структуроване API через API-контролер (backoff для лімітів/перевірок);
    4) вбудований JSON сторінки через page-контролер;
    5) базовий Product;
    6) помилка основного рівня.
Отриманий Product кешується з конфігом категорії `variants`.

`NotFound` з API-рівня термінальний: сторінку не пробуємо. `NotFound` сторінки
поступається базовому Product, якщо сніпет передано.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import asyncio
import logging
from typing import Any, Mapping, Optional

# 🧩 Внутрішні модулі проєкту
from real_price.domain.products.entities import Product, ProductSource
from real_price.domain.products.interfaces import BasicSnippet, IMarketplaceGateway, IProductCache
from real_price.errors import AppError, MalformedResponse, NotFound, convert_exception
from real_price.infrastructure.cache import CacheConfig
from real_price.infrastructure.parsers import BasicSnippetParser, PageEmbeddingExtractor, ProductParser
from real_price.infrastructure.rate_limiting import AdmissionController
from real_price.shared.utils.logger import LOG_NAME

logger = logging.getLogger(f"{LOG_NAME}.resolver")

CACHE_KEY_PREFIX = "product_"


def cache_key(product_id: str) -> str:
    return f"{CACHE_KEY_PREFIX}{product_id}"


class ProductDataResolver:
    """🧭 Кеш → сніпет → API → сторінка → сніпет → помилка."""

    def __init__(
        self,
        gateway: IMarketplaceGateway,
        cache: IProductCache,
        *,
        api_controller: AdmissionController,
        page_controller: AdmissionController,
        cache_config: Optional[CacheConfig] = None,
        parser: Optional[ProductParser] = None,
        page_extractor: Optional[PageEmbeddingExtractor] = None,
        snippet_parser: Optional[BasicSnippetParser] = None,
    ) -> None:
        self._gateway = gateway
        self._cache = cache
        self._api = api_controller
        self._page = page_controller
        self._cache_config = cache_config or CacheConfig()
        self._parser = parser or ProductParser()
        self._extractor = page_extractor or PageEmbeddingExtractor()
        self._snippets = snippet_parser or BasicSnippetParser()
        self._session_ready = False
        self._session_lock = asyncio.Lock()

    # ================================
    # 🚪 ВХІД
    # ================================
    async def resolve(self, product_id: str, basic_snippet: Optional[BasicSnippet] = None) -> Product:
        product_id = str(product_id)
        key = cache_key(product_id)
        log_extra = {"product_id": product_id}

        cached = await self._cache.get(key)
        if cached is not None:
            logger.debug("💾 Кеш-хіт %s", key, extra=log_extra)
            return cached

        basic = self._snippets.parse(product_id, basic_snippet) if basic_snippet is not None else None

        product: Optional[Product] = None
        primary_error: Optional[AppError] = None
        try:
            product = await self._from_api(product_id)
        except NotFound:
            logger.info("🛑 Товар %s не існує", product_id, extra=log_extra)
            raise
        except AppError as exc:
            primary_error = exc
            logger.warning("⚠️ API-рівень не спрацював для %s: %s", product_id, exc, extra={**log_extra, **exc.to_log_extra()})

        if product is None:
            try:
                product = await self._from_page(product_id)
            except NotFound as exc:
                logger.info("🛑 Сторінка товару %s не існує", product_id, extra=log_extra)
                if basic is None:
                    raise
                primary_error = primary_error or exc
            except AppError as exc:
                logger.warning("⚠️ Fallback сторінки не спрацював для %s: %s", product_id, exc, extra={**log_extra, **exc.to_log_extra()})

        if product is not None:
            product = product.merged_with(basic)
        elif basic is not None:
            logger.info("🏷️ Використовуємо базові дані сніпета для %s", product_id, extra=log_extra)
            product = basic
        else:
            logger.error("❌ Усі рівні вичерпано для %s", product_id, extra=log_extra)
            raise primary_error or MalformedResponse("No data source produced a product", product_id=product_id)

        await self._cache.set(key, product, self._cache_config)
        logger.info("✅ %s отримано (%s, %d варіант(ів))", product_id, product.source.value, len(product.variants), extra=log_extra)
        return product

    # ================================
    # 📡 РІВЕНЬ 1: СТРУКТУРОВАНЕ API
    # ================================
    async def _ensure_session_once(self) -> None:
        if self._session_ready:
            return
        async with self._session_lock:
            if self._session_ready:
                return
            try:
                await self._gateway.ensure_session()
            except AppError as exc:
                logger.warning("⚠️ Ініціалізація сесії не вдалася: %s", exc, extra=exc.to_log_extra())
            self._session_ready = True

    async def _from_api(self, product_id: str) -> Product:
        await self._ensure_session_once()

        async def attempt() -> Product:
            try:
                envelope = await self._gateway.fetch_product_api(product_id)
            except AppError:
                raise
            except Exception as exc:                                # noqa: BLE001
                raise convert_exception(exc, product_id=product_id) from exc
            return self._parse(envelope, product_id, ProductSource.FROM_STRUCTURED_API)

        return await self._api.run_with_backoff(attempt)

    # ================================
    # 📄 РІВЕНЬ 2: СТОРІНКА ТОВАРУ
    # ================================
    async def _from_page(self, product_id: str) -> Product:
        async def attempt() -> Product:
            try:
                html = await self._gateway.fetch_item_page(product_id)
            except AppError:
                raise
            except Exception as exc:                                # noqa: BLE001
                raise convert_exception(exc, product_id=product_id) from exc
            embedding = self._extractor.extract(html)
            if embedding is None:
                raise MalformedResponse("No embedded product data on item page", product_id=product_id)
            return self._parse(embedding.data, product_id, ProductSource.FROM_PAGE_EMBEDDING, embedding.title)

        return await self._page.run_with_backoff(attempt)

    def _parse(self, payload: Any, product_id: str, source: ProductSource, fallback_title: str = "") -> Product:
        """Несподівана форма даних → MalformedResponse (рівень переходить на fallback)."""
        if not isinstance(payload, Mapping):
            raise MalformedResponse("Product payload must be an object", product_id=product_id)
        try:
            return self._parser.parse(payload, product_id=product_id, source=source, fallback_title=fallback_title)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise MalformedResponse("Unparseable product payload", details=str(exc), product_id=product_id) from exc


__all__ = ["CACHE_KEY_PREFIX", "ProductDataResolver", "cache_key"]
