# 🧱 real_price/config/setup/container.py
"""
🧱 Container — збирає граф обʼєктів конвеєра один раз.

🔹 Один екземпляр PersistentCache передається за посиланням і резолверу, і фасаду.
🔹 Два незалежні AdmissionController: `api` (структуроване API) та `page` (сторінка товару).
🔹 Колаборатори (сховище, шлюз, годинник/сон) можна підмінити для тестів.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

# 🧩 Внутрішні модулі проєкту
from real_price.config.config_service import ConfigService
from real_price.domain.pricing import PriceContextEngine
from real_price.domain.products.interfaces import IKeyValueStorage, IMarketplaceGateway
from real_price.infrastructure.cache import DEFAULT_CACHE_CONFIG, STORAGE_KEY, CacheConfig, PersistentCache
from real_price.infrastructure.data_storage import JsonFileStorage
from real_price.infrastructure.marketplace import MarketplaceGateway, MarketplaceSettings
from real_price.infrastructure.rate_limiting import AdmissionConfig, AdmissionController
from real_price.infrastructure.services import ProductDataResolver, RealPriceService
from real_price.shared.utils.logger import LOG_NAME, init_logging_from_config

logger = logging.getLogger(f"{LOG_NAME}.container")

DEFAULT_API_ADMISSION = AdmissionConfig(max_requests=2, window_ms=1000, initial_backoff_ms=1000, max_backoff_ms=32000)
DEFAULT_PAGE_ADMISSION = AdmissionConfig(max_requests=1, window_ms=2000, initial_backoff_ms=1000, max_backoff_ms=32000)
DEFAULT_STORAGE_FILE = "data/real_price_storage.json"


def bootstrap_logging(config: ConfigService) -> logging.Logger:
    """
    Зчитує вузол `logging` і запускає логер `real_price`.
    """
    node = config.get("logging", {}) or {}
    return init_logging_from_config(node)


def cache_configs_from(config: ConfigService) -> Dict[str, CacheConfig]:
    """Категорії кешу з YAML поверх дефолтів (`variants` / `shipping` / `context`)."""
    configs = dict(DEFAULT_CACHE_CONFIG)
    categories = config.get("cache.categories", {}) or {}
    for name, node in categories.items():
        configs[str(name)] = CacheConfig.from_mapping(node)
    return configs


# ================================
# 🏛️ КОНТЕЙНЕР ЗАЛЕЖНОСТЕЙ
# ================================
class Container:
    """
    Координує створення сховища, кешу, контролерів, шлюзу, резолвера та фасаду.
    """

    def __init__(
        self,
        config: Optional[ConfigService] = None,
        *,
        storage: Optional[IKeyValueStorage] = None,
        gateway: Optional[IMarketplaceGateway] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.config = config or ConfigService()
        logger.info("🚀 Стартуємо побудову контейнера залежностей")
        self._setup_storage(storage)
        self._setup_cache()
        self._setup_admission(clock, sleep)
        self._setup_gateway(gateway)
        self._setup_services()
        logger.info("✅ Контейнер ініціалізовано успішно")

    # ================================
    # 💽 СХОВИЩЕ ТА КЕШ
    # ================================
    def _setup_storage(self, storage: Optional[IKeyValueStorage]) -> None:
        if storage is not None:
            self.storage = storage
            return
        file_path = str(self.config.get("storage.file") or DEFAULT_STORAGE_FILE)
        self.storage = JsonFileStorage(file_path)
        logger.debug("💽 Сховище: %s", file_path)

    def _setup_cache(self) -> None:
        self.cache_configs = cache_configs_from(self.config)
        self.cache = PersistentCache(
            self.storage,
            storage_key=str(self.config.get("cache.storage_key") or STORAGE_KEY),
            disabled=self.config.get_bool("cache.disabled", False),
            default_config=self.cache_configs["variants"],
        )

    # ================================
    # 🚦 КОНТРОЛЕРИ ДОПУСКУ
    # ================================
    def _setup_admission(self, clock: Callable[[], float], sleep: Callable[[float], Awaitable[Any]]) -> None:
        api_config = AdmissionConfig.from_mapping(self.config.get("admission.api"), DEFAULT_API_ADMISSION)
        page_config = AdmissionConfig.from_mapping(self.config.get("admission.page"), DEFAULT_PAGE_ADMISSION)
        self.api_controller = AdmissionController(api_config, name="api", clock=clock, sleep=sleep)
        self.page_controller = AdmissionController(page_config, name="page", clock=clock, sleep=sleep)
        logger.debug("🚦 Admission api=%s page=%s", api_config, page_config)

    # ================================
    # 🌐 ШЛЮЗ
    # ================================
    def _setup_gateway(self, gateway: Optional[IMarketplaceGateway]) -> None:
        self.marketplace_settings = MarketplaceSettings.from_mapping(self.config.get("marketplace"))
        self.gateway = gateway if gateway is not None else MarketplaceGateway(self.marketplace_settings)

    # ================================
    # 🧭 СЕРВІСИ
    # ================================
    def _setup_services(self) -> None:
        self.price_engine = PriceContextEngine()
        self.resolver = ProductDataResolver(
            self.gateway,
            self.cache,
            api_controller=self.api_controller,
            page_controller=self.page_controller,
            cache_config=self.cache_configs["variants"],
        )
        self.real_price_service = RealPriceService(
            self.resolver,
            self.cache,
            engine=self.price_engine,
            preferences=self.storage,
            closers=(self.gateway,),
        )


__all__ = ["Container", "bootstrap_logging", "cache_configs_from"]
