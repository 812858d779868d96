"""
🧭 Сервіси застосунку: резолвер даних товару та вхідний фасад.
"""

from __future__ import annotations

from .product_data_resolver import CACHE_KEY_PREFIX, ProductDataResolver, cache_key
from .real_price_service import DISABLE_PREF_KEY, PricedItem, RealPriceService

__all__ = [
    "CACHE_KEY_PREFIX",
    "DISABLE_PREF_KEY",
    "PricedItem",
    "ProductDataResolver",
    "RealPriceService",
    "cache_key",
]
