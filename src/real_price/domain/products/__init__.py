# 📦 real_price/domain/products/__init__.py
"""
📦 Доменні сутності товарів та контракти колабораторів.
"""

from __future__ import annotations

from .entities import (
    DEFAULT_STOCK,
    DEFAULT_VARIANT_ID,
    DEFAULT_VARIANT_NAME,
    PriceInfo,
    Product,
    ProductSource,
    ShippingInfo,
    Variant,
    default_variant,
)
from .interfaces import BasicSnippet, IKeyValueStorage, IMarketplaceGateway, IProductCache

__all__ = [
    "DEFAULT_STOCK",
    "DEFAULT_VARIANT_ID",
    "DEFAULT_VARIANT_NAME",
    "PriceInfo",
    "Product",
    "ProductSource",
    "ShippingInfo",
    "Variant",
    "default_variant",
    "BasicSnippet",
    "IKeyValueStorage",
    "IMarketplaceGateway",
    "IProductCache",
]
