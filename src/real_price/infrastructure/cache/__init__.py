"""
💾 Довговічний кеш Product.
"""

from __future__ import annotations

from .persistent_cache import CacheConfig, CacheEntry, DEFAULT_CACHE_CONFIG, PersistentCache, STORAGE_KEY
from .serialization import product_from_dict, product_to_dict

__all__ = [
    "CacheConfig",
    "CacheEntry",
    "DEFAULT_CACHE_CONFIG",
    "PersistentCache",
    "STORAGE_KEY",
    "product_from_dict",
    "product_to_dict",
]
