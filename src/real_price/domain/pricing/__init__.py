# 📊 real_price/domain/pricing/__init__.py
"""
📊 Ціновий контекст сторінки та вибір представницького варіанта.
"""

from __future__ import annotations

from .interfaces import PageContext, PriceCluster, PriceDistribution, PriceRange
from .services import PriceContextEngine

__all__ = ["PageContext", "PriceCluster", "PriceDistribution", "PriceRange", "PriceContextEngine"]
