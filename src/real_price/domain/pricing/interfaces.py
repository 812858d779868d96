"""
🧩 interfaces.py — DTO цінового контексту сторінки.
"""

from __future__ import annotations

# 🔠 Системні імпорти
from dataclasses import dataclass
from typing import Tuple


# ================================
# 🏛️ СТРУКТУРИ ДАНИХ (DTO)
# ================================
@dataclass(frozen=True, slots=True)
class PriceCluster:
    """Один кошик гістограми цін."""
    center_price: float
    count: int
    variance: float                                                 # 📐 Стандартне відхилення (популяційне) всередині кошика


@dataclass(frozen=True, slots=True)
class PriceDistribution:
    """Мін/макс та 5-кошикова гістограма цін сторінки."""
    min: float
    max: float
    clusters: Tuple[PriceCluster, ...]


@dataclass(frozen=True, slots=True)
class PageContext:
    """Статистика цін сторінки; будується заново для кожного знімку, не зберігається."""
    median: float
    lower_bound: float
    upper_bound: float
    distribution: PriceDistribution

    def in_band(self, price: float) -> bool:
        return self.lower_bound <= price <= self.upper_bound


@dataclass(frozen=True, slots=True)
class PriceRange:
    """Діапазон повної ціни (товар + доставка) по всіх варіантах."""
    min: float
    max: float
