# 📦 real_price/domain/pricing/services.py
"""
📦 Чистий доменний сервіс цінового контексту сторінки.

🔹 Рахує медіану, допустиму смугу (±30%) та гістограму цін з усіх карток сторінки.
🔹 Оцінює варіанти товару: близькість до медіани × попадання у смугу × «основний товар».
🔹 Протидіє патерну «аксесуар як заголовкова ціна»: найдешевший варіант не виграє автоматично.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import logging
import math
from typing import Iterable, List, Optional, Sequence

# 🧩 Внутрішні модулі проєкту
from real_price.domain.products.entities import Variant
from real_price.shared.utils.logger import LOG_NAME
from real_price.shared.utils.money import extract_price_value

from .interfaces import PageContext, PriceCluster, PriceDistribution, PriceRange

logger = logging.getLogger(f"{LOG_NAME}.domain.pricing")


# ================================
# ⚙️ КОЕФІЦІЄНТИ ФОРМУЛИ
# ================================
BAND_RATIO = 0.3                                                    # 🎯 ±30% від медіани
BUCKETS = 5
IN_BAND_MULTIPLIER = 1.5
OUT_OF_BAND_MULTIPLIER = 0.5
MAIN_PRODUCT_MULTIPLIER = 1.3
ACCESSORY_MULTIPLIER = 0.7


class PriceContextEngine:
    """📊 Статистика цін сторінки та вибір «справжнього» варіанта товару."""

    # ================================
    # 📊 КОНТЕКСТ СТОРІНКИ
    # ================================
    def calculate_page_context(self, raw_price_texts: Iterable[str]) -> Optional[PageContext]:
        """
        Будує PageContext із сирих текстів цін, видимих на сторінці.

        Повертає None, якщо жодної ціни не вдалося витягти (→ «без переваг» для викликача).
        """
        prices: List[float] = []
        for text in raw_price_texts:
            price = extract_price_value(text)
            if price:                                               # 🚫 0 / сміття ігноруємо
                prices.append(price)

        if not prices:
            logger.debug("📊 Жодної ціни на сторінці — контекст відсутній")
            return None

        prices.sort()
        median = self.calculate_median(prices)
        threshold = median * BAND_RATIO
        context = PageContext(
            median=median,
            lower_bound=median - threshold,
            upper_bound=median + threshold,
            distribution=self.calculate_distribution(prices),
        )
        logger.debug(
            "📊 PageContext: n=%d median=%.2f band=[%.2f, %.2f]",
            len(prices),
            context.median,
            context.lower_bound,
            context.upper_bound,
        )
        return context

    @staticmethod
    def calculate_median(prices: Sequence[float]) -> float:
        """Стандартна медіана відсортованої послідовності."""
        if not prices:
            raise ValueError("calculate_median() потребує хоча б одну ціну")
        ordered = sorted(prices)
        mid = len(ordered) // 2
        if len(ordered) % 2 == 0:
            return (ordered[mid - 1] + ordered[mid]) / 2
        return ordered[mid]

    def calculate_distribution(self, prices: Sequence[float]) -> PriceDistribution:
        ordered = sorted(prices)
        return PriceDistribution(min=ordered[0], max=ordered[-1], clusters=tuple(self.find_price_clusters(ordered)))

    def find_price_clusters(self, prices: Sequence[float]) -> List[PriceCluster]:
        """
        Рівноширинна гістограма з 5 кошиків над [min, max].

        Кошик i покриває [min + i·step, min + (i+1)·step); останній закритий, тож max
        теж рахується. Порожні кошики пропускаються. Усі ціни однакові → один кошик.
        """
        ordered = sorted(prices)
        low, high = ordered[0], ordered[-1]
        step = (high - low) / BUCKETS
        if step == 0:
            return [PriceCluster(center_price=low, count=len(ordered), variance=0.0)]

        buckets: List[List[float]] = [[] for _ in range(BUCKETS)]
        for price in ordered:
            index = min(int((price - low) / step), BUCKETS - 1)
            buckets[index].append(price)

        clusters: List[PriceCluster] = []
        for index, bucket in enumerate(buckets):
            if not bucket:
                continue
            lower = low + step * index
            upper = low + step * (index + 1)
            clusters.append(
                PriceCluster(center_price=(lower + upper) / 2, count=len(bucket), variance=self.calculate_variance(bucket))
            )
        return clusters

    @staticmethod
    def calculate_variance(prices: Sequence[float]) -> float:
        # 📐 Історична назва: повертає популяційне стандартне відхилення
        mean = sum(prices) / len(prices)
        return math.sqrt(sum((price - mean) ** 2 for price in prices) / len(prices))

    # ================================
    # 🎯 ВИБІР ВАРІАНТА
    # ================================
    def calculate_variant_score(self, variant: Variant, context: PageContext) -> float:
        """`1/(|d − median| + 1) × (1.5 | 0.5) × (1.3 | 0.7)`."""
        price = variant.price.discounted_value
        distance_score = 1 / (abs(price - context.median) + 1)
        band = IN_BAND_MULTIPLIER if context.in_band(price) else OUT_OF_BAND_MULTIPLIER
        product_type = MAIN_PRODUCT_MULTIPLIER if variant.is_main_product else ACCESSORY_MULTIPLIER
        return distance_score * band * product_type

    def find_best_matching_variant(
        self,
        variants: Sequence[Variant],
        context: Optional[PageContext],
    ) -> Optional[Variant]:
        """
        Обирає варіант із максимальним балом; нічия → перший за вхідним порядком.

        Без контексту (або без варіантів) повертає перший варіант як є.
        """
        if context is None or not variants:
            return variants[0] if variants else None

        best = variants[0]
        best_score = self.calculate_variant_score(best, context)
        for variant in variants[1:]:
            score = self.calculate_variant_score(variant, context)
            if score > best_score:                                  # ⚖️ Строго більше → стабільна нічия
                best, best_score = variant, score
        logger.debug("🎯 Найкращий варіант %s (%s) score=%.5f", best.id, best.name, best_score)
        return best

    # ================================
    # 📏 ДІАПАЗОНИ
    # ================================
    def get_price_range(self, variants: Sequence[Variant]) -> PriceRange:
        """Мін/макс повної ціни (зі знижкою + доставка) по всіх варіантах."""
        if not variants:
            logger.debug("📏 get_price_range: варіантів немає")
            return PriceRange(min=0.0, max=0.0)
        totals = [variant.total_price for variant in variants]
        return PriceRange(min=min(totals), max=max(totals))

    def get_free_shipping_threshold(self, variants: Sequence[Variant]) -> Optional[float]:
        """Найменший відомий поріг безкоштовної доставки або None."""
        thresholds = [
            variant.shipping.free_shipping_threshold
            for variant in variants
            if variant.shipping.free_shipping_threshold is not None
        ]
        return min(thresholds) if thresholds else None


__all__ = ["PriceContextEngine", "BAND_RATIO"]
