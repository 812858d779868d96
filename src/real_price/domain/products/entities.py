# 📦 real_price/domain/products/entities.py
"""
📦 Канонічні іммʼютабельні сутності товару: Product → Variant → PriceInfo/ShippingInfo.

🔹 Усі сутності — frozen dataclass; варіанти зберігаються кортежем.
🔹 Product завжди має ≥1 варіант (порожній список → синтетичний `Default`).
🔹 `ProductSource` фіксує, з якого рівня отримано дані (трасування/тести).
"""

from __future__ import annotations

# 🔠 Системні імпорти
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Optional, Tuple

# 🧩 Внутрішні модулі проєкту
from real_price.shared.utils.logger import LOG_NAME
from real_price.shared.utils.money import format_price

logger = logging.getLogger(f"{LOG_NAME}.domain.products")

DEFAULT_VARIANT_ID = "default"
DEFAULT_VARIANT_NAME = "Default"
DEFAULT_STOCK = 999                                                 # 📦 Невідомий залишок


# ================================
# 🏷️ ДЖЕРЕЛО ДАНИХ
# ================================
class ProductSource(str, Enum):
    """Рівень конвеєра, що породив Product."""

    FROM_STRUCTURED_API = "structured_api"
    FROM_PAGE_EMBEDDING = "page_embedding"
    FROM_BASIC_SNIPPET = "basic_snippet"
    SYNTHETIC_DEFAULT = "synthetic_default"


# ================================
# 💰 ЦІНА
# ================================
@dataclass(frozen=True, slots=True)
class PriceInfo:
    """
    Ціна варіанта.

    `discounted_value <= value` зазвичай, але не гарантується (дані з апстріму бувають биті).
    """

    value: float
    discounted_value: float
    formatted_price: str = ""
    discounted_formatted_price: str = ""
    discount_label: str = ""

    @classmethod
    def of(cls, value: float, discounted_value: Optional[float] = None, discount_label: str = "") -> "PriceInfo":
        """Будує PriceInfo з форматованими рядками за замовчуванням."""
        discounted = value if discounted_value is None else discounted_value
        return cls(
            value=value,
            discounted_value=discounted,
            formatted_price=format_price(value),
            discounted_formatted_price=format_price(discounted),
            discount_label=discount_label or "",
        )


# ================================
# 🚚 ДОСТАВКА
# ================================
@dataclass(frozen=True, slots=True)
class ShippingInfo:
    """Умови доставки; поріг безкоштовної доставки та прапорець опції — незалежні сигнали."""

    cost: float = 0.0
    formatted_price: str = "$0.00"
    free_shipping_threshold: Optional[float] = None
    has_free_shipping_option: bool = False
    guaranteed_delivery_days: Optional[str] = None
    free_shipping_text: Optional[str] = None


# ================================
# 🎨 ВАРІАНТ
# ================================
@dataclass(frozen=True, slots=True)
class Variant:
    """Одна конфігурація товару (колір/розмір/комплект) зі своєю ціною та доставкою."""

    id: str
    name: str
    price: PriceInfo
    shipping: ShippingInfo = field(default_factory=ShippingInfo)
    stock: int = DEFAULT_STOCK
    is_main_product: bool = True

    @property
    def total_price(self) -> float:
        """Ціна зі знижкою + доставка."""
        return self.price.discounted_value + self.shipping.cost


def default_variant(
    price: float = 0.0,
    *,
    discounted_price: Optional[float] = None,
    discount_label: str = "",
    shipping: Optional[ShippingInfo] = None,
) -> Variant:
    """🧪 Синтетичний варіант `Default` (використовується, коли список SKU відсутній)."""
    return Variant(
        id=DEFAULT_VARIANT_ID,
        name=DEFAULT_VARIANT_NAME,
        price=PriceInfo.of(price, discounted_price, discount_label),
        shipping=shipping or ShippingInfo(),
        stock=DEFAULT_STOCK,
        is_main_product=True,
    )


# ================================
# 📦 ТОВАР
# ================================
@dataclass(frozen=True, slots=True)
class Product:
    """Канонічний запис цін/метаданих одного лістингу."""

    product_id: str
    title: str
    variants: Tuple[Variant, ...]
    source: ProductSource = ProductSource.FROM_STRUCTURED_API

    def __post_init__(self) -> None:
        variants = tuple(self.variants or ())
        if not variants:                                            # 🛟 Інваріант: ≥1 варіант
            logger.debug("🧪 Product %s без варіантів → Default", self.product_id)
            variants = (default_variant(),)
        object.__setattr__(self, "variants", variants)
        object.__setattr__(self, "title", (self.title or "").strip())

    @classmethod
    def build(
        cls,
        product_id: str,
        title: str,
        variants: Iterable[Variant],
        source: ProductSource,
    ) -> "Product":
        return cls(product_id=str(product_id), title=title or "", variants=tuple(variants), source=source)

    @property
    def is_default_only(self) -> bool:
        """True, якщо єдиний варіант — синтетичний `default`."""
        return len(self.variants) == 1 and self.variants[0].id == DEFAULT_VARIANT_ID

    @property
    def lacks_variants(self) -> bool:
        """True, якщо парсер не знайшов ні SKU, ні жодної ціни (лише нульовий `default`)."""
        return self.is_default_only and self.variants[0].price.value == 0 and self.variants[0].price.discounted_value == 0

    def merged_with(self, fallback: Optional["Product"]) -> "Product":
        """
        Повертає нову копію, у якій відсутні поля підставлено з `fallback`.

        Назва береться з fallback, якщо власна порожня; варіанти — якщо власні
        лише синтетичні (парсер не знайшов жодного SKU).
        """
        if fallback is None:
            return self
        title = self.title or fallback.title
        variants = fallback.variants if self.lacks_variants else self.variants
        if title == self.title and variants is self.variants:
            return self
        return replace(self, title=title, variants=variants)


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
]
