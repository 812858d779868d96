# 🧾 real_price/infrastructure/parsers/product_parser.py
"""
🧾 ProductParser — різнорідні відповіді маркетплейсу → канонічний Product.

🔹 Підтримує дві форми: сучасну (`SKU` / `PRICE` / `SHIPPING`) та легасі (`skuModule` / `priceModule` / `shippingModule`).
🔹 Кожне грошове поле шукається впорядкованим списком шляхів; перший придатний виграє.
🔹 Назва SKU: `propertyId:value#label` → label; інакше id властивостей через словник; інакше `Default`.
🔹 Варіанти-аксесуари (чохол, кабель, зарядка, …) позначаються `is_main_product=False`.
🔹 Якщо списку SKU немає — рівно один синтетичний `Default` з нульовою доставкою.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

# 🧩 Внутрішні модулі проєкту
from real_price.domain.products.entities import (
    DEFAULT_STOCK,
    DEFAULT_VARIANT_NAME,
    PriceInfo,
    Product,
    ProductSource,
    ShippingInfo,
    Variant,
    default_variant,
)
from real_price.shared.utils.logger import LOG_NAME
from real_price.shared.utils.money import format_price, to_float

from .json_paths import dig, first_int_in, first_number, first_value

logger = logging.getLogger(f"{LOG_NAME}.parsers.product")


# ================================
# 📏 КОНСТАНТИ ПАРСИНГУ
# ================================
ACCESSORY_KEYWORDS: Sequence[str] = (
    "case", "cover", "protector", "cable", "adapter", "charger",
    "holder", "stand", "accessory", "kit", "pedal", "spare",
    "replacement", "tool", "bag", "box",
)

# 💰 Легасі-форма: ціна живе в `skuVal` або прямо на SKU
LEGACY_VALUE_PATHS = ("skuVal.skuAmount.value", "skuVal.skuPrice", "skuAmount.value", "skuPrice")
LEGACY_DISCOUNT_PATHS = (
    "skuVal.skuActivityAmount.value",
    "skuVal.actSkuPrice",
    "skuActivityAmount.value",
    "actSkuPrice",
)
LEGACY_STOCK_PATHS = ("skuVal.availQuantity", "skuVal.inventory", "availQuantity", "inventory")

# 💰 Сучасна форма: `PRICE.skuIdStrPriceInfoMap[skuId]`
MODERN_VALUE_PATHS = ("originalPrice.value", "originalPrice.amount")
MODERN_DISCOUNT_PATHS = ("salePrice.value", "salePriceString", "salePriceLocal")
MODERN_STOCK_PATHS = ("skuStock", "availQuantity", "inventory")

DEFAULT_PRICE_PATHS = (
    "priceComponent.originalPrice",
    "price.originalPrice.value",
    "price.minPrice",
    "PRICE.originalPrice.value",
    "PRICE.minPrice",
)
DEFAULT_PRICE_TEXT_PATHS = (
    "priceModule.formatedActivityPrice",
    "priceModule.formatedPrice",
    "priceInfo.formatedActivityPrice",
    "priceInfo.formatedPrice",
)
DEFAULT_DISCOUNTED_PATHS = (
    "priceComponent.activityPrice",
    "priceComponent.discountPrice",
    "price.activityPrice",
    "price.discountPrice",
)

TITLE_PATHS = ("title", "subject", "productTitle", "titleModule.subject", "PRODUCT_TITLE.text")
_MARKER_KEYS = frozenset(
    ("SKU", "PRICE", "SHIPPING", "skuModule", "skuInfo", "priceModule", "priceInfo", "shippingModule",
     "priceComponent", "title", "subject", "productTitle", "titleModule")
)
_THRESHOLD_RE = re.compile(r"\$\s?(\d+(?:\.\d{1,2})?)")


def is_accessory(name: str) -> bool:
    """Чи містить назва (без урахування регістру) хоч одне ключове слово аксесуара."""
    lowered = (name or "").lower()
    return any(keyword in lowered for keyword in ACCESSORY_KEYWORDS)


class ProductParser:
    """🧾 Перетворює відповідь API або вбудований blob сторінки на Product."""

    # ================================
    # 🚪 ВХІД
    # ================================
    def parse(
        self,
        payload: Mapping[str, Any],
        *,
        product_id: str,
        source: ProductSource = ProductSource.SYNTHETIC_DEFAULT,
        fallback_title: str = "",
    ) -> Product:
        """Рівень-джерело зберігається навіть для синтетичного `Default`; без нього — `SYNTHETIC_DEFAULT`."""
        result = self.unwrap(payload)
        resolved_id = str(product_id or first_value(result, ("productId", "itemId")) or "")
        title = str(first_value(result, TITLE_PATHS) or fallback_title or "")

        variants = self._modern_variants(result) or self._legacy_variants(result)
        if not variants:
            logger.debug("🧪 %s: SKU не знайдено → синтетичний Default", resolved_id, extra={"product_id": resolved_id})
            variants = [self.default_variant(result)]
        else:
            logger.debug("🧾 %s: розпізнано %d варіант(ів)", resolved_id, len(variants), extra={"product_id": resolved_id})
        return Product.build(resolved_id, title, variants, source)

    @staticmethod
    def unwrap(payload: Mapping[str, Any]) -> Mapping[str, Any]:
        """Знаходить обʼєкт товару: `data.result` → `data` → сам payload."""
        for candidate in (dig(payload, "data.result"), dig(payload, "data"), payload):
            if isinstance(candidate, Mapping) and _MARKER_KEYS.intersection(candidate.keys()):
                return candidate
        nested = dig(payload, "data")
        return nested if isinstance(nested, Mapping) else payload

    # ================================
    # 🆕 СУЧАСНА ФОРМА
    # ================================
    def _modern_variants(self, result: Mapping[str, Any]) -> List[Variant]:
        sku_paths = dig(result, "SKU.skuPaths") or []
        if not isinstance(sku_paths, list) or not sku_paths:
            return []
        price_map = dig(result, "PRICE.skuIdStrPriceInfoMap") or {}
        props = dig(result, "SKU.skuProperties") or dig(result, "SKU.props") or []
        shipping = self.modern_shipping(result)

        variants: List[Variant] = []
        for sku in sku_paths:
            if not isinstance(sku, Mapping):
                continue
            sku_id = str(first_value(sku, ("skuIdStr", "skuId", "id")) or "")
            price_info = (price_map.get(sku_id) if isinstance(price_map, Mapping) else None) or {}
            sale = first_number(price_info, MODERN_DISCOUNT_PATHS, parse_text=True)
            value = first_number(price_info, MODERN_VALUE_PATHS) or sale or 0.0
            discounted = sale or value
            name = self.sku_name(sku, props)
            variants.append(
                Variant(
                    id=sku_id,
                    name=name,
                    price=PriceInfo(
                        value=value,
                        discounted_value=discounted,
                        formatted_price=str(dig(price_info, "originalPrice.formatedAmount") or format_price(value)),
                        discounted_formatted_price=str(price_info.get("salePriceString") or format_price(discounted)),
                        discount_label=str(price_info.get("discount") or ""),
                    ),
                    shipping=shipping,
                    stock=_stock(sku, MODERN_STOCK_PATHS),
                    is_main_product=not is_accessory(name),
                )
            )
        return variants

    def modern_shipping(self, result: Mapping[str, Any]) -> ShippingInfo:
        """Найдешевша опція з `SHIPPING.deliveryLayoutInfo[].bizData` + гарантія доставки."""
        layouts = dig(result, "SHIPPING.deliveryLayoutInfo") or []
        biz_items = [dig(item, "bizData") for item in layouts if isinstance(item, Mapping)]
        biz_items = [item for item in biz_items if isinstance(item, Mapping)]

        costs = [to_float(item.get("displayAmount")) or 0.0 for item in biz_items]
        cost = min(costs) if costs else 0.0
        cheapest = biz_items[costs.index(cost)] if costs else {}

        free_text = first_value(result, ("SHIPPING.freeShippingText", "SHIPPING.freeShippingTextInfo.mainText")) or next(
            (item.get("freeShippingText") for item in biz_items if item.get("freeShippingText")), None
        )
        return ShippingInfo(
            cost=cost,
            formatted_price=str(cheapest.get("formattedAmount") or format_price(cost)),
            free_shipping_threshold=_threshold_from_text(free_text),
            has_free_shipping_option=any(str(item.get("choiceFreeShipping", "")).lower() == "yes" for item in biz_items),
            guaranteed_delivery_days=first_int_in(dig(result, "SHIPPING.DELIVERY_GUARANTEE_SERVICE.subContents.3.content")),
            free_shipping_text=str(free_text) if free_text else None,
        )

    # ================================
    # 🗃️ ЛЕГАСІ-ФОРМА
    # ================================
    def _legacy_variants(self, result: Mapping[str, Any]) -> List[Variant]:
        sku_module = first_value(result, ("skuModule", "skuInfo")) or {}
        if not isinstance(sku_module, Mapping):
            return []
        sku_list = sku_module.get("skuPriceList") or sku_module.get("skuList") or []
        if not isinstance(sku_list, list) or not sku_list:
            return []
        props = sku_module.get("props") or sku_module.get("productSKUPropertyList") or []
        shipping = self.legacy_shipping(result)

        variants: List[Variant] = []
        for sku in sku_list:
            if not isinstance(sku, Mapping):
                continue
            value = first_number(sku, LEGACY_VALUE_PATHS) or 0.0
            discounted = first_number(sku, LEGACY_DISCOUNT_PATHS) or value
            name = self.sku_name(sku, props)
            variants.append(
                Variant(
                    id=str(first_value(sku, ("skuId", "skuIdStr", "id")) or ""),
                    name=name,
                    price=PriceInfo.of(value, discounted, str(first_value(sku, ("skuVal.discount", "discount")) or "")),
                    shipping=shipping,
                    stock=_stock(sku, LEGACY_STOCK_PATHS),
                    is_main_product=not is_accessory(name),
                )
            )
        return variants

    def legacy_shipping(self, result: Mapping[str, Any]) -> ShippingInfo:
        """Найдешевша опція з `shippingModule.freightCalculateInfo.freight[]`."""
        info = dig(result, "shippingModule.freightCalculateInfo") or {}
        options = info.get("freight") if isinstance(info, Mapping) else None
        free_text = info.get("freeShippingText") if isinstance(info, Mapping) else None
        threshold = _threshold_from_text(free_text)
        if not isinstance(options, list) or not options:
            return ShippingInfo(free_shipping_threshold=threshold, free_shipping_text=free_text or None)

        costs = [to_float(dig(option, "freightAmount.value")) or 0.0 for option in options if isinstance(option, Mapping)]
        cost = min(costs) if costs else 0.0
        has_free = bool(info.get("freeShipping")) or any(
            isinstance(option, Mapping) and bool(option.get("freeShipping")) for option in options
        )
        return ShippingInfo(
            cost=cost,
            formatted_price=format_price(cost),
            free_shipping_threshold=threshold,
            has_free_shipping_option=has_free,
            free_shipping_text=free_text or None,
        )

    # ================================
    # 🏷️ НАЗВА SKU
    # ================================
    def sku_name(self, sku: Mapping[str, Any], props: Any = None) -> str:
        """
        Назва варіанта.

        1) `skuAttr = "14:350685#Black;5:100014064#EU Plug"` → `"Black EU Plug"`
        2) `propPath = "14:350685;5:100014064"` + словник властивостей → імена через пробіл
        3) `"Default"`
        """
        sku_attr = sku.get("skuAttr")
        if isinstance(sku_attr, str) and "#" in sku_attr:
            labels = [part.split("#", 1)[1].strip() for part in sku_attr.split(";") if "#" in part]
            labels = [label for label in labels if label]
            if labels:
                return " ".join(labels)

        prop_path = first_value(sku, ("propPath", "skuPropIds"))
        if isinstance(prop_path, str) and prop_path:
            value_ids = [chunk.split(":")[-1] for chunk in re.split(r"[;,]", prop_path) if chunk]
            names = _resolve_property_names(value_ids, props)
            if names:
                return " ".join(names)

        return DEFAULT_VARIANT_NAME

    # ================================
    # 🧪 СИНТЕТИЧНИЙ ВАРІАНТ
    # ================================
    def default_variant(self, result: Mapping[str, Any]) -> Variant:
        """Один варіант з дефолтної ціни (числові шляхи → текстові), доставка нульова."""
        price = first_number(result, DEFAULT_PRICE_PATHS) or first_number(result, DEFAULT_PRICE_TEXT_PATHS, parse_text=True) or 0.0
        discounted = first_number(result, DEFAULT_DISCOUNTED_PATHS) or price
        discount = first_value(result, ("priceModule.discount", "priceComponent.discount", "price.discount")) or ""
        if not price:
            logger.debug("⚠️ Дефолтну ціну не знайдено — 0.0")
        return default_variant(price, discounted_price=discounted, discount_label=str(discount))


# ================================
# 🛠️ ДОПОМІЖНІ ФУНКЦІЇ
# ================================
def _resolve_property_names(value_ids: Sequence[str], props: Any) -> List[str]:
    """Зіставляє id значень властивостей зі словником (`props[].values[]` або `skuPropertyValues[]`)."""
    wanted = set(value_ids)
    names: List[str] = []
    for prop in props if isinstance(props, list) else []:
        if not isinstance(prop, Mapping):
            continue
        values: Iterable[Any] = prop.get("values") or prop.get("skuPropertyValues") or []
        for value in values:
            if not isinstance(value, Mapping):
                continue
            value_id = str(first_value(value, ("id", "propertyValueIdLong", "propertyValueId")) or "")
            if value_id in wanted:
                name = first_value(value, ("name", "propertyValueDisplayName", "propertyValueName"))
                if name:
                    names.append(str(name))
    return names


def _stock(sku: Mapping[str, Any], paths: Sequence[str]) -> int:
    stock = first_number(sku, paths)
    return int(stock) if stock else DEFAULT_STOCK


def _threshold_from_text(text: Any) -> Optional[float]:
    if not isinstance(text, str):
        return None
    match = _THRESHOLD_RE.search(text)
    return float(match.group(1)) if match else None


__all__ = ["ACCESSORY_KEYWORDS", "ProductParser", "is_accessory"]
