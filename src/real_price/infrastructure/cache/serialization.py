# 🧬 real_price/infrastructure/cache/serialization.py
"""
🧬 Перетворення Product ↔ JSON-сумісний dict для знімків кешу.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from real_price.domain.products.entities import (
    DEFAULT_STOCK,
    PriceInfo,
    Product,
    ProductSource,
    ShippingInfo,
    Variant,
)
from real_price.shared.utils.money import to_float


def product_to_dict(product: Product) -> Dict[str, Any]:
    return {
        "productId": product.product_id,
        "title": product.title,
        "source": product.source.value,
        "variants": [_variant_to_dict(variant) for variant in product.variants],
    }


def _variant_to_dict(variant: Variant) -> Dict[str, Any]:
    price, shipping = variant.price, variant.shipping
    return {
        "id": variant.id,
        "name": variant.name,
        "price": {
            "value": price.value,
            "discountedValue": price.discounted_value,
            "formattedPrice": price.formatted_price,
            "discountedFormattedPrice": price.discounted_formatted_price,
            "discount": price.discount_label,
        },
        "shipping": {
            "cost": shipping.cost,
            "formattedPrice": shipping.formatted_price,
            "freeThreshold": shipping.free_shipping_threshold,
            "hasChoiceFreeShipping": shipping.has_free_shipping_option,
            "guaranteedDays": shipping.guaranteed_delivery_days,
            "freeShippingText": shipping.free_shipping_text,
        },
        "stock": variant.stock,
        "isMainProduct": variant.is_main_product,
    }


def product_from_dict(raw: Mapping[str, Any]) -> Product:
    """Відновлює Product; невідоме джерело → `FROM_STRUCTURED_API`. Не-dict → ValueError."""
    if not isinstance(raw, Mapping):
        raise ValueError(f"Product snapshot must be an object, got {type(raw).__name__}")
    try:
        source = ProductSource(raw.get("source") or ProductSource.FROM_STRUCTURED_API.value)
    except ValueError:
        source = ProductSource.FROM_STRUCTURED_API
    variants = [_variant_from_dict(item) for item in raw.get("variants") or () if isinstance(item, Mapping)]
    return Product.build(str(raw.get("productId", "")), str(raw.get("title") or ""), variants, source)


def _variant_from_dict(raw: Mapping[str, Any]) -> Variant:
    price = raw.get("price") or {}
    shipping = raw.get("shipping") or {}
    value = to_float(price.get("value")) or 0.0
    discounted = to_float(price.get("discountedValue"))
    return Variant(
        id=str(raw.get("id") or ""),
        name=str(raw.get("name") or ""),
        price=PriceInfo(
            value=value,
            discounted_value=value if discounted is None else discounted,
            formatted_price=str(price.get("formattedPrice") or ""),
            discounted_formatted_price=str(price.get("discountedFormattedPrice") or ""),
            discount_label=str(price.get("discount") or ""),
        ),
        shipping=ShippingInfo(
            cost=to_float(shipping.get("cost")) or 0.0,
            formatted_price=str(shipping.get("formattedPrice") or "$0.00"),
            free_shipping_threshold=to_float(shipping.get("freeThreshold")),
            has_free_shipping_option=bool(shipping.get("hasChoiceFreeShipping")),
            guaranteed_delivery_days=shipping.get("guaranteedDays"),
            free_shipping_text=shipping.get("freeShippingText"),
        ),
        stock=int(raw.get("stock", DEFAULT_STOCK) or 0),
        is_main_product=bool(raw.get("isMainProduct", True)),
    )


__all__ = ["product_from_dict", "product_to_dict"]
