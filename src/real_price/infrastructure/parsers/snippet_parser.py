# 🏷️ real_price/infrastructure/parsers/snippet_parser.py
"""
🏷️ BasicSnippetParser — мінімальний Product із тексту картки товару.

Останній рубіж: коли API та сторінка недоступні, ціни/доставку/знижку витягуємо регулярками.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from real_price.domain.products.entities import Product, ProductSource, ShippingInfo, default_variant
from real_price.domain.products.interfaces import BasicSnippet
from real_price.shared.utils.logger import LOG_NAME
from real_price.shared.utils.money import format_price

logger = logging.getLogger(f"{LOG_NAME}.parsers.snippet")

_PRICE_RE = re.compile(r"[$€£]\s?(\d[\d,]*(?:\.\d+)?)")
_SHIPPING_RE = re.compile(r"Shipping:\s*\$(\d+(?:\.\d{2})?)", re.IGNORECASE)
_FREE_OVER_RE = re.compile(r"Free shipping over\s*\$(\d+(?:\.\d{2})?)", re.IGNORECASE)
_FREE_RE = re.compile(r"free shipping", re.IGNORECASE)
_DISCOUNT_RE = re.compile(r"-(\d+)%")


def _price(text: Optional[str]) -> float:
    if not text:
        return 0.0
    match = _PRICE_RE.search(text)
    if not match:
        return 0.0
    try:
        return float(match.group(1).replace(",", ""))
    except ValueError:
        return 0.0


class BasicSnippetParser:
    """🏷️ `BasicSnippet` → Product(`FROM_BASIC_SNIPPET`) з одним варіантом `Default`."""

    def parse(self, product_id: str, snippet: BasicSnippet) -> Product:
        current = _price(snippet.price_text)
        original = _price(snippet.original_price_text) or current

        shipping_text = snippet.shipping_text or ""
        cost_match = _SHIPPING_RE.search(shipping_text)
        threshold_match = _FREE_OVER_RE.search(shipping_text)
        cost = float(cost_match.group(1)) if cost_match else 0.0
        shipping = ShippingInfo(
            cost=cost,
            formatted_price=format_price(cost),
            free_shipping_threshold=float(threshold_match.group(1)) if threshold_match else None,
            has_free_shipping_option=bool(_FREE_RE.search(shipping_text)) and threshold_match is None,
            free_shipping_text=shipping_text or None,
        )

        discount_match = _DISCOUNT_RE.search(snippet.discount_text or "")
        discount = f"-{discount_match.group(1)}%" if discount_match else ""

        variant = default_variant(original, discounted_price=current, discount_label=discount, shipping=shipping)
        logger.debug("🏷️ Snippet %s: %.2f → %.2f, доставка %.2f", product_id, original, current, cost)
        return Product.build(product_id, snippet.title_text or "", [variant], ProductSource.FROM_BASIC_SNIPPET)


__all__ = ["BasicSnippetParser"]
