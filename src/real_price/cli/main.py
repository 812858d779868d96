# 🖥️ real_price/cli/main.py
"""
🖥️ Entry-point `real-price`: розраховує реальну ціну (зі знижкою та доставкою) для списку товарів.

Приклад:
    real-price 1005006 1005007 --price-text "US $44.00" --price-text "US $45.50" --json
"""

from __future__ import annotations

# 🔠 Системні імпорти
import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional, Sequence

# 🧩 Внутрішні модулі проєкту
from real_price.config.config_service import ConfigService
from real_price.config.setup.container import Container, bootstrap_logging
from real_price.infrastructure.services import PricedItem
from real_price.shared.utils.logger import LOG_NAME
from real_price.shared.utils.money import format_price

logger = logging.getLogger(f"{LOG_NAME}.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="real-price", description="Real shipping-inclusive prices for marketplace items.")
    parser.add_argument("product_ids", nargs="*", help="Marketplace item ids")
    parser.add_argument(
        "--price-text",
        action="append",
        default=[],
        dest="price_texts",
        help="Headline price text seen on the listing page (repeatable); used for page context",
    )
    parser.add_argument("--config", dest="override_path", default=None, help="Override YAML merged over config.yaml")
    parser.add_argument("--no-cache", action="store_true", help="Disable the cache for this and later runs")
    parser.add_argument("--enable-cache", action="store_true", help="Re-enable the cache")
    parser.add_argument("--clear-cache", action="store_true", help="Clear the persisted cache before resolving")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    return parser


def item_to_dict(item: PricedItem) -> Dict[str, Any]:
    if item.error is not None or item.product is None:
        return {"productId": item.product_id, "error": {"code": item.error.code if item.error else None, "message": str(item.error)}}
    best = item.best_variant
    return {
        "productId": item.product_id,
        "title": item.product.title,
        "source": item.product.source.value,
        "bestVariant": None if best is None else {
            "id": best.id,
            "name": best.name,
            "price": best.price.discounted_value,
            "shipping": best.shipping.cost,
            "total": best.total_price,
            "isMainProduct": best.is_main_product,
        },
        "priceRange": None if item.price_range is None else {"min": item.price_range.min, "max": item.price_range.max},
        "freeShippingThreshold": item.free_shipping_threshold,
    }


def format_item(item: PricedItem) -> str:
    if item.error is not None or item.product is None:
        return f"❌ {item.product_id}: {item.error}"
    best = item.best_variant
    line = f"✅ {item.product_id} | {item.product.title or '—'}"
    if best is not None:
        line += f" | {best.name}: {format_price(best.total_price)}"
        if best.shipping.cost:
            line += f" (incl. {format_price(best.shipping.cost)} shipping)"
    if item.price_range is not None and item.price_range.min != item.price_range.max:
        line += f" | range {format_price(item.price_range.min)}–{format_price(item.price_range.max)}"
    if item.free_shipping_threshold is not None:
        line += f" | free shipping over {format_price(item.free_shipping_threshold)}"
    return line


async def run(args: argparse.Namespace, container: Optional[Container] = None) -> List[PricedItem]:
    if container is None:
        config = ConfigService(override_path=args.override_path)
        bootstrap_logging(config)
        container = Container(config)
    service = container.real_price_service
    await service.initialize()
    try:
        if args.no_cache or args.enable_cache:
            await service.set_cache_disabled(bool(args.no_cache))
        if args.clear_cache:
            await service.clear_cache()
        if not args.product_ids:
            return []
        return await service.price_items(args.product_ids, args.price_texts)
    finally:
        await service.close()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        results = asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("🛑 Перервано користувачем")
        return 130

    if args.json:
        print(json.dumps([item_to_dict(item) for item in results], ensure_ascii=False, indent=2))
    else:
        for item in results:
            print(format_item(item))
    return 0 if all(item.ok for item in results) else 1


if __name__ == "__main__":
    sys.exit(main())
