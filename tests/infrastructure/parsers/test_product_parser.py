# tests/infrastructure/parsers/test_product_parser.py
import pytest

from real_price.domain.products import ProductSource
from real_price.infrastructure.parsers import ProductParser, is_accessory


def _modern_envelope() -> dict:
    return {
        "ret": ["SUCCESS::调用成功"],
        "data": {
            "result": {
                "PRODUCT_TITLE": {"text": "Guitar Multi-Effects Pedal"},
                "SKU": {
                    "skuPaths": [
                        {"skuIdStr": "111", "skuAttr": "14:1#Main Unit", "skuStock": 7},
                        {"skuId": 222, "skuAttr": "14:2#Power Adapter"},
                    ]
                },
                "PRICE": {
                    "skuIdStrPriceInfoMap": {
                        "111": {
                            "originalPrice": {"value": 120.0, "formatedAmount": "US $120.00"},
                            "salePriceString": "US $89.99",
                            "discount": "-25%",
                        },
                        "222": {"originalPrice": {"value": 9.5}},
                    }
                },
                "SHIPPING": {
                    "deliveryLayoutInfo": [
                        {"bizData": {"displayAmount": 4.99, "formattedAmount": "US $4.99"}},
                        {"bizData": {"displayAmount": 2.49, "formattedAmount": "US $2.49", "choiceFreeShipping": "yes"}},
                    ],
                    "DELIVERY_GUARANTEE_SERVICE": {
                        "subContents": [{}, {}, {}, {"content": "Delivery in 7 business days"}]
                    },
                },
            }
        },
    }


def _legacy_blob() -> dict:
    return {
        "titleModule": {"subject": "Phone Case Bundle"},
        "skuModule": {
            "props": [
                {"values": [{"id": 201, "name": "Black"}, {"id": 202, "name": "Blue"}]},
                {"values": [{"id": 301, "name": "128GB"}]},
            ],
            "skuPriceList": [
                {
                    "skuId": 9001,
                    "skuPropIds": "201,301",
                    "skuVal": {"skuAmount": {"value": 300.0}, "skuActivityAmount": {"value": 250.0}, "availQuantity": 3},
                },
                {"skuId": 9002, "skuPropIds": "202", "skuVal": {"skuAmount": {"value": 6.0}}},
            ],
        },
        "shippingModule": {
            "freightCalculateInfo": {
                "freight": [{"freightAmount": {"value": 3.0}}, {"freightAmount": {"value": 1.5}}],
                "freeShippingText": "Free shipping over $15.00",
            }
        },
    }


@pytest.fixture
def parser() -> ProductParser:
    return ProductParser()


def test_modern_envelope_variants_prices_and_shipping(parser):
    product = parser.parse(_modern_envelope(), product_id="1005", source=ProductSource.FROM_STRUCTURED_API)

    assert product.product_id == "1005"
    assert product.title == "Guitar Multi-Effects Pedal"
    assert product.source is ProductSource.FROM_STRUCTURED_API
    main, adapter = product.variants

    assert (main.id, main.name, main.stock) == ("111", "Main Unit", 7)
    assert main.price.value == 120.0
    assert main.price.discounted_value == 89.99
    assert main.price.formatted_price == "US $120.00"
    assert main.price.discount_label == "-25%"

    assert (adapter.id, adapter.name, adapter.stock) == ("222", "Power Adapter", 999)
    assert adapter.price.discounted_value == 9.5
    assert adapter.is_main_product is False

    assert main.shipping.cost == 2.49
    assert main.shipping.has_free_shipping_option is True
    assert main.shipping.free_shipping_threshold is None
    assert main.shipping.guaranteed_delivery_days == "7"


def test_legacy_blob_resolves_property_names(parser):
    product = parser.parse(_legacy_blob(), product_id="77", source=ProductSource.FROM_PAGE_EMBEDDING)

    assert product.title == "Phone Case Bundle"
    first, second = product.variants
    assert first.name == "Black 128GB"
    assert first.price.value == 300.0
    assert first.price.discounted_value == 250.0
    assert first.stock == 3
    assert second.name == "Blue"
    assert second.price.discounted_value == 6.0

    assert first.shipping.cost == 1.5
    assert first.shipping.free_shipping_threshold == 15.0
    assert first.shipping.has_free_shipping_option is False


def test_missing_sku_list_yields_default_variant_from_price_probes(parser):
    payload = {"data": {"result": {"title": "Desk", "priceComponent": {"originalPrice": 0}, "PRICE": {"minPrice": "12.40"}}}}

    product = parser.parse(payload, product_id="5", source=ProductSource.FROM_STRUCTURED_API)

    assert product.is_default_only
    assert product.source is ProductSource.FROM_STRUCTURED_API
    variant = product.variants[0]
    assert variant.name == "Default"
    assert variant.price.value == 12.4
    assert variant.shipping.cost == 0.0


def test_formatted_price_text_is_last_default_probe(parser):
    payload = {"priceModule": {"formatedActivityPrice": "US $1,049.00"}}
    product = parser.parse(payload, product_id="6")
    assert product.variants[0].price.value == 1049.0
    assert product.source is ProductSource.SYNTHETIC_DEFAULT


def test_nothing_usable_gives_zero_default(parser):
    product = parser.parse({"data": {}}, product_id="7", source=ProductSource.FROM_STRUCTURED_API, fallback_title="From h1")
    assert product.lacks_variants
    assert product.title == "From h1"


@pytest.mark.parametrize(
    "name, expected",
    [("Phone CASE", True), ("USB-C Cable 2m", True), ("Screen protector", True), ("Black 128GB", False), ("Default", False)],
)
def test_accessory_keywords(name, expected):
    assert is_accessory(name) is expected
