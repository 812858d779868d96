# tests/infrastructure/parsers/test_snippet_parser.py
from real_price.domain.products import BasicSnippet, ProductSource
from real_price.infrastructure.parsers import BasicSnippetParser


def test_snippet_with_shipping_threshold_and_discount():
    snippet = BasicSnippet(
        title_text="Wireless Mouse",
        price_text="US $12.99",
        original_price_text="US $1,020.00",
        shipping_text="Shipping: $2.50 · Free shipping over $10.00",
        discount_text="-35% off",
    )

    product = BasicSnippetParser().parse("123", snippet)

    assert product.source is ProductSource.FROM_BASIC_SNIPPET
    assert product.title == "Wireless Mouse"
    variant = product.variants[0]
    assert variant.price.value == 1020.0
    assert variant.price.discounted_value == 12.99
    assert variant.price.discount_label == "-35%"
    assert variant.shipping.cost == 2.5
    assert variant.shipping.free_shipping_threshold == 10.0
    assert variant.shipping.has_free_shipping_option is False


def test_plain_free_shipping_and_missing_original_price():
    snippet = BasicSnippet(title_text="Mug", price_text="€7.10", shipping_text="Free shipping")

    variant = BasicSnippetParser().parse("9", snippet).variants[0]

    assert variant.price.value == 7.1
    assert variant.price.discounted_value == 7.1
    assert variant.shipping.cost == 0.0
    assert variant.shipping.has_free_shipping_option is True
    assert variant.price.discount_label == ""


def test_price_followed_by_sentence_period():
    variant = BasicSnippetParser().parse("10", BasicSnippet(price_text="Only US $8.50.")).variants[0]
    assert variant.price.discounted_value == 8.5
