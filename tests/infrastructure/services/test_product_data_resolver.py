# tests/infrastructure/services/test_product_data_resolver.py
import httpx
import pytest

from real_price.domain.products import BasicSnippet, ProductSource
from real_price.errors import MalformedResponse, NotFound, RateLimitExceeded, TransportError, ValidationChallenge
from real_price.infrastructure.cache import PersistentCache
from real_price.infrastructure.data_storage import MemoryStorage
from real_price.infrastructure.marketplace import MarketplaceGateway, MarketplaceSettings
from real_price.infrastructure.rate_limiting import AdmissionConfig, AdmissionController
from real_price.infrastructure.services import ProductDataResolver

EMPTY_PAGE = "<html><body><p>nothing here</p></body></html>"
SNIPPET = BasicSnippet(title_text="Card title", price_text="US $9.99", shipping_text="Free shipping")
KETTLE_PAGE = (
    "<html><body><h1>Kettle</h1><script>runParams.data = "
    '{"skuModule": {"skuPriceList": [{"skuId": 1, "skuAttr": "1:1#Steel", "skuVal": {"skuAmount": {"value": 31.0}}}]}};'
    "</script></body></html>"
)


@pytest.fixture
def cache(epoch_clock):
    return PersistentCache(MemoryStorage(), clock=epoch_clock)


@pytest.fixture
def resolver(fake_gateway, cache, fake_clock):
    def controller(name):
        config = AdmissionConfig(max_requests=100, window_ms=1000, initial_backoff_ms=1000, max_backoff_ms=2000)
        return AdmissionController(config, name=name, clock=fake_clock, sleep=fake_clock.sleep)

    return ProductDataResolver(
        fake_gateway,
        cache,
        api_controller=controller("api"),
        page_controller=controller("page"),
    )


@pytest.mark.asyncio
async def test_challenges_are_retried_then_result_is_cached(resolver, fake_gateway, cache, fake_clock, make_envelope):
    fake_gateway.api["1"] = [
        ValidationChallenge("FAIL_SYS_USER_VALIDATE"),
        ValidationChallenge("FAIL_SYS_USER_VALIDATE"),
        make_envelope("Lamp", ("11", "White", 20.0)),
    ]

    product = await resolver.resolve("1")

    assert product.source is ProductSource.FROM_STRUCTURED_API
    assert product.variants[0].name == "White"
    assert fake_clock.sleeps == [1.0, 2.0]
    assert "product_1" in cache

    again = await resolver.resolve("1")
    assert again == product
    assert fake_gateway.count("api") == 3                           # другий виклик — з кешу


@pytest.mark.asyncio
async def test_exhausted_tiers_fall_back_to_snippet(resolver, fake_gateway, cache):
    fake_gateway.api["2"] = [RateLimitExceeded("FAIL_SYS_ILLEGAL_ACCESS")]
    fake_gateway.pages["2"] = [EMPTY_PAGE]

    product = await resolver.resolve("2", SNIPPET)

    assert product.source is ProductSource.FROM_BASIC_SNIPPET
    assert product.title == "Card title"
    assert product.variants[0].price.discounted_value == 9.99
    assert fake_gateway.count("api") == 3                           # 1с, 2с (максимум), відмова
    assert fake_gateway.count("page") == 1                          # MalformedResponse не повторюється
    assert "product_2" in cache


@pytest.mark.asyncio
async def test_exhausted_tiers_without_snippet_raise_primary_error(resolver, fake_gateway, cache):
    fake_gateway.api["3"] = [RateLimitExceeded("FAIL_SYS_ILLEGAL_ACCESS")]
    fake_gateway.pages["3"] = [EMPTY_PAGE]

    with pytest.raises(RateLimitExceeded):
        await resolver.resolve("3")
    assert "product_3" not in cache


@pytest.mark.asyncio
async def test_not_found_is_terminal(resolver, fake_gateway):
    fake_gateway.api["4"] = [NotFound("FAIL_BIZ_ITEM_NOT_EXIST")]

    with pytest.raises(NotFound):
        await resolver.resolve("4", SNIPPET)
    assert fake_gateway.count("page") == 0


@pytest.mark.asyncio
async def test_missing_item_page_falls_back_to_snippet(resolver, fake_gateway, cache):
    fake_gateway.api["41"] = [RateLimitExceeded("FAIL_SYS_ILLEGAL_ACCESS")]
    fake_gateway.pages["41"] = [NotFound("Item page not found")]

    product = await resolver.resolve("41", SNIPPET)

    assert product.source is ProductSource.FROM_BASIC_SNIPPET
    assert product.variants[0].price.discounted_value == 9.99
    assert fake_gateway.count("page") == 1
    assert "product_41" in cache


@pytest.mark.asyncio
async def test_missing_item_page_without_snippet_raises_not_found(resolver, fake_gateway, cache):
    fake_gateway.api["42"] = [RateLimitExceeded("FAIL_SYS_ILLEGAL_ACCESS")]
    fake_gateway.pages["42"] = [NotFound("Item page not found")]

    with pytest.raises(NotFound):
        await resolver.resolve("42")
    assert "product_42" not in cache


@pytest.mark.asyncio
async def test_page_embedding_used_after_api_failure(resolver, fake_gateway):
    fake_gateway.api["5"] = [MalformedResponse("bad envelope")]
    fake_gateway.pages["5"] = [KETTLE_PAGE]

    product = await resolver.resolve("5")

    assert product.source is ProductSource.FROM_PAGE_EMBEDDING
    assert product.title == "Kettle"
    assert product.variants[0].name == "Steel"


@pytest.mark.asyncio
async def test_api_endpoint_404_still_tries_item_page(cache, fake_clock):
    paths = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        if request.url.path.startswith("/h5/"):
            return httpx.Response(404, text="no such api")
        return httpx.Response(200, text=KETTLE_PAGE)

    def controller(name):
        config = AdmissionConfig(max_requests=100, window_ms=1000, initial_backoff_ms=1000, max_backoff_ms=2000)
        return AdmissionController(config, name=name, clock=fake_clock, sleep=fake_clock.sleep)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), cookies={"_m_h5_tk": "tok_1"})
    gateway = MarketplaceGateway(MarketplaceSettings(), client=client)
    resolver = ProductDataResolver(gateway, cache, api_controller=controller("api"), page_controller=controller("page"))
    try:
        product = await resolver.resolve("55")
    finally:
        await client.aclose()

    assert product.source is ProductSource.FROM_PAGE_EMBEDDING
    assert product.variants[0].name == "Steel"
    assert paths == ["/h5/mtop.aliexpress.pdp.pc.query/1.0/", "/item/55.html"]
    assert product.variants[0].price.value == 31.0


@pytest.mark.asyncio
async def test_transport_exceptions_are_converted_and_fall_through(resolver, fake_gateway):
    fake_gateway.api["6"] = [httpx.ConnectError("boom")]
    fake_gateway.pages["6"] = [TransportError("page down")]

    with pytest.raises(TransportError) as info:
        await resolver.resolve("6")
    assert "Network request failed" in str(info.value)              # помилка саме API-рівня


@pytest.mark.asyncio
async def test_title_only_api_result_borrows_snippet_variants(resolver, fake_gateway):
    fake_gateway.api["7"] = [{"ret": ["SUCCESS::ok"], "data": {"result": {"title": "API title"}}}]

    product = await resolver.resolve("7", SNIPPET)

    assert product.source is ProductSource.FROM_STRUCTURED_API
    assert product.title == "API title"
    assert product.variants[0].price.discounted_value == 9.99


@pytest.mark.asyncio
async def test_session_is_warmed_once_even_when_it_fails(resolver, fake_gateway, make_envelope):
    fake_gateway.session_error = TransportError("root unreachable")
    fake_gateway.api["8"] = [make_envelope("A", ("1", "Red", 5.0))]
    fake_gateway.api["9"] = [make_envelope("B", ("2", "Blue", 6.0))]

    await resolver.resolve("8")
    await resolver.resolve("9")

    assert fake_gateway.count("session") == 1
