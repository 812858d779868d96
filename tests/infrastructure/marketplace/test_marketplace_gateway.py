# tests/infrastructure/marketplace/test_marketplace_gateway.py
import json

import httpx
import pytest

from real_price.errors import MalformedResponse, MissingCredential, NotFound, RateLimitExceeded, TransportError, ValidationChallenge
from real_price.infrastructure.marketplace import MarketplaceGateway, MarketplaceSettings
from real_price.infrastructure.marketplace.signing import generate_sign

FIXED_T = 1_700_000_000_000


def _gateway(handler, *, cookies=None):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), cookies=cookies)
    return MarketplaceGateway(MarketplaceSettings(), client=client, clock_ms=lambda: FIXED_T), client


@pytest.mark.asyncio
async def test_signed_request_and_jsonp_unwrap():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, text='mtopjsonp1({"ret":["SUCCESS::ok"],"data":{"result":{"title":"x"}}})')

    gateway, client = _gateway(handler, cookies={"_m_h5_tk": "tok_1700"})
    try:
        envelope = await gateway.fetch_product_api("1005")
    finally:
        await client.aclose()

    assert envelope["data"]["result"]["title"] == "x"
    params = seen["params"]
    assert params["t"] == str(FIXED_T)
    assert params["appKey"] == "12574478"
    assert params["callback"] == "mtopjsonp1"
    assert params["timeout"] == "15000"
    assert params["sign"] == generate_sign("tok", FIXED_T, "12574478", params["data"])
    body = json.loads(params["data"])
    assert body["productId"] == "1005"
    assert json.loads(body["ext"])["site"] == "usa"


@pytest.mark.asyncio
async def test_missing_token_fails_without_request():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, text="")

    gateway, client = _gateway(handler)
    try:
        with pytest.raises(MissingCredential):
            await gateway.fetch_product_api("1")
    finally:
        await client.aclose()
    assert calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "ret, expected",
    [
        ("FAIL_SYS_USER_VALIDATE::slide", ValidationChallenge),
        ("FAIL_SYS_ILLEGAL_ACCESS::too fast", RateLimitExceeded),
        ("FAIL_BIZ_ITEM_NOT_EXIST::gone", NotFound),
        ("FAIL_SYS_TOKEN_EXOIRED::expired", MalformedResponse),
    ],
)
async def test_failure_codes_are_classified(ret, expected):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=f'mtopjsonp1({{"ret":["{ret}"]}})')

    gateway, client = _gateway(handler, cookies={"_m_h5_tk": "tok_1"})
    try:
        with pytest.raises(expected):
            await gateway.fetch_product_api("1")
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_non_jsonp_body_is_malformed():
    gateway, client = _gateway(lambda request: httpx.Response(200, text="<html>captcha</html>"), cookies={"_m_h5_tk": "t_1"})
    try:
        with pytest.raises(MalformedResponse):
            await gateway.fetch_product_api("1")
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_api_endpoint_404_is_transport_error_not_missing_item():
    gateway, client = _gateway(lambda request: httpx.Response(404, text="no such api"), cookies={"_m_h5_tk": "tok_1"})
    try:
        with pytest.raises(TransportError) as info:
            await gateway.fetch_product_api("1")
    finally:
        await client.aclose()
    assert not isinstance(info.value, NotFound)
    assert info.value.status_code == 404


@pytest.mark.asyncio
async def test_item_page_404_is_not_found():
    gateway, client = _gateway(lambda request: httpx.Response(404, text="nope"))
    try:
        with pytest.raises(NotFound):
            await gateway.fetch_item_page("404")
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_item_page_returns_html():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, text="<h1>ok</h1>")

    gateway, client = _gateway(handler)
    try:
        assert await gateway.fetch_item_page("77") == "<h1>ok</h1>"
    finally:
        await client.aclose()
    assert seen == ["https://www.aliexpress.us/item/77.html"]


@pytest.mark.asyncio
async def test_ensure_session_stores_token_cookie():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, text="home", headers={"set-cookie": "_m_h5_tk=fresh_1700000000000; Path=/"})

    gateway, client = _gateway(handler)
    try:
        assert gateway.session_token() is None
        await gateway.ensure_session()
        assert gateway.session_token() == "fresh"
        await gateway.ensure_session()                              # токен вже є → без запиту
    finally:
        await client.aclose()
    assert len(requests) == 1


def test_settings_from_mapping_coerces_types():
    settings = MarketplaceSettings.from_mapping({"province": 922867650000000000, "timeout_sec": "5", "unknown": 1})
    assert settings.province == "922867650000000000"
    assert settings.timeout_sec == 5.0
    assert settings.item_url("9") == "https://www.aliexpress.us/item/9.html"
