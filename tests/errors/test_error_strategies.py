# tests/errors/test_error_strategies.py
import httpx
import pytest

from real_price.errors import (
    AppError,
    MalformedResponse,
    MarketplaceCodeStrategy,
    NotFound,
    RateLimitExceeded,
    RetryableError,
    TransportError,
    ValidationChallenge,
    convert_exception,
)


def _status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://www.aliexpress.us/item/1.html")
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError(f"status {status}", request=request, response=response)


def test_retryable_hierarchy():
    assert issubclass(RateLimitExceeded, RetryableError)
    assert issubclass(ValidationChallenge, RetryableError)
    assert not issubclass(NotFound, RetryableError)
    assert not issubclass(MalformedResponse, RetryableError)


@pytest.mark.parametrize(
    "status, expected",
    [(404, NotFound), (429, RateLimitExceeded), (503, TransportError)],
)
def test_http_status_mapping(status, expected):
    converted = convert_exception(_status_error(status), product_id="1")
    assert isinstance(converted, expected)
    assert converted.product_id == "1"


def test_timeout_and_unknown_errors_become_transport_errors():
    request = httpx.Request("GET", "https://acs.aliexpress.us/h5/x")
    timeout = convert_exception(httpx.ReadTimeout("slow", request=request))
    assert isinstance(timeout, TransportError)
    assert timeout.url == "https://acs.aliexpress.us/h5/x"

    unknown = convert_exception(RuntimeError("weird"))
    assert isinstance(unknown, TransportError)
    assert "RuntimeError" in str(unknown)


def test_app_errors_pass_through_unchanged():
    error = MalformedResponse("bad")
    assert convert_exception(error) is error


def test_marketplace_code_classification():
    codes = MarketplaceCodeStrategy()
    assert isinstance(codes.classify("FAIL_SYS_ILLEGAL_ACCESS::slow down"), RateLimitExceeded)
    assert isinstance(codes.classify("FAIL_SYS_USER_VALIDATE::slide"), ValidationChallenge)
    assert isinstance(codes.classify("FAIL_BIZ_ITEM_NOT_EXIST"), NotFound)
    assert isinstance(codes.classify("FAIL_SYS_SOMETHING_ELSE"), MalformedResponse)
    assert codes.handle(ValueError("not a code")) is None


def test_log_extra_includes_context():
    error = TransportError("down", details="connect", product_id="7", url="https://x", status_code=502)
    assert error.to_log_extra() == {
        "error_code": "transport_error",
        "product_id": "7",
        "details": "connect",
        "url": "https://x",
        "status_code": 502,
    }
    assert isinstance(error, AppError)
    assert str(error) == "down (connect)"
