# tests/cli/test_cli_main.py
import pytest

from real_price.cli.main import build_parser, format_item, item_to_dict, run
from real_price.config import ConfigService
from real_price.config.setup import Container
from real_price.errors import NotFound
from real_price.infrastructure.cache import STORAGE_KEY
from real_price.infrastructure.data_storage import MemoryStorage
from real_price.infrastructure.services import DISABLE_PREF_KEY


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def container(storage, fake_gateway, fake_clock):
    return Container(ConfigService(env={}), storage=storage, gateway=fake_gateway, clock=fake_clock, sleep=fake_clock.sleep)


def test_parser_collects_repeatable_price_texts():
    args = build_parser().parse_args(["1", "2", "--price-text", "$4", "--price-text", "$5", "--json", "--no-cache"])
    assert args.product_ids == ["1", "2"]
    assert args.price_texts == ["$4", "$5"]
    assert args.json and args.no_cache and not args.clear_cache


@pytest.mark.asyncio
async def test_run_prices_items_and_renders(container, fake_gateway, make_envelope):
    fake_gateway.api["10"] = [make_envelope("Kettle", ("1", "Steel", 30.0), ("2", "Glass", 40.0))]
    fake_gateway.api["11"] = [NotFound("FAIL_BIZ_ITEM_NOT_EXIST")]
    args = build_parser().parse_args(["10", "11", "--price-text", "$39"])

    ok, missing = await run(args, container)

    assert fake_gateway.closed
    assert ok.best_variant.name == "Glass"
    assert format_item(ok) == "✅ 10 | Kettle | Glass: $40.00 | range $30.00–$40.00"
    assert format_item(missing).startswith("❌ 11:")

    rendered = item_to_dict(ok)
    assert rendered["source"] == "structured_api"
    assert rendered["bestVariant"]["total"] == 40.0
    assert item_to_dict(missing)["error"]["code"] == "not_found"


@pytest.mark.asyncio
async def test_cache_flags_without_items(container, storage):
    args = build_parser().parse_args(["--no-cache", "--clear-cache"])

    assert await run(args, container) == []
    assert storage.data[DISABLE_PREF_KEY] == "true"
    assert storage.data[STORAGE_KEY] == "{}"
