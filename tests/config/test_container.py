"""
🧪 test_container.py — збирання графа залежностей
"""

import pytest

from real_price.config import ConfigService
from real_price.config.setup import Container
from real_price.infrastructure.data_storage import MemoryStorage


@pytest.fixture
def container(tmp_path, fake_gateway, fake_clock):
    override = tmp_path / "override.yaml"
    override.write_text("admission:\n  page:\n    max_requests: 4\n", encoding="utf-8")
    config = ConfigService(override_path=override, env={"REAL_PRICE_CACHE_DISABLED": "true"})
    return Container(config, storage=MemoryStorage(), gateway=fake_gateway, clock=fake_clock, sleep=fake_clock.sleep)


def test_graph_shares_one_cache_and_separate_controllers(container, fake_gateway):
    assert container.gateway is fake_gateway
    assert container.api_controller is not container.page_controller
    assert container.api_controller.config.max_requests == 2
    assert container.page_controller.config.max_requests == 4
    assert container.cache.is_disabled is True
    assert container.real_price_service.cache_disabled is True
    assert container.cache_configs["variants"].duration_ms == 86400000


@pytest.mark.asyncio
async def test_service_from_container_resolves(container, fake_gateway, make_envelope):
    fake_gateway.api["42"] = [make_envelope("Clock", ("1", "Silver", 12.0))]
    service = container.real_price_service

    await service.initialize()
    product = await service.resolve("42")
    await service.close()

    assert product.title == "Clock"
    assert fake_gateway.closed
