# tests/conftest.py
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest

# Додаємо src у sys.path, щоб працював імпорт "real_price.…" без інсталяції
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


class FakeClock:
    """Монотонний годинник у секундах + async sleep, що лише просуває час."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeEpochClock:
    """Epoch-мілісекунди для PersistentCache."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeGateway:
    """Сценарний шлюз: відповіді API/сторінки беруться з черг (виняток → raise)."""

    def __init__(self) -> None:
        self.api: Dict[str, List[Any]] = {}
        self.pages: Dict[str, List[Any]] = {}
        self.session_error: Optional[Exception] = None
        self.calls: List[Tuple[str, str]] = []
        self.closed = False

    @staticmethod
    def _next(queue: Dict[str, List[Any]], product_id: str) -> Any:
        items = queue.get(product_id) or []
        outcome = items.pop(0) if len(items) > 1 else (items[0] if items else None)
        if outcome is None:
            raise AssertionError(f"no scripted response for {product_id}")
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def ensure_session(self) -> None:
        self.calls.append(("session", ""))
        if self.session_error is not None:
            raise self.session_error

    async def fetch_product_api(self, product_id: str) -> Dict[str, Any]:
        self.calls.append(("api", product_id))
        return self._next(self.api, product_id)

    async def fetch_item_page(self, product_id: str) -> str:
        self.calls.append(("page", product_id))
        return self._next(self.pages, product_id)

    async def close(self) -> None:
        self.closed = True

    def count(self, kind: str) -> int:
        return sum(1 for call, _ in self.calls if call == kind)


def api_envelope(title: str, *skus: Tuple[str, str, float]) -> Dict[str, Any]:
    """Мінімальний успішний JSONP-конверт сучасної форми."""
    return {
        "ret": ["SUCCESS::ok"],
        "data": {
            "result": {
                "PRODUCT_TITLE": {"text": title},
                "SKU": {"skuPaths": [{"skuIdStr": sku_id, "skuAttr": f"1:{sku_id}#{name}"} for sku_id, name, _ in skus]},
                "PRICE": {"skuIdStrPriceInfoMap": {sku_id: {"originalPrice": {"value": price}} for sku_id, _, price in skus}},
            }
        },
    }


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def make_envelope():
    return api_envelope


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def epoch_clock() -> FakeEpochClock:
    return FakeEpochClock()
