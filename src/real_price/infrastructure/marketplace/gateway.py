# 🌐 real_price/infrastructure/marketplace/gateway.py
"""
🌐 MarketplaceGateway — httpx-колаборатор маркетплейсу.

🎯 Призначення:
    • `ensure_session()` — GET кореня сайту, щоб сервер виставив cookie `_m_h5_tk`;
    • `fetch_product_api()` — ОДНА підписана JSONP-спроба (повтори робить AdmissionController);
    • `fetch_item_page()` — сирий HTML сторінки товару для вбудованого JSON.

⚙️ Нотатки:
    • кожна спроба обмежена таймаутом (`timeout_sec`, 15 с за замовчуванням);
    • httpx-винятки конвертуються в доменні через `convert_exception`;
    • `FAIL_*` коди з конверта класифікуються `MarketplaceCodeStrategy`.
"""

from __future__ import annotations

# 🌐 Зовнішні бібліотеки
import httpx                                                        # 🌐 Асинхронний HTTP-клієнт

# 🔠 Системні імпорти
import asyncio
import json
import logging
import re
import time
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, Mapping, Optional

# 🧩 Внутрішні модулі проєкту
from real_price.errors import MalformedResponse, MarketplaceCodeStrategy, MissingCredential, TransportError, convert_exception
from real_price.shared.utils.logger import LOG_NAME

from .signing import compact_json, generate_sign, token_from_cookie

logger = logging.getLogger(f"{LOG_NAME}.marketplace")

TOKEN_COOKIE = "_m_h5_tk"
_DEFAULT_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/134.0.0.0 Safari/537.36"
)


# ================================
# ⚙️ НАЛАШТУВАННЯ
# ================================
@dataclass(frozen=True, slots=True)
class MarketplaceSettings:
    """Ендпоінти, параметри конверта та регіон доставки."""

    site_root: str = "https://www.aliexpress.us/"
    api_url: str = "https://acs.aliexpress.us/h5/mtop.aliexpress.pdp.pc.query/1.0/"
    item_url_template: str = "https://www.aliexpress.us/item/{product_id}.html"
    api_name: str = "mtop.aliexpress.pdp.pc.query"
    api_version: str = "1.0"
    app_key: str = "12574478"
    jsv: str = "2.5.1"
    callback: str = "mtopjsonp1"
    timeout_sec: float = 15.0
    user_agent: str = _DEFAULT_UA
    language: str = "en_US"
    currency: str = "USD"
    country: str = "US"
    province: str = "922867650000000000"
    city: str = "922867656497000000"
    site: str = "usa"
    host: str = "www.aliexpress.us"
    extra_headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, node: Optional[Mapping[str, Any]]) -> "MarketplaceSettings":
        """Невідомі ключі ігноруються; відсутні беруться з дефолтів."""
        node = node or {}
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            value = node.get(f.name)
            if value is None:
                continue
            if f.name == "timeout_sec":
                kwargs[f.name] = float(value)
            elif f.name == "extra_headers":
                kwargs[f.name] = {str(k): str(v) for k, v in dict(value).items()}
            else:
                kwargs[f.name] = str(value)                         # 🔢 YAML віддає province/city числами
        return cls(**kwargs)

    def item_url(self, product_id: str) -> str:
        return self.item_url_template.format(product_id=product_id)


def build_request_data(product_id: str, settings: MarketplaceSettings) -> Dict[str, Any]:
    """Тіло `data=` для `mtop.aliexpress.pdp.pc.query` (порядок ключів важливий для підпису)."""
    ext = {
        "site": settings.site,
        "crawler": False,
        "x-m-biz-bx-region": "",
        "signedIn": True,
        "host": settings.host,
    }
    return {
        "productId": str(product_id),
        "_lang": settings.language,
        "_currency": settings.currency,
        "country": settings.country,
        "province": settings.province,
        "city": settings.city,
        "channel": "",
        "pdp_ext_f": '{"order":"10","eval":"1"}',
        "sourceType": "",
        "clientType": "pc",
        "ext": compact_json(ext),
    }


def _epoch_ms() -> int:
    return int(time.time() * 1000)


# ================================
# 🌐 ШЛЮЗ
# ================================
class MarketplaceGateway:
    """🌐 Реалізація `IMarketplaceGateway` поверх `httpx.AsyncClient`."""

    def __init__(
        self,
        settings: Optional[MarketplaceSettings] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        clock_ms: Callable[[], int] = _epoch_ms,
    ) -> None:
        self._settings = settings or MarketplaceSettings()
        self._client = client
        self._owns_client = client is None
        self._clock_ms = clock_ms
        self._codes = MarketplaceCodeStrategy()
        self._callback_re = re.compile(rf"{re.escape(self._settings.callback)}\((.*)\)", re.DOTALL)
        self._init_lock = asyncio.Lock()

    @property
    def settings(self) -> MarketplaceSettings:
        return self._settings

    # ================================
    # 🔄 ЖИТТЄВИЙ ЦИКЛ
    # ================================
    async def initialize(self) -> None:
        async with self._init_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    timeout=self._settings.timeout_sec,
                    follow_redirects=True,
                    headers={
                        "user-agent": self._settings.user_agent,
                        "accept-language": "en-US,en;q=0.9",
                        "cache-control": "no-cache",
                        "pragma": "no-cache",
                        **self._settings.extra_headers,
                    },
                )
                self._owns_client = True
                logger.info("🔧 MarketplaceGateway: HTTP-клієнт створено (timeout=%.1fs)", self._settings.timeout_sec)

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            logger.info("🧹 MarketplaceGateway: HTTP-клієнт закрито")
        self._client = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            await self.initialize()
        assert self._client is not None
        return self._client

    # ================================
    # 🔑 СЕСІЯ
    # ================================
    def session_token(self) -> Optional[str]:
        """Токен з cookie `_m_h5_tk` (частина до `_`) або None."""
        if self._client is None:
            return None
        for cookie in self._client.cookies.jar:                     # 🍪 Може бути кілька доменів, .get() тоді падає
            if cookie.name == TOKEN_COOKIE:
                token = token_from_cookie(cookie.value)
                if token:
                    return token
        return None

    async def ensure_session(self) -> None:
        """GET кореня сайту; при наявному токені — нічого не робить."""
        client = await self._get_client()
        if self.session_token():
            logger.debug("🔑 Токен сесії вже є")
            return
        logger.info("🔑 Ініціалізація сесії: %s", self._settings.site_root)
        try:
            response = await client.get(
                self._settings.site_root,
                headers={"accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"},
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise convert_exception(exc) from exc
        if self.session_token():
            logger.info("✅ Токен сесії отримано")
        else:
            logger.warning("⚠️ Сервер не виставив %s", TOKEN_COOKIE)

    # ================================
    # 📡 СТРУКТУРОВАНЕ API
    # ================================
    async def fetch_product_api(self, product_id: str) -> Dict[str, Any]:
        """Одна підписана спроба; повертає розпакований JSONP-конверт `{ret, data}`."""
        client = await self._get_client()
        token = self.session_token()
        if not token:
            raise MissingCredential("No session token for API call", details=TOKEN_COOKIE, product_id=product_id)

        settings = self._settings
        timestamp = self._clock_ms()
        data = compact_json(build_request_data(product_id, settings))
        params = {
            "jsv": settings.jsv,
            "appKey": settings.app_key,
            "t": str(timestamp),
            "sign": generate_sign(token, timestamp, settings.app_key, data),
            "api": settings.api_name,
            "type": "originaljsonp",
            "v": settings.api_version,
            "timeout": str(int(settings.timeout_sec * 1000)),
            "dataType": "originaljsonp",
            "callback": settings.callback,
            "data": data,
        }
        logger.debug("📡 API-запит %s", product_id, extra={"product_id": product_id})
        try:
            response = await client.get(
                settings.api_url,
                params=params,
                headers={"accept": "*/*", "referer": settings.site_root},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code != 404:
                raise convert_exception(exc, product_id=product_id) from exc
            # 🚧 404 ендпоінта не означає, що товару немає: сторінку ще пробуємо
            raise TransportError(
                "API endpoint returned 404",
                details=str(exc),
                product_id=product_id,
                url=str(exc.request.url),
                status_code=404,
            ) from exc
        except httpx.HTTPError as exc:
            raise convert_exception(exc, product_id=product_id) from exc

        envelope = self.parse_jsonp(response.text, product_id=product_id)
        ret = envelope.get("ret")
        first = ret[0] if isinstance(ret, list) and ret else None
        if isinstance(first, str) and first.startswith("FAIL_"):
            logger.info("🚫 API повернуло %s для %s", first, product_id, extra={"product_id": product_id})
            raise self._codes.classify(first, product_id=product_id)
        return envelope

    def parse_jsonp(self, text: str, *, product_id: Optional[str] = None) -> Dict[str, Any]:
        """`mtopjsonp1({...})` → dict; будь-яка невідповідність → MalformedResponse."""
        match = self._callback_re.search(text or "")
        if not match:
            raise MalformedResponse("Invalid JSONP response format", details=(text or "")[:200], product_id=product_id)
        try:
            parsed = json.loads(match.group(1))
        except json.JSONDecodeError as exc:
            raise MalformedResponse("JSONP payload is not valid JSON", details=str(exc), product_id=product_id) from exc
        if not isinstance(parsed, dict):
            raise MalformedResponse("JSONP payload must be an object", product_id=product_id)
        return parsed

    # ================================
    # 📄 СТОРІНКА ТОВАРУ
    # ================================
    async def fetch_item_page(self, product_id: str) -> str:
        client = await self._get_client()
        url = self._settings.item_url(product_id)
        logger.debug("📄 GET %s", url, extra={"product_id": product_id})
        try:
            response = await client.get(url, headers={"accept": "text/html,application/xhtml+xml"})
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise convert_exception(exc, product_id=product_id) from exc
        return response.text


__all__ = ["MarketplaceGateway", "MarketplaceSettings", "TOKEN_COOKIE", "build_request_data"]
