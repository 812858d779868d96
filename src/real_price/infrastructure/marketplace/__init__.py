"""
🌐 Мережевий шар маркетплейсу: сесія, підписане API, сторінка товару.
"""

from __future__ import annotations

from .gateway import MarketplaceGateway, MarketplaceSettings, TOKEN_COOKIE, build_request_data
from .signing import compact_json, generate_sign, token_from_cookie

__all__ = [
    "MarketplaceGateway",
    "MarketplaceSettings",
    "TOKEN_COOKIE",
    "build_request_data",
    "compact_json",
    "generate_sign",
    "token_from_cookie",
]
