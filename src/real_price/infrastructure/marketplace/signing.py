# 🔏 real_price/infrastructure/marketplace/signing.py
"""
🔏 Підпис запиту до структурованого API: `md5("{token}&{t}&{appKey}&{data}")`.

Тіло серіалізується компактно (без пробілів), як це робить браузерний `JSON.stringify`,
інакше підпис не співпаде з тим, що перевіряє сервер.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Optional


def compact_json(payload: Any) -> str:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def generate_sign(token: str, timestamp: int, app_key: str, data: str) -> str:
    """Hex MD5 рядка `token&timestamp&appKey&data`."""
    raw = f"{token}&{timestamp}&{app_key}&{data}"
    return hashlib.md5(raw.encode("utf-8")).hexdigest()


def token_from_cookie(cookie_value: Optional[str]) -> Optional[str]:
    """`_m_h5_tk = "<token>_<expiry>"` → `<token>`; порожнє → None."""
    if not cookie_value:
        return None
    token = cookie_value.split("_", 1)[0].strip()
    return token or None


__all__ = ["compact_json", "generate_sign", "token_from_cookie"]
