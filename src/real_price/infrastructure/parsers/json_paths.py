# 🧭 real_price/infrastructure/parsers/json_paths.py
"""
🧭 Проби шляхів у вкладеному JSON: одне логічне поле → впорядкований список кандидатів.

🔹 `dig(obj, "a.b.0.c")` — безпечний доступ (dict-ключі та індекси списків).
🔹 `first_number(obj, paths)` — перший шлях, що дає придатне число, виграє (без злиття).
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Optional

from real_price.shared.utils.money import extract_price_value, to_float

_MISSING = object()
_INT_RE = re.compile(r"\d+")


def dig(obj: Any, path: str, default: Any = None) -> Any:
    """Повертає значення за крапковим шляхом або `default`."""
    current = obj
    for part in path.split("."):
        if isinstance(current, dict):
            current = current.get(part, _MISSING)
        elif isinstance(current, (list, tuple)) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else _MISSING
        else:
            return default
        if current is _MISSING or current is None:
            return default
    return current


def first_value(obj: Any, paths: Iterable[str]) -> Any:
    """Перше не-None / непорожнє значення серед шляхів."""
    for path in paths:
        value = dig(obj, path)
        if value not in (None, ""):
            return value
    return None


def first_number(obj: Any, paths: Iterable[str], *, parse_text: bool = False) -> Optional[float]:
    """
    Перше придатне додатне число серед шляхів.

    `parse_text=True` дозволяє рядки з валютою (`"US $12.34"`) через витяг першого числа.
    Нуль вважається «непридатним» значенням, як і відсутність поля.
    """
    for path in paths:
        value = dig(obj, path)
        number = to_float(value)
        if number is None and parse_text and isinstance(value, str):
            number = extract_price_value(value)
        if number:                                                  # 🚫 None / 0 → наступний кандидат
            return number
    return None


def first_int_in(text: Any) -> Optional[str]:
    """Перша послідовність цифр у тексті (рядком) або None."""
    if not isinstance(text, str):
        return None
    match = _INT_RE.search(text)
    return match.group(0) if match else None


__all__ = ["dig", "first_value", "first_number", "first_int_in"]
