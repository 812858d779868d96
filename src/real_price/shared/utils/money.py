# 💵 real_price/shared/utils/money.py
"""
💵 Дрібні грошові утиліти: форматування сум і витягування чисел із тексту.

🔹 `format_price` повторює en-US формат валюти (`$1,234.56`).
🔹 `extract_price_value` бере перше числове входження та прибирає коми.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import re                                                           # 🧪 Патерни чисел
from typing import Any, Optional

_CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£"}
_NUMBER_RE = re.compile(r"\d[\d,]*(?:\.\d+)?")                    # 🔢 Хвостова крапка (`$12.99.`) не входить у число


def format_price(value: Any, currency: str = "USD") -> str:
    """Форматує суму як en-US валюту; невалідне значення → 0."""
    amount = to_float(value) or 0.0
    symbol = _CURRENCY_SYMBOLS.get(currency.upper())
    sign = "-" if amount < 0 else ""
    body = f"{abs(amount):,.2f}"
    if symbol:
        return f"{sign}{symbol}{body}"
    return f"{sign}{currency.upper()} {body}"                  # 🌐 Невідома валюта → ISO-код


def to_float(value: Any) -> Optional[float]:
    """Повертає float для чисел і числових рядків, інакше None (bool не рахується)."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return None if number != number else number                 # 🚫 NaN
    if isinstance(value, str):
        try:
            return float(value.strip().replace(",", ""))
        except ValueError:
            return None
    return None


def extract_price_value(text: Optional[str]) -> float:
    """
    Витягує першу числову підстроку з тексту (без ком).

    `"US $1,299.00"` → `1299.0`; нічого не знайдено або сміття на кшталт `"."` → `0.0`.
    """
    if not text:
        return 0.0
    match = _NUMBER_RE.search(text)
    if not match:
        return 0.0
    try:
        return float(match.group(0).replace(",", ""))
    except ValueError:
        return 0.0
