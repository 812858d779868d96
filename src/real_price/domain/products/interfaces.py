# 🧩 real_price/domain/products/interfaces.py
"""
🧩 Контракти колабораторів, від яких залежить ядро (мережа, сховище), та вхідні DTO.
"""

from __future__ import annotations

# 🔠 Системні імпорти
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

# 🧩 Внутрішні модулі проєкту
from .entities import Product


# ================================
# 🏛️ ВХІДНІ DTO
# ================================
@dataclass(frozen=True, slots=True)
class BasicSnippet:
    """Мінімальний текстовий фрагмент картки товару, вже видимий на сторінці."""

    title_text: str = ""
    price_text: str = ""
    original_price_text: str = ""                                   # 🏷️ Закреслена ціна, якщо є
    shipping_text: str = ""
    discount_text: str = ""


# ================================
# 💾 СХОВИЩЕ
# ================================
class IKeyValueStorage(Protocol):
    """Довговічне сховище серіалізованих знімків."""

    async def load(self, key: str) -> Optional[str]: ...

    async def save(self, key: str, value: str) -> None: ...


# ================================
# 🌐 МЕРЕЖА
# ================================
class IMarketplaceGateway(Protocol):
    """Мережевий колаборатор маркетплейсу."""

    async def ensure_session(self) -> None:
        """Отримує токен сесії як побічний ефект запиту до кореня сайту."""

    async def fetch_product_api(self, product_id: str) -> Dict[str, Any]:
        """Один підписаний запит до структурованого API (розпакований конверт)."""

    async def fetch_item_page(self, product_id: str) -> str:
        """Сирий HTML сторінки товару."""


class IProductCache(Protocol):
    """Кеш Product за ключем."""

    async def get(self, key: str) -> Optional[Product]: ...

    async def set(self, key: str, data: Product, config: Any = None) -> None: ...

    async def clear(self) -> None: ...


__all__ = ["BasicSnippet", "IKeyValueStorage", "IMarketplaceGateway", "IProductCache"]
