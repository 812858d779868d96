# ⚙️ real_price/config/__init__.py
"""
⚙️ Пакет Config — конфігурація (.env, config.yaml) та DI-контейнер.
"""

from typing import TYPE_CHECKING

from .config_service import ConfigService

if TYPE_CHECKING:  # лише для підказок типів, без імпорту під час рантайму
    from .setup.container import Container

__all__ = ["ConfigService", "Container"]


def __getattr__(name: str):
    if name == "Container":
        from .setup.container import Container  # локальний імпорт → немає циклу

        return Container
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
