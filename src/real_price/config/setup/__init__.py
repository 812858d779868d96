"""
⚙️ Збірка графа залежностей перед запуском.
"""

from .container import Container, bootstrap_logging, cache_configs_from

__all__ = ["Container", "bootstrap_logging", "cache_configs_from"]
