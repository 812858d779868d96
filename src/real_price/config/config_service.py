# ⚙️ config_service.py
"""
⚙️ config_service.py — доступ до конфігурації конвеєра реальних цін.

🔹 Клас `ConfigService`:
- Завантажує конфігурацію з вбудованого config.yaml, необовʼязкового YAML-оверрайду та .env.
- Пріоритет (від нижчого до вищого): config.yaml → override YAML → змінні середовища.
- Надає метод .get("a.b", default) для доступу до будь-якого параметра.
- Не Singleton: екземпляр створює контейнер, тести — власні.
"""

# 🌐 Зовнішні бібліотеки
import yaml                                  # 📦 YAML-парсинг
from dotenv import load_dotenv              # 🔐 Завантаження змінних із .env

# 🔠 Системні імпорти
import os                                   # 📁 Доступ до змінних середовища
import logging                              # 🧾 Логування
from pathlib import Path                    # 📁 Побудова шляху до файлів
from typing import Any, Callable, Dict, Mapping, Optional, Union

logger = logging.getLogger("real_price.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"

# 🔐 Змінна середовища → крапковий ключ конфігурації
ENV_KEYS: Dict[str, str] = {
    "REAL_PRICE_STORAGE_FILE": "storage.file",
    "REAL_PRICE_LOG_LEVEL": "logging.level",
    "REAL_PRICE_CACHE_DISABLED": "cache.disabled",
}
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


# ============================
# ⚙️ СЕРВІС ДОСТУПУ ДО КОНФІГІВ
# ============================
class ConfigService:
    """
    ⚙️ Обʼєднана конфігурація з YAML та .env.
    """

    def __init__(
        self,
        config_path: Union[str, Path, None] = None,
        *,
        override_path: Union[str, Path, None] = None,
        env: Optional[Mapping[str, Optional[str]]] = None,
        load_env_file: bool = True,
    ) -> None:
        self._config: Dict[str, Any] = {}
        self._config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._override_path = Path(override_path) if override_path else None
        self._load_all_configs(env, load_env_file)

    def _load_all_configs(self, env: Optional[Mapping[str, Optional[str]]], load_env_file: bool) -> None:
        """
        📥 Завантажує всі джерела конфігурації в один словник.
        """
        # --- 1. Вбудований YAML ---
        self._deep_update(self._config, self._read_yaml(self._config_path))

        # --- 2. YAML-оверрайд ---
        if self._override_path is not None:
            self._deep_update(self._config, self._read_yaml(self._override_path))

        # --- 3. .env змінні ---
        if env is None:
            if load_env_file:
                logger.debug("🔐 Завантаження змінних з .env")
                load_dotenv()
            env = os.environ
        env_vars = {dotted: env.get(name) for name, dotted in ENV_KEYS.items() if env.get(name) is not None}
        if "cache.disabled" in env_vars:
            env_vars["cache.disabled"] = _parse_bool(env_vars["cache.disabled"])
        self._deep_update(self._config, self._unflatten_dict(env_vars))

        logger.debug("✅ Конфігурацію завантажено: %s", sorted(self._config))

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning("⚠️ Файл конфігурації не знайдено: %s", path)
            return {}
        except yaml.YAMLError as e:
            logger.warning("⚠️ Не вдалося розібрати %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("⚠️ %s має містити обʼєкт верхнього рівня", path)
            return {}
        return data

    def get(self, key: str, default: Any = None, *, cast: Optional[Callable[[Any], Any]] = None) -> Any:
        """
        🔑 Отримує значення конфігурації за ключем (наприклад: 'admission.api.max_requests').

        Args:
            key (str): Ключ у форматі з крапкою.
            default (Any): Значення за замовчуванням, якщо ключ не знайдено.
            cast: Необовʼязкове перетворення знайденого значення (помилка → default).
        """
        value: Any = self._config
        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        if cast is not None and value is not None:
            try:
                return cast(value)
            except (TypeError, ValueError):
                logger.warning("⚠️ Ключ '%s' має некоректне значення %r", key, value)
                return default
        return value

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        if value is None:
            return default
        return _parse_bool(value)

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._config)

    # ===============================
    # 🔧 ДОПОМІЖНІ МЕТОДИ ЗЛИТТЯ КОНФІГІВ
    # ===============================
    @staticmethod
    def _unflatten_dict(d: Mapping[str, Any]) -> Dict[str, Any]:
        """
        🔁 'storage.file' → {'storage': {'file': ...}}
        """
        result: Dict[str, Any] = {}
        for key, value in d.items():
            parts = key.split(".")
            d_ref = result
            for part in parts[:-1]:
                d_ref = d_ref.setdefault(part, {})
            d_ref[parts[-1]] = value
        return result

    def _deep_update(self, source: Dict[str, Any], overrides: Mapping[str, Any]) -> None:
        """
        🔁 Рекурсивно обʼєднує два словники; вкладені dict зливаються, решта перезаписується.
        """
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(source.get(key), dict):
                self._deep_update(source[key], value)
            else:
                source[key] = value


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    logger.warning("⚠️ Неочікуване булеве значення %r → False", value)
    return False


__all__ = ["ConfigService", "DEFAULT_CONFIG_PATH", "ENV_KEYS"]
