# 📜 real_price/shared/utils/logger.py
"""
📜 Єдина схема логування для конвеєра реальних цін.

🔹 Ініціалізує кореневий логер `real_price` із консоллю та файлом з ротацією.
🔹 Підтримує JSON-формат файлу та приглушення шумних сторонніх бібліотек (httpx, httpcore).
🔹 Надає `get_logger()` для дочірніх логерів через спільний префікс.
"""
from __future__ import annotations

# 🔠 Системні імпорти
import json                                                         # 📦 Серіалізація payload логів
import logging                                                      # 🪵 Робота з логерами Python
import sys                                                          # 🧵 Потік stdout
import threading                                                    # 🔒 Захист ініціалізації
from dataclasses import dataclass, field                            # 🧱 DTO-конфіг логування
from logging.handlers import TimedRotatingFileHandler               # 📁 Хендлер з ротацією файлів
from pathlib import Path                                            # 📂 Шляхи до лог-файлів
from typing import Any, Dict, Mapping, Optional, Union              # 🧰 Типи

# ================================
# 🧾 КОНСТАНТИ МОДУЛЯ
# ================================
LOG_NAME: str = "real_price"                                        # 🏷️ Базовий префікс логерів
PLAIN_FORMAT: str = "%(asctime)s [%(levelname)s] - (%(name)s).%(funcName)s(%(lineno)d) - %(message)s"
CONSOLE_FORMAT: str = "[%(levelname).1s] %(message)s"
DEFAULT_SUPPRESS: Dict[str, str] = {"httpx": "WARNING", "httpcore": "WARNING"}

_RESERVED_ATTRS = frozenset(
    (
        "args", "asctime", "created", "exc_info", "exc_text", "filename",
        "levelno", "lineno", "module", "msecs", "message", "msg", "name",
        "pathname", "process", "processName", "relativeCreated", "stack_info",
        "thread", "threadName", "levelname", "funcName", "taskName",
    )
)

_lock = threading.Lock()


@dataclass
class LoggingConfig:
    """Налаштування логування з дефолтними значеннями."""
    level: str = "INFO"
    console: bool = True
    json: bool = False
    file: Optional[str] = "logs/real_price.log"                     # 📁 None → без файлового виводу
    when: str = "midnight"
    interval: int = 1
    backup_count: int = 7
    encoding: str = "utf-8"
    suppress: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_SUPPRESS))
    console_level: str = "INFO"
    file_level: str = "DEBUG"


# ================================
# 🧰 ФОРМАТТЕРИ
# ================================
class JsonFormatter(logging.Formatter):
    """Форматує записи у плоский JSON (разом з extra-полями, напр. `product_id`)."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "time": self.formatTime(record, datefmt="%Y-%m-%d %H:%M:%S"),
            "level": record.levelname,
            "name": record.name,
            "func": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():                  # 🔎 Custom extra-поля
            if key.startswith("_") or key in _RESERVED_ATTRS or key in payload:
                continue
            try:
                json.dumps(value)
                payload[key] = value
            except (TypeError, ValueError):                         # ⚠️ Несеріалізоване значення
                payload[key] = str(value)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


# ================================
# 🛠️ ДОПОМІЖНІ ФУНКЦІЇ
# ================================
def _to_level(value: Union[str, int, None], default: int) -> int:
    """Перетворює рядок/інт у числовий рівень логування."""
    if isinstance(value, int):
        return value
    if not value:
        return default
    return getattr(logging, str(value).upper(), default)


def _make_file_handler(cfg: LoggingConfig, fmt: logging.Formatter) -> logging.Handler:
    """Готує файловий хендлер із ротацією за часом."""
    log_path = Path(str(cfg.file))
    log_path.parent.mkdir(parents=True, exist_ok=True)              # 🧱 Гарантуємо існування директорії
    handler = TimedRotatingFileHandler(
        filename=str(log_path),
        when=cfg.when,
        interval=cfg.interval,
        backupCount=cfg.backup_count,
        encoding=cfg.encoding,
    )
    handler.setFormatter(fmt)
    return handler


def _suppress_third_party(suppress: Mapping[str, str]) -> None:
    """Знижує рівні логування для сторонніх бібліотек."""
    for name, level in (suppress or {}).items():
        logging.getLogger(name).setLevel(_to_level(level, logging.WARNING))


# ================================
# 🚀 ПУБЛІЧНИЙ API
# ================================
def init_logging(
    *,
    level: Optional[str] = None,
    console: Optional[bool] = None,
    json_mode: Optional[bool] = None,
    file: Optional[str] = None,
    suppress: Optional[Dict[str, str]] = None,
    console_level: Optional[Union[str, int]] = None,
    file_level: Optional[Union[str, int]] = None,
) -> logging.Logger:
    """Ініціалізує логер `real_price` за єдиною схемою (повторний виклик переналаштовує)."""
    with _lock:
        cfg = LoggingConfig(
            level=level or "INFO",
            console=True if console is None else bool(console),
            json=bool(json_mode),
            file=file if file is not None else LoggingConfig.file,
            suppress={**DEFAULT_SUPPRESS, **(suppress or {})},
            console_level=str(console_level or level or "INFO"),
            file_level=str(file_level or level or "DEBUG"),
        )

        root_logger = logging.getLogger(LOG_NAME)
        root_logger.setLevel(
            min(
                _to_level(cfg.level, logging.INFO),
                _to_level(cfg.console_level, logging.INFO),
                _to_level(cfg.file_level, logging.DEBUG),
            )
        )

        for handler in list(root_logger.handlers):                  # 🧹 Прибираємо попередні хендлери
            if isinstance(handler, (logging.StreamHandler, TimedRotatingFileHandler)):
                root_logger.removeHandler(handler)
                handler.close()

        if cfg.console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
            console_handler.setLevel(_to_level(cfg.console_level, logging.INFO))
            root_logger.addHandler(console_handler)

        if cfg.file:                                                # 📁 Порожній рядок вимикає файл
            fmt_file = JsonFormatter() if cfg.json else logging.Formatter(PLAIN_FORMAT)
            file_handler = _make_file_handler(cfg, fmt_file)
            file_handler.setLevel(_to_level(cfg.file_level, logging.DEBUG))
            root_logger.addHandler(file_handler)

        _suppress_third_party(cfg.suppress)

        root_logger.info(
            "✅ Logging initialized | level=%s console=%s json=%s file=%s",
            cfg.level.upper(),
            "ON" if cfg.console else "OFF",
            "ON" if cfg.json else "OFF",
            cfg.file or "OFF",
        )
        return root_logger


def init_logging_from_config(config: Optional[Mapping[str, Any]]) -> logging.Logger:
    """
    Ініціалізує логування на базі розділу `logging` з ConfigService.

    Args:
        config: Словник налаштувань (level, console, json, file, suppress, ...).

    Returns:
        logging.Logger: Налаштований логер `real_price`.
    """
    node = config or {}
    return init_logging(
        level=node.get("level"),
        console=node.get("console"),
        json_mode=node.get("json"),
        file=node.get("file"),
        suppress=node.get("suppress"),
        console_level=node.get("console_level"),
        file_level=node.get("file_level"),
    )


def get_logger(suffix: Optional[str] = None) -> logging.Logger:
    """Повертає дочірній логер із префіксом `LOG_NAME`."""
    logger_name = LOG_NAME if not suffix else f"{LOG_NAME}.{suffix}"
    return logging.getLogger(logger_name)
