# 💽 real_price/infrastructure/data_storage/json_file_storage.py
"""
💽 JsonFileStorage — асинхронне key→string сховище в одному JSON-файлі.

🔹 Реалізує контракт `IKeyValueStorage` (`load` / `save`) поверх aiofiles.
🔹 Запис атомарний: tmp-файл + `os.replace`.
🔹 `MemoryStorage` — in-process реалізація для тестів і режиму без диску.
"""

from __future__ import annotations

# 🌐 Зовнішні бібліотеки
import aiofiles                                                     # 📄 Асинхронне читання/запис JSON-файлу

# 🔠 Системні імпорти
import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

# 🧩 Внутрішні модулі проєкту
from real_price.shared.utils.logger import LOG_NAME

logger = logging.getLogger(f"{LOG_NAME}.storage")


# ================================
# 💽 ФАЙЛОВЕ СХОВИЩЕ
# ================================
class JsonFileStorage:
    """💽 Усі ключі живуть в одному JSON-обʼєкті `{key: serialized_value}`."""

    def __init__(self, file_path: str, *, ensure_dir: bool = True) -> None:
        self._file_path = str(file_path)
        self._lock = asyncio.Lock()                                 # 🔐 Серіалізуємо read-modify-write

        if ensure_dir:
            try:
                Path(self._file_path).parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                logger.warning("⚠️ Не вдалося створити директорію для %s: %s", self._file_path, exc)

        logger.info("💽 JsonFileStorage init (file=%s)", self._file_path)

    @property
    def file_path(self) -> str:
        return self._file_path

    async def load(self, key: str) -> Optional[str]:
        """📖 Повертає збережений рядок або None."""
        async with self._lock:
            data = await self._read_all()
        value = data.get(key)
        return value if isinstance(value, str) else None

    async def save(self, key: str, value: str) -> None:
        """💾 Записує рядок під ключем (решта ключів зберігається)."""
        async with self._lock:
            data = await self._read_all()
            data[key] = value
            await self._write_all(data)

    # ================================
    # 🧠 ВНУТРІШНЯ ЛОГІКА
    # ================================
    async def _read_all(self) -> Dict[str, str]:
        try:
            async with aiofiles.open(self._file_path, "r", encoding="utf-8") as file_handle:
                content = await file_handle.read()
        except FileNotFoundError:
            logger.debug("📄 Файл сховища ще не існує: %s", self._file_path)
            return {}
        try:
            raw = json.loads(content) if content.strip() else {}
        except json.JSONDecodeError as exc:
            logger.warning("⚠️ Пошкоджений файл сховища %s (%s) — стартуємо з порожнього.", self._file_path, exc)
            return {}
        if not isinstance(raw, dict):
            logger.warning("⚠️ Очікувався JSON-обʼєкт у %s, отримано %s", self._file_path, type(raw).__name__)
            return {}
        return {str(key): value for key, value in raw.items()}

    async def _write_all(self, data: Dict[str, str]) -> None:
        payload = json.dumps(data, ensure_ascii=False)
        tmp_path = f"{self._file_path}.tmp"
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as file_handle:
            await file_handle.write(payload)
        os.replace(tmp_path, self._file_path)                       # 🔀 Атомарно підміняємо
        logger.debug("💾 Сховище збережено (%d ключ(ів)) → %s", len(data), self._file_path)


# ================================
# 🧠 СХОВИЩЕ В ПАМʼЯТІ
# ================================
class MemoryStorage:
    """🧠 Словник у памʼяті з тим самим async-контрактом."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})
        self.save_count = 0                                         # 🔢 Кількість записів (для тестів)

    async def load(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def save(self, key: str, value: str) -> None:
        self.data[key] = value
        self.save_count += 1


__all__ = ["JsonFileStorage", "MemoryStorage"]
