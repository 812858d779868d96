"""
💽 Довговічні сховища знімків кешу.
"""

from __future__ import annotations

from .json_file_storage import JsonFileStorage, MemoryStorage

__all__ = ["JsonFileStorage", "MemoryStorage"]
