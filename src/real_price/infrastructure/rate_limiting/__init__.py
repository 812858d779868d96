"""
🚦 Пейсинг вихідних викликів.
"""

from __future__ import annotations

from .admission_controller import AdmissionConfig, AdmissionController

__all__ = ["AdmissionConfig", "AdmissionController"]
