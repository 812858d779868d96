"""
🧾 Парсери відповідей маркетплейсу: API-конверт, вбудований JSON сторінки, текстовий фрагмент.
"""

from __future__ import annotations

from .json_paths import dig, first_int_in, first_number, first_value
from .page_extractor import PageEmbedding, PageEmbeddingExtractor
from .product_parser import ACCESSORY_KEYWORDS, ProductParser, is_accessory
from .snippet_parser import BasicSnippetParser

__all__ = [
    "ACCESSORY_KEYWORDS",
    "BasicSnippetParser",
    "PageEmbedding",
    "PageEmbeddingExtractor",
    "ProductParser",
    "dig",
    "first_int_in",
    "first_number",
    "first_value",
    "is_accessory",
]
