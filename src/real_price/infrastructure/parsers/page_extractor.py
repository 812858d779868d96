# 🧩 real_price/infrastructure/parsers/page_extractor.py
"""
🧩 PageEmbeddingExtractor — дістає вбудований JSON товару з HTML сторінки.

🔹 Патерни перевіряються по черзі; перший, що успішно парситься, виграє:
    1) `runParams.data = {...};`
    2) `window.__INITIAL_STATE__ = {...}` → `productDetail.data`
    3) атрибут `data-pdp-json`
    4) `window.runParams = {...}` → `data`
🔹 JSON вирізається через `JSONDecoder.raw_decode`, тож `};` всередині рядків не ламає розбір.
🔹 Назва `<h1>` віддається як запасний заголовок.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

# 🌐 Сторонні бібліотеки
from bs4 import BeautifulSoup, Tag

# 🧩 Внутрішні модулі проєкту
from real_price.shared.utils.logger import LOG_NAME

from .json_paths import dig

logger = logging.getLogger(f"{LOG_NAME}.parsers.page")

_DECODER = json.JSONDecoder()
_RUN_PARAMS_DATA_RE = re.compile(r"runParams\.data\s*=\s*")
_INITIAL_STATE_RE = re.compile(r"window\.__INITIAL_STATE__\s*=\s*")
_WINDOW_RUN_PARAMS_RE = re.compile(r"window\.runParams\s*=\s*")


@dataclass(frozen=True, slots=True)
class PageEmbedding:
    """Результат екстракції: blob товару + назва з розмітки."""

    data: Dict[str, Any]
    title: str = ""
    pattern: str = ""


def _try_json_loads(raw: str) -> Optional[Any]:
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return None


def _decode_after(pattern: re.Pattern[str], text: str) -> Optional[Any]:
    """Декодує JSON-обʼєкт, що починається одразу після `pattern`."""
    for match in pattern.finditer(text):
        start = match.end()
        if start >= len(text) or text[start] != "{":
            continue
        try:
            obj, _ = _DECODER.raw_decode(text, start)
        except ValueError:
            continue
        return obj
    return None


class PageEmbeddingExtractor:
    """🧩 HTML → `PageEmbedding` або None."""

    def __init__(self, parser: str = "lxml") -> None:
        self._parser = parser

    def extract(self, html: str) -> Optional[PageEmbedding]:
        if not html:
            return None
        soup = BeautifulSoup(html, self._parser)
        scripts = self._script_texts(soup)
        title = self._title(soup)

        strategies: List[Tuple[str, Callable[[], Optional[Any]]]] = [
            ("runParams.data", lambda: self._from_scripts(scripts, _RUN_PARAMS_DATA_RE, None)),
            ("__INITIAL_STATE__", lambda: self._from_scripts(scripts, _INITIAL_STATE_RE, "productDetail.data")),
            ("data-pdp-json", lambda: self._from_attribute(soup)),
            ("window.runParams", lambda: self._from_scripts(scripts, _WINDOW_RUN_PARAMS_RE, "data")),
        ]
        for name, strategy in strategies:
            data = strategy()
            if isinstance(data, dict) and data:
                logger.debug("🧩 Вбудовані дані знайдено через %s", name)
                return PageEmbedding(data=data, title=title, pattern=name)

        logger.debug("🚫 Жоден патерн вбудованих даних не спрацював")
        return None

    # ================================
    # 🔍 ПАТЕРНИ
    # ================================
    @staticmethod
    def _script_texts(soup: BeautifulSoup) -> List[str]:
        texts: List[str] = []
        for script in soup.find_all("script"):
            if not isinstance(script, Tag):
                continue
            raw = script.string or script.get_text() or ""
            if raw.strip():
                texts.append(raw)
        return texts

    @staticmethod
    def _from_scripts(scripts: List[str], pattern: re.Pattern[str], path: Optional[str]) -> Optional[Any]:
        for text in scripts:
            obj = _decode_after(pattern, text)
            if obj is None:
                continue
            found = dig(obj, path) if path else obj
            if isinstance(found, dict):
                return found
        return None

    @staticmethod
    def _from_attribute(soup: BeautifulSoup) -> Optional[Any]:
        node = soup.select_one("[data-pdp-json]")
        if not isinstance(node, Tag):
            return None
        raw = node.get("data-pdp-json")
        if isinstance(raw, list):                                   # bs4 може віддати multi-valued атрибут
            raw = " ".join(raw)
        return _try_json_loads(raw or "")

    @staticmethod
    def _title(soup: BeautifulSoup) -> str:
        h1 = soup.find("h1")
        return h1.get_text(" ", strip=True) if isinstance(h1, Tag) else ""


__all__ = ["PageEmbedding", "PageEmbeddingExtractor"]
