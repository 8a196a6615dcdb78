"""
Shared fixtures: offline stand-ins for the web text source and a
language directory builder.
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest

from lpg_core.errors import FetchError


class FakeTextSource:
    """Serves canned text per URL; exceptions in the map are raised"""

    def __init__(self, pages: Optional[Dict[str, Union[str, Exception]]] = None):
        self.pages = pages or {}
        self.requested: List[str] = []
        self.closed = False

    def fetch_text(self, url: str) -> str:
        self.requested.append(url)
        page = self.pages.get(url)
        if page is None:
            raise FetchError(url, "got response 404 Not Found", status_code=404)
        if isinstance(page, Exception):
            raise page
        return page

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


@pytest.fixture
def fake_source():
    return FakeTextSource()


@pytest.fixture
def make_language_dir(tmp_path):
    """Create <tmp>/<lang>/ with any of the standard input files"""

    def _make(
        language: str,
        properties: Optional[str] = None,
        stopwords: Optional[List[str]] = None,
        urls: Optional[List[str]] = None,
        strings: Optional[str] = None
    ) -> Path:
        directory = tmp_path / language
        directory.mkdir(exist_ok=True)
        if properties is not None:
            (directory / f"{language}.properties").write_text(properties, encoding="utf-8")
        if stopwords is not None:
            (directory / "stopwords.txt").write_text("\n".join(stopwords) + "\n", encoding="utf-8")
        if urls is not None:
            (directory / f"{language}.urls").write_text("\n".join(urls) + "\n", encoding="utf-8")
        if strings is not None:
            (directory / f"{language}.strings").write_text(strings, encoding="utf-8")
        return directory

    return _make
