# File: tests/conftest.py
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Union

import pytest

from site_harvest.config import HarvestConfig
from site_harvest.crawler.fetcher import FetchError
from site_harvest.logger import LOGGER_NAME
from site_harvest.store import MemoryPageStore


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


class FakeFetcher:
    """
    Serves canned HTML keyed by URL and records every fetch attempt.

    A value that is an exception instance is raised instead of returned;
    unknown URLs raise FetchError like a 404 would.
    """

    def __init__(self, pages: Dict[str, Union[str, Exception]]) -> None:
        self.pages = pages
        self.calls: List[str] = []

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        body = self.pages.get(url)
        if body is None:
            raise FetchError(url, "HTTP 404")
        if isinstance(body, Exception):
            raise body
        return body


def html(*hrefs: str, text: str = "", body: Optional[str] = None) -> str:
    """Build a small page: *text* followed by one anchor per href."""
    anchors = "".join(f'<a href="{h}">{h}</a>' for h in hrefs)
    inner = body if body is not None else f"<p>{text}</p>{anchors}"
    return f"<html><head><title>t</title></head><body>{inner}</body></html>"


@pytest.fixture()
def memory_store() -> MemoryPageStore:
    return MemoryPageStore()


@pytest.fixture()
def basic_config(tmp_path) -> HarvestConfig:
    """Settings with a short timeout and a store inside tmp_path."""
    return HarvestConfig(
        page_limit=50,
        timeout=1.0,
        user_agent="TestAgent/1.0",
        store_path=tmp_path / "pages.json",
    )


@pytest.fixture(autouse=True)
def reset_logger():
    """CLI tests reconfigure the project logger; hand it back to caplog afterwards."""
    yield
    lg = logging.getLogger(LOGGER_NAME)
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
        handler.close()
    lg.propagate = True
    lg.setLevel(logging.NOTSET)
