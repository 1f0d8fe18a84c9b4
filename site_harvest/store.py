"""site_harvest.store: key-value storage of scraped pages, keyed by ``(url, project_id)``."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Union

from site_harvest.crawler.models import ScrapedPage
from site_harvest.logger import logger

__all__ = ("PageStore", "StoreError", "MemoryPageStore", "JsonPageStore")


class StoreError(Exception):
    """The page store could not read or write its data."""


class PageStore(Protocol):
    def upsert(self, url: str, project_id: str, content: str) -> None: ...

    def get(self, url: str, project_id: str) -> Optional[ScrapedPage]: ...

    def list_pages(self, project_id: str) -> List[ScrapedPage]: ...

    def delete(self, project_id: str, url: Optional[str] = None) -> int: ...


class MemoryPageStore:
    """In-process store. Insertion order is kept; re-upserting keeps a page's position."""

    def __init__(self) -> None:
        self._projects: Dict[str, Dict[str, str]] = {}

    def upsert(self, url: str, project_id: str, content: str) -> None:
        if not content:
            raise ValueError("refusing to store a page with empty content")
        self._projects.setdefault(project_id, {})[url] = content

    def get(self, url: str, project_id: str) -> Optional[ScrapedPage]:
        content = self._projects.get(project_id, {}).get(url)
        return None if content is None else ScrapedPage(url, project_id, content)

    def list_pages(self, project_id: str) -> List[ScrapedPage]:
        """Pages of *project_id*, most recently created first."""
        pages = self._projects.get(project_id, {})
        return [ScrapedPage(url, project_id, content) for url, content in reversed(pages.items())]

    def delete(self, project_id: str, url: Optional[str] = None) -> int:
        pages = self._projects.get(project_id)
        if not pages:
            return 0
        if url is None:
            del self._projects[project_id]
            return len(pages)
        if pages.pop(url, None) is None:
            return 0
        if not pages:
            del self._projects[project_id]
        return 1


class JsonPageStore(MemoryPageStore):
    """
    File-backed store: the whole mapping lives in one JSON document,
    ``{"projects": {project_id: {url: content}}}``.

    Every mutation rewrites the file through a temporary file and
    :func:`os.replace`, so readers never see a half-written document.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        super().__init__()
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Cannot read page store {self.path}: {exc}") from exc
        projects = data.get("projects", {}) if isinstance(data, dict) else None
        if not isinstance(projects, dict):
            raise StoreError(f"Malformed page store {self.path}: 'projects' must be a mapping")
        loaded: Dict[str, Dict[str, str]] = {}
        for pid, pages in projects.items():
            if not isinstance(pages, dict) or not all(isinstance(c, str) for c in pages.values()):
                raise StoreError(f"Malformed page store {self.path}: project {pid!r} must map URLs to text")
            loaded[str(pid)] = pages
        self._projects = loaded
        logger.debug("Loaded %d project(s) from %s", len(self._projects), self.path)

    def _flush(self) -> None:
        payload = json.dumps({"projects": self._projects}, ensure_ascii=False, indent=2)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp, self.path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StoreError(f"Cannot write page store {self.path}: {exc}") from exc

    def upsert(self, url: str, project_id: str, content: str) -> None:
        if self._projects.get(project_id, {}).get(url) == content:
            return
        super().upsert(url, project_id, content)
        self._flush()

    def delete(self, project_id: str, url: Optional[str] = None) -> int:
        removed = super().delete(project_id, url)
        if removed:
            self._flush()
        return removed
