"""
Data models for the SiteHarvest crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from site_harvest.config import MAX_PAGE_LIMIT


class InvalidSeedError(ValueError):
    """The seed is not an absolute http(s) URL; nothing was fetched."""


@dataclass(slots=True, frozen=True)
class CrawlTarget:
    """What to crawl and who owns the result. Built per invocation."""

    seed_url: str
    project_id: str
    page_limit: int = MAX_PAGE_LIMIT


@dataclass(slots=True, frozen=True)
class ScrapedPage:
    """Visible text of one page, keyed by ``(url, project_id)``."""

    url: str
    project_id: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"url": self.url, "projectId": self.project_id, "content": self.content}


@dataclass(slots=True)
class CrawlResult:
    """Summary of one crawl run."""

    created: int = 0
    visited_count: int = 0
    failed: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {"createdCount": self.created, "visited": self.visited_count, "failed": list(self.failed)}
