from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from typing import Callable, Deque, Optional, Set
from urllib.parse import urlsplit

from site_harvest.crawler.fetcher import FetchError, Fetcher
from site_harvest.crawler.link_extractor import canonical_seed, extract_links
from site_harvest.crawler.models import CrawlResult, CrawlTarget
from site_harvest.logger import LOGGER_NAME
from site_harvest.parser.html_parser import ParseError, ParsedDocument, parse_html
from site_harvest.store import PageStore, StoreError

__all__ = ("SiteCrawler",)


class SiteCrawler:
    """
    Bounded breadth-first crawl of one host.

    Pages are fetched one at a time. The page limit is enforced when a link
    is admitted to the frontier, so ``visited + frontier`` never exceeds it.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        store: PageStore,
        parser: Callable[[str], ParsedDocument] = parse_html,
    ) -> None:
        self.fetcher = fetcher
        self.store = store
        self.parser = parser
        self.logger = logging.getLogger(LOGGER_NAME)

    async def crawl(self, target: CrawlTarget, cancel: Optional[asyncio.Event] = None) -> CrawlResult:
        seed = canonical_seed(target.seed_url)
        seed_host = urlsplit(seed).hostname
        limit = target.page_limit

        frontier: Deque[str] = deque([seed])
        queued: Set[str] = {seed}
        visited: Set[str] = set()
        result = CrawlResult()

        self.logger.info("Crawl started: %s (project %s, limit %d)", seed, target.project_id, limit)
        start = time.monotonic()

        while frontier and len(visited) < limit:
            if cancel is not None and cancel.is_set():
                self.logger.info("Crawl cancelled after %d page(s)", len(visited))
                break
            current = frontier.popleft()
            queued.discard(current)
            if current in visited:
                continue
            visited.add(current)

            document = await self._load(current, result)
            if document is None:
                continue

            self._persist(current, target.project_id, document, result)

            for link in extract_links(document, current, seed_host):
                if link in visited or link in queued:
                    continue
                if len(visited) + len(frontier) >= limit:
                    break
                frontier.append(link)
                queued.add(link)

        result.visited_count = len(visited)
        duration = time.monotonic() - start
        self.logger.info(
            "Crawl finished: %d visited, %d stored, %d failed in %.2f s",
            result.visited_count, result.created, len(result.failed), duration,
        )
        return result

    async def _load(self, url: str, result: CrawlResult) -> Optional[ParsedDocument]:
        try:
            body = await self.fetcher.fetch(url)
            document = self.parser(body)
        except (FetchError, ParseError) as exc:
            self.logger.warning("Failed to scrape %s: %s", url, exc)
            result.failed.append(url)
            return None
        self.logger.debug("Fetched %s", url)
        return document

    def _persist(self, url: str, project_id: str, document: ParsedDocument, result: CrawlResult) -> None:
        content = document.text()
        if not content:
            self.logger.debug("No visible text on %s, not stored", url)
            return
        try:
            self.store.upsert(url, project_id, content)
        except StoreError as exc:
            # links of the page are still followed
            self.logger.warning("Failed to store %s: %s", url, exc)
            result.failed.append(url)
            return
        result.created += 1
