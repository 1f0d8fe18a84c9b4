"""
Wrapper that wires the HTTP fetcher, the crawler and a page store together.
"""
import asyncio
from typing import Optional

from site_harvest.config import HarvestConfig
from site_harvest.crawler.crawler import SiteCrawler
from site_harvest.crawler.fetcher import HttpFetcher
from site_harvest.crawler.models import CrawlResult, CrawlTarget
from site_harvest.store import PageStore


async def start_crawl(
    cfg: HarvestConfig,
    target: CrawlTarget,
    store: PageStore,
    cancel: Optional[asyncio.Event] = None,
) -> CrawlResult:
    """
    Crawl *target* with a fresh HTTP session and return the run summary.

    Parameters
    ----------
    cfg : HarvestConfig
        Timeout and User-Agent of every request.
    target : CrawlTarget
        Seed URL, owning project and page limit.
    store : PageStore
        Where extracted page text is upserted.
    cancel : asyncio.Event, optional
        Set it to stop the crawl before the next fetch.

    Raises
    ------
    InvalidSeedError
        If the seed is not an absolute http(s) URL.
    """
    async with HttpFetcher(timeout=cfg.timeout, user_agent=cfg.user_agent) as fetcher:
        return await SiteCrawler(fetcher, store).crawl(target, cancel=cancel)


__all__ = ["start_crawl"]
