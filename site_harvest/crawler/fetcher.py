"""
Fetcher module: one GET per call, bounded by a timeout, no retries.
"""
from __future__ import annotations

import asyncio
from typing import Optional, Protocol

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_harvest.config import DEFAULT_USER_AGENT

_HTML_TYPES = ("text/html", "application/xhtml+xml")


class FetchError(Exception):
    """A page could not be fetched or decoded. Never fatal to a crawl."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class Fetcher(Protocol):
    """Anything that turns a URL into an HTML body or raises FetchError."""

    async def fetch(self, url: str) -> str: ...


class HttpFetcher:
    """aiohttp-backed fetcher. Use as an async context manager."""

    def __init__(self, timeout: float = 15.0, user_agent: str = DEFAULT_USER_AGENT) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self.session: Optional[ClientSession] = None

    async def __aenter__(self) -> HttpFetcher:
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.timeout),
            headers={"User-Agent": self.user_agent},
            raise_for_status=False,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def fetch(self, url: str) -> str:
        """
        Return the decoded body of *url*.

        Raises FetchError on network errors, timeouts, non-2xx statuses,
        non-HTML content types and bodies that cannot be decoded.
        """
        if not self.session:
            raise RuntimeError("Session not initialized")
        try:
            async with self.session.get(url) as resp:
                if not 200 <= resp.status < 300:
                    raise FetchError(url, f"HTTP {resp.status}")
                mime = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
                if mime and mime not in _HTML_TYPES:
                    raise FetchError(url, f"unsupported content type {mime}")
                return await resp.text()
        except asyncio.TimeoutError as exc:
            raise FetchError(url, f"timed out after {self.timeout} s") from exc
        except ClientError as exc:
            raise FetchError(url, str(exc) or type(exc).__name__) from exc
        except (UnicodeDecodeError, LookupError) as exc:
            raise FetchError(url, f"undecodable body: {exc}") from exc
