"""
Link extraction and URL normalization utilities for SiteHarvest.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Protocol
from urllib.parse import urljoin, urlsplit, urlunsplit

from site_harvest.crawler.models import InvalidSeedError

_SKIPPED_PREFIXES = ("#", "mailto:")


class LinkSource(Protocol):
    def links(self) -> Iterable[str]: ...


_DEFAULT_PORTS = {"http": 80, "https": 443}


def remove_dot_segments(path: str) -> str:
    """Resolve ``.`` and ``..`` segments of an absolute path (RFC 3986, 5.2.4)."""
    segments = path.split("/")
    resolved: List[str] = []
    for segment in segments:
        if segment == "..":
            if len(resolved) > 1:
                resolved.pop()
        elif segment != ".":
            resolved.append(segment)
    if segments[-1] in (".", ".."):
        # "/a/b/.." names the directory "/a/"
        resolved.append("")
    return "/".join(resolved) or "/"


def canonicalize(url: str) -> str:
    """
    Canonical key of an absolute URL: lower-case scheme and host, no default
    port, dot segments resolved, ``/`` for an empty path, no fragment.

    Raises ValueError for URLs urllib cannot split (e.g. a broken IPv6 host
    or a non-numeric port).
    """
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    netloc = parts.netloc.lower()
    if netloc.endswith(":") or (parts.port is not None and parts.port == _DEFAULT_PORTS.get(scheme)):
        netloc = netloc[: netloc.rindex(":")]
    path = remove_dot_segments(parts.path) if parts.path else "/"
    return urlunsplit((scheme, netloc, path, parts.query, ""))


def canonical_seed(seed_url: str) -> str:
    """Validate the crawl seed and return its canonical form."""
    try:
        parts = urlsplit(seed_url.strip())
        hostname = parts.hostname
        canonical = canonicalize(seed_url.strip())
    except ValueError as exc:
        raise InvalidSeedError(f"Invalid seed URL {seed_url!r}: {exc}") from exc
    if parts.scheme.lower() not in ("http", "https") or not hostname:
        raise InvalidSeedError(f"Seed must be an absolute http(s) URL, got {seed_url!r}")
    return canonical


def normalize_link(href: str, base_url: str, seed_host: str) -> Optional[str]:
    """
    Resolve *href* against *base_url* and keep it only when it stays on
    *seed_host*. Returns the canonical URL or None.
    """
    raw = href.strip()
    if not raw or raw.startswith(_SKIPPED_PREFIXES):
        # an empty href resolves to the page itself
        return None
    try:
        absolute = urljoin(base_url, raw)
        if urlsplit(absolute).hostname != seed_host:
            return None
        return canonicalize(absolute)
    except ValueError:
        return None


def extract_links(document: LinkSource, base_url: str, seed_host: str) -> List[str]:
    """
    Same-host canonical links of *document*, deduplicated, in discovery order.
    """
    seen: set[str] = set()
    links: List[str] = []
    for href in document.links():
        url = normalize_link(href, base_url, seed_host)
        if url is not None and url not in seen:
            seen.add(url)
            links.append(url)
    return links
