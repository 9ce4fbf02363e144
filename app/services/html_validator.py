"""Drift check against the HTML a running dev server actually renders.

:func:`validate_rendered_html` fetches one URL and extracts the same class of
metadata the document and framework parsers look for, plus Twitter cards,
JSON-LD and the first ``<h1>``.  It never raises: every failure is reported
through :class:`HtmlValidationResult`.
"""

import asyncio
import json
import logging
import re
from pathlib import PurePosixPath
from typing import Dict, List, Optional

import httpx
from bs4 import BeautifulSoup

from app.models.rendered import HtmlValidationResult, RenderedMetadata, SchemaOrgSummary
from app.services.fetcher import fetch_html

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 5000

_CONTENT_EXT_RE = re.compile(r"\.(mdx|md)$")


def _meta_content(soup: BeautifulSoup, attrs: Dict[str, str]) -> Optional[str]:
    tag = soup.find("meta", attrs=attrs)
    if tag and tag.get("content"):
        return str(tag["content"])
    return None


def _extract_title(soup: BeautifulSoup) -> Optional[str]:
    title_tag = soup.find("title")
    if title_tag:
        return title_tag.get_text(strip=True) or None
    return None


def _extract_canonical(soup: BeautifulSoup) -> Optional[str]:
    link_tag = soup.find("link", rel="canonical")
    if link_tag and link_tag.get("href"):
        return str(link_tag["href"])
    return None


def _extract_schema_org(soup: BeautifulSoup) -> SchemaOrgSummary:
    """Collect ``@type`` values from every parseable JSON-LD block."""
    types: List[str] = []
    count = 0

    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        raw = script.string or script.get_text() or ""
        try:
            data = json.loads(raw.strip() or "{}")
        except json.JSONDecodeError as exc:
            logger.debug("Skipping invalid JSON-LD block: %s", exc)
            continue
        count += 1

        for schema in data if isinstance(data, list) else [data]:
            if not isinstance(schema, dict):
                continue
            declared = schema.get("@type")
            for schema_type in declared if isinstance(declared, list) else [declared]:
                if isinstance(schema_type, str) and schema_type not in types:
                    types.append(schema_type)

    return SchemaOrgSummary(types=types, count=count)


def extract_rendered_metadata(html: str) -> RenderedMetadata:
    """Extract meta tags, JSON-LD and heading info from rendered *html*."""
    soup = BeautifulSoup(html, "lxml")
    h1 = soup.find("h1")

    return RenderedMetadata(
        title=_extract_title(soup),
        description=_meta_content(soup, {"name": "description"}),
        canonical=_extract_canonical(soup),
        og_title=_meta_content(soup, {"property": "og:title"}),
        og_description=_meta_content(soup, {"property": "og:description"}),
        og_image=_meta_content(soup, {"property": "og:image"}),
        og_url=_meta_content(soup, {"property": "og:url"}),
        og_type=_meta_content(soup, {"property": "og:type"}),
        twitter_card=_meta_content(soup, {"name": "twitter:card"}),
        twitter_title=_meta_content(soup, {"name": "twitter:title"}),
        twitter_description=_meta_content(soup, {"name": "twitter:description"}),
        twitter_image=_meta_content(soup, {"name": "twitter:image"}),
        schema_org=_extract_schema_org(soup),
        has_h1=h1 is not None,
        h1_text=(h1.get_text(strip=True) or None) if h1 else None,
    )


def _is_connection_refused(exc: BaseException) -> bool:
    """True when a ConnectionRefusedError sits anywhere in *exc*'s chain.

    httpx wraps the socket error at least twice, and anyio may bundle the
    per-address failures into an exception group.
    """
    pending: List[BaseException] = [exc]
    seen = set()
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, ConnectionRefusedError):
            return True
        pending.extend(getattr(current, "exceptions", ()))
        pending.extend(e for e in (current.__cause__, current.__context__) if e is not None)
    return False


async def validate_rendered_html(url: str, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> HtmlValidationResult:
    """Fetch *url* within *timeout_ms* and report its rendered metadata."""
    timeout = timeout_ms / 1000
    try:
        html = await asyncio.wait_for(fetch_html(url, timeout), timeout)
    except httpx.ConnectError as exc:
        logger.warning("Dev server unreachable at %s: %s", url, exc)
        if _is_connection_refused(exc):
            return HtmlValidationResult(success=False, url=url, error="Dev server not running")
        return HtmlValidationResult(
            success=False, url=url, error=str(exc) or "Failed to fetch page"
        )
    except (httpx.TimeoutException, asyncio.TimeoutError):
        logger.warning("Timeout fetching rendered page %s", url)
        return HtmlValidationResult(
            success=False, url=url, error=f"Timed out after {timeout_ms} ms"
        )
    except httpx.HTTPStatusError as exc:
        logger.warning("HTTP error fetching rendered page %s: %s", url, exc)
        return HtmlValidationResult(
            success=False,
            url=url,
            error=f"Request failed with status code {exc.response.status_code}",
        )
    except (httpx.HTTPError, httpx.InvalidURL, ValueError, OverflowError, RuntimeError) as exc:
        logger.warning("Error fetching rendered page %s: %s", url, exc)
        return HtmlValidationResult(
            success=False, url=url, error=str(exc) or "Failed to fetch page"
        )

    return HtmlValidationResult(success=True, url=url, metadata=extract_rendered_metadata(html))


def build_url_from_path(
    file_path: str,
    dev_server_url: str,
    content_path: str,
    url_pattern: str,
) -> Optional[str]:
    """Map a content file to its dev-server URL.

    ``/site/content/blog/my-post.mdx`` with pattern ``/blog/{slug}`` becomes
    ``http://localhost:3000/blog/my-post``.  Returns *None* when
    *content_path* is not one of the file's path segments.
    """
    path = PurePosixPath(file_path)
    if content_path not in path.parts:
        return None

    slug = _CONTENT_EXT_RE.sub("", path.name)
    return f"{dev_server_url.rstrip('/')}{url_pattern.replace('{slug}', slug)}"
