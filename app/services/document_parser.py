"""Pattern-based extraction of SEO-relevant structure from Markdown/MDX text.

:func:`parse_document` splits off the front-matter block and then runs a
fixed set of independent regex passes over the body:

* headings (``# Title``) line by line,
* images, both ``![alt](src)`` and ``<Image alt="…" src="…" />``,
* links (``[text](href)``), skipping anything that is really an image,
* inline ``<link rel="canonical">`` and ``<meta property="og:*">`` tags,
  searched across the whole body.

None of the passes understands Markdown or JSX; unusual syntax simply yields
no match.  The function never raises.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import frontmatter
import yaml

from app.models.document import Heading, Image, Link, MetaTags, ParsedDocument

logger = logging.getLogger(__name__)

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")

_MD_IMAGE_RE = re.compile(r"!\[([^\]]*)\]\(([^)]+)\)")
# Attribute order is fixed: alt must come before src.
_JSX_IMAGE_RE = re.compile(
    r"""<Image[^>]*alt=["']([^"']*)["'][^>]*src=["']([^"']*)["'][^>]*/?>"""
)

_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")

_FRONTMATTER_KEY_RE = re.compile(r"^([A-Za-z_][\w-]*)\s*:")

# Only ``---`` YAML blocks; a body opening with ``{`` or ``+++`` is not front-matter.
_HANDLERS = [frontmatter.YAMLHandler()]

_BOM = "\ufeff"


def _tag_patterns(tag: str, key_attr: str, key_value: str, value_attr: str) -> Tuple[re.Pattern, ...]:
    """Return the (key-first, value-first) regex pair for a self-closing tag."""
    key = rf"""{key_attr}=["']{re.escape(key_value)}["']"""
    value = rf"""{value_attr}=["']([^"']+)["']"""
    return (
        re.compile(rf"<{tag}[^>]*{key}[^>]*{value}[^>]*/?>", re.IGNORECASE),
        re.compile(rf"<{tag}[^>]*{value}[^>]*{key}[^>]*/?>", re.IGNORECASE),
    )


_CANONICAL_PATTERNS = _tag_patterns("link", "rel", "canonical", "href")
_OG_PATTERNS = {
    name: _tag_patterns("meta", "property", f"og:{name}", "content")
    for name in ("title", "description", "image", "url")
}


# ---------------------------------------------------------------------------
# Front-matter
# ---------------------------------------------------------------------------

def _split_frontmatter(text: str) -> Tuple[Dict[str, Any], str]:
    """Return ``(mapping, body)`` for *text*.

    A missing, unterminated or unparseable block yields an empty mapping.  A
    block that parses to something other than a mapping is dropped but still
    removed from the body.
    """
    handler = frontmatter.detect_format(text, _HANDLERS)
    if handler is None:
        return {}, text

    try:
        raw, body = handler.split(text)
        data = handler.load(raw)
    except (ValueError, yaml.YAMLError) as exc:
        logger.debug("Ignoring malformed front-matter: %s", exc)
        return {}, text

    if body.startswith("\r\n"):
        body = body[2:]
    elif body.startswith("\n"):
        body = body[1:]

    if not isinstance(data, dict):
        return {}, body
    return {str(key): value for key, value in data.items()}, body


def _frontmatter_key_lines(text: str) -> Dict[str, int]:
    """Map each top-level front-matter key to its 1-based line in *text*."""
    lines = text.split("\n")
    key_lines: Dict[str, int] = {}
    for number, line in enumerate(lines[1:], start=2):
        if line.rstrip().startswith("---"):
            break
        match = _FRONTMATTER_KEY_RE.match(line)
        if match and match.group(1) not in key_lines:
            key_lines[match.group(1)] = number
    return key_lines


# ---------------------------------------------------------------------------
# Body passes
# ---------------------------------------------------------------------------

def _extract_headings(lines: List[str]) -> List[Heading]:
    headings: List[Heading] = []
    for index, line in enumerate(lines):
        match = _HEADING_RE.match(line)
        if match:
            headings.append(
                Heading(level=len(match.group(1)), text=match.group(2).strip(), line=index)
            )
    return headings


def _extract_images(lines: List[str]) -> List[Image]:
    images: List[Image] = []
    for index, line in enumerate(lines):
        for match in _MD_IMAGE_RE.finditer(line):
            images.append(Image(alt=match.group(1), src=match.group(2), line=index))
        for match in _JSX_IMAGE_RE.finditer(line):
            images.append(Image(alt=match.group(1), src=match.group(2), line=index))
    return images


def _extract_links(lines: List[str]) -> List[Link]:
    links: List[Link] = []
    for index, line in enumerate(lines):
        for match in _LINK_RE.finditer(line):
            start = match.start()
            # ![alt](src) is an image, not a link
            if start > 0 and line[start - 1] == "!":
                continue
            href = match.group(2)
            links.append(
                Link(
                    text=match.group(1),
                    href=href,
                    is_internal=href.startswith(("/", "#")),
                    line=index,
                )
            )
    return links


def _first_match(patterns: Tuple[re.Pattern, ...], content: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(content)
        if match:
            return match.group(1)
    return None


def _extract_meta_tags(content: str) -> MetaTags:
    return MetaTags(
        canonical=_first_match(_CANONICAL_PATTERNS, content),
        og_title=_first_match(_OG_PATTERNS["title"], content),
        og_description=_first_match(_OG_PATTERNS["description"], content),
        og_image=_first_match(_OG_PATTERNS["image"], content),
        og_url=_first_match(_OG_PATTERNS["url"], content),
    )


def parse_document(content: str) -> ParsedDocument:
    """Parse raw document text into a :class:`ParsedDocument`."""
    if content.startswith(_BOM):
        content = content[len(_BOM):]

    data, body = _split_frontmatter(content)
    key_lines = _frontmatter_key_lines(content) if data else {}
    lines = body.split("\n")

    return ParsedDocument(
        frontmatter=data,
        frontmatter_lines=key_lines,
        content=body,
        headings=_extract_headings(lines),
        images=_extract_images(lines),
        links=_extract_links(lines),
        meta_tags=_extract_meta_tags(body),
    )
