"""Heuristic recovery of metadata intent from framework page/layout sources.

The parser never builds a syntax tree.  It looks for one of two exports in
the source text, in this order:

``generateMetadata``
    ``export [async] function generateMetadata(...) { ... }``.  The function
    body is scanned for its ``return { ... }`` object.

``static``
    ``export const metadata[: Metadata] = { ... };``.  Only string-literal
    values count as present, because the literal syntax is the signal.

When neither export is found the result has ``source="none"``.

Both paths also record which front-matter fields the code reads through a
data holder (``post.title``, ``frontmatter.ogImage``, ``data.description``)
and whether each read has a fallback (``??``, ``||`` or
``post.x ? post.x : default``).
"""

import logging
import re
from pathlib import Path
from typing import List, Optional

from app.models.metadata import ExtractedMetadata, FieldDependency, FieldSource

logger = logging.getLogger(__name__)

DATA_HOLDERS = ("post", "frontmatter", "data")

_HOLDER = r"\b(" + "|".join(DATA_HOLDERS) + r")\."
_ANY_HOLDER = r"\b(?:" + "|".join(DATA_HOLDERS) + r")\."
_IDENT = r"([A-Za-z_][A-Za-z0-9_]*)"
_FALLBACK_EXPR = r"([^,}\n]+)"

_GENERATE_METADATA_RE = re.compile(
    r"export\s+(?:async\s+)?function\s+generateMetadata\s*\([^)]*\)\s*(?::\s*[^{]+)?\s*"
    r"\{([\s\S]*?)(?:\n\}(?:\n|$))",
    re.MULTILINE,
)
_STATIC_METADATA_RE = re.compile(
    r"export\s+const\s+metadata\s*(?::\s*Metadata)?\s*=\s*(\{[\s\S]*?\});",
    re.MULTILINE,
)
_RETURN_OBJECT_RE = re.compile(r"return\s+(\{[\s\S]*\})")

_DYNAMIC_OG_RE = re.compile(r"openGraph\s*:\s*\{([\s\S]*?)(?:\},|\}$)")
_STATIC_OG_RE = re.compile(r"openGraph\s*:\s*\{([\s\S]*?)\}")

_DYNAMIC_CANONICAL_RE = re.compile(r"alternates\s*:\s*\{[\s\S]*?canonical\s*:")
_STATIC_CANONICAL_RE = re.compile(r"alternates\s*:\s*\{[\s\S]*?canonical\s*:\s*['\"`]")
_STATIC_OG_IMAGES_RE = re.compile(r"images\s*:\s*\[")

_ANY_REF_RE = re.compile(_ANY_HOLDER + _IDENT)

# Reads with a fallback, tried in this order.  Group 1 is the holder, group 2
# the field and group 3 the fallback expression.
_FALLBACK_PATTERNS = (
    re.compile(_HOLDER + _IDENT + r"\s*\?\?\s*" + _FALLBACK_EXPR),
    re.compile(_HOLDER + _IDENT + r"\s*\|\|\s*" + _FALLBACK_EXPR),
    re.compile(_HOLDER + _IDENT + r"\s*\?\s*" + _ANY_HOLDER + r"\2\s*:\s*" + _FALLBACK_EXPR),
)
_BARE_REF_RE = re.compile(_HOLDER + _IDENT + r"\b(?!\s*(?:\?\?|\|\||\?))")


def _has_key(code: str, key: str) -> bool:
    return re.search(rf"{key}\s*:", code) is not None


def _has_literal(code: str, key: str) -> bool:
    return re.search(rf"{key}\s*:\s*['\"`]", code) is not None


def _detect_source(code: str, key: str) -> FieldSource:
    """Classify the value assigned to *key* in *code*."""
    if _has_literal(code, key):
        return "static"
    if re.search(rf"{key}\s*:\s*{_ANY_HOLDER}", code):
        return "frontmatter"
    return "dynamic"


def _collect_holder_refs(code: str, field: str, refs: List[str]) -> None:
    """Append data-holder field names used in *code* to *refs* (deduplicated).

    References to *field* itself are collected first, then every other
    holder reference in order of appearance.
    """
    own_field = re.compile(_ANY_HOLDER + rf"({re.escape(field)})\b")
    for pattern in (own_field, _ANY_REF_RE):
        for match in pattern.finditer(code):
            name = match.group(1)
            if name not in refs:
                refs.append(name)


def extract_field_dependencies(code: str) -> List[FieldDependency]:
    """Return one :class:`FieldDependency` per distinct field read in *code*.

    Fallback forms are scanned first, so a field that has a fallback anywhere
    is never reported as required, even if it is also read bare elsewhere.
    """
    dependencies: List[FieldDependency] = []
    seen = set()

    for pattern in _FALLBACK_PATTERNS:
        for match in pattern.finditer(code):
            holder, field, fallback = match.group(1), match.group(2), match.group(3)
            if field in seen:
                continue
            seen.add(field)
            dependencies.append(
                FieldDependency(
                    field=field,
                    path=f"{holder}.{field}",
                    has_fallback=True,
                    fallback_value=fallback.strip(),
                    is_required=False,
                )
            )

    for match in _BARE_REF_RE.finditer(code):
        holder, field = match.group(1), match.group(2)
        if field in seen:
            continue
        seen.add(field)
        dependencies.append(
            FieldDependency(
                field=field,
                path=f"{holder}.{field}",
                has_fallback=False,
                is_required=True,
            )
        )

    return dependencies


def _parse_generate_metadata(body: str, file_path: str, file_name: str) -> ExtractedMetadata:
    result = ExtractedMetadata(
        source="generateMetadata",
        file_path=file_path,
        file_name=file_name,
        field_dependencies=extract_field_dependencies(body),
        raw_code=body,
    )

    return_match = _RETURN_OBJECT_RE.search(body)
    if not return_match:
        return result
    returned = return_match.group(1)
    refs = result.uses_frontmatter_fields

    if _has_key(returned, "title"):
        result.has_title = True
        result.title_source = _detect_source(returned, "title")
        _collect_holder_refs(returned, "title", refs)

    if _has_key(returned, "description"):
        result.has_description = True
        result.description_source = _detect_source(returned, "description")
        _collect_holder_refs(returned, "description", refs)

    if _DYNAMIC_CANONICAL_RE.search(returned):
        result.has_canonical = True
        result.canonical_source = "dynamic"

    og_match = _DYNAMIC_OG_RE.search(returned)
    if og_match:
        og = og_match.group(1)
        result.has_open_graph = True
        result.og_source = "dynamic"
        result.og_fields.title = _has_key(og, "title")
        result.og_fields.description = _has_key(og, "description")
        result.og_fields.images = _has_key(og, "images")
        result.og_fields.url = _has_key(og, "url")
        for field in ("title", "description", "image", "ogImage"):
            _collect_holder_refs(og, field, refs)

    return result


def _parse_static_metadata(obj: str, file_path: str, file_name: str) -> ExtractedMetadata:
    result = ExtractedMetadata(
        source="static",
        file_path=file_path,
        file_name=file_name,
        field_dependencies=extract_field_dependencies(obj),
        raw_code=obj,
    )

    if _has_literal(obj, "title"):
        result.has_title = True
        result.title_source = "static"

    if _has_literal(obj, "description"):
        result.has_description = True
        result.description_source = "static"

    if _STATIC_CANONICAL_RE.search(obj):
        result.has_canonical = True
        result.canonical_source = "static"

    og_match = _STATIC_OG_RE.search(obj)
    if og_match:
        og = og_match.group(1)
        result.has_open_graph = True
        result.og_source = "static"
        result.og_fields.title = _has_literal(og, "title")
        result.og_fields.description = _has_literal(og, "description")
        # Only the array form counts; a bare ``images: someVar`` is not detected.
        result.og_fields.images = _STATIC_OG_IMAGES_RE.search(og) is not None
        result.og_fields.url = _has_literal(og, "url")

    return result


def parse_metadata_source(code: str, file_path: str = "") -> ExtractedMetadata:
    """Extract declared metadata from framework source *code*."""
    # the export patterns anchor on ``\n``
    code = code.replace("\r\n", "\n")
    file_name = Path(file_path).name if file_path else ""

    generate_match = _GENERATE_METADATA_RE.search(code)
    if generate_match:
        return _parse_generate_metadata(generate_match.group(1), file_path, file_name)

    static_match = _STATIC_METADATA_RE.search(code)
    if static_match:
        return _parse_static_metadata(static_match.group(1), file_path, file_name)

    return ExtractedMetadata(source="none", file_path=file_path, file_name=file_name)


def parse_metadata_file(file_path: str | Path) -> Optional[ExtractedMetadata]:
    """Read and parse *file_path*; return *None* when the file does not exist."""
    path = Path(file_path)
    if not path.is_file():
        return None

    code = path.read_text(encoding="utf-8", errors="replace")
    metadata = parse_metadata_source(code, str(path))
    logger.debug("Parsed metadata from %s: source=%s", path, metadata.source)
    return metadata
