"""Filesystem discovery around a content file: framework, metadata files, favicon."""

import base64
import logging
import re
from pathlib import Path
from typing import List, Optional, Tuple

from app.models.validation import FaviconInfo
from app.models.workspace import Framework, FrameworkInfo

logger = logging.getLogger(__name__)

_NEXT_CONFIGS = ("next.config.js", "next.config.ts", "next.config.mjs")
_ASTRO_CONFIGS = ("astro.config.mjs", "astro.config.ts", "astro.config.js")
_REMIX_CONFIGS = ("remix.config.js", "remix.config.ts")
_ROOT_MARKERS = ("package.json",) + _NEXT_CONFIGS

_CONTENT_DIR_RE = re.compile(r"/content/([^/]+)")

# Checked in priority order.
_FAVICON_LOCATIONS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("app", "favicon.ico"), "next-metadata"),
    (("app", "icon.svg"), "next-metadata"),
    (("app", "icon.png"), "next-metadata"),
    (("public", "favicon.ico"), "ico"),
    (("public", "favicon.svg"), "svg"),
    (("public", "favicon.png"), "png"),
    (("favicon.ico",), "ico"),
    (("favicon.svg",), "svg"),
    (("favicon.png",), "png"),
    (("public", "assets", "favicon.svg"), "svg"),
)

_DATA_URI_MIME_TYPES = {
    ".svg": "image/svg+xml",
    ".png": "image/png",
    ".ico": "image/x-icon",
}


def detect_framework(root: str | Path) -> FrameworkInfo:
    """Identify the web framework of the project at *root* by its config file."""
    root = Path(root)

    for name in _NEXT_CONFIGS:
        config = root / name
        if config.exists():
            has_app_dir = (root / "app").exists()
            return FrameworkInfo(
                type="nextjs-app" if has_app_dir else "nextjs-pages",
                config_path=str(config),
                has_app_dir=has_app_dir,
                has_pages_dir=(root / "pages").exists(),
            )

    for framework, names in (("astro", _ASTRO_CONFIGS), ("remix", _REMIX_CONFIGS)):
        for name in names:
            config = root / name
            if config.exists():
                return FrameworkInfo(type=framework, config_path=str(config))

    return FrameworkInfo(type="unknown")


def _find_project_root(file_path: Path) -> Optional[Path]:
    for directory in file_path.parents:
        if any((directory / marker).exists() for marker in _ROOT_MARKERS):
            return directory
    return None


def _walk_up(directory: Path, stop: Optional[Path]) -> List[Path]:
    """*directory* and its ancestors up to *stop*, never the filesystem root."""
    chain: List[Path] = []
    for current in (directory, *directory.parents):
        if current == Path(current.anchor):
            break
        chain.append(current)
        if current == stop:
            break
    return chain


def _first_existing(*candidates: Path) -> Optional[Path]:
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def find_metadata_files(mdx_path: str | Path, framework: Framework) -> List[Path]:
    """Return the page/layout files whose metadata applies to *mdx_path*.

    Only the Next.js App Router layout is understood; other frameworks yield
    an empty list.
    """
    if framework != "nextjs-app":
        return []

    mdx_path = Path(mdx_path)
    directory = mdx_path.parent
    files: List[Path] = []

    page = _first_existing(directory / "page.tsx", directory / "page.ts")
    if page:
        files.append(page)

    # content/blog/post.mdx is usually served by app/blog/[slug]/page.tsx
    content_match = _CONTENT_DIR_RE.search(mdx_path.as_posix())
    project_root = _find_project_root(mdx_path)
    if content_match and project_root and (project_root / "app").exists():
        section = project_root / "app" / content_match.group(1)
        route_page = _first_existing(
            section / "[slug]" / "page.tsx",
            section / "[slug]" / "page.ts",
            section / "[...slug]" / "page.tsx",
            section / "[...slug]" / "page.ts",
            section / "page.tsx",
            section / "page.ts",
        )
        if route_page and route_page not in files:
            files.append(route_page)

    for current in _walk_up(directory, project_root):
        layout = _first_existing(current / "layout.tsx", current / "layout.ts")
        if layout and layout not in files:
            files.append(layout)

    return files


def favicon_data_uri(path: str | Path) -> Optional[str]:
    """Return a base64 ``data:`` URI for an .svg/.png/.ico file, else *None*."""
    path = Path(path)
    mime_type = _DATA_URI_MIME_TYPES.get(path.suffix.lower())
    if mime_type is None:
        return None
    try:
        payload = base64.b64encode(path.read_bytes()).decode("ascii")
    except OSError as exc:
        logger.debug("Could not read favicon %s: %s", path, exc)
        return None
    return f"data:{mime_type};base64,{payload}"


def detect_favicon(root: str | Path) -> FaviconInfo:
    """Find the first favicon in the conventional locations under *root*."""
    root = Path(root)
    for parts, favicon_type in _FAVICON_LOCATIONS:
        candidate = root.joinpath(*parts)
        if candidate.exists():
            return FaviconInfo(
                exists=True, data_uri=favicon_data_uri(candidate), type=favicon_type
            )
    return FaviconInfo(exists=False)
