from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Heading(BaseModel):
    level: int
    text: str
    line: int


class Image(BaseModel):
    alt: str
    src: str
    line: int


class Link(BaseModel):
    text: str
    href: str
    is_internal: bool
    line: int


class MetaTags(BaseModel):
    """Canonical and Open Graph values declared inline in the document body."""

    canonical: Optional[str] = None
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None
    og_url: Optional[str] = None


class ParsedDocument(BaseModel):
    """Normalised view of one Markdown/MDX document.

    Every ``line`` is a zero-based index into :attr:`content`, i.e. the body
    after the front-matter block has been removed.
    """

    frontmatter: Dict[str, Any] = Field(default_factory=dict)
    frontmatter_lines: Dict[str, int] = Field(default_factory=dict)
    """1-based source line of each top-level front-matter key."""
    content: str = ""
    headings: List[Heading] = Field(default_factory=list)
    images: List[Image] = Field(default_factory=list)
    links: List[Link] = Field(default_factory=list)
    meta_tags: MetaTags = Field(default_factory=MetaTags)
