from typing import List, Optional

from pydantic import BaseModel, Field


class SchemaOrgSummary(BaseModel):
    types: List[str] = Field(default_factory=list)
    count: int = 0


class RenderedMetadata(BaseModel):
    """Meta information extracted from the HTML a running dev server returns."""

    title: Optional[str] = None
    description: Optional[str] = None
    canonical: Optional[str] = None

    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None
    og_url: Optional[str] = None
    og_type: Optional[str] = None

    twitter_card: Optional[str] = None
    twitter_title: Optional[str] = None
    twitter_description: Optional[str] = None
    twitter_image: Optional[str] = None

    schema_org: SchemaOrgSummary = Field(default_factory=SchemaOrgSummary)

    has_h1: bool = False
    h1_text: Optional[str] = None


class HtmlValidationResult(BaseModel):
    success: bool
    url: str
    metadata: Optional[RenderedMetadata] = None
    error: Optional[str] = None
