from typing import List, Optional

from pydantic import BaseModel, Field, HttpUrl

from app.models.validation import FaviconInfo


class MetadataSourceFile(BaseModel):
    """Contents of a framework source file supplied inline by the caller."""

    file_name: str = ""
    code: str


class ValidateRequest(BaseModel):
    content: str = Field(description="Raw Markdown/MDX document text, front-matter included.")
    site_domain: Optional[str] = Field(
        default=None,
        description="Domain shown in the search-result breadcrumb. Falls back to SEO_SITE_DOMAIN.",
    )
    favicon: Optional[FaviconInfo] = None
    workspace_root: Optional[str] = Field(
        default=None,
        description="Project root used to discover the favicon and framework metadata files.",
    )
    file_path: Optional[str] = Field(
        default=None,
        description="Path of the document on disk. Needed for metadata-file discovery.",
    )
    metadata_files: List[MetadataSourceFile] = Field(default_factory=list)


class MetadataRequest(BaseModel):
    code: Optional[str] = None
    file_path: Optional[str] = None


class RenderedRequest(BaseModel):
    url: Optional[HttpUrl] = None
    file_path: Optional[str] = Field(
        default=None,
        description="Content file to map onto the dev server when no url is given.",
    )
    timeout_ms: Optional[int] = Field(
        default=None,
        ge=100,
        le=60_000,
        description="Deadline for the single outbound request, in milliseconds. Falls back to SEO_HTML_TIMEOUT_MS.",
    )
