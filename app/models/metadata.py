from typing import List, Literal, Optional

from pydantic import BaseModel, Field

MetadataSource = Literal["generateMetadata", "static", "none"]
FieldSource = Literal["static", "frontmatter", "dynamic"]


class OgFields(BaseModel):
    title: bool = False
    description: bool = False
    images: bool = False
    url: bool = False


class FieldDependency(BaseModel):
    """A front-matter field the metadata code reads, e.g. ``post.ogImage``."""

    field: str
    path: str
    has_fallback: bool
    fallback_value: Optional[str] = None
    is_required: bool


class ExtractedMetadata(BaseModel):
    """Metadata intent recovered from a framework page/layout source file."""

    source: MetadataSource
    file_path: str = ""
    file_name: str = ""

    has_title: bool = False
    title_source: Optional[FieldSource] = None
    has_description: bool = False
    description_source: Optional[FieldSource] = None
    has_canonical: bool = False
    canonical_source: Optional[FieldSource] = None
    has_open_graph: bool = False
    og_fields: OgFields = Field(default_factory=OgFields)
    og_source: Optional[FieldSource] = None

    uses_frontmatter_fields: List[str] = Field(default_factory=list)
    field_dependencies: List[FieldDependency] = Field(default_factory=list)

    raw_code: Optional[str] = None  # scanned text, kept for debugging


class MetadataValidation(BaseModel):
    score: int
    issues: List[str]
    suggestions: List[str]


class FrameworkMetadataFile(BaseModel):
    file_name: str
    file_path: str
    source: MetadataSource
    score: int
    issues: List[str]
    suggestions: List[str]
    field_dependencies: List[FieldDependency]


class FrameworkMetadataSummary(BaseModel):
    """Validated metadata of every framework file that serves a document."""

    files: List[FrameworkMetadataFile]
    score: int
    required_fields: List[str]
