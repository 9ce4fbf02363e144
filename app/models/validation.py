from typing import List, Literal, Optional, Union

from pydantic import BaseModel

from app.models.metadata import FrameworkMetadataSummary

TextStatus = Literal["optimal", "warning", "error"]
RuleStatus = Literal["pass", "warning", "error", "info"]


class TextCheck(BaseModel):
    text: str
    length: int
    status: TextStatus
    truncated: str


class UrlCheck(BaseModel):
    breadcrumb: str
    status: TextStatus


class FaviconInfo(BaseModel):
    exists: bool
    data_uri: Optional[str] = None
    type: Optional[str] = None


class Rule(BaseModel):
    id: str
    name: str
    status: RuleStatus
    message: str
    line: Optional[int] = None
    value: Optional[Union[int, str]] = None
    can_fix: Optional[bool] = None


class Category(BaseModel):
    id: str
    name: str
    score: int
    passing: int
    total: int
    rules: List[Rule]


class ValidationData(BaseModel):
    """The SEO report for a single document."""

    title: TextCheck
    description: TextCheck
    url: UrlCheck
    favicon: Optional[FaviconInfo] = None
    score: int
    categories: List[Category]
    framework_metadata: Optional[FrameworkMetadataSummary] = None
