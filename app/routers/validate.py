"""Document validation endpoint: the full SEO report for one Markdown/MDX file."""

import logging
from typing import List

from fastapi import APIRouter, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import get_settings
from app.models.metadata import ExtractedMetadata
from app.models.request import ValidateRequest
from app.models.validation import ValidationData
from app.services.document_parser import parse_document
from app.services.metadata_parser import parse_metadata_file, parse_metadata_source
from app.services.metadata_validator import summarize_metadata
from app.services.seo_validator import validate_seo
from app.services.workspace import detect_favicon, detect_framework, find_metadata_files

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter()


@router.post(
    "/validate",
    response_model=ValidationData,
    summary="Score a Markdown/MDX document",
    description=(
        "Parses the document, evaluates it against the SEO rules and returns "
        "the scored report.\n\n"
        "Framework metadata can be supplied inline via `metadata_files`, or "
        "discovered from `workspace_root` + `file_path`.  It is reported "
        "alongside the categories but does not change the score."
    ),
)
@limiter.limit("120/minute")
def validate_document(request: Request, body: ValidateRequest) -> ValidationData:
    """Return the SEO report for ``body.content``."""
    logger.info(
        "Validate request received",
        extra={"file_path": body.file_path, "content_length": len(body.content)},
    )

    doc = parse_document(body.content)

    favicon = body.favicon
    if favicon is None and body.workspace_root:
        favicon = detect_favicon(body.workspace_root)

    entries = _collect_metadata(body)
    summary = summarize_metadata(entries) if entries else None

    site_domain = body.site_domain or get_settings().site_domain
    return validate_seo(doc, favicon, summary, site_domain)


def _collect_metadata(body: ValidateRequest) -> List[ExtractedMetadata]:
    """Parse inline metadata sources, then any discovered on disk."""
    entries = [parse_metadata_source(f.code, f.file_name) for f in body.metadata_files]

    if body.workspace_root and body.file_path:
        framework = detect_framework(body.workspace_root)
        for path in find_metadata_files(body.file_path, framework.type):
            metadata = parse_metadata_file(path)
            if metadata is not None:
                entries.append(metadata)

    return entries
