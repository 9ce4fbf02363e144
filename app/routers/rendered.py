"""Rendered-page endpoint: compares against what the dev server actually serves."""

import logging

from fastapi import APIRouter, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import get_settings
from app.models.rendered import HtmlValidationResult
from app.models.request import RenderedRequest
from app.services.html_validator import build_url_from_path, validate_rendered_html

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter()


@router.post(
    "/rendered",
    response_model=HtmlValidationResult,
    summary="Fetch a rendered page and extract its metadata",
    description=(
        "Fetches `url` (or the dev-server URL derived from `file_path`) once "
        "and returns the meta tags, Twitter card, JSON-LD and H1 found in the "
        "HTML.  Fetch failures are reported in the body with `success: false`."
    ),
)
@limiter.limit("20/minute")
async def check_rendered(request: Request, body: RenderedRequest) -> HtmlValidationResult:
    settings = get_settings()

    if body.url is not None:
        url = str(body.url)
    elif body.file_path:
        url = build_url_from_path(
            body.file_path, settings.dev_server_url, settings.content_path, settings.url_pattern
        )
        if url is None:
            raise HTTPException(
                status_code=400,
                detail=f"'{body.file_path}' is not under the '{settings.content_path}' directory.",
            )
    else:
        raise HTTPException(status_code=422, detail="Provide either 'url' or 'file_path'.")

    timeout_ms = body.timeout_ms or settings.html_timeout_ms
    logger.info("Rendered check requested", extra={"url": url, "timeout_ms": timeout_ms})
    return await validate_rendered_html(url, timeout_ms)
