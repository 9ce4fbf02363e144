"""Framework metadata endpoint: extraction and scoring of one page/layout file."""

import logging

from fastapi import APIRouter, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.models.request import MetadataRequest
from app.models.response import MetadataResponse
from app.services.metadata_parser import parse_metadata_file, parse_metadata_source
from app.services.metadata_validator import validate_metadata

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter()


@router.post(
    "/metadata",
    response_model=MetadataResponse,
    summary="Extract and score framework metadata",
)
@limiter.limit("120/minute")
def analyze_metadata(request: Request, body: MetadataRequest) -> MetadataResponse:
    """Analyse ``body.code`` or, when no code is given, the file at ``body.file_path``."""
    logger.info("Metadata request received", extra={"file_path": body.file_path})

    if body.code is not None:
        metadata = parse_metadata_source(body.code, body.file_path or "")
    elif body.file_path:
        metadata = parse_metadata_file(body.file_path)
        if metadata is None:
            logger.warning("Metadata file not found: %s", body.file_path)
            raise HTTPException(status_code=404, detail=f"File not found: {body.file_path}")
    else:
        raise HTTPException(status_code=422, detail="Provide either 'code' or 'file_path'.")

    return MetadataResponse(metadata=metadata, validation=validate_metadata(metadata))
