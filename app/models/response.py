from pydantic import BaseModel

from app.models.metadata import ExtractedMetadata, MetadataValidation


class MetadataResponse(BaseModel):
    metadata: ExtractedMetadata
    validation: MetadataValidation
