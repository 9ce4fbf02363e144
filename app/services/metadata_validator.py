"""Scoring of extracted framework metadata against SEO best practices."""

import math
from typing import List, Sequence

from app.models.metadata import (
    ExtractedMetadata,
    FrameworkMetadataFile,
    FrameworkMetadataSummary,
    MetadataValidation,
)

MAX_POINTS = 5


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive input."""
    return int(math.floor(value + 0.5))


def validate_metadata(metadata: ExtractedMetadata) -> MetadataValidation:
    """Score *metadata* on a 5-point scale, reported as 0–100.

    One point each for title, description, canonical and an ``openGraph``
    object, plus a bonus point when Open Graph declares title, description
    and images.  Missing title/description are issues; everything else is a
    suggestion.
    """
    if metadata.source == "none":
        return MetadataValidation(
            score=0,
            issues=["No metadata configuration found in page.tsx or layout.tsx"],
            suggestions=["Add generateMetadata() function or export const metadata"],
        )

    issues: List[str] = []
    suggestions: List[str] = []
    points = 0

    if metadata.has_title:
        points += 1
    else:
        issues.append("Missing title field")

    if metadata.has_description:
        points += 1
    else:
        issues.append("Missing description field")

    if metadata.has_canonical:
        points += 1
    else:
        suggestions.append("Consider adding alternates.canonical for SEO")

    og = metadata.og_fields
    if metadata.has_open_graph:
        points += 1
        missing = [
            name
            for name, present in (
                ("title", og.title),
                ("description", og.description),
                ("images", og.images),
            )
            if not present
        ]
        if missing:
            suggestions.append(f"Add missing OG fields: {', '.join(missing)}")
    else:
        suggestions.append("Add openGraph object for social sharing")

    if og.title and og.description and og.images:
        points += 1

    return MetadataValidation(
        score=round_half_up(points / MAX_POINTS * 100),
        issues=issues,
        suggestions=suggestions,
    )


def summarize_metadata(entries: Sequence[ExtractedMetadata]) -> FrameworkMetadataSummary:
    """Validate every entry and fold the results into one summary."""
    files: List[FrameworkMetadataFile] = []
    required: List[str] = []

    for metadata in entries:
        result = validate_metadata(metadata)
        files.append(
            FrameworkMetadataFile(
                file_name=metadata.file_name,
                file_path=metadata.file_path,
                source=metadata.source,
                score=result.score,
                issues=result.issues,
                suggestions=result.suggestions,
                field_dependencies=metadata.field_dependencies,
            )
        )
        for dependency in metadata.field_dependencies:
            if dependency.is_required and dependency.field not in required:
                required.append(dependency.field)

    score = round_half_up(sum(f.score for f in files) / len(files)) if files else 0
    return FrameworkMetadataSummary(files=files, score=score, required_fields=required)
