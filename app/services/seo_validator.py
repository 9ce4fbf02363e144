"""SEO rule engine: turns a parsed document into a scored report.

The report has four fixed categories.  Each category scores the share of
its rules with status ``pass``; ``warning``, ``error`` and ``info`` all count
as not passing.  The overall score is a weighted mean of the category scores
(see :data:`CATEGORY_WEIGHTS`).

The top-level title/description checks use their own ``optimal`` /
``warning`` / ``error`` banding, independent of the per-rule status.
"""

from typing import Any, Dict, List, Optional, Tuple

from app.config import DEFAULT_SITE_DOMAIN
from app.models.document import Heading, Image, Link, MetaTags, ParsedDocument
from app.models.metadata import FrameworkMetadataSummary
from app.models.validation import (
    Category,
    FaviconInfo,
    Rule,
    RuleStatus,
    TextCheck,
    TextStatus,
    UrlCheck,
    ValidationData,
)
from app.services.metadata_validator import round_half_up

TITLE_OPTIMAL = (50, 60)
TITLE_ACCEPTABLE = (30, 70)
DESCRIPTION_OPTIMAL = (150, 160)
DESCRIPTION_ACCEPTABLE = (120, 170)

MIN_WORDS_PASS = 1500
MIN_WORDS_WARNING = 1000
MIN_INTERNAL_LINKS = 3

CATEGORY_WEIGHTS: Dict[str, float] = {
    "meta-tags": 0.30,
    "content": 0.25,
    "images": 0.10,
    "links": 0.10,
}
DEFAULT_CATEGORY_WEIGHT = 0.10

BREADCRUMB_SUFFIX = " › blog › post"

_DATE_KEYS = ("date", "publishedAt", "published_date")
_IMAGE_KEYS = ("image", "ogImage", "cover")
# (front-matter key, inline meta attribute)
_OG_KEYS = (
    ("ogTitle", "og_title"),
    ("ogDescription", "og_description"),
    ("ogImage", "og_image"),
    ("ogUrl", "og_url"),
)


def _text(value: Any) -> str:
    return str(value) if value else ""


def _first_present(frontmatter: Dict[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        if frontmatter.get(key):
            return frontmatter[key]
    return None


def _length_status(length: int, optimal: Tuple[int, int], acceptable: Tuple[int, int]) -> TextStatus:
    if optimal[0] <= length <= optimal[1]:
        return "optimal"
    if acceptable[0] <= length <= acceptable[1]:
        return "warning"
    return "error"


def _rule_status(status: TextStatus) -> RuleStatus:
    return "pass" if status == "optimal" else status


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[: limit - 3] + "..."


def _text_check(text: str, optimal: Tuple[int, int], acceptable: Tuple[int, int]) -> TextCheck:
    return TextCheck(
        text=text,
        length=len(text),
        status=_length_status(len(text), optimal, acceptable),
        truncated=_truncate(text, optimal[1]),
    )


def _category(category_id: str, name: str, rules: List[Rule]) -> Category:
    passing = sum(1 for rule in rules if rule.status == "pass")
    score = round_half_up(passing / len(rules) * 100) if rules else 100
    return Category(
        id=category_id, name=name, score=score, passing=passing, total=len(rules), rules=rules
    )


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

def _canonical_rule(doc: ParsedDocument) -> Rule:
    in_frontmatter = bool(doc.frontmatter.get("canonical"))
    inline = bool(doc.meta_tags.canonical)

    if in_frontmatter and inline:
        message = "Present (frontmatter + inline)"
    elif in_frontmatter:
        message = "Present (frontmatter)"
    elif inline:
        message = "Present (inline meta tag)"
    else:
        message = "Missing"

    return Rule(
        id="canonical-url",
        name="Canonical URL",
        status="pass" if in_frontmatter or inline else "warning",
        message=message,
        line=doc.frontmatter_lines.get("canonical"),
        can_fix=True,
    )


def _og_rule(frontmatter: Dict[str, Any], meta_tags: MetaTags) -> Rule:
    count = 0
    from_frontmatter = False
    from_inline = False
    for fm_key, meta_attr in _OG_KEYS:
        if frontmatter.get(fm_key):
            count += 1
            from_frontmatter = True
        elif getattr(meta_tags, meta_attr):
            count += 1
            from_inline = True

    if count == len(_OG_KEYS):
        if from_frontmatter and from_inline:
            message = "4/4 present (frontmatter + inline)"
        elif from_frontmatter:
            message = "4/4 present (frontmatter)"
        else:
            message = "4/4 present (inline meta tags)"
    elif count:
        message = f"{count}/4 present"
    else:
        message = "Missing"

    return Rule(
        id="og-tags",
        name="Open Graph Tags",
        status="pass" if count == len(_OG_KEYS) else "warning",
        message=message,
        value=f"{count}/4",
        can_fix=True,
    )


def _build_meta_tags_category(
    doc: ParsedDocument,
    title: TextCheck,
    description: TextCheck,
    favicon: Optional[FaviconInfo],
) -> Category:
    frontmatter = doc.frontmatter
    lines = doc.frontmatter_lines
    rules: List[Rule] = []

    if favicon is not None:
        if favicon.exists:
            message = f"Present ({favicon.type})" if favicon.type else "Present"
        else:
            message = "Missing (using fallback)"
        rules.append(
            Rule(
                id="favicon",
                name="Favicon",
                status="pass" if favicon.exists else "warning",
                message=message,
                can_fix=False,
            )
        )

    rules.append(
        Rule(
            id="title-length",
            name="Title Length",
            status=_rule_status(title.status),
            message=f"{title.length} characters",
            value=f"{title.length}/{TITLE_OPTIMAL[1]}",
            line=lines.get("title"),
            can_fix=True,
        )
    )
    rules.append(
        Rule(
            id="description-length",
            name="Meta Description",
            status=_rule_status(description.status),
            message=f"{description.length} characters",
            value=f"{description.length}/{DESCRIPTION_OPTIMAL[1]}",
            line=lines.get("description"),
            can_fix=True,
        )
    )

    date = _first_present(frontmatter, _DATE_KEYS)
    rules.append(
        Rule(
            id="publication-date",
            name="Publication Date",
            status="pass" if date else "warning",
            message=f"Present ({date})" if date else "Missing (recommended for SEO)",
            can_fix=True,
        )
    )

    image = _first_present(frontmatter, _IMAGE_KEYS)
    if image:
        shown = image.split("/")[-1] if isinstance(image, str) else "set"
        image_message = f"Present ({shown})"
    else:
        image_message = "Missing (recommended for social sharing)"
    rules.append(
        Rule(
            id="featured-image",
            name="Featured Image",
            status="pass" if image else "warning",
            message=image_message,
            can_fix=True,
        )
    )

    rules.append(_canonical_rule(doc))
    rules.append(_og_rule(frontmatter, doc.meta_tags))

    return _category("meta-tags", "Meta Tags", rules)


def _build_content_category(headings: List[Heading], content: str) -> Category:
    h1_count = sum(1 for heading in headings if heading.level == 1)
    word_count = len(content.split())

    if word_count >= MIN_WORDS_PASS:
        words_status: RuleStatus = "pass"
    elif word_count >= MIN_WORDS_WARNING:
        words_status = "warning"
    else:
        words_status = "error"

    rules = [
        Rule(
            id="heading-hierarchy",
            name="Heading Hierarchy",
            status="pass" if h1_count == 1 else "warning",
            message="Valid (1 H1)" if h1_count == 1 else f"{h1_count} H1 tags found",
            can_fix=False,
        ),
        Rule(
            id="word-count",
            name="Word Count",
            status=words_status,
            message=f"{word_count} words",
            value=f"{word_count}/{MIN_WORDS_PASS}",
            can_fix=False,
        ),
    ]
    return _category("content", "Content Structure", rules)


def _build_images_category(images: List[Image]) -> Category:
    missing = [image for image in images if not image.alt.strip()]

    if not images:
        message = "No images to check"
    elif missing:
        message = f"{len(missing)} images missing alt text"
    else:
        message = f"All {len(images)} images have alt text"

    rule = Rule(
        id="image-alt-text",
        name="Image Alt Text",
        status="error" if missing else "pass",
        message=message,
        line=missing[0].line if missing else None,
        value=f"{len(images) - len(missing)}/{len(images)}",
        can_fix=True,
    )
    return _category("images", "Images", [rule])


def _build_links_category(links: List[Link]) -> Category:
    internal = sum(1 for link in links if link.is_internal)

    if internal >= MIN_INTERNAL_LINKS:
        status: RuleStatus = "pass"
    elif internal >= 1:
        status = "info"
    else:
        status = "warning"

    rule = Rule(
        id="internal-links",
        name="Internal Links",
        status=status,
        message=f"{internal} internal links",
        value=f"{internal}/{MIN_INTERNAL_LINKS}",
        can_fix=True,
    )
    return _category("links", "Links", [rule])


def calculate_score(categories: List[Category]) -> int:
    """Weighted mean of category scores; unknown ids weigh ``0.10``."""
    total = 0.0
    weight_sum = 0.0
    for category in categories:
        weight = CATEGORY_WEIGHTS.get(category.id, DEFAULT_CATEGORY_WEIGHT)
        total += category.score * weight
        weight_sum += weight
    return round_half_up(total / weight_sum) if weight_sum else 0


def validate_seo(
    doc: ParsedDocument,
    favicon: Optional[FaviconInfo] = None,
    framework_metadata: Optional[FrameworkMetadataSummary] = None,
    site_domain: Optional[str] = None,
) -> ValidationData:
    """Evaluate *doc* and return the full SEO report.

    Args:
        doc: Output of :func:`app.services.document_parser.parse_document`.
        favicon: Favicon descriptor; the favicon rule is skipped when *None*.
        framework_metadata: Copied into the report unchanged.  It does not
            affect the score.
        site_domain: Domain for the breadcrumb; ``example.com`` when unset.
    """
    title = _text_check(_text(doc.frontmatter.get("title")), TITLE_OPTIMAL, TITLE_ACCEPTABLE)
    description = _text_check(
        _text(doc.frontmatter.get("description")), DESCRIPTION_OPTIMAL, DESCRIPTION_ACCEPTABLE
    )

    categories = [
        _build_meta_tags_category(doc, title, description, favicon),
        _build_content_category(doc.headings, doc.content),
        _build_images_category(doc.images),
        _build_links_category(doc.links),
    ]

    return ValidationData(
        title=title,
        description=description,
        url=UrlCheck(
            breadcrumb=f"{site_domain or DEFAULT_SITE_DOMAIN}{BREADCRUMB_SUFFIX}",
            status="optimal",
        ),
        favicon=favicon,
        score=calculate_score(categories),
        categories=categories,
        framework_metadata=framework_metadata,
    )
