"""
Validation module: judges completeness of recognized curriculum subjects.

Shortfalls are data quality findings reported through issues and warnings;
they are never raised. Only missing preconditions (no images, empty catalog)
raise ValueError.
"""

from typing import List, Optional, Sequence

from docscan.catalog import Catalog, get_catalog
from docscan.grouping import count_by_year
from docscan.normalize import normalize_code
from docscan.schema import (
    ImageValidation,
    OverallValidation,
    QualityTier,
    Subject,
    YearLevel,
)
from docscan.validation_config import (
    FULL_SCAN_IMAGE_COUNT,
    GOOD_TIER_MAX_MISSING,
    MODERATE_TIER_MAX_MISSING,
    SUMMER_PRACTICUM,
    AnchorRule,
    SectionRules,
    get_section_rules,
)


def _find_by_code(subjects: Sequence[Subject], code: str) -> Optional[Subject]:
    key = normalize_code(code)
    for subject in subjects:
        if normalize_code(subject.subject_code) == key:
            return subject
    return None


def validate_section(
    subjects: Sequence[Subject],
    section_id: int,
    rules: Optional[SectionRules] = None,
) -> ImageValidation:
    """
    Score one image's subjects against the rules of the section it should show.

    Checks, in order:
        - subject count below the section minimum -> issue
        - subject count above the section maximum -> warning (likely duplicates)
        - each required year below its minimum or absent -> issue
        - anchor course absent -> issue; present in another term -> warning

    is_good is True exactly when no issue was recorded; warnings never block it.
    A section without configured rules yields no findings.

    Args:
        subjects: Hydrated subjects recognized in this image
        section_id: 1-based position of the image in the submission
        rules: Override for the configured section rules

    Returns:
        ImageValidation for this image
    """
    rules = rules or get_section_rules(section_id)
    issues: List[str] = []
    warnings: List[str] = []
    missing: List[str] = []
    count = len(subjects)

    if rules is not None:
        expected = f"{rules.min_subjects}-{rules.max_subjects}"
        if count < rules.min_subjects:
            issues.append(
                f"Only {count} subjects found (expected {expected} for {rules.description})"
            )
        elif count > rules.max_subjects:
            warnings.append(
                f"Found {count} subjects (expected {expected}). May have duplicates."
            )

        by_year = count_by_year(subjects)
        for year, minimum in rules.min_per_year.items():
            if by_year.get(year.value, 0) < minimum:
                issues.append(f"{year.value} incomplete or missing")

        anchor = rules.anchor
        if anchor is not None:
            found = _find_by_code(subjects, anchor.code)
            if found is None:
                issues.append(
                    f"{anchor.expected_term.value} semester missing ({anchor.code} - {anchor.label})"
                )
                missing.append(anchor.code)
            elif found.semester != anchor.expected_term.value:
                warnings.append(
                    f"{anchor.code} in wrong semester ({found.semester}), "
                    f"should be {anchor.expected_term.value}"
                )

    return ImageValidation(
        is_good=len(issues) == 0,
        issues=issues,
        warnings=warnings,
        subject_count=count,
        missing_courses=missing,
    )


def validate_overall(
    subjects: Sequence[Subject],
    image_validations: Sequence[ImageValidation],
    catalog: Optional[Catalog] = None,
    anchor: AnchorRule = SUMMER_PRACTICUM,
) -> OverallValidation:
    """
    Classify the merged result of a submission into a quality tier.

    Tiers are measured against the catalog size T:
        count >= T          -> excellent
        T-4 <= count < T    -> good (warning with the exact shortfall)
        T-9 <= count < T-4  -> moderate if every submitted image passed,
                               otherwise poor with an issue
        count < T-9         -> poor, except a single passing image, which is
                               a partial scan and is re-tiered to moderate

    Two-image submissions are expected to cover the whole checklist, so only
    they get the per-year and Summer anchor completeness checks.
    missing_courses is always recomputed last as every catalog code absent
    from the merged subjects.

    Args:
        subjects: Deduplicated subjects of the whole submission
        image_validations: One ImageValidation per submitted image, in order
        catalog: Reference catalog (process-wide catalog by default)
        anchor: Course that proves the Summer term was captured

    Returns:
        OverallValidation for the submission
    """
    catalog = catalog or get_catalog()
    total = len(catalog)
    if total == 0:
        raise ValueError("Cannot classify an extraction against an empty catalog")
    if not image_validations:
        raise ValueError("Cannot classify an extraction without any image validations")

    count = len(subjects)
    by_year = count_by_year(subjects)
    image_count = len(image_validations)
    all_images_good = all(v.is_good for v in image_validations)
    single_image_good = image_count == 1 and image_validations[0].is_good

    issues: List[str] = []
    warnings: List[str] = []
    success = False

    if count >= total:
        quality = QualityTier.EXCELLENT
        success = True
    elif count >= total - GOOD_TIER_MAX_MISSING:
        quality = QualityTier.GOOD
        success = True
        warnings.append(f"{total - count} subjects missing")
    elif count >= total - MODERATE_TIER_MAX_MISSING:
        if all_images_good or single_image_good:
            quality = QualityTier.MODERATE
            success = True
            warnings.append(
                f"Only {count}/{total} subjects total, but image quality is good"
            )
        else:
            quality = QualityTier.POOR
            issues.append(f"Only {count}/{total} subjects extracted")
    else:
        if single_image_good:
            quality = QualityTier.MODERATE
            success = True
            warnings.append(f"Partial scan: {count} subjects extracted from 1 image")
        else:
            quality = QualityTier.POOR
            issues.append(f"Very poor extraction: only {count}/{total} subjects")

    if image_count == FULL_SCAN_IMAGE_COUNT:
        for year in YearLevel:
            if not by_year.get(year.value):
                issues.append(f"{year.value} completely missing")
        if _find_by_code(subjects, anchor.code) is None:
            issues.append(f"{anchor.expected_term.value} semester missing ({anchor.code})")

    extracted_keys = {normalize_code(s.subject_code) for s in subjects}
    missing = [code for code in catalog.codes if normalize_code(code) not in extracted_keys]

    return OverallValidation(
        success=success,
        quality=quality,
        total_count=count,
        issues=issues,
        warnings=warnings,
        missing_courses=missing,
        by_year=by_year,
    )
