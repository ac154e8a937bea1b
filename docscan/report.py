"""
Human-readable summary of a curriculum scan, written to the log.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from docscan.catalog import Catalog
from docscan.schema import CurriculumReport, Subject, Term, YearLevel

logger = logging.getLogger(__name__)

_YEAR_ORDER = {year.value: i for i, year in enumerate(YearLevel)}
_TERM_ORDER = {term.value: i for i, term in enumerate(Term)}


def _sort_key(subject: Subject) -> Tuple[int, int, str]:
    return (
        _YEAR_ORDER.get(subject.year_level, len(_YEAR_ORDER)),
        _TERM_ORDER.get(subject.semester, len(_TERM_ORDER)),
        subject.subject_code,
    )


def sort_subjects(subjects: Sequence[Subject]) -> List[Subject]:
    """Order subjects by year, then term, then code; unplaced subjects go last."""
    return sorted(subjects, key=_sort_key)


def format_subject_table(subjects: Sequence[Subject]) -> List[str]:
    lines = [f"{'Code':<12} {'Name':<45} {'Units':>5}  {'Year':<9} Semester"]
    for s in sort_subjects(subjects):
        lines.append(
            f"{s.subject_code:<12} {s.subject_name[:45]:<45} {s.units:>5}  {s.year_level:<9} {s.semester}"
        )
    return lines


def format_missing_courses(missing: Sequence[str], catalog: Optional[Catalog] = None) -> List[str]:
    lines = []
    for code in missing:
        entry = catalog.get(code) if catalog is not None else None
        if entry is not None:
            lines.append(f"{code} - {entry.name} ({entry.year_level.value}, {entry.semester.value})")
        else:
            lines.append(code)
    return lines


def log_curriculum_summary(report: CurriculumReport, catalog: Optional[Catalog] = None) -> None:
    validation = report.validation
    total = len(catalog) if catalog is not None else None
    expected = f"/{total}" if total else ""
    logger.info(
        f"Curriculum scan: {report.total_subjects_found}{expected} unique subjects "
        f"from {report.images_processed} image(s), quality {report.quality.value.upper()}"
    )
    for year, count in validation.by_year.items():
        logger.info(f"  {year}: {count} subjects")
    for issue in validation.issues:
        logger.warning(f"  Issue: {issue}")
    for warning in validation.warnings:
        logger.info(f"  Warning: {warning}")

    if logger.isEnabledFor(logging.DEBUG):
        for line in format_subject_table(report.subjects):
            logger.debug(line)

    if validation.missing_courses:
        logger.info(f"Missing {len(validation.missing_courses)} subjects:")
        for line in format_missing_courses(validation.missing_courses, catalog):
            logger.info(f"  - {line}")
