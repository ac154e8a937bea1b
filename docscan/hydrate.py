"""
Reference hydration: replace recognized subject fields with catalog values.
"""

import logging
from typing import List, Optional, Sequence

from docscan.catalog import Catalog, get_catalog
from docscan.schema import CatalogEntry, Subject

logger = logging.getLogger(__name__)


def subject_from_entry(entry: CatalogEntry) -> Subject:
    """Build a Subject carrying exactly the catalog's canonical values."""
    return Subject(
        subject_code=entry.code,
        subject_name=entry.name,
        lec_units=entry.lec_units,
        lab_units=entry.lab_units,
        units=entry.units,
        year_level=entry.year_level.value,
        semester=entry.semester.value,
    )


def hydrate_subjects(
    subjects: Sequence[Subject],
    catalog: Optional[Catalog] = None,
) -> List[Subject]:
    """
    Rewrite recognized subjects from the catalog wherever the code matches.

    Matching is exact on the normalized key (uppercase, no whitespace). A
    matched subject is rebuilt entirely from its CatalogEntry, including the
    catalog's spelling of the code. Unmatched subjects (free electives, OCR
    noise, UNKNOWN_<n> placeholders) pass through unchanged.

    Args:
        subjects: Subjects as coerced from recognizer output
        catalog: Reference catalog (process-wide catalog by default)

    Returns:
        New list, same length and order as the input
    """
    catalog = catalog or get_catalog()
    hydrated: List[Subject] = []
    matched = 0
    for subject in subjects:
        entry = catalog.lookup(subject.subject_code.strip())
        if entry is None:
            hydrated.append(subject)
            continue
        matched += 1
        hydrated.append(subject_from_entry(entry))
    logger.debug(f"Hydrated {matched}/{len(hydrated)} subjects from {catalog.reference_version}")
    return hydrated
