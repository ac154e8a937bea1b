"""
Grouping module: merges subjects recognized across images and buckets them by year.
"""

from typing import Dict, Iterable, List, Sequence

from docscan.normalize import dedupe_key
from docscan.schema import Subject


def dedupe_subjects(batches: Sequence[Sequence[Subject]]) -> List[Subject]:
    """
    Merge per-image batches into one list with one subject per code.

    Batches are flattened in submission order, then encounter order. The key is
    the code lowercased with all whitespace removed. The first occurrence of a
    key wins and later ones are dropped even if they carry more data; this is
    not a field-level merge.

    Args:
        batches: Hydrated subjects per image, in submission order

    Returns:
        Surviving subjects in first-occurrence order
    """
    seen = set()
    unique: List[Subject] = []
    for batch in batches:
        for subject in batch:
            key = dedupe_key(subject.subject_code)
            if key in seen:
                continue
            seen.add(key)
            unique.append(subject)
    return unique


def count_by_year(subjects: Iterable[Subject]) -> Dict[str, int]:
    """Frequency of year_level values, in first-seen order."""
    counts: Dict[str, int] = {}
    for subject in subjects:
        counts[subject.year_level] = counts.get(subject.year_level, 0) + 1
    return counts
