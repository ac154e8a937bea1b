"""
Config-driven completeness rules per curriculum checklist section.

The checklist is photographed in two halves. Section 1 is the first image
(1st and 2nd Year), section 2 the second (3rd Year, the Summer term and
4th Year). The counts below come from the reference curriculum.

Adding a section: extend SECTION_RULES.
Adding a rule kind: extend SectionRules and update validate.validate_section to honor it.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from docscan.schema import Term, YearLevel


@dataclass(frozen=True)
class AnchorRule:
    """A known course whose presence proves a commonly missed region was captured."""

    code: str
    expected_term: Term
    label: str  # human name of the region, used in messages


@dataclass(frozen=True)
class SectionRules:
    """Expected cardinality and composition of one checklist section."""

    min_subjects: int
    max_subjects: int
    description: str
    min_per_year: Dict[YearLevel, int] = field(default_factory=dict)
    anchor: Optional[AnchorRule] = None


SUMMER_PRACTICUM = AnchorRule(code="CS 122", expected_term=Term.SUMMER, label="Practicum")

SECTION_RULES: Dict[int, SectionRules] = {
    1: SectionRules(
        min_subjects=27,
        max_subjects=31,
        description="1st & 2nd Year",
        min_per_year={YearLevel.FIRST: 12, YearLevel.SECOND: 13},
    ),
    2: SectionRules(
        min_subjects=23,
        max_subjects=27,
        description="3rd Year + Summer + 4th Year",
        min_per_year={YearLevel.THIRD: 11, YearLevel.FOURTH: 9},
        anchor=SUMMER_PRACTICUM,
    ),
}

# Thresholds of the overall tiering, as distances below the catalog size.
GOOD_TIER_MAX_MISSING = 4
MODERATE_TIER_MAX_MISSING = 9

# Overall checks that only make sense for a full two-image checklist.
FULL_SCAN_IMAGE_COUNT = 2


def get_section_rules(section_id: int) -> Optional[SectionRules]:
    """Return rules for the given section, or None for an unconfigured section."""
    return SECTION_RULES.get(section_id)
