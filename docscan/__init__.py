"""
docscan: vision-model extraction and validation of student academic documents.

Turns photos of a BS Computer Science curriculum checklist into a canonical,
deduplicated course list with a quality classification, and extracts
Certificates of Registration, grade reports and timetables.
"""

__version__ = "0.1.0"
