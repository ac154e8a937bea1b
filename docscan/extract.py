"""
Coercion of raw recognizer JSON into typed records.

The recognizer's output is best-effort: fields may be missing, null, numeric
strings ("3.0", "2u") or garbage. Numbers fall back to 0 and text to a
placeholder; nothing here guesses a value beyond those defaults.
"""

import math
import re
from typing import Any, Dict, List, Optional

from docscan.schema import (
    CorCourse,
    CorScan,
    GradeEntry,
    GradeScan,
    ScheduleSlot,
    Subject,
    TimetableScan,
    TimetableSlot,
    TimetableSubject,
)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

MAX_GRADE = 5.0


def parse_int(value: Any) -> int:
    """Leading integer of a value ("3.0" -> 3, "2u" -> 2); 0 when there is none."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return 0
        return int(value)
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def parse_float(value: Any) -> float:
    """Leading decimal number of a value; 0.0 when there is none."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_FLOAT.match(str(value))
        if not match:
            return 0.0
        number = float(match.group(1))
    return number if math.isfinite(number) else 0.0


def _text(value: Any, default: str = "") -> str:
    """Text value, or default for missing/empty values."""
    if value is None:
        return default
    text = str(value)
    return text if text else default


def _items(parsed: Dict[str, Any], key: str) -> Optional[List[Any]]:
    items = parsed.get(key)
    if not isinstance(items, list):
        return None
    return items


def _entry(item: Any) -> Dict[str, Any]:
    return item if isinstance(item, dict) else {}


def coerce_curriculum_subjects(parsed: Dict[str, Any]) -> List[Subject]:
    """
    Build Subjects from a curriculum response.

    Rows without a code get the placeholder UNKNOWN_<n> (1-based row number).

    Raises:
        ValueError: if the response has no "subjects" array
    """
    items = _items(parsed, "subjects")
    if items is None:
        raise ValueError("AI response did not contain a subjects list")
    subjects = []
    for idx, raw in enumerate(items):
        item = _entry(raw)
        subjects.append(
            Subject(
                subject_code=_text(item.get("subjectCode"), f"UNKNOWN_{idx + 1}"),
                subject_name=_text(item.get("subjectName")),
                lec_units=parse_int(item.get("lecUnits")),
                lab_units=parse_int(item.get("labUnits")),
                units=parse_int(item.get("units")),
                year_level=_text(item.get("yearLevel"), "Unknown"),
                semester=_text(item.get("semester"), "Unknown"),
            )
        )
    return subjects


def coerce_cor(parsed: Dict[str, Any], default_program: str = "BS Computer Science") -> CorScan:
    """Build a CorScan from a Certificate of Registration response."""
    courses = []
    for idx, raw in enumerate(_items(parsed, "courses") or []):
        item = _entry(raw)
        schedules = [
            ScheduleSlot(
                days=_text(_entry(s).get("days")),
                time=_text(_entry(s).get("time")),
                room=_text(_entry(s).get("room")),
            )
            for s in (_items(item, "schedules") or [])
        ]
        courses.append(
            CorCourse(
                subject_code=_text(item.get("subjectCode"), f"UNKNOWN_{idx + 1}"),
                subject_name=_text(item.get("subjectName"), "Unknown Subject"),
                units=parse_int(item.get("units")),
                schedules=schedules,
                section=_text(item.get("section")),
                instructor=_text(item.get("instructor")),
            )
        )
    return CorScan(
        program=_text(parsed.get("program"), default_program),
        courses=courses,
        total_courses_found=len(courses),
        confidence=_text(parsed.get("confidence"), "unknown"),
    )


def coerce_grades(parsed: Dict[str, Any]) -> GradeScan:
    """
    Build a GradeScan from a grade report response.

    Only numeric grades in (0, 5.0] are kept; INC/DRP and unparseable values
    coerce to 0 and are dropped.
    """
    grades = []
    for idx, raw in enumerate(_items(parsed, "grades") or []):
        item = _entry(raw)
        grade = parse_float(item.get("grade"))
        if not 0 < grade <= MAX_GRADE:
            continue
        grades.append(
            GradeEntry(
                subject_code=_text(item.get("subjectCode"), f"UNKNOWN_{idx + 1}"),
                subject_name=_text(item.get("subjectName")),
                grade=grade,
            )
        )
    return GradeScan(
        grades=grades,
        total_found=len(grades),
        confidence=_text(parsed.get("confidence"), "unknown"),
    )


def coerce_timetable(parsed: Dict[str, Any]) -> TimetableScan:
    """Build a TimetableScan from a timetable response."""
    subjects = []
    for idx, raw in enumerate(_items(parsed, "subjects") or []):
        item = _entry(raw)
        schedules = [
            TimetableSlot(
                day=_text(_entry(s).get("day")),
                start_time=_text(_entry(s).get("startTime")),
                end_time=_text(_entry(s).get("endTime")),
            )
            for s in (_items(item, "schedules") or [])
        ]
        subjects.append(
            TimetableSubject(
                subject_name=_text(item.get("subjectName"), f"Unknown Subject {idx + 1}"),
                subject_code=_text(item.get("subjectCode")),
                section=_text(item.get("section")),
                room=_text(item.get("room")),
                instructor=_text(item.get("instructor")),
                schedules=schedules,
            )
        )
    return TimetableScan(
        academic_year=_text(parsed.get("academicYear")),
        semester=_text(parsed.get("semester")),
        subjects=subjects,
        total_subjects_found=len(subjects),
        confidence=_text(parsed.get("confidence"), "unknown"),
    )
