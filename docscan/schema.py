"""
Data models for scanned academic documents.
Uses Pydantic for validation and type safety.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class YearLevel(str, Enum):
    """Year placement within the program grid, in program order."""
    FIRST = "1st Year"
    SECOND = "2nd Year"
    THIRD = "3rd Year"
    FOURTH = "4th Year"


class Term(str, Enum):
    """Term placement within a year, in calendar order."""
    FIRST = "1st Semester"
    SECOND = "2nd Semester"
    SUMMER = "Summer"


class QualityTier(str, Enum):
    """
    Coarse confidence classification of a merged extraction.
    Every curriculum report carries exactly one.
    """
    POOR = "poor"
    MODERATE = "moderate"
    GOOD = "good"
    EXCELLENT = "excellent"


class PromptKind(str, Enum):
    """Which document the recognizer is asked to transcribe."""
    CURRICULUM = "curriculum"
    COR = "cor"              # Certificate of Registration
    GRADES = "grades"
    TIMETABLE = "timetable"


class CatalogEntry(BaseModel):
    """One course of the official curriculum. Read-only reference data."""
    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    lec_units: int = Field(ge=0)
    lab_units: int = Field(ge=0)
    units: int = Field(ge=0)  # lec_units + lab_units, trusted from the source table
    year_level: YearLevel
    semester: Term


class Subject(BaseModel):
    """
    One curriculum row as recognized or as hydrated from the catalog.

    year_level and semester stay free text: the recognizer may emit anything,
    while catalog values are enum members whose string values compare equal.
    """
    subject_code: str
    subject_name: str = ""
    lec_units: int = 0
    lab_units: int = 0
    units: int = 0
    year_level: str = "Unknown"
    semester: str = "Unknown"


class ImageValidation(BaseModel):
    """Per-image completeness judgment for one section of the checklist."""
    is_good: bool = False
    issues: List[str] = []
    warnings: List[str] = []
    subject_count: int = 0
    missing_courses: List[str] = []


class OverallValidation(BaseModel):
    """Judgment across every image of one curriculum submission."""
    success: bool = False
    quality: QualityTier = QualityTier.POOR
    total_count: int = 0
    issues: List[str] = []
    warnings: List[str] = []
    missing_courses: List[str] = []
    by_year: Dict[str, int] = {}


class ImageQuality(BaseModel):
    """Objective quality signal of an uploaded image, measured before preprocessing."""
    width: Optional[int] = None
    height: Optional[int] = None
    resolution: Optional[int] = None
    brightness: Optional[float] = None
    is_low_res: bool = False
    is_blurry: bool = False
    is_dark: bool = False
    is_bright: bool = False
    error: Optional[str] = None


class ImageResult(BaseModel):
    """Everything produced for one submitted image."""
    image_number: int
    original_file: str
    subjects: List[Subject] = []
    validation: Optional[ImageValidation] = None
    quality: Optional[ImageQuality] = None


class CurriculumReport(BaseModel):
    """
    Final result of a curriculum scan.
    Always produced once inputs are valid, whether or not extraction succeeded.
    """
    success: bool
    quality: QualityTier
    subjects: List[Subject]
    total_subjects_found: int
    images_processed: int
    validation: OverallValidation
    image_results: List[ImageResult]

    @property
    def image_summary(self) -> Dict[str, object]:
        def _good(index: int) -> bool:
            if index >= len(self.image_results):
                return False
            validation = self.image_results[index].validation
            return bool(validation and validation.is_good)

        return {
            "image1_good": _good(0),
            "image2_good": _good(1),
            "total_images": self.images_processed,
        }


# Certificate of Registration

class ScheduleSlot(BaseModel):
    days: str = ""
    time: str = ""
    room: str = ""


class CorCourse(BaseModel):
    subject_code: str
    subject_name: str = "Unknown Subject"
    units: int = 0
    schedules: List[ScheduleSlot] = []
    section: str = ""
    instructor: str = ""


class CorScan(BaseModel):
    program: str
    courses: List[CorCourse] = []
    total_courses_found: int = 0
    confidence: str = "unknown"


# Grade report

class GradeEntry(BaseModel):
    subject_code: str
    subject_name: str = ""
    grade: float


class GradeScan(BaseModel):
    grades: List[GradeEntry] = []
    total_found: int = 0
    confidence: str = "unknown"


# Timetable

class TimetableSlot(BaseModel):
    day: str = ""
    start_time: str = ""
    end_time: str = ""


class TimetableSubject(BaseModel):
    subject_name: str
    subject_code: str = ""
    section: str = ""
    room: str = ""
    instructor: str = ""
    schedules: List[TimetableSlot] = []


class TimetableScan(BaseModel):
    academic_year: str = ""
    semester: str = ""
    subjects: List[TimetableSubject] = []
    total_subjects_found: int = 0
    confidence: str = "unknown"
