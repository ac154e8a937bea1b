"""
Pipeline runner: orchestrates the extraction pipeline for uploaded scans.

Curriculum checklist (one or two images):
    quality signal -> preprocessing -> recognition -> coercion -> hydration
    -> per-section validation, for each image; then dedup -> overall validation.

Certificate of Registration, grade report and timetable (one image each):
    recognition -> coercion.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence

from docscan.catalog import Catalog, get_catalog
from docscan.extract import (
    coerce_cor,
    coerce_curriculum_subjects,
    coerce_grades,
    coerce_timetable,
)
from docscan.grouping import dedupe_subjects
from docscan.hydrate import hydrate_subjects
from docscan.image_quality import analyze_image_quality, preprocess_image
from docscan.ingest import StagedImage
from docscan.recognize import Recognizer, VisionRecognizer, describe_error, error_status
from docscan.report import log_curriculum_summary
from docscan.schema import (
    CorScan,
    CurriculumReport,
    GradeScan,
    ImageQuality,
    ImageResult,
    ImageValidation,
    PromptKind,
    TimetableScan,
)
from docscan.validate import validate_overall, validate_section

logger = logging.getLogger(__name__)

MAX_CURRICULUM_IMAGES = 2


class UnsupportedSubmissionError(ValueError):
    """The submission has a shape the validation rules do not define (e.g. three images)."""


def _workers_from_env() -> int:
    raw = os.environ.get("RECOGNIZER_MAX_WORKERS", "1")
    try:
        return max(1, int(raw))
    except ValueError:
        logger.warning(f"Ignoring invalid RECOGNIZER_MAX_WORKERS={raw!r}")
        return 1


def _failed_image(
    image: StagedImage,
    image_number: int,
    message: str,
    quality: Optional[ImageQuality],
) -> ImageResult:
    return ImageResult(
        image_number=image_number,
        original_file=image.original_filename,
        subjects=[],
        validation=ImageValidation(is_good=False, issues=[message], warnings=[], subject_count=0),
        quality=quality,
    )


def process_curriculum_image(
    image: StagedImage,
    image_number: int,
    recognizer: Recognizer,
    catalog: Catalog,
) -> ImageResult:
    """
    Run one checklist image through quality check, recognition, hydration and validation.

    Any failure local to this image (unreadable file, a recognizer that fails
    or raises, unparseable or malformed response) is recorded as a failed
    validation with the error message as its only issue; it is not raised.

    Args:
        image: Staged upload
        image_number: 1-based position in the submission, used as the section id
        recognizer: Recognizer to call
        catalog: Reference catalog for hydration

    Returns:
        ImageResult for this image
    """
    logger.info(f"Processing image {image_number}: {image.original_filename} ({image.byte_size / 1024:.1f}KB)")
    quality: Optional[ImageQuality] = None
    try:
        image_bytes = image.read_bytes()
        quality = analyze_image_quality(image_bytes)
        if quality.is_low_res:
            logger.info(f"Image {image_number}: low resolution detected ({quality.width}x{quality.height})")
        if quality.is_dark:
            logger.info(f"Image {image_number}: image appears dark")

        processed_bytes, processed_mime = preprocess_image(image_bytes, image.mime_type)
        parsed = recognizer.recognize(
            processed_bytes, processed_mime, PromptKind.CURRICULUM
        ).raise_for_failure()
        recognized = coerce_curriculum_subjects(parsed)
    except Exception as e:
        message = describe_error(e)
        status = error_status(e)
        status_note = f" (status {status})" if status is not None else ""
        logger.warning(f"Image {image_number}: extraction failed{status_note}: {message}")
        return _failed_image(image, image_number, message, quality)

    hydrated = hydrate_subjects(recognized, catalog)
    matched = sum(1 for s in hydrated if s.subject_code in catalog.entries)
    logger.info(f"Image {image_number}: extracted {len(hydrated)} subjects, {matched} hydrated from reference")

    validation = validate_section(hydrated, image_number)
    if validation.is_good:
        logger.info(f"Image {image_number}: quality GOOD")
    else:
        logger.info(f"Image {image_number}: quality POOR: {'; '.join(validation.issues)}")

    return ImageResult(
        image_number=image_number,
        original_file=image.original_filename,
        subjects=hydrated,
        validation=validation,
        quality=quality,
    )


def process_curriculum(
    images: Sequence[StagedImage],
    recognizer: Optional[Recognizer] = None,
    catalog: Optional[Catalog] = None,
    max_workers: Optional[int] = None,
) -> CurriculumReport:
    """
    Extract, merge and classify a curriculum checklist submitted as one or two images.

    Images may be recognized concurrently (max_workers > 1), but results are
    always merged in submission order so first-wins dedup stays deterministic.

    Args:
        images: Staged uploads in submission order (image 1 = section 1)
        recognizer: Recognizer to call (VisionRecognizer by default)
        catalog: Reference catalog (process-wide catalog by default)
        max_workers: Concurrent recognizer calls (RECOGNIZER_MAX_WORKERS, default 1)

    Returns:
        CurriculumReport; always produced once the preconditions hold

    Raises:
        ValueError: no images were submitted
        UnsupportedSubmissionError: more than two images were submitted
    """
    if not images:
        raise ValueError("No images to process")
    if len(images) > MAX_CURRICULUM_IMAGES:
        raise UnsupportedSubmissionError(
            f"A curriculum scan takes at most {MAX_CURRICULUM_IMAGES} images, got {len(images)}"
        )
    recognizer = recognizer or VisionRecognizer()
    catalog = catalog or get_catalog()
    workers = max_workers or _workers_from_env()

    numbered = list(enumerate(images, start=1))
    if workers > 1 and len(numbered) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            image_results = list(
                executor.map(
                    lambda item: process_curriculum_image(item[1], item[0], recognizer, catalog),
                    numbered,
                )
            )
    else:
        image_results = [
            process_curriculum_image(image, number, recognizer, catalog)
            for number, image in numbered
        ]

    unique_subjects = dedupe_subjects([r.subjects for r in image_results])
    overall = validate_overall(
        unique_subjects,
        [r.validation for r in image_results],
        catalog,
    )

    report = CurriculumReport(
        success=overall.success,
        quality=overall.quality,
        subjects=unique_subjects,
        total_subjects_found=len(unique_subjects),
        images_processed=len(images),
        validation=overall,
        image_results=image_results,
    )
    log_curriculum_summary(report, catalog)
    return report


def _recognize_single(
    image: StagedImage,
    kind: PromptKind,
    recognizer: Optional[Recognizer],
) -> Dict[str, Any]:
    recognizer = recognizer or VisionRecognizer()
    logger.info(f"Sending {image.original_filename} ({image.byte_size / 1024:.1f}KB) for {kind.value} extraction")
    return recognizer.recognize(image.read_bytes(), image.mime_type, kind).raise_for_failure()


def scan_cor(image: StagedImage, recognizer: Optional[Recognizer] = None) -> CorScan:
    """
    Extract program and enrolled courses from a Certificate of Registration.

    Raises:
        RecognitionFailed: the recognizer call failed or returned unparseable text
    """
    scan = coerce_cor(_recognize_single(image, PromptKind.COR, recognizer))
    logger.info(f"Extracted {scan.total_courses_found} courses for program: {scan.program}")
    return scan


def scan_grades(image: StagedImage, recognizer: Optional[Recognizer] = None) -> GradeScan:
    """
    Extract numeric grades from a grade report screenshot.

    Raises:
        RecognitionFailed: the recognizer call failed or returned unparseable text
    """
    scan = coerce_grades(_recognize_single(image, PromptKind.GRADES, recognizer))
    logger.info(f"Extracted {scan.total_found} grades")
    for entry in scan.grades:
        logger.debug(f"{entry.subject_code}: {entry.grade}")
    return scan


def scan_timetable(image: StagedImage, recognizer: Optional[Recognizer] = None) -> TimetableScan:
    """
    Extract academic year, semester and class blocks from a timetable.

    Raises:
        RecognitionFailed: the recognizer call failed or returned unparseable text
    """
    scan = coerce_timetable(_recognize_single(image, PromptKind.TIMETABLE, recognizer))
    logger.info(
        f"Extracted {scan.total_subjects_found} subjects from timetable "
        f"({scan.academic_year} - {scan.semester})"
    )
    return scan


__all__: List[str] = [
    "MAX_CURRICULUM_IMAGES",
    "UnsupportedSubmissionError",
    "process_curriculum",
    "process_curriculum_image",
    "scan_cor",
    "scan_grades",
    "scan_timetable",
]
