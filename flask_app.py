"""
Flask application for the document scanning API.
Accepts photos of academic documents and returns the extracted records as JSON.
"""

from flask import Flask, request, jsonify
import os
import logging
from typing import List, Optional, Tuple

# Load environment variables from .env file (for local development)
try:
    from dotenv import load_dotenv
    load_dotenv()
except ImportError:
    pass  # dotenv not installed, assume env vars are set another way

from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from docscan.ingest import MAX_UPLOAD_BYTES, is_allowed_mime_type, staged_uploads
from docscan.recognize import DEFAULT_MODELS, RecognitionFailed, get_provider
from docscan.runner import (
    MAX_CURRICULUM_IMAGES,
    UnsupportedSubmissionError,
    process_curriculum,
    scan_cor,
    scan_grades,
    scan_timetable,
)

app = Flask(__name__)
app.logger.setLevel(logging.INFO)

# Two images per request at most, plus room for the multipart envelope
app.config["MAX_CONTENT_LENGTH"] = MAX_CURRICULUM_IMAGES * MAX_UPLOAD_BYTES + 1024 * 1024

UPLOAD_FIELD = "image"
TYPE_ERROR = "Only JPG, PNG, and WEBP images are allowed"
MISSING_KEY_ERROR = "GROQ_API_KEY not set. Add it to your .env file."
TOO_LARGE_ERROR = f"File too large (max {MAX_UPLOAD_BYTES // (1024 * 1024)}MB per image)"

Upload = Tuple[bytes, str, str]


class UploadRejected(Exception):
    """An upload that fails the request-level checks."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def error_response(message: str, status_code: int):
    return jsonify({"success": False, "error": message}), status_code


def read_uploads(max_files: int) -> List[Upload]:
    """
    Read the files posted under the "image" field.

    Returns:
        (bytes, filename, mime_type) for each non-empty file, in posted order

    Raises:
        UploadRejected: too many files, a disallowed type, or an oversized file
    """
    files = [f for f in request.files.getlist(UPLOAD_FIELD) if f and f.filename]
    if len(files) > max_files:
        raise UploadRejected(f"At most {max_files} image(s) allowed, got {len(files)}")

    uploads = []
    for file in files:
        if not is_allowed_mime_type(file.mimetype):
            raise UploadRejected(TYPE_ERROR)
        data = file.read()
        if len(data) > MAX_UPLOAD_BYTES:
            raise UploadRejected(TOO_LARGE_ERROR, 413)
        uploads.append((data, file.filename, file.mimetype))
    return uploads


def check_api_key():
    if get_provider() is None:
        return error_response(MISSING_KEY_ERROR, 500)
    return None


@app.errorhandler(RequestEntityTooLarge)
def handle_too_large(e):
    return error_response(TOO_LARGE_ERROR, 413)


@app.errorhandler(UploadRejected)
def handle_upload_rejected(e: UploadRejected):
    return error_response(e.message, e.status_code)


@app.errorhandler(RecognitionFailed)
def handle_recognition_failed(e: RecognitionFailed):
    app.logger.error(f"Scan failed: {e}")
    return error_response(str(e), e.status_code or 500)


@app.errorhandler(Exception)
def handle_unexpected_error(e: Exception):
    if isinstance(e, HTTPException):
        return error_response(e.description or e.name, e.code or 500)
    app.logger.exception(f"Unhandled error on {request.path}: {e}")
    return error_response(str(e) or type(e).__name__, 500)


def _single_scan(scan_fn, label: str):
    uploads = read_uploads(max_files=1)
    if not uploads:
        return error_response("No image uploaded", 400)
    missing_key = check_api_key()
    if missing_key is not None:
        return missing_key

    app.logger.info(f"{label} scan: {uploads[0][1]} ({len(uploads[0][0]) / 1024:.1f}KB)")
    with staged_uploads(uploads) as staged:
        scan = scan_fn(staged[0])
    return jsonify({"success": True, **scan.model_dump(mode="json")})


@app.route("/api/scan-curriculum", methods=["POST"])
def scan_curriculum_route():
    """Extract and validate a curriculum checklist from one or two photos."""
    uploads = read_uploads(max_files=MAX_CURRICULUM_IMAGES)
    if not uploads:
        return error_response("No image(s) uploaded", 400)
    missing_key = check_api_key()
    if missing_key is not None:
        return missing_key

    app.logger.info(f"Curriculum scan: {len(uploads)} image(s)")
    try:
        with staged_uploads(uploads) as staged:
            report = process_curriculum(staged)
    except UnsupportedSubmissionError as e:
        return error_response(str(e), 400)

    payload = report.model_dump(mode="json")
    payload["image_summary"] = report.image_summary
    return jsonify(payload)


@app.route("/api/scan-cor", methods=["POST"])
def scan_cor_route():
    """Extract program and courses from a Certificate of Registration."""
    return _single_scan(scan_cor, "COR")


@app.route("/api/scan-grades", methods=["POST"])
def scan_grades_route():
    """Extract grades from a grade report screenshot."""
    return _single_scan(scan_grades, "Grades")


@app.route("/api/scan-timetable", methods=["POST"])
def scan_timetable_route():
    """Extract class blocks from a timetable."""
    return _single_scan(scan_timetable, "Timetable")


@app.route("/api/health")
def health():
    provider: Optional[str] = get_provider()
    return jsonify({
        "status": "ok",
        "provider": provider,
        "model": os.environ.get("VISION_MODEL") or DEFAULT_MODELS.get(provider or ""),
        "api_key_set": provider is not None,
        "features": ["image_preprocessing", "quality_validation", "auto_hydration"],
    })


if __name__ == "__main__":
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = int(os.environ.get("PORT", 3001))
    if get_provider() is None:
        app.logger.warning("No vision API key set; add GROQ_API_KEY (or OPENAI_API_KEY) to your .env file")
    app.run(host="0.0.0.0", port=port, debug=False)
