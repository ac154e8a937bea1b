"""
Ingestion module: stages uploaded images on disk for the lifetime of one request.
"""

import hashlib
import logging
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {"image/jpeg", "image/png", "image/webp"}
MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10MB per file

_EXTENSIONS = {"image/jpeg": ".jpg", "image/png": ".png", "image/webp": ".webp"}


@dataclass(frozen=True)
class StagedImage:
    """An uploaded image written to the request's staging directory."""

    path: Path
    original_filename: str
    mime_type: str
    sha256: str
    byte_size: int

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


def is_allowed_mime_type(mime_type: Optional[str]) -> bool:
    return (mime_type or "").lower() in ALLOWED_MIME_TYPES


def stage_upload(
    uploaded_bytes: bytes,
    original_filename: str,
    mime_type: str,
    staging_dir: Path,
    index: int = 0,
) -> StagedImage:
    """
    Save one uploaded image under staging_dir.

    Args:
        uploaded_bytes: Raw file bytes from upload
        original_filename: Original filename from user
        mime_type: Declared MIME type of the upload
        staging_dir: Request-scoped directory
        index: Position of the file in the request, keeps names unique

    Returns:
        StagedImage describing the stored file
    """
    sha256_hash = hashlib.sha256(uploaded_bytes).hexdigest()
    suffix = Path(original_filename or "").suffix.lower() or _EXTENSIONS.get(mime_type, ".bin")
    path = Path(staging_dir) / f"{index:02d}_{sha256_hash[:12]}{suffix}"
    with open(path, "wb") as f:
        f.write(uploaded_bytes)
    return StagedImage(
        path=path,
        original_filename=original_filename or path.name,
        mime_type=mime_type,
        sha256=sha256_hash,
        byte_size=len(uploaded_bytes),
    )


@contextmanager
def staged_uploads(
    uploads: Iterable[Tuple[bytes, str, str]],
    base_dir: Optional[str] = None,
) -> Iterator[List[StagedImage]]:
    """
    Stage (bytes, filename, mime_type) uploads for the duration of a with-block.

    The staging directory and every file in it are removed when the block
    exits, whether it returns normally or raises.
    """
    staging_dir = Path(tempfile.mkdtemp(prefix="docscan_", dir=base_dir))
    try:
        staged = [
            stage_upload(data, filename, mime_type, staging_dir, index=i)
            for i, (data, filename, mime_type) in enumerate(uploads)
        ]
        yield staged
    finally:
        shutil.rmtree(staging_dir, ignore_errors=True)
        logger.debug(f"Removed staging directory {staging_dir}")
