"""Pytest hooks for docscan. Keeps tests away from real vision API keys and provides catalog-derived data."""

import io
from typing import Iterable, List, Optional

import pytest
from PIL import Image

from docscan.catalog import get_catalog
from docscan.hydrate import subject_from_entry
from docscan.schema import Subject, YearLevel


@pytest.fixture(autouse=True)
def _no_vision_keys(monkeypatch):
    """Tests opt in to a provider by setting the key they need."""
    for name in (
        "GROQ_API_KEY",
        "OPENAI_API_KEY",
        "VISION_MODEL",
        "RECOGNIZER_TIMEOUT_SECONDS",
        "RECOGNIZER_MAX_WORKERS",
        "CURRICULUM_REFERENCE_CSV_PATH",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def catalog():
    return get_catalog()


@pytest.fixture
def catalog_subjects(catalog):
    """Canonical subjects for the given year levels (all years by default), in catalog order."""

    def _build(years: Optional[Iterable[YearLevel]] = None, exclude: Iterable[str] = ()) -> List[Subject]:
        wanted = set(years) if years is not None else set(YearLevel)
        skipped = set(exclude)
        return [
            subject_from_entry(entry)
            for entry in catalog
            if entry.year_level in wanted and entry.code not in skipped
        ]

    return _build


@pytest.fixture
def make_image():
    """Encode a solid-color test image."""

    def _build(width: int, height: int, color=200, mode: str = "L", fmt: str = "PNG") -> bytes:
        buffer = io.BytesIO()
        Image.new(mode, (width, height), color).save(buffer, format=fmt)
        return buffer.getvalue()

    return _build
