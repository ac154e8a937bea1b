"""
Tests for request-scoped staging of uploaded images.
"""

import pytest

from docscan.ingest import is_allowed_mime_type, stage_upload, staged_uploads


@pytest.mark.parametrize("mime, allowed", [
    ("image/jpeg", True),
    ("image/png", True),
    ("image/webp", True),
    ("IMAGE/PNG", True),
    ("image/gif", False),
    ("application/pdf", False),
    ("", False),
    (None, False),
])
def test_allowed_mime_types(mime, allowed):
    assert is_allowed_mime_type(mime) is allowed


def test_stage_upload_records_metadata(tmp_path):
    staged = stage_upload(b"abc", "Checklist Page 1.JPG", "image/jpeg", tmp_path, index=1)
    assert staged.path.parent == tmp_path
    assert staged.path.name.startswith("01_")
    assert staged.path.suffix == ".jpg"
    assert staged.original_filename == "Checklist Page 1.JPG"
    assert staged.byte_size == 3
    assert staged.sha256 == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    assert staged.read_bytes() == b"abc"


def test_suffix_from_mime_when_filename_has_none(tmp_path):
    staged = stage_upload(b"abc", "blob", "image/webp", tmp_path)
    assert staged.path.suffix == ".webp"


def test_identical_uploads_get_distinct_paths(tmp_path):
    uploads = [(b"same", "a.png", "image/png"), (b"same", "a.png", "image/png")]
    with staged_uploads(uploads, base_dir=str(tmp_path)) as staged:
        assert len(staged) == 2
        assert staged[0].path != staged[1].path
        assert all(s.path.exists() for s in staged)


def test_staging_dir_removed_after_block(tmp_path):
    with staged_uploads([(b"x", "x.png", "image/png")], base_dir=str(tmp_path)) as staged:
        staging_dir = staged[0].path.parent
        assert staging_dir.exists()
    assert not staging_dir.exists()
    assert list(tmp_path.iterdir()) == []


def test_staging_dir_removed_on_error(tmp_path):
    with pytest.raises(RuntimeError):
        with staged_uploads([(b"x", "x.png", "image/png")], base_dir=str(tmp_path)):
            raise RuntimeError("processing failed")
    assert list(tmp_path.iterdir()) == []
