"""
Tests for the image quality signal and preprocessing, using Pillow-generated images.
"""

import io

from PIL import Image

from docscan import image_quality
from docscan.image_quality import analyze_image_quality, preprocess_image


def test_small_dark_image(make_image):
    quality = analyze_image_quality(make_image(400, 300, color=30))
    assert quality.width == 400
    assert quality.height == 300
    assert quality.resolution == 120000
    assert quality.brightness == 30
    assert quality.is_low_res is True
    assert quality.is_dark is True
    assert quality.is_bright is False
    assert quality.error is None


def test_large_bright_image(make_image):
    quality = analyze_image_quality(make_image(1000, 800, color=230))
    assert quality.is_low_res is False
    assert quality.is_dark is False
    assert quality.is_bright is True


def test_low_res_on_either_dimension(make_image):
    assert analyze_image_quality(make_image(1000, 500)).is_low_res is True
    assert analyze_image_quality(make_image(700, 900)).is_low_res is True
    assert analyze_image_quality(make_image(800, 600)).is_low_res is False


def test_brightness_uses_first_band(make_image):
    quality = analyze_image_quality(make_image(900, 700, color=(40, 250, 250), mode="RGB", fmt="JPEG"))
    assert quality.is_dark is True


def test_unreadable_bytes_are_low_quality():
    quality = analyze_image_quality(b"definitely not an image")
    assert quality.is_low_res is True
    assert quality.error
    assert quality.width is None


def _decode(data):
    with Image.open(io.BytesIO(data)) as image:
        image.load()
        return image.format, image.mode, image.size


def test_narrow_image_is_upscaled_to_grayscale_png(make_image):
    data, mime = preprocess_image(make_image(500, 400, color=(120, 130, 140), mode="RGB", fmt="JPEG"), "image/jpeg")
    assert mime == "image/png"
    fmt, mode, size = _decode(data)
    assert fmt == "PNG"
    assert mode == "L"
    assert size == (1500, 1200)


def test_exact_integer_upscale(make_image):
    data, _ = preprocess_image(make_image(600, 300), "image/png")
    assert _decode(data)[2] == (1200, 600)


def test_wide_image_keeps_size(make_image):
    data, mime = preprocess_image(make_image(1300, 900), "image/png")
    assert mime == "image/png"
    assert _decode(data)[2] == (1300, 900)


def test_failed_preprocessing_returns_original():
    original = b"not an image at all"
    assert preprocess_image(original, "image/webp") == (original, "image/webp")


def test_upscale_stays_within_pixel_budget(make_image, monkeypatch):
    requested = []
    original_resize = Image.Image.resize

    def recording_resize(self, size, *args, **kwargs):
        requested.append(size)
        return original_resize(self, (self.width, self.height), *args, **kwargs)

    monkeypatch.setattr(Image.Image, "resize", recording_resize)

    preprocess_image(make_image(2, 20000), "image/png")

    assert len(requested) == 1
    width, height = requested[0]
    assert width * height <= image_quality.MAX_PREPROCESSED_PIXELS
    assert width > 2


def test_upscale_shrunk_to_budget(make_image, monkeypatch):
    monkeypatch.setattr(image_quality, "MAX_PREPROCESSED_PIXELS", 1_000_000)
    data, _ = preprocess_image(make_image(2, 20000), "image/png")
    width, height = _decode(data)[2]
    assert (width, height) == (10, 100000)


def test_upscale_skipped_when_budget_allows_none(make_image, monkeypatch, caplog):
    monkeypatch.setattr(image_quality, "MAX_PREPROCESSED_PIXELS", 50_000)
    with caplog.at_level("WARNING"):
        data, mime = preprocess_image(make_image(2, 20000), "image/png")
    assert mime == "image/png"
    assert _decode(data)[2] == (2, 20000)
    assert any("limited to 1x" in r.message for r in caplog.records)
