"""
Image quality signal and preprocessing for photographed checklists.

Both functions degrade instead of failing: an unreadable image yields a
conservative low-quality signal, and a failed enhancement returns the
original bytes.
"""

import io
import logging
import math
from typing import Tuple

from PIL import Image, ImageFilter, ImageOps, ImageStat

from docscan.schema import ImageQuality

logger = logging.getLogger(__name__)

MIN_WIDTH = 800
MIN_HEIGHT = 600
DARK_BRIGHTNESS = 60
BRIGHT_BRIGHTNESS = 200

# Preprocessing
TARGET_MIN_WIDTH = 1200
SHARPEN_RADIUS = 1.5
CONTRAST_GAIN = 1.2
CONTRAST_OFFSET = -(128 * 0.2)
MAX_PREPROCESSED_PIXELS = 40_000_000


def analyze_image_quality(image_bytes: bytes) -> ImageQuality:
    """
    Measure resolution and brightness of an uploaded image.

    Brightness is the mean of the first band (the luminance for grayscale,
    the red channel for RGB).

    Args:
        image_bytes: Raw uploaded image

    Returns:
        ImageQuality; on failure is_low_res=True and error is set
    """
    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            image.load()
            width, height = image.size
            brightness = float(ImageStat.Stat(image).mean[0])
    except Exception as e:
        logger.warning(f"Image quality analysis failed: {e}")
        return ImageQuality(is_low_res=True, error=str(e))

    return ImageQuality(
        width=width,
        height=height,
        resolution=width * height,
        brightness=brightness,
        is_low_res=width < MIN_WIDTH or height < MIN_HEIGHT,
        is_dark=brightness < DARK_BRIGHTNESS,
        is_bright=brightness > BRIGHT_BRIGHTNESS,
    )


def _upscale_factor(width: int, height: int) -> int:
    """Integer factor reaching TARGET_MIN_WIDTH, reduced to keep the result within MAX_PREPROCESSED_PIXELS."""
    if width >= TARGET_MIN_WIDTH:
        return 1
    scale = math.ceil(TARGET_MIN_WIDTH / width)
    budget_scale = math.isqrt(MAX_PREPROCESSED_PIXELS // (width * height))
    if budget_scale < scale:
        logger.warning(
            f"Upscale of {width}x{height} image limited to {max(budget_scale, 1)}x "
            f"(pixel budget {MAX_PREPROCESSED_PIXELS})"
        )
        scale = budget_scale
    return max(scale, 1)


def _linear_contrast(value: int) -> int:
    return max(0, min(255, int(round(value * CONTRAST_GAIN + CONTRAST_OFFSET))))


def preprocess_image(image_bytes: bytes, mime_type: str) -> Tuple[bytes, str]:
    """
    Enhance a scan for text recognition.

    Steps: grayscale, integer upscale (Lanczos) when narrower than 1200px
    (capped at MAX_PREPROCESSED_PIXELS), autocontrast, unsharp mask, then a
    mild linear contrast boost.

    Args:
        image_bytes: Raw uploaded image
        mime_type: MIME type of the upload

    Returns:
        (png_bytes, "image/png"), or the original (image_bytes, mime_type)
        if any step fails
    """
    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            processed = ImageOps.grayscale(image)
        width, height = processed.size
        scale = _upscale_factor(width, height)
        if scale > 1:
            processed = processed.resize((width * scale, height * scale), Image.Resampling.LANCZOS)
            logger.info(f"Upscaled {width}x{height} image {scale}x")
        processed = ImageOps.autocontrast(processed)
        processed = processed.filter(ImageFilter.UnsharpMask(radius=SHARPEN_RADIUS))
        processed = processed.point(_linear_contrast)

        buffer = io.BytesIO()
        processed.save(buffer, format="PNG")
    except Exception as e:
        logger.warning(f"Preprocessing failed, using original image: {e}")
        return image_bytes, mime_type

    return buffer.getvalue(), "image/png"
