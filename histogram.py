"""
Image decoding: turn an image file into a packed color -> pixel count histogram.
"""

import logging

import numpy as np
from PIL import Image

from colorspace import rgb_to_packed


logger = logging.getLogger(__name__)

# Image size limits (security: prevent decompression bombs)
MAX_IMAGE_PIXELS = 50_000_000  # 50 megapixels
MAX_IMAGE_DIMENSION = 10_000  # 10k pixels per side


def histogram_from_pixels(pixels) -> dict[int, int]:
    """
    Count pixels per packed color.

    Args:
        pixels: Array of shape (..., 3) with 0-255 RGB channels

    Returns:
        dict mapping packed 0x00RRGGBB color to pixel count
    """
    pixels = np.asarray(pixels)
    if pixels.ndim < 1 or pixels.shape[-1] != 3:
        raise ValueError(f"Expected RGB pixels with a trailing axis of 3, got shape {pixels.shape}")

    packed = rgb_to_packed(pixels.reshape(-1, 3))
    colors, counts = np.unique(packed, return_counts=True)
    return dict(zip(colors.tolist(), counts.tolist()))


def histogram_from_image(image_path: str) -> dict[int, int]:
    """
    Load an image and count its pixels per packed RGB color.

    Raises:
        FileNotFoundError: If image file doesn't exist
        ValueError: If file is not a valid image or exceeds size limits
    """
    try:
        img = Image.open(image_path)
    except FileNotFoundError:
        raise FileNotFoundError(f"Image not found: {image_path}")
    except (OSError, Image.DecompressionBombError) as e:
        raise ValueError(f"Could not open image: {e}")

    with img:
        width, height = img.size
        if width > MAX_IMAGE_DIMENSION or height > MAX_IMAGE_DIMENSION:
            raise ValueError(
                f"Image dimensions {width}x{height} exceed maximum "
                f"{MAX_IMAGE_DIMENSION}x{MAX_IMAGE_DIMENSION}"
            )
        if width * height > MAX_IMAGE_PIXELS:
            raise ValueError(
                f"Image has {width * height:,} pixels, exceeding maximum {MAX_IMAGE_PIXELS:,}"
            )

        try:
            pixels = np.array(img.convert('RGB'))
        except OSError as e:
            raise ValueError(f"Could not decode image: {e}")

    histogram = histogram_from_pixels(pixels)
    logger.debug("Loaded %s: %dx%d, %d distinct colors", image_path, width, height, len(histogram))
    return histogram
