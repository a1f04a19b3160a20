"""
Tonal enhancement for scanned documents.

Includes:
- Grayscale reduction for gray, BGR and BGRA rasters
- CLAHE (Contrast Limited Adaptive Histogram Equalization)
- Adaptive binarization for black-and-white output
"""

from typing import Tuple
import numpy as np
from loguru import logger

try:
    import cv2
    CV2_AVAILABLE = True
except ImportError:
    CV2_AVAILABLE = False


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """
    Reduce an image to a single luminance channel.

    Single-channel input is copied so the result never aliases the input.

    Args:
        image: Input image (grayscale, BGR or BGRA)

    Returns:
        Grayscale image
    """
    if not CV2_AVAILABLE:
        raise ImportError("OpenCV is required for image enhancement")

    if image.ndim == 2:
        return image.copy()
    if image.ndim == 3 and image.shape[2] == 1:
        return image[:, :, 0].copy()
    if image.ndim == 3 and image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    if image.ndim == 3 and image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)

    raise ValueError(f"Unsupported image shape: {image.shape}")


def apply_clahe(
    image: np.ndarray,
    clip_limit: float = 2.0,
    tile_size: Tuple[int, int] = (8, 8)
) -> np.ndarray:
    """
    Apply CLAHE (Contrast Limited Adaptive Histogram Equalization).

    Color images are equalized on the L channel of LAB only, so
    chrominance is left untouched. An alpha channel is carried over.

    Args:
        image: Input image (grayscale, BGR or BGRA)
        clip_limit: Threshold for contrast limiting
        tile_size: Size of grid for histogram equalization

    Returns:
        Contrast-enhanced image
    """
    if not CV2_AVAILABLE:
        raise ImportError("OpenCV is required for image enhancement")

    clahe = cv2.createCLAHE(clipLimit=clip_limit, tileGridSize=tile_size)

    if image.ndim == 3 and image.shape[2] in (3, 4):
        bgr = image[:, :, :3]
        lab = cv2.cvtColor(bgr, cv2.COLOR_BGR2LAB)
        l_channel, a_channel, b_channel = cv2.split(lab)

        l_channel = clahe.apply(l_channel)

        lab = cv2.merge([l_channel, a_channel, b_channel])
        enhanced = cv2.cvtColor(lab, cv2.COLOR_LAB2BGR)

        if image.shape[2] == 4:
            enhanced = np.dstack([enhanced, image[:, :, 3]])
    else:
        enhanced = clahe.apply(to_grayscale(image))

    logger.debug(f"Applied CLAHE with clip_limit={clip_limit}")
    return enhanced


def binarize_adaptive(
    image: np.ndarray,
    block_size: int = 11,
    c: int = 2
) -> np.ndarray:
    """
    Apply adaptive thresholding for binarization.

    Each pixel is compared against a Gaussian-weighted mean of its
    neighborhood, which copes with uneven lighting across the page.

    Args:
        image: Input image (grayscale, BGR or BGRA)
        block_size: Size of pixel neighborhood for threshold calculation
        c: Constant subtracted from the weighted mean

    Returns:
        Binary image (0 or 255)
    """
    if not CV2_AVAILABLE:
        raise ImportError("OpenCV is required for image enhancement")

    gray = to_grayscale(image)

    # Ensure block_size is odd
    if block_size % 2 == 0:
        block_size += 1

    binary = cv2.adaptiveThreshold(
        gray,
        255,
        cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
        cv2.THRESH_BINARY,
        block_size,
        c
    )

    logger.debug(f"Applied adaptive binarization with block_size={block_size}")
    return binary
