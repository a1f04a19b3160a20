"""
Geometric operations on document images.

Includes:
- Perspective correction (flattening a quadrilateral to a rectangle)
- Crop to quadrilateral with transparent surroundings
- Fixed-angle rotation
- Downscale to fit a bounding box
"""

from typing import Tuple
import numpy as np
from loguru import logger

try:
    import cv2
    CV2_AVAILABLE = True
except ImportError:
    CV2_AVAILABLE = False

from pagescan.errors import GeometryError
from pagescan.types import DocumentBounds


def output_dimensions(bounds: DocumentBounds) -> Tuple[int, int]:
    """
    Size of the rectangle a quadrilateral is flattened into.

    Width is the longer of the top and bottom edges, height the longer
    of the left and right edges.

    Args:
        bounds: Document bounds

    Returns:
        Tuple of (width, height) in pixels
    """
    width_top = bounds.top_left.distance_to(bounds.top_right)
    width_bottom = bounds.bottom_left.distance_to(bounds.bottom_right)
    height_left = bounds.top_left.distance_to(bounds.bottom_left)
    height_right = bounds.top_right.distance_to(bounds.bottom_right)

    return int(max(width_top, width_bottom)), int(max(height_left, height_right))


def polygon_area(pts: np.ndarray) -> float:
    """Absolute shoelace area of a closed polygon given as (N, 2) array."""
    x = pts[:, 0].astype(np.float64)
    y = pts[:, 1].astype(np.float64)
    return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))) / 2.0)


def get_perspective_transform(bounds: DocumentBounds) -> Tuple[np.ndarray, Tuple[int, int]]:
    """
    Homography mapping the bounds onto an upright rectangle.

    Args:
        bounds: Document bounds in canonical order

    Returns:
        Tuple of (3x3 transformation matrix, (width, height))

    Raises:
        GeometryError: If the corners are degenerate
    """
    if not CV2_AVAILABLE:
        raise ImportError("OpenCV is required for geometric preprocessing")

    src = bounds.to_array()
    if not np.all(np.isfinite(src)):
        raise GeometryError("Corner coordinates are not finite")

    width, height = output_dimensions(bounds)
    if width < 1 or height < 1:
        raise GeometryError(f"Degenerate output size {width}x{height}")

    if polygon_area(src) < 1.0:
        raise GeometryError("Corners enclose no area")

    dst = np.array([
        [0, 0],
        [width, 0],
        [width, height],
        [0, height]
    ], dtype=np.float32)

    matrix = cv2.getPerspectiveTransform(src, dst)
    if not np.all(np.isfinite(matrix)):
        raise GeometryError("Perspective transform is not finite")

    return matrix, (width, height)


def perspective_correction(image: np.ndarray, bounds: DocumentBounds) -> np.ndarray:
    """
    Flatten the quadrilateral described by bounds into a rectangle.

    Args:
        image: Input image
        bounds: Document bounds in canonical order

    Returns:
        Perspective-corrected image of size output_dimensions(bounds)

    Raises:
        GeometryError: If the corners are degenerate
    """
    matrix, (width, height) = get_perspective_transform(bounds)

    corrected = cv2.warpPerspective(
        image, matrix, (width, height),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=0
    )

    logger.debug(f"Applied perspective correction: {image.shape} -> {corrected.shape}")
    return corrected


def to_bgra(image: np.ndarray) -> np.ndarray:
    """Convert a grayscale, BGR or BGRA image to a new BGRA image."""
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGRA)
    if image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2BGRA)
    if image.shape[2] == 4:
        return image.copy()
    raise ValueError(f"Unsupported image shape: {image.shape}")


def crop_to_quadrilateral(image: np.ndarray, bounds: DocumentBounds) -> np.ndarray:
    """
    Clip an image to the quadrilateral, leaving everything outside transparent.

    The output keeps the input size; no perspective correction is applied.

    Args:
        image: Input image (grayscale, BGR or BGRA)
        bounds: Document bounds

    Returns:
        BGRA image, alpha 0 outside the quadrilateral
    """
    if not CV2_AVAILABLE:
        raise ImportError("OpenCV is required for geometric preprocessing")

    h, w = image.shape[:2]
    mask = np.zeros((h, w), dtype=np.uint8)
    polygon = np.round(bounds.to_array()).astype(np.int32)
    cv2.fillPoly(mask, [polygon], 255, lineType=cv2.LINE_AA)

    cropped = to_bgra(image)
    cropped[:, :, 3] = np.minimum(cropped[:, :, 3], mask)
    cropped[mask == 0] = 0

    logger.debug(f"Cropped to quadrilateral: {bounds.to_list()}")
    return cropped


def rotate_image(
    image: np.ndarray,
    degrees: float,
    background_color: Tuple[int, ...] = (0, 0, 0, 0)
) -> np.ndarray:
    """
    Rotate an image clockwise, growing the canvas so nothing is cut off.

    Quarter turns are exact pixel rearrangements.

    Args:
        image: Input image
        degrees: Clockwise rotation angle in degrees
        background_color: Color for newly exposed areas

    Returns:
        Rotated image
    """
    if not CV2_AVAILABLE:
        raise ImportError("OpenCV is required for geometric preprocessing")

    angle = degrees % 360
    quarter_turns = {
        90: cv2.ROTATE_90_CLOCKWISE,
        180: cv2.ROTATE_180,
        270: cv2.ROTATE_90_COUNTERCLOCKWISE,
    }
    if angle == 0:
        return image.copy()
    if angle in quarter_turns:
        return cv2.rotate(image, quarter_turns[angle])

    h, w = image.shape[:2]
    center = (w / 2, h / 2)

    # OpenCV treats positive angles as counter-clockwise
    M = cv2.getRotationMatrix2D(center, -angle, 1.0)

    # Compute new image bounds to avoid cropping
    cos_val = abs(M[0, 0])
    sin_val = abs(M[0, 1])
    new_w = int(round(h * sin_val + w * cos_val))
    new_h = int(round(h * cos_val + w * sin_val))

    # Adjust rotation matrix for new bounds
    M[0, 2] += (new_w - w) / 2
    M[1, 2] += (new_h - h) / 2

    rotated = cv2.warpAffine(
        image, M, (new_w, new_h),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=background_color
    )

    logger.debug(f"Rotated by {degrees:.1f} degrees: {image.shape} -> {rotated.shape}")
    return rotated


def scale_to_fit(image: np.ndarray, max_width: int, max_height: int) -> np.ndarray:
    """
    Uniformly downscale an image so it fits inside max_width x max_height.

    Images that already fit are returned unchanged; nothing is upscaled.

    Args:
        image: Input image
        max_width: Maximum output width
        max_height: Maximum output height

    Returns:
        Image no larger than the bounding box
    """
    if not CV2_AVAILABLE:
        raise ImportError("OpenCV is required for geometric preprocessing")

    if max_width <= 0 or max_height <= 0:
        raise ValueError(f"Invalid bounding box {max_width}x{max_height}")

    h, w = image.shape[:2]
    scale = min(max_width / w, max_height / h)
    if scale >= 1.0:
        return image

    new_w = max(1, min(max_width, int(round(w * scale))))
    new_h = max(1, min(max_height, int(round(h * scale))))

    scaled = cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_AREA)
    logger.debug(f"Scaled to fit {max_width}x{max_height}: {image.shape} -> {scaled.shape}")
    return scaled
