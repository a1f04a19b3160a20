"""
Document boundary detection.

Finds the outline of a photographed page as a quadrilateral:
downscale (interactive tier), grayscale, blur, Canny edges,
morphological closing, contour search, scoring, polygon
approximation and corner ordering.
"""

from typing import Optional, List
import numpy as np
import cv2
from loguru import logger

from pagescan.config import DetectionConfig, TierProfile
from pagescan.detect.corners import approximate_polygon, reduce_to_four, order_corners
from pagescan.io.image import resize_image
from pagescan.preprocess.enhance import to_grayscale
from pagescan.types import DetectionTier, DocumentBounds, Point


def aspect_ratio_factor(aspect: float) -> float:
    """Weight applied to a candidate's area based on its bounding-box aspect."""
    if 0.5 < aspect < 2.0:
        return 1.0
    if 0.3 < aspect < 3.0:
        return 0.7
    return 0.3


class BoundaryDetector:
    """
    Locates a single near-rectangular document in an image.

    The detector keeps only configuration, so one instance can serve
    concurrent calls on independent images.
    """

    def __init__(self, config: Optional[DetectionConfig] = None):
        """
        Initialize boundary detector.

        Args:
            config: Detection configuration (uses defaults if None)
        """
        self.config = config or DetectionConfig()

    def detect(
        self,
        image: np.ndarray,
        tier: DetectionTier = DetectionTier.FINAL_CAPTURE
    ) -> Optional[DocumentBounds]:
        """
        Detect the document outline.

        Args:
            image: Input image (grayscale, BGR or BGRA)
            tier: Quality tier selecting resolution cap and thresholds

        Returns:
            Document bounds in source-image coordinates, or None if no
            suitable outline was found
        """
        if not isinstance(image, np.ndarray):
            raise TypeError(f"Expected numpy array, got {type(image)}")

        profile = self.config.profile(tier)

        try:
            return self._detect(image, profile)
        except (cv2.error, ValueError, ArithmeticError) as e:
            logger.warning(f"Boundary detection failed: {e}")
            return None

    def _detect(self, image: np.ndarray, profile: TierProfile) -> Optional[DocumentBounds]:
        if image.size == 0:
            return None

        working, scale = image, 1.0
        if profile.max_dimension is not None:
            working, scale = resize_image(image, max_size=profile.max_dimension)
            if scale != 1.0:
                logger.debug(f"Downscaled {image.shape[:2]} -> {working.shape[:2]} for detection")

        edges = self._edge_map(working, profile)
        height, width = edges.shape[:2]
        del working

        contours, _ = cv2.findContours(edges, cv2.RETR_LIST, cv2.CHAIN_APPROX_SIMPLE)
        del edges

        contour = self._select_contour(contours, width * height, profile)
        if contour is None:
            logger.debug(f"No document candidate among {len(contours)} contours")
            return None

        polygon = approximate_polygon(contour, profile.epsilon_factors)
        corners = order_corners(reduce_to_four(polygon))

        if scale != 1.0:
            corners = corners / scale

        bounds = DocumentBounds.from_array(corners)
        logger.debug(f"Detected document corners: {bounds.to_list()}")
        return bounds

    def _edge_map(self, image: np.ndarray, profile: TierProfile) -> np.ndarray:
        """Grayscale, blur, Canny and close gaps in the edges."""
        gray = to_grayscale(image)

        k = profile.blur_kernel
        blurred = cv2.GaussianBlur(gray, (k, k), 0)

        edges = cv2.Canny(blurred, profile.canny_low, profile.canny_high)

        m = profile.morph_kernel
        kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (m, m))
        return cv2.morphologyEx(edges, cv2.MORPH_CLOSE, kernel)

    def _select_contour(
        self,
        contours: List[np.ndarray],
        image_area: float,
        profile: TierProfile
    ) -> Optional[np.ndarray]:
        """Filter contours by area and perimeter, return the best scoring one."""
        min_area = image_area * profile.min_area_ratio
        max_area = image_area * profile.max_area_ratio

        best, best_score = None, 0.0
        for contour in contours:
            area = cv2.contourArea(contour)
            if not (min_area < area < max_area):
                continue

            perimeter = cv2.arcLength(contour, True)
            if perimeter <= profile.min_perimeter:
                continue

            _, _, w, h = cv2.boundingRect(contour)
            if h == 0:
                continue

            score = area * aspect_ratio_factor(w / h)
            if best is None or score > best_score:
                best, best_score = contour, score

        if best is not None:
            logger.debug(f"Best candidate score {best_score:.0f} (area ratio {cv2.contourArea(best) / image_area:.3f})")
        return best


def detect_document(
    image: np.ndarray,
    tier: DetectionTier = DetectionTier.FINAL_CAPTURE,
    config: Optional[DetectionConfig] = None
) -> Optional[DocumentBounds]:
    """
    Convenience function to detect a document outline.

    Args:
        image: Input image (grayscale, BGR or BGRA)
        tier: Quality tier
        config: Detection configuration (uses defaults if None)

    Returns:
        Document bounds, or None if no document was found
    """
    return BoundaryDetector(config).detect(image, tier)


def default_bounds(width: int, height: int, margin: float = 0.05) -> DocumentBounds:
    """
    Near-full-frame bounds used when detection finds nothing.

    Args:
        width: Image width in pixels
        height: Image height in pixels
        margin: Inset from each edge as a fraction of that dimension

    Returns:
        Rectangle inset by margin on every side
    """
    margin_x = width * margin
    margin_y = height * margin
    return DocumentBounds(
        top_left=Point(x=margin_x, y=margin_y),
        top_right=Point(x=width - margin_x, y=margin_y),
        bottom_right=Point(x=width - margin_x, y=height - margin_y),
        bottom_left=Point(x=margin_x, y=height - margin_y),
    )


def quadrilateral_area(bounds: DocumentBounds) -> float:
    """
    Approximate area of the bounds as average width times average height.

    Args:
        bounds: Document bounds

    Returns:
        Area in square pixels
    """
    width_top = bounds.top_left.distance_to(bounds.top_right)
    width_bottom = bounds.bottom_left.distance_to(bounds.bottom_right)
    height_left = bounds.top_left.distance_to(bounds.bottom_left)
    height_right = bounds.top_right.distance_to(bounds.bottom_right)

    return ((width_top + width_bottom) / 2) * ((height_left + height_right) / 2)
