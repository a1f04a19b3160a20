"""Document boundary detection for PageScan."""

from pagescan.detect.boundary import (
    BoundaryDetector,
    detect_document,
    default_bounds,
    quadrilateral_area,
)
from pagescan.detect.corners import approximate_polygon, reduce_to_four, order_corners

__all__ = [
    "BoundaryDetector",
    "detect_document",
    "default_bounds",
    "quadrilateral_area",
    "approximate_polygon",
    "reduce_to_four",
    "order_corners",
]
