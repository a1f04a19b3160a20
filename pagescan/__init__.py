"""
PageScan: document boundary detection and page flattening.

This package provides:
- Boundary detection of a photographed page (two quality tiers)
- Perspective correction to an upright rectangle
- Tonal rendering in color, grayscale or black-and-white
"""

__version__ = "0.1.0"
__author__ = "PageScan Team"

from pagescan.config import Config, load_config
from pagescan.types import (
    Point,
    DocumentBounds,
    DetectionTier,
    ColorMode,
)
from pagescan.detect import (
    BoundaryDetector,
    detect_document,
    default_bounds,
    quadrilateral_area,
)
from pagescan.pipeline import (
    DocumentProcessor,
    process_document,
    DocumentScanner,
    ScanOptions,
    ScanResult,
)

__all__ = [
    "Config",
    "load_config",
    "Point",
    "DocumentBounds",
    "DetectionTier",
    "ColorMode",
    "BoundaryDetector",
    "detect_document",
    "default_bounds",
    "quadrilateral_area",
    "DocumentProcessor",
    "process_document",
    "DocumentScanner",
    "ScanOptions",
    "ScanResult",
    "__version__",
]
