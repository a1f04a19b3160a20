"""Geometric and tonal processing modules for PageScan."""

from pagescan.preprocess.geometry import (
    output_dimensions,
    perspective_correction,
    crop_to_quadrilateral,
    rotate_image,
    scale_to_fit,
)
from pagescan.preprocess.enhance import (
    to_grayscale,
    apply_clahe,
    binarize_adaptive,
)

__all__ = [
    "output_dimensions",
    "perspective_correction",
    "crop_to_quadrilateral",
    "rotate_image",
    "scale_to_fit",
    "to_grayscale",
    "apply_clahe",
    "binarize_adaptive",
]
