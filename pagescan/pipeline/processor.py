"""
Document processor: perspective correction followed by a tonal stage.

The processor never lets a numeric or decoding failure escape; when a
stage fails the caller gets the original image back.
"""

from typing import Optional
import numpy as np
import cv2
from loguru import logger

from pagescan.config import EnhanceConfig
from pagescan.errors import GeometryError
from pagescan.preprocess.enhance import apply_clahe, binarize_adaptive, to_grayscale
from pagescan.preprocess.geometry import perspective_correction
from pagescan.types import ColorMode, DocumentBounds


class DocumentProcessor:
    """
    Flattens and enhances a captured document.

    Holds only configuration; every call owns its intermediate buffers.
    """

    def __init__(self, config: Optional[EnhanceConfig] = None):
        """
        Initialize document processor.

        Args:
            config: Enhancement configuration (uses defaults if None)
        """
        self.config = config or EnhanceConfig()

    def process(
        self,
        image: np.ndarray,
        bounds: Optional[DocumentBounds] = None,
        color_mode: ColorMode = ColorMode.COLOR,
        enhance_contrast: bool = True
    ) -> np.ndarray:
        """
        Process a document image.

        Args:
            image: Input image (grayscale, BGR or BGRA)
            bounds: Document corners; None skips perspective correction
            color_mode: Output rendering
            enhance_contrast: Apply CLAHE in color and grayscale modes

        Returns:
            Processed image, or the input image itself if processing failed
        """
        try:
            color_mode = ColorMode(color_mode)
            if image is None or image.size == 0:
                raise ValueError("Empty image")

            corrected = self._correct_perspective(image, bounds)
            return self._apply_color_mode(corrected, color_mode, enhance_contrast)
        except (cv2.error, ValueError, ArithmeticError) as e:
            logger.warning(f"Document processing failed, returning original image: {e}")
            return image

    def _correct_perspective(
        self,
        image: np.ndarray,
        bounds: Optional[DocumentBounds]
    ) -> np.ndarray:
        if bounds is None:
            return image

        h, w = image.shape[:2]
        if not bounds.is_valid(w, h):
            logger.warning(f"Bounds {bounds.to_list()} fall outside {w}x{h} image, skipping perspective correction")
            return image

        try:
            return perspective_correction(image, bounds)
        except GeometryError as e:
            logger.warning(f"Degenerate document corners, skipping perspective correction: {e}")
            return image

    def _apply_color_mode(
        self,
        image: np.ndarray,
        color_mode: ColorMode,
        enhance_contrast: bool
    ) -> np.ndarray:
        cfg = self.config
        tile_size = (cfg.clahe_tile_size, cfg.clahe_tile_size)

        if color_mode == ColorMode.COLOR:
            if enhance_contrast:
                return apply_clahe(image, cfg.clahe_clip_limit, tile_size)
            return image.copy()

        if color_mode == ColorMode.GRAYSCALE:
            gray = to_grayscale(image)
            if enhance_contrast:
                return apply_clahe(gray, cfg.clahe_clip_limit, tile_size)
            return gray

        return binarize_adaptive(image, cfg.binarize_block_size, cfg.binarize_c)


def process_document(
    image: np.ndarray,
    bounds: Optional[DocumentBounds] = None,
    color_mode: ColorMode = ColorMode.COLOR,
    enhance_contrast: bool = True,
    config: Optional[EnhanceConfig] = None
) -> np.ndarray:
    """
    Convenience function to process a document image.

    Args:
        image: Input image (grayscale, BGR or BGRA)
        bounds: Document corners; None skips perspective correction
        color_mode: Output rendering
        enhance_contrast: Apply CLAHE in color and grayscale modes
        config: Enhancement configuration (uses defaults if None)

    Returns:
        Processed image, or the input image itself if processing failed
    """
    return DocumentProcessor(config).process(image, bounds, color_mode, enhance_contrast)
