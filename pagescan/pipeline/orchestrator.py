"""
Scan pipeline orchestrator.

Coordinates the capture flow:
1. Input loading (image file or array)
2. Boundary detection (or caller-supplied corners)
3. Bounds validation and fallback to default bounds
4. Perspective correction and tonal processing
5. Output writing
"""

import time
from pathlib import Path
from typing import Optional, Union
from dataclasses import dataclass
import numpy as np
from loguru import logger

from pagescan.config import Config
from pagescan.detect.boundary import BoundaryDetector, default_bounds, quadrilateral_area
from pagescan.io.image import load_image, save_image
from pagescan.pipeline.processor import DocumentProcessor
from pagescan.types import ColorMode, DetectionTier, DocumentBounds


@dataclass
class ScanOptions:
    """Options for a single scan."""
    tier: DetectionTier = DetectionTier.FINAL_CAPTURE
    color_mode: Optional[ColorMode] = None  # None uses config.processing.color_mode
    enhance_contrast: Optional[bool] = None  # None uses config.processing.enhance_contrast

    # Manually adjusted corners replace detection
    bounds: Optional[DocumentBounds] = None


@dataclass
class ScanResult:
    """Outcome of a scan."""
    image: np.ndarray
    bounds: DocumentBounds
    detected: bool  # False when manual or default bounds were used
    area: float  # quadrilateral_area(bounds), for confidence display
    bounds_source: str = "detected"  # detected, manual or default
    elapsed_seconds: float = 0.0
    output_path: Optional[str] = None


class DocumentScanner:
    """
    Detect-then-process pipeline for captured documents.

    Components are created lazily and hold only configuration.
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize document scanner.

        Args:
            config: Configuration object (uses defaults if None)
        """
        self.config = config or Config()
        self._detector = None
        self._processor = None

    @property
    def detector(self) -> BoundaryDetector:
        """Lazy load boundary detector."""
        if self._detector is None:
            self._detector = BoundaryDetector(self.config.detection)
        return self._detector

    @property
    def processor(self) -> DocumentProcessor:
        """Lazy load document processor."""
        if self._processor is None:
            self._processor = DocumentProcessor(self.config.enhance)
        return self._processor

    def resolve_bounds(
        self,
        image: np.ndarray,
        options: ScanOptions
    ) -> tuple[DocumentBounds, str]:
        """
        Pick the corners to process with.

        Manual corners win; otherwise detection runs, and a miss or a
        result outside the image falls back to default bounds.

        Returns:
            Tuple of (bounds, source) where source is "detected", "manual"
            or "default"
        """
        h, w = image.shape[:2]

        if options.bounds is not None:
            if options.bounds.is_valid(w, h):
                return options.bounds, "manual"
            logger.warning("Manual corners fall outside the image, using default bounds")
            return default_bounds(w, h, self.config.detection.default_margin), "default"

        bounds = self.detector.detect(image, options.tier)
        if bounds is not None and bounds.is_valid(w, h):
            return bounds, "detected"

        if bounds is None:
            logger.info("No document found, using default bounds")
        else:
            logger.warning(f"Detected corners fall outside {w}x{h} image, using default bounds")
        return default_bounds(w, h, self.config.detection.default_margin), "default"

    def scan(
        self,
        image: np.ndarray,
        options: Optional[ScanOptions] = None
    ) -> ScanResult:
        """
        Detect and process a document in an image.

        Args:
            image: Input image (grayscale, BGR or BGRA)
            options: Scan options

        Returns:
            ScanResult with the processed image and the corners used
        """
        options = options or ScanOptions()
        start = time.perf_counter()

        color_mode = ColorMode(options.color_mode or self.config.processing.color_mode)
        enhance = (
            self.config.processing.enhance_contrast
            if options.enhance_contrast is None
            else options.enhance_contrast
        )

        bounds, source = self.resolve_bounds(image, options)
        detected = source == "detected"
        processed = self.processor.process(image, bounds, color_mode, enhance)

        elapsed = time.perf_counter() - start
        logger.debug(
            f"Scan finished in {elapsed:.2f}s (bounds={source}, mode={color_mode.value}, "
            f"output={processed.shape})"
        )
        return ScanResult(
            image=processed,
            bounds=bounds,
            detected=detected,
            bounds_source=source,
            area=quadrilateral_area(bounds),
            elapsed_seconds=elapsed,
        )

    def scan_file(
        self,
        input_path: Union[str, Path],
        output_path: Optional[Union[str, Path]] = None,
        options: Optional[ScanOptions] = None
    ) -> ScanResult:
        """
        Scan an image file and write the result.

        Args:
            input_path: Captured photo
            output_path: Destination file (default: <output.dir>/<stem><suffix>.jpg)
            options: Scan options

        Returns:
            ScanResult with output_path set
        """
        input_path = Path(input_path)
        logger.info(f"Scanning {input_path}")

        image = load_image(input_path)
        result = self.scan(image, options)

        if output_path is None:
            output_cfg = self.config.output
            output_path = Path(output_cfg.dir) / f"{input_path.stem}{output_cfg.suffix}.jpg"

        save_image(result.image, output_path, quality=self.config.output.jpeg_quality)
        result.output_path = str(output_path)

        logger.info(f"Saved scan to {output_path}")
        return result
