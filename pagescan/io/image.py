"""
Image loading utilities for PageScan.

Handles various image formats with EXIF orientation correction
and format normalization for downstream processing.
"""

from pathlib import Path
from typing import Optional, Tuple, Union
import numpy as np
from loguru import logger

try:
    import cv2
    CV2_AVAILABLE = True
except ImportError:
    CV2_AVAILABLE = False

from PIL import Image, ImageOps, UnidentifiedImageError

from pagescan.errors import ImageDecodeError


# Supported image formats
SUPPORTED_FORMATS = {".jpg", ".jpeg", ".png", ".tiff", ".tif", ".bmp", ".webp"}


class ImageLoader:
    """
    Load and normalize captured photos.

    Handles EXIF orientation, format conversion, and basic validation.
    """

    def __init__(self, auto_orient: bool = True):
        """
        Initialize image loader.

        Args:
            auto_orient: Automatically correct EXIF orientation
        """
        if not CV2_AVAILABLE:
            raise ImportError("OpenCV is required. Install with: pip install opencv-python-headless")

        self.auto_orient = auto_orient

    def load(self, image_path: Union[str, Path]) -> np.ndarray:
        """
        Load image from file.

        Args:
            image_path: Path to image file

        Returns:
            Image as numpy array (BGR format)
        """
        path = Path(image_path)

        if not path.exists():
            raise FileNotFoundError(f"Image file not found: {image_path}")

        if path.suffix.lower() not in SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported image format: {path.suffix}")

        logger.debug(f"Loading image: {image_path}")

        if self.auto_orient:
            image = self._load_with_pil(path)
        else:
            image = cv2.imread(str(path), cv2.IMREAD_COLOR)

        if image is None:
            raise ImageDecodeError(f"Failed to load image: {image_path}")

        logger.debug(f"Loaded image: {image.shape}")
        return image

    def _load_with_pil(self, path: Path) -> np.ndarray:
        """
        Load image with PIL so camera rotation stored in EXIF is applied.

        Args:
            path: Path to image file

        Returns:
            Image as numpy array (BGR format)
        """
        try:
            with Image.open(path) as pil_image:
                pil_image = ImageOps.exif_transpose(pil_image)
                if pil_image.mode != "RGB":
                    pil_image = pil_image.convert("RGB")
                image = np.array(pil_image)
        except (UnidentifiedImageError, OSError) as e:
            raise ImageDecodeError(f"Failed to decode image {path}: {e}") from e

        # Convert RGB to BGR for OpenCV
        return cv2.cvtColor(image, cv2.COLOR_RGB2BGR)

    def load_from_bytes(self, data: bytes) -> np.ndarray:
        """
        Load image from bytes.

        Args:
            data: Encoded image data

        Returns:
            Image as numpy array (BGR format)
        """
        nparr = np.frombuffer(data, np.uint8)
        image = cv2.imdecode(nparr, cv2.IMREAD_COLOR) if nparr.size else None

        if image is None:
            raise ImageDecodeError("Failed to decode image from bytes")

        return image


def load_image(
    source: Union[str, Path, bytes, np.ndarray],
    auto_orient: bool = True
) -> np.ndarray:
    """
    Convenience function to load image from various sources.

    Args:
        source: File path, encoded bytes, or existing numpy array
        auto_orient: Automatically correct EXIF orientation

    Returns:
        Image as numpy array (BGR format)
    """
    if isinstance(source, np.ndarray):
        return source

    loader = ImageLoader(auto_orient=auto_orient)

    if isinstance(source, bytes):
        return loader.load_from_bytes(source)
    if isinstance(source, (str, Path)):
        return loader.load(source)

    raise ValueError(f"Unsupported image source type: {type(source)}")


def save_image(image: np.ndarray, output_path: Union[str, Path], quality: int = 90) -> None:
    """
    Save image to file.

    Images with an alpha channel should be written as PNG; JPEG drops it.

    Args:
        image: Image as numpy array (BGR, BGRA or grayscale)
        output_path: Output file path
        quality: JPEG quality (0-100)
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    params = []
    if path.suffix.lower() in [".jpg", ".jpeg"]:
        params = [cv2.IMWRITE_JPEG_QUALITY, quality]
    elif path.suffix.lower() == ".png":
        params = [cv2.IMWRITE_PNG_COMPRESSION, 9 - (quality // 11)]

    if not cv2.imwrite(str(path), image, params):
        raise OSError(f"Failed to write image: {output_path}")
    logger.debug(f"Saved image: {output_path}")


def resize_image(
    image: np.ndarray,
    max_size: Optional[int] = None,
    scale: Optional[float] = None
) -> Tuple[np.ndarray, float]:
    """
    Resize image while maintaining aspect ratio.

    Args:
        image: Input image
        max_size: Maximum dimension (width or height)
        scale: Scale factor

    Returns:
        Tuple of (resized image, actual scale factor)
    """
    h, w = image.shape[:2]

    if scale is not None:
        actual_scale = scale
    elif max_size is not None:
        actual_scale = max_size / max(h, w)
        if actual_scale >= 1.0:
            return image, 1.0
    else:
        return image, 1.0

    new_w = max(1, int(round(w * actual_scale)))
    new_h = max(1, int(round(h * actual_scale)))

    resized = cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_AREA)
    return resized, actual_scale
