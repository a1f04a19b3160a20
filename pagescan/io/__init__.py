"""IO modules for PageScan."""

from pagescan.io.image import ImageLoader, load_image, save_image, resize_image

__all__ = [
    "ImageLoader",
    "load_image",
    "save_image",
    "resize_image",
]
