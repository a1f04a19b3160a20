"""Exception types raised inside PageScan."""


class PageScanError(Exception):
    """Base class for PageScan errors."""


class GeometryError(PageScanError, ValueError):
    """Corner set is degenerate (zero area, collinear or non-finite)."""


class ImageDecodeError(PageScanError, ValueError):
    """Image data could not be decoded into a raster."""
