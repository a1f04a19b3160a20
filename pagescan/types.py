"""
Pydantic types for PageScan.

Defines the geometry exchanged between the boundary detector,
the processor and their callers:
- Points in image-pixel coordinates
- Document bounds (four corners in canonical role order)
- Detection tiers and output color modes
"""

from typing import List
from enum import Enum
import math

import numpy as np
from pydantic import BaseModel


class DetectionTier(str, Enum):
    """Detection quality/performance preset."""
    INTERACTIVE = "interactive"  # Live preview: downscaled, stricter filters
    FINAL_CAPTURE = "final_capture"  # Full resolution, finer edges


class ColorMode(str, Enum):
    """Output rendering of a processed document."""
    COLOR = "color"
    GRAYSCALE = "grayscale"
    BLACK_AND_WHITE = "black_and_white"


class Point(BaseModel):
    """A point (x, y) in image-pixel coordinates."""
    x: float
    y: float

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


class DocumentBounds(BaseModel):
    """
    Quadrilateral outline of a document.

    Corners are stored by role (top-left, top-right, bottom-right,
    bottom-left); roles come from each corner's position around the
    centroid, not from the order in which corners were found.
    """
    top_left: Point
    top_right: Point
    bottom_right: Point
    bottom_left: Point

    @property
    def points(self) -> List[Point]:
        """Corners in canonical order: TL, TR, BR, BL."""
        return [self.top_left, self.top_right, self.bottom_right, self.bottom_left]

    def to_array(self) -> np.ndarray:
        """Corners as a (4, 2) float32 array in canonical order."""
        return np.array([p.to_tuple() for p in self.points], dtype=np.float32)

    def to_list(self) -> List[float]:
        """Flat [x, y] list in canonical order."""
        return [coord for p in self.points for coord in p.to_tuple()]

    @classmethod
    def from_array(cls, pts: np.ndarray) -> "DocumentBounds":
        """Build bounds from a (4, 2) array already in canonical order."""
        pts = np.asarray(pts, dtype=np.float64).reshape(4, 2)
        tl, tr, br, bl = (Point(x=float(x), y=float(y)) for x, y in pts)
        return cls(top_left=tl, top_right=tr, bottom_right=br, bottom_left=bl)

    @classmethod
    def from_list(cls, coords: List[float]) -> "DocumentBounds":
        if len(coords) != 8:
            raise ValueError(f"Expected 8 coordinates, got {len(coords)}")
        return cls.from_array(np.array(coords, dtype=np.float64))

    def scale(self, scale_x: float, scale_y: float) -> "DocumentBounds":
        """Return new bounds with every coordinate multiplied."""
        return DocumentBounds(**{
            role: Point(x=p.x * scale_x, y=p.y * scale_y)
            for role, p in zip(
                ("top_left", "top_right", "bottom_right", "bottom_left"),
                self.points,
            )
        })

    def is_valid(self, image_width: int, image_height: int) -> bool:
        """Check every corner lies within the image extent (edges inclusive)."""
        return all(
            0 <= p.x <= image_width and 0 <= p.y <= image_height
            for p in self.points
        )
