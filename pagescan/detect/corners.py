"""
Corner extraction for detected document contours.

Includes:
- Multi-tolerance polygon approximation
- Reduction of many-vertex polygons to four corners
- Canonical corner role assignment (TL, TR, BR, BL)
"""

from typing import Sequence
import numpy as np
import cv2
from loguru import logger

from pagescan.errors import GeometryError


def approximate_polygon(
    contour: np.ndarray,
    epsilon_factors: Sequence[float]
) -> np.ndarray:
    """
    Approximate a contour as a polygon, preferring exactly four vertices.

    Tolerances are tried in order, each a fraction of the contour perimeter.
    The first pass yielding four vertices wins; otherwise the first pass
    with more than four vertices is kept. When no pass yields at least four
    vertices the contour's bounding rectangle is used.

    Args:
        contour: OpenCV contour, shape (N, 1, 2)
        epsilon_factors: Tolerances as fractions of the perimeter

    Returns:
        Polygon vertices as (K, 2) float32 array, K >= 4
    """
    curve = contour.astype(np.float32)
    perimeter = cv2.arcLength(curve, True)

    best = None
    for factor in epsilon_factors:
        approx = cv2.approxPolyDP(curve, factor * perimeter, True).reshape(-1, 2)

        if len(approx) == 4:
            logger.debug(f"Quadrilateral found at epsilon factor {factor}")
            return approx
        if len(approx) > 4 and best is None:
            best = approx

    if best is not None:
        logger.debug(f"No exact quadrilateral, keeping {len(best)}-vertex approximation")
        return best

    x, y, w, h = cv2.boundingRect(contour)
    logger.debug("Approximation collapsed below 4 vertices, using bounding rectangle")
    return np.array(
        [[x, y], [x + w, y], [x + w, y + h], [x, y + h]],
        dtype=np.float32
    )


def reduce_to_four(points: np.ndarray) -> np.ndarray:
    """
    Pick four representative corners from a polygon with extra vertices.

    Takes the horizontal and vertical extrema of the convex hull. When these
    collapse to fewer than four distinct points, the remaining slots are
    filled with hull points farthest from the hull centroid.

    Args:
        points: Polygon vertices as (K, 2) array

    Returns:
        Four points as (4, 2) array, unordered
    """
    points = np.asarray(points, dtype=np.float32).reshape(-1, 2)
    if len(points) <= 4:
        return points

    hull = cv2.convexHull(points).reshape(-1, 2)
    if len(hull) < 4:
        return points[:4]
    if len(hull) == 4:
        return hull

    extreme_indices = [
        int(np.argmin(hull[:, 0])),
        int(np.argmax(hull[:, 0])),
        int(np.argmin(hull[:, 1])),
        int(np.argmax(hull[:, 1])),
    ]
    # Deduplicate while keeping order
    chosen = list(dict.fromkeys(extreme_indices))

    if len(chosen) < 4:
        centroid = hull.mean(axis=0)
        distances = np.linalg.norm(hull - centroid, axis=1)
        for idx in np.argsort(-distances, kind="stable"):
            if len(chosen) == 4:
                break
            if int(idx) not in chosen:
                chosen.append(int(idx))

    return hull[chosen[:4]]


def order_corners(points: np.ndarray) -> np.ndarray:
    """
    Order four points as top-left, top-right, bottom-right, bottom-left.

    Each point is placed in a quadrant around the centroid; within a
    quadrant the most extreme point for that role wins. Degenerate layouts
    that leave a role empty fall back to polar-angle order around the
    centroid.

    Args:
        points: 4 points as (4, 2) array, any order

    Returns:
        Ordered points as (4, 2) float32 array
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if len(pts) < 4:
        raise GeometryError(f"Need 4 corner points, got {len(pts)}")

    cx, cy = pts.mean(axis=0)

    top_left = top_right = bottom_left = bottom_right = None
    for x, y in pts:
        if x < cx and y < cy:
            if top_left is None or x + y < top_left[0] + top_left[1]:
                top_left = (x, y)
        elif x > cx and y < cy:
            if top_right is None or x - y > top_right[0] - top_right[1]:
                top_right = (x, y)
        elif x < cx and y > cy:
            if bottom_left is None or y - x > bottom_left[1] - bottom_left[0]:
                bottom_left = (x, y)
        elif x > cx and y > cy:
            if bottom_right is None or x + y > bottom_right[0] + bottom_right[1]:
                bottom_right = (x, y)

    ordered = [top_left, top_right, bottom_right, bottom_left]
    if all(p is not None for p in ordered):
        return np.array(ordered, dtype=np.float32)

    # TODO: re-centre and retry quadrant classification before giving up on it
    logger.debug("Quadrant classification incomplete, using polar-angle order")
    angles = np.arctan2(pts[:, 1] - cy, pts[:, 0] - cx)
    order = np.argsort(angles, kind="stable")
    return pts[order[:4]].astype(np.float32)
