"""
Pytest configuration and fixtures for PageScan tests.
"""

import sys
import tempfile
from pathlib import Path
from typing import Generator

import pytest
import numpy as np
import cv2

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


# ============================================================================
# Fixtures - Sample Data
# ============================================================================

def make_document(
    width: int = 1000,
    height: int = 1000,
    corners=((200, 300), (800, 300), (800, 700), (200, 700)),
    background: int = 0,
    page: int = 255,
) -> np.ndarray:
    """Draw a filled page polygon on a plain background (BGR)."""
    img = np.full((height, width, 3), background, dtype=np.uint8)
    cv2.fillPoly(img, [np.array(corners, dtype=np.int32)], (page, page, page))
    return img


@pytest.fixture
def sample_image() -> np.ndarray:
    """Create a simple page image with text-like patterns."""
    # Create 800x600 white image
    img = np.ones((600, 800, 3), dtype=np.uint8) * 255

    # Header area
    img[50:70, 100:700] = 0

    # Paragraph lines
    for y in range(150, 350, 25):
        img[y:y+10, 100:650] = 0

    # Table area
    for y in range(400, 550, 30):
        img[y:y+2, 100:700] = 0  # Horizontal lines
    for x in range(100, 701, 150):
        img[400:550, x:x+2] = 0  # Vertical lines

    return img


@pytest.fixture
def text_page() -> np.ndarray:
    """Off-white page with anti-aliased text lines and uneven lighting."""
    h, w = 480, 640
    xs = np.arange(w, dtype=np.float32)
    shade = (235 - 40 * xs / w).astype(np.uint8)
    img = np.repeat(np.tile(shade, (h, 1))[:, :, None], 3, axis=2)

    rng = np.random.default_rng(7)
    for i, y in enumerate(range(50, h - 20, 32)):
        words = " ".join(
            "".join(chr(c) for c in rng.integers(97, 123, size=rng.integers(3, 9)))
            for _ in range(6)
        )
        scale = 0.6 + 0.1 * (i % 3)
        cv2.putText(img, words, (30, y), cv2.FONT_HERSHEY_SIMPLEX, scale,
                    (40, 40, 40), 1 + i % 2, cv2.LINE_AA)
    return img


@pytest.fixture
def sample_color_image() -> np.ndarray:
    """Muted color gradients, for checks on chrominance."""
    h, w = 240, 320
    ys, xs = np.mgrid[0:h, 0:w]
    img = np.zeros((h, w, 3), dtype=np.uint8)
    img[:, :, 0] = (60 + 80 * xs / w).astype(np.uint8)
    img[:, :, 1] = (70 + 60 * ys / h).astype(np.uint8)
    img[:, :, 2] = (90 + 50 * (xs + ys) / (w + h)).astype(np.uint8)
    return img


@pytest.fixture
def synthetic_document() -> np.ndarray:
    """1000x1000 black frame with a white 600x400 page at (200, 300)."""
    return make_document()


@pytest.fixture
def skewed_document() -> np.ndarray:
    """1000x800 frame with a white page photographed at an angle."""
    return make_document(
        width=1000,
        height=800,
        corners=((220, 140), (760, 100), (820, 660), (180, 700)),
    )


@pytest.fixture
def trapezoid_document() -> np.ndarray:
    """1000x800 frame with a page whose top edge is narrower than its bottom."""
    return make_document(
        width=1000,
        height=800,
        corners=((300, 100), (700, 100), (900, 700), (100, 700)),
    )


@pytest.fixture
def black_image() -> np.ndarray:
    """All-black frame without any edges."""
    return np.zeros((1000, 1000, 3), dtype=np.uint8)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def synthetic_document_path(temp_dir, synthetic_document) -> Path:
    """Save the synthetic document to a temporary PNG file."""
    img_path = temp_dir / "page.png"
    cv2.imwrite(str(img_path), synthetic_document)
    return img_path


# ============================================================================
# Fixtures - Configuration and types
# ============================================================================

@pytest.fixture
def default_config():
    """Get default configuration."""
    from pagescan.config import Config
    return Config()


@pytest.fixture
def test_config(temp_dir):
    """Get test configuration with temp output directory."""
    from pagescan.config import Config

    config = Config()
    config.output.dir = str(temp_dir / "output")
    return config


@pytest.fixture
def page_bounds():
    """Bounds of the synthetic document's page."""
    from pagescan.types import DocumentBounds
    return DocumentBounds.from_list([200, 300, 800, 300, 800, 700, 200, 700])


@pytest.fixture
def trapezoid_bounds():
    """Bounds of the trapezoid document's page."""
    from pagescan.types import DocumentBounds
    return DocumentBounds.from_list([300, 100, 700, 100, 900, 700, 100, 700])


# ============================================================================
# Test helpers
# ============================================================================

def assert_corners_close(bounds, expected, tolerance: float):
    """Assert each corner, in canonical order, is within tolerance pixels."""
    assert bounds is not None
    actual = bounds.to_array()
    expected = np.array(expected, dtype=np.float32)
    distances = np.linalg.norm(actual - expected, axis=1)
    assert distances.max() <= tolerance, f"corners {actual.tolist()} vs {expected.tolist()}"
