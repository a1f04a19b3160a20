"""Tests for document boundary detection."""

import pytest
import numpy as np

from conftest import assert_corners_close, make_document


PAGE_CORNERS = [(200, 300), (800, 300), (800, 700), (200, 700)]
SKEWED_CORNERS = [(220, 140), (760, 100), (820, 660), (180, 700)]


class TestDetectDocument:
    """Tests for detect_document on synthetic pages."""

    @pytest.mark.unit
    def test_final_capture_finds_page(self, synthetic_document):
        from pagescan.detect import detect_document
        from pagescan.types import DetectionTier

        bounds = detect_document(synthetic_document, DetectionTier.FINAL_CAPTURE)

        assert_corners_close(bounds, PAGE_CORNERS, tolerance=3)

    @pytest.mark.unit
    def test_interactive_finds_page_after_downscale(self, synthetic_document):
        from pagescan.detect import detect_document
        from pagescan.types import DetectionTier

        bounds = detect_document(synthetic_document, DetectionTier.INTERACTIVE)

        # Corners come back in full-resolution coordinates
        assert_corners_close(bounds, PAGE_CORNERS, tolerance=4)

    @pytest.mark.unit
    def test_interactive_small_image_not_downscaled(self):
        from pagescan.detect import detect_document
        from pagescan.types import DetectionTier

        corners = [(100, 150), (500, 150), (500, 400), (100, 400)]
        image = make_document(width=600, height=500, corners=corners)

        bounds = detect_document(image, DetectionTier.INTERACTIVE)

        assert_corners_close(bounds, corners, tolerance=3)

    @pytest.mark.unit
    @pytest.mark.parametrize("tier", ["interactive", "final_capture"])
    def test_skewed_page(self, skewed_document, tier):
        from pagescan.detect import detect_document
        from pagescan.types import DetectionTier

        bounds = detect_document(skewed_document, DetectionTier(tier))

        assert_corners_close(bounds, SKEWED_CORNERS, tolerance=5)
        assert bounds.is_valid(1000, 800)

    @pytest.mark.unit
    @pytest.mark.parametrize("tier", ["interactive", "final_capture"])
    def test_black_image_returns_none(self, black_image, tier):
        from pagescan.detect import detect_document
        from pagescan.types import DetectionTier

        assert detect_document(black_image, DetectionTier(tier)) is None

    @pytest.mark.unit
    def test_tiny_page_filtered_out(self):
        from pagescan.detect import detect_document

        # 30x20 page is well under 1% of a 1000x1000 frame
        image = make_document(corners=[(500, 500), (530, 500), (530, 520), (500, 520)])

        assert detect_document(image) is None

    @pytest.mark.unit
    def test_grayscale_and_bgra_input(self, synthetic_document):
        import cv2
        from pagescan.detect import detect_document

        gray = cv2.cvtColor(synthetic_document, cv2.COLOR_BGR2GRAY)
        bgra = cv2.cvtColor(synthetic_document, cv2.COLOR_BGR2BGRA)

        assert_corners_close(detect_document(gray), PAGE_CORNERS, tolerance=3)
        assert_corners_close(detect_document(bgra), PAGE_CORNERS, tolerance=3)

    @pytest.mark.unit
    def test_malformed_raster_returns_none(self):
        from pagescan.detect import detect_document

        # Canny only accepts 8-bit input
        image = np.zeros((200, 200, 3), dtype=np.float64)

        assert detect_document(image) is None

    @pytest.mark.unit
    def test_empty_image_returns_none(self):
        from pagescan.detect import detect_document

        assert detect_document(np.zeros((0, 0, 3), dtype=np.uint8)) is None

    @pytest.mark.unit
    def test_non_array_rejected(self):
        from pagescan.detect import detect_document

        with pytest.raises(TypeError):
            detect_document("not an image")

    @pytest.mark.unit
    def test_custom_profile_is_used(self, synthetic_document):
        from pagescan.config import DetectionConfig
        from pagescan.detect import BoundaryDetector

        config = DetectionConfig()
        # Page covers 24% of the frame; demand more
        config.final_capture.min_area_ratio = 0.5

        assert BoundaryDetector(config).detect(synthetic_document) is None


class TestScoring:
    """Tests for candidate scoring."""

    @pytest.mark.unit
    @pytest.mark.parametrize("aspect,expected", [
        (1.0, 1.0),
        (1.5, 1.0),
        (0.4, 0.7),
        (2.5, 0.7),
        (0.2, 0.3),
        (4.0, 0.3),
        (2.0, 0.7),
        (3.0, 0.3),
    ])
    def test_aspect_ratio_factor(self, aspect, expected):
        from pagescan.detect.boundary import aspect_ratio_factor

        assert aspect_ratio_factor(aspect) == expected


class TestDefaultBounds:
    """Tests for the fallback bounds."""

    @pytest.mark.unit
    @pytest.mark.parametrize("width,height", [(1000, 800), (640, 480), (33, 77), (1, 1)])
    def test_inset_by_five_percent(self, width, height):
        from pagescan.detect import default_bounds

        bounds = default_bounds(width, height)

        mx, my = width * 0.05, height * 0.05
        assert bounds.top_left.x == pytest.approx(mx)
        assert bounds.top_left.y == pytest.approx(my)
        assert bounds.top_right.x == pytest.approx(width - mx)
        assert bounds.top_right.y == pytest.approx(my)
        assert bounds.bottom_right.x == pytest.approx(width - mx)
        assert bounds.bottom_right.y == pytest.approx(height - my)
        assert bounds.bottom_left.x == pytest.approx(mx)
        assert bounds.bottom_left.y == pytest.approx(height - my)

        for p in bounds.points:
            assert 0 < p.x < width
            assert 0 < p.y < height

    @pytest.mark.unit
    def test_default_bounds_valid(self):
        from pagescan.detect import default_bounds

        assert default_bounds(1920, 1080).is_valid(1920, 1080)


class TestQuadrilateralArea:
    """Tests for the area approximation."""

    @pytest.mark.unit
    def test_rectangle(self, page_bounds):
        from pagescan.detect import quadrilateral_area

        assert quadrilateral_area(page_bounds) == pytest.approx(600 * 400)

    @pytest.mark.unit
    def test_default_bounds_area(self):
        from pagescan.detect import default_bounds, quadrilateral_area

        assert quadrilateral_area(default_bounds(1000, 800)) == pytest.approx(900 * 720)

    @pytest.mark.unit
    def test_trapezoid_uses_average_sides(self, trapezoid_bounds):
        from pagescan.detect import quadrilateral_area

        avg_width = (400 + 800) / 2
        avg_height = np.hypot(200, 600)

        assert quadrilateral_area(trapezoid_bounds) == pytest.approx(avg_width * avg_height)
