"""Tests for PageScan configuration."""

import pytest
import yaml


class TestConfig:
    """Tests for Config dataclass."""

    def test_default_config(self):
        from pagescan.config import Config

        config = Config()

        assert config.detection.default_margin == 0.05
        assert config.enhance.clahe_clip_limit == 2.0
        assert config.enhance.binarize_block_size == 11
        assert config.processing.color_mode == "color"
        assert config.output.dir == "output"

    def test_final_capture_profile(self):
        from pagescan.config import DetectionConfig
        from pagescan.types import DetectionTier

        profile = DetectionConfig().profile(DetectionTier.FINAL_CAPTURE)

        assert profile.max_dimension is None
        assert profile.blur_kernel == 5
        assert (profile.canny_low, profile.canny_high) == (30, 100)
        assert (profile.min_area_ratio, profile.max_area_ratio) == (0.01, 0.98)
        assert profile.min_perimeter == 200
        assert profile.epsilon_factors == [0.008, 0.015, 0.025, 0.04]

    def test_interactive_profile(self):
        from pagescan.config import DetectionConfig

        profile = DetectionConfig().profile("interactive")

        assert profile.max_dimension == 800
        assert profile.blur_kernel == 3
        assert (profile.canny_low, profile.canny_high) == (50, 150)
        assert profile.morph_kernel == 3
        assert (profile.min_area_ratio, profile.max_area_ratio) == (0.02, 0.95)
        assert profile.min_perimeter == 100
        assert profile.epsilon_factors == [0.01, 0.02, 0.03, 0.05]

    def test_profiles_not_shared(self):
        from pagescan.config import DetectionConfig

        a, b = DetectionConfig(), DetectionConfig()
        a.final_capture.epsilon_factors.append(0.1)

        assert len(b.final_capture.epsilon_factors) == 4

    def test_config_from_dict(self):
        from pagescan.config import Config

        data = {
            "detection": {"final_capture": {"canny_low": 20}, "default_margin": 0.1},
            "enhance": {"clahe_clip_limit": 3.0},
            "output": {"dir": "custom_output"},
        }

        config = Config.from_dict(data)

        assert config.detection.final_capture.canny_low == 20
        # Unspecified tier values keep their defaults
        assert config.detection.final_capture.canny_high == 100
        assert config.detection.interactive.max_dimension == 800
        assert config.detection.default_margin == 0.1
        assert config.enhance.clahe_clip_limit == 3.0
        assert config.output.dir == "custom_output"
        assert config.processing.enhance_contrast is True

    def test_unknown_key_rejected(self):
        from pagescan.config import Config

        with pytest.raises(TypeError):
            Config.from_dict({"enhance": {"sharpen": True}})


class TestConfigFile:
    """Tests for YAML loading and saving."""

    def test_load_config_none(self):
        from pagescan.config import load_config, Config

        assert load_config(None) == Config()

    def test_load_config_missing_file(self, temp_dir):
        from pagescan.config import load_config, Config

        assert load_config(str(temp_dir / "missing.yaml")) == Config()

    def test_load_config_empty_file(self, temp_dir):
        from pagescan.config import load_config, Config

        path = temp_dir / "empty.yaml"
        path.write_text("")

        assert load_config(str(path)) == Config()

    def test_load_partial_yaml(self, temp_dir):
        from pagescan.config import load_config

        path = temp_dir / "config.yaml"
        path.write_text(yaml.dump({
            "detection": {"interactive": {"max_dimension": 640}},
            "processing": {"color_mode": "grayscale"},
        }))

        config = load_config(str(path))

        assert config.detection.interactive.max_dimension == 640
        assert config.detection.interactive.canny_low == 50
        assert config.processing.color_mode == "grayscale"

    def test_save_and_load_round_trip(self, temp_dir):
        from pagescan.config import Config, load_config, save_config

        config = Config()
        config.detection.final_capture.min_perimeter = 150.0
        config.enhance.binarize_c = 4
        config.output.jpeg_quality = 75

        path = temp_dir / "nested" / "config.yaml"
        save_config(config, str(path))

        assert path.exists()
        assert load_config(str(path)) == config
