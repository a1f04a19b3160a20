"""
Configuration management for PageScan.

Loads and validates configuration from YAML files with sensible defaults.
Detection thresholds are grouped per quality tier so they can be tuned
without touching the detector's control flow.
"""

from pathlib import Path
from typing import Optional, List
from dataclasses import dataclass, field, asdict
import yaml
from loguru import logger

from pagescan.types import DetectionTier


@dataclass
class TierProfile:
    """Detection parameters for one quality tier."""
    max_dimension: Optional[int] = None  # None means full resolution
    blur_kernel: int = 5
    canny_low: float = 30.0
    canny_high: float = 100.0
    morph_kernel: int = 5
    min_area_ratio: float = 0.01
    max_area_ratio: float = 0.98
    min_perimeter: float = 200.0
    # Polygon approximation tolerances, as a fraction of contour perimeter
    epsilon_factors: List[float] = field(
        default_factory=lambda: [0.008, 0.015, 0.025, 0.04]
    )


def final_capture_profile() -> TierProfile:
    """Full-resolution profile used for the final capture."""
    return TierProfile()


def interactive_profile() -> TierProfile:
    """Fast profile used for live preview frames."""
    return TierProfile(
        max_dimension=800,
        blur_kernel=3,
        canny_low=50.0,
        canny_high=150.0,
        morph_kernel=3,
        min_area_ratio=0.02,
        max_area_ratio=0.95,
        min_perimeter=100.0,
        epsilon_factors=[0.01, 0.02, 0.03, 0.05],
    )


@dataclass
class DetectionConfig:
    """Boundary detection configuration."""
    interactive: TierProfile = field(default_factory=interactive_profile)
    final_capture: TierProfile = field(default_factory=final_capture_profile)
    default_margin: float = 0.05  # Fallback bounds inset, fraction of each dimension

    def profile(self, tier: DetectionTier) -> TierProfile:
        """Resolve the parameter set for a tier."""
        tier = DetectionTier(tier)
        if tier == DetectionTier.INTERACTIVE:
            return self.interactive
        return self.final_capture

    @classmethod
    def from_dict(cls, data: dict) -> "DetectionConfig":
        config = cls()
        if "interactive" in data:
            config.interactive = TierProfile(**{**asdict(interactive_profile()), **data["interactive"]})
        if "final_capture" in data:
            config.final_capture = TierProfile(**{**asdict(final_capture_profile()), **data["final_capture"]})
        if "default_margin" in data:
            config.default_margin = float(data["default_margin"])
        return config


@dataclass
class EnhanceConfig:
    """Tonal enhancement configuration."""
    clahe_clip_limit: float = 2.0  # Contrast limit for CLAHE
    clahe_tile_size: int = 8  # Tile grid is clahe_tile_size x clahe_tile_size
    binarize_block_size: int = 11  # Neighborhood size for adaptive threshold
    binarize_c: int = 2  # Constant subtracted from the weighted mean


@dataclass
class ProcessingConfig:
    """Default processing choices used when a caller does not pass any."""
    color_mode: str = "color"  # color, grayscale, black_and_white
    enhance_contrast: bool = True


@dataclass
class OutputConfig:
    """Output configuration."""
    dir: str = "output"
    jpeg_quality: int = 90
    suffix: str = "_scan"  # Appended to the input stem for batch output


@dataclass
class Config:
    """Main configuration container."""
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    enhance: EnhanceConfig = field(default_factory=EnhanceConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Create Config from dictionary."""
        config = cls()

        if "detection" in data:
            config.detection = DetectionConfig.from_dict(data["detection"] or {})
        if "enhance" in data:
            config.enhance = EnhanceConfig(**data["enhance"])
        if "processing" in data:
            config.processing = ProcessingConfig(**data["processing"])
        if "output" in data:
            config.output = OutputConfig(**data["output"])

        return config


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to YAML config file. If None, uses defaults.

    Returns:
        Config object with loaded or default settings.
    """
    if config_path is None:
        logger.info("No config file specified, using defaults")
        return Config()

    path = Path(config_path)
    if not path.exists():
        logger.warning(f"Config file not found: {config_path}, using defaults")
        return Config()

    logger.info(f"Loading config from: {config_path}")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return Config()

    return Config.from_dict(data)


def save_config(config: Config, config_path: str) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Config object to save.
        config_path: Path to save YAML config file.
    """
    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = asdict(config)

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Config saved to: {config_path}")
