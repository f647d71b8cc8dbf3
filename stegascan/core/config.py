"""Configuration management for StegaScan"""

import sys
from pathlib import Path
from typing import Dict, Any, Optional, Tuple
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None

from stegascan.core.exceptions import ConfigurationError
from stegascan.core.constants import (
    DEFAULT_ALIGNMENT_BOUNDARIES,
    DEFAULT_PADDING_LENGTH,
    DEFAULT_CHI_SQUARE_THRESHOLD,
    DEFAULT_ENTROPY_THRESHOLD,
    DEFAULT_FILTER_CONTRAST,
    DEFAULT_WINDOW_SIZE,
    DEFAULT_HOP_SIZE,
    DEFAULT_SAMPLE_RATE,
    DEFAULT_HIGH_FREQUENCY_CUTOFF,
    DEFAULT_HIGH_FREQUENCY_RATIO,
    DEFAULT_TONE_MAGNITUDE,
    DEFAULT_EDGE_DELTA,
    DEFAULT_EDGE_DENSITY_DIVISOR,
    DEFAULT_SPIKE_MULTIPLIER,
    DEFAULT_SPIKE_FRAME_DIVISOR,
    DEFAULT_VIDEO_SAMPLE_EVERY,
    DEFAULT_HISTOGRAM_PEAK_MULTIPLIER,
    DEFAULT_HISTOGRAM_PAIR_MULTIPLIER,
    DEFAULT_EDGE_GRADIENT_THRESHOLD,
    DEFAULT_HIGH_INDICATOR_COUNT,
    DEFAULT_MEDIUM_INDICATOR_COUNT,
    DEFAULT_MAX_EXIF_VALUE_LENGTH,
    DEFAULT_MAX_COMMENT_LENGTH,
    DEFAULT_MAX_LYRICS_LENGTH,
    DEFAULT_MAX_PICTURE_BYTES,
    DEFAULT_MAX_PRIVATE_FRAME_BYTES,
    DEFAULT_MIN_ENCODED_LENGTH,
)


@dataclass
class SignatureConfig:
    alignment_boundaries: Tuple[int, ...] = DEFAULT_ALIGNMENT_BOUNDARIES
    padding_length: int = DEFAULT_PADDING_LENGTH

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SignatureConfig":
        return cls(
            alignment_boundaries=tuple(
                data.get("alignment_boundaries", DEFAULT_ALIGNMENT_BOUNDARIES)
            ),
            padding_length=data.get("padding_length", DEFAULT_PADDING_LENGTH),
        )

    def validate(self):
        if self.padding_length < 1:
            raise ConfigurationError("signatures.padding_length must be at least 1")
        if any(b < 1 for b in self.alignment_boundaries):
            raise ConfigurationError("signatures.alignment_boundaries must be positive")


@dataclass
class BitPlaneConfig:
    chi_square_threshold: float = DEFAULT_CHI_SQUARE_THRESHOLD
    entropy_threshold: float = DEFAULT_ENTROPY_THRESHOLD
    filter_contrast: float = DEFAULT_FILTER_CONTRAST

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BitPlaneConfig":
        return cls(
            chi_square_threshold=data.get("chi_square_threshold", DEFAULT_CHI_SQUARE_THRESHOLD),
            entropy_threshold=data.get("entropy_threshold", DEFAULT_ENTROPY_THRESHOLD),
            filter_contrast=data.get("filter_contrast", DEFAULT_FILTER_CONTRAST),
        )

    def validate(self):
        if self.chi_square_threshold < 0:
            raise ConfigurationError("bitplane.chi_square_threshold must be non-negative")
        if not 0.0 <= self.entropy_threshold <= 1.0:
            raise ConfigurationError("bitplane.entropy_threshold must be within [0, 1]")
        if not 0.0 < self.filter_contrast < 100.0:
            raise ConfigurationError("bitplane.filter_contrast must be within (0, 100)")


@dataclass
class SpectralConfig:
    window_size: int = DEFAULT_WINDOW_SIZE
    hop_size: int = DEFAULT_HOP_SIZE
    sample_rate: float = DEFAULT_SAMPLE_RATE
    high_frequency_cutoff: float = DEFAULT_HIGH_FREQUENCY_CUTOFF
    high_frequency_ratio: float = DEFAULT_HIGH_FREQUENCY_RATIO
    tone_magnitude: float = DEFAULT_TONE_MAGNITUDE
    edge_delta: float = DEFAULT_EDGE_DELTA
    edge_density_divisor: int = DEFAULT_EDGE_DENSITY_DIVISOR
    spike_multiplier: float = DEFAULT_SPIKE_MULTIPLIER
    spike_frame_divisor: int = DEFAULT_SPIKE_FRAME_DIVISOR

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SpectralConfig":
        return cls(
            window_size=data.get("window_size", DEFAULT_WINDOW_SIZE),
            hop_size=data.get("hop_size", DEFAULT_HOP_SIZE),
            sample_rate=data.get("sample_rate", DEFAULT_SAMPLE_RATE),
            high_frequency_cutoff=data.get("high_frequency_cutoff", DEFAULT_HIGH_FREQUENCY_CUTOFF),
            high_frequency_ratio=data.get("high_frequency_ratio", DEFAULT_HIGH_FREQUENCY_RATIO),
            tone_magnitude=data.get("tone_magnitude", DEFAULT_TONE_MAGNITUDE),
            edge_delta=data.get("edge_delta", DEFAULT_EDGE_DELTA),
            edge_density_divisor=data.get("edge_density_divisor", DEFAULT_EDGE_DENSITY_DIVISOR),
            spike_multiplier=data.get("spike_multiplier", DEFAULT_SPIKE_MULTIPLIER),
            spike_frame_divisor=data.get("spike_frame_divisor", DEFAULT_SPIKE_FRAME_DIVISOR),
        )

    def validate(self):
        if self.window_size < 2 or self.hop_size < 1:
            raise ConfigurationError(
                f"spectral window/hop must be positive (window={self.window_size}, hop={self.hop_size})"
            )
        if self.hop_size > self.window_size:
            raise ConfigurationError("spectral.hop_size cannot exceed spectral.window_size")
        if self.sample_rate <= 0:
            raise ConfigurationError("spectral.sample_rate must be positive")
        if self.edge_density_divisor < 1 or self.spike_frame_divisor < 1:
            raise ConfigurationError("spectral divisors must be at least 1")


@dataclass
class FrameConfig:
    sample_every: int = DEFAULT_VIDEO_SAMPLE_EVERY
    histogram_peak_multiplier: float = DEFAULT_HISTOGRAM_PEAK_MULTIPLIER
    histogram_pair_multiplier: float = DEFAULT_HISTOGRAM_PAIR_MULTIPLIER
    edge_gradient_threshold: float = DEFAULT_EDGE_GRADIENT_THRESHOLD

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FrameConfig":
        return cls(
            sample_every=data.get("sample_every", DEFAULT_VIDEO_SAMPLE_EVERY),
            histogram_peak_multiplier=data.get(
                "histogram_peak_multiplier", DEFAULT_HISTOGRAM_PEAK_MULTIPLIER
            ),
            histogram_pair_multiplier=data.get(
                "histogram_pair_multiplier", DEFAULT_HISTOGRAM_PAIR_MULTIPLIER
            ),
            edge_gradient_threshold=data.get(
                "edge_gradient_threshold", DEFAULT_EDGE_GRADIENT_THRESHOLD
            ),
        )

    def validate(self):
        if self.sample_every < 1:
            raise ConfigurationError(
                f"frames.sample_every must be at least 1, got {self.sample_every}"
            )


@dataclass
class VerdictConfig:
    high_indicator_count: int = DEFAULT_HIGH_INDICATOR_COUNT
    medium_indicator_count: int = DEFAULT_MEDIUM_INDICATOR_COUNT

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VerdictConfig":
        return cls(
            high_indicator_count=data.get("high_indicator_count", DEFAULT_HIGH_INDICATOR_COUNT),
            medium_indicator_count=data.get(
                "medium_indicator_count", DEFAULT_MEDIUM_INDICATOR_COUNT
            ),
        )

    def validate(self):
        if self.medium_indicator_count < 1:
            raise ConfigurationError("verdict.medium_indicator_count must be at least 1")
        if self.high_indicator_count < self.medium_indicator_count:
            raise ConfigurationError(
                "verdict.high_indicator_count cannot be below medium_indicator_count"
            )


@dataclass
class MetadataConfig:
    max_exif_value_length: int = DEFAULT_MAX_EXIF_VALUE_LENGTH
    max_comment_length: int = DEFAULT_MAX_COMMENT_LENGTH
    max_lyrics_length: int = DEFAULT_MAX_LYRICS_LENGTH
    max_picture_bytes: int = DEFAULT_MAX_PICTURE_BYTES
    max_private_frame_bytes: int = DEFAULT_MAX_PRIVATE_FRAME_BYTES
    min_encoded_length: int = DEFAULT_MIN_ENCODED_LENGTH

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MetadataConfig":
        return cls(
            max_exif_value_length=data.get("max_exif_value_length", DEFAULT_MAX_EXIF_VALUE_LENGTH),
            max_comment_length=data.get("max_comment_length", DEFAULT_MAX_COMMENT_LENGTH),
            max_lyrics_length=data.get("max_lyrics_length", DEFAULT_MAX_LYRICS_LENGTH),
            max_picture_bytes=data.get("max_picture_bytes", DEFAULT_MAX_PICTURE_BYTES),
            max_private_frame_bytes=data.get(
                "max_private_frame_bytes", DEFAULT_MAX_PRIVATE_FRAME_BYTES
            ),
            min_encoded_length=data.get("min_encoded_length", DEFAULT_MIN_ENCODED_LENGTH),
        )


@dataclass
class Config:
    signatures: SignatureConfig = field(default_factory=SignatureConfig)
    bitplane: BitPlaneConfig = field(default_factory=BitPlaneConfig)
    spectral: SpectralConfig = field(default_factory=SpectralConfig)
    frames: FrameConfig = field(default_factory=FrameConfig)
    verdict: VerdictConfig = field(default_factory=VerdictConfig)
    metadata: MetadataConfig = field(default_factory=MetadataConfig)
    verbose: bool = False
    debug: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        config = cls(
            signatures=SignatureConfig.from_dict(data.get("signatures", {})),
            bitplane=BitPlaneConfig.from_dict(data.get("bitplane", {})),
            spectral=SpectralConfig.from_dict(data.get("spectral", {})),
            frames=FrameConfig.from_dict(data.get("frames", {})),
            verdict=VerdictConfig.from_dict(data.get("verdict", {})),
            metadata=MetadataConfig.from_dict(data.get("metadata", {})),
            verbose=data.get("verbose", False),
            debug=data.get("debug", False),
        )
        config.validate()
        return config

    @classmethod
    def from_file(cls, path: Path) -> "Config":
        """Load configuration from TOML file"""
        if tomllib is None:
            raise ConfigurationError(
                "TOML support requires tomli package for Python < 3.11. "
                "Install with: pip install tomli"
            )

        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError(f"Failed to load configuration: {e}")
        return cls.from_dict(data)

    @classmethod
    def default(cls) -> "Config":
        """Create default configuration"""
        return cls()

    def validate(self):
        self.signatures.validate()
        self.bitplane.validate()
        self.spectral.validate()
        self.frames.validate()
        self.verdict.validate()


_global_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create global configuration"""
    global _global_config
    if _global_config is None:
        _global_config = Config.default()
    return _global_config


def set_config(config: Config):
    """Set global configuration"""
    global _global_config
    _global_config = config


def load_config(path: Optional[Path] = None) -> Config:
    """Load configuration from file or use default"""
    if path is None:
        default_paths = [
            Path.cwd() / "stegascan.toml",
            Path.home() / ".config" / "stegascan" / "config.toml",
            Path.home() / ".stegascan.toml",
        ]

        for p in default_paths:
            if p.exists():
                path = p
                break

    if path and path.exists():
        config = Config.from_file(path)
    else:
        config = Config.default()

    set_config(config)
    return config
