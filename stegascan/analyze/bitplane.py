"""
Least-significant-bit plane analysis for decoded images

Each of the first three colour channels is reduced to its LSB plane and
scored by two independent heuristics:
- a pair-of-values chi-square test over consecutive bit pairs
- the Shannon entropy of the bit sequence (at most 1 bit)

High entropy suggests near-random LSBs, consistent with an embedded or
encrypted payload. An elevated chi-square suggests the plane deviates
from natural-image statistics. The two signals are not always correlated
and neither proves embedding, so they are combined with a logical OR.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
from PIL import Image

from stegascan.core.config import BitPlaneConfig, get_config
from stegascan.core.exceptions import MalformedImageError
from stegascan.core.logging import get_logger

logger = get_logger()

CHANNEL_NAMES = ("red", "green", "blue")


def as_rgba_array(pixels) -> np.ndarray:
    """Normalise a PIL image or H x W x C array to an H x W x 4 uint8 array"""
    if isinstance(pixels, Image.Image):
        return np.asarray(pixels.convert("RGBA"), dtype=np.uint8)

    array = np.asarray(pixels)
    if array.ndim != 3 or array.shape[2] < 3:
        raise MalformedImageError(
            f"Expected an H x W x 4 pixel grid, got shape {array.shape}",
            width=array.shape[1] if array.ndim > 1 else None,
            height=array.shape[0] if array.ndim > 0 else None,
        )
    if array.shape[2] == 3:
        alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
        array = np.concatenate([array.astype(np.uint8), alpha], axis=2)
    return array.astype(np.uint8, copy=False)


def extract_lsb(channel: np.ndarray) -> np.ndarray:
    """Row-major bit sequence of a single channel's LSBs"""
    return (np.ascontiguousarray(channel).ravel() & 1).astype(np.uint8)


def pair_chi_square(bits: np.ndarray) -> float:
    """Chi-square of consecutive non-overlapping bit pairs against uniform"""
    total_pairs = len(bits) // 2
    expected = total_pairs / 4.0
    if expected == 0:
        return 0.0

    paired = bits[:total_pairs * 2].astype(np.int64)
    values = (paired[0::2] << 1) | paired[1::2]
    observed = np.bincount(values, minlength=4)[:4].astype(np.float64)
    return float(np.sum((observed - expected) ** 2 / expected))


def bit_entropy(bits: np.ndarray) -> float:
    """Shannon entropy of a 0/1 sequence, in bits"""
    total = len(bits)
    if total == 0:
        return 0.0

    ones = int(np.count_nonzero(bits))
    entropy = 0.0
    for count in (total - ones, ones):
        if count > 0:
            p = count / total
            entropy -= p * math.log2(p)
    return entropy


def render_bit_plane(bits: np.ndarray, channel_index: int) -> Image.Image:
    """Tile a bit plane into a square-ish RGBA image, 1 -> 255 in its colour slot"""
    count = len(bits)
    width = max(1, math.ceil(math.sqrt(count)))
    height = max(1, -(-count // width))

    canvas = np.zeros((height * width, 4), dtype=np.uint8)
    canvas[:, 3] = 255
    canvas[:count, channel_index] = bits * 255
    return Image.fromarray(canvas.reshape(height, width, 4))


@dataclass(frozen=True)
class ChannelStat:
    channel: str
    chi_square: float
    entropy: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "channel": self.channel,
            "chi_square": self.chi_square,
            "entropy": self.entropy,
        }


def channel_statistics(rgba: np.ndarray) -> List[ChannelStat]:
    """Chi-square and entropy for the first three channels of a pixel grid"""
    stats = []
    for index, name in enumerate(CHANNEL_NAMES):
        bits = extract_lsb(rgba[:, :, index])
        stats.append(ChannelStat(name, pair_chi_square(bits), bit_entropy(bits)))
    return stats


def is_lsb_suspicious(stats: List[ChannelStat], config: BitPlaneConfig) -> bool:
    return (
        any(s.chi_square > config.chi_square_threshold for s in stats)
        or any(s.entropy > config.entropy_threshold for s in stats)
    )


@dataclass(frozen=True)
class BitPlaneResult:
    width: int
    height: int
    channels: List[ChannelStat]
    suspicious: bool
    planes: List[Image.Image] = field(default_factory=list, repr=False, compare=False)

    @property
    def chi_square_scores(self) -> List[float]:
        return [c.chi_square for c in self.channels]

    @property
    def entropy_scores(self) -> List[float]:
        return [c.entropy for c in self.channels]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "channels": [c.to_dict() for c in self.channels],
            "suspicious": self.suspicious,
        }


class BitPlaneAnalyzer:
    """LSB statistics for a decoded RGBA image"""

    def __init__(self, config: Optional[BitPlaneConfig] = None, visualize: bool = True):
        self.config = config or get_config().bitplane
        self.visualize = visualize

    def analyze(self, pixels) -> BitPlaneResult:
        rgba = as_rgba_array(pixels)
        height, width = rgba.shape[:2]
        if width == 0 or height == 0:
            raise MalformedImageError(
                f"Image has invalid dimensions {width}x{height}",
                width=width,
                height=height,
            )

        stats = channel_statistics(rgba)
        suspicious = is_lsb_suspicious(stats, self.config)

        planes = []
        if self.visualize:
            for index in range(len(CHANNEL_NAMES)):
                planes.append(render_bit_plane(extract_lsb(rgba[:, :, index]), index))

        logger.debug(
            f"Bit-plane analysis {width}x{height}: "
            + ", ".join(f"{s.channel} chi2={s.chi_square:.2f} H={s.entropy:.3f}" for s in stats)
        )

        return BitPlaneResult(
            width=width,
            height=height,
            channels=stats,
            suspicious=suspicious,
            planes=planes,
        )


def analyze_image(
    pixels,
    config: Optional[BitPlaneConfig] = None,
    visualize: bool = True,
) -> BitPlaneResult:
    """Convenience function for LSB analysis of an image"""
    return BitPlaneAnalyzer(config=config, visualize=visualize).analyze(pixels)
