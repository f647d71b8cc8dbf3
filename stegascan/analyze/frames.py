"""
Sampled frame analysis for decoded video

Every Nth frame gets the same LSB chi-square/entropy scoring used for
still images, plus a colour histogram check for the paired-value artifact
of LSB embedding and an edge-density measurement. Decode failures in the
frame sequence are counted and skipped.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import numpy as np

from stegascan.analyze.bitplane import (
    ChannelStat,
    as_rgba_array,
    channel_statistics,
    is_lsb_suspicious,
)
from stegascan.core.config import BitPlaneConfig, FrameConfig, get_config
from stegascan.core.events import EventEmitter, EventSink
from stegascan.core.exceptions import (
    ConfigurationError,
    MalformedImageError,
    MalformedMediaError,
    StegaScanError,
)
from stegascan.core.logging import get_logger

logger = get_logger()


def has_histogram_anomaly(
    rgba: np.ndarray,
    peak_multiplier: float,
    pair_multiplier: float,
) -> bool:
    """Dominant bin or lopsided even/odd bin pairs in any colour channel"""
    pixel_count = rgba.shape[0] * rgba.shape[1]
    mean_count = pixel_count / 256.0

    for index in range(3):
        histogram = np.bincount(rgba[:, :, index].ravel(), minlength=256).astype(np.int64)
        if histogram.max() > peak_multiplier * mean_count:
            return True
        pair_diff = np.abs(histogram[0::2] - histogram[1::2])
        if np.any(pair_diff > pair_multiplier * mean_count):
            return True
    return False


def edge_density(rgba: np.ndarray, threshold: float) -> float:
    """Share of pixels where any channel's central-difference gradient exceeds threshold"""
    height, width = rgba.shape[:2]
    total = height * width
    if total == 0 or height < 3 or width < 3:
        return 0.0

    rgb = rgba[:, :, :3].astype(np.int32)
    gx = rgb[1:-1, 2:] - rgb[1:-1, :-2]
    gy = rgb[2:, 1:-1] - rgb[:-2, 1:-1]
    gradient = np.sqrt((gx * gx + gy * gy).astype(np.float64))
    edges = np.any(gradient > threshold, axis=2)
    return float(np.count_nonzero(edges)) / total


@dataclass(frozen=True)
class FrameAnalysis:
    frame_index: int
    channels: List[ChannelStat]
    lsb_suspicious: bool
    histogram_anomalies: bool
    edge_density: float

    @property
    def suspicious(self) -> bool:
        return self.lsb_suspicious or self.histogram_anomalies

    @property
    def mean_entropy(self) -> float:
        return sum(c.entropy for c in self.channels) / len(self.channels)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frame_index": self.frame_index,
            "channels": [c.to_dict() for c in self.channels],
            "lsb_suspicious": self.lsb_suspicious,
            "histogram_anomalies": self.histogram_anomalies,
            "edge_density": self.edge_density,
            "suspicious": self.suspicious,
        }


@dataclass(frozen=True)
class FrameSampleSummary:
    frames_processed: int
    frames_sampled: int
    flagged_frame_indices: List[int]
    average_entropy: float
    decode_errors: int
    analysis_errors: int = 0
    sample_every: int = 1
    frames: List[FrameAnalysis] = field(default_factory=list, repr=False)

    @property
    def suspicious(self) -> bool:
        return bool(self.flagged_frame_indices)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frames_processed": self.frames_processed,
            "frames_sampled": self.frames_sampled,
            "sample_every": self.sample_every,
            "flagged_frame_indices": list(self.flagged_frame_indices),
            "average_entropy": self.average_entropy,
            "decode_errors": self.decode_errors,
            "analysis_errors": self.analysis_errors,
            "frames": [f.to_dict() for f in self.frames],
        }


class FrameSampler:
    """
    Sample a single-pass frame sequence and score every Nth frame

    Items of the sequence are decoded frames (RGBA arrays or PIL images)
    or exception instances standing for frames that failed to decode.
    Indices count every item, failures included.
    """

    def __init__(
        self,
        config: Optional[FrameConfig] = None,
        bitplane_config: Optional[BitPlaneConfig] = None,
        sample_every: Optional[int] = None,
        event_sink: Optional[EventSink] = None,
    ):
        self.config = config or get_config().frames
        self.bitplane_config = bitplane_config or get_config().bitplane
        self.sample_every = self.config.sample_every if sample_every is None else sample_every
        if self.sample_every < 1:
            raise ConfigurationError(f"sample_every must be at least 1, got {self.sample_every}")
        self.events = EventEmitter("frames", event_sink)

    def analyze_frame(self, frame, frame_index: int = 0) -> FrameAnalysis:
        rgba = as_rgba_array(frame)
        height, width = rgba.shape[:2]
        if width == 0 or height == 0:
            raise MalformedImageError(
                f"Frame {frame_index} has invalid dimensions {width}x{height}",
                width=width,
                height=height,
            )

        stats = channel_statistics(rgba)
        return FrameAnalysis(
            frame_index=frame_index,
            channels=stats,
            lsb_suspicious=is_lsb_suspicious(stats, self.bitplane_config),
            histogram_anomalies=has_histogram_anomaly(
                rgba,
                self.config.histogram_peak_multiplier,
                self.config.histogram_pair_multiplier,
            ),
            edge_density=edge_density(rgba, self.config.edge_gradient_threshold),
        )

    def sample(self, frames: Iterable) -> FrameSampleSummary:
        seen = 0
        processed = 0
        decode_errors = 0
        analysis_errors = 0
        analyses = []
        flagged = []

        for index, item in enumerate(frames):
            seen += 1
            if isinstance(item, Exception):
                decode_errors += 1
                self.events.emit(
                    f"Frame {index} failed to decode: {item}",
                    level="warning",
                    frame_index=index,
                )
                continue

            processed += 1
            if index % self.sample_every != 0:
                continue

            try:
                analysis = self.analyze_frame(item, index)
            except StegaScanError as e:
                analysis_errors += 1
                self.events.emit(
                    f"Frame {index} could not be analyzed: {e}",
                    level="warning",
                    frame_index=index,
                )
                continue

            analyses.append(analysis)
            if analysis.suspicious:
                flagged.append(index)
                self.events.emit(
                    f"Frame {index} flagged",
                    level="info",
                    frame_index=index,
                    lsb_suspicious=analysis.lsb_suspicious,
                    histogram_anomalies=analysis.histogram_anomalies,
                )

        if seen == 0:
            raise MalformedMediaError("Video yielded no frames", media_kind="video")

        average = 0.0
        if analyses:
            average = sum(a.mean_entropy for a in analyses) / len(analyses)

        logger.debug(
            f"Frame sampling: {processed} decoded, {len(analyses)} sampled, "
            f"{len(flagged)} flagged, {decode_errors} decode errors"
        )

        return FrameSampleSummary(
            frames_processed=processed,
            frames_sampled=len(analyses),
            flagged_frame_indices=flagged,
            average_entropy=average,
            decode_errors=decode_errors,
            analysis_errors=analysis_errors,
            sample_every=self.sample_every,
            frames=analyses,
        )


def sample_video(
    frames: Iterable,
    sample_every: Optional[int] = None,
    config: Optional[FrameConfig] = None,
    event_sink: Optional[EventSink] = None,
) -> FrameSampleSummary:
    """Convenience function to sample and score a frame sequence"""
    sampler = FrameSampler(config=config, sample_every=sample_every, event_sink=event_sink)
    return sampler.sample(frames)
