"""
Spectrogram analysis for decoded audio

Builds a Hann-windowed short-time FFT magnitude grid (frames x bins) from
mono samples and looks for signs of data painted into the spectrum:
- energy concentrated above the high-frequency cutoff
- persistent tones in the upper half of the spectrum
- dense magnitude edges, typical of text or images drawn in a spectrogram
- frames whose peak energy towers over the rest of the recording

The sample rate defaults to 44.1 kHz when the caller does not supply the
real rate of the stream; bin-to-frequency mapping is only accurate when
the true rate is passed in.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
from PIL import Image
from scipy import fft
from numpy.lib.stride_tricks import sliding_window_view

from stegascan.core.config import SpectralConfig, get_config
from stegascan.core.exceptions import EmptyInputError, MalformedMediaError
from stegascan.core.logging import get_logger

logger = get_logger()

TONE_PATTERN = "Persistent high-frequency tone at bin {bin} (possible hidden data)"
EDGE_PATTERN = "High edge density detected (possible hidden image/text)"
SPIKE_PATTERN = "Unusual energy spikes detected"


@dataclass(frozen=True)
class SpectralResult:
    spectrogram: np.ndarray = field(repr=False, compare=False)
    sample_rate: float
    high_frequency_energy: float
    suspicious_patterns: List[str]
    suspicious: bool
    image: Optional[Image.Image] = field(default=None, repr=False, compare=False)

    @property
    def num_frames(self) -> int:
        return int(self.spectrogram.shape[0])

    @property
    def num_bins(self) -> int:
        return int(self.spectrogram.shape[1])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frames": self.num_frames,
            "bins": self.num_bins,
            "sample_rate": self.sample_rate,
            "high_frequency_energy": self.high_frequency_energy,
            "suspicious_patterns": list(self.suspicious_patterns),
            "suspicious": self.suspicious,
        }


def compute_spectrogram(samples: np.ndarray, window_size: int, hop_size: int) -> np.ndarray:
    """Magnitude of the first window_size/2 FFT bins for every full frame"""
    num_bins = window_size // 2
    if len(samples) < window_size:
        return np.zeros((0, num_bins), dtype=np.float64)

    frames = sliding_window_view(samples, window_size)[::hop_size]
    windowed = frames * np.hanning(window_size)
    spectrum = fft.rfft(windowed, n=window_size, axis=1)[:, :num_bins]
    return np.abs(spectrum)


def high_frequency_energy(
    spectrogram: np.ndarray,
    sample_rate: float,
    cutoff: float,
) -> float:
    """Share of total energy at or above the cutoff frequency"""
    if spectrogram.size == 0:
        return 0.0

    num_bins = spectrogram.shape[1]
    freq_per_bin = sample_rate / (2.0 * num_bins)
    start_bin = int(cutoff / freq_per_bin)

    energy = spectrogram ** 2
    total = float(energy.sum())
    if total <= 0.0:
        return 0.0
    return float(energy[:, start_bin:].sum()) / total


def longest_runs(mask: np.ndarray) -> np.ndarray:
    """Longest run of consecutive True values down axis 0, per column"""
    current = np.zeros(mask.shape[1], dtype=np.int64)
    longest = np.zeros(mask.shape[1], dtype=np.int64)
    for row in mask:
        current = np.where(row, current + 1, 0)
        np.maximum(longest, current, out=longest)
    return longest


def count_edges(spectrogram: np.ndarray, delta: float) -> int:
    """Cells differing from their previous-frame or previous-bin neighbour by > delta"""
    if spectrogram.shape[0] < 2 or spectrogram.shape[1] < 2:
        return 0
    current = spectrogram[1:, 1:]
    time_step = np.abs(current - spectrogram[:-1, 1:]) > delta
    freq_step = np.abs(current - spectrogram[1:, :-1]) > delta
    return int(np.count_nonzero(time_step | freq_step))


def count_spike_frames(spectrogram: np.ndarray, multiplier: float) -> int:
    """Frames whose peak magnitude exceeds multiplier x the mean frame peak"""
    if spectrogram.size == 0:
        return 0
    peaks = spectrogram.max(axis=1)
    mean_peak = float(peaks.mean())
    if mean_peak <= 0.0:
        return 0
    return int(np.count_nonzero(peaks > multiplier * mean_peak))


def render_spectrogram(spectrogram: np.ndarray) -> Image.Image:
    """Log-scaled grayscale image; one column per frame, low frequencies at the bottom"""
    if spectrogram.size == 0:
        return Image.new("L", (1, 1), 0)

    peak = float(spectrogram.max())
    if peak > 0.0:
        normalized = np.minimum(spectrogram / peak, 1.0)
    else:
        normalized = np.zeros_like(spectrogram)

    scaled = np.log10(1.0 + normalized * 99.0) / 2.0
    pixels = np.floor(scaled * 255.0).astype(np.uint8)
    return Image.fromarray(np.ascontiguousarray(pixels.T[::-1, :]))


class SpectralAnalyzer:
    """Spectrogram pattern detection for mono audio samples"""

    def __init__(self, config: Optional[SpectralConfig] = None, visualize: bool = True):
        self.config = config or get_config().spectral
        self.visualize = visualize

    def analyze(self, samples, sample_rate: Optional[float] = None) -> SpectralResult:
        data = np.asarray(samples, dtype=np.float64)
        if data.size == 0:
            raise EmptyInputError("Audio contains no samples", media_kind="audio")
        if data.ndim != 1:
            raise MalformedMediaError(
                f"Expected mono samples, got array of shape {data.shape}",
                media_kind="audio",
            )

        cfg = self.config
        rate = float(sample_rate) if sample_rate else cfg.sample_rate

        spectrogram = compute_spectrogram(data, cfg.window_size, cfg.hop_size)
        hf_energy = high_frequency_energy(spectrogram, rate, cfg.high_frequency_cutoff)
        patterns = self._detect_patterns(spectrogram)
        suspicious = hf_energy > cfg.high_frequency_ratio or bool(patterns)

        logger.debug(
            f"Spectral analysis: {spectrogram.shape[0]} frames @ {rate:.0f} Hz, "
            f"hf_energy={hf_energy:.4f}, patterns={len(patterns)}"
        )

        return SpectralResult(
            spectrogram=spectrogram,
            sample_rate=rate,
            high_frequency_energy=hf_energy,
            suspicious_patterns=patterns,
            suspicious=suspicious,
            image=render_spectrogram(spectrogram) if self.visualize else None,
        )

    def _detect_patterns(self, spectrogram: np.ndarray) -> List[str]:
        patterns = []
        num_frames, num_bins = spectrogram.shape
        if num_frames == 0 or num_bins == 0:
            return patterns

        cfg = self.config
        upper = num_bins // 2
        runs = longest_runs(spectrogram[:, upper:] > cfg.tone_magnitude)
        for offset in np.flatnonzero(runs > num_frames // 4):
            patterns.append(TONE_PATTERN.format(bin=upper + int(offset)))

        edges = count_edges(spectrogram, cfg.edge_delta)
        if edges > (num_frames * num_bins) // cfg.edge_density_divisor:
            patterns.append(EDGE_PATTERN)

        spikes = count_spike_frames(spectrogram, cfg.spike_multiplier)
        if spikes > num_frames // cfg.spike_frame_divisor:
            patterns.append(SPIKE_PATTERN)

        return patterns


def analyze_audio(
    samples,
    sample_rate: Optional[float] = None,
    config: Optional[SpectralConfig] = None,
    visualize: bool = True,
) -> SpectralResult:
    """Convenience function for spectrogram analysis of mono samples"""
    return SpectralAnalyzer(config=config, visualize=visualize).analyze(samples, sample_rate)
