"""Tests for evidence aggregation"""

import numpy as np
import pytest

from stegascan.analyze.bitplane import BitPlaneResult, ChannelStat
from stegascan.analyze.frames import FrameSampleSummary
from stegascan.analyze.metadata import MetadataReport
from stegascan.analyze.signatures import FormatTally, ScanResult
from stegascan.analyze.spectral import SpectralResult
from stegascan.analyze.text import text_statistics
from stegascan.analyze.verdict import EvidenceAggregator, aggregate_evidence
from stegascan.core.config import VerdictConfig
from stegascan.core.constants import (
    Confidence,
    INDICATOR_LSB,
    INDICATOR_MULTIPLE_FORMATS,
    INDICATOR_SPECTROGRAM,
    INDICATOR_SUSPICIOUS_STRUCTURE,
    RECOMMENDATIONS_CLEAN,
    RECOMMENDATIONS_DETECTED,
)


def make_scan(suspicious_data=False, multiple=False, findings=()):
    return ScanResult(
        primary_format="PNG image",
        expected_format="PNG",
        matches=[],
        tally=FormatTally(),
        has_multiple_formats=multiple,
        has_suspicious_data=suspicious_data,
        suspicious_findings=list(findings),
    )


def make_bitplane(suspicious):
    stats = [ChannelStat(name, 0.0, 0.5) for name in ("red", "green", "blue")]
    return BitPlaneResult(width=4, height=4, channels=stats, suspicious=suspicious)


def make_spectral(suspicious):
    return SpectralResult(
        spectrogram=np.zeros((1, 1024)),
        sample_rate=44100.0,
        high_frequency_energy=0.5 if suspicious else 0.0,
        suspicious_patterns=[],
        suspicious=suspicious,
    )


def make_frames(flagged):
    return FrameSampleSummary(
        frames_processed=90,
        frames_sampled=3,
        flagged_frame_indices=list(flagged),
        average_entropy=0.5,
        decode_errors=0,
    )


class TestConfidence:
    def test_no_indicators(self):
        verdict = aggregate_evidence(make_scan())
        assert verdict.indicators == []
        assert verdict.detected is False
        assert verdict.confidence is Confidence.LOW
        assert verdict.recommendations == RECOMMENDATIONS_CLEAN

    def test_nothing_at_all(self):
        verdict = aggregate_evidence()
        assert verdict.detected is False
        assert verdict.confidence is Confidence.LOW

    def test_three_indicators_is_high(self):
        scan = make_scan(suspicious_data=True, multiple=True, findings=["Format mismatch"])
        verdict = aggregate_evidence(scan)
        assert len(verdict.indicators) == 3
        assert verdict.confidence is Confidence.HIGH
        assert verdict.detected is True
        assert verdict.recommendations == RECOMMENDATIONS_DETECTED

    def test_one_indicator_is_medium(self):
        verdict = aggregate_evidence(bitplane=make_bitplane(True))
        assert verdict.indicators == [INDICATOR_LSB]
        assert verdict.confidence is Confidence.MEDIUM

    def test_custom_thresholds(self):
        config = VerdictConfig(high_indicator_count=2, medium_indicator_count=1)
        scan = make_scan(suspicious_data=True, multiple=True)
        assert aggregate_evidence(scan, config=config).confidence is Confidence.HIGH


class TestIndicators:
    def test_multiple_formats_alone_does_not_detect(self):
        verdict = aggregate_evidence(make_scan(multiple=True))
        assert verdict.indicators == [INDICATOR_MULTIPLE_FORMATS]
        assert verdict.detected is False
        assert verdict.confidence is Confidence.MEDIUM

    def test_fixed_order(self):
        scan = make_scan(suspicious_data=True, multiple=True, findings=["finding A", "finding B"])
        metadata = MetadataReport(source="exif", suspicious_fields=["UserComment: potential encoded data"])
        verdict = aggregate_evidence(scan, spectral=make_spectral(True), metadata=metadata)

        assert verdict.indicators == [
            INDICATOR_SUSPICIOUS_STRUCTURE,
            INDICATOR_MULTIPLE_FORMATS,
            "finding A",
            "finding B",
            INDICATOR_SPECTROGRAM,
            "Metadata: UserComment: potential encoded data",
        ]

    def test_video_indicator_counts_frames(self):
        verdict = aggregate_evidence(frames=make_frames([0, 30]))
        assert verdict.indicators == ["2 suspicious video frames found"]
        assert verdict.detected is True

    def test_clean_format_result(self):
        verdict = aggregate_evidence(make_scan(), frames=make_frames([]))
        assert verdict.detected is False

    def test_text_never_contributes(self):
        verdict = aggregate_evidence(text=text_statistics(b"hello\nworld\n"))
        assert verdict.indicators == []
        assert verdict.detected is False

    def test_metadata_counts_as_detection(self):
        metadata = MetadataReport(source="id3", suspicious_fields=["Large private frame: ~4096 bytes"])
        verdict = aggregate_evidence(metadata=metadata)
        assert verdict.detected is True
        assert verdict.indicators == ["Metadata: Large private frame: ~4096 bytes"]

    def test_only_one_format_result(self):
        with pytest.raises(ValueError):
            EvidenceAggregator().aggregate(
                bitplane=make_bitplane(False),
                spectral=make_spectral(False),
            )


def test_verdict_to_dict():
    report = aggregate_evidence(make_scan(suspicious_data=True)).to_dict()
    assert report["confidence"] == "medium"
    assert report["detected"] is True
    assert report["indicators"] == [INDICATOR_SUSPICIOUS_STRUCTURE]
