"""
Evidence aggregation

Fuses the signature scan with at most one format-specific result into an
ordered indicator list and a confidence label. Indicator order is fixed so
reports are reproducible:

1. suspicious data in the file structure
2. multiple file formats (informational, does not set ``detected``)
3. signature findings, verbatim
4. the format-specific flag
5. metadata findings
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from stegascan.analyze.bitplane import BitPlaneResult
from stegascan.analyze.frames import FrameSampleSummary
from stegascan.analyze.metadata import MetadataReport
from stegascan.analyze.signatures import ScanResult
from stegascan.analyze.spectral import SpectralResult
from stegascan.analyze.text import TextStatistics
from stegascan.core.config import VerdictConfig, get_config
from stegascan.core.constants import (
    Confidence,
    INDICATOR_LSB,
    INDICATOR_METADATA_PREFIX,
    INDICATOR_MULTIPLE_FORMATS,
    INDICATOR_SPECTROGRAM,
    INDICATOR_SUSPICIOUS_STRUCTURE,
    INDICATOR_VIDEO_FRAMES,
    RECOMMENDATIONS_CLEAN,
    RECOMMENDATIONS_DETECTED,
)
from stegascan.core.logging import get_logger

logger = get_logger()


@dataclass(frozen=True)
class Verdict:
    detected: bool
    confidence: Confidence
    indicators: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result['confidence'] = self.confidence.value
        return result


class EvidenceAggregator:
    """Turn analyzer results into a confidence-scored verdict"""

    def __init__(self, config: Optional[VerdictConfig] = None):
        self.config = config or get_config().verdict

    def aggregate(
        self,
        scan: Optional[ScanResult] = None,
        *,
        bitplane: Optional[BitPlaneResult] = None,
        spectral: Optional[SpectralResult] = None,
        frames: Optional[FrameSampleSummary] = None,
        text: Optional[TextStatistics] = None,
        metadata: Optional[MetadataReport] = None,
    ) -> Verdict:
        provided = [r for r in (bitplane, spectral, frames, text) if r is not None]
        if len(provided) > 1:
            raise ValueError(
                "At most one format-specific result can be aggregated, got "
                + ", ".join(type(r).__name__ for r in provided)
            )

        indicators = []
        detected = False

        if scan is not None:
            if scan.has_suspicious_data:
                detected = True
                indicators.append(INDICATOR_SUSPICIOUS_STRUCTURE)
            if scan.has_multiple_formats:
                indicators.append(INDICATOR_MULTIPLE_FORMATS)
            if scan.suspicious_findings:
                detected = True
                indicators.extend(scan.suspicious_findings)

        format_indicator = self._format_indicator(bitplane, spectral, frames)
        if format_indicator:
            detected = True
            indicators.append(format_indicator)

        if metadata is not None and metadata.suspicious_fields:
            detected = True
            indicators.extend(
                INDICATOR_METADATA_PREFIX + f for f in metadata.suspicious_fields
            )

        confidence = self._confidence(len(indicators))
        recommendations = RECOMMENDATIONS_DETECTED if detected else RECOMMENDATIONS_CLEAN

        logger.debug(
            f"Verdict: detected={detected}, confidence={confidence.value}, "
            f"{len(indicators)} indicators"
        )

        return Verdict(
            detected=detected,
            confidence=confidence,
            indicators=indicators,
            recommendations=list(recommendations),
        )

    def _format_indicator(self, bitplane, spectral, frames) -> Optional[str]:
        if bitplane is not None and bitplane.suspicious:
            return INDICATOR_LSB
        if spectral is not None and spectral.suspicious:
            return INDICATOR_SPECTROGRAM
        if frames is not None and frames.suspicious:
            return INDICATOR_VIDEO_FRAMES.format(count=len(frames.flagged_frame_indices))
        return None

    def _confidence(self, count: int) -> Confidence:
        if count >= self.config.high_indicator_count:
            return Confidence.HIGH
        if count >= self.config.medium_indicator_count:
            return Confidence.MEDIUM
        return Confidence.LOW


def aggregate_evidence(
    scan: Optional[ScanResult] = None,
    *,
    bitplane: Optional[BitPlaneResult] = None,
    spectral: Optional[SpectralResult] = None,
    frames: Optional[FrameSampleSummary] = None,
    text: Optional[TextStatistics] = None,
    metadata: Optional[MetadataReport] = None,
    config: Optional[VerdictConfig] = None,
) -> Verdict:
    """Convenience function to build a verdict from analyzer results"""
    return EvidenceAggregator(config=config).aggregate(
        scan,
        bitplane=bitplane,
        spectral=spectral,
        frames=frames,
        text=text,
        metadata=metadata,
    )
