"""Steganography heuristics engine"""

from stegascan.analyze.signatures import (
    SignatureScanner,
    ScanResult,
    SignatureMatch,
    FormatTally,
    DeepScanner,
    DeepScanHit,
    scan_signatures,
)
from stegascan.analyze.bitplane import (
    BitPlaneAnalyzer,
    BitPlaneResult,
    ChannelStat,
    analyze_image,
)
from stegascan.analyze.filters import (
    ImageFilterAnalyzer,
    FilterResult,
    apply_filters,
)
from stegascan.analyze.spectral import (
    SpectralAnalyzer,
    SpectralResult,
    analyze_audio,
)
from stegascan.analyze.frames import (
    FrameSampler,
    FrameAnalysis,
    FrameSampleSummary,
    sample_video,
)
from stegascan.analyze.metadata import (
    MetadataReport,
    check_exif,
    check_id3,
    is_potential_base64,
)
from stegascan.analyze.text import TextStatistics, text_statistics
from stegascan.analyze.verdict import (
    EvidenceAggregator,
    Verdict,
    aggregate_evidence,
)

__all__ = [
    'SignatureScanner',
    'ScanResult',
    'SignatureMatch',
    'FormatTally',
    'DeepScanner',
    'DeepScanHit',
    'scan_signatures',
    'BitPlaneAnalyzer',
    'BitPlaneResult',
    'ChannelStat',
    'analyze_image',
    'ImageFilterAnalyzer',
    'FilterResult',
    'apply_filters',
    'SpectralAnalyzer',
    'SpectralResult',
    'analyze_audio',
    'FrameSampler',
    'FrameAnalysis',
    'FrameSampleSummary',
    'sample_video',
    'MetadataReport',
    'check_exif',
    'check_id3',
    'is_potential_base64',
    'TextStatistics',
    'text_statistics',
    'EvidenceAggregator',
    'Verdict',
    'aggregate_evidence',
]
