"""
Whole-file analysis

Reads a file, scans its bytes for embedded signatures, routes the decoded
media to the matching analyzer and fuses everything into a verdict.
Analyzer failures are recorded on the report and never abort the scan;
only a file that cannot be read at all is fatal.
"""

import hashlib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from stegascan.analyze.bitplane import BitPlaneAnalyzer, BitPlaneResult
from stegascan.analyze.filters import FilterResult, ImageFilterAnalyzer
from stegascan.analyze.frames import FrameSampler, FrameSampleSummary
from stegascan.analyze.metadata import MetadataReport, check_exif, check_id3
from stegascan.analyze.signatures import (
    DeepScanner,
    ScanResult,
    SignatureScanner,
    classify_description,
)
from stegascan.analyze.spectral import SpectralAnalyzer, SpectralResult
from stegascan.analyze.text import TextStatistics, text_statistics
from stegascan.analyze.verdict import EvidenceAggregator, Verdict
from stegascan.core.config import Config, get_config
from stegascan.core.constants import (
    AUDIO_EXTENSIONS,
    Category,
    IMAGE_EXTENSIONS,
    MediaKind,
    VIDEO_EXTENSIONS,
)
from stegascan.core.dependencies import check_python_package
from stegascan.core.events import EventEmitter, EventSink
from stegascan.core.exceptions import EmptyInputError, InputError, StegaScanError
from stegascan.core.logging import get_logger
from stegascan.decode.audio import load_audio
from stegascan.decode.image import open_image
from stegascan.decode.video import open_video

logger = get_logger()

CATEGORY_MEDIA_KINDS = {
    Category.IMAGE: MediaKind.IMAGE,
    Category.AUDIO: MediaKind.AUDIO,
    Category.VIDEO: MediaKind.VIDEO,
}

ISO_AUDIO_BRANDS = {b"M4A ", b"M4B ", b"M4P "}


def detect_media_kind(data: bytes, scan: Optional[ScanResult], path: Path) -> MediaKind:
    """Pick the analyzer family from the container, falling back to the extension"""
    if scan is not None:
        kind = CATEGORY_MEDIA_KINDS.get(classify_description(scan.primary_format))
        if kind is not None:
            return kind

    if len(data) >= 12 and data[4:8] == b"ftyp":
        return MediaKind.AUDIO if data[8:12] in ISO_AUDIO_BRANDS else MediaKind.VIDEO

    ext = path.suffix.lstrip(".").lower()
    if ext in IMAGE_EXTENSIONS:
        return MediaKind.IMAGE
    if ext in AUDIO_EXTENSIONS:
        return MediaKind.AUDIO
    if ext in VIDEO_EXTENSIONS:
        return MediaKind.VIDEO
    return MediaKind.TEXT


@dataclass(frozen=True)
class FileInfo:
    path: str
    size_bytes: int
    sha256: str
    extension: Optional[str]
    detected_type: MediaKind

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "size_bytes": self.size_bytes,
            "sha256": self.sha256,
            "extension": self.extension,
            "detected_type": self.detected_type.value,
        }


@dataclass(frozen=True)
class AnalysisReport:
    file_info: FileInfo
    verdict: Verdict
    scan: Optional[ScanResult] = None
    bitplane: Optional[BitPlaneResult] = None
    spectral: Optional[SpectralResult] = None
    frames: Optional[FrameSampleSummary] = None
    text: Optional[TextStatistics] = None
    metadata: Optional[MetadataReport] = None
    filters: Optional[FilterResult] = None
    errors: List[str] = field(default_factory=list)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        def _maybe(result):
            return result.to_dict() if result is not None else None

        return {
            "file_info": self.file_info.to_dict(),
            "timestamp": self.timestamp,
            "signatures": _maybe(self.scan),
            "bitplane": _maybe(self.bitplane),
            "spectral": _maybe(self.spectral),
            "frames": _maybe(self.frames),
            "text": _maybe(self.text),
            "metadata": _maybe(self.metadata),
            "filters": _maybe(self.filters),
            "errors": list(self.errors),
            "summary": self.verdict.to_dict(),
        }


def read_input(path: Path) -> bytes:
    if not path.exists():
        raise InputError("File not found", path=str(path))
    if not path.is_file():
        raise InputError("Not a regular file", path=str(path))
    try:
        data = path.read_bytes()
    except OSError as e:
        raise InputError("Cannot read file", path=str(path), reason=str(e))
    if not data:
        raise EmptyInputError(f"File is empty: {path}", media_kind="bytes")
    return data


class FileAnalyzer:
    """Run every applicable analyzer over one file"""

    def __init__(
        self,
        config: Optional[Config] = None,
        deep_scanner: Optional[DeepScanner] = None,
        event_sink: Optional[EventSink] = None,
        sample_every: Optional[int] = None,
        visualize: bool = True,
    ):
        self.config = config or get_config()
        self.deep_scanner = deep_scanner
        self.event_sink = event_sink
        self.sample_every = sample_every
        self.visualize = visualize
        self.events = EventEmitter("pipeline", event_sink)

    def analyze(self, path: Union[str, Path]) -> AnalysisReport:
        path = Path(path)
        data = read_input(path)
        errors = []
        results = {}

        scanner = SignatureScanner(
            config=self.config.signatures,
            deep_scanner=self.deep_scanner,
            event_sink=self.event_sink,
        )
        scan = self._attempt("signatures", errors, scanner.scan, data, path.suffix or None)

        kind = detect_media_kind(data, scan, path)
        logger.info(f"Analyzing {path} as {kind.value}")

        if kind is MediaKind.IMAGE:
            self._analyze_image(path, errors, results)
        elif kind is MediaKind.AUDIO:
            self._analyze_audio(path, errors, results)
        elif kind is MediaKind.VIDEO:
            self._analyze_video(path, errors, results)
        else:
            results["text"] = text_statistics(data, path.suffix.lstrip(".").lower() or "txt")

        filters = results.pop("filters", None)
        verdict = EvidenceAggregator(self.config.verdict).aggregate(scan, **results)

        return AnalysisReport(
            file_info=FileInfo(
                path=str(path),
                size_bytes=len(data),
                sha256=hashlib.sha256(data).hexdigest(),
                extension=path.suffix.lstrip(".") or None,
                detected_type=kind,
            ),
            verdict=verdict,
            scan=scan,
            filters=filters,
            errors=errors,
            **results,
        )

    def _analyze_image(self, path: Path, errors: List[str], results: Dict[str, Any]):
        image = self._attempt("image decode", errors, open_image, path)
        if image is None:
            return

        with image:
            metadata = self._attempt("exif", errors, check_exif, image, self.config.metadata)
            if metadata is not None:
                results["metadata"] = metadata

            analyzer = BitPlaneAnalyzer(self.config.bitplane, visualize=self.visualize)
            bitplane = self._attempt("bitplane", errors, analyzer.analyze, image)
            if bitplane is not None:
                results["bitplane"] = bitplane

            if self.visualize:
                filters = self._attempt(
                    "filters", errors, ImageFilterAnalyzer(self.config.bitplane).analyze, image
                )
                if filters is not None:
                    results["filters"] = filters

    def _analyze_audio(self, path: Path, errors: List[str], results: Dict[str, Any]):
        if check_python_package("mutagen").available:
            metadata = self._attempt("id3", errors, check_id3, path, self.config.metadata)
            if metadata is not None:
                results["metadata"] = metadata
        else:
            logger.info("mutagen not installed, skipping ID3 checks")

        decoded = self._attempt("audio decode", errors, load_audio, path)
        if decoded is None:
            return

        samples, rate = decoded
        analyzer = SpectralAnalyzer(self.config.spectral, visualize=self.visualize)
        spectral = self._attempt("spectral", errors, analyzer.analyze, samples, rate)
        if spectral is not None:
            results["spectral"] = spectral

    def _analyze_video(self, path: Path, errors: List[str], results: Dict[str, Any]):
        stream = self._attempt("video decode", errors, open_video, path)
        if stream is None:
            return

        sampler = FrameSampler(
            config=self.config.frames,
            bitplane_config=self.config.bitplane,
            sample_every=self.sample_every,
            event_sink=self.event_sink,
        )
        frames = self._attempt("frames", errors, sampler.sample, stream)
        if frames is not None:
            results["frames"] = frames

    def _attempt(self, name: str, errors: List[str], func: Callable, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except StegaScanError as e:
            logger.warning(f"{name} failed: {e}")
            errors.append(f"{name}: {e}")
            self.events.emit(f"{name} failed: {e}", level="warning", step=name)
            return None


def analyze_file(
    path: Union[str, Path],
    config: Optional[Config] = None,
    deep_scanner: Optional[DeepScanner] = None,
    event_sink: Optional[EventSink] = None,
    sample_every: Optional[int] = None,
    visualize: bool = True,
) -> AnalysisReport:
    """Convenience function to analyze a single file"""
    analyzer = FileAnalyzer(
        config=config,
        deep_scanner=deep_scanner,
        event_sink=event_sink,
        sample_every=sample_every,
        visualize=visualize,
    )
    return analyzer.analyze(path)
