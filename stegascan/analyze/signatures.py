"""
Byte Signature Scanner

Scan a raw file buffer for known magic numbers at any offset, not only at
the start, to expose:
- Files hidden after or inside a carrier (appended archives, images in audio)
- Polyglot files that are valid as several media types at once
- Extensions that disagree with the real container format

Two tables drive the scan. HEADER_TABLE identifies the container at
offset 0. MANUAL_SIGNATURES holds complete-header magic numbers that are
unambiguous enough to search for anywhere in the buffer; a hit past
offset 0 is only trusted when it sits on padding or a sector boundary,
otherwise it is treated as noise inside compressed data.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

from stegascan.core.config import SignatureConfig, get_config
from stegascan.core.constants import (
    Category,
    Confidence,
    EXTENSION_ALIASES,
    MISMATCH_FINDING,
    POLYGLOT_FINDING,
    UNKNOWN_FORMAT,
)
from stegascan.core.events import EventEmitter, EventSink
from stegascan.core.exceptions import EmptyInputError
from stegascan.core.logging import get_logger

logger = get_logger()


@dataclass(frozen=True)
class Signature:
    """One magic number in the manual scan table."""
    magic: bytes
    description: str
    category: Category


RIFF_MAGIC = b"RIFF"

# RIFF sub-type at bytes 8..12 -> (description, category)
RIFF_SUBTYPES = {
    b"WAVE": ("WAV audio (RIFF/WAVE)", Category.AUDIO),
    b"AVI ": ("AVI video (RIFF)", Category.VIDEO),
    b"WEBP": ("WebP image (RIFF)", Category.IMAGE),
}

MANUAL_SIGNATURES: Tuple[Signature, ...] = (
    # Audio
    Signature(RIFF_MAGIC, "RIFF container", Category.OTHER),
    Signature(b"ID3", "ID3 tag", Category.AUDIO),
    Signature(b"fLaC", "FLAC audio", Category.AUDIO),
    Signature(b"OggS", "OGG audio", Category.AUDIO),
    # Images
    Signature(b"\xFF\xD8\xFF\xE0", "JPEG image (JFIF)", Category.IMAGE),
    Signature(b"\xFF\xD8\xFF\xE1", "JPEG image (Exif)", Category.IMAGE),
    Signature(b"\x89PNG\r\n\x1a\n", "PNG image", Category.IMAGE),
    Signature(b"GIF87a", "GIF87a image", Category.IMAGE),
    Signature(b"GIF89a", "GIF89a image", Category.IMAGE),
    # Documents and archives
    Signature(b"%PDF-", "PDF document", Category.DOCUMENT),
    Signature(b"PK\x03\x04", "ZIP archive", Category.ARCHIVE),
    Signature(b"Rar!\x1a\x07", "RAR archive", Category.ARCHIVE),
    Signature(b"7z\xBC\xAF\x27\x1C", "7-Zip archive", Category.ARCHIVE),
    # Video containers
    Signature(b"\x1A\x45\xDF\xA3", "Webm/mkv", Category.VIDEO),
    Signature(b"ftyp", "Mp4", Category.VIDEO),
)

# Ordered; first prefix match wins
HEADER_TABLE: Tuple[Tuple[bytes, str], ...] = (
    (b"\xFF\xD8\xFF", "JPEG image"),
    (b"\x89PNG", "PNG image"),
    (b"GIF8", "GIF image"),
    (b"%PDF", "PDF document"),
    (b"PK\x03\x04", "ZIP archive"),
    (b"ID3", "MP3 audio (with ID3)"),
    (b"\xFF\xFB", "MP3 audio"),
    (b"\xFF\xF3", "MP3 audio"),
    (b"\xFF\xF2", "MP3 audio"),
    (b"fLaC", "FLAC audio"),
)

RIFF_PRIMARY_NAMES = {
    b"WAVE": "WAV audio",
    b"AVI ": "AVI video",
    b"WEBP": "WEBP image",
}

CATEGORY_KEYWORDS: Tuple[Tuple[Category, Tuple[str, ...]], ...] = (
    (Category.IMAGE, ("jpeg", "png", "gif", "bmp", "tiff", "webp", "image")),
    (Category.AUDIO, ("mp3", "wav", "flac", "ogg", "aac", "id3", "audio")),
    (Category.VIDEO, ("mp4", "avi", "mkv", "webm", "mov", "video")),
    (Category.DOCUMENT, ("pdf", "doc", "txt", "rtf", "xml", "html")),
    (Category.ARCHIVE, ("zip", "rar", "tar", "7z", "gzip", "archive")),
    (Category.EXECUTABLE, ("exe", "elf", "mach-o", "executable")),
)

COMPLETE_HEADER_KEYWORDS = (
    "header",
    "jpeg image",
    "png image",
    "gif image",
    "pdf document",
    "zip archive",
    "rar archive",
    "audio",
    "video",
)


def classify_description(description: str) -> Category:
    """Map a free-form signature description to a media category"""
    lowered = description.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(k in lowered for k in keywords):
            return category
    return Category.OTHER


def is_complete_header(description: str) -> bool:
    """True when the description names a whole container, not a fragment"""
    lowered = description.lower()
    return any(k in lowered for k in COMPLETE_HEADER_KEYWORDS)


def confidence_from_byte(value: int) -> Confidence:
    if value < 100:
        return Confidence.LOW
    if value < 200:
        return Confidence.MEDIUM
    return Confidence.HIGH


def normalize_extension(extension: Optional[str]) -> Optional[str]:
    """Upper-case an extension hint and fold common aliases (JPG -> JPEG)"""
    if not extension:
        return None
    ext = extension.strip().lstrip(".").upper()
    if not ext:
        return None
    return EXTENSION_ALIASES.get(ext, ext)


def detect_primary_format(data: bytes) -> str:
    """Identify the container at offset 0 from its leading bytes"""
    if len(data) < 4:
        return UNKNOWN_FORMAT

    if data.startswith(RIFF_MAGIC):
        if len(data) >= 12:
            return RIFF_PRIMARY_NAMES.get(data[8:12], "RIFF container")
        return "RIFF container"

    for magic, name in HEADER_TABLE:
        if data.startswith(magic):
            return name

    return UNKNOWN_FORMAT


@dataclass(frozen=True)
class DeepScanHit:
    """Raw hit reported by an external binary-signature database"""
    offset: int
    name: str
    confidence: int


class DeepScanner(Protocol):
    def scan(self, data: bytes) -> Iterable[DeepScanHit]:
        ...


@dataclass(frozen=True)
class SignatureMatch:
    offset: int
    description: str
    category: Category
    confidence: Confidence

    def to_dict(self) -> Dict[str, Any]:
        return {
            "offset": self.offset,
            "offset_hex": f"0x{self.offset:X}",
            "description": self.description,
            "category": self.category.value,
            "confidence": self.confidence.value,
        }


@dataclass(frozen=True)
class FormatTally:
    """Per-category counts of embedded signatures (offset 0 excluded)"""
    image: int = 0
    audio: int = 0
    video: int = 0
    document: int = 0
    archive: int = 0
    executable: int = 0
    other: int = 0

    @classmethod
    def from_matches(cls, matches: Iterable[SignatureMatch]) -> "FormatTally":
        counts = {c: 0 for c in Category}
        for match in matches:
            if match.offset == 0:
                continue
            counts[match.category] += 1
        return cls(
            image=counts[Category.IMAGE],
            audio=counts[Category.AUDIO],
            video=counts[Category.VIDEO],
            document=counts[Category.DOCUMENT],
            archive=counts[Category.ARCHIVE],
            executable=counts[Category.EXECUTABLE],
            other=counts[Category.OTHER],
        )

    @property
    def is_polyglot(self) -> bool:
        return self.audio > 0 and self.image > 0 and (self.video > 0 or self.document > 0)

    @property
    def total(self) -> int:
        return (self.image + self.audio + self.video + self.document
                + self.archive + self.executable + self.other)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScanResult:
    primary_format: str
    expected_format: Optional[str]
    matches: List[SignatureMatch]
    tally: FormatTally
    has_multiple_formats: bool
    has_suspicious_data: bool
    suspicious_findings: List[str] = field(default_factory=list)
    embedded_headers: List[SignatureMatch] = field(default_factory=list)

    @property
    def total_signatures(self) -> int:
        return len(self.matches)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary_format": self.primary_format,
            "expected_format": self.expected_format,
            "total_signatures": self.total_signatures,
            "matches": [m.to_dict() for m in self.matches],
            "tally": self.tally.to_dict(),
            "has_multiple_formats": self.has_multiple_formats,
            "has_suspicious_data": self.has_suspicious_data,
            "suspicious_findings": list(self.suspicious_findings),
            "embedded_headers": [m.to_dict() for m in self.embedded_headers],
        }


class SignatureScanner:
    """
    Locate embedded and overlapping file structures in a byte buffer

    The optional deep scanner is consulted first; manual hits only fill
    offsets it did not report.
    """

    def __init__(
        self,
        config: Optional[SignatureConfig] = None,
        deep_scanner: Optional[DeepScanner] = None,
        event_sink: Optional[EventSink] = None,
    ):
        self.config = config or get_config().signatures
        self.deep_scanner = deep_scanner
        self.events = EventEmitter("signatures", event_sink)

    def scan(self, data: bytes, expected_format: Optional[str] = None) -> ScanResult:
        if not data:
            raise EmptyInputError("Cannot scan an empty buffer", media_kind="bytes")

        expected = normalize_extension(expected_format)

        matches = self._deep_scan(data)
        taken = {m.offset for m in matches}
        for match in self._manual_scan(data):
            if match.offset in taken:
                continue
            matches.append(match)
            taken.add(match.offset)
        matches.sort(key=lambda m: m.offset)

        primary = detect_primary_format(data)
        if primary == UNKNOWN_FORMAT and matches and matches[0].offset == 0:
            primary = matches[0].description

        tally = FormatTally.from_matches(matches)
        embedded = [m for m in matches if m.offset > 0 and is_complete_header(m.description)]

        findings = []
        if expected and primary != UNKNOWN_FORMAT and expected not in primary.upper():
            findings.append(MISMATCH_FINDING.format(expected=expected, primary=primary))
        if tally.is_polyglot:
            findings.append(POLYGLOT_FINDING)

        logger.debug(
            f"Signature scan: {len(matches)} matches, primary={primary}, "
            f"embedded headers={len(embedded)}"
        )

        return ScanResult(
            primary_format=primary,
            expected_format=expected,
            matches=matches,
            tally=tally,
            has_multiple_formats=len(matches) > 1,
            has_suspicious_data=bool(embedded),
            suspicious_findings=findings,
            embedded_headers=embedded,
        )

    def _deep_scan(self, data: bytes) -> List[SignatureMatch]:
        if self.deep_scanner is None:
            return []

        seen = set()
        matches = []
        for hit in self.deep_scanner.scan(data):
            key = (hit.offset, hit.name)
            if key in seen:
                continue
            seen.add(key)
            matches.append(SignatureMatch(
                offset=hit.offset,
                description=hit.name,
                category=classify_description(hit.name),
                confidence=confidence_from_byte(hit.confidence),
            ))
        return matches

    def _manual_scan(self, data: bytes) -> List[SignatureMatch]:
        results = []
        for signature in MANUAL_SIGNATURES:
            pos = data.find(signature.magic)
            while pos != -1:
                match = self._accept(data, pos, signature)
                if match is not None:
                    results.append(match)
                pos = data.find(signature.magic, pos + len(signature.magic))
        return results

    def _accept(self, data: bytes, pos: int, signature: Signature) -> Optional[SignatureMatch]:
        if pos > 0 and not self._is_plausible_offset(data, pos):
            self.events.emit(
                f"Discarded {signature.description} at offset 0x{pos:X}",
                level="debug",
                offset=pos,
                description=signature.description,
            )
            return None

        if signature.magic == RIFF_MAGIC:
            subtype = data[pos + 8:pos + 12] if pos + 12 <= len(data) else b""
            if subtype not in RIFF_SUBTYPES:
                self.events.emit(
                    f"RIFF header at offset 0x{pos:X} has unknown sub-type {subtype!r}",
                    level="debug",
                    offset=pos,
                )
                return None
            description, category = RIFF_SUBTYPES[subtype]
            return SignatureMatch(pos, description, category, Confidence.HIGH)

        return SignatureMatch(pos, signature.description, signature.category, Confidence.MEDIUM)

    def _is_plausible_offset(self, data: bytes, offset: int) -> bool:
        """Padding run or sector alignment in front of an embedded header"""
        width = self.config.padding_length
        if offset >= width:
            before = data[offset - width:offset]
            if before == b"\x00" * width or before == b"\xFF" * width:
                return True

        return any(offset % boundary == 0 for boundary in self.config.alignment_boundaries)


def scan_signatures(
    data: bytes,
    expected_format: Optional[str] = None,
    config: Optional[SignatureConfig] = None,
    deep_scanner: Optional[DeepScanner] = None,
    event_sink: Optional[EventSink] = None,
) -> ScanResult:
    """Convenience function to scan a buffer for embedded signatures"""
    scanner = SignatureScanner(config=config, deep_scanner=deep_scanner, event_sink=event_sink)
    return scanner.scan(data, expected_format=expected_format)
