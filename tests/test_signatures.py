"""Tests for the byte signature scanner"""

import pytest

from stegascan.analyze.signatures import (
    DeepScanHit,
    FormatTally,
    SignatureMatch,
    SignatureScanner,
    classify_description,
    confidence_from_byte,
    detect_primary_format,
    is_complete_header,
    normalize_extension,
    scan_signatures,
)
from stegascan.core.config import SignatureConfig
from stegascan.core.constants import (
    Category,
    Confidence,
    POLYGLOT_FINDING,
    UNKNOWN_FORMAT,
)
from stegascan.core.exceptions import EmptyInputError, InputError, MalformedMediaError

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
JPEG_MAGIC = b"\xFF\xD8\xFF\xE0"


class FakeDeepScanner:
    def __init__(self, hits):
        self.hits = hits

    def scan(self, data):
        return list(self.hits)


def place(size, chunks):
    """Zero-filled buffer with byte strings written at the given offsets"""
    buffer = bytearray(size)
    for offset, chunk in chunks.items():
        buffer[offset:offset + len(chunk)] = chunk
    return bytes(buffer)


class TestPrimaryFormat:
    def test_png_only_buffer(self):
        result = scan_signatures(PNG_MAGIC + b"\x11" * 100, expected_format="png")
        assert "PNG" in result.primary_format
        assert result.has_multiple_formats is False
        assert result.suspicious_findings == []
        assert result.has_suspicious_data is False

    @pytest.mark.parametrize("subtype,expected", [
        (b"WAVE", "WAV audio"),
        (b"AVI ", "AVI video"),
        (b"WEBP", "WEBP image"),
    ])
    def test_riff_subtypes(self, subtype, expected):
        data = b"RIFF" + b"\x24\x00\x00\x00" + subtype + b"\x11" * 20
        assert detect_primary_format(data) == expected

    def test_mp3_frame_header(self):
        assert detect_primary_format(b"\xFF\xFB\x90\x64" + b"\x11" * 10) == "MP3 audio"

    def test_short_buffer_is_unknown(self):
        assert detect_primary_format(b"\x89PN") == UNKNOWN_FORMAT

    def test_unrecognised_header(self):
        result = scan_signatures(b"hello world, nothing to see")
        assert result.primary_format == UNKNOWN_FORMAT
        assert result.matches == []

    def test_primary_falls_back_to_offset_zero_match(self):
        data = b"OggS" + b"\x11" * 60
        result = scan_signatures(data)
        assert result.primary_format == "OGG audio"


class TestEmbeddedSignatures:
    def test_png_behind_jpeg_at_sector_boundary(self):
        data = place(1024, {0: JPEG_MAGIC, 512: PNG_MAGIC})
        result = scan_signatures(data, expected_format="jpg")

        assert result.has_multiple_formats is True
        offsets = [m.offset for m in result.matches]
        assert 512 in offsets
        png = next(m for m in result.matches if m.offset == 512)
        assert png.description == "PNG image"
        assert png.category is Category.IMAGE
        assert result.has_suspicious_data is True
        assert [m.offset for m in result.embedded_headers] == [512]
        assert result.suspicious_findings == []

    def test_unaligned_unpadded_hit_is_discarded(self, event_log):
        data = b"\x11" * 37 + PNG_MAGIC + b"\x22" * 40
        result = scan_signatures(data, event_sink=event_log.append)

        assert result.matches == []
        assert any("Discarded PNG image" in e.message for e in event_log)

    @pytest.mark.parametrize("pad", [b"\x00", b"\xFF"])
    def test_padded_hit_is_accepted(self, pad):
        data = b"\x11" * 33 + pad * 4 + b"%PDF-1.7" + b"\x11" * 20
        result = scan_signatures(data)

        assert [m.offset for m in result.matches] == [37]
        assert result.matches[0].category is Category.DOCUMENT

    def test_matches_sorted_by_offset(self):
        data = place(2048, {0: PNG_MAGIC, 1536: b"PK\x03\x04", 512: b"fLaC"})
        result = scan_signatures(data)
        assert [m.offset for m in result.matches] == [0, 512, 1536]

    def test_riff_hit_needs_known_subtype(self):
        good = place(1024, {512: b"RIFF\x00\x00\x00\x00WAVE"})
        bad = place(1024, {512: b"RIFF\x00\x00\x00\x00JUNK"})

        match = scan_signatures(good).matches[0]
        assert match.description == "WAV audio (RIFF/WAVE)"
        assert match.category is Category.AUDIO
        assert match.confidence is Confidence.HIGH
        assert scan_signatures(bad).matches == []

    def test_polyglot_finding(self):
        data = place(2048, {
            512: b"fLaC",
            1024: PNG_MAGIC,
            1536: b"\x1A\x45\xDF\xA3",
        })
        result = scan_signatures(data)

        assert result.tally.audio == 1
        assert result.tally.image == 1
        assert result.tally.video == 1
        assert POLYGLOT_FINDING in result.suspicious_findings

    def test_extension_mismatch(self):
        result = scan_signatures(PNG_MAGIC + b"\x11" * 50, expected_format=".mp3")
        assert len(result.suspicious_findings) == 1
        assert "MP3" in result.suspicious_findings[0]
        assert "PNG image" in result.suspicious_findings[0]

    def test_alias_extension_matches(self):
        data = JPEG_MAGIC + b"\x11" * 50
        result = scan_signatures(data, expected_format="JPG")
        assert result.expected_format == "JPEG"
        assert result.suspicious_findings == []

    def test_custom_alignment(self):
        data = place(300, {256: PNG_MAGIC})
        data = data[:252] + b"\x33" * 4 + data[256:]
        assert scan_signatures(data).matches == []

        config = SignatureConfig(alignment_boundaries=(256,))
        assert [m.offset for m in scan_signatures(data, config=config).matches] == [256]


class TestDeepScanner:
    def test_deep_hits_take_precedence(self):
        data = place(1024, {512: PNG_MAGIC})
        deep = FakeDeepScanner([
            DeepScanHit(512, "PNG image, 16 x 16, 8-bit/color RGB", 250),
            DeepScanHit(512, "PNG image, 16 x 16, 8-bit/color RGB", 250),
            DeepScanHit(100, "Zlib compressed data", 40),
        ])
        result = SignatureScanner(deep_scanner=deep).scan(data)

        assert [m.offset for m in result.matches] == [100, 512]
        assert result.matches[1].description.startswith("PNG image, 16 x 16")
        assert result.matches[1].confidence is Confidence.HIGH
        assert result.matches[0].confidence is Confidence.LOW
        assert result.matches[0].category is Category.OTHER


def test_empty_buffer_rejected():
    with pytest.raises(EmptyInputError) as exc_info:
        scan_signatures(b"")
    assert isinstance(exc_info.value, InputError)
    assert isinstance(exc_info.value, MalformedMediaError)


@pytest.mark.parametrize("value,expected", [
    (0, Confidence.LOW),
    (99, Confidence.LOW),
    (100, Confidence.MEDIUM),
    (199, Confidence.MEDIUM),
    (200, Confidence.HIGH),
    (255, Confidence.HIGH),
])
def test_confidence_from_byte(value, expected):
    assert confidence_from_byte(value) is expected


def test_classify_description():
    assert classify_description("JPEG image data, JFIF standard") is Category.IMAGE
    assert classify_description("MP3 audio (with ID3)") is Category.AUDIO
    assert classify_description("ISO Media, MP4 v2") is Category.VIDEO
    assert classify_description("7z archive data") is Category.ARCHIVE
    assert classify_description("ELF 64-bit LSB executable") is Category.EXECUTABLE
    assert classify_description("Zlib compressed data") is Category.OTHER


def test_complete_header_keywords():
    assert is_complete_header("PNG image")
    assert is_complete_header("WAV audio (RIFF/WAVE)")
    assert is_complete_header("LZMA header")
    assert not is_complete_header("Zlib compressed data")


def test_normalize_extension():
    assert normalize_extension(".jpg") == "JPEG"
    assert normalize_extension("wav") == "WAV"
    assert normalize_extension("") is None
    assert normalize_extension(None) is None


def test_tally_ignores_offset_zero():
    matches = [
        SignatureMatch(0, "PNG image", Category.IMAGE, Confidence.MEDIUM),
        SignatureMatch(512, "ZIP archive", Category.ARCHIVE, Confidence.MEDIUM),
    ]
    tally = FormatTally.from_matches(matches)
    assert tally.image == 0
    assert tally.archive == 1
    assert tally.total == 1


def test_tally_polyglot_rule():
    assert FormatTally(audio=1, image=1, video=1).is_polyglot
    assert FormatTally(audio=1, image=1, document=1).is_polyglot
    assert not FormatTally(audio=1, image=1).is_polyglot
    assert not FormatTally(image=2, video=1).is_polyglot


def test_scan_result_to_dict():
    data = place(1024, {0: JPEG_MAGIC, 512: PNG_MAGIC})
    report = scan_signatures(data).to_dict()
    assert report["total_signatures"] == 2
    assert report["matches"][1]["offset_hex"] == "0x200"
    assert report["matches"][1]["category"] == "Image"
