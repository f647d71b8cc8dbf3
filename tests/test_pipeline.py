"""Tests for whole-file analysis"""

import json

import pytest

from stegascan import analyze_file
from stegascan.core.constants import (
    INDICATOR_MULTIPLE_FORMATS,
    INDICATOR_SUSPICIOUS_STRUCTURE,
    MediaKind,
)
from stegascan.core.exceptions import EmptyInputError, InputError
from stegascan.pipeline import detect_media_kind


def test_png_file(png_file):
    report = analyze_file(png_file)

    assert report.file_info.detected_type is MediaKind.IMAGE
    assert report.file_info.extension == "png"
    assert len(report.file_info.sha256) == 64
    assert report.scan.primary_format == "PNG image"
    assert report.bitplane is not None
    assert report.metadata is not None
    assert report.spectral is None
    assert report.errors == []
    assert report.filters.filters_generated == 10


def test_wav_file(wav_file):
    report = analyze_file(wav_file)

    assert report.file_info.detected_type is MediaKind.AUDIO
    assert report.scan.primary_format == "WAV audio"
    assert report.spectral.sample_rate == 44100.0
    assert report.spectral.high_frequency_energy < 0.01
    assert report.spectral.suspicious is False
    assert report.verdict.detected is False


def test_appended_archive_is_detected(tmp_path, png_bytes):
    carrier = png_bytes + b"\x00" * (512 - len(png_bytes))
    path = tmp_path / "holiday.png"
    path.write_bytes(carrier + b"PK\x03\x04" + b"\x14" * 60)

    report = analyze_file(path, visualize=False)

    assert report.verdict.detected is True
    assert report.filters is None
    assert report.verdict.indicators[:2] == [
        INDICATOR_SUSPICIOUS_STRUCTURE,
        INDICATOR_MULTIPLE_FORMATS,
    ]
    assert [m.offset for m in report.scan.embedded_headers] == [512]


def test_text_file(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("nothing\nto see here\n")
    report = analyze_file(path)

    assert report.file_info.detected_type is MediaKind.TEXT
    assert report.text.word_count == 4
    assert report.verdict.indicators == []


def test_analyzer_failure_is_not_fatal(tmp_path):
    events = []
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"\x11" * 256)

    report = analyze_file(path, event_sink=events.append)

    assert report.file_info.detected_type is MediaKind.VIDEO
    assert report.frames is None
    assert len(report.errors) == 1
    assert report.errors[0].startswith("video decode:")
    assert any(e.analyzer == "pipeline" and e.level == "warning" for e in events)


def test_undecodable_image_keeps_signature_results(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n" + b"\x11" * 64)

    report = analyze_file(path)

    assert report.scan.primary_format == "PNG image"
    assert report.bitplane is None
    assert report.errors and report.errors[0].startswith("image decode:")


def test_missing_file(tmp_path):
    with pytest.raises(InputError):
        analyze_file(tmp_path / "absent.png")


def test_directory_rejected(tmp_path):
    with pytest.raises(InputError):
        analyze_file(tmp_path)


def test_empty_file(tmp_path):
    path = tmp_path / "empty.png"
    path.write_bytes(b"")
    with pytest.raises(EmptyInputError):
        analyze_file(path)


def test_report_is_json_serialisable(png_file):
    report = analyze_file(png_file).to_dict()
    decoded = json.loads(json.dumps(report))

    assert decoded["file_info"]["detected_type"] == "image"
    assert decoded["summary"]["confidence"] in ("low", "medium", "high")
    assert decoded["signatures"]["primary_format"] == "PNG image"
    assert decoded["filters"]["filters_generated"] == 10


@pytest.mark.parametrize("data,name,expected", [
    (b"\x00\x00\x00\x18ftypisom" + b"\x00" * 8, "clip.bin", MediaKind.VIDEO),
    (b"\x00\x00\x00\x18ftypM4A " + b"\x00" * 8, "song.bin", MediaKind.AUDIO),
    (b"\x11" * 16, "photo.JPG", MediaKind.IMAGE),
    (b"\x11" * 16, "song.flac", MediaKind.AUDIO),
    (b"\x11" * 16, "readme", MediaKind.TEXT),
])
def test_detect_media_kind_fallbacks(tmp_path, data, name, expected):
    assert detect_media_kind(data, None, tmp_path / name) is expected
