"""Tests for the command line interface"""

import json

from click.testing import CliRunner

from stegascan import __version__
from stegascan.cli.main import cli


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_scan_json(png_file):
    result = CliRunner().invoke(cli, ["scan", str(png_file), "--format", "json"])

    assert result.exit_code == 0, result.output
    report = json.loads(result.stdout)
    assert report["file_info"]["detected_type"] == "image"
    assert "summary" in report


def test_scan_text(png_file):
    result = CliRunner().invoke(cli, ["scan", str(png_file)])

    assert result.exit_code == 0, result.output
    assert "Verdict" in result.output
    assert "Confidence" in result.output


def test_scan_writes_report_and_visuals(tmp_path, png_file):
    output = tmp_path / "report.json"
    visuals = tmp_path / "visuals"
    result = CliRunner().invoke(cli, [
        "scan", str(png_file),
        "--output", str(output),
        "--visuals-dir", str(visuals),
    ])

    assert result.exit_code == 0, result.output
    assert json.loads(output.read_text())["file_info"]["path"] == str(png_file)
    names = sorted(p.name for p in visuals.iterdir())
    assert [n for n in names if "_lsb_" in n] == [
        "gradient_lsb_blue.png",
        "gradient_lsb_green.png",
        "gradient_lsb_red.png",
    ]
    filters = [n for n in names if "_filter_" in n]
    assert len(filters) == 10
    assert "gradient_filter_red_isolated.png" in filters
    assert "gradient_filter_contrast_up.png" in filters
    assert len(names) == 13


def test_scan_audio_spectrogram(tmp_path, wav_file):
    visuals = tmp_path / "visuals"
    result = CliRunner().invoke(cli, ["scan", str(wav_file), "--visuals-dir", str(visuals)])

    assert result.exit_code == 0, result.output
    assert (visuals / "tone_spectrogram.png").exists()


def test_scan_empty_file_fails(tmp_path):
    path = tmp_path / "empty.wav"
    path.write_bytes(b"")
    result = CliRunner().invoke(cli, ["scan", str(path)])
    assert result.exit_code == 1


def test_scan_missing_file():
    result = CliRunner().invoke(cli, ["scan", "does-not-exist.png"])
    assert result.exit_code == 2


def test_invalid_video_sample_rate(png_file):
    result = CliRunner().invoke(cli, ["scan", str(png_file), "--video-sample-rate", "0"])
    assert result.exit_code == 2


def test_check_deps():
    result = CliRunner().invoke(cli, ["check-deps"])
    assert result.exit_code == 0
    assert "All required dependencies are installed!" in result.output


def test_malformed_config_is_explained(tmp_path, png_file):
    config = tmp_path / "broken.toml"
    config.write_text("[bitplane\nentropy_threshold = ")
    result = CliRunner().invoke(cli, ["--config", str(config), "scan", str(png_file)])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Load configuration" in result.output
    assert "Traceback" not in result.output


def test_invalid_config_value_is_explained(tmp_path, png_file):
    config = tmp_path / "stegascan.toml"
    config.write_text("[frames]\nsample_every = 0\n")
    result = CliRunner().invoke(cli, ["--config", str(config), "scan", str(png_file)])

    assert result.exit_code == 1
    assert "sample_every" in result.output
