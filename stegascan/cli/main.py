"""Main CLI entry point using Click"""

import sys
import json
from pathlib import Path
from typing import Optional

import click
from rich.markup import escape

from stegascan import __version__
from stegascan.core.logging import setup_logger, get_logger
from stegascan.core.config import load_config
from stegascan.core.dependencies import check_all_dependencies, print_missing_dependencies
from stegascan.core.error_handler import ErrorContext
from stegascan.core.exceptions import ConfigurationError, InputError
from stegascan.cli.ui import (
    console,
    print_error,
    print_success,
    print_info,
    print_header,
    print_warning,
    print_table,
    print_verdict,
    ProgressTracker,
)
from stegascan.cli.decorators import exit_with_explanation, handle_errors
from stegascan.pipeline import AnalysisReport, analyze_file


@click.group()
@click.version_option(version=__version__, prog_name="stegascan")
@click.option('--config', type=click.Path(exists=True, path_type=Path), help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.option('--debug', '-d', is_flag=True, help='Debug output')
@click.pass_context
def cli(ctx, config: Optional[Path], verbose: bool, debug: bool):
    """
    stegascan - Forensic steganography heuristics

    Scans files for embedded signatures, polyglot structures, LSB noise,
    spectrogram patterns and suspicious metadata.
    """
    ctx.ensure_object(dict)

    setup_logger(verbose=verbose, debug=debug)

    try:
        cfg = load_config(config)
    except ConfigurationError as e:
        exit_with_explanation(e, ErrorContext("Load configuration", input_file=config), debug)

    cfg.verbose = verbose or cfg.verbose
    cfg.debug = debug or cfg.debug

    ctx.obj['config'] = cfg
    ctx.obj['logger'] = get_logger()


@cli.command()
@click.option('--verbose', '-v', is_flag=True, help='Show detailed information')
def check_deps(verbose: bool):
    """Check all dependencies and show installation instructions"""
    results = check_all_dependencies(verbose=verbose)

    all_ok = print_missing_dependencies(results)

    if all_ok:
        click.echo("\nAll required dependencies are installed!")
        sys.exit(0)
    else:
        sys.exit(1)


@cli.command()
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--output', '-o', type=click.Path(path_type=Path), help='Write the JSON report to this file')
@click.option('--format', '-f', 'output_format', type=click.Choice(['text', 'json']), default='text',
              help='Console output format')
@click.option('--video-sample-rate', type=click.IntRange(min=1), default=None,
              help='Analyze every Nth video frame')
@click.option('--visuals-dir', type=click.Path(file_okay=False, path_type=Path),
              help='Save bit-plane, filter and spectrogram images to this directory')
@click.pass_context
@handle_errors("Steganalysis")
def scan(ctx, input_file: Path, output: Optional[Path], output_format: str,
         video_sample_rate: Optional[int], visuals_dir: Optional[Path]):
    """
    Scan a file for signs of hidden data

    Examples:
        stegascan scan suspect.png
        stegascan scan track.wav --visuals-dir out/
        stegascan scan clip.mp4 --video-sample-rate 10 -o report.json
    """
    config = ctx.obj['config']

    with ProgressTracker(f"Analyzing {input_file.name}", enabled=output_format == 'text'):
        report = analyze_file(
            input_file,
            config=config,
            sample_every=video_sample_rate,
            visualize=visuals_dir is not None,
        )

    if output_format == 'json':
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        _print_report(report, verbose=config.verbose)

    if output:
        try:
            output.write_text(json.dumps(report.to_dict(), indent=2))
        except OSError as e:
            raise InputError("Cannot write report", path=str(output), reason=str(e))
        if output_format == 'text':
            print_success(f"Report written to {escape(str(output))}")

    if visuals_dir:
        saved = _save_visuals(report, input_file, visuals_dir)
        if output_format == 'text':
            for path in saved:
                print_info(f"Saved {escape(str(path))}")


def _save_visuals(report: AnalysisReport, input_file: Path, visuals_dir: Path):
    try:
        visuals_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise InputError("Cannot create visuals directory", path=str(visuals_dir), reason=str(e))

    saved = []
    if report.bitplane is not None:
        for stat, plane in zip(report.bitplane.channels, report.bitplane.planes):
            path = visuals_dir / f"{input_file.stem}_lsb_{stat.channel.lower()}.png"
            plane.save(path)
            saved.append(path)

    if report.filters is not None:
        for name, image in report.filters.images.items():
            path = visuals_dir / f"{input_file.stem}_filter_{name}.png"
            image.save(path)
            saved.append(path)

    if report.spectral is not None and report.spectral.image is not None:
        path = visuals_dir / f"{input_file.stem}_spectrogram.png"
        report.spectral.image.save(path)
        saved.append(path)

    return saved


def _print_report(report: AnalysisReport, verbose: bool = False):
    info = report.file_info
    print_header("Steganalysis", info.path)
    print_info(f"Size: {info.size_bytes} bytes, type: {info.detected_type.value}")
    if verbose:
        console.print(f"[dim]SHA-256: {info.sha256}[/dim]")

    if report.scan is not None:
        scan = report.scan
        print_info(f"Primary format: {scan.primary_format}")
        if scan.matches:
            print_table(
                "Signatures",
                ["Offset", "Description", "Category", "Confidence"],
                [
                    [f"0x{m.offset:X}", m.description, m.category.value, m.confidence.value]
                    for m in scan.matches
                ],
            )
        for finding in scan.suspicious_findings:
            print_warning(escape(finding))

    if report.bitplane is not None:
        print_table(
            "LSB statistics",
            ["Channel", "Chi-square", "Entropy"],
            [[c.channel, f"{c.chi_square:.2f}", f"{c.entropy:.4f}"] for c in report.bitplane.channels],
        )

    if report.spectral is not None:
        spectral = report.spectral
        print_info(f"High-frequency energy ratio: {spectral.high_frequency_energy:.4f}")
        for pattern in spectral.suspicious_patterns:
            print_warning(escape(pattern))

    if report.frames is not None:
        frames = report.frames
        print_info(
            f"Frames: {frames.frames_processed} processed, {frames.frames_sampled} sampled, "
            f"{len(frames.flagged_frame_indices)} flagged"
        )
        if frames.decode_errors:
            print_warning(f"{frames.decode_errors} frames failed to decode")

    if report.filters is not None:
        print_info(f"Generated {report.filters.filters_generated} filter views")

    if report.text is not None:
        text = report.text
        print_info(f"Text: {text.line_count} lines, {text.word_count} words, {text.char_count} chars")

    if report.metadata is not None:
        for field_name in report.metadata.suspicious_fields:
            print_warning(escape(f"Metadata: {field_name}"))
        if report.metadata.has_thumbnail:
            size = report.metadata.thumbnail_size
            print_info(f"Embedded thumbnail: {size} bytes" if size is not None else "Embedded thumbnail present")

    for error in report.errors:
        print_error(escape(error))

    print_verdict(report.verdict)


def main():
    cli()


if __name__ == '__main__':
    main()
