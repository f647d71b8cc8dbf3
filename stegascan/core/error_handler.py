"""Error explanations and suggestions for the command line"""

from typing import Optional, Dict, Any
from pathlib import Path

from stegascan.core.exceptions import (
    StegaScanError,
    InputError,
    EmptyInputError,
    MalformedMediaError,
    MalformedImageError,
    DecodeError,
    DependencyMissingError,
    ConfigurationError,
)


class ErrorContext:
    """Context information for enhanced error reporting"""

    def __init__(
        self,
        operation: str,
        input_file: Optional[Path] = None,
        output_file: Optional[Path] = None,
        extra_info: Optional[Dict[str, Any]] = None,
    ):
        self.operation = operation
        self.input_file = input_file
        self.output_file = output_file
        self.extra_info = extra_info or {}


ERROR_EXPLANATIONS = {
    EmptyInputError: {
        "why": "The input contains no data to analyze:\n"
               "  - The file is zero bytes long\n"
               "  - The audio stream decoded to no samples",
        "try_next": [
            "Check the file size: `ls -l <input>`",
            "Re-export or re-download the file",
        ],
    },
    InputError: {
        "why": "The file could not be read. Common causes:\n"
               "  - Path does not exist or points to a directory\n"
               "  - Insufficient permissions",
        "try_next": [
            "Verify file path is correct",
            "Use absolute path instead of relative",
            "Check file permissions",
        ],
    },
    MalformedImageError: {
        "why": "The decoded image has zero width or height",
        "try_next": [
            "Open the image in a viewer to confirm it renders",
            "Inspect embedded structures: `stegascan scan <input> --format json`",
        ],
    },
    MalformedMediaError: {
        "why": "The decoder returned structurally unusable media "
               "(no frames, no samples or invalid dimensions)",
        "try_next": [
            "Check the container with `ffprobe <input>`",
            "Run with --verbose to see which analyzer rejected the media",
        ],
    },
    DecodeError: {
        "why": "The codec library could not decode the media. The file may be\n"
               "  truncated, use an unsupported codec, or be a disguised container",
        "try_next": [
            "Compare the extension with the detected primary format in the report",
            "Install optional codecs: `stegascan check-deps`",
            "Use --debug for the underlying codec error",
        ],
    },
    DependencyMissingError: {
        "why": "An optional Python library needed for this media type is not installed",
        "try_next": [
            "Install missing dependency (see message above)",
            "Run `stegascan check-deps` to see all dependencies",
        ],
    },
    ConfigurationError: {
        "why": "The configuration file is missing, unreadable or has invalid values",
        "try_next": [
            "Check the TOML syntax of the configuration file",
            "Remove the file to fall back to defaults",
        ],
    },
}


def _lookup_explanation(error: Exception) -> Optional[Dict[str, Any]]:
    for cls in type(error).__mro__:
        if cls in ERROR_EXPLANATIONS:
            return ERROR_EXPLANATIONS[cls]
    return None


def explain_error(
    error: Exception,
    context: Optional[ErrorContext] = None,
    show_traceback: bool = False,
) -> None:
    """
    Explain error with context and suggestions

    Args:
        error: The exception that occurred
        context: Additional context about the operation
        show_traceback: Whether to show full traceback (debug mode)
    """
    from rich.console import Console

    console = Console(stderr=True)

    console.print("\n[bold red]Error occurred:[/bold red]", style="bold")
    console.print(f"[red][!][/red] {error}", style="red")

    if context:
        console.print(f"\n[bold]Operation:[/bold] {context.operation}")
        if context.input_file:
            console.print(f"[bold]Input:[/bold] {context.input_file}")
        if context.output_file:
            console.print(f"[bold]Output:[/bold] {context.output_file}")
        for key, value in context.extra_info.items():
            console.print(f"[bold]{key}:[/bold] {value}")

    explanation = _lookup_explanation(error)
    if explanation:
        console.print("\n[bold yellow]Why this likely failed:[/bold yellow]")
        console.print(f"[yellow]{explanation['why']}[/yellow]")

        console.print("\n[bold cyan]What to try next:[/bold cyan]")
        for i, suggestion in enumerate(explanation['try_next'], 1):
            console.print(f"  [cyan]{i}. {suggestion}[/cyan]")
    elif not isinstance(error, StegaScanError):
        console.print("\n[yellow]This error type does not have specific guidance.[/yellow]")

    if isinstance(error, DependencyMissingError) and error.install_hint:
        console.print("\n[bold green]Installation:[/bold green]")
        console.print(f"[green]{error.install_hint}[/green]")
    elif isinstance(error, DecodeError) and error.cause is not None:
        console.print(f"\n[bold]Codec error:[/bold] [dim]{error.cause}[/dim]")

    if show_traceback:
        console.print("\n[bold]Full traceback:[/bold]")
        console.print_exception(show_locals=False)
    else:
        console.print("\n[dim]Use --debug for full traceback[/dim]")
