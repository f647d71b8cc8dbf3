"""Rich console output for scan reports"""

from typing import List, Any

from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.panel import Panel
from rich.markup import escape
from rich import box

from stegascan.analyze.verdict import Verdict
from stegascan.core.constants import Confidence

console = Console(legacy_windows=False)

CONFIDENCE_STYLES = {
    Confidence.LOW: "green",
    Confidence.MEDIUM: "yellow",
    Confidence.HIGH: "red",
}


def print_success(message: str):
    console.print(f"[green][+][/green] {message}")


def print_error(message: str):
    console.print(f"[red][!][/red] {message}", style="red")


def print_warning(message: str):
    console.print(f"[yellow][*][/yellow] {message}", style="yellow")


def print_info(message: str):
    console.print(f"[blue][i][/blue] {message}")


def print_header(title: str, subject: str):
    console.print(f"\n[bold cyan]{title}[/bold cyan]: {escape(subject)}")


def print_table(title: str, columns: List[str], rows: List[List[Any]]):
    """Print analyzer findings as a rounded table, cells escaped"""
    table = Table(title=title, box=box.ROUNDED)
    for col in columns:
        table.add_column(col, style="cyan")
    for row in rows:
        table.add_row(*[escape(str(cell)) for cell in row])
    console.print(table)


def print_verdict(verdict: Verdict):
    """Verdict panel coloured by confidence"""
    lines = [
        f"Detected: {'yes' if verdict.detected else 'no'}",
        f"Confidence: {verdict.confidence.value}",
    ]
    if verdict.indicators:
        lines.append("")
        lines.append("Indicators:")
        lines.extend(f"  - {escape(i)}" for i in verdict.indicators)
    lines.append("")
    lines.append("Recommendations:")
    lines.extend(f"  - {escape(r)}" for r in verdict.recommendations)

    style = CONFIDENCE_STYLES[verdict.confidence] if verdict.detected else "green"
    console.print()
    console.print(Panel("\n".join(lines), title="Verdict", border_style=style))


class ProgressTracker:
    """Spinner shown while a file is analyzed"""

    def __init__(self, description: str, enabled: bool = True):
        self.description = description
        self.enabled = enabled
        self.progress = None

    def __enter__(self):
        if self.enabled:
            self.progress = Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                TimeElapsedColumn(),
                console=console,
                transient=True,
            )
            self.progress.__enter__()
            self.progress.add_task(escape(self.description), total=None)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.progress is not None:
            self.progress.__exit__(exc_type, exc_val, exc_tb)
        return False
