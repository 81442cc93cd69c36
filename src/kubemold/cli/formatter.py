# src/kubemold/cli/formatter.py
from typing import Iterable, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from kubemold.core.errors import KubeMoldError
from kubemold.fragments.classifier import Classification

# Initialize the Rich console for high-quality terminal output
console = Console()


class ManifestFormatter:
    """
    ManifestFormatter: the visual side of the CLI.
    Renders generation reports, filename classifications, manifests and errors.
    """

    def __init__(self, out: Console = console):
        self.console = out

    def show_manifest(self, file_name: str, text: str, fmt: str = "yaml"):
        syntax = Syntax(text.rstrip(), fmt, theme="monokai", line_numbers=True)
        self.console.print(Panel(syntax, title=f"[bold green]{file_name}[/bold green]",
                                 border_style="green"))

    def print_report(self, report, dry_run: bool = False):
        """
        Builds the summary table shown at the end of a generation pass.
        """
        table = Table(title="KubeMold Generation Report", show_header=True, header_style="bold magenta")
        table.add_column("Kind", style="cyan")
        table.add_column("Name", style="white")
        table.add_column("Origin", justify="center")

        for kind, name in report.resources:
            origin = "generated" if kind == "Deployment" and name in report.synthesized else "fragment"
            table.add_row(kind, name, origin)
        self.console.print(table)

        kinds = ", ".join(f"{kind} x{count}" for kind, count in sorted(report.summary().items()))
        target = "[yellow]dry run, nothing written[/yellow]" if dry_run else f"{len(report.files)} file(s) written"
        self.console.print(Panel(
            f"[bold white]Summary[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Resources:   {len(report.resources)} ({kinds or 'none'})\n"
            f"Containers:  {report.containers}\n"
            f"Output:      {target}",
            border_style="dim"
        ))

    def print_classifications(self, rows: Iterable[Tuple[str, object]]):
        table = Table(title="Fragment Classification", show_header=True, header_style="bold magenta")
        table.add_column("File", style="dim")
        table.add_column("Name")
        table.add_column("Type")
        table.add_column("Kind")
        table.add_column("Result", justify="center")

        for file_name, outcome in rows:
            if isinstance(outcome, Classification):
                table.add_row(file_name, outcome.name or "[dim]<app name>[/dim]",
                              outcome.type or "-", outcome.kind or "[yellow]from content[/yellow]", "✅")
            else:
                table.add_row(file_name, "-", "-", f"[red]{outcome}[/red]", "❌")
        self.console.print(table)

    def show_error(self, error: KubeMoldError):
        location = f"\n[dim]{error.path}[/dim]" if error.path else ""
        self.console.print(Panel(
            f"[bold red]{type(error).__name__}[/bold red]: {error}{location}",
            title="[bold red]Generation Failed[/bold red]",
            border_style="red",
            expand=False,
        ))
