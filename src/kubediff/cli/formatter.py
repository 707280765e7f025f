# src/kubediff/cli/formatter.py
from typing import Any, Dict, List

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from kubediff.core.models import DiffResult, LineKind

SEPARATOR = "# " + "-" * 50

# Presentation only: classification is already done by the diff engine
LINE_STYLES = {
    LineKind.FILE_HEADER: "bold",
    LineKind.HUNK_HEADER: "cyan",
    LineKind.ADDITION: "green",
    LineKind.DELETION: "red",
    LineKind.CONTEXT: "",
}


class KubeFormatter:
    """
    KubeFormatter: The visual heart of the CLI.
    Responsible for rendering classified diffs, unit headers and the run report.
    """

    def __init__(self, color: bool = True):
        self.console = Console(highlight=False, no_color=not color)
        self.err_console = Console(stderr=True, highlight=False, no_color=not color)

    def display_diff(self, diff: DiffResult):
        """Prints a diff line by line, styled by line kind, or the no-changes sentinel."""
        if not diff.has_changes:
            self.console.print(Text(diff.render()), soft_wrap=True)
            return

        for line in diff.lines:
            self.console.print(Text(line.text, style=LINE_STYLES[line.kind]), soft_wrap=True)

    def display_unit(self, header: str, diff: DiffResult):
        """Batch output: identifying header, the diff, then a separator line."""
        self.console.print(Text(header), soft_wrap=True)
        self.display_diff(diff)
        self.console.print(Text(SEPARATOR), soft_wrap=True)

    def display_error(self, name: str, message: str):
        self.err_console.print(Text.assemble(("Error in ", "bold red"), (name, "bold red"), ": ", message), soft_wrap=True)

    def print_final_table(self, reports: List[Dict[str, Any]], summary: Dict[str, Any]):
        """
        Builds the summary table shown at the very end of a batch run.
        Goes to stderr so that stdout carries nothing but diffs.
        """
        table = Table(title="KubeDiff Execution Report", show_header=True, header_style="bold magenta")
        table.add_column("Unit", style="cyan")
        table.add_column("Status", style="bold")
        table.add_column("Result", justify="center")

        for r in reports:
            status = r.get("status", "ERROR")
            color = {"CHANGED": "yellow", "UNCHANGED": "green"}.get(status, "red")
            table.add_row(
                escape(str(r.get("name"))),
                f"[{color}]{status}[/{color}]",
                "✅" if r.get("success") else "❌",
            )

        self.err_console.print(table)
        self.err_console.print(Panel(
            f"Total Units:  {summary['total_units']}\n"
            f"Changed:      [yellow]{summary['changed']}[/yellow]\n"
            f"Unchanged:    [green]{summary['unchanged']}[/green]\n"
            f"Errors:       [red]{summary['errors']}[/red]",
            title="Summary Report",
            border_style="dim",
            expand=False,
        ))
