"""Console UI for terminal output using Rich."""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from projectdash.gui.state import DashboardView
from projectdash.services.source_service import SourceSpec


def configure_logging(level: str = "INFO", console: Optional[Console] = None) -> None:
    """Route log records through Rich (stderr)."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console or Console(stderr=True), show_path=False)],
        force=True,
    )


class ConsoleUI:
    """Rich-based console UI for project display and notifications."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize console."""
        self.console = console or Console()

    def error(self, message: str) -> None:
        """Print an error message in red."""
        self.console.print(f"[red]Error:[/red] {escape(message)}")

    def exported(self, count: int, path: Path) -> None:
        self.console.print(f"Wrote [bold]{count}[/bold] projects to {path}")

    def rendered(self, count: int, path: Path) -> None:
        self.console.print(f"Rendered [bold]{count}[/bold] projects to {path}")

    def display_sources(self, sources: list[SourceSpec]) -> None:
        """Display the fallback chain in the order it is tried."""
        table = Table(title="Data sources (fallback order)")
        table.add_column("#", justify="right")
        table.add_column("Name")
        table.add_column("Kind")
        table.add_column("Location", overflow="fold")

        for i, source in enumerate(sources, 1):
            table.add_row(
                str(i),
                escape(source.name),
                type(source).__name__,
                escape(getattr(source, "location", "(in memory)")),
            )

        self.console.print(table)

    def display_projects(self, view: DashboardView) -> None:
        """Display filtered projects in a formatted table.

        Args:
            view: Dashboard view (already filtered and sorted)
        """
        table = Table(title=f"Projects (source={escape(view.source_tag or '-')})")
        table.add_column("Priority", width=8)
        table.add_column("Status")
        table.add_column("Title", overflow="fold")
        table.add_column("Deadline")
        table.add_column("Last activity")

        for record in view.records:
            table.add_row(
                escape(record.priority or "-"),
                escape(record.status or "-"),
                escape(record.title),
                escape(record.deadline or "-"),
                escape(record.recency_source or "-"),
            )

        self.console.print(table)
        if view.records:
            self.console.print(view.results_label)
        else:
            self.console.print("No projects match your filters.")
