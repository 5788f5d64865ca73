"""Command-line interface handlers."""

import argparse
import asyncio
from pathlib import Path
from typing import Any, Optional

import uvicorn

from projectdash.config import Settings
from projectdash.console import ConsoleUI, configure_logging
from projectdash.gui.helpers import IRB_OPTIONS, PRIORITY_OPTIONS, FilterCriteria
from projectdash.gui.render import render_snapshot
from projectdash.gui.state import DashboardState, DashboardView
from projectdash.services.export_service import JsonExporter
from projectdash.services.source_service import (
    AUTO,
    SourceResolver,
    SourcesExhaustedError,
    UnknownSourceError,
)


class ProjectDashCLI:
    """CLI application for ProjectDash."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        ui: Optional[ConsoleUI] = None,
        embedded_payload: Any = None,
        transport: Any = None,
    ):
        """Initialize CLI with settings.

        Args:
            settings: Application settings (loads from disk if not provided)
            ui: Console UI (a fresh Rich console if not provided)
            embedded_payload: In-process project data tried before any I/O
            transport: Optional httpx transport for the resolver
        """
        self.settings = settings or Settings.load()
        self.ui = ui or ConsoleUI()
        self.resolver = SourceResolver.from_settings(
            self.settings, embedded_payload, transport=transport
        )

    def _load_view(self, mode: str, criteria: FilterCriteria) -> Optional[DashboardView]:
        """Resolve records once; print the failure and return None if none could be loaded."""
        try:
            resolution = asyncio.run(self.resolver.resolve(mode))
        except UnknownSourceError as exc:
            self.ui.error(str(exc))
            return None
        except SourcesExhaustedError as exc:
            self.ui.error(str(exc))
            return None

        dashboard = DashboardState()
        dashboard.apply(dashboard.begin_request(), resolution)
        return dashboard.view(criteria)

    def cmd_list(self, mode: str = AUTO, criteria: Optional[FilterCriteria] = None) -> int:
        """List filtered, sorted projects.

        Args:
            mode: 'auto' or a single source name
            criteria: Filter values (none by default)

        Returns:
            Process exit status
        """
        view = self._load_view(mode, criteria or FilterCriteria())
        if view is None:
            return 1
        self.ui.display_projects(view)
        return 0

    def cmd_sources(self) -> int:
        """Show the configured fallback chain."""
        self.ui.display_sources(self.resolver.sources)
        return 0

    def cmd_build_json(
        self,
        input_path: Optional[Path] = None,
        output_path: Optional[Path] = None,
    ) -> int:
        """Convert the local CSV into the static projects JSON document."""
        input_path = self.settings.resolve_path(input_path or self.settings.export_input)
        output_path = self.settings.resolve_path(output_path or self.settings.export_output)

        exporter = JsonExporter(self.settings.schema)
        try:
            count = exporter.export(input_path, output_path)
        except OSError as exc:
            self.ui.error(f"Cannot convert {input_path}: {exc}")
            return 1

        self.ui.exported(count, output_path)
        return 0

    def cmd_render(self, output_path: Path, mode: str = AUTO) -> int:
        """Write a standalone HTML snapshot of every project."""
        view = self._load_view(mode, FilterCriteria())
        if view is None:
            return 1

        output_path = self.settings.resolve_path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(render_snapshot(view, self.settings.title), encoding="utf-8")
        self.ui.rendered(view.total, output_path)
        return 0


def serve(host: str = "127.0.0.1", port: int = 8000) -> None:
    """Run the viewer with uvicorn."""
    uvicorn.run("projectdash.gui.app:app", host=host, port=port)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="projectdash",
        description="Research projects: JSON / published sheet / CSV → filterable dashboard",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the local dashboard viewer")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")

    # list command
    list_parser = subparsers.add_parser("list", help="List projects (priority, then recency)")
    list_parser.add_argument(
        "--source",
        default=AUTO,
        help="Load from one named source instead of the fallback chain (default: auto)",
    )
    list_parser.add_argument("--search", "-q", default="", help="Free-text search")
    list_parser.add_argument("--status", default="", help="Exact status, e.g. 'Writing'")
    list_parser.add_argument("--priority", default="", choices=[""] + PRIORITY_OPTIONS)
    list_parser.add_argument("--irb", default="", choices=[""] + list(IRB_OPTIONS))
    list_parser.add_argument("--collaborator", default="", help="Exact collaborator name")

    # sources command
    subparsers.add_parser("sources", help="Show the data-source fallback chain")

    # build-json command
    build_parser = subparsers.add_parser(
        "build-json", help="Convert the local CSV into the static projects JSON"
    )
    build_parser.add_argument("--input", type=Path, default=None, help="CSV file (default: from config)")
    build_parser.add_argument("--output", type=Path, default=None, help="JSON file (default: from config)")

    # render command
    render_parser = subparsers.add_parser("render", help="Write a static HTML snapshot")
    render_parser.add_argument("--source", default=AUTO, help="Source name (default: auto)")
    render_parser.add_argument(
        "--output",
        type=Path,
        default=Path("dist/index.html"),
        help="Output HTML file (default: dist/index.html)",
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command == "serve":
        configure_logging(Settings.load().log_level)
        serve(args.host, args.port)
        return 0

    cli = ProjectDashCLI()
    configure_logging(cli.settings.log_level)

    if args.command == "list":
        criteria = FilterCriteria(
            search=args.search,
            status=args.status,
            priority=args.priority,
            irb=args.irb,
            collaborator=args.collaborator,
        )
        return cli.cmd_list(args.source, criteria)
    if args.command == "sources":
        return cli.cmd_sources()
    if args.command == "build-json":
        return cli.cmd_build_json(args.input, args.output)
    if args.command == "render":
        return cli.cmd_render(args.output, args.source)
    return 2


def run_cli() -> None:
    raise SystemExit(main())
