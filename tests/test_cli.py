import json

import pytest
from rich.console import Console

from projectdash import cli as cli_module
from projectdash.cli import ProjectDashCLI, create_parser, main
from projectdash.config import Settings
from projectdash.console import ConsoleUI
from projectdash.gui.helpers import FilterCriteria
from projectdash.gui.state import DashboardState
from projectdash.models.record import Record
from projectdash.services.source_service import Resolution


@pytest.fixture
def console():
    return Console(record=True, width=160)


@pytest.fixture
def app(settings, console):
    return ProjectDashCLI(settings=settings, ui=ConsoleUI(console))


def test_list_prints_sorted_table(app, console, csv_file):
    assert app.cmd_list() == 0

    out = console.export_text()
    assert "source=csv" in out
    assert out.index("Nudges, Defaults") < out.index("Remote Work")
    assert "Showing all 3 projects" in out


def test_list_with_filters(app, console, csv_file):
    assert app.cmd_list(criteria=FilterCriteria(search="remote")) == 0

    out = console.export_text()
    assert "Remote Work" in out
    assert "Nudges" not in out
    assert "Showing 1 of 3 projects" in out


def test_list_fails_when_no_source_loads(app, console):
    assert app.cmd_list() == 1
    assert "All data sources failed" in console.export_text()


def test_list_unknown_source(app, console, csv_file):
    assert app.cmd_list(mode="nowhere") == 1
    assert "Unknown data source 'nowhere'" in console.export_text()


def test_list_uses_embedded_payload(settings, console):
    app = ProjectDashCLI(
        settings=settings,
        ui=ConsoleUI(console),
        embedded_payload=[{"title": "In Memory", "priority": "High"}],
    )
    assert app.cmd_list() == 0
    assert "source=embedded" in console.export_text()


def test_sources(app, console):
    assert app.cmd_sources() == 0

    out = console.export_text()
    assert "RemoteJsonDocument" in out
    assert "LocalFallbackFile" in out
    assert out.index("json") < out.index("csv")


def test_build_json(app, console, settings, csv_file):
    assert app.cmd_build_json() == 0

    written = json.loads((settings.base_dir / "data" / "projects.json").read_text(encoding="utf-8"))
    assert written["count"] == 3
    assert "Wrote 3 projects" in console.export_text()


def test_build_json_missing_input(app, console, tmp_path):
    assert app.cmd_build_json(input_path=tmp_path / "missing.csv") == 1
    assert "Cannot convert" in console.export_text()


def test_render_snapshot(app, console, settings, csv_file):
    assert app.cmd_render(settings.base_dir / "site" / "index.html") == 0

    html = (settings.base_dir / "site" / "index.html").read_text(encoding="utf-8")
    assert "<style>" in html
    assert "<script" not in html
    assert "Nudges, Defaults" in html
    assert "Showing all 3 projects" in html
    assert "Rendered 3 projects" in console.export_text()


def test_parser_commands():
    parser = create_parser()

    args = parser.parse_args(["list", "--source", "sheets", "-q", "remote", "--priority", "High"])
    assert (args.command, args.source, args.search, args.priority) == ("list", "sheets", "remote", "High")

    with pytest.raises(SystemExit):
        parser.parse_args(["list", "--priority", "Urgent"])
    with pytest.raises(SystemExit):
        parser.parse_args([])


def test_main_dispatches(settings, csv_file, monkeypatch):
    monkeypatch.setattr(cli_module, "configure_logging", lambda level: None)
    assert Settings.load() is settings

    assert main(["sources"]) == 0
    assert main(["list", "--status", "Idea"]) == 0
    assert main(["list", "--source", "nowhere"]) == 1


def test_main_serve_configures_logging(settings, monkeypatch):
    calls = []
    monkeypatch.setattr(cli_module, "configure_logging", lambda level: calls.append(("logging", level)))
    monkeypatch.setattr(cli_module, "serve", lambda host, port: calls.append(("serve", host, port)))
    settings.update(log_level="DEBUG")

    assert main(["serve", "--port", "9000"]) == 0
    assert calls == [("logging", "DEBUG"), ("serve", "127.0.0.1", 9000)]


def test_bracketed_text_prints_literally(console):
    dashboard = DashboardState()
    dashboard.apply(
        dashboard.begin_request(),
        Resolution(
            records=(
                Record(
                    title="[pilot] Survey",
                    status="[/draft]",
                    priority="[bold]",
                    deadline="[tbd]",
                    last_activity="[soon]",
                ),
            ),
            source_tag="[mirror]",
        ),
    )

    ConsoleUI(console).display_projects(dashboard.view())

    out = console.export_text()
    for text in ("[pilot] Survey", "[/draft]", "[bold]", "[tbd]", "[soon]", "source=[mirror]"):
        assert text in out
