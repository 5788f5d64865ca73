"""Jinja2 environment shared by the viewer and the static snapshot."""

from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from projectdash.gui.helpers import (
    IRB_OPTIONS,
    PRIORITY_OPTIONS,
    STATUS_OPTIONS,
    irb_class,
    priority_class,
    status_class,
)
from projectdash.utils.text import format_date, format_datetime, split_keywords

if TYPE_CHECKING:
    from projectdash.gui.state import DashboardView

GUI_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = GUI_DIR / "templates"
STATIC_DIR = GUI_DIR / "static"
STYLESHEET = STATIC_DIR / "dashboard.css"


def build_environment() -> Environment:
    """Create the template environment with the dashboard filters registered."""
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
    )
    env.filters["status_class"] = status_class
    env.filters["priority_class"] = priority_class
    env.filters["irb_class"] = irb_class
    env.filters["format_date"] = format_date
    env.filters["format_datetime"] = format_datetime
    env.filters["keywords"] = split_keywords
    env.globals["status_options"] = STATUS_OPTIONS
    env.globals["priority_options"] = PRIORITY_OPTIONS
    env.globals["irb_options"] = IRB_OPTIONS
    return env


def render_snapshot(
    view: "DashboardView",
    title: str,
    generated_at: Optional[datetime] = None,
    env: Optional[Environment] = None,
) -> str:
    """Render a standalone HTML page of *view* (CSS inlined, no scripts).

    The result opens from ``file://`` with no server and no network.
    """
    env = env or build_environment()
    template = env.get_template("snapshot.html")
    return template.render(
        view=view,
        title=title,
        stylesheet=STYLESHEET.read_text(encoding="utf-8"),
        generated_at=generated_at or datetime.now(timezone.utc),
    )
