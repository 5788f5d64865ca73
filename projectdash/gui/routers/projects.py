"""Project list endpoints (HTMX partials) and the main page."""

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse

from projectdash import __version__
from projectdash.gui.helpers import FilterCriteria
from projectdash.gui.state import DashboardView, ensure_loaded, state, templates

router = APIRouter()


def criteria_from(
    q: str = "",
    status: str = "",
    priority: str = "",
    irb: str = "",
    collaborator: str = "",
) -> FilterCriteria:
    """Build filter criteria from raw control values."""
    return FilterCriteria(
        search=q.strip(),
        status=status,
        priority=priority,
        irb=irb,
        collaborator=collaborator,
    )


def page_context(view: DashboardView) -> dict:
    """Template variables shared by the page and its partials."""
    settings = state.settings
    return {
        "view": view,
        "title": settings.title,
        "debounce_ms": settings.search_debounce_ms,
        "sources": state.resolver.source_names,
        "show_collaborator": settings.schema.has_field("collaborator"),
        "version": __version__,
    }


# ============================================================================
# Main Page
# ============================================================================


@router.get("/", response_class=HTMLResponse)
async def index(
    request: Request,
    q: str = Query("", description="Search query"),
    status: str = Query("", description="Status filter"),
    priority: str = Query("", description="Priority filter"),
    irb: str = Query("", description="IRB classification filter"),
    collaborator: str = Query("", description="Collaborator filter"),
):
    """Main dashboard page."""
    await ensure_loaded()
    view = state.dashboard.view(criteria_from(q, status, priority, irb, collaborator))
    return templates.TemplateResponse(request, "index.html", page_context(view))


# ============================================================================
# Partials
# ============================================================================


@router.get("/projects", response_class=HTMLResponse)
async def projects(
    request: Request,
    q: str = Query("", description="Search query"),
    status: str = Query("", description="Status filter"),
    priority: str = Query("", description="Priority filter"),
    irb: str = Query("", description="IRB classification filter"),
    collaborator: str = Query("", description="Collaborator filter"),
):
    """Filtered, sorted project cards (partial for HTMX)."""
    await ensure_loaded()
    view = state.dashboard.view(criteria_from(q, status, priority, irb, collaborator))
    return templates.TemplateResponse(
        request, "partials/project_list.html", page_context(view)
    )


@router.get("/dashboard/clear", response_class=HTMLResponse)
async def clear_filters(request: Request):
    """Reset every filter control and re-render the full list."""
    await ensure_loaded()
    view = state.dashboard.view(FilterCriteria())
    return templates.TemplateResponse(request, "partials/dashboard.html", page_context(view))


# ============================================================================
# JSON
# ============================================================================


@router.get("/api/projects")
async def api_projects(
    q: str = Query(""),
    status: str = Query(""),
    priority: str = Query(""),
    irb: str = Query(""),
    collaborator: str = Query(""),
):
    """Filtered, sorted projects as JSON (wire field names)."""
    await ensure_loaded()
    view = state.dashboard.view(criteria_from(q, status, priority, irb, collaborator))
    return JSONResponse({
        "source": view.source_tag,
        "total": view.total,
        "count": view.showing,
        "error": view.error,
        "projects": [r.to_dict() for r in view.records],
    })
