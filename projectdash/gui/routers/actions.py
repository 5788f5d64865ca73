"""Action routes: refresh from a data source, load status."""

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel

from projectdash.gui.routers.projects import criteria_from, page_context
from projectdash.gui.state import ensure_loaded, load_records, state, templates
from projectdash.services.source_service import AUTO, UnknownSourceError

router = APIRouter()


# ============================================================================
# Refresh
# ============================================================================


@router.post("/actions/refresh", response_class=HTMLResponse)
async def refresh(
    request: Request,
    source: str = Form(AUTO),
    q: str = Form(""),
    status: str = Form(""),
    priority: str = Form(""),
    irb: str = Form(""),
    collaborator: str = Form(""),
):
    """Reload projects from one named source (or the whole chain) and re-render.

    The current filter values are posted along so the refreshed list keeps them.
    """
    await ensure_loaded()
    try:
        await load_records(source or AUTO)
    except UnknownSourceError as exc:
        return templates.TemplateResponse(
            request,
            "partials/error.html",
            {"message": str(exc)},
            status_code=400,
        )

    view = state.dashboard.view(criteria_from(q, status, priority, irb, collaborator))
    return templates.TemplateResponse(request, "partials/dashboard.html", page_context(view))


class RefreshPayload(BaseModel):
    """Request body for a JSON refresh."""

    source: str = AUTO


@router.post("/api/refresh")
async def api_refresh(body: RefreshPayload):
    """Reload projects and report which source answered."""
    await ensure_loaded()
    try:
        applied = await load_records(body.source or AUTO)
    except UnknownSourceError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)

    dashboard = state.dashboard
    return JSONResponse(
        {
            "applied": applied,
            "source": dashboard.source_tag,
            "count": len(dashboard.records),
            "error": dashboard.error,
        },
        status_code=502 if dashboard.error else 200,
    )


# ============================================================================
# Status
# ============================================================================


@router.get("/actions/status")
async def load_status():
    """Return the current load status as JSON."""
    dashboard = state.dashboard
    return JSONResponse({
        "loaded": dashboard.loaded,
        "source": dashboard.source_tag,
        "count": len(dashboard.records),
        "error": dashboard.error,
        "sources": state.resolver.source_names,
    })
