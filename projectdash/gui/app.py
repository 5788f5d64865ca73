"""FastAPI + HTMX viewer for ProjectDash."""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles

from projectdash.config import Settings
from projectdash.gui.render import STATIC_DIR
from projectdash.gui.routers import actions, projects
from projectdash.gui.state import configure, start_initial_load, state, templates

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    embedded_payload: Any = None,
    transport: Any = None,
) -> FastAPI:
    """Build the viewer application.

    Args:
        settings: Settings to use (defaults to ``Settings.load()`` at startup)
        embedded_payload: In-process project data, consulted before any I/O
        transport: Optional httpx transport for the resolver
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize services and start the first load on startup."""
        configure(settings or Settings.load(), embedded_payload, transport)
        task = start_initial_load()
        yield
        if not task.done():
            task.cancel()

    app = FastAPI(lifespan=lifespan)
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.include_router(projects.router)
    app.include_router(actions.router)

    @app.exception_handler(Exception)
    async def error_panel(request: Request, exc: Exception) -> HTMLResponse:
        """Surface any unhandled fault as a visible error panel."""
        logger.exception("Unhandled error on %s", request.url.path)
        template = "partials/error.html" if request.headers.get("HX-Request") else "error.html"
        title = state.settings.title if hasattr(state, "settings") else "Project Dashboard"
        return templates.TemplateResponse(
            request,
            template,
            {"message": f"{type(exc).__name__}: {exc}", "title": title},
            status_code=500,
        )

    return app


app = create_app()
