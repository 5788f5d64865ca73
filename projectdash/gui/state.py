"""Application state, templates, and record loading helpers."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from fastapi.templating import Jinja2Templates

from projectdash.config import Settings
from projectdash.gui.helpers import (
    FilterCriteria,
    collaborator_options,
    filter_records,
    last_updated,
    sort_records,
)
from projectdash.gui.render import build_environment
from projectdash.models.record import Record
from projectdash.services.source_service import AUTO, Resolution, SourceError, SourceResolver

logger = logging.getLogger(__name__)


# ============================================================================
# Dashboard state (explicit value, no ambient globals)
# ============================================================================


@dataclass(frozen=True)
class DashboardView:
    """Everything a page needs for one render: filtered + sorted records and counts."""

    records: list[Record]
    total: int
    source_tag: Optional[str]
    last_updated: Optional[datetime]
    collaborators: list[str]
    criteria: FilterCriteria
    error: Optional[str] = None

    @property
    def showing(self) -> int:
        return len(self.records)

    @property
    def results_label(self) -> str:
        if self.showing == self.total:
            return f"Showing all {self.total} projects"
        return f"Showing {self.showing} of {self.total} projects"


@dataclass
class DashboardState:
    """Loaded records plus the bookkeeping that orders concurrent loads.

    Every load takes a token from ``begin_request()``.  A result is applied
    only when its token is newer than the last applied one, so a slow load
    finishing after a faster, later refresh is discarded.
    """

    records: tuple[Record, ...] = ()
    source_tag: Optional[str] = None
    error: Optional[str] = None
    loaded: bool = False
    _issued: int = 0
    _applied: int = 0

    def begin_request(self) -> int:
        self._issued += 1
        return self._issued

    def is_stale(self, token: int) -> bool:
        return token <= self._applied

    def apply(self, token: int, resolution: Resolution) -> bool:
        """Store *resolution* unless a newer load already completed."""
        if self.is_stale(token):
            logger.info("Discarding stale load #%d from '%s'", token, resolution.source_tag)
            return False
        self._applied = token
        self.records = resolution.records
        self.source_tag = resolution.source_tag
        self.error = None
        self.loaded = True
        return True

    def fail(self, token: int, message: str) -> bool:
        """Record a failed load; previously loaded records are kept."""
        if self.is_stale(token):
            return False
        self._applied = token
        self.error = message
        self.loaded = True
        return True

    def view(self, criteria: Optional[FilterCriteria] = None) -> DashboardView:
        criteria = criteria or FilterCriteria()
        return DashboardView(
            records=sort_records(filter_records(self.records, criteria)),
            total=len(self.records),
            source_tag=self.source_tag,
            last_updated=last_updated(self.records),
            collaborators=collaborator_options(self.records),
            criteria=criteria,
            error=self.error,
        )


# ============================================================================
# Global State
# ============================================================================


class AppState:
    """Process-wide holder of the services and the dashboard state."""

    settings: Settings
    resolver: SourceResolver
    dashboard: DashboardState = DashboardState()
    embedded_payload: Any = None
    initial_load: Optional[asyncio.Task] = None


state = AppState()


# ============================================================================
# Templates
# ============================================================================

templates = Jinja2Templates(env=build_environment())


# ============================================================================
# Loading
# ============================================================================


def configure(settings: Settings, embedded_payload: Any = None, transport: Any = None) -> None:
    """(Re)build services from *settings* and start with an empty dashboard."""
    state.settings = settings
    state.embedded_payload = embedded_payload
    state.resolver = SourceResolver.from_settings(settings, embedded_payload, transport=transport)
    state.dashboard = DashboardState()
    state.initial_load = None


async def load_records(mode: str = AUTO) -> bool:
    """Run one resolution pass and apply it to the dashboard.

    Returns:
        True if this pass updated the dashboard (it was not superseded)

    Raises:
        UnknownSourceError: If *mode* names no configured source
    """
    dashboard = state.dashboard
    if mode != AUTO:
        state.resolver.get(mode)

    token = dashboard.begin_request()
    try:
        resolution = await state.resolver.resolve(mode)
    except SourceError as exc:
        logger.error("Loading projects failed: %s", exc)
        return dashboard.fail(token, str(exc))
    return dashboard.apply(token, resolution)


def start_initial_load() -> asyncio.Task:
    """Kick off the first AUTO load as a background task (non-blocking)."""
    state.initial_load = asyncio.create_task(load_records(AUTO))
    return state.initial_load


async def ensure_loaded() -> None:
    """Wait for the initial load if it is still running."""
    task = state.initial_load
    if task is not None and not task.done():
        await asyncio.shield(task)
