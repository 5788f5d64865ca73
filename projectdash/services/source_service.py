"""Record loading from an ordered chain of data sources.

Sources are tried one at a time.  In ``AUTO`` mode the first source that
yields a well-formed result wins and the rest are never touched; naming a
single source bypasses the chain (used by the manual refresh action).
"""

import asyncio
import itertools
import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union
from urllib.parse import urljoin

import httpx

from projectdash.config import Settings, SourceConfig
from projectdash.models.record import Record
from projectdash.models.schema import Schema
from projectdash.services.parser_service import parse_delimited_text

logger = logging.getLogger(__name__)

AUTO = "auto"
CACHE_BUST_PARAM = "_"
DEFAULT_TIMEOUT = 10.0

_cache_sequence = itertools.count(1)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class SourceError(Exception):
    """A data source could not supply records."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class SourceFetchError(SourceError):
    """Transport failure: non-2xx status, network error, unreadable file."""


class SourceShapeError(SourceError):
    """The source answered, but not with a project list."""


class SourcesExhaustedError(SourceError):
    """Every attempted source failed."""

    def __init__(self, failures: list[SourceError]):
        self.failures = failures
        if failures:
            last = failures[-1]
            message = f"All data sources failed. Last error: {last}"
            super().__init__(message, last.source)
        else:
            super().__init__("No data sources configured")


class UnknownSourceError(ValueError):
    """An explicit source name that is not part of the chain."""


# ---------------------------------------------------------------------------
# Source specs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EmbeddedPayload:
    """Project data already resident in the process (no I/O)."""

    payload: Any = field(compare=False)
    name: str = "embedded"


@dataclass(frozen=True)
class RemoteJsonDocument:
    """A ``{"projects": [...]}`` document or a bare JSON list."""

    location: str
    name: str = "json"


@dataclass(frozen=True)
class RemotePublishedSheet:
    """A spreadsheet published as a CSV export."""

    location: str
    name: str = "sheets"


@dataclass(frozen=True)
class LocalFallbackFile:
    """A local CSV file, the offline-safe last resort."""

    location: str
    name: str = "csv"


SourceSpec = Union[EmbeddedPayload, RemoteJsonDocument, RemotePublishedSheet, LocalFallbackFile]

_SPEC_BY_KIND = {
    "json": RemoteJsonDocument,
    "sheet": RemotePublishedSheet,
    "file": LocalFallbackFile,
}


@dataclass(frozen=True)
class Resolution:
    """Records produced by one resolution pass and the source that supplied them."""

    records: tuple[Record, ...]
    source_tag: str


# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------

def extract_projects(payload: Any) -> Optional[Sequence[Any]]:
    """Return the project list of *payload*, or None if it has neither accepted shape."""
    if isinstance(payload, Mapping):
        projects = payload.get("projects")
        return projects if isinstance(projects, (list, tuple)) else None
    if isinstance(payload, (list, tuple)):
        return payload
    return None


def records_from_items(items: Sequence[Any]) -> list[Record]:
    """Convert JSON project mappings to records, dropping untitled entries."""
    records = []
    for item in items:
        if not isinstance(item, Mapping):
            continue
        record = Record.from_mapping(item)
        if record.title.strip():
            records.append(record)
    return records


def build_sources(
    configs: Sequence[SourceConfig],
    embedded_payload: Any = None,
) -> list[SourceSpec]:
    """Turn configured source entries into specs.

    The embedded payload, when given, is prepended to the chain.
    """
    sources: list[SourceSpec] = []
    if embedded_payload is not None:
        sources.append(EmbeddedPayload(embedded_payload))
    for config in configs:
        spec_cls = _SPEC_BY_KIND.get(config.kind)
        if spec_cls is None:
            raise ValueError(f"Unknown source kind '{config.kind}' for '{config.name}'")
        sources.append(spec_cls(location=config.location, name=config.name))
    return sources


def _order_sources(sources: Sequence[SourceSpec]) -> list[SourceSpec]:
    """Embedded payloads first, local files last, declared order otherwise."""
    embedded = [s for s in sources if isinstance(s, EmbeddedPayload)]
    local = [s for s in sources if isinstance(s, LocalFallbackFile)]
    remote = [s for s in sources if not isinstance(s, (EmbeddedPayload, LocalFallbackFile))]
    return embedded + remote + local


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class SourceResolver:
    """Resolves project records from an ordered list of sources."""

    def __init__(
        self,
        sources: Sequence[SourceSpec],
        schema: Schema,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        base_url: Optional[str] = None,
        base_dir: Optional[Path] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize resolver.

        Args:
            sources: Candidate sources in priority order
            schema: Column schema for delimited-text sources
            timeout: Per-request timeout in seconds (None waits indefinitely)
            base_url: Origin for relative locations; when unset they are files
            base_dir: Directory relative file locations are read from
            transport: Optional httpx transport (tests use ``httpx.MockTransport``)
        """
        names = [s.name for s in sources]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate source names: {duplicates}")

        self.sources = _order_sources(sources)
        self.schema = schema
        self.timeout = timeout
        self.base_url = base_url
        self.base_dir = base_dir or Path(".")
        self.transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        embedded_payload: Any = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "SourceResolver":
        """Build a resolver for the configured source chain."""
        return cls(
            build_sources(settings.sources, embedded_payload),
            schema=settings.schema,
            timeout=settings.fetch_timeout,
            base_url=settings.base_url,
            base_dir=settings.base_dir,
            transport=transport,
        )

    @property
    def source_names(self) -> list[str]:
        return [s.name for s in self.sources]

    def get(self, name: str) -> SourceSpec:
        """Return the source called *name*.

        Raises:
            UnknownSourceError: If no source has that name
        """
        for source in self.sources:
            if source.name == name:
                return source
        raise UnknownSourceError(
            f"Unknown data source '{name}' (available: {', '.join(self.source_names) or 'none'})"
        )

    async def resolve(self, mode: str = AUTO) -> Resolution:
        """Load records from the first source that succeeds.

        Args:
            mode: ``AUTO`` to walk the whole chain, or one source name

        Returns:
            Records and the tag of the source that supplied them

        Raises:
            UnknownSourceError: If *mode* names no configured source
            SourcesExhaustedError: If every attempted source failed
        """
        candidates = self.sources if mode == AUTO else [self.get(mode)]
        failures: list[SourceError] = []

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            for source in candidates:
                try:
                    resolution = await self._attempt(source, client)
                except SourceError as exc:
                    failures.append(exc)
                    logger.warning("Source '%s' failed: %s", source.name, exc)
                    continue
                logger.info(
                    "Loaded %d projects from '%s'", len(resolution.records), resolution.source_tag
                )
                return resolution

        raise SourcesExhaustedError(failures) from (failures[-1] if failures else None)

    # ── Private ───────────────────────────────────────────────────────

    async def _attempt(self, source: SourceSpec, client: httpx.AsyncClient) -> Resolution:
        """Try a single source once (no retry)."""
        if isinstance(source, EmbeddedPayload):
            items = extract_projects(source.payload)
            if items is None:
                reason = "not present" if source.payload is None else "not a project list"
                raise SourceShapeError(f"{source.name}: embedded payload {reason}", source.name)
            records = records_from_items(items)

        elif isinstance(source, RemoteJsonDocument):
            text = await self._read(
                source.name, source.location, client, headers={"Cache-Control": "no-store"}
            )
            try:
                payload = json.loads(text)
            except ValueError as exc:
                raise SourceShapeError(f"{source.name}: invalid JSON: {exc}", source.name) from exc
            items = extract_projects(payload)
            if items is None:
                raise SourceShapeError(
                    f"{source.name}: expected {{\"projects\": [...]}} or a list", source.name
                )
            records = records_from_items(items)

        elif isinstance(source, RemotePublishedSheet):
            text = await self._read(source.name, source.location, client, bust_cache=True)
            records = parse_delimited_text(text, self.schema)

        else:
            text = await self._read(source.name, source.location, client)
            records = parse_delimited_text(text, self.schema)

        return Resolution(records=tuple(records), source_tag=source.name)

    async def _read(
        self,
        name: str,
        location: str,
        client: httpx.AsyncClient,
        bust_cache: bool = False,
        headers: Optional[dict[str, str]] = None,
    ) -> str:
        """Return the body at *location* (URL or file path) as text."""
        url = self._url_for(location)

        if url is None:
            path = Path(location)
            if not path.is_absolute():
                path = self.base_dir / path
            try:
                return await asyncio.to_thread(path.read_text, encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise SourceFetchError(f"{name}: cannot read {path}: {exc}", name) from exc

        request_url = httpx.URL(url)
        if bust_cache:
            request_url = request_url.copy_merge_params({CACHE_BUST_PARAM: _cache_token()})

        try:
            response = await client.get(request_url, headers=headers)
        except httpx.HTTPError as exc:
            raise SourceFetchError(f"{name}: request to {url} failed: {exc}", name) from exc

        if not response.is_success:
            raise SourceFetchError(f"{name}: HTTP error {response.status_code} from {url}", name)
        return response.text

    def _url_for(self, location: str) -> Optional[str]:
        if location.startswith(("http://", "https://")):
            return location
        if self.base_url:
            return urljoin(self.base_url, location)
        return None


def _cache_token() -> str:
    """Per-request value that defeats intermediary caches."""
    return f"{time.time_ns()}-{next(_cache_sequence)}"
