"""Configuration management.

``Settings`` is a **metaclass-based singleton**: the first call to
``Settings.load()`` creates the instance; every later call returns
the same object.  Use ``update()`` to change values at runtime, or
``reload()`` to re-read everything from disk.

All user-editable configuration lives under ``.metadata/``:

* ``dashboard.yaml`` – page title, column schema (or custom ``columns``),
  data sources, fetch timeout

On first run, missing files are copied from ``.metadata.example/``.
The built-in column schemas ship with the package in
``projectdash/data/schemas.yaml``.
"""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from projectdash.models.schema import DEFAULT_SCHEMA_NAME, Schema

logger = logging.getLogger(__name__)

SOURCE_KINDS = ("json", "sheet", "file")
CUSTOM_SCHEMA_NAME = "custom"
DEFAULT_DEBOUNCE_MS = 300


# ---------------------------------------------------------------------------
# Source dataclass
# ---------------------------------------------------------------------------

@dataclass
class SourceConfig:
    """A single entry of the data-source fallback chain."""

    name: str
    kind: str
    location: str


DEFAULT_SOURCES = [
    SourceConfig(name="json", kind="json", location="data/projects.json"),
    SourceConfig(name="csv", kind="file", location="data/projects.csv"),
]


# ---------------------------------------------------------------------------
# Singleton metaclass
# ---------------------------------------------------------------------------

class _SettingsMeta(type):
    """Metaclass that enforces a process-wide singleton for *Settings*.

    * First ``Settings(...)`` creates and caches the instance.
    * Later ``Settings(...)`` calls return the cached instance (args ignored).
    """

    _instances: dict[type, Any] = {}

    def __call__(cls, *args: Any, **kwargs: Any) -> Any:
        if cls not in cls._instances:
            cls._instances[cls] = super().__call__(*args, **kwargs)
        return cls._instances[cls]


# ---------------------------------------------------------------------------
# Settings dataclass (singleton)
# ---------------------------------------------------------------------------

@dataclass
class Settings(metaclass=_SettingsMeta):
    """Application settings: a singleton with runtime-mutable values.

    Usage::

        settings = Settings.load()            # first call → create
        settings = Settings.load()            # later → same object
        settings.update(schema_name="notes")  # runtime change
        settings = Settings.reload()          # re-read from disk
    """

    title: str = "Project Dashboard"
    base_dir: Path = Path(".")
    metadata_dir: Path = Path(".metadata")
    schema_name: str = DEFAULT_SCHEMA_NAME
    base_url: Optional[str] = None
    fetch_timeout: Optional[float] = 10.0
    search_debounce_ms: int = DEFAULT_DEBOUNCE_MS
    log_level: str = "INFO"
    sources: list[SourceConfig] = field(default_factory=lambda: list(DEFAULT_SOURCES))
    export_input: Path = Path("data/projects.csv")
    export_output: Path = Path("data/projects.json")
    columns: Optional[tuple[str, ...]] = None

    # ── Computed properties ────────────────────────────────────────────

    @property
    def schema(self) -> Schema:
        """The active column schema.

        A ``columns`` list from ``dashboard.yaml`` wins over the named
        built-in schema (raises ``KeyError`` if that name is unknown).
        """
        if self.columns:
            return Schema(name=CUSTOM_SCHEMA_NAME, version=0, fields=self.columns)
        return get_schema(self.schema_name)

    # ── Runtime helpers ───────────────────────────────────────────────

    def update(self, **kwargs: Any) -> None:
        """Mutate settings fields at runtime.

        >>> Settings.load().update(fetch_timeout=2.0)
        """
        for key, value in kwargs.items():
            if not hasattr(self, key):
                raise AttributeError(f"Settings has no field '{key}'")
            setattr(self, key, value)

    def resolve_path(self, path: Path) -> Path:
        """Resolve *path* against ``base_dir`` unless already absolute."""
        return path if path.is_absolute() else self.base_dir / path

    # ── Factory / lifecycle ───────────────────────────────────────────

    @classmethod
    def load(cls, base_dir: Optional[Path] = None) -> "Settings":
        """Load or return the singleton Settings instance.

        On first call the singleton is created; subsequent calls return
        the cached instance.  Pass *base_dir* to override the project
        root (defaults to the repository root one level above ``projectdash/``).
        """
        if cls in _SettingsMeta._instances:
            return _SettingsMeta._instances[cls]  # type: ignore[return-value]

        if base_dir is None:
            base_dir = Path(__file__).resolve().parent.parent

        metadata_dir = base_dir / ".metadata"
        cls._ensure_default_files(base_dir, metadata_dir)

        data = _load_dashboard(metadata_dir / "dashboard.yaml")
        export = data.get("export") if isinstance(data.get("export"), dict) else {}

        return cls(
            title=str(data.get("title") or "Project Dashboard"),
            base_dir=base_dir,
            metadata_dir=metadata_dir,
            schema_name=_parse_schema_name(data.get("schema")),
            columns=_parse_columns(data.get("columns")),
            base_url=data.get("base_url") or None,
            fetch_timeout=_parse_timeout(data.get("fetch_timeout", 10.0)),
            search_debounce_ms=_parse_debounce(data.get("search_debounce_ms")),
            log_level=str(data.get("log_level") or "INFO").upper(),
            sources=_load_sources(data.get("sources")),
            export_input=Path(export.get("input") or "data/projects.csv"),
            export_output=Path(export.get("output") or "data/projects.json"),
        )

    @classmethod
    def reload(cls, base_dir: Optional[Path] = None) -> "Settings":
        """Discard the current singleton and re-load from disk."""
        cls.reset()
        return cls.load(base_dir)

    @classmethod
    def reset(cls) -> None:
        """Discard the singleton so the next ``load()`` re-creates it."""
        _SettingsMeta._instances.pop(cls, None)

    # ── Private ───────────────────────────────────────────────────────

    @staticmethod
    def _ensure_default_files(base_dir: Path, metadata_dir: Path) -> None:
        """Copy ``.metadata.example/`` templates when real files are missing."""
        example_dir = base_dir / ".metadata.example"
        if not example_dir.exists():
            return

        metadata_dir.mkdir(parents=True, exist_ok=True)
        for example_file in example_dir.iterdir():
            if example_file.is_file():
                target = metadata_dir / example_file.name
                if not target.exists():
                    shutil.copy2(example_file, target)
                    logger.info("Created .metadata/%s from template", example_file.name)


# ---------------------------------------------------------------------------
# YAML loaders
# ---------------------------------------------------------------------------

def _load_dashboard(path: Path) -> dict[str, Any]:
    """Load ``dashboard.yaml``; an absent or malformed file yields ``{}``."""
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Ignoring unreadable %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _parse_timeout(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return 10.0


def _parse_debounce(value: Any) -> int:
    if value is None:
        return DEFAULT_DEBOUNCE_MS
    try:
        ms = int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid search_debounce_ms %r", value)
        return DEFAULT_DEBOUNCE_MS
    return ms if ms >= 0 else DEFAULT_DEBOUNCE_MS


def _parse_schema_name(value: Any) -> str:
    """Return *value* if it names a built-in schema, else the default."""
    if not value:
        return DEFAULT_SCHEMA_NAME
    name = str(value)
    if name not in load_schemas():
        logger.warning("Unknown schema '%s', using '%s'", name, DEFAULT_SCHEMA_NAME)
        return DEFAULT_SCHEMA_NAME
    return name


def _parse_columns(raw: Any) -> Optional[tuple[str, ...]]:
    """Validate a custom ``columns`` list; an invalid list is ignored."""
    if raw is None:
        return None
    if not isinstance(raw, list) or not raw:
        logger.warning("Ignoring 'columns': expected a non-empty list of field names")
        return None
    columns = tuple(str(name) for name in raw)
    try:
        Schema(name=CUSTOM_SCHEMA_NAME, version=0, fields=columns)
    except ValueError as exc:
        logger.warning("Ignoring 'columns': %s", exc)
        return None
    return columns


def _load_sources(raw: Any) -> list[SourceConfig]:
    """Build the source chain from the ``sources`` list.

    Entries with an unknown ``kind`` or an empty ``location`` are skipped,
    so an unconfigured published-sheet URL simply drops out of the chain.
    """
    if not isinstance(raw, list):
        return list(DEFAULT_SOURCES)

    sources: list[SourceConfig] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        kind = str(entry.get("kind") or "")
        location = str(entry.get("location") or "").strip()
        if kind not in SOURCE_KINDS or not location:
            continue
        sources.append(
            SourceConfig(
                name=str(entry.get("name") or kind),
                kind=kind,
                location=location,
            )
        )
    return sources


def load_schemas() -> dict[str, Schema]:
    """Load the built-in schema registry from ``projectdash/data/schemas.yaml``.

    This is **application data** (ships with the package), not user config.
    """
    registry_path = Path(__file__).resolve().parent / "data" / "schemas.yaml"
    with open(registry_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    schemas: dict[str, Schema] = {}
    for entry in data.get("schemas") or []:
        schema = Schema(
            name=str(entry["name"]),
            version=int(entry.get("version", 1)),
            fields=tuple(str(name) for name in entry["fields"]),
        )
        schemas[schema.name] = schema
    return schemas


def get_schema(name: str) -> Schema:
    """Return the built-in schema called *name*."""
    schemas = load_schemas()
    if name not in schemas:
        raise KeyError(f"Unknown schema '{name}' (available: {', '.join(sorted(schemas))})")
    return schemas[name]
