"""Service layer."""

from projectdash.services.export_service import JsonExporter
from projectdash.services.parser_service import parse_delimited_text, parse_row
from projectdash.services.source_service import (
    AUTO,
    EmbeddedPayload,
    LocalFallbackFile,
    RemoteJsonDocument,
    RemotePublishedSheet,
    Resolution,
    SourceError,
    SourceResolver,
    SourcesExhaustedError,
    UnknownSourceError,
)

__all__ = [
    "AUTO",
    "EmbeddedPayload",
    "JsonExporter",
    "LocalFallbackFile",
    "RemoteJsonDocument",
    "RemotePublishedSheet",
    "Resolution",
    "SourceError",
    "SourceResolver",
    "SourcesExhaustedError",
    "UnknownSourceError",
    "parse_delimited_text",
    "parse_row",
]
