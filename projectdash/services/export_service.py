"""JSON export service (CSV → static projects document)."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from projectdash.models.record import Record
from projectdash.models.schema import Schema
from projectdash.services.parser_service import parse_delimited_text

logger = logging.getLogger(__name__)


class JsonExporter:
    """Pre-converts the local CSV file into the JSON document the dashboard prefers.

    The document shape is ``{"updated": ..., "count": n, "projects": [...]}``;
    each project carries exactly the schema's columns.
    """

    def __init__(self, schema: Schema):
        """Initialize exporter.

        Args:
            schema: Column schema used to parse the CSV and shape the output
        """
        self.schema = schema

    def build(self, text: str, updated: Optional[datetime] = None) -> dict[str, Any]:
        """Parse *text* and return the projects document.

        Args:
            text: CSV text, header line first
            updated: Load time stamp (defaults to now, UTC)
        """
        records = parse_delimited_text(text, self.schema)
        return self.document(records, updated)

    def document(self, records: list[Record], updated: Optional[datetime] = None) -> dict[str, Any]:
        updated = updated or datetime.now(timezone.utc)
        return {
            "updated": _iso_utc(updated),
            "count": len(records),
            "projects": [r.to_dict(self.schema.fields) for r in records],
        }

    def export(self, input_path: Path, output_path: Path) -> int:
        """Convert *input_path* (CSV) into *output_path* (JSON).

        Returns:
            Number of projects written

        Raises:
            OSError: If the CSV cannot be read or the JSON cannot be written
        """
        text = input_path.read_text(encoding="utf-8")
        document = self.build(text)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2, ensure_ascii=False)
            f.write("\n")

        logger.info("Wrote %d projects to %s", document["count"], output_path)
        return document["count"]


def _iso_utc(dt: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
