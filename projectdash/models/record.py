"""Project record data model."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence

if TYPE_CHECKING:
    from projectdash.models.schema import Schema


# Attribute name → wire name (JSON keys and schema column names)
WIRE_NAMES: dict[str, str] = {
    "timestamp": "timestamp",
    "title": "title",
    "abstract": "abstract",
    "status": "status",
    "submission_date": "submissionDate",
    "target_journal": "targetJournal",
    "priority": "priority",
    "deadline": "deadline",
    "irb_status": "irbStatus",
    "funding": "funding",
    "docs_link": "docsLink",
    "coauthors": "coauthors",
    "collaborator": "collaborator",
    "keywords": "keywords",
    "last_activity": "lastActivity",
    "notes": "notes",
}

ATTRIBUTE_NAMES: dict[str, str] = {wire: attr for attr, wire in WIRE_NAMES.items()}


@dataclass(frozen=True)
class Record:
    """One research project entry.

    Every attribute is plain text; missing values are empty strings.
    """

    title: str
    timestamp: str = ""
    abstract: str = ""
    status: str = ""
    submission_date: str = ""
    target_journal: str = ""
    priority: str = ""
    deadline: str = ""
    irb_status: str = ""
    funding: str = ""
    docs_link: str = ""
    coauthors: str = ""
    collaborator: str = ""
    keywords: str = ""
    last_activity: str = ""
    notes: str = ""

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "Record":
        """Build a record from a wire-keyed mapping (e.g. one JSON project).

        Unknown keys are ignored, missing keys and ``None`` become ``""``.
        """
        values = {}
        for attr, wire in WIRE_NAMES.items():
            raw = mapping.get(wire)
            values[attr] = "" if raw is None else str(raw)
        return cls(**values)

    @classmethod
    def from_row(cls, cells: Sequence[str], schema: "Schema") -> "Record":
        """Build a record from positional cells mapped through *schema*.

        Cells past the end of the row map to ``""``.
        """
        mapping = {
            name: cells[i] if i < len(cells) else ""
            for i, name in enumerate(schema.fields)
        }
        return cls.from_mapping(mapping)

    def to_dict(self, wire_fields: Optional[Sequence[str]] = None) -> dict[str, str]:
        """Return a wire-keyed dict.

        Args:
            wire_fields: Only emit these wire names, in this order
                (defaults to every field)
        """
        if wire_fields is None:
            return {wire: getattr(self, attr) for attr, wire in WIRE_NAMES.items()}
        return {name: getattr(self, ATTRIBUTE_NAMES[name]) for name in wire_fields}

    @property
    def recency_source(self) -> str:
        """Date text used for recency: last activity, else creation timestamp."""
        return self.last_activity or self.timestamp
