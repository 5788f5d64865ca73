"""Versioned positional column schemas for delimited-text sources."""

from dataclasses import dataclass

from projectdash.models.record import ATTRIBUTE_NAMES

DEFAULT_SCHEMA_NAME = "standard"


@dataclass(frozen=True)
class Schema:
    """Ordered wire field names, one per column of a delimited-text row.

    Deployments that add or reorder columns get a new schema entry rather
    than new parsing code.
    """

    name: str
    version: int
    fields: tuple[str, ...]

    def __post_init__(self) -> None:
        unknown = [f for f in self.fields if f not in ATTRIBUTE_NAMES]
        if unknown:
            raise ValueError(f"Schema '{self.name}' has unknown fields: {unknown}")
        if len(set(self.fields)) != len(self.fields):
            raise ValueError(f"Schema '{self.name}' has duplicate fields")
        if "title" not in self.fields:
            raise ValueError(f"Schema '{self.name}' has no 'title' column")

    @property
    def title_index(self) -> int:
        """Column position of the title field."""
        return self.fields.index("title")

    @property
    def width(self) -> int:
        return len(self.fields)

    def has_field(self, name: str) -> bool:
        return name in self.fields
