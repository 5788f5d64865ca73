import pytest

from projectdash.models.record import WIRE_NAMES, Record
from projectdash.models.schema import Schema


def test_from_mapping_uses_wire_names():
    record = Record.from_mapping(
        {
            "title": "T",
            "irbStatus": "Approved",
            "docsLink": "https://docs.example.com",
            "lastActivity": "2024-01-01",
            "priority": None,
            "extra": "ignored",
            "count": 3,
        }
    )

    assert record.irb_status == "Approved"
    assert record.docs_link == "https://docs.example.com"
    assert record.last_activity == "2024-01-01"
    assert record.priority == ""


def test_non_string_values_become_text():
    assert Record.from_mapping({"title": 42}).title == "42"


def test_from_row_pads_missing_cells():
    schema = Schema(name="t", version=1, fields=("timestamp", "title", "status"))
    assert Record.from_row(["ts", "Title"], schema) == Record(title="Title", timestamp="ts")


def test_to_dict():
    record = Record(title="T", notes="n")

    full = record.to_dict()
    assert list(full) == list(WIRE_NAMES.values())
    assert full["notes"] == "n"

    assert record.to_dict(["title", "notes"]) == {"title": "T", "notes": "n"}


def test_recency_source():
    assert Record(title="a", timestamp="ts", last_activity="la").recency_source == "la"
    assert Record(title="a", timestamp="ts").recency_source == "ts"


@pytest.mark.parametrize(
    "fields, message",
    [
        (("title", "colour"), "unknown"),
        (("title", "title"), "duplicate"),
        (("timestamp", "status"), "title"),
    ],
)
def test_schema_validation(fields, message):
    with pytest.raises(ValueError, match=message):
        Schema(name="bad", version=1, fields=fields)


def test_schema_helpers():
    schema = Schema(name="s", version=2, fields=("timestamp", "title", "collaborator"))
    assert schema.title_index == 1
    assert schema.width == 3
    assert schema.has_field("collaborator")
    assert not schema.has_field("notes")
