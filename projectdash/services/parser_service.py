"""Delimited-text (CSV) parsing into project records.

The format is CSV-like: commas separate fields, double quotes protect
commas, and ``""`` inside quotes is a literal quote.  Records are split
on bare line feeds only, so a quoted field cannot span lines.
"""

from projectdash.models.record import Record
from projectdash.models.schema import Schema


def parse_row(line: str) -> list[str]:
    """Split one line into trimmed fields.

    Trimming runs over the accumulated field after quotes are resolved,
    so ``" a "`` becomes ``a``: whitespace inside the quotes at the field
    edges is dropped as well.

    Args:
        line: A single line of delimited text

    Returns:
        List of field values (always at least one element)
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0

    while i < len(line):
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1

    fields.append("".join(current).strip())
    return fields


def parse_delimited_text(text: str, schema: Schema) -> list[Record]:
    """Parse delimited text into records, skipping the header line.

    A row is kept only when it has more than one field and a non-empty
    title at the schema's title column.  Malformed or short rows are
    dropped silently; this function never raises on bad input.

    Args:
        text: Full text of the export (header line first)
        schema: Column schema mapping positions to record fields

    Returns:
        Records in input order
    """
    records: list[Record] = []
    title_index = schema.title_index

    for line in text.split("\n")[1:]:
        row = parse_row(line)
        if len(row) > 1 and title_index < len(row) and row[title_index]:
            records.append(Record.from_row(row, schema))

    return records
