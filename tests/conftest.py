from __future__ import annotations

from pathlib import Path

import pytest

from projectdash.config import Settings, get_schema
from projectdash.models.schema import Schema

SAMPLE_CSV = (
    "Timestamp,Title,Abstract,Status,Submission Date,Target Journal,Priority,"
    "Deadline,IRB,Funding,Docs,Coauthors,Keywords,Last Activity\n"
    '1/15/2024 10:30:00,Remote Work,"Survey of 1,200 employees",Writing,,JAP,Medium,'
    '2024-06-30,Approved,Seed,https://docs.example.com/a,"Lee, Park","remote, teams",2024-03-02\n'
    '2/3/2024 09:00:00,"Nudges, Defaults",Field experiment,Idea,,,High,,Pending,,,Garcia,nudges,2024-02-20\n'
    "3/1/2024 08:00:00,,No title here,Idea,,,Low,,,,,,,\n"
    "3/2/2024 08:00:00,Short Row,Only a few columns\n"
)


@pytest.fixture
def schema() -> Schema:
    return get_schema("standard")


@pytest.fixture
def settings(tmp_path: Path):
    """Fresh Settings singleton rooted at a temp dir (no dashboard.yaml)."""
    Settings.reset()
    s = Settings.load(base_dir=tmp_path)
    yield s
    Settings.reset()


@pytest.fixture
def csv_file(tmp_path: Path) -> Path:
    path = tmp_path / "data" / "projects.csv"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(SAMPLE_CSV, encoding="utf-8")
    return path
