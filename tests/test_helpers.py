from datetime import datetime

import pytest

from projectdash.gui.helpers import (
    FilterCriteria,
    classify_irb,
    collaborator_options,
    filter_records,
    irb_class,
    last_updated,
    priority_class,
    priority_rank,
    sort_records,
    status_class,
)
from projectdash.models.record import Record


def _titles(records):
    return [r.title for r in records]


@pytest.fixture
def records():
    return [
        Record(
            title="Remote Work",
            abstract="Survey of employees",
            status="Writing",
            priority="Medium",
            irb_status="Approved 2024",
            coauthors="Lee, Park",
            keywords="remote, teams",
            last_activity="2024-03-02",
        ),
        Record(
            title="Nudges",
            status="Idea",
            priority="High",
            irb_status="Pending review",
            collaborator="Garcia",
            last_activity="2024-02-20",
        ),
        Record(
            title="Archive Study",
            status="Submitted",
            priority="Low",
            irb_status="N/A",
            collaborator="Garcia",
            keywords="archives",
            timestamp="1/5/2024 09:00:00",
        ),
        Record(title="Loose Idea", status="Idea", collaborator="Kim"),
    ]


# ============================================================================
# Sorting
# ============================================================================


def test_high_priority_sorts_before_low_regardless_of_recency():
    old_high = Record(title="Old High", priority="High", last_activity="2020-01-01")
    new_low = Record(title="New Low", priority="Low", last_activity="2024-12-31")

    assert _titles(sort_records([new_low, old_high])) == ["Old High", "New Low"]


def test_full_ordering(records):
    assert _titles(sort_records(records)) == ["Nudges", "Remote Work", "Archive Study", "Loose Idea"]


def test_recency_breaks_priority_ties():
    a = Record(title="A", priority="Medium", last_activity="2024-01-01")
    b = Record(title="B", priority="Medium", last_activity="2024-06-01")
    c = Record(title="C", priority="Medium", last_activity="not a date")

    assert _titles(sort_records([a, c, b])) == ["B", "A", "C"]


def test_timestamp_used_when_last_activity_missing():
    stamped = Record(title="Stamped", timestamp="6/1/2024 10:00:00")
    active = Record(title="Active", last_activity="2024-03-01")

    assert _titles(sort_records([active, stamped])) == ["Stamped", "Active"]


def test_sort_is_stable_and_non_mutating():
    items = [Record(title=t) for t in ("x", "y", "z")]
    result = sort_records(items)

    assert _titles(result) == ["x", "y", "z"]
    assert result is not items


def test_priority_rank_unknown_values_last():
    assert priority_rank("High") < priority_rank("Medium") < priority_rank("Low")
    assert priority_rank("") == priority_rank("urgent") == 3
    assert priority_rank(None) == 3


# ============================================================================
# Filtering
# ============================================================================


def test_empty_criteria_keep_everything(records):
    assert filter_records(records, FilterCriteria()) == records


@pytest.mark.parametrize(
    "search, expected",
    [
        ("REMOTE", ["Remote Work"]),
        ("park", ["Remote Work"]),
        ("archives", ["Archive Study"]),
        ("garcia", ["Nudges", "Archive Study"]),
        ("nothing matches", []),
    ],
)
def test_search_is_case_insensitive_substring(records, search, expected):
    assert _titles(filter_records(records, FilterCriteria(search=search))) == expected


def test_filters_combine_with_and(records):
    criteria = FilterCriteria(status="Idea", collaborator="Garcia")
    assert _titles(filter_records(records, criteria)) == ["Nudges"]


def test_status_and_priority_exact_match(records):
    assert _titles(filter_records(records, FilterCriteria(status="idea"))) == []
    assert _titles(filter_records(records, FilterCriteria(priority="Low"))) == ["Archive Study"]


@pytest.mark.parametrize(
    "irb, expected",
    [
        ("approved", ["Remote Work"]),
        ("pending", ["Nudges"]),
        ("not-needed", ["Archive Study"]),
    ],
)
def test_irb_filter_uses_classification(records, irb, expected):
    assert _titles(filter_records(records, FilterCriteria(irb=irb))) == expected


# ============================================================================
# Classification
# ============================================================================


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Approved", "approved"),
        ("IRB approved on 3/1", "approved"),
        ("Pending", "pending"),
        ("Not needed", "not-needed"),
        ("n/a", "not-needed"),
        ("NA", "not-needed"),
        ("", ""),
        (None, ""),
        ("Submitted", ""),
    ],
)
def test_classify_irb(text, expected):
    assert classify_irb(text) == expected


def test_css_classes():
    assert status_class("Data Collected") == "status-collected"
    assert status_class("Research Design") == "status-design"
    assert status_class("Unknown") == ""
    assert priority_class("HIGH") == "priority-high"
    assert priority_class("") == ""
    assert irb_class("N/A") == "irb-na"
    assert irb_class("Approved") == "irb-approved"
    assert irb_class("maybe") == ""


# ============================================================================
# Summary values
# ============================================================================


def test_last_updated_is_newest_parsable_date(records):
    assert last_updated(records) == datetime(2024, 3, 2)


def test_last_updated_none_without_dates():
    assert last_updated([Record(title="x", last_activity="garbage")]) is None


def test_collaborator_options_distinct_sorted(records):
    assert collaborator_options(records) == ["Garcia", "Kim"]


def test_month_only_date_sorts_as_first_of_month():
    month_only = Record(title="Month Only", priority="High", last_activity="March 2024")
    mid_month = Record(title="Mid March", priority="High", last_activity="2024-03-15")

    assert _titles(sort_records([month_only, mid_month])) == ["Mid March", "Month Only"]
    assert last_updated([month_only]) == datetime(2024, 3, 1)
