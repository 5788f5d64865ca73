"""Shared helper functions for project filtering, sorting, and CSS classes."""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from projectdash.models.record import Record
from projectdash.utils.text import parse_date

STATUS_OPTIONS = [
    "Idea",
    "Research Design",
    "Data Collected",
    "Data Analyzed",
    "Writing",
    "Submitted",
]

PRIORITY_OPTIONS = ["High", "Medium", "Low"]

PRIORITY_RANK = {"High": 0, "Medium": 1, "Low": 2}
UNSET_PRIORITY_RANK = 3

IRB_OPTIONS = {
    "approved": "Approved",
    "pending": "Pending",
    "not-needed": "Not needed / N/A",
}

_STATUS_CLASSES = {
    "idea": "status-idea",
    "research design": "status-design",
    "data collected": "status-collected",
    "data analyzed": "status-analyzed",
    "writing": "status-writing",
    "submitted": "status-submitted",
}

# Sort key for unparsable or missing dates: older than any real date
_OLDEST = datetime.min


@dataclass(frozen=True)
class FilterCriteria:
    """Active filter values; an empty string means the filter is off."""

    search: str = ""
    status: str = ""
    priority: str = ""
    irb: str = ""
    collaborator: str = ""

    @property
    def is_empty(self) -> bool:
        return not any((self.search, self.status, self.priority, self.irb, self.collaborator))


# ============================================================================
# Classification
# ============================================================================


def classify_irb(irb_status: Optional[str]) -> str:
    """Classify free-text IRB status into 'approved', 'pending', 'not-needed' or ''."""
    s = (irb_status or "").lower()
    if "approved" in s:
        return "approved"
    if "pending" in s:
        return "pending"
    if "not needed" in s or s == "n/a" or s == "na":
        return "not-needed"
    return ""


def status_class(status: Optional[str]) -> str:
    return _STATUS_CLASSES.get((status or "").lower(), "")


def priority_class(priority: Optional[str]) -> str:
    p = (priority or "").lower()
    if p in ("high", "medium", "low"):
        return f"priority-{p}"
    return ""


def irb_class(irb_status: Optional[str]) -> str:
    kind = classify_irb(irb_status)
    return f"irb-{'na' if kind == 'not-needed' else kind}" if kind else ""


def priority_rank(priority: Optional[str]) -> int:
    return PRIORITY_RANK.get(priority or "", UNSET_PRIORITY_RANK)


def recency(record: Record) -> Optional[datetime]:
    """Parsed last-activity date, falling back to the creation timestamp."""
    return parse_date(record.recency_source)


# ============================================================================
# Filtering
# ============================================================================


def search_text(record: Record) -> str:
    """Lower-cased text the free-text search runs over."""
    return " ".join(
        (record.title, record.abstract, record.keywords, record.coauthors, record.collaborator)
    ).lower()


def matches(record: Record, criteria: FilterCriteria) -> bool:
    """Return True when *record* passes every active filter."""
    if criteria.search and criteria.search.lower() not in search_text(record):
        return False
    if criteria.status and record.status != criteria.status:
        return False
    if criteria.priority and record.priority != criteria.priority:
        return False
    if criteria.irb and classify_irb(record.irb_status) != criteria.irb:
        return False
    if criteria.collaborator and record.collaborator != criteria.collaborator:
        return False
    return True


def filter_records(records: Iterable[Record], criteria: FilterCriteria) -> list[Record]:
    """Filter records by the conjunction of all active criteria."""
    if criteria.is_empty:
        return list(records)
    return [r for r in records if matches(r, criteria)]


# ============================================================================
# Sorting
# ============================================================================


def sort_records(records: Iterable[Record]) -> list[Record]:
    """Sort by priority (High first), then by recency (newest first).

    Records whose date is missing or unparsable count as the oldest;
    ties keep their input order.

    Returns:
        A new sorted list
    """
    ordered = sorted(records, key=lambda r: recency(r) or _OLDEST, reverse=True)
    ordered.sort(key=lambda r: priority_rank(r.priority))
    return ordered


def last_updated(records: Iterable[Record]) -> Optional[datetime]:
    """Most recent parsable activity date across *records*."""
    dates = [d for d in (recency(r) for r in records) if d is not None]
    return max(dates) if dates else None


def collaborator_options(records: Iterable[Record]) -> list[str]:
    """Distinct collaborator values for the optional dropdown."""
    return sorted({r.collaborator for r in records if r.collaborator})
