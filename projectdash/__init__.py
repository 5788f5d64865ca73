"""ProjectDash - research project dashboard.

Loads project records from an embedded payload, a JSON document,
a published spreadsheet export, or a local CSV file (first that
works wins) and renders them as filterable, sorted cards.
"""

__version__ = "1.0.0"

from projectdash.config import Settings
from projectdash.models.record import Record

__all__ = ["Record", "Settings", "__version__"]
