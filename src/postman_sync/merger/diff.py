"""Human-facing change summary between two collection versions.

Endpoints are identified by display path (``Folder/Request name``) here,
not by endpoint key: this is a report, not a matching mechanism.
"""

from postman_sync.collection import display_paths
from postman_sync.models import DiffReport


def calculate_diff(previous: dict | None, merged: dict) -> DiffReport:
    """Report endpoints added, removed and preserved by a merge."""
    previous_paths = display_paths((previous or {}).get("item", []))
    merged_paths = display_paths(merged.get("item", []))
    previous_set = set(previous_paths)
    merged_set = set(merged_paths)

    return DiffReport(
        added=_unique(p for p in merged_paths if p not in previous_set),
        removed=_unique(p for p in previous_paths if p not in merged_set),
        preserved=_unique(p for p in merged_paths if p in previous_set),
    )


def _unique(paths) -> list[str]:
    return list(dict.fromkeys(paths))
