"""
Add-ons — per-group selection constraints.

    from cartflow import addons as A

    outcome = A.toggle(group, current, candidate)
    check = A.validate_all(item.add_on_groups, selections)
    if not check.valid:
        for group_id, err in check.errors_by_group.items():
            ...
"""

from cartflow.addons._types import (
    Selection,
    SelectionErrorKind,
    SelectionError,
    ToggleOutcome,
    GroupValidation,
)
from cartflow.addons._validate import (
    toggle,
    validate_all,
    default_selection,
)

__all__ = (
    "Selection",
    "SelectionErrorKind",
    "SelectionError",
    "ToggleOutcome",
    "GroupValidation",
    "toggle",
    "validate_all",
    "default_selection",
)
