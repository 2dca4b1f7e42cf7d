"""
Add-on selection types.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, auto

from cartflow.pricing import AddOn

# ═══════════════════════════════════════════════════════════════════════════════
# Selection
# ═══════════════════════════════════════════════════════════════════════════════

type Selection = tuple[AddOn, ...]
"""Add-ons chosen in one group, in the order they were picked."""


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class SelectionErrorKind(Enum):
    """Why a selection change was refused."""

    BELOW_MINIMUM = auto()  # Removal would break a required group
    ABOVE_MAXIMUM = auto()  # Group is full and not radio-style
    UNAVAILABLE = auto()  # Add-on marked unavailable
    UNKNOWN = auto()  # Add-on does not belong to the group


@dataclass(frozen=True, slots=True)
class SelectionError:
    """Refused selection change. The selection it came from is untouched."""

    group_id: str
    kind: SelectionErrorKind
    message: str


# ═══════════════════════════════════════════════════════════════════════════════
# Outcomes
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ToggleOutcome:
    """
    Result of toggling one add-on.

    selection is the new selection, or the unchanged one when error is set.
    """

    selection: Selection
    error: SelectionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class GroupValidation:
    """Outcome of checking every group before an item goes into the cart."""

    valid: bool
    errors_by_group: Mapping[str, SelectionError] = field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Selection",
    "SelectionErrorKind",
    "SelectionError",
    "ToggleOutcome",
    "GroupValidation",
)
