"""
Add-on selection rules — evaluated on demand, nothing persisted.

toggle() applies the per-group rules in a fixed order:

    1. selected + required + removal drops below min  → BELOW_MINIMUM
    2. selected                                       → remove
    3. not selected + group full + max == 1           → replace (radio)
       not selected + group full                      → ABOVE_MAXIMUM
    4. otherwise                                      → append
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from cartflow.pricing import AddOn, AddOnGroup
from cartflow.addons._types import (
    Selection,
    SelectionError,
    SelectionErrorKind,
    ToggleOutcome,
    GroupValidation,
)


def _contains(selection: Selection, add_on_id: str) -> bool:
    return any(chosen.id == add_on_id for chosen in selection)


def _below_minimum(group: AddOnGroup) -> SelectionError:
    return SelectionError(
        group.id,
        SelectionErrorKind.BELOW_MINIMUM,
        f"{group.name}: must select at least {group.min_selection}",
    )


def _above_maximum(group: AddOnGroup) -> SelectionError:
    return SelectionError(
        group.id,
        SelectionErrorKind.ABOVE_MAXIMUM,
        f"{group.name}: can only select up to {group.max_selection}",
    )


# ═══════════════════════════════════════════════════════════════════════════════
# toggle()
# ═══════════════════════════════════════════════════════════════════════════════


def toggle(group: AddOnGroup, current: Selection, candidate: AddOn) -> ToggleOutcome:
    """
    Select or deselect `candidate` within `group`.

    Example:
        outcome = toggle(crust, (thin,), pan)   # max 1 → (pan,)
        if outcome.error:
            show(outcome.error.message)
    """
    if _contains(current, candidate.id):
        if group.required and len(current) - 1 < group.min_selection:
            return ToggleOutcome(current, _below_minimum(group))
        return ToggleOutcome(tuple(c for c in current if c.id != candidate.id))

    if group.find(candidate.id) is None:
        return ToggleOutcome(
            current,
            SelectionError(
                group.id,
                SelectionErrorKind.UNKNOWN,
                f"{candidate.name} is not part of {group.name}",
            ),
        )

    if not candidate.available:
        return ToggleOutcome(
            current,
            SelectionError(
                group.id,
                SelectionErrorKind.UNAVAILABLE,
                f"{candidate.name} is currently unavailable",
            ),
        )

    if len(current) >= group.max_selection:
        if group.max_selection == 1:
            return ToggleOutcome((candidate,))
        return ToggleOutcome(current, _above_maximum(group))

    return ToggleOutcome((*current, candidate))


# ═══════════════════════════════════════════════════════════════════════════════
# validate_all()
# ═══════════════════════════════════════════════════════════════════════════════


def validate_all(
    groups: Iterable[AddOnGroup],
    selections_by_group: Mapping[str, Selection],
) -> GroupValidation:
    """
    Final gate before an item leaves customization.

    Every group is checked on its own; one bad group does not hide another.
    """
    errors: dict[str, SelectionError] = {}
    for group in groups:
        chosen = selections_by_group.get(group.id, ())
        if group.required and len(chosen) < group.min_selection:
            errors[group.id] = _below_minimum(group)
        elif len(chosen) > group.max_selection:
            errors[group.id] = _above_maximum(group)
    return GroupValidation(valid=not errors, errors_by_group=errors)


def default_selection(group: AddOnGroup) -> Selection:
    """Add-ons flagged as default and available, capped at max_selection."""
    defaults = [a for a in group.add_ons if a.is_default and a.available]
    return tuple(defaults[: group.max_selection])


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("toggle", "validate_all", "default_selection")
