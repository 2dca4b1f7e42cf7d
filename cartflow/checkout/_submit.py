"""
Submission graph — one order per (session, cart fingerprint).

    Submission (injected)
         │
         ▼
    LookupNode ──────────────┬──────────────┬──────────────┐
         │                   │              │              │
         ▼                   ▼              ▼              ▼
    CompletedNode       PendingNode     FreshNode     LedgerFailureNode
         │                   │              │              │
         └───────────────────┴──── SubmissionOutcome ──────┘
                                     (@polymorphic)
                                          │
                                          ▼
                                     DecisionNode

Each state node raises NodeError unless its own state holds, so exactly
one outcome case resolves.

Type hints are read at runtime by nodnod for dependency resolution, so
this module does not use postponed annotations.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta

from nodnod import NodeError, polymorphic, case

from kungfu import Result, Ok, Error

from cartflow import graph as G
from cartflow.checkout._types import CheckoutFailure, CheckoutFailureKind
from cartflow.checkout._placement import Placement
from cartflow.checkout._ledger import (
    EntryState,
    LedgerEntry,
    LedgerError,
    SubmissionLedger,
)

logger = logging.getLogger(__name__)

IN_PROGRESS = "This order is already being placed. Please wait."


# ═══════════════════════════════════════════════════════════════════════════════
# Input
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Submission:
    key: str
    place: Callable[[], Awaitable[Result[Placement, CheckoutFailure]]]
    ledger: SubmissionLedger
    ttl: timedelta | None = None


@dataclass(frozen=True, slots=True)
class Submitted:
    placement: Placement
    from_cache: bool
    key: str


# ═══════════════════════════════════════════════════════════════════════════════
# Lookup
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class LookupNode:
    """Reads the ledger entry for the submission key."""

    def __init__(
        self,
        submission: Submission,
        entry: LedgerEntry | None,
        error: LedgerError | None = None,
    ) -> None:
        self.submission = submission
        self.entry = entry
        self.error = error

    @classmethod
    async def __compose__(cls, submission: Submission) -> "LookupNode":
        match await submission.ledger.get(submission.key):
            case Ok(entry):
                return cls(submission, entry)
            case Error(err):
                return cls(submission, None, error=err)


# ═══════════════════════════════════════════════════════════════════════════════
# State Nodes
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class CompletedNode:
    """Entry exists and the order was created."""

    def __init__(self, submission: Submission, placement: Placement) -> None:
        self.submission = submission
        self.placement = placement

    @classmethod
    def __compose__(cls, lookup: LookupNode) -> "CompletedNode":
        entry = lookup.entry
        if entry is None or entry.state is not EntryState.COMPLETED:
            raise NodeError("Not completed")
        if entry.placement is None:
            raise NodeError("Completed without placement")
        return cls(lookup.submission, entry.placement)


@G.node
class PendingNode:
    """Entry exists and its submission has not finished."""

    def __init__(self, submission: Submission) -> None:
        self.submission = submission

    @classmethod
    def __compose__(cls, lookup: LookupNode) -> "PendingNode":
        entry = lookup.entry
        if entry is None or entry.state is not EntryState.PENDING:
            raise NodeError("Not pending")
        return cls(lookup.submission)


@G.node
class FreshNode:
    """No entry: this submission has never been placed."""

    def __init__(self, submission: Submission) -> None:
        self.submission = submission

    @classmethod
    def __compose__(cls, lookup: LookupNode) -> "FreshNode":
        if lookup.error is not None:
            raise NodeError("Ledger error")
        if lookup.entry is not None:
            raise NodeError("Entry exists")
        return cls(lookup.submission)


@G.node
class LedgerFailureNode:
    def __init__(self, error: LedgerError) -> None:
        self.error = error

    @classmethod
    def __compose__(cls, lookup: LookupNode) -> "LedgerFailureNode":
        if lookup.error is None:
            raise NodeError("No ledger error")
        return cls(lookup.error)


# ═══════════════════════════════════════════════════════════════════════════════
# Outcome
# ═══════════════════════════════════════════════════════════════════════════════


type Outcome = Submitted | CheckoutFailure


def _order_failed(message: str) -> CheckoutFailure:
    return CheckoutFailure(CheckoutFailureKind.ORDER_FAILED, message)


@polymorphic[Outcome]
class SubmissionOutcome:
    @case
    def cached(cls, node: CompletedNode) -> Outcome:
        """Retry of a submission that already created an order."""
        logger.info("Order %s already placed, returning it", node.placement.created.order_number)
        return Submitted(node.placement, from_cache=True, key=node.submission.key)

    @case
    def in_progress(cls, node: PendingNode) -> Outcome:
        logger.warning("Submission %s still pending", node.submission.key)
        return _order_failed(IN_PROGRESS)

    @case
    def ledger_failure(cls, node: LedgerFailureNode) -> Outcome:
        return _order_failed(node.error.message)

    @case
    async def place(cls, node: FreshNode) -> Outcome:
        submission = node.submission
        ledger = submission.ledger

        match await ledger.set_pending(submission.key, submission.ttl):
            case Error(err):
                return _order_failed(err.message)
            case Ok(False):
                return _order_failed(IN_PROGRESS)
            case Ok(True):
                pass

        try:
            result = await submission.place()
        except Exception:
            await ledger.delete(submission.key)
            raise

        match result:
            case Ok(placement):
                match await ledger.set_completed(submission.key, placement, submission.ttl):
                    case Error(err):
                        # The order exists; only the retry shortcut is lost.
                        logger.warning("Ledger not updated for %s: %s", submission.key, err.message)
                    case Ok(_):
                        pass
                return Submitted(placement, from_cache=False, key=submission.key)
            case Error(failure):
                await ledger.delete(submission.key)
                return failure


# ═══════════════════════════════════════════════════════════════════════════════
# Decision
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class DecisionNode:
    def __init__(self, outcome: Outcome) -> None:
        self.outcome = outcome

    @classmethod
    def __compose__(cls, outcome: SubmissionOutcome) -> "DecisionNode":
        return cls(outcome.value)

    def to_result(self) -> Result[Submitted, CheckoutFailure]:
        match self.outcome:
            case Submitted() as submitted:
                return Ok(submitted)
            case CheckoutFailure() as failure:
                return Error(failure)


async def submit_once(submission: Submission) -> Result[Submitted, CheckoutFailure]:
    """Place the order unless this exact submission already succeeded."""
    node = await G.run(DecisionNode).inject(submission)
    return node.to_result()


__all__ = (
    "IN_PROGRESS",
    "Submission",
    "Submitted",
    "LookupNode",
    "CompletedNode",
    "PendingNode",
    "FreshNode",
    "LedgerFailureNode",
    "Outcome",
    "SubmissionOutcome",
    "DecisionNode",
    "submit_once",
)
