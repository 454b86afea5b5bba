"""
ResolutionEngine for accepting and rejecting suggested changes.

Applies per-change and bulk decisions to a DiffSession, finalizes it once
nothing is pending, and turns the decisions back into plain text.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from models import Decision, DiffSession, SessionStatus
from utils.performance import monitor_performance

logger = logging.getLogger(__name__)


def locate_span(document: str, span: str, hint: Optional[int] = None) -> Optional[int]:
    """
    Find where an edited span sits in the full document.

    The recorded selection offset wins when the span is still there;
    otherwise the first exact occurrence is used.

    Returns:
        Start offset, or None if the span no longer occurs in the document
    """
    if hint is not None and 0 <= hint <= len(document) and document.startswith(span, hint):
        return hint
    index = document.find(span)
    return index if index != -1 else None


def splice_span(document: str, span: str, replacement: str, hint: Optional[int] = None) -> str:
    """
    Replace an edited span inside the full document.

    If the span can't be found (the document changed underneath), the
    replacement is returned on its own.
    """
    index = locate_span(document, span, hint)
    if index is None:
        logger.info("Edited span not found in document; using the span text unanchored")
        return replacement
    if index != hint:
        logger.info("Edited span relocated by first occurrence at offset %d", index)
    return document[:index] + replacement + document[index + len(span):]


@dataclass
class ResolutionOutcome:
    """
    Result of a resolution request.

    Attributes:
        applied: Whether the request changed any unit
        unresolved: Changes still pending afterwards
        status: Session status afterwards
        final_text: Full document text once the session is finalized or
            discarded, else None
    """

    applied: bool
    unresolved: int
    status: SessionStatus
    final_text: Optional[str] = None

    @property
    def is_done(self) -> bool:
        return self.status is not SessionStatus.ACTIVE


class ResolutionEngine:
    """
    Resolves the change units of one diff session.

    Per change: pending -> accepted | rejected (terminal).
    Per session: active -> finalized when the last change is resolved or
    everything is accepted; active -> discarded on reject-all or cancel.
    """

    def __init__(self, session: DiffSession):
        self.session = session

    def _outcome(self, applied: bool, final_text: Optional[str] = None) -> ResolutionOutcome:
        return ResolutionOutcome(
            applied=applied,
            unresolved=self.session.unresolved_count,
            status=self.session.status,
            final_text=final_text,
        )

    def resolve_one(self, change_id: int, decision) -> ResolutionOutcome:
        """
        Accept or reject a single change.

        Unknown ids, already resolved changes and finished sessions are
        ignored, so duplicate UI events are harmless. Resolving the last
        pending change finalizes the session.

        Args:
            change_id: Id of the change unit
            decision: Decision or 'accept'/'reject'

        Returns:
            ResolutionOutcome (final_text set when the session finalized)
        """
        decision = Decision.parse(decision)
        if not self.session.is_active:
            return self._outcome(False)

        unit = self.session.find_change(change_id)
        if unit is None or not unit.resolve(decision):
            logger.debug("Ignoring %s for unknown or resolved change %r", decision.value, change_id)
            return self._outcome(False)

        if self.session.unresolved_count == 0:
            return self._outcome(True, self.finalize())
        return self._outcome(True)

    def resolve_all(self, decision) -> ResolutionOutcome:
        """
        Apply one decision to every pending change.

        Accepting finalizes with the per-change decisions (changes rejected
        earlier stay rejected). Rejecting discards the session and hands
        back the pre-diff document.
        """
        decision = Decision.parse(decision)
        if not self.session.is_active:
            return self._outcome(False)

        applied = False
        for unit in self.session.change_units:
            applied = unit.resolve(decision) or applied

        if decision is Decision.REJECT:
            return self._outcome(applied, self.discard())
        return self._outcome(applied, self.finalize())

    def cancel(self) -> ResolutionOutcome:
        """Drop the session without applying any decision."""
        if not self.session.is_active:
            return self._outcome(False)
        return self._outcome(True, self.discard())

    def resolved_span_text(self) -> str:
        """
        Text of the edited span under the current decisions.

        Equal units give their text, accepted changes their inserted text,
        rejected and still-pending changes their deleted text.
        """
        return "".join(unit.resolved_text() for unit in self.session.change_units)

    def current_text(self) -> str:
        """Full document text under the current decisions."""
        return self._place(self.resolved_span_text())

    def pre_diff_text(self) -> str:
        """Document as it was before the suggestion."""
        if self.session.is_partial_edit and self.session.full_document_text:
            return self.session.full_document_text
        return self.session.original_text

    def _place(self, span_text: str) -> str:
        session = self.session
        if not session.is_partial_edit:
            return span_text
        return splice_span(
            session.full_document_text,
            session.original_text,
            span_text,
            session.selection_start,
        )

    @monitor_performance("finalize_session")
    def finalize(self) -> str:
        """
        Turn the resolved session into plain document text.

        Returns:
            Final document text (spliced into the full document for
            partial edits)
        """
        text = self._place(self.resolved_span_text())
        self.session.status = SessionStatus.FINALIZED
        logger.info(
            "Diff session finalized: %d accepted, %d rejected",
            sum(1 for u in self.session.changes if u.accepted),
            sum(1 for u in self.session.changes if u.rejected),
        )
        return text

    def discard(self) -> str:
        """Mark the session discarded and return the pre-diff document."""
        self.session.status = SessionStatus.DISCARDED
        logger.info("Diff session discarded")
        return self.pre_diff_text()
