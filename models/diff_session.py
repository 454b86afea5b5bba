"""
Diff session model for Inkwell Review.

A diff session lives for one assistant turn: from the moment a proposed
rewrite is diffed and displayed until every change is resolved, or the user
accepts/rejects everything at once.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from .diff_types import ChangeUnit


class SessionStatus(str, Enum):
    """Lifecycle status of a diff session."""

    ACTIVE = "active"
    FINALIZED = "finalized"
    DISCARDED = "discarded"


@dataclass
class DiffSession:
    """
    State of one suggested rewrite under review.

    Attributes:
        original_text: Text the suggestion was computed against
        proposed_text: Text proposed by the assistant
        is_partial_edit: Whether the request targeted a sub-span of the document
        full_document_text: Entire document (only for partial edits)
        selection_start: Offset of the edited span in the full document
        selection_end: End offset of the edited span in the full document
        change_units: Grouped diff, in document order
        status: Lifecycle status
    """

    original_text: str
    proposed_text: str
    is_partial_edit: bool = False
    full_document_text: str = ""
    selection_start: int = 0
    selection_end: int = 0
    change_units: List[ChangeUnit] = field(default_factory=list)
    status: SessionStatus = SessionStatus.ACTIVE

    def __post_init__(self):
        """Drop the full document for whole-document edits."""
        if not self.is_partial_edit:
            self.full_document_text = ""

    @property
    def changes(self) -> List[ChangeUnit]:
        return [unit for unit in self.change_units if unit.is_change]

    @property
    def change_count(self) -> int:
        return len(self.changes)

    @property
    def unresolved_count(self) -> int:
        return sum(1 for unit in self.change_units if unit.is_pending)

    @property
    def is_active(self) -> bool:
        return self.status is SessionStatus.ACTIVE

    def find_change(self, change_id: int):
        """Return the change unit with the given id, or None."""
        for unit in self.change_units:
            if unit.is_change and unit.id == change_id:
                return unit
        return None

    def to_record(self) -> Dict[str, Any]:
        """
        Serialize to the thread-history record format.

        Returns:
            Plain dict with camelCase keys, JSON serializable
        """
        return {
            "originalContent": self.original_text,
            "originalFullContent": self.full_document_text,
            "proposedContent": self.proposed_text,
            "isSelectionEdit": self.is_partial_edit,
            "selectionStart": self.selection_start,
            "selectionEnd": self.selection_end,
            "diffChanges": [unit.to_record() for unit in self.change_units],
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "DiffSession":
        """
        Restore a session suspended with to_record().

        Raises:
            ValueError: If a required field is missing or malformed
        """
        for key in ("originalContent", "proposedContent", "diffChanges"):
            if key not in record:
                raise ValueError(f"Diff session record is missing '{key}'")
        return cls(
            original_text=record["originalContent"],
            proposed_text=record["proposedContent"],
            is_partial_edit=bool(record.get("isSelectionEdit", False)),
            full_document_text=record.get("originalFullContent") or "",
            selection_start=int(record.get("selectionStart") or 0),
            selection_end=int(record.get("selectionEnd") or 0),
            change_units=[ChangeUnit.from_record(r) for r in record["diffChanges"]],
        )
