"""
Diff data model for Inkwell Review.

Defines the raw word-diff parts and the grouped, independently resolvable
change units shown to the user.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class DiffOp(str, Enum):
    """Operation of a single diff part."""

    DELETE = "delete"
    EQUAL = "equal"
    INSERT = "insert"

    @classmethod
    def from_code(cls, value: Any) -> "DiffOp":
        """
        Map a stored part type back to a DiffOp.

        Accepts the enum value strings as well as the numeric codes used
        by diff-match-patch (-1 delete, 0 equal, 1 insert).
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return _OP_BY_CODE[value]
            except KeyError:
                raise ValueError(f"Unknown diff operation code: {value}")
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown diff operation: {value!r}")


_OP_BY_CODE = {-1: DiffOp.DELETE, 0: DiffOp.EQUAL, 1: DiffOp.INSERT}


class ChangeKind(str, Enum):
    """Kind of a grouped change unit."""

    EQUAL = "equal"
    CHANGE = "change"


class Decision(str, Enum):
    """User decision for a change unit."""

    ACCEPT = "accept"
    REJECT = "reject"

    @classmethod
    def parse(cls, value: Any) -> "Decision":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Invalid decision: {value!r}. Must be 'accept' or 'reject'")


@dataclass(frozen=True)
class DiffPart:
    """
    One equal/delete/insert run of the word-level diff.

    Attributes:
        op: Operation of the run
        text: Concatenated token text of the run
    """

    op: DiffOp
    text: str

    def to_record(self) -> Dict[str, Any]:
        return {"type": self.op.value, "text": self.text}

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "DiffPart":
        if "type" not in record or "text" not in record:
            raise ValueError(f"Diff part record is missing 'type' or 'text': {record!r}")
        return cls(op=DiffOp.from_code(record["type"]), text=str(record["text"]))


@dataclass
class ChangeUnit:
    """
    A grouped diff edit, or a run of unchanged text.

    Attributes:
        id: Change id (None for equal units, 0..n-1 for changes)
        kind: EQUAL or CHANGE
        parts: Diff parts; a change holds at most one delete then at most
            one insert
        resolved: Whether the user has decided on this change
        accepted: Change was accepted
        rejected: Change was rejected
    """

    id: Optional[int]
    kind: ChangeKind
    parts: List[DiffPart] = field(default_factory=list)
    resolved: bool = False
    accepted: bool = False
    rejected: bool = False

    @property
    def is_change(self) -> bool:
        return self.kind is ChangeKind.CHANGE

    @property
    def is_pending(self) -> bool:
        return self.is_change and not self.resolved

    @property
    def deleted_text(self) -> str:
        """Text removed by this unit (empty for pure insertions)."""
        return "".join(p.text for p in self.parts if p.op is DiffOp.DELETE)

    @property
    def inserted_text(self) -> str:
        """Text added by this unit (empty for pure deletions)."""
        return "".join(p.text for p in self.parts if p.op is DiffOp.INSERT)

    @property
    def text(self) -> str:
        """Unchanged text of an equal unit."""
        return "".join(p.text for p in self.parts if p.op is DiffOp.EQUAL)

    def resolve(self, decision: Decision) -> bool:
        """
        Record a decision on a pending change.

        Returns:
            False when the unit is not a change or is already resolved.
        """
        if not self.is_pending:
            return False
        self.resolved = True
        self.accepted = decision is Decision.ACCEPT
        self.rejected = decision is Decision.REJECT
        return True

    def resolved_text(self) -> str:
        """Text this unit contributes once the user has decided on it."""
        if not self.is_change:
            return self.text
        if self.accepted:
            return self.inserted_text
        return self.deleted_text

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.kind.value,
            "parts": [part.to_record() for part in self.parts],
            "resolved": self.resolved,
            "accepted": self.accepted,
            "rejected": self.rejected,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "ChangeUnit":
        for key in ("id", "type", "parts"):
            if key not in record:
                raise ValueError(f"Change record is missing '{key}': {record!r}")
        try:
            kind = ChangeKind(record["type"])
        except ValueError:
            raise ValueError(f"Unknown change type: {record['type']!r}")
        return cls(
            id=record["id"],
            kind=kind,
            parts=[DiffPart.from_record(p) for p in record["parts"]],
            resolved=bool(record.get("resolved", False)),
            accepted=bool(record.get("accepted", False)),
            rejected=bool(record.get("rejected", False)),
        )
