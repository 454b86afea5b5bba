"""
Validation utilities for diff data.

Checks sentinel marker balance and the invariants of grouped change units.
Validators return (is_valid, error_message) tuples.
"""

import re
from typing import List, Tuple

from models import DiffOp

_OPEN_MARKER_RE = re.compile(r"\x00(DEL|INS)\d+\x00")
_CLOSE_MARKER_RE = re.compile(r"\x00/(DEL|INS)\x00")


def validate_marker_balance(text: str) -> Tuple[bool, str]:
    """
    Validate that every DEL/INS sentinel marker is closed.

    Args:
        text: Markdown with sentinel markers

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not text or "\x00" not in text:
        return True, ""

    errors = []
    for name in ("DEL", "INS"):
        opened = sum(1 for m in _OPEN_MARKER_RE.finditer(text) if m.group(1) == name)
        closed = sum(1 for m in _CLOSE_MARKER_RE.finditer(text) if m.group(1) == name)
        if opened != closed:
            errors.append(f"{name} markers unbalanced: {opened} opened, {closed} closed")

    if errors:
        return False, "; ".join(errors)
    return True, ""


def validate_change_units(units: List) -> Tuple[bool, str]:
    """
    Validate grouped change units.

    Checks:
    - change ids are exactly 0..n-1 in document order
    - equal units have no id and a single equal part
    - a change holds at most one delete followed by at most one insert
    - accepted and rejected are never both set, and only on resolved units

    Args:
        units: ChangeUnit list

    Returns:
        Tuple of (is_valid, error_message)
    """
    expected_id = 0
    for position, unit in enumerate(units):
        if not unit.is_change:
            if unit.id is not None:
                return False, f"Equal unit at position {position} has id {unit.id}"
            if len(unit.parts) != 1 or unit.parts[0].op is not DiffOp.EQUAL:
                return False, f"Equal unit at position {position} must hold one equal part"
            continue

        if unit.id != expected_id:
            return False, f"Change at position {position} has id {unit.id}, expected {expected_id}"
        expected_id += 1

        ops = [part.op for part in unit.parts]
        if ops not in ([DiffOp.DELETE], [DiffOp.INSERT], [DiffOp.DELETE, DiffOp.INSERT]):
            return False, f"Change {unit.id} has invalid parts: {[op.value for op in ops]}"

        if unit.accepted and unit.rejected:
            return False, f"Change {unit.id} is both accepted and rejected"
        if (unit.accepted or unit.rejected) != unit.resolved:
            return False, f"Change {unit.id} has inconsistent resolution flags"

    return True, ""
