"""
DiffEngine for word-level text comparison.

Tokenizes both texts into words and whitespace runs, diffs the token
sequences with diff-match-patch, and groups the result into change units
that the user can accept or reject one by one.
"""

import logging
import re
from typing import Dict, Iterator, List, Optional, Tuple

from diff_match_patch import diff_match_patch

from models import ChangeKind, ChangeUnit, DiffOp, DiffPart, EngineSettings
from utils.performance import monitor_performance

logger = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(r"\S+|\s+")

# Code points handed out to distinct tokens: the BMP private use area, then
# the two supplementary private use planes.
PRIVATE_USE_RANGES = (
    (0xE000, 0xF8FF),
    (0xF0000, 0xFFFFD),
    (0x100000, 0x10FFFD),
)

_OPS = {
    diff_match_patch.DIFF_DELETE: DiffOp.DELETE,
    diff_match_patch.DIFF_EQUAL: DiffOp.EQUAL,
    diff_match_patch.DIFF_INSERT: DiffOp.INSERT,
}


def tokenize(text: str) -> List[str]:
    """
    Split text into maximal runs of non-whitespace or whitespace.

    Punctuation stays attached to the word it touches. Joining the
    returned tokens gives back the input exactly.

    Args:
        text: Text to split

    Returns:
        List of tokens (empty for empty input)
    """
    return TOKEN_PATTERN.findall(text)


def _code_points() -> Iterator[str]:
    for start, end in PRIVATE_USE_RANGES:
        for code in range(start, end + 1):
            yield chr(code)


class TokenCodec:
    """
    Maps distinct tokens to single private-use characters and back.

    Equal token text always receives the same code, whichever side of the
    diff it first appeared on.
    """

    def __init__(self):
        self._codes: Dict[str, str] = {}
        self._tokens: Dict[str, str] = {}
        self._allocator = _code_points()

    def encode(self, tokens: List[str]) -> str:
        chars = []
        for token in tokens:
            code = self._codes.get(token)
            if code is None:
                code = next(self._allocator, None)
                if code is None:
                    raise ValueError("Too many distinct words to compare; please split the text")
                self._codes[token] = code
                self._tokens[code] = token
            chars.append(code)
        return "".join(chars)

    def decode(self, code: str) -> str:
        return self._tokens[code]

    def __len__(self):
        return len(self._codes)


class DiffEngine:
    """
    Word-level difference engine.

    Produces DiffPart runs (equal/delete/insert) and groups them into
    ChangeUnits carrying dense ids 0..n-1.
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        """
        Initialize DiffEngine.

        Args:
            settings: Engine settings (defaults are used when omitted)
        """
        self.settings = settings or EngineSettings()

    def _matcher(self) -> diff_match_patch:
        dmp = diff_match_patch()
        dmp.Diff_Timeout = self.settings.diff_timeout
        return dmp

    @monitor_performance("compute_word_diff")
    def compute_word_diff(self, original: str, proposed: str) -> List[DiffPart]:
        """
        Compare two texts word by word.

        Algorithm:
        - Tokenize both texts into words and whitespace runs
        - Encode each distinct token as one private-use character
        - Diff the encoded strings with diff-match-patch and apply its
          semantic cleanup
        - Decode back to token text and merge adjacent runs of the same
          operation

        Args:
            original: Original text
            proposed: Proposed replacement text

        Returns:
            Ordered diff parts; no two neighbours share an operation

        Raises:
            ValueError: If either text exceeds the configured maximum length
        """
        limit = self.settings.max_text_length
        if len(original) > limit or len(proposed) > limit:
            raise ValueError(
                f"Text is too long to compare (maximum {limit:,} characters per side)"
            )

        codec = TokenCodec()
        original_chars = codec.encode(tokenize(original))
        proposed_chars = codec.encode(tokenize(proposed))

        dmp = self._matcher()
        encoded = dmp.diff_main(original_chars, proposed_chars, False)
        dmp.diff_cleanupSemantic(encoded)

        parts: List[DiffPart] = []
        for op_code, chars in encoded:
            op = _OPS[op_code]
            for char in chars:
                token = codec.decode(char)
                if parts and parts[-1].op is op:
                    parts[-1] = DiffPart(op, parts[-1].text + token)
                else:
                    parts.append(DiffPart(op, token))

        logger.debug(
            "Word diff: %d distinct tokens, %d parts", len(codec), len(parts)
        )
        return parts

    def group_changes(self, parts: List[DiffPart]) -> List[ChangeUnit]:
        """
        Group diff parts into change units.

        Rules (left to right, ids starting at 0):
        - equal part -> its own unit with id None
        - delete immediately followed by insert -> one replacement unit
        - lone delete or lone insert -> its own unit

        Args:
            parts: Output of compute_word_diff

        Returns:
            Change units in document order
        """
        units: List[ChangeUnit] = []
        next_id = 0
        i = 0
        while i < len(parts):
            part = parts[i]
            if part.op is DiffOp.EQUAL:
                units.append(ChangeUnit(id=None, kind=ChangeKind.EQUAL, parts=[part]))
                i += 1
                continue

            unit = ChangeUnit(id=next_id, kind=ChangeKind.CHANGE, parts=[part])
            next_id += 1
            i += 1
            if (
                part.op is DiffOp.DELETE
                and i < len(parts)
                and parts[i].op is DiffOp.INSERT
            ):
                unit.parts.append(parts[i])
                i += 1
            units.append(unit)

        return units

    def diff(self, original: str, proposed: str) -> List[ChangeUnit]:
        """Compute and group the word diff in one step."""
        return self.group_changes(self.compute_word_diff(original, proposed))

    @staticmethod
    def count_changes(units: List[ChangeUnit]) -> int:
        """Number of change units (for the 'n changes suggested' badge)."""
        return sum(1 for unit in units if unit.is_change)

    @staticmethod
    def reconstruct(parts: List[DiffPart]) -> Tuple[str, str]:
        """
        Rebuild both sides of a diff.

        Returns:
            (original, proposed) reassembled from the parts
        """
        original = "".join(p.text for p in parts if p.op is not DiffOp.INSERT)
        proposed = "".join(p.text for p in parts if p.op is not DiffOp.DELETE)
        return original, proposed
