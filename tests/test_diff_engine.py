"""
Unit tests for DiffEngine.

Tests specific examples, edge cases, and error conditions.
"""

import pytest
from models import ChangeKind, DiffOp, DiffPart, EngineSettings
from services import DiffEngine, tokenize
from services.diff_engine import TokenCodec


class TestTokenize:
    """Test word/whitespace tokenization."""

    def test_words_and_spaces(self):
        """Test words and spaces become separate tokens."""
        assert tokenize("hello  big\nworld") == ["hello", "  ", "big", "\n", "world"]

    def test_punctuation_stays_attached(self):
        """Test punctuation stays on its word."""
        assert tokenize("Hello, world.") == ["Hello,", " ", "world."]

    def test_empty(self):
        """Test tokenizing an empty string."""
        assert tokenize("") == []

    def test_leading_and_trailing_whitespace(self):
        """Test leading and trailing whitespace tokens."""
        tokens = tokenize("  a b \n")
        assert tokens == ["  ", "a", " ", "b", " \n"]
        assert "".join(tokens) == "  a b \n"


class TestTokenCodec:
    """Test token to code point mapping."""

    def test_same_token_same_code(self):
        """Test equal tokens share a code."""
        codec = TokenCodec()
        first = codec.encode(["a", " ", "b"])
        second = codec.encode(["b", " ", "a"])
        assert first[0] == second[2]
        assert first[1] == second[1]
        assert len(codec) == 3

    def test_codes_are_private_use(self):
        """Test codes come from the private use area."""
        codec = TokenCodec()
        code = codec.encode(["word"])
        assert 0xE000 <= ord(code) <= 0xF8FF
        assert codec.decode(code) == "word"


class TestDiffEngineBasic:
    """Test basic diff functionality."""

    def test_insertion(self):
        """Insertion keeps the surrounding words equal."""
        engine = DiffEngine()
        parts = engine.compute_word_diff("hello world", "hello beautiful world")

        assert parts == [
            DiffPart(DiffOp.EQUAL, "hello "),
            DiffPart(DiffOp.INSERT, "beautiful "),
            DiffPart(DiffOp.EQUAL, "world"),
        ]

        units = engine.group_changes(parts)
        assert [u.id for u in units] == [None, 0, None]
        assert [u.kind for u in units] == [ChangeKind.EQUAL, ChangeKind.CHANGE, ChangeKind.EQUAL]
        assert [p.op for p in units[1].parts] == [DiffOp.INSERT]

    def test_replacement(self):
        """Delete followed by insert is one change."""
        engine = DiffEngine()
        parts = engine.compute_word_diff("hello world", "hello universe")

        assert parts == [
            DiffPart(DiffOp.EQUAL, "hello "),
            DiffPart(DiffOp.DELETE, "world"),
            DiffPart(DiffOp.INSERT, "universe"),
        ]

        units = engine.group_changes(parts)
        assert len(units) == 2
        assert units[1].id == 0
        assert units[1].deleted_text == "world"
        assert units[1].inserted_text == "universe"

    def test_multiple_changes_ids_in_order(self):
        """Test change ids follow document order."""
        engine = DiffEngine()
        units = engine.diff("one two three four five", "one TWO three four FIVE")

        changes = [u for u in units if u.is_change]
        assert [u.id for u in changes] == [0, 1]
        assert changes[0].deleted_text == "two"
        assert changes[0].inserted_text == "TWO"
        assert changes[1].deleted_text == "five"
        assert changes[1].inserted_text == "FIVE"

    def test_punctuation_change_replaces_whole_token(self):
        """Test a punctuation change replaces the whole word."""
        engine = DiffEngine()
        units = engine.diff("Hello, world.", "Hello, world!")

        changes = [u for u in units if u.is_change]
        assert len(changes) == 1
        assert changes[0].deleted_text == "world."
        assert changes[0].inserted_text == "world!"

    def test_whitespace_is_diffed(self):
        """Test whitespace changes are reported."""
        engine = DiffEngine()
        parts = engine.compute_word_diff("a b", "a  b")

        assert parts == [
            DiffPart(DiffOp.EQUAL, "a"),
            DiffPart(DiffOp.DELETE, " "),
            DiffPart(DiffOp.INSERT, "  "),
            DiffPart(DiffOp.EQUAL, "b"),
        ]

    def test_fully_rewritten_text_is_one_change(self):
        """Single shared spaces do not split a rewrite into pieces."""
        engine = DiffEngine()
        units = engine.diff("a b c", "x y z")

        assert len(units) == 1
        assert units[0].deleted_text == "a b c"
        assert units[0].inserted_text == "x y z"

    def test_adjacent_parts_never_share_an_operation(self):
        """Test same-operation parts are merged."""
        engine = DiffEngine()
        parts = engine.compute_word_diff(
            "The cat sat on the mat today.",
            "A dog lay on the old mat yesterday.",
        )
        for left, right in zip(parts, parts[1:]):
            assert left.op is not right.op


class TestDiffEngineEdgeCases:
    """Test edge cases."""

    def test_both_empty(self):
        """Test with both texts empty."""
        engine = DiffEngine()
        assert engine.compute_word_diff("", "") == []
        assert engine.diff("", "") == []

    def test_identical_text(self):
        """Test diff of identical text."""
        engine = DiffEngine()
        parts = engine.compute_word_diff("Hello world", "Hello world")
        assert parts == [DiffPart(DiffOp.EQUAL, "Hello world")]
        assert engine.count_changes(engine.group_changes(parts)) == 0

    def test_empty_original(self):
        """Test with an empty original."""
        engine = DiffEngine()
        parts = engine.compute_word_diff("", "hello world")
        assert parts == [DiffPart(DiffOp.INSERT, "hello world")]

    def test_empty_proposed(self):
        """Test with an empty proposal."""
        engine = DiffEngine()
        parts = engine.compute_word_diff("hello", "")
        assert parts == [DiffPart(DiffOp.DELETE, "hello")]

        units = engine.group_changes(parts)
        assert len(units) == 1
        assert units[0].id == 0
        assert units[0].is_change
        assert units[0].inserted_text == ""

    def test_unicode_text(self):
        """Test with non-ASCII text."""
        engine = DiffEngine()
        units = engine.diff("你好 世界", "你好 朋友")
        changes = [u for u in units if u.is_change]
        assert len(changes) == 1
        assert changes[0].deleted_text == "世界"
        assert changes[0].inserted_text == "朋友"

    def test_text_over_limit_raises(self):
        """Test text over the length limit is rejected."""
        engine = DiffEngine(EngineSettings(max_text_length=10))
        with pytest.raises(ValueError, match="too long"):
            engine.compute_word_diff("a" * 11, "b")

    def test_text_at_limit_is_accepted(self):
        """Test text at the length limit is accepted."""
        engine = DiffEngine(EngineSettings(max_text_length=10))
        assert engine.compute_word_diff("a" * 10, "a" * 10) == [DiffPart(DiffOp.EQUAL, "a" * 10)]


class TestGroupChanges:
    """Test grouping of raw parts."""

    def test_lone_delete_then_insert_elsewhere(self):
        """Test a deletion and a separate insertion are two changes."""
        engine = DiffEngine()
        parts = [
            DiffPart(DiffOp.DELETE, "x"),
            DiffPart(DiffOp.EQUAL, " "),
            DiffPart(DiffOp.INSERT, "y"),
        ]
        units = engine.group_changes(parts)

        assert [u.id for u in units] == [0, None, 1]
        assert [p.op for p in units[0].parts] == [DiffOp.DELETE]
        assert [p.op for p in units[2].parts] == [DiffOp.INSERT]

    def test_insert_before_delete_is_two_changes(self):
        """Test an insertion followed by a deletion is two changes."""
        engine = DiffEngine()
        parts = [DiffPart(DiffOp.INSERT, "new"), DiffPart(DiffOp.DELETE, "old")]
        units = engine.group_changes(parts)
        assert [u.id for u in units] == [0, 1]

    def test_empty(self):
        """Test grouping no parts."""
        assert DiffEngine().group_changes([]) == []


class TestReconstruct:
    """Test rebuilding both sides."""

    def test_reconstruct(self):
        """Test rebuilding both texts from parts."""
        engine = DiffEngine()
        original = "The quick brown fox\n\njumps over the dog."
        proposed = "The slow brown fox\n\nleaps over the lazy dog!"
        parts = engine.compute_word_diff(original, proposed)
        assert engine.reconstruct(parts) == (original, proposed)
