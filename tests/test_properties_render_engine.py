"""
Property-based tests for diff rendering.

Tests that change ids and their text survive the marker codec and the
markdown conversion in between.
"""

import re

from hypothesis import given, strategies as st, settings
from models import DiffOp
from services import DiffEngine, RenderEngine
from services.diff_markers import (
    build_diff_markdown,
    extract_change_spans,
    markers_to_placeholders,
    placeholders_to_spans,
)


plain_words = st.sampled_from([
    "alpha", "beta", "Gamma", "delta,", "日本語", " ", "  ", "\n", "\n\n",
])
plain_documents = st.lists(plain_words, max_size=30).map("".join)

markdown_tokens = st.sampled_from([
    "alpha", "beta", "`", "`code`", "```", "*", "**", "#", "# ", "- ", "1. ",
    "    ", " ", "\n", "\n\n",
])
markdown_documents = st.lists(markdown_tokens, max_size=30).map("".join)


def without_whitespace(text):
    return re.sub(r"\s+", "", text)


@given(plain_documents, plain_documents)
@settings(max_examples=100, deadline=None)
def test_decoded_spans_match_change_units(original, proposed):
    """
    Decoding the encoded units gives one span group per change part, with the
    same id and the same text (line breaks aside).
    """
    units = DiffEngine().diff(original, proposed)
    html = placeholders_to_spans(markers_to_placeholders(build_diff_markdown(units)))
    spans = extract_change_spans(html)

    changes = [u for u in units if u.is_change]
    assert {s["id"] for s in spans} == {u.id for u in changes}

    for unit in changes:
        for part in unit.parts:
            decoded = "".join(
                s["text"] for s in spans if s["id"] == unit.id and s["op"] is part.op
            )
            assert without_whitespace(decoded) == without_whitespace(part.text)


@given(markdown_documents, markdown_documents)
@settings(max_examples=100, deadline=None)
def test_every_change_id_survives_markdown(original, proposed):
    """
    For any pair of markdown texts, each pending change shows up as a diff
    span with its id, including changes inside code spans and code blocks,
    and no placeholder tag reaches the screen.
    """
    engine = DiffEngine()
    units = engine.diff(original, proposed)
    html = RenderEngine().render_diff(units)

    spans = extract_change_spans(html)
    assert {s["id"] for s in spans} == set(range(engine.count_changes(units)))
    assert "diffdelete" not in html
    assert "diffinsert" not in html
    assert "\x00" not in html


@given(markdown_documents, markdown_documents)
@settings(max_examples=100, deadline=None)
def test_span_ops_match_unit_parts(original, proposed):
    """A change id only ever appears with the operations its unit contains."""
    units = DiffEngine().diff(original, proposed)
    ops_by_id = {
        u.id: {p.op for p in u.parts if p.op is not DiffOp.EQUAL}
        for u in units if u.is_change
    }
    for span in extract_change_spans(RenderEngine().render_diff(units)):
        assert span["op"] in ops_by_id[span["id"]]
