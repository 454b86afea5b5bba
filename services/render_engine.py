"""
RenderEngine for Markdown and diff rendering.

Converts markdown documents to HTML and renders change units as HTML with
per-change diff spans that the UI hangs accept/reject controls on.
"""

import html
import logging
import re
from typing import List, Optional

import markdown

from models import ChangeUnit, DiffSession, EngineSettings
from utils.performance import monitor_performance

from .diff_markers import (
    build_diff_markdown,
    markers_to_placeholders,
    placeholders_to_spans,
    strip_sentinels,
)
from .resolution_engine import locate_span

logger = logging.getLogger(__name__)

_LEADING_RULES_RE = re.compile(r"^(\s*(\*\*\*|---|___)\s*\n)+")
_TRAILING_RULES_RE = re.compile(r"(\n\s*(\*\*\*|---|___)\s*)+$")


def clean_horizontal_rules(text: str) -> str:
    """
    Remove horizontal rules from the start and end of markdown.

    Models like to frame their rewrites with ``---``; rules in the middle
    of the text are kept.
    """
    text = _LEADING_RULES_RE.sub("", text)
    return _TRAILING_RULES_RE.sub("", text)


def normalize_horizontal_rules(text: str) -> str:
    """Strip framing rules and spell the remaining ones as ``***``."""
    text = re.sub(r"^(\s*---\s*\n)+", "", text)
    text = re.sub(r"(\n\s*---\s*)+$", "", text)
    text = re.sub(r"^---$", "***", text, flags=re.MULTILINE)
    return re.sub(r"^___$", "***", text, flags=re.MULTILINE)


class RenderEngine:
    """
    Rendering engine for markdown and diff overlays.

    Provides methods to:
    - Render plain markdown to HTML
    - Render change units to HTML with diff spans
    - Render a whole diff session, embedding partial edits in the document
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        """Initialize RenderEngine with a Markdown processor."""
        self.settings = settings or EngineSettings()
        self.md = markdown.Markdown(extensions=list(self.settings.markdown_extensions))

    def _convert(self, text: str) -> str:
        try:
            return self.md.convert(text)
        finally:
            self.md.reset()

    def render_markdown(self, text: str) -> str:
        """
        Render markdown to HTML.

        Args:
            text: Markdown text

        Returns:
            HTML string (empty for empty input)
        """
        if not text:
            return ""
        try:
            return self._convert(text)
        except Exception as e:
            # Python-Markdown extensions can fail on odd input; show the source.
            logger.warning("Markdown rendering failed, showing plain text: %s", e)
            return f'<pre style="white-space: pre-wrap;">{html.escape(text)}</pre>'

    @monitor_performance("render_diff")
    def render_diff(self, units: List[ChangeUnit]) -> str:
        """
        Render change units as HTML.

        Pipeline:
        1. Serialize units to markdown with sentinel markers
        2. Turn markers into placeholder tags markdown leaves alone
        3. Convert markdown to HTML
        4. Rewrite placeholders into diff spans

        Args:
            units: Change units (resolved ones render as plain text)

        Returns:
            HTML with <span class="diff-delete|diff-insert" data-change-id="N">
        """
        marked = build_diff_markdown(units)
        placeholders = strip_sentinels(markers_to_placeholders(marked))
        return placeholders_to_spans(self.render_markdown(placeholders))

    def render_session(self, session: DiffSession) -> str:
        """
        Render a diff session as the document overlay.

        Partial edits are shown inside the full document: the text before
        and after the edited span is rendered normally around the diff.
        """
        diff_html = self.render_diff(session.change_units)
        if not session.is_partial_edit or not session.full_document_text:
            return diff_html

        full = session.full_document_text
        index = locate_span(full, session.original_text, session.selection_start)
        if index is None:
            return diff_html
        before = full[:index]
        after = full[index + len(session.original_text):]
        # Only exact on paragraph boundaries; mid-paragraph selections render
        # as their own block.
        return self.render_markdown(before) + diff_html + self.render_markdown(after)
