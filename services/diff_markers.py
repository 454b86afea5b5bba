"""
Diff marker encoding and decoding.

Change units travel to the screen in three stages:

1. build_diff_markdown: markdown text with sentinel markers
   (``\\x00DEL3\\x00...\\x00/DEL\\x00``) around every deleted or inserted run.
2. markers_to_placeholders: sentinels become ``<diffdelete data-id="3">``
   and ``<diffinsert data-id="3">`` tags, which Python-Markdown passes
   through as inline raw HTML. A run spanning several lines or paragraphs
   is split so each line gets its own tag with the same id.
3. placeholders_to_spans: after markdown conversion the placeholder
   elements are renamed, via an lxml tree walk, into
   ``<span class="diff-delete" data-change-id="3">`` elements, keeping any
   markup the converter produced inside them. Placeholders that markdown
   escaped into code text are split back out as spans.

Each stage never raises on malformed input.
"""

import logging
import re
from typing import List

from lxml import html as lxml_html

from models import ChangeUnit, DiffOp
from utils.validation import validate_marker_balance

logger = logging.getLogger(__name__)

SENTINEL = "\x00"

DELETE_TAG = "diffdelete"
INSERT_TAG = "diffinsert"
PLACEHOLDER_ID_ATTR = "data-id"

DELETE_CLASS = "diff-delete"
INSERT_CLASS = "diff-insert"
CHANGE_ID_ATTR = "data-change-id"

_MARKER_NAMES = {DiffOp.DELETE: "DEL", DiffOp.INSERT: "INS"}
_TAG_FOR_MARKER = {"DEL": DELETE_TAG, "INS": INSERT_TAG}
_CLASS_FOR_TAG = {DELETE_TAG: DELETE_CLASS, INSERT_TAG: INSERT_CLASS}

MARKER_RE = re.compile(r"\x00(DEL|INS)(\d+)\x00([^\x00]*)\x00/\1\x00")

# Line breaks inside a marked run, together with the surrounding blanks.
LINE_BREAK_RE = re.compile(r"[ \t]*\n\s*")

# Markdown block syntax that has to stay outside an inline tag.
BLOCK_PREFIX_RE = re.compile(
    r"^(?:[ \t]{0,3}(?:#{1,6}[ \t]+|>[ \t]?|[-*+][ \t]+|\d{1,9}[.)][ \t]+))+"
)
UNWRAPPABLE_LINE_RE = re.compile(r"^[ \t]*(?:(?:[-*_][ \t]*){3,}|`{3,}.*|~{3,}.*)$")

# Placeholders that markdown escaped into code text. A code span can cut a
# placeholder off before its closing tag.
CODE_PLACEHOLDER_RE = re.compile(
    r'<(diffdelete|diffinsert) data-id="(\d+)">((?:(?!</?diff(?:delete|insert)\b).)*)(?:</\1>)?',
    re.DOTALL,
)
STRAY_CLOSE_RE = re.compile(r"</(?:diffdelete|diffinsert)>")


def build_diff_markdown(units: List[ChangeUnit]) -> str:
    """
    Serialize change units into markdown with sentinel markers.

    Equal units pass through unchanged. Resolved changes are emitted as the
    plain text the user chose, so only pending changes carry markers.

    Args:
        units: Change units from DiffEngine.group_changes

    Returns:
        Markdown text with embedded markers
    """
    chunks = []
    for unit in units:
        if not unit.is_change:
            chunks.append(unit.text)
            continue
        if unit.resolved:
            chunks.append(unit.resolved_text())
            continue
        for part in unit.parts:
            name = _MARKER_NAMES.get(part.op)
            if name is None:
                chunks.append(part.text)
                continue
            chunks.append(f"{SENTINEL}{name}{unit.id}{SENTINEL}{part.text}{SENTINEL}/{name}{SENTINEL}")
    return "".join(chunks)


def _wrap_line(tag: str, change_id: str, line: str, at_line_start: bool) -> str:
    if not line.strip() and line:
        if at_line_start:
            return line
        return f'<{tag} {PLACEHOLDER_ID_ATTR}="{change_id}">{line}</{tag}>'
    prefix = ""
    if at_line_start:
        if UNWRAPPABLE_LINE_RE.match(line):
            return line
        match = BLOCK_PREFIX_RE.match(line)
        if match:
            prefix, line = match.group(0), line[match.end():]
    if not line:
        return prefix
    return f'{prefix}<{tag} {PLACEHOLDER_ID_ATTR}="{change_id}">{line}</{tag}>'


def _placeholder_for(match: "re.Match", source: str) -> str:
    tag = _TAG_FOR_MARKER[match.group(1)]
    change_id = match.group(2)
    content = match.group(3)

    start = match.start()
    at_line_start = start == 0 or source[start - 1] == "\n"
    starts_line = at_line_start

    pieces = []
    wrapped = False
    pos = 0
    for brk in LINE_BREAK_RE.finditer(content):
        line = content[pos:brk.start()]
        piece = _wrap_line(tag, change_id, line, at_line_start)
        wrapped = wrapped or f"<{tag} " in piece
        pieces.append(piece)
        pieces.append(brk.group(0))
        pos = brk.end()
        at_line_start = True
    piece = _wrap_line(tag, change_id, content[pos:], at_line_start)
    wrapped = wrapped or f"<{tag} " in piece
    pieces.append(piece)

    if not wrapped:
        # Keep an anchor for runs that are only line breaks or block syntax.
        anchor = f'<{tag} {PLACEHOLDER_ID_ATTR}="{change_id}"></{tag}>'
        pieces.insert(0, f"{anchor}\n\n" if starts_line else anchor)
    return "".join(pieces)


def markers_to_placeholders(text: str) -> str:
    """
    Replace sentinel-delimited runs with placeholder tags.

    Unmatched or malformed markers are left in place as literal text.

    Args:
        text: Markdown with sentinel markers

    Returns:
        Markdown with <diffdelete>/<diffinsert> placeholder tags
    """
    if SENTINEL not in text:
        return text
    is_valid, message = validate_marker_balance(text)
    if not is_valid:
        logger.warning("Malformed diff markers left as literal text: %s", message)
    return MARKER_RE.sub(lambda m: _placeholder_for(m, text), text)


def strip_sentinels(text: str) -> str:
    """Drop stray sentinel bytes so downstream parsers never see them."""
    return text.replace(SENTINEL, "")


def _rewrite_code_placeholders(code) -> None:
    text = code.text or ""
    if DELETE_TAG not in text and INSERT_TAG not in text:
        return
    matches = list(CODE_PLACEHOLDER_RE.finditer(text))
    code.text = STRAY_CLOSE_RE.sub("", text[:matches[0].start()] if matches else text)
    for index, match in enumerate(matches):
        end = matches[index + 1].start() if index + 1 < len(matches) else len(text)
        span = code.makeelement("span", {
            "class": _CLASS_FOR_TAG[match.group(1)],
            CHANGE_ID_ATTR: match.group(2),
        })
        span.text = match.group(3)
        span.tail = STRAY_CLOSE_RE.sub("", text[match.end():end])
        code.insert(index, span)


def placeholders_to_spans(html: str) -> str:
    """
    Rewrite placeholder elements into presentational diff spans.

    Walks the parsed HTML tree so that nested markup (bold, links, code)
    inside a placeholder is kept intact. Inside inline code and code blocks
    markdown escapes the placeholders into literal text; that text is split
    back into spans carrying the same change id.

    Args:
        html: Converter output containing placeholder elements

    Returns:
        HTML with <span class="diff-delete|diff-insert" data-change-id="N">
    """
    if DELETE_TAG not in html and INSERT_TAG not in html:
        return html

    root = lxml_html.fragment_fromstring(html, create_parent="div")

    for element in list(root.iter(DELETE_TAG, INSERT_TAG)):
        css_class = _CLASS_FOR_TAG[element.tag]
        change_id = element.attrib.pop(PLACEHOLDER_ID_ATTR, "")
        element.tag = "span"
        element.set("class", css_class)
        element.set(CHANGE_ID_ATTR, change_id)

    for code in list(root.iter("code")):
        _rewrite_code_placeholders(code)

    serialized = lxml_html.tostring(root, encoding="unicode")
    return serialized[len("<div>"):-len("</div>")]


def extract_change_spans(html: str) -> List[dict]:
    """
    List the diff spans in final markup, in document order.

    Returns:
        Dicts with 'id' (int), 'op' (DiffOp) and 'text' (text content)
    """
    if not html.strip():
        return []
    root = lxml_html.fragment_fromstring(html, create_parent="div")
    spans = []
    for element in root.iter("span"):
        css_class = element.get("class")
        if css_class not in (DELETE_CLASS, INSERT_CLASS):
            continue
        spans.append({
            "id": int(element.get(CHANGE_ID_ATTR)),
            "op": DiffOp.DELETE if css_class == DELETE_CLASS else DiffOp.INSERT,
            "text": element.text_content(),
        })
    return spans
