"""
Prompt building and response parsing for the writing assistant.

The model call itself is a black box (any callable taking a system prompt
and a user prompt and returning the raw answer). This module builds those
prompts and parses the answer into proposed text, a change summary and a
conversational reply.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .render_engine import clean_horizontal_rules

logger = logging.getLogger(__name__)

_EMBEDDED_JSON_RE = re.compile(r'\{[\s\S]*"(?:reply|summary|text)"[\s\S]*\}')

EDIT_INSTRUCTIONS = """You are an AI writing assistant integrated into a markdown editor called Inkwell. Your job is to help users improve their writing.

When the user asks you to edit text, respond with JSON in this exact format:
{"summary": "brief description of changes", "text": "the edited text here", "reply": null}

Rules for edits:
1. Make the requested changes to the provided text
2. Preserve the markdown formatting exactly as provided
3. Keep the same overall structure unless asked to change it
4. Do NOT add horizontal rules (---) or any dividers unless specifically asked
5. The "summary" field MUST come first and should be a short phrase describing what you changed

If the user asks a question (not an edit request), respond with {"reply": "your answer", "summary": null, "text": null}.

Special commands:
- "CEV" or "coherent extrapolated volition": Rewrite the text to be what the author would have written if they had more time, skill, and clarity. Preserve their voice and intent, but execute it better."""

SELECTION_SCOPE = (
    "IMPORTANT: The user has SELECTED a specific portion of their document. "
    'When they say "this", "it", or similar pronouns, they mean the selected text below. '
    "Edit ONLY this selection and return only the edited selection."
)
DOCUMENT_SCOPE = "The user is editing their ENTIRE document. No text is currently selected."


@dataclass
class AssistantResponse:
    """
    Parsed assistant answer.

    Attributes:
        content: Proposed replacement text, or None when there is no edit
        summary: Short description of the edit
        reply: Conversational answer to show in the chat
    """

    content: Optional[str] = None
    summary: Optional[str] = None
    reply: Optional[str] = None

    @property
    def has_edit(self) -> bool:
        return self.content is not None


def build_system_prompt(is_selection: bool, context_files: Optional[List[Tuple[str, str]]] = None,
                        context_truncated: bool = False) -> str:
    """
    Build the system prompt for an edit request.

    Args:
        is_selection: Whether the user selected a sub-span of the document
        context_files: (name, content) pairs of project files to include
        context_truncated: Whether some context files were left out

    Returns:
        System prompt text
    """
    prompt = f"{EDIT_INSTRUCTIONS}\n\n{SELECTION_SCOPE if is_selection else DOCUMENT_SCOPE}"
    if context_files:
        sections = "\n\n".join(f"=== {name} ===\n{content}" for name, content in context_files)
        prompt += (
            "\n\nPROJECT CONTEXT:\n"
            "The following files are part of the user's project and provide important "
            "context for their writing:\n\n"
            f"{sections}\n\nEND PROJECT CONTEXT\n"
        )
        if context_truncated:
            prompt += "\n(Note: Some context files were omitted due to size limits.)\n"
    return prompt


def build_user_prompt(text: str, request: str) -> str:
    """Build the user prompt carrying the text to edit and the request."""
    return f"Here is the text to edit:\n\n{text}\n\nUser request: {request}"


def _from_payload(payload) -> AssistantResponse:
    if not isinstance(payload, dict):
        raise ValueError("Assistant JSON answer is not an object")

    def field(name):
        value = payload.get(name)
        return value if isinstance(value, str) and value else None

    content = field("text")
    if content is not None:
        content = clean_horizontal_rules(content)
    return AssistantResponse(content=content, summary=field("summary"), reply=field("reply"))


def parse_assistant_response(raw: str) -> AssistantResponse:
    """
    Parse a raw assistant answer.

    Tries, in order: the whole answer as JSON; the first JSON object
    embedded in surrounding prose; finally the whole answer as a plain
    reply.

    Args:
        raw: Raw model output

    Returns:
        AssistantResponse
    """
    raw = (raw or "").strip()
    if not raw:
        return AssistantResponse()

    try:
        return _from_payload(json.loads(raw))
    except ValueError:
        pass

    match = _EMBEDDED_JSON_RE.search(raw)
    if match:
        try:
            return _from_payload(json.loads(match.group(0)))
        except ValueError:
            logger.debug("Embedded JSON in assistant answer did not parse")
    return AssistantResponse(reply=raw)
