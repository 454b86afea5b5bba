"""Diff, rendering and resolution services for Inkwell Review."""

from .diff_engine import DiffEngine, tokenize
from .render_engine import RenderEngine
from .resolution_engine import ResolutionEngine, ResolutionOutcome
from .assistant_protocol import AssistantResponse, parse_assistant_response
from .thread_store import ThreadStore
from .session_manager import SessionManager

__all__ = [
    "DiffEngine",
    "tokenize",
    "RenderEngine",
    "ResolutionEngine",
    "ResolutionOutcome",
    "AssistantResponse",
    "parse_assistant_response",
    "ThreadStore",
    "SessionManager",
]
