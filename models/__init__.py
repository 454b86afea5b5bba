"""Data models for Inkwell Review."""

from .diff_types import ChangeKind, ChangeUnit, Decision, DiffOp, DiffPart
from .diff_session import DiffSession, SessionStatus
from .thread import ChatMessage, ConversationThread
from .settings import EngineSettings
from .application_state import ApplicationState

__all__ = [
    "ChangeKind",
    "ChangeUnit",
    "Decision",
    "DiffOp",
    "DiffPart",
    "DiffSession",
    "SessionStatus",
    "ChatMessage",
    "ConversationThread",
    "EngineSettings",
    "ApplicationState",
]
