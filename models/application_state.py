"""
Application state model for Inkwell Review.

Holds the document, the diff session under review and the conversation
threads. Engine operations receive this object explicitly; nothing here
refers to widgets or scroll positions.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .diff_session import DiffSession
from .settings import EngineSettings
from .thread import ConversationThread


@dataclass
class ApplicationState:
    """
    Editor state container.

    Attributes:
        document_text: Current plain (markdown) document text
        active_session: Diff session under review, if any
        threads: Conversation threads
        active_thread_id: Id of the thread shown in the chat panel
        settings: Engine settings
    """

    document_text: str = ""
    active_session: Optional[DiffSession] = None
    threads: List[ConversationThread] = field(default_factory=list)
    active_thread_id: str = ""
    settings: EngineSettings = field(default_factory=EngineSettings)

    def has_pending_diff(self) -> bool:
        """Whether a diff overlay currently owns the document."""
        return self.active_session is not None and self.active_session.is_active

    def get_active_thread(self) -> Optional[ConversationThread]:
        """Get the thread shown in the chat panel."""
        for thread in self.threads:
            if thread.id == self.active_thread_id:
                return thread
        return None

    def get_unresolved_count(self) -> int:
        """Count change units still waiting for a decision."""
        if self.active_session is None:
            return 0
        return self.active_session.unresolved_count
