"""
SessionManager: the editor workflow around a diff session.

Owns the hand-over of the document between the plain editable text and a
diff overlay. Exactly one of them owns the document at any time: proposing
a rewrite replaces the plain view with the overlay, and finalizing or
discarding replaces the overlay with new plain text.
"""

import logging
from typing import Callable, Optional, Tuple

from models import ApplicationState, Decision, DiffSession

from .assistant_protocol import (
    AssistantResponse,
    build_system_prompt,
    build_user_prompt,
    parse_assistant_response,
)
from .diff_engine import DiffEngine
from .render_engine import RenderEngine
from .resolution_engine import ResolutionEngine, ResolutionOutcome
from .thread_store import ThreadStore

logger = logging.getLogger(__name__)

ProposeFn = Callable[[str, str], str]


class SessionManager:
    """
    Coordinates diffing, rendering, resolution and threads for one editor.

    Attributes:
        state: Application state (document, active session, threads)
    """

    def __init__(self, state: ApplicationState):
        self.state = state
        self.diff_engine = DiffEngine(state.settings)
        self.render_engine = RenderEngine(state.settings)
        self.threads = ThreadStore(state)

    @property
    def session(self) -> Optional[DiffSession]:
        return self.state.active_session

    def _say(self, role: str, content: str):
        self.threads.ensure_active().add_message(role, content)

    def render(self) -> str:
        """HTML of whatever currently owns the document."""
        if self.state.has_pending_diff():
            return self.render_engine.render_session(self.session)
        return self.render_engine.render_markdown(self.state.document_text)

    def propose(self, original: str, proposed: str, is_partial_edit: bool = False,
                full_document: str = "", selection_start: int = 0,
                selection_end: int = 0) -> Tuple[str, int]:
        """
        Show a proposed rewrite as a diff overlay.

        Any unresolved session is discarded first (last request wins).

        Args:
            original: Text the rewrite was requested for
            proposed: Proposed replacement
            is_partial_edit: Whether original is a sub-span of the document
            full_document: Whole document (partial edits only)
            selection_start: Offset of the span in the document
            selection_end: End offset of the span in the document

        Returns:
            (overlay HTML, number of changes)

        Raises:
            ValueError: If the texts are too long to compare
        """
        self.discard_pending()
        self.state.document_text = full_document if is_partial_edit else original

        units = self.diff_engine.diff(original, proposed)
        change_count = self.diff_engine.count_changes(units)
        if change_count == 0:
            logger.info("Proposed text is identical; nothing to review")
            return self.render(), 0

        self.state.active_session = DiffSession(
            original_text=original,
            proposed_text=proposed,
            is_partial_edit=is_partial_edit,
            full_document_text=full_document if is_partial_edit else "",
            selection_start=selection_start,
            selection_end=selection_end,
            change_units=units,
        )
        self.threads.suspend(self.session)
        return self.render(), change_count

    def request_edit(self, request: str, propose_fn: ProposeFn,
                     selection: Optional[Tuple[int, int]] = None,
                     context_files=None) -> AssistantResponse:
        """
        Ask the assistant for a rewrite and show it as a diff.

        Args:
            request: What the user asked for
            propose_fn: Black-box model call (system_prompt, user_prompt) -> raw answer
            selection: (start, end) of the selected span, or None for the whole document
            context_files: Optional (name, content) project files

        Returns:
            Parsed assistant answer
        """
        self.discard_pending()
        is_selection, text = self._scope(selection)

        self._say("user", request)
        raw = propose_fn(
            build_system_prompt(is_selection, context_files),
            build_user_prompt(text, request),
        )
        response = parse_assistant_response(raw)
        self.apply_response(response, selection)
        return response

    def _scope(self, selection: Optional[Tuple[int, int]]) -> Tuple[bool, str]:
        document = self.state.document_text
        if selection and 0 <= selection[0] < selection[1] <= len(document):
            return True, document[selection[0]:selection[1]]
        return False, document

    def apply_response(self, response: AssistantResponse,
                       selection: Optional[Tuple[int, int]] = None) -> int:
        """
        Show a parsed assistant answer: the reply goes to the chat and the
        edit, if any, becomes a diff overlay.

        Returns:
            Number of suggested changes (0 when there is no edit)
        """
        if response.reply:
            self._say("assistant", response.reply)
        if not response.has_edit:
            return 0

        self.discard_pending()
        document = self.state.document_text
        is_selection, text = self._scope(selection)
        _, change_count = self.propose(
            text,
            response.content,
            is_partial_edit=is_selection,
            full_document=document,
            selection_start=selection[0] if is_selection else 0,
            selection_end=selection[1] if is_selection else 0,
        )
        summary = response.summary or "Suggested edits"
        self._say("assistant", f"{summary} ({change_count} change{'s' if change_count != 1 else ''} suggested)")
        return change_count

    def _apply(self, outcome: ResolutionOutcome, message: str) -> ResolutionOutcome:
        if outcome.is_done:
            self.state.document_text = outcome.final_text
            self.state.active_session = None
            self.threads.clear_diff()
            if outcome.applied:
                self._say("assistant", message)
        else:
            self.threads.suspend(self.session)
        return outcome

    def _resolution(self) -> Optional[ResolutionEngine]:
        if not self.state.has_pending_diff():
            return None
        return ResolutionEngine(self.session)

    def resolve_change(self, change_id: int, decision) -> Optional[ResolutionOutcome]:
        """Accept or reject one change; None when no diff is pending."""
        engine = self._resolution()
        if engine is None:
            return None
        return self._apply(engine.resolve_one(change_id, decision), "Changes applied!")

    def accept_change(self, change_id: int) -> Optional[ResolutionOutcome]:
        return self.resolve_change(change_id, Decision.ACCEPT)

    def reject_change(self, change_id: int) -> Optional[ResolutionOutcome]:
        return self.resolve_change(change_id, Decision.REJECT)

    def accept_all(self) -> Optional[ResolutionOutcome]:
        engine = self._resolution()
        if engine is None:
            return None
        return self._apply(engine.resolve_all(Decision.ACCEPT), "All changes accepted!")

    def reject_all(self) -> Optional[ResolutionOutcome]:
        engine = self._resolution()
        if engine is None:
            return None
        return self._apply(
            engine.resolve_all(Decision.REJECT),
            "Changes rejected. The original text has been restored.",
        )

    def discard_pending(self) -> Optional[ResolutionOutcome]:
        """Cancel the pending session, restoring the pre-diff document."""
        engine = self._resolution()
        if engine is None:
            self.state.active_session = None
            return None
        return self._apply(engine.cancel(), "Suggestion cancelled.")

    cancel = discard_pending

    def new_thread(self, name: Optional[str] = None):
        """Start a new thread; the current diff stays with its own thread."""
        self.threads.suspend(self.session)
        self.state.active_session = None
        return self.threads.create_thread(name)

    def switch_thread(self, thread_id: str) -> Optional[DiffSession]:
        """
        Switch to another thread, suspending and restoring diff sessions.

        The document shown while away from a suspended session is its
        pre-diff text; a restored session brings its own pre-diff text back.

        Raises:
            ValueError: If the thread does not exist
        """
        if thread_id == self.state.active_thread_id:
            return self.session
        current = self.session if self.state.has_pending_diff() else None
        restored = self.threads.switch_to(thread_id, current)
        self.state.active_session = restored
        if restored is not None:
            self.state.document_text = ResolutionEngine(restored).pre_diff_text()
        return restored
