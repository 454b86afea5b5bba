"""
Tests for UI event handlers.

Handlers are plain functions, so they are exercised here without launching
a Gradio server.
"""

import json
import os
import tempfile

from app import create_initial_state
from models import ApplicationState
from ui.event_handlers import (
    find_selection,
    generate_chat_html,
    generate_status_html,
    handle_accept_all,
    handle_cancel,
    handle_export_threads,
    handle_new_thread,
    handle_propose,
    handle_reject_all,
    handle_resolve,
    handle_switch_thread,
    thread_choices,
    update_document,
)

DOCUMENT = "one two three four five"


def proposed_state():
    state = create_initial_state()
    handle_propose(DOCUMENT, "", "one TWO three four FIVE", state)
    return state


class TestStatusAndChat:
    """Test status and chat rendering."""

    def test_status_without_diff(self):
        """Test status with nothing pending."""
        assert "No pending suggestions" in generate_status_html(ApplicationState())

    def test_status_with_diff(self):
        """Test status with pending changes."""
        state = proposed_state()
        assert "2 changes suggested (of 2)" in generate_status_html(state)

    def test_chat_escapes_html(self):
        """Test chat messages are escaped."""
        state = create_initial_state()
        thread = state.get_active_thread()
        thread.add_message("user", "<b>hi</b>")
        html = generate_chat_html(thread)
        assert "&lt;b&gt;hi&lt;/b&gt;" in html
        assert 'class="chat-message user"' in html

    def test_empty_chat(self):
        """Test the chat log without a thread."""
        assert "chat-log empty" in generate_chat_html(None)


class TestSelection:
    """Test locating the selected text."""

    def test_find_selection(self):
        """Test finding the selected text."""
        assert find_selection(DOCUMENT, "two three") == (4, 13)

    def test_no_selection(self):
        """Test with no selection."""
        assert find_selection(DOCUMENT, "") is None

    def test_selection_not_in_document(self):
        """Test a selection missing from the document."""
        assert find_selection(DOCUMENT, "six") is None


class TestPropose:
    """Test proposing rewrites from the UI."""

    def test_plain_text_proposal(self):
        """Test proposing plain text."""
        state = create_initial_state()
        state, document, overlay, status, chat = handle_propose(
            DOCUMENT, "", "one TWO three four FIVE", state
        )

        assert document == DOCUMENT
        assert state.get_unresolved_count() == 2
        assert 'data-change-id="1"' in overlay
        assert "2 changes suggested" in status
        assert "Suggested edits (2 changes suggested)" in chat

    def test_assistant_json_proposal_on_selection(self):
        """Test an assistant answer for a selection."""
        state = create_initial_state()
        raw = json.dumps({"summary": "Digits", "text": "2"})
        state, document, overlay, status, chat = handle_propose(DOCUMENT, "two", raw, state)

        assert state.active_session.is_partial_edit
        assert "Digits (1 change suggested)" in chat
        assert "four five" in overlay

        state, document, overlay, status, chat = handle_accept_all(state)
        assert document == "one 2 three four five"

    def test_identical_proposal(self):
        """Test proposing the same text."""
        state = create_initial_state()
        state, document, overlay, status, chat = handle_propose(DOCUMENT, "", DOCUMENT, state)
        assert state.active_session is None
        assert "No pending suggestions" in status

    def test_empty_proposal(self):
        """Test proposing nothing."""
        state = create_initial_state()
        state, document, overlay, status, chat = handle_propose(DOCUMENT, "", "   ", state)
        assert state.active_session is None
        assert document == DOCUMENT

    def test_too_long_proposal(self):
        """Test a proposal over the length limit."""
        state = create_initial_state()
        state.settings.max_text_length = 5
        state, document, overlay, status, chat = handle_propose(DOCUMENT, "", "short", state)
        assert state.active_session is None

    def test_editor_changes_ignored_during_review(self):
        """Test editor input is ignored during review."""
        state = proposed_state()
        update_document("typed over", state)
        assert state.document_text == DOCUMENT

        handle_cancel(state)
        update_document("typed over", state)
        assert state.document_text == "typed over"


class TestResolve:
    """Test resolution handlers."""

    def test_resolve_one_by_one(self):
        """Test resolving changes one at a time."""
        state = proposed_state()
        state, document, overlay, status, chat = handle_resolve(1, "reject", state)
        assert "1 change suggested" in status
        assert 'data-change-id="1"' not in overlay

        state, document, overlay, status, chat = handle_resolve(0.0, "accept", state)
        assert document == "one TWO three four five"
        assert "No pending suggestions" in status
        assert "Changes applied!" in chat

    def test_invalid_change_id(self):
        """Test a change id that is not a number."""
        state = proposed_state()
        handle_resolve("abc", "accept", state)
        assert state.get_unresolved_count() == 2

    def test_resolve_without_diff(self):
        """Test resolving with nothing pending."""
        state = create_initial_state()
        state, document, overlay, status, chat = handle_resolve(0, "accept", state)
        assert state.active_session is None

    def test_accept_all(self):
        """Test the accept all handler."""
        state, document, *_ = handle_accept_all(proposed_state())
        assert document == "one TWO three four FIVE"

    def test_reject_all(self):
        """Test the reject all handler."""
        state, document, *_ = handle_reject_all(proposed_state())
        assert document == DOCUMENT
        assert state.active_session is None

    def test_cancel(self):
        """Test the cancel handler."""
        state, document, overlay, status, chat = handle_cancel(proposed_state())
        assert document == DOCUMENT
        assert "Suggestion cancelled." in chat


class TestThreads:
    """Test thread handlers."""

    def test_new_thread_and_switch_back(self):
        """Test opening a thread and switching back."""
        state = proposed_state()
        first_id = state.active_thread_id

        result = handle_new_thread(state)
        state, choices, active_id = result[0], result[5], result[6]
        assert len(choices) == 2
        assert active_id != first_id
        assert state.active_session is None

        result = handle_switch_thread(first_id, state)
        state, overlay, active_id = result[0], result[2], result[6]
        assert active_id == first_id
        assert state.get_unresolved_count() == 2
        assert 'class="diff-delete"' in overlay

    def test_switch_to_unknown_thread(self):
        """Test switching to an unknown thread."""
        state = create_initial_state()
        active = state.active_thread_id
        result = handle_switch_thread("missing", state)
        assert result[6] == active

    def test_thread_choices(self):
        """Test dropdown choices."""
        state = create_initial_state()
        assert thread_choices(state) == [("Thread 1", state.active_thread_id)]

    def test_export_threads(self):
        """Test exporting threads."""
        state = proposed_state()
        with tempfile.TemporaryDirectory() as tmpdir:
            path, message = handle_export_threads(state, tmpdir)
            assert os.path.exists(path)
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        assert data["threads"][0]["diffState"]["proposedContent"] == "one TWO three four FIVE"
        assert "Exported 1 threads" in message

    def test_export_without_threads(self):
        """Test exporting with no threads."""
        path, message = handle_export_threads(ApplicationState())
        assert path is None
        assert "No threads" in message
