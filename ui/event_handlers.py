"""
Event handlers for UI components.

Plain functions taking the ApplicationState and returning the values shown
by the Gradio components, so they can be exercised without a server.
"""

import html
from typing import List, Optional, Tuple

import gradio as gr

from models import ApplicationState, ConversationThread
from services import SessionManager, parse_assistant_response

ViewTuple = Tuple[ApplicationState, str, str, str, str]


def generate_status_html(state: ApplicationState) -> str:
    """
    Status line shown above the document.

    Args:
        state: Application state

    Returns:
        HTML with the pending change count
    """
    session = state.active_session
    if not state.has_pending_diff():
        return '<div class="diff-status">No pending suggestions</div>'
    pending = session.unresolved_count
    total = session.change_count
    label = f"{pending} change{'s' if pending != 1 else ''} suggested"
    return f'<div class="diff-status diff-status-active">{label} (of {total})</div>'


def generate_chat_html(thread: Optional[ConversationThread]) -> str:
    """Render a thread's chat log."""
    if thread is None or not thread.messages:
        return '<div class="chat-log empty">Select text, or I\'ll work on the whole document.</div>'
    lines = ['<div class="chat-log">']
    for message in thread.messages:
        role = "user" if message.role == "user" else "assistant"
        lines.append(f'<div class="chat-message {role}">{html.escape(message.content)}</div>')
    lines.append("</div>")
    return "".join(lines)


def thread_choices(state: ApplicationState) -> List[Tuple[str, str]]:
    """(label, id) pairs for the thread dropdown."""
    return [(thread.name, thread.id) for thread in state.threads]


def find_selection(document: str, selected_text: str) -> Optional[Tuple[int, int]]:
    """
    Locate the selected text in the document.

    Returns:
        (start, end) of the first occurrence, or None for no selection
    """
    if not selected_text:
        return None
    start = document.find(selected_text)
    if start == -1:
        return None
    return start, start + len(selected_text)


def _view(state: ApplicationState, manager: Optional[SessionManager] = None) -> ViewTuple:
    manager = manager or SessionManager(state)
    return (
        state,
        state.document_text,
        manager.render(),
        generate_status_html(state),
        generate_chat_html(state.get_active_thread()),
    )


def update_document(document: str, state: ApplicationState) -> ApplicationState:
    """Take the editor text, unless a diff overlay owns the document."""
    if not state.has_pending_diff():
        state.document_text = document or ""
    return state


def handle_propose(document: str, selected_text: str, proposed: str,
                   state: ApplicationState) -> ViewTuple:
    """
    Show a proposed rewrite (plain text or a raw assistant JSON answer).

    Args:
        document: Current editor text
        selected_text: Text the rewrite targets, empty for the whole document
        proposed: Proposed text or raw assistant answer
        state: Application state

    Returns:
        Tuple of (state, document, overlay_html, status_html, chat_html)
    """
    manager = SessionManager(state)
    manager.discard_pending()
    state.document_text = document or ""

    if not proposed or not proposed.strip():
        gr.Warning("Nothing to compare: the proposed text is empty")
        return _view(state, manager)

    response = parse_assistant_response(proposed)
    if not response.has_edit and response.reply == proposed.strip():
        # Plain pasted text, not an assistant answer.
        response.content, response.reply = proposed, None

    selection = find_selection(state.document_text, selected_text)
    if selected_text and selection is None:
        gr.Warning("Selected text not found in the document; comparing the whole document")

    try:
        change_count = manager.apply_response(response, selection)
    except ValueError as e:
        gr.Warning(str(e))
        return _view(state, manager)

    if response.has_edit and change_count == 0:
        gr.Info("The proposed text is identical to the original")
    return _view(state, manager)


def handle_resolve(change_id, decision: str, state: ApplicationState) -> ViewTuple:
    """
    Accept or reject one change.

    Returns:
        Tuple of (state, document, overlay_html, status_html, chat_html)
    """
    manager = SessionManager(state)
    if not state.has_pending_diff():
        gr.Warning("No pending suggestions")
        return _view(state, manager)
    try:
        change_id = int(change_id)
    except (TypeError, ValueError):
        gr.Warning(f"Invalid change id: {change_id}")
        return _view(state, manager)

    outcome = manager.resolve_change(change_id, decision)
    if outcome is not None and not outcome.applied:
        gr.Info(f"Change {change_id} is unknown or already resolved")
    return _view(state, manager)


def handle_accept_all(state: ApplicationState) -> ViewTuple:
    manager = SessionManager(state)
    manager.accept_all()
    return _view(state, manager)


def handle_reject_all(state: ApplicationState) -> ViewTuple:
    manager = SessionManager(state)
    manager.reject_all()
    return _view(state, manager)


def handle_cancel(state: ApplicationState) -> ViewTuple:
    manager = SessionManager(state)
    manager.discard_pending()
    return _view(state, manager)


def handle_new_thread(state: ApplicationState) -> Tuple:
    """
    Start a new conversation thread.

    Returns:
        Tuple of (state, document, overlay_html, status_html, chat_html,
        thread_choices, active_thread_id)
    """
    manager = SessionManager(state)
    manager.new_thread()
    return _view(state, manager) + (thread_choices(state), state.active_thread_id)


def handle_switch_thread(thread_id: str, state: ApplicationState) -> Tuple:
    """
    Switch threads, suspending the current diff and restoring the target's.

    Returns:
        Tuple of (state, document, overlay_html, status_html, chat_html,
        thread_choices, active_thread_id)
    """
    manager = SessionManager(state)
    if thread_id:
        try:
            manager.switch_thread(thread_id)
        except ValueError as e:
            gr.Warning(str(e))
    return _view(state, manager) + (thread_choices(state), state.active_thread_id)


def handle_export_threads(state: ApplicationState, output_dir: str = ".") -> Tuple[Optional[str], str]:
    """
    Export all threads to a JSON file.

    Returns:
        Tuple of (file_path or None, status_message)
    """
    manager = SessionManager(state)
    manager.threads.suspend(state.active_session)
    try:
        path = manager.threads.export_threads(output_dir)
    except ValueError as e:
        gr.Warning(str(e))
        return None, str(e)
    except PermissionError as e:
        gr.Warning(str(e))
        return None, str(e)
    gr.Info(f"Exported {len(state.threads)} threads")
    return path, f"Exported {len(state.threads)} threads to {path}"
