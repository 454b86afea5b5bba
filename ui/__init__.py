"""UI components for the Inkwell review editor."""

from .layout import (
    create_editor_layout,
    get_global_css
)
from .event_handlers import (
    generate_status_html,
    generate_chat_html,
    thread_choices,
    find_selection,
    update_document,
    handle_propose,
    handle_resolve,
    handle_accept_all,
    handle_reject_all,
    handle_cancel,
    handle_new_thread,
    handle_switch_thread,
    handle_export_threads
)

__all__ = [
    "create_editor_layout",
    "get_global_css",
    "generate_status_html",
    "generate_chat_html",
    "thread_choices",
    "find_selection",
    "update_document",
    "handle_propose",
    "handle_resolve",
    "handle_accept_all",
    "handle_reject_all",
    "handle_cancel",
    "handle_new_thread",
    "handle_switch_thread",
    "handle_export_threads"
]
