"""
Inkwell Review
Word-level suggestion review for markdown documents.

Main entry point for the Gradio application.
"""

import logging

import gradio as gr
from models import ApplicationState, EngineSettings
from services import ThreadStore
from ui.layout import create_editor_layout
from ui.event_handlers import (
    generate_chat_html,
    generate_status_html,
    thread_choices,
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
from utils.performance import configure_monitor

logger = logging.getLogger(__name__)


def create_initial_state(settings: EngineSettings = None) -> ApplicationState:
    """Application state with one empty thread."""
    state = ApplicationState(settings=settings or EngineSettings())
    ThreadStore(state).create_thread("Thread 1")
    return state


def main(settings: EngineSettings = None):
    """Main application entry point."""
    settings = settings or EngineSettings()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    configure_monitor(settings.slow_operation_threshold)
    logger.info("Starting Inkwell Review")

    with gr.Blocks(title="Inkwell Review", theme=gr.themes.Soft()) as app:

        # Application State
        app_state = gr.State(create_initial_state(settings))

        components = create_editor_layout()

        view_outputs = [
            app_state,
            components['document_editor'],
            components['document_overlay'],
            components['status_display'],
            components['chat_display'],
        ]
        thread_outputs = view_outputs + [components['thread_dropdown']]

        # ========== Event Handlers ==========

        # Initial render
        def on_load(state):
            return (
                state.document_text,
                generate_status_html(state),
                generate_chat_html(state.get_active_thread()),
                gr.update(choices=thread_choices(state), value=state.active_thread_id),
            )

        app.load(
            fn=on_load,
            inputs=[app_state],
            outputs=[
                components['document_editor'],
                components['status_display'],
                components['chat_display'],
                components['thread_dropdown'],
            ]
        )

        # Editing the source only counts while no diff is shown
        components['document_editor'].input(
            fn=update_document,
            inputs=[components['document_editor'], app_state],
            outputs=[app_state]
        )

        def on_view(result):
            state, document, overlay, status, chat = result
            return state, gr.update(value=document, interactive=not state.has_pending_diff()), overlay, status, chat

        components['propose_btn'].click(
            fn=lambda document, selected, proposed, state: on_view(
                handle_propose(document, selected, proposed, state)
            ),
            inputs=[
                components['document_editor'],
                components['selection_input'],
                components['proposal_input'],
                app_state
            ],
            outputs=view_outputs
        )

        components['accept_btn'].click(
            fn=lambda change_id, state: on_view(handle_resolve(change_id, "accept", state)),
            inputs=[components['change_id_input'], app_state],
            outputs=view_outputs
        )

        components['reject_btn'].click(
            fn=lambda change_id, state: on_view(handle_resolve(change_id, "reject", state)),
            inputs=[components['change_id_input'], app_state],
            outputs=view_outputs
        )

        components['accept_all_btn'].click(
            fn=lambda state: on_view(handle_accept_all(state)),
            inputs=[app_state],
            outputs=view_outputs
        )

        components['reject_all_btn'].click(
            fn=lambda state: on_view(handle_reject_all(state)),
            inputs=[app_state],
            outputs=view_outputs
        )

        components['cancel_btn'].click(
            fn=lambda state: on_view(handle_cancel(state)),
            inputs=[app_state],
            outputs=view_outputs
        )

        # Thread Handlers
        def on_thread_result(result):
            *view, choices, active_id = result
            return on_view(tuple(view)) + (gr.update(choices=choices, value=active_id),)

        components['new_thread_btn'].click(
            fn=lambda state: on_thread_result(handle_new_thread(state)),
            inputs=[app_state],
            outputs=thread_outputs
        )

        components['thread_dropdown'].input(
            fn=lambda thread_id, state: on_thread_result(handle_switch_thread(thread_id, state)),
            inputs=[components['thread_dropdown'], app_state],
            outputs=thread_outputs
        )

        # Export Handler
        def on_export(state):
            file_path, status_msg = handle_export_threads(state)
            status_html = f'<div class="diff-status">{status_msg}</div>'
            if file_path:
                return gr.update(value=file_path, visible=True), status_html
            return gr.update(value=None, visible=False), status_html

        components['export_btn'].click(
            fn=on_export,
            inputs=[app_state],
            outputs=[components['export_file'], components['export_status']]
        )

    return app


if __name__ == "__main__":
    app = main()
    app.launch(show_error=True, quiet=False)
