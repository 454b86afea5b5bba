"""
UI layout components for the Inkwell review editor.

Defines the two-column Gradio layout: document and diff overlay on the
left, assistant chat and change controls on the right.
"""

import gradio as gr
from typing import Dict, Any


GLOBAL_CSS = """
<style>
.gradio-container {
    font-size: 17px !important;
}

textarea, input, .prose {
    font-size: 17px !important;
    line-height: 1.6 !important;
}

/* 文档区域 - 带滚动条 */
#document_overlay {
    border: 2px solid #1976d2 !important;
    border-radius: 8px !important;
    max-height: 640px !important;
    min-height: 320px !important;
    overflow-y: auto !important;
    padding: 12px 16px !important;
    background: #fafafa !important;
}

/* 删除：红色删除线 */
.diff-delete {
    background: #ffebee;
    color: #c62828;
    text-decoration: line-through;
    border-radius: 3px;
    padding: 0 2px;
}

/* 插入：绿色背景 */
.diff-insert {
    background: #e8f5e9;
    color: #2e7d32;
    border-radius: 3px;
    padding: 0 2px;
}

/* 修改编号，方便按编号接受或拒绝 */
.diff-delete[data-change-id]::before,
.diff-insert[data-change-id]::before {
    content: attr(data-change-id);
    font-size: 11px;
    vertical-align: super;
    color: #1976d2;
    margin-right: 2px;
    text-decoration: none;
    display: inline-block;
}

.diff-delete + .diff-insert[data-change-id]::before {
    content: none;
}

.diff-status {
    padding: 6px 10px;
    border-radius: 6px;
    background: #eceff1;
    color: #455a64;
    font-weight: bold;
}

.diff-status-active {
    background: #e3f2fd;
    color: #1976d2;
    border: 1px solid #1976d2;
}

.chat-log {
    max-height: 420px;
    overflow-y: auto;
    border: 1px solid #1976d2;
    border-radius: 8px;
    padding: 8px;
}

.chat-log.empty {
    color: #888;
    font-style: italic;
}

.chat-message {
    white-space: pre-wrap;
    padding: 6px 10px;
    margin: 4px 0;
    border-radius: 6px;
}

.chat-message.user {
    background: #e3f2fd;
    margin-left: 20%;
}

.chat-message.assistant {
    background: #f5f5f5;
    margin-right: 20%;
}

.column-title {
    background: #e3f2fd;
    padding: 8px 12px;
    border-radius: 6px;
    border-left: 4px solid #1976d2;
    font-weight: bold;
}

.compact-row {
    gap: 6px !important;
}
</style>
"""


def get_global_css() -> str:
    """返回全局CSS样式"""
    return GLOBAL_CSS


def create_header(components: Dict[str, Any]) -> None:
    """Title row with the thread picker."""
    with gr.Row():
        with gr.Column(scale=3):
            gr.Markdown("# ✒️ Inkwell")
            gr.Markdown(
                "Select text and ask for a rewrite, or paste a proposed version. "
                "Every change is shown in place: accept or reject them one by one, or all at once."
            )
        with gr.Column(scale=2):
            with gr.Row(elem_classes=["compact-row"]):
                components['thread_dropdown'] = gr.Dropdown(
                    label="Thread",
                    choices=[],
                    interactive=True,
                )
                components['new_thread_btn'] = gr.Button("➕ New thread", size="sm")
            with gr.Row(elem_classes=["compact-row"]):
                components['export_btn'] = gr.Button("📥 Export threads", size="sm")
                components['export_file'] = gr.File(label="Export", visible=False)
            components['export_status'] = gr.HTML('')


def create_document_column(components: Dict[str, Any]) -> None:
    """Document editor and its rendered diff overlay."""
    gr.HTML('<div class="column-title">📝 Document</div>')
    components['status_display'] = gr.HTML(
        '<div class="diff-status">No pending suggestions</div>'
    )
    components['document_overlay'] = gr.HTML(
        value='',
        elem_id="document_overlay",
    )
    components['document_editor'] = gr.Textbox(
        label="Markdown source",
        lines=12,
        max_lines=30,
        placeholder="Write or paste markdown here...",
        interactive=True,
    )
    components['selection_input'] = gr.Textbox(
        label="Selected text (leave empty for the whole document)",
        lines=2,
        max_lines=6,
    )


def create_review_column(components: Dict[str, Any]) -> None:
    """Chat log, proposal input and change controls."""
    gr.HTML('<div class="column-title">💬 Assistant</div>')
    components['chat_display'] = gr.HTML('')
    components['proposal_input'] = gr.Textbox(
        label="Proposed text or assistant answer",
        lines=6,
        max_lines=15,
        placeholder='Plain text, or {"content": "...", "summary": "..."}',
    )
    components['propose_btn'] = gr.Button("🔍 Show changes", variant="primary")

    gr.HTML('<div class="column-title" style="margin-top: 10px;">✅ Review</div>')
    with gr.Row(elem_classes=["compact-row"]):
        components['change_id_input'] = gr.Number(
            label="Change #",
            value=0,
            precision=0,
            minimum=0,
        )
        components['accept_btn'] = gr.Button("✔ Accept", size="sm")
        components['reject_btn'] = gr.Button("✘ Reject", size="sm")
    with gr.Row(elem_classes=["compact-row"]):
        components['accept_all_btn'] = gr.Button("Accept all", variant="primary")
        components['reject_all_btn'] = gr.Button("Reject all", variant="stop")
        components['cancel_btn'] = gr.Button("Cancel")


def create_editor_layout() -> Dict[str, Any]:
    """
    Create the full editor layout.

    Returns:
        Dictionary of components, keyed by name
    """
    components = {}

    gr.HTML(GLOBAL_CSS)
    create_header(components)
    gr.HTML('<hr style="border: 2px solid #1976d2; margin: 3px 0;">')

    with gr.Row(equal_height=False):
        with gr.Column(scale=3):
            create_document_column(components)
        with gr.Column(scale=2):
            create_review_column(components)

    return components
