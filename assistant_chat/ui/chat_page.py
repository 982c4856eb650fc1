"""NiceGUI chat interface driven by the session controller."""

import logging

from nicegui import Client, ui

from assistant_chat.citations.resolver import CitationResolver
from assistant_chat.client.assistant_api import get_assistant_client
from assistant_chat.config import get_client_config
from assistant_chat.models.schemas import ConversationTurn, Role
from assistant_chat.session.controller import SessionController
from assistant_chat.ui.render import (
    code_to_html,
    references_to_html,
    render_assistant_turn,
)

logger = logging.getLogger(__name__)

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Titillium+Web:wght@400;600&display=swap"
      rel="stylesheet">
<link href="https://fonts.googleapis.com/icon?family=Material+Icons" rel="stylesheet">
<style>
    * { font-family: 'Titillium Web', sans-serif; }

    body { background: #f5f5f5; min-height: 100vh; }

    .app-container {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }

    .header { background: #1f2937; }

    .message-user {
        background: #f59e0b;
        color: #111827;
        border-radius: 18px 18px 4px 18px;
    }

    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }

    .message-code {
        background: #111827;
        color: #e5e7eb;
        border-radius: 8px;
        font-family: 'Menlo', 'Monaco', monospace;
        font-size: 12px;
    }

    .avatar-user { background: #f59e0b; }
    .avatar-assistant { background: #6b7280; }

    .typing-dot {
        width: 8px; height: 8px;
        background: #f59e0b;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }

    .input-box {
        background: #f9fafb;
        border: 1px solid #e5e7eb;
        border-radius: 12px;
        transition: border-color 0.2s;
    }
    .input-box:focus-within { border-color: #f59e0b; }

    .doc-ref { color: #4f46e5; font-size: 0.75em; }
    .doc-link {
        display: inline-flex; gap: 4px; align-items: center;
        background: white; border: 1px solid #e5e7eb; border-radius: 8px;
        padding: 2px 8px; margin: 4px 4px 0 0; font-size: 12px; color: #1f2937;
    }
    .doc-link:hover { border-color: #4f46e5; }

    .message-assistant strong { font-weight: 600; }
    .message-assistant em { font-style: italic; }
    .message-assistant pre { margin: 0.5rem 0; }
    .message-assistant code { font-family: 'Menlo', 'Monaco', monospace; }
    .message-assistant ul, .message-assistant ol { margin: 0.5rem 0; }
    .message-assistant a { color: #4f46e5; }
</style>
"""


@ui.page("/")
async def chat_page(client: Client) -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    config = get_client_config()
    controller = SessionController(get_assistant_client(), config=config)
    resolver = CitationResolver(controller.links)
    state = controller.state

    messages_container: ui.column
    error_banner: ui.row
    error_label: ui.label
    session_label: ui.label
    input_field: ui.textarea
    send_btn: ui.button

    # What is currently on screen, so streamed fragments only redraw the open turn
    rendered_count = -1
    rendered_loading = False
    open_body: ui.html | None = None
    open_refs: ui.html | None = None
    shown_error: str | None = None

    def render_avatar(is_user: bool) -> None:
        css = "avatar-user" if is_user else "avatar-assistant"
        icon = "person" if is_user else "smart_toy"
        avatar_classes = f"w-9 h-9 rounded-full flex items-center justify-center {css}"
        with ui.element("div").classes(avatar_classes):
            ui.icon(icon).classes("text-white text-lg")

    def fill_turn(turn: ConversationTurn, body: ui.html, refs: ui.html | None) -> None:
        if turn.role == Role.USER:
            body.set_content(turn.text.replace("\n", "<br>"))
        elif turn.role == Role.CODE:
            body.set_content(code_to_html(turn.text))
        else:
            rendered = render_assistant_turn(turn.text, resolver)
            body.set_content(rendered.html)
            if refs is not None:
                refs.set_content(references_to_html(rendered.references, controller.links))

    def render_turn(turn: ConversationTurn) -> tuple[ui.html, ui.html | None]:
        is_user = turn.role == Role.USER
        align = "justify-end" if is_user else "justify-start"
        bubble = {
            Role.USER: "message-user",
            Role.ASSISTANT: "message-assistant",
            Role.CODE: "message-code",
        }[turn.role]

        refs = None
        with ui.row().classes(f"w-full {align} gap-3 items-end"):
            if not is_user:
                render_avatar(False)
            with ui.column().classes("max-w-[70%] gap-1"):
                with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                    body = ui.html("", sanitize=False).classes("text-sm leading-relaxed")
                if turn.role == Role.ASSISTANT:
                    refs = ui.html("", sanitize=False).classes("flex flex-wrap")
            if is_user:
                render_avatar(True)
        fill_turn(turn, body, refs)
        return body, refs

    def render_status_indicator() -> None:
        with ui.row().classes("w-full justify-start gap-3 items-end"):
            render_avatar(False)
            with ui.element("div").classes("message-assistant px-4 py-3"):
                with ui.row().classes("gap-1"):
                    for _ in range(3):
                        ui.element("div").classes("typing-dot")

    def refresh_messages() -> None:
        nonlocal rendered_count, rendered_loading, open_body, open_refs
        turns = state.transcript.turns
        messages_container.clear()
        open_body = open_refs = None
        with messages_container:
            if not turns:
                with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                    ui.icon("forum").classes("text-5xl text-gray-300")
                    ui.label("Ask a question to get started").classes("text-lg text-gray-400")
            for turn in turns:
                open_body, open_refs = render_turn(turn)
            if state.session.loading:
                render_status_indicator()
        rendered_count = len(turns)
        rendered_loading = state.session.loading

    def update_controls() -> None:
        nonlocal shown_error
        session = state.session
        input_field.set_enabled(session.input_enabled)
        send_btn.set_enabled(session.input_enabled)
        if session.loading:
            send_btn.props("loading")
        else:
            send_btn.props(remove="loading")
        session_label.set_text(session.session_id[-8:].upper())

        error_label.set_text(session.last_error or "")
        error_banner.set_visibility(session.last_error is not None)
        if session.last_error and session.last_error != shown_error:
            with messages_container:
                ui.notify(session.last_error, type="negative")
        shown_error = session.last_error

    def on_state_change() -> None:
        turns = state.transcript.turns
        same_layout = (
            len(turns) == rendered_count
            and state.session.loading == rendered_loading
            and open_body is not None
        )
        if same_layout:
            fill_turn(turns[-1], open_body, open_refs)
        else:
            refresh_messages()
        update_controls()

    async def send_message() -> None:
        text = input_field.value.strip()
        if not text or not state.session.input_enabled:
            return
        input_field.value = ""
        await controller.submit(text)

    async def new_chat() -> None:
        await controller.reset()

    # === UI Layout ===
    with (
        ui.element("div").classes("w-full min-h-screen p-4 md:p-8"),
        ui.column().classes("w-full max-w-3xl mx-auto app-container").style(
            "height: calc(100vh - 4rem)"
        ),
    ):
        # Header
        with ui.row().classes("w-full header px-5 py-4 items-center justify-between"):
            with ui.row().classes("items-center gap-3"):
                ui.icon("smart_toy").classes("text-white text-3xl")
                ui.label(config.app_title).classes("text-lg font-semibold text-white")
            with ui.row().classes("items-center gap-3"):
                with ui.element("div").classes(
                    "bg-white/20 rounded-full px-3 py-1 flex items-center gap-2"
                ):
                    ui.icon("tag").classes("text-white/80 text-sm")
                    session_label = ui.label().classes("text-xs text-white/80 font-mono")
                ui.button(icon="add", on_click=new_chat).props(
                    "flat round color=white"
                ).tooltip("Start New Chat")

        # Error banner
        with ui.row().classes(
            "w-full px-5 py-2 bg-red-50 text-red-700 items-center justify-between"
        ) as error_banner:
            error_label = ui.label().classes("text-sm")
            ui.button(icon="close", on_click=controller.dismiss_error).props(
                "flat round dense color=red"
            )

        # Messages
        with (
            ui.scroll_area().classes("flex-grow w-full bg-gray-50"),
            ui.column().classes("w-full p-5"),
        ):
            messages_container = ui.column().classes("w-full gap-4")

        # Input
        with ui.row().classes("w-full p-4 gap-3 items-end bg-white border-t"):
            with ui.element("div").classes("flex-grow input-box px-3 py-2"):
                input_field = (
                    ui.textarea(placeholder="Enter your question")
                    .props("autogrow borderless dense rows=1")
                    .classes("w-full")
                    .on("keydown.enter.prevent", send_message)
                )
            send_btn = (
                ui.button(icon="send", on_click=send_message)
                .props("round unelevated color=amber")
            )

    refresh_messages()
    update_controls()

    unsubscribe = state.subscribe(on_state_change)
    client.on_disconnect(unsubscribe)

    await client.connected()
    logger.info(f"Chat page connected: {client.id}")
    await controller.start()
