"""
UI layer
Purpose: Streamlit-only glue. Renders the sidebar (sign-in, uploads, chat list)
and the active chat, collects user inputs, and delegates all work to the
controller. Keeps UI concerns (layout/state widgets) separate from
business logic so logic can be unit tested without Streamlit.
"""

import time

import streamlit as st

from core.config import get_settings
from core.controller import TutorChatController
from core.errors import InvalidAttachmentType
from core.interfaces import IdentityProvider
from core.logging_utils import get_logger
from core.models import AuthStatus, ChatSession, LLMSettings, MessageRole
from core.persistence.session_store import SessionStore
from core.persistence.storage import FileKeyValueStorage
from core.prompts import DefaultPromptFactory
from core.reveal import RevealAnimator
from core.services.identity import LocalIdentityProvider, StreamlitIdentityProvider
from core.services.llm_openai import OpenAILLMClient
from core.services.pricing import usage_caption
from core.services.security import DefaultSecurity
from core.services.tutor import make_tutor_call
from core.utils.data_uri import encode_data_uri

logger = get_logger("tutor_chat.ui")
settings = get_settings()

# ---------------------------
# Page config
# ---------------------------
st.set_page_config(
    page_title=settings.app_name,
    page_icon="📘",
    layout="wide",
    initial_sidebar_state="expanded",
)
# ---------------------------
# UI constants
# ---------------------------
ACCEPTED_EXTENSIONS = ["pdf"]
INPUT_PLACEHOLDER = "Ask a question about the PDF..."

# ---------------------------
# Session state init
# ---------------------------
st_session = st.session_state
st_session.setdefault("identity", None)
st_session.setdefault("auth_status", AuthStatus.LOADING)
st_session.setdefault("controller", None)
st_session.setdefault("api_key_set", False)
st_session.setdefault("upload_key", 0)
st_session.setdefault("draft", "")
st_session.setdefault("restore_input", None)
st_session.setdefault("pending_exchange", None)
st_session.setdefault("open_delete_dialog", False)
st_session.setdefault("simple_mode", False)


# ---------------------------
# Helpers
# ---------------------------
def get_identity() -> IdentityProvider:
    """Identity adapter for this browser session."""
    if st_session.identity is None:
        st_session.identity = (
            LocalIdentityProvider()
            if settings.auth_disabled
            else StreamlitIdentityProvider(settings.auth_provider)
        )
    return st_session.identity


def get_controller() -> TutorChatController:
    """Controller + store, created once per browser session."""
    if st_session.controller is None:
        security = DefaultSecurity(
            max_input_chars=settings.max_input_chars,
            accepted_media_type=settings.accepted_media_type,
        )
        store = SessionStore(
            FileKeyValueStorage(
                settings.storage_dir, quota_bytes=settings.storage_quota_bytes
            ),
            security=security,
        )
        reveal = RevealAnimator(
            step_chars=settings.reveal_step_chars,
            interval_s=settings.reveal_interval_ms / 1000,
        )
        st_session.controller = TutorChatController(
            store, tutor_call=None, reveal=reveal, security=security
        )
    return st_session.controller


def make_llm_settings() -> LLMSettings:
    return LLMSettings(
        model=settings.chat_model,
        temperature=settings.temperature,
        top_p=settings.top_p,
        max_tokens=settings.max_tokens,
    )


def connect_llm(api_key: str) -> None:
    """Bind the tutor call to a verified OpenAI client."""
    llm = OpenAILLMClient(api_key=api_key)
    llm.client.models.list()
    get_controller().tutor_call = make_tutor_call(
        llm=llm, prompts=DefaultPromptFactory(), settings=make_llm_settings()
    )
    st_session.api_key_set = True


def flush_notifications() -> None:
    for text in get_controller().drain_notifications():
        st.toast(text, icon="⚠️")


# ---------------------------
# Callbacks
# ---------------------------
def on_sign_in():
    if not get_identity().sign_in():
        st.toast("Sign-in failed. Please try again.", icon="⚠️")


def on_sign_out():
    get_controller().reset()
    st_session.pending_exchange = None
    st_session.draft = ""
    st_session.auth_status = AuthStatus.SIGNED_OUT
    get_identity().sign_out()


def on_file_uploaded():
    """Turn the uploaded PDF into a new chat session."""
    widget_key = f"pdf_upload_{st_session.upload_key}"
    uploaded = st_session.get(widget_key)
    st_session.upload_key += 1
    if uploaded is None:
        return

    controller = get_controller()
    media_type = uploaded.type or ""
    try:
        data_uri = encode_data_uri(uploaded.getvalue(), media_type)
        controller.new_session(
            uploaded.name, data_uri, media_type, source_file=uploaded
        )
    except InvalidAttachmentType as e:
        logger.info("Rejected upload %r: %s", uploaded.name, e)
        controller.notify(f"Invalid File Type. {e}")
        return
    st.toast(f'"{uploaded.name}" is ready for chatting.', icon="📄")


def on_select(session_id: str):
    get_controller().select_session(session_id)


def on_delete_request(session_id: str):
    get_controller().request_delete(session_id)
    st_session.open_delete_dialog = True


def on_simple_mode_toggle():
    get_controller().simple_mode = bool(st_session.simple_mode)


@st.dialog("Are you sure you want to delete this chat?")
def confirm_delete_dialog(file_name: str):
    st.write(
        "This action cannot be undone. This will permanently delete the chat "
        f'history for "{file_name}".'
    )
    c1, c2 = st.columns(2)
    with c1:
        if st.button("Cancel"):
            get_controller().cancel_delete()
            st.rerun()
    with c2:
        if st.button("Delete", type="primary"):
            removed = get_controller().confirm_delete()
            if removed is not None:
                if (
                    st_session.pending_exchange is not None
                    and st_session.pending_exchange.session_id == removed.id
                ):
                    st_session.pending_exchange = None
                st.toast(f'"{removed.source_file_name}" has been removed.')
            st.rerun()


# ---------------------------
# Renderers
# ---------------------------
def render_login():
    _, mid, _ = st.columns([1, 1, 1])
    with mid:
        st.markdown("## Welcome Back")
        st.caption(f"Sign in to continue to {settings.app_name}")
        st.button(
            "Sign in with Google",
            type="primary",
            on_click=on_sign_in,
            disabled=st_session.auth_status == AuthStatus.LOADING,
        )


def render_welcome():
    st.markdown(f"## {settings.app_name}")
    st.markdown("Upload a PDF document in the sidebar to start a conversation.")


def play_reveal(controller: TutorChatController, full_text: str) -> None:
    """Reveal the newest answer prefix by prefix, then show it in full."""
    placeholder = st.empty()
    for frame in controller.reveal.frames():
        placeholder.markdown(frame + "▌")
        time.sleep(controller.reveal.interval_s)
    placeholder.markdown(full_text)


def render_messages(controller: TutorChatController, session: ChatSession) -> None:
    for idx, msg in enumerate(session.messages):
        avatar_role = "user" if msg.role == MessageRole.USER else "assistant"
        with st.chat_message(avatar_role):
            if controller.reveal.is_revealing(session.id, idx):
                play_reveal(controller, msg.content)
            else:
                st.markdown(msg.content)


def run_pending_exchange(controller: TutorChatController, container) -> None:
    """Pending -> Resolved. The exchange leaves session state before the call,
    so a rerun requested mid-call cannot resolve it a second time."""
    pending = st_session.pending_exchange
    if pending is None:
        return
    with container:
        with st.chat_message("assistant"):
            with st.spinner("Thinking..."):
                st_session.pending_exchange = None
                outcome = controller.resolve(pending)
    logger.info("Exchange on %s finished: %s", pending.session_id, outcome.status.value)
    if outcome.restored_input is not None:
        st_session.restore_input = outcome.restored_input
    st.rerun()


def render_chat(controller: TutorChatController, session: ChatSession):
    st.markdown(f"### 📎 {session.source_file_name}")
    transcript = st.container(height=520, border=True)
    with transcript:
        render_messages(controller, session)

    busy = controller.is_pending(session.id)
    st.toggle(
        "Explain Like I'm Five",
        key="simple_mode",
        on_change=on_simple_mode_toggle,
        disabled=busy,
    )

    if st_session.restore_input is not None:
        st_session.draft = st_session.restore_input
        st_session.restore_input = None

    with st.form("ask_form", border=False):
        c1, c2 = st.columns([6, 1])
        with c1:
            question = st.text_input(
                "Question",
                key="draft",
                placeholder=INPUT_PLACEHOLDER,
                label_visibility="collapsed",
                disabled=busy or not controller.is_ready(),
            )
        with c2:
            submitted = st.form_submit_button(
                "Send", disabled=busy or not controller.is_ready()
            )

    if submitted:
        pending = controller.begin_exchange(question or "")
        if pending is not None:
            st_session.pending_exchange = pending
            st_session.restore_input = ""
        elif controller.input_text:
            st_session.restore_input = controller.input_text
        st.rerun()

    model = controller.model_used or settings.chat_model
    st.caption(usage_caption(model, controller.tokens_in, controller.tokens_out))

    # Runs last so the disabled form is already on screen during the call.
    pending = st_session.pending_exchange
    if pending is not None:
        target = transcript if pending.session_id == session.id else st.empty()
        run_pending_exchange(controller, target)


# ---------------------------
# Auth gate
# ---------------------------
identity = get_identity()
st_session.auth_status = identity.status()
if st_session.auth_status != AuthStatus.SIGNED_IN:
    render_login()
    st.stop()

user = identity.current_user()
if user is None:
    st.error("Signed in, but the identity provider returned no user id.")
    st.stop()

controller = get_controller()
controller.store.load_for_user(user.uid)
controller.reveal.drop_if_stale(s.id for s in controller.store.sessions)
flush_notifications()


# ---------------------------
# SIDEBAR: account, uploads, chat list
# ---------------------------
with st.sidebar:
    st.markdown(f"# 📘 {settings.app_name}")
    st.caption("Chat with your PDFs")

    st.markdown(f"Signed in as **{user.display_name or user.email or user.uid}**")
    st.button("Sign out", on_click=on_sign_out)
    st.divider()

    if not st_session.api_key_set:
        api_key = settings.openai_api_key
        if not api_key:
            st.markdown("## OPEN AI API Key Required")
            api_key = st.text_input(
                "Enter your API key",
                type="password",
                help="We do not store your key. It stays in your session only.",
            )
        if api_key:
            try:
                connect_llm(api_key)
            except Exception as e:
                logger.error("OpenAI client init failed: %s", e)
                st.error(f"OpenAI client init failed: {e}")
        else:
            st.warning("Please enter your API key to start asking questions.")

    st.markdown("## New Chat")
    st.file_uploader(
        "Upload a PDF",
        type=ACCEPTED_EXTENSIONS,
        key=f"pdf_upload_{st_session.upload_key}",
        on_change=on_file_uploaded,
    )

    st.markdown("## Chats")
    store = controller.store
    if not store.sessions:
        st.caption("Upload a PDF to start a new chat.")
    for s in store.sessions:
        col1, col2 = st.columns([5, 1])
        with col1:
            st.button(
                f"💬 {s.source_file_name}",
                key=f"select_{s.id}",
                type="primary" if s.id == store.active_session_id else "secondary",
                on_click=on_select,
                args=(s.id,),
            )
        with col2:
            st.button(
                "🗑️",
                key=f"delete_{s.id}",
                help="Delete chat",
                on_click=on_delete_request,
                args=(s.id,),
            )

if st_session.open_delete_dialog:
    st_session.open_delete_dialog = False
    doomed = controller.store.get_session(controller.store.pending_delete_id)
    if doomed is not None:
        confirm_delete_dialog(doomed.source_file_name)


# ---------------------------
# MAIN: active chat
# ---------------------------
active = controller.store.active_session()
if active is None:
    render_welcome()
    run_pending_exchange(controller, st.empty())
else:
    render_chat(controller, active)
