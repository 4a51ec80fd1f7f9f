import streamlit as st
from api import get_paper, stream_chat
from citations import Citation, split_citations, to_display_markdown
from streaming import ChatSession, StreamConsumer
from ui.autoscroll import autoscroll
from ui.paper_reader import render_paper_reader

st.title("💬 Research Oracle")
st.caption("Ask about trends, gaps, topics or specific findings across the paper corpus")

EXAMPLE_PROMPTS = [
    "Give me an overview of the database",
    "How has research on CRISPR evolved over time?",
    "What are the understudied topics?",
    "Surprise me with an insight",
]

# ----------------------
# Session state
# ----------------------
st.session_state.setdefault("chat_session", ChatSession())
st.session_state.setdefault("active_paper_id", None)

session: ChatSession = st.session_state["chat_session"]


def open_paper(paper_id: str):
    st.session_state["active_paper_id"] = paper_id


def render_reply(content: str, message_id: str):
    """Render an assistant reply with citations as buttons that open the paper."""
    text_parts = []
    for idx, segment in enumerate(split_citations(content)):
        if isinstance(segment, Citation):
            if text_parts:
                st.markdown("".join(text_parts))
                text_parts = []
            st.button(
                f"📄 {segment.label}",
                key=f"cite_{message_id}_{idx}",
                on_click=open_paper,
                args=(segment.paper_id,),
            )
        else:
            text_parts.append(segment)
    if text_parts:
        st.markdown("".join(text_parts))


# ----------------------
# Sidebar – paper details and controls
# ----------------------
with st.sidebar:
    if st.session_state["active_paper_id"]:
        header_col, close_col = st.columns([4, 1])
        with close_col:
            if st.button("❌", key="close_paper"):
                st.session_state["active_paper_id"] = None
                st.rerun()
        with header_col:
            st.header("Paper")

        try:
            render_paper_reader(get_paper(st.session_state["active_paper_id"]))
        except Exception as e:
            st.error(f"Failed to load paper: {e}")

        st.markdown("---")

    st.header("Try asking")
    for prompt in EXAMPLE_PROMPTS:
        st.caption(f"• {prompt}")

    if st.button("🗑️ Clear conversation", use_container_width=True):
        st.session_state["chat_session"] = ChatSession()
        st.session_state["active_paper_id"] = None
        st.rerun()

# ----------------------
# Render chat history
# ----------------------
for msg in session.messages:
    with st.chat_message(msg.role):
        if msg.role == "assistant" and not msg.error:
            render_reply(msg.content, msg.id)
        elif msg.error:
            st.error(msg.content)
        else:
            st.write(msg.content)

if session.messages:
    autoscroll(session.newest_role)

# ----------------------
# Chat input
# ----------------------
query = st.chat_input("Ask a question about the research papers...")

if query:
    payload, reply_id = session.send(query)

    with st.chat_message("user"):
        st.write(query)
    autoscroll("user")

    with st.chat_message("assistant"):
        placeholder = st.empty()
        placeholder.markdown("_Searching the corpus..._")

        consumer = StreamConsumer(
            on_flush=lambda text: placeholder.markdown(to_display_markdown(text) + " ▌"),
        )
        result = consumer.run(stream_chat(payload))

    session.update(reply_id, result.text, error=result.error is not None)
    st.rerun()
