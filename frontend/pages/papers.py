import streamlit as st
from api import get_paper, search_papers
from ui.paper_reader import render_paper_reader


# ======================
# Page setup & state
# ======================
st.title("📄 Paper Database")

st.session_state.setdefault("papers", [])
st.session_state.setdefault("papers_total", 0)
st.session_state.setdefault("papers_page", 0)
st.session_state.setdefault("papers_filters", {})
st.session_state.setdefault("active_pdf", None)
st.session_state.setdefault("active_pdf_title", None)
st.session_state.setdefault("selected_paper", None)
st.session_state.setdefault("bookmarks", set())

DECADES = [None, 1960, 1970, 1980, 1990, 2000, 2010, 2020]


# ======================
# Card styling
# ======================
st.markdown(
    """
<style>
.paper-card {
    padding: 1rem;
    border-radius: 12px;
    border: 1px solid #e6e6e6;
    margin-bottom: 1.25rem;
    height: 200px;
    display: flex;
    flex-direction: column;
    justify-content: space-between;
    overflow: hidden;
}

.paper-title {
    font-size: 1.05rem;
    font-weight: 600;
    margin-bottom: 0.25rem;
}

.paper-meta {
    font-size: 0.8rem;
    color: #777;
}

.paper-summary {
    font-size: 0.85rem;
    color: #555;
    margin-top: 0.3rem;
}

.paper-tags {
    font-size: 0.75rem;
    color: #666;
    margin-top: 0.3rem;
}
</style>
""",
    unsafe_allow_html=True,
)


# ======================
# PDF preview
# ======================
if st.session_state["active_pdf"]:
    with st.container(border=True):
        header_col, close_col = st.columns([8, 1])

        with header_col:
            st.subheader(st.session_state["active_pdf_title"])

        with close_col:
            if st.button("❌ Close", key="close_pdf"):
                st.session_state["active_pdf"] = None
                st.session_state["active_pdf_title"] = None
                st.rerun()

        st.components.v1.iframe(
            st.session_state["active_pdf"],
            height=900,
            scrolling=True,
        )

    st.markdown("---")


# ======================
# Paper details
# ======================
if st.session_state["selected_paper"]:
    with st.container(border=True):
        paper = st.session_state["selected_paper"]
        _, close_col = st.columns([8, 1])
        with close_col:
            if st.button("❌ Close", key="close_detail"):
                st.session_state["selected_paper"] = None
                st.rerun()

        render_paper_reader(paper)

    st.markdown("---")


# ======================
# Sidebar search
# ======================
with st.sidebar.form("paper_search_form"):
    st.header("Search & Filters")

    query = st.text_input("Search title, summary or topic")

    decade = st.selectbox(
        "Decade",
        options=DECADES,
        format_func=lambda d: "Any" if d is None else f"{d}s",
    )

    entity = st.text_input("Exact topic (optional)")

    limit = st.selectbox("Results per page", [10, 20, 50], index=1)

    submitted = st.form_submit_button("🔍 Search")


# ======================
# Fetch papers
# ======================
def load_page(page: int):
    filters = st.session_state["papers_filters"]
    try:
        response = search_papers(
            query=filters.get("query"),
            decade=filters.get("decade"),
            entity=filters.get("entity"),
            limit=filters.get("limit", 20),
            offset=page * filters.get("limit", 20),
        )
        st.session_state["papers"] = response.get("papers", [])
        st.session_state["papers_total"] = response.get("total", 0)
        st.session_state["papers_page"] = page
    except Exception as e:
        st.error(f"Failed to load papers: {e}")


if submitted:
    st.session_state["papers_filters"] = {
        "query": query or None,
        "decade": decade,
        "entity": entity or None,
        "limit": limit,
    }
    load_page(0)
elif not st.session_state["papers"] and not st.session_state["papers_filters"]:
    st.session_state["papers_filters"] = {"limit": 20}
    load_page(0)

papers = st.session_state["papers"]
total = st.session_state["papers_total"]
page = st.session_state["papers_page"]
page_size = st.session_state["papers_filters"].get("limit", 20)

st.caption(f"{total:,} papers match")


# ======================
# Tabs
# ======================
tab_all, tab_bookmarked = st.tabs(["All Papers", "⭐ Bookmarked"])


def render_cards(paper_list, context: str):
    if not paper_list:
        st.info("No papers to show.")
        return

    cols = st.columns(2)

    for idx, paper in enumerate(paper_list):
        col = cols[idx % 2]
        paper_id = str(paper["id"])
        is_bookmarked = paper_id in st.session_state["bookmarks"]
        summary = paper.get("summary") or ""

        with col:
            st.markdown(
                f"""
<div class="paper-card">
    <div>
        <div class="paper-title">{paper['title']}</div>
        <div class="paper-meta">
            {paper.get("pub_year") or "Year unknown"}
        </div>
        <div class="paper-summary">
            {summary[:160] + "..." if len(summary) > 160 else summary}
        </div>
        <div class="paper-tags">
            {" • ".join(paper.get("entities", [])[:5])}
        </div>
    </div>
</div>
""",
                unsafe_allow_html=True,
            )

            action_cols = st.columns([1, 1, 1])

            with action_cols[0]:
                if st.button(
                    "⭐" if is_bookmarked else "☆",
                    key=f"bm_{context}_{paper_id}",
                    use_container_width=True,
                ):
                    if is_bookmarked:
                        st.session_state["bookmarks"].remove(paper_id)
                    else:
                        st.session_state["bookmarks"].add(paper_id)
                    st.rerun()

            with action_cols[1]:
                if st.button(
                    "Details",
                    key=f"detail_{context}_{paper_id}",
                    use_container_width=True,
                ):
                    try:
                        st.session_state["selected_paper"] = get_paper(paper_id)
                        st.rerun()
                    except Exception as e:
                        st.error(f"Failed to load paper: {e}")

            with action_cols[2]:
                if st.button(
                    "Open PDF",
                    key=f"open_{context}_{paper_id}",
                    use_container_width=True,
                ):
                    try:
                        detail = get_paper(paper_id)
                    except Exception as e:
                        st.error(f"Failed to load paper: {e}")
                    else:
                        if detail.get("pdf_url"):
                            st.session_state["active_pdf"] = detail["pdf_url"]
                            st.session_state["active_pdf_title"] = paper["title"]
                            st.rerun()
                        else:
                            st.warning("No PDF available for this paper.")


# ======================
# Render tabs
# ======================
with tab_all:
    render_cards(papers, context="all")

    prev_col, info_col, next_col = st.columns([1, 2, 1])
    with prev_col:
        if st.button("← Previous", disabled=page == 0):
            load_page(page - 1)
            st.rerun()
    with info_col:
        pages = max(1, -(-total // page_size))
        st.caption(f"Page {page + 1} of {pages}")
    with next_col:
        if st.button("Next →", disabled=(page + 1) * page_size >= total):
            load_page(page + 1)
            st.rerun()

with tab_bookmarked:
    bookmarked_papers = [
        p for p in papers if str(p["id"]) in st.session_state["bookmarks"]
    ]
    render_cards(bookmarked_papers, context="bookmarked")
