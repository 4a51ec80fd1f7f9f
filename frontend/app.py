import streamlit as st
from api import get_overview, get_recent_papers, get_topics
from config import APP_TITLE

st.set_page_config(
    page_title=APP_TITLE,
    layout="wide",
)

# -------------------------
# Header
# -------------------------
st.title(APP_TITLE)
st.caption(
    "Ask questions across a curated corpus of research papers and get answers grounded in the papers themselves")

st.markdown("---")

# -------------------------
# Corpus at a glance
# -------------------------
try:
    overview = get_overview()
    topics = get_topics(limit=1)["topics"]
except Exception as e:
    overview, topics = None, []
    st.warning(f"Could not reach the API: {e}")

if overview:
    col1, col2, col3 = st.columns(3)
    col1.metric("Indexed Papers", f"{overview['total_papers']:,}")
    col2.metric("Searchable Text Segments", f"{overview['total_chunks']:,}")
    col3.metric("Top Research Topic", topics[0]["entity"] if topics else "N/A")

    if overview.get("min_year") and overview.get("max_year"):
        st.caption(f"Publications from {overview['min_year']} to {overview['max_year']}")

# -------------------------
# Research tools
# -------------------------
st.markdown("### 🧭 Research Tools")

col1, col2, col3 = st.columns(3)

with col1:
    st.markdown(
        """
**💬 Research Oracle**
- Ask in plain language
- Trends, gaps and hidden connections
- Every claim linked to its paper
"""
    )
    st.page_link("pages/chat.py", label="Open chat", icon="💬")

with col2:
    st.markdown(
        """
**📄 Database Browser**
- Search titles, summaries and topics
- Filter by decade
- Read findings and open the PDF
"""
    )
    st.page_link("pages/papers.py", label="Browse papers", icon="📄")

with col3:
    st.markdown(
        """
**📊 Analytics**
- Publications per year and decade
- Most studied topics
- Papers behind each topic
"""
    )
    st.page_link("pages/analytics.py", label="View analytics", icon="📊")

# -------------------------
# Recently added
# -------------------------
st.markdown("---")
st.markdown("### 🆕 Recently Added")

try:
    recent = get_recent_papers(limit=4)
except Exception as e:
    recent = []
    st.error(f"Failed to load recent papers: {e}")

if recent:
    cols = st.columns(len(recent))
    for col, paper in zip(cols, recent):
        with col.container(border=True):
            st.markdown(f"**{paper['title']}**")
            if paper.get("pub_year"):
                st.caption(str(paper["pub_year"]))
            if paper.get("entities"):
                st.caption(" • ".join(paper["entities"][:3]))
else:
    st.info("No papers indexed yet.")

# -------------------------
# Sidebar branding
# -------------------------
st.sidebar.markdown("---")
st.sidebar.caption("Research Oracle • Paper corpus assistant")
