import pandas as pd
import streamlit as st
from api import get_overview, get_papers_per_decade, get_papers_per_year, get_topic_papers, get_topics

st.title("📊 Research Analytics")
st.caption("How the corpus is spread over time and topics")


# ======================
# Overview
# ======================
try:
    overview = get_overview()
except Exception as e:
    st.error(f"Failed to load analytics: {e}")
    st.stop()

col1, col2, col3, col4 = st.columns(4)
col1.metric("Total Papers", f"{overview['total_papers']:,}")
col2.metric("Topics", f"{overview['total_topics']:,}")
col3.metric(
    "Year Range",
    f"{overview['min_year']}–{overview['max_year']}" if overview.get("min_year") else "N/A",
)
col4.metric("Avg Papers / Year", overview["average_per_year"])

st.markdown("---")


# ======================
# Charts
# ======================
years_col, decades_col = st.columns(2)

with years_col:
    st.subheader("Publications per Year")
    years = pd.DataFrame(get_papers_per_year())
    if years.empty:
        st.info("No dated papers yet.")
    else:
        st.line_chart(years.set_index("year")["paper_count"])

with decades_col:
    st.subheader("Papers by Decade")
    decades = pd.DataFrame(get_papers_per_decade())
    if decades.empty:
        st.info("No dated papers yet.")
    else:
        decades["decade"] = decades["decade"].astype(str) + "s"
        st.bar_chart(decades.set_index("decade")["paper_count"])


# ======================
# Topics
# ======================
st.markdown("---")
st.subheader("Top Research Topics")

limit = st.slider("Topics shown", min_value=5, max_value=50, value=15)
topic_response = get_topics(limit=limit)
topics = pd.DataFrame(topic_response["topics"])

if topics.empty:
    st.info("No topic labels yet.")
else:
    st.caption(f"Showing {len(topics)} of {topic_response['total']} topics")
    st.bar_chart(topics.set_index("entity")["paper_count"], horizontal=True)

    selected = st.selectbox(
        "Papers for topic",
        options=[None, *topics["entity"].tolist()],
        format_func=lambda t: "Choose a topic" if t is None else t,
    )

    if selected:
        try:
            for paper in get_topic_papers(selected):
                with st.container(border=True):
                    st.markdown(f"**{paper['title']}**")
                    st.caption(str(paper.get("pub_year") or "Year unknown"))
                    if paper.get("summary"):
                        st.write(paper["summary"])
        except Exception as e:
            st.error(f"Failed to load papers for {selected}: {e}")
