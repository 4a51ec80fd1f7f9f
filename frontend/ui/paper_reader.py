import streamlit as st


def render_paper_reader(paper: dict):
    st.subheader(paper["title"])

    meta = []
    if paper.get("pub_year"):
        meta.append(str(paper["pub_year"]))
    if paper.get("filename"):
        meta.append(paper["filename"])
    if meta:
        st.caption(" • ".join(meta))

    if paper.get("entities"):
        st.markdown(
            "**Topics:** " + ", ".join(paper["entities"])
        )

    if paper.get("pdf_url"):
        st.link_button("📄 Open PDF", paper["pdf_url"])

    st.divider()

    if paper.get("summary"):
        with st.expander("Summary", expanded=True):
            st.write(paper["summary"])

    if paper.get("findings"):
        with st.expander("Key findings", expanded=True):
            st.write(paper["findings"])

    if paper.get("hypothesis"):
        with st.expander("Hypothesis"):
            st.write(paper["hypothesis"])

    if not any(paper.get(key) for key in ("summary", "findings", "hypothesis")):
        st.info("No extracted content available for this paper yet.")
