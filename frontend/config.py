import os

import streamlit as st

APP_TITLE = "🔬 Research Oracle"

# The API rejects user agents that look automated, including python-requests.
USER_AGENT = "ResearchOracle-Streamlit/0.1"


def _setting(name: str, default=None):
    value = os.getenv(name)
    if value:
        return value
    try:
        return st.secrets.get(name, default)
    except FileNotFoundError:
        return default


API_BASE_URL = _setting("API_BASE_URL", "http://localhost:8000").rstrip("/")
PDF_BUCKET_URL = _setting("PDF_BUCKET_URL")
