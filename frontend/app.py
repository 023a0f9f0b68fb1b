"""
Quality Audit - landing page.

Run with:
    streamlit run frontend/app.py

Needs the API (uvicorn src.api.main:app --port 8000) running; set API_URL
to point elsewhere.
"""

import streamlit as st

st.set_page_config(
    page_title="Quality Audit",
    page_icon="🎧",
    layout="wide",
    initial_sidebar_state="expanded",
)

from api_client import QualityAuditAPI

if "api" not in st.session_state:
    st.session_state.api = QualityAuditAPI()


def render_status(api: QualityAuditAPI):
    """Backend, database and Intercom token status."""
    try:
        health = api.health_full()
    except Exception:
        st.error(f"Cannot reach the API at {api.base_url}")
        st.code("uvicorn src.api.main:app --reload --port 8000")
        st.stop()

    col1, col2 = st.columns(2)
    with col1:
        db = health.get("database", {})
        if db.get("connected"):
            st.success(f"Database connected ({db.get('latency_ms')} ms)")
        else:
            st.warning(f"Database unavailable: {db.get('error')}")
    with col2:
        if health.get("intercom_configured"):
            st.success(f"Intercom token set (API {health.get('intercom_api_version')})")
        else:
            st.error("INTERCOM_ACCESS_TOKEN is not set on the API server")


st.title("Quality Audit")
st.caption("Call and chat audits")

render_status(st.session_state.api)

st.divider()
st.markdown(
    "- **Admin Conversations**: what an agent actually replied in over a date range\n"
    "- **Pull History**: earlier pulls and the conversations they returned"
)
