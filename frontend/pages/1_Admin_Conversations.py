"""
Admin Conversations Page

Loads the conversations an admin participated in on a day, showing the
first page of rows as soon as it arrives while later pages load in the
background.
"""

import streamlit as st
import pandas as pd
from datetime import date, timedelta
import time

# Add parent dir to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from api_client import QualityAuditAPI
from conversation_display import pull_date_for, to_table_row
from progressive_loader import LoadStatus, PageState, ProgressiveLoader

st.set_page_config(page_title="Admin Conversations - Quality Audit", page_icon="💬", layout="wide")

# Initialize API client and loader
if "api" not in st.session_state:
    st.session_state.api = QualityAuditAPI()
if "loader" not in st.session_state:
    st.session_state.loader = ProgressiveLoader(st.session_state.api)
if "current_page" not in st.session_state:
    st.session_state.current_page = 1

api = st.session_state.api
loader = st.session_state.loader

# Seconds between reruns while a load is in progress
REFRESH_INTERVAL = 1.5

PAGE_LABELS = {
    PageState.READY: "{n}",
    PageState.LOADING: "{n} ⏳",
    PageState.DISABLED: "{n}",
}


def render_filters():
    """Admin id and date range form. Starts a fresh load on submit."""
    params = st.query_params
    with st.form("filters"):
        col1, col2, col3 = st.columns(3)
        with col1:
            admin_id = st.text_input("Admin ID", value=params.get("admin_id", ""))
        with col2:
            start = st.date_input("From", value=date.today() - timedelta(days=5))
        with col3:
            end = st.date_input("To", value=date.today())
        submitted = st.form_submit_button("Load conversations", type="primary")

    if submitted:
        if not admin_id.strip():
            st.error("Admin ID is required.")
            return
        if start > end:
            st.error("Start date must be on or before end date.")
            return
        st.session_state.current_page = 1
        st.session_state.last_query = {
            "admin_id": admin_id.strip(),
            "start": start.isoformat(),
            "end": end.isoformat(),
        }
        loader.start(
            admin_id.strip(),
            f"{start.isoformat()} 00:00:00",
            f"{end.isoformat()} 23:59:59",
        )


def render_pagination(snapshot):
    pages = max(snapshot.projected_pages, 1)
    cols = st.columns(min(pages, 12) + 2)

    with cols[0]:
        if st.button("‹ Prev", disabled=st.session_state.current_page <= 1):
            st.session_state.current_page -= 1
            st.rerun()

    for n in range(1, min(pages, 12) + 1):
        state = snapshot.page_state(n)
        with cols[n]:
            label = PAGE_LABELS[state].format(n=n)
            if st.button(
                label,
                key=f"page_{n}",
                disabled=state is not PageState.READY,
                type="primary" if n == st.session_state.current_page else "secondary",
                help="Loading..." if state is PageState.LOADING else None,
            ):
                st.session_state.current_page = n
                st.rerun()

    with cols[-1]:
        next_state = snapshot.page_state(st.session_state.current_page + 1)
        if st.button(
            "Next ›" if next_state is not PageState.LOADING else "Loading...",
            disabled=next_state is not PageState.READY,
        ):
            st.session_state.current_page += 1
            st.rerun()


def render_pull_recording(snapshot):
    """Record the pull once everything has loaded."""
    query = st.session_state.get("last_query")
    if not query or snapshot.status is not LoadStatus.DONE:
        return

    pull_date = pull_date_for(query)
    if pull_date is None:
        st.caption("Pick a single day (From = To) to record this pull in history.")
        return

    with st.expander("Record this pull"):
        with st.form("record_pull"):
            pulled_by_email = st.text_input("Your email")
            employee_name = st.text_input("Employee name")
            employee_email = st.text_input("Employee email")
            saved = st.form_submit_button("Save to pull history")

        if saved:
            try:
                api.record_pull(
                    pulled_by_email=pulled_by_email,
                    employee_name=employee_name,
                    employee_email=employee_email,
                    employee_admin_id=query["admin_id"],
                    pull_date=pull_date,
                    conversation_ids=[str(row.get("id")) for row in snapshot.rows],
                )
                st.success(f"Recorded {len(snapshot.rows)} conversations")
            except Exception as e:
                st.error(f"Failed to record pull: {e}")


def main():
    st.title("Admin Conversations")
    st.markdown("Conversations the agent actually replied in (not just assigned to)")

    render_filters()

    snapshot = loader.snapshot()
    if snapshot.status is LoadStatus.IDLE:
        st.info("Pick an admin and a date range to load conversations.")
        return

    if snapshot.status is LoadStatus.FAILED and not snapshot.rows:
        st.error(snapshot.error or "Failed to fetch conversations.")
        return

    col1, col2, col3 = st.columns(3)
    with col1:
        total = f"{len(snapshot.rows)}+" if snapshot.is_loading else str(len(snapshot.rows))
        st.metric("Conversations", total)
    with col2:
        st.metric("Replies in window", snapshot.participation_count)
    with col3:
        st.metric("Fetch errors", snapshot.error_count)

    if snapshot.progress_text:
        st.caption(snapshot.progress_text)
    if snapshot.status is LoadStatus.FAILED:
        st.warning(snapshot.error)

    page_rows = snapshot.page_rows(st.session_state.current_page)
    if page_rows:
        st.dataframe(
            pd.DataFrame([to_table_row(conv) for conv in page_rows]),
            use_container_width=True,
            hide_index=True,
        )
    elif not snapshot.is_loading:
        st.info("No conversations with participation found for this range.")

    if snapshot.rows or snapshot.is_loading:
        render_pagination(snapshot)

    render_pull_recording(snapshot)

    if snapshot.is_loading:
        time.sleep(REFRESH_INTERVAL)
        st.rerun()


main()
