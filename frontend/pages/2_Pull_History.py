"""
Pull History Page

Browse previous participation pulls.
"""

import streamlit as st
import pandas as pd

# Add parent dir to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from api_client import QualityAuditAPI

st.set_page_config(page_title="Pull History - Quality Audit", page_icon="🗂️", layout="wide")

if "api" not in st.session_state:
    st.session_state.api = QualityAuditAPI()

api = st.session_state.api


def main():
    st.title("Pull History")

    col1, col2 = st.columns(2)
    with col1:
        admin_id = st.text_input("Admin ID (optional)")
    with col2:
        pull_date = st.date_input("Pull date (optional)", value=None)

    try:
        result = api.list_pulls(
            admin_id=admin_id.strip() or None,
            pull_date=pull_date.isoformat() if pull_date else None,
        )
    except Exception as e:
        st.error(f"Cannot load pull history: {e}")
        st.stop()

    st.caption(f"{result['total']} pull(s)")
    if not result["entries"]:
        st.info("No pulls recorded yet.")
        return

    df = pd.DataFrame([
        {
            "Date": entry["pull_date"],
            "Employee": entry["employee_name"],
            "Admin ID": entry["employee_admin_id"],
            "Conversations": entry["conversation_count"],
            "Pulled by": entry["pulled_by_email"],
            "AI audit": entry.get("ai_audit_status") or "",
            "Recorded": entry["created_at"],
        }
        for entry in result["entries"]
    ])
    st.dataframe(df, use_container_width=True, hide_index=True)


main()
