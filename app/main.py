"""Streamlit entrypoint for the alertops dashboard."""

import logging

import streamlit as st

from app.pages.dashboard import render as dashboard_page
from app.pages.incident_detail import render as incident_detail_page
from app.pages.settings import render as settings_page
from app.state.session import get_session_settings, init_session_state

# ---------------------------------------------------------------------------
# Session state initialization
# ---------------------------------------------------------------------------

init_session_state()
settings = get_session_settings()
logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

pages = st.navigation(
    [
        st.Page(dashboard_page, title="Dashboard", icon="📟", url_path="dashboard", default=True),
        st.Page(incident_detail_page, title="Incident Detail", icon="🔍", url_path="incident"),
        st.Page(settings_page, title="Settings", icon="⚙️", url_path="settings"),
    ]
)

# ---------------------------------------------------------------------------
# Sidebar branding (below the built-in page nav)
# ---------------------------------------------------------------------------

with st.sidebar:
    st.title("📟 alertops")
    st.caption(
        f"Mode: **{settings.get_integration_mode('pagerduty')}**"
        + (f" | Scenario: **{settings.mock_scenario}**" if settings.get_integration_mode("pagerduty") == "mock" else "")
    )

# ---------------------------------------------------------------------------
# Run the selected page
# ---------------------------------------------------------------------------

pages.run()
