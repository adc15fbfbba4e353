"""Settings page — toggle mock/live mode, select scenario, review targeting."""

import streamlit as st

from app.state.session import get_context, get_session_settings, set_session_settings


def render() -> None:
    st.header("Settings")

    settings = get_session_settings()

    # ------------------------------------------------------------------
    # Global mode
    # ------------------------------------------------------------------
    st.subheader("Mode")
    mode = st.radio(
        "PagerDuty access",
        options=["mock", "live"],
        index=0 if settings.get_integration_mode("pagerduty") == "mock" else 1,
        horizontal=True,
        help="In mock mode, incidents come from fixture scenarios. Live mode calls the PagerDuty API.",
    )
    if mode == "live" and not settings.pagerduty_token:
        st.warning("No PagerDuty token configured. Set `token` in srepd.yaml or PAGERDUTY_TOKEN.")

    # ------------------------------------------------------------------
    # Mock scenario selector
    # ------------------------------------------------------------------
    st.subheader("Mock Scenario")
    scenarios = settings.available_scenarios
    scenario = st.selectbox(
        "Active scenario",
        options=scenarios,
        index=scenarios.index(settings.mock_scenario) if settings.mock_scenario in scenarios else 0,
        disabled=(mode != "mock"),
    )
    mock_delay = st.checkbox(
        "Simulate API latency",
        value=settings.mock_delay_enabled,
        disabled=(mode != "mock"),
    )

    # ------------------------------------------------------------------
    # Targeting (read-only; edit srepd.yaml to change)
    # ------------------------------------------------------------------
    st.subheader("Targeting")
    st.write(f"**Teams:** {', '.join(settings.teams) or '—'}")
    st.write(f"**Silent user:** {settings.silent_user or '—'}")
    st.write(f"**Ignored users:** {', '.join(settings.ignored_users) or '—'}")

    context = get_context()
    if context is not None:
        st.write(f"**Signed in as:** {context.current_user.name} ({context.current_user.email})")
        st.write(f"**Targeted users:** {', '.join(context.targeted_user_ids) or '—'}")

    # ------------------------------------------------------------------
    # Apply
    # ------------------------------------------------------------------
    st.divider()
    if st.button("Apply settings", type="primary"):
        updated = settings.model_copy(
            update={
                "alertops_mode": mode,
                "pagerduty_mode": "",
                "mock_scenario": scenario,
                "mock_delay_enabled": mock_delay,
            }
        )
        set_session_settings(updated)
        st.success("Settings applied.")
        st.rerun()
