"""Acknowledged high-urgency incidents for the configured teams."""

import streamlit as st

from app.components.alert_card import render_alert
from app.state.session import (
    get_context,
    get_reports,
    run_with_orchestrator,
    set_active_incident,
    set_context,
    set_reports,
)
from core.exceptions import AlertOpsError


async def _refresh(orchestrator):
    context = await orchestrator.load_context()
    return context, await orchestrator.collect_report(context)


def render() -> None:
    st.header("Incident Dashboard")

    if st.button("Refresh", type="primary") or get_context() is None:
        try:
            context, reports = run_with_orchestrator(_refresh)
        except AlertOpsError as e:
            st.error(str(e))
            return
        set_context(context)
        set_reports(reports)

    context = get_context()
    reports = get_reports()

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Targeted users", len(context.targeted_user_ids))
    col2.metric("Incidents", len(reports))
    col3.metric("Alerts", sum(len(r.alerts) for r in reports))
    col4.metric("Unparsed alerts", sum(len(r.failed) for r in reports))

    st.divider()

    if not reports:
        st.info("No acknowledged high-urgency incidents assigned to your teams.")
        return

    for report in reports:
        incident = report.incident
        with st.expander(f"{incident.id} — {incident.title}", expanded=True):
            st.caption(f"{incident.html_url}")
            for result in report.alerts:
                render_alert(result)
            if st.button("Select", key=f"select_{incident.id}"):
                set_active_incident(incident.id)
                st.toast(f"{incident.id} selected. Open **Incident Detail** to act on it.")
