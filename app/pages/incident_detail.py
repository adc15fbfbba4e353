"""Single incident view: alerts, notes, and actions."""

import streamlit as st

from app.components.alert_card import render_alert
from app.components.notes_timeline import render_notes
from app.state.session import (
    get_active_incident_id,
    get_context,
    get_reports,
    run_with_orchestrator,
    set_active_incident,
)
from core.exceptions import AlertOpsError


def render() -> None:
    st.header("Incident Detail")

    context = get_context()
    reports = get_reports()

    if context is None or not reports:
        st.info("No incidents loaded. Refresh the **Dashboard** first.")
        return

    # Allow selection if no active incident
    incident_ids = [r.incident.id for r in reports]
    active_id = get_active_incident_id()
    idx = incident_ids.index(active_id) if active_id in incident_ids else 0

    selected_id = st.selectbox("Incident", incident_ids, index=idx)
    set_active_incident(selected_id)
    report = next(r for r in reports if r.incident.id == selected_id)
    incident = report.incident

    # Header
    st.subheader(incident.title)
    col1, col2, col3 = st.columns(3)
    col1.metric("Status", incident.status.value)
    col2.metric("Urgency", incident.urgency.value)
    col3.metric("Assignees", ", ".join(a.assignee.summary or a.assignee.id for a in incident.assignments) or "—")

    # Actions
    st.divider()
    st.subheader("Actions")
    col1, col2 = st.columns(2)
    try:
        if col1.button("Acknowledge as me"):
            run_with_orchestrator(lambda o: o.acknowledge(context, [incident.id]))
            st.success(f"Acknowledged {incident.id} as {context.current_user.name}.")
        if col2.button("Silence", disabled=context.silent_user is None):
            run_with_orchestrator(lambda o: o.silence(context, [incident.id]))
            st.success(f"Reassigned {incident.id} to {context.silent_user.name}.")
    except AlertOpsError as e:
        st.error(str(e))

    # Alerts
    st.divider()
    st.subheader("Alerts")
    if report.alerts:
        for result in report.alerts:
            render_alert(result)
    else:
        st.caption("No alerts attached.")

    # Notes
    st.divider()
    st.subheader("Notes")
    with st.form("add_note", clear_on_submit=True):
        content = st.text_area("Add a note")
        if st.form_submit_button("Post note") and content.strip():
            try:
                run_with_orchestrator(lambda o: o.annotate(context, incident.id, content.strip()))
            except AlertOpsError as e:
                st.error(str(e))

    try:
        notes = run_with_orchestrator(lambda o: o.notes(incident.id))
    except AlertOpsError as e:
        st.error(str(e))
        return
    render_notes(notes)
