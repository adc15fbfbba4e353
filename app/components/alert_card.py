"""Display of one alert normalization result."""

from __future__ import annotations

import streamlit as st

from core.models import AlertResult, AlertShape

_SHAPE_LABELS = {
    AlertShape.HEALTH_CHECK: "Health check",
    AlertShape.CERTIFICATE_EXPIRY: "Certificate expiry",
    AlertShape.GENERIC: "Alert",
}


def render_alert(result: AlertResult) -> None:
    if result.alert is None:
        st.error(f"Alert {result.alert_id} could not be normalized: {result.error}")
        return

    alert = result.alert
    with st.container(border=True):
        st.markdown(f"**{alert.name}** · {_SHAPE_LABELS[alert.shape]} · `{alert.status}`")
        col1, col2 = st.columns(2)
        col1.write(f"**Cluster:** {alert.cluster_name}")
        col2.write(f"**Cluster ID:** {alert.cluster_id}")

        if alert.shape == AlertShape.HEALTH_CHECK:
            st.write(f"**Last healthy check-in:** {alert.last_check_in}")
            if alert.tags:
                st.write(f"**Tags:** {alert.tags}")
        elif alert.shape == AlertShape.CERTIFICATE_EXPIRY:
            st.write(f"**Host:** {alert.hostname} ({alert.ip or 'no IP'})")
        else:
            if alert.labels:
                st.code(alert.labels, language=None)
            if alert.console:
                st.link_button("Console", alert.console)

        links = [f"[SOP]({alert.sop})"] if alert.sop else []
        if alert.web_url:
            links.append(f"[PagerDuty]({alert.web_url})")
        if links:
            st.markdown(" · ".join(links))
