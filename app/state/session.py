"""Streamlit session state management."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import streamlit as st

from app.config import Settings, get_settings
from core.models import IncidentReport, OnCallContext
from core.orchestrator import Orchestrator
from integrations.registry import IntegrationRegistry

T = TypeVar("T")

# Keys used in st.session_state
_SETTINGS_KEY = "app_settings"
_REGISTRY_KEY = "integration_registry"
_CONTEXT_KEY = "oncall_context"
_REPORTS_KEY = "incident_reports"
_ACTIVE_INCIDENT_KEY = "active_incident_id"


def init_session_state() -> None:
    """Initialize all session state keys with defaults if not already set."""
    if _SETTINGS_KEY not in st.session_state:
        st.session_state[_SETTINGS_KEY] = get_settings()
    if _REGISTRY_KEY not in st.session_state:
        st.session_state[_REGISTRY_KEY] = IntegrationRegistry(st.session_state[_SETTINGS_KEY])
    if _CONTEXT_KEY not in st.session_state:
        st.session_state[_CONTEXT_KEY] = None
    if _REPORTS_KEY not in st.session_state:
        st.session_state[_REPORTS_KEY] = []
    if _ACTIVE_INCIDENT_KEY not in st.session_state:
        st.session_state[_ACTIVE_INCIDENT_KEY] = None


def get_session_settings() -> Settings:
    """Return the current Settings from session state."""
    return st.session_state[_SETTINGS_KEY]


def set_session_settings(settings: Settings) -> None:
    """Replace the settings; the provider and any fetched data are dropped with them."""
    st.session_state[_SETTINGS_KEY] = settings
    st.session_state[_REGISTRY_KEY] = IntegrationRegistry(settings)
    st.session_state[_CONTEXT_KEY] = None
    st.session_state[_REPORTS_KEY] = []


def run_with_orchestrator(action: Callable[[Orchestrator], Awaitable[T]]) -> T:
    """Run one coroutine against a fresh Orchestrator and return its result.

    The provider lives in the session's registry so mock state survives
    reruns; the live client's connections are closed after every action.
    """
    settings = get_session_settings()
    registry: IntegrationRegistry = st.session_state[_REGISTRY_KEY]

    async def _run() -> T:
        orchestrator = Orchestrator(settings, registry)
        try:
            return await action(orchestrator)
        finally:
            await orchestrator.aclose()

    return asyncio.run(_run())


def get_context() -> OnCallContext | None:
    return st.session_state[_CONTEXT_KEY]


def set_context(context: OnCallContext) -> None:
    st.session_state[_CONTEXT_KEY] = context


def get_reports() -> list[IncidentReport]:
    """Return the most recently fetched incident reports."""
    return st.session_state[_REPORTS_KEY]


def set_reports(reports: list[IncidentReport]) -> None:
    st.session_state[_REPORTS_KEY] = reports


def set_active_incident(incident_id: str | None) -> None:
    """Set the currently focused incident."""
    st.session_state[_ACTIVE_INCIDENT_KEY] = incident_id


def get_active_incident_id() -> str | None:
    """Return the ID of the currently focused incident, if any."""
    return st.session_state[_ACTIVE_INCIDENT_KEY]
