"""Shared test fixtures for the alertops test suite."""

from __future__ import annotations

from typing import Any

import pytest

from app.config import Settings
from core.models import (
    Assignment,
    Incident,
    IncidentStatus,
    Page,
    RawAlert,
    Reference,
    Urgency,
    User,
)


@pytest.fixture
def mock_settings() -> Settings:
    """Return a Settings instance configured for mock mode."""
    return Settings(
        alertops_mode="mock",
        pagerduty_mode="",
        mock_scenario="acknowledged_high",
        mock_delay_enabled=False,
        teams=["PTEAM01"],
        silent_user="PSILENT",
        ignored_users=["PUSER03"],
        page_limit=2,
    )


def make_alert(details: dict[str, Any] | None, **overrides: Any) -> RawAlert:
    """Build a RawAlert with the given ``details`` payload."""
    data: dict[str, Any] = {
        "id": "PALERT01",
        "summary": "Something is wrong",
        "status": "triggered",
        "severity": "critical",
        "html_url": "https://example.pagerduty.com/alerts/PALERT01",
        "incident": {"id": "PINC01", "type": "incident_reference"},
        "service": {"id": "PSVC01", "type": "service_reference"},
        "body": {"details": details} if details is not None else {},
    }
    data.update(overrides)
    return RawAlert(**data)


def make_incident(incident_id: str = "PINC01", **overrides: Any) -> Incident:
    data: dict[str, Any] = {
        "id": incident_id,
        "title": f"Incident {incident_id}",
        "status": IncidentStatus.ACKNOWLEDGED,
        "urgency": Urgency.HIGH,
        "assignments": [Assignment(assignee=Reference(id="PUSER01", type="user_reference"))],
        "html_url": f"https://example.pagerduty.com/incidents/{incident_id}",
    }
    data.update(overrides)
    return Incident(**data)


def paged_source(items: list, calls: list | None = None):
    """Return a page fetcher over *items* that records each (offset, limit) call."""

    async def fetch(offset: int, limit: int) -> Page:
        if calls is not None:
            calls.append((offset, limit))
        window = items[offset:offset + limit]
        return Page(items=window, more=offset + limit < len(items), offset=offset, limit=limit)

    return fetch


@pytest.fixture
def health_check_details() -> dict[str, Any]:
    return {
        "notes": "cluster_id: 1a2b3c4d\nrunbook: https://example.com/sops/ClusterHasGoneMissing.md",
        "name": "prod-west-2.abcd.p1.example.com",
        "last healthy check-in": "2023-05-01T12:30:00Z",
        "token": "tok-123",
        "tags": "env:prod",
    }


@pytest.fixture
def cert_expiry_details() -> dict[str, Any]:
    return {
        "hostname": "api.prod-east-1.example.com",
        "ip": "10.0.0.12",
        "url": "https://example.com/sops/CertificateExpiring.md",
    }


@pytest.fixture
def generic_details() -> dict[str, Any]:
    return {
        "cluster_id": "9f8e7d6c",
        "console": "https://console.example.com/clusters/9f8e7d6c",
        "firing": "alertname=KubeAPIErrorBudgetBurn severity=critical",
        "link": "https://example.com/sops/KubeAPIErrorBudgetBurn.md",
    }


@pytest.fixture
def acting_user() -> User:
    return User(id="PUSER01", name="Alex Rivera", email="arivera@example.com", summary="Alex Rivera")


@pytest.fixture
def silent_user() -> User:
    return User(id="PSILENT", name="Silent Test", email="silent@example.com", summary="Silent Test")
