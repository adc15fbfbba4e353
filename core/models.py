"""Core data models for the alertops application."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

# Placeholder for a value that cannot be resolved. Never the empty string.
NOT_AVAILABLE = "N/A"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class IncidentStatus(str, Enum):
    TRIGGERED = "triggered"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"


class Urgency(str, Enum):
    HIGH = "high"
    LOW = "low"


class AlertShape(str, Enum):
    HEALTH_CHECK = "health_check"
    CERTIFICATE_EXPIRY = "certificate_expiry"
    GENERIC = "generic"


# ---------------------------------------------------------------------------
# Upstream data models
# ---------------------------------------------------------------------------


class Reference(BaseModel):
    """A pointer to another upstream object (service, user, incident...)."""

    model_config = ConfigDict(extra="ignore")

    id: str
    type: str = ""
    summary: str = ""
    html_url: str = ""


class Acknowledgement(BaseModel):
    model_config = ConfigDict(extra="ignore")

    at: datetime | None = None
    acknowledger: Reference | None = None


class Assignment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    at: datetime | None = None
    assignee: Reference


class Incident(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    title: str = ""
    description: str = ""
    status: IncidentStatus = IncidentStatus.TRIGGERED
    urgency: Urgency = Urgency.HIGH
    acknowledgements: list[Acknowledgement] = Field(default_factory=list)
    assignments: list[Assignment] = Field(default_factory=list)
    service: Reference | None = None
    html_url: str = ""
    created_at: datetime | None = None


class RawAlert(BaseModel):
    """An alert attached to an incident, as delivered by the upstream service.

    ``body`` is free-form; its ``details`` mapping changes shape with the
    alert source.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    summary: str = ""
    status: str = ""
    severity: str = ""
    html_url: str = ""
    incident: Reference | None = None
    service: Reference | None = None
    body: dict[str, Any] = Field(default_factory=dict)

    @property
    def details(self) -> dict[str, Any]:
        details = self.body.get("details") if isinstance(self.body, dict) else None
        return details if isinstance(details, dict) else {}


class Service(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    description: str = ""


class Team(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    summary: str = ""


class User(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    email: str = ""
    summary: str = ""

    @property
    def reference(self) -> Reference:
        return Reference(id=self.id, type="user_reference", summary=self.summary or self.name)


class TeamMember(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user: Reference
    role: str = ""


class Note(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    content: str
    user: Reference | None = None
    created_at: datetime | None = None


class Page(BaseModel, Generic[T]):
    """One bounded window of a list result."""

    items: list[T] = Field(default_factory=list)
    more: bool = False
    offset: int = 0
    limit: int = 0


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class IncidentFilter(BaseModel):
    """Server-side filter for incident listing."""

    statuses: list[IncidentStatus] = Field(default_factory=list)
    urgencies: list[Urgency] = Field(default_factory=list)
    user_ids: list[str] = Field(default_factory=list)


class MutationIntent(BaseModel):
    """Requested change for one incident inside a batch mutation."""

    id: str
    status: IncidentStatus | None = None
    assignments: list[Reference] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class NormalizedAlert(BaseModel):
    """Fixed-shape record built from one RawAlert.

    Fields that belong to a shape other than ``shape`` stay empty.
    """

    model_config = ConfigDict(frozen=True)

    shape: AlertShape
    incident_id: str
    alert_id: str
    name: str
    status: str
    web_url: str
    severity: str = ""
    cluster_id: str = NOT_AVAILABLE
    cluster_name: str = NOT_AVAILABLE

    # health check
    last_check_in: str = ""
    token: str = ""
    tags: str = ""

    # certificate expiry
    hostname: str = ""
    ip: str = ""

    # generic
    console: str = ""
    labels: str = ""

    sop: str = ""


class AlertResult(BaseModel):
    """Outcome of normalizing one alert within a batch."""

    alert_id: str
    incident_id: str = ""
    alert: NormalizedAlert | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.alert is not None


class OnCallContext(BaseModel):
    """Resolved users and teams for one run."""

    current_user: User
    teams: list[Team] = Field(default_factory=list)
    member_ids: list[str] = Field(default_factory=list)
    silent_user: User | None = None
    ignored_users: list[User] = Field(default_factory=list)
    targeted_user_ids: list[str] = Field(default_factory=list)


class IncidentReport(BaseModel):
    """An incident together with the normalization results of its alerts."""

    incident: Incident
    alerts: list[AlertResult] = Field(default_factory=list)

    @property
    def failed(self) -> list[AlertResult]:
        return [a for a in self.alerts if not a.ok]
