"""Abstract base class for the incident-management integration."""

from __future__ import annotations

from abc import ABC, abstractmethod

from core.models import (
    Incident,
    IncidentFilter,
    MutationIntent,
    Note,
    Page,
    RawAlert,
    Service,
    Team,
    TeamMember,
    User,
)


class AlertingProvider(ABC):
    """Interface for alerting/on-call systems (PagerDuty).

    List operations return one offset/limit window at a time; the core's
    Paginator drives them. Implementations raise ``IntegrationError`` for any
    upstream failure and do not retry.
    """

    # ------------------------------------------------------------------
    # Paged listings
    # ------------------------------------------------------------------

    @abstractmethod
    async def list_incidents_page(
        self, filters: IncidentFilter, offset: int, limit: int
    ) -> Page[Incident]:
        ...

    @abstractmethod
    async def list_incident_alerts_page(
        self, incident_id: str, offset: int, limit: int
    ) -> Page[RawAlert]:
        ...

    @abstractmethod
    async def list_team_members_page(
        self, team_id: str, offset: int, limit: int
    ) -> Page[TeamMember]:
        ...

    @abstractmethod
    async def list_incident_notes_page(
        self, incident_id: str, offset: int, limit: int
    ) -> Page[Note]:
        ...

    # ------------------------------------------------------------------
    # Single lookups
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_incident(self, incident_id: str) -> Incident:
        ...

    @abstractmethod
    async def get_service(self, service_id: str) -> Service:
        ...

    @abstractmethod
    async def get_team(self, team_id: str) -> Team:
        ...

    @abstractmethod
    async def get_user(self, user_id: str) -> User:
        ...

    @abstractmethod
    async def get_current_user(self) -> User:
        ...

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @abstractmethod
    async def manage_incidents(
        self, acting_user_email: str, intents: list[MutationIntent]
    ) -> Page[Incident]:
        """Apply every intent in one batched call, attributed to the acting user."""
        ...

    @abstractmethod
    async def create_incident_note(
        self, incident_id: str, author: User, content: str
    ) -> Note:
        ...

    async def aclose(self) -> None:
        """Release transport resources. Providers without any keep the default no-op."""
