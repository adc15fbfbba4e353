"""Incident, alert and note retrieval."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from core.exceptions import IntegrationError, with_context
from core.models import (
    NOT_AVAILABLE,
    Incident,
    IncidentFilter,
    IncidentStatus,
    Note,
    RawAlert,
    Urgency,
)
from core.pagination import Paginator

if TYPE_CHECKING:
    from integrations.base import AlertingProvider

logger = logging.getLogger(__name__)

DEFAULT_INCIDENT_STATUSES = [IncidentStatus.TRIGGERED, IncidentStatus.ACKNOWLEDGED]


def high_urgency_acknowledged_filter(users: list[str]) -> IncidentFilter:
    return IncidentFilter(
        urgencies=[Urgency.HIGH],
        statuses=[IncidentStatus.ACKNOWLEDGED],
        user_ids=list(users),
    )


class IncidentQuery:
    """Read-side access to incidents and their alerts and notes.

    Matching is left entirely to the upstream service; results are returned
    as received.
    """

    def __init__(self, provider: AlertingProvider, paginator: Paginator) -> None:
        self._provider = provider
        self._paginator = paginator

    async def find_high_urgency_acknowledged(self, users: list[str]) -> list[Incident]:
        """Return every high-urgency acknowledged incident assigned to one of *users*.

        An empty *users* list returns no incidents without calling upstream,
        since an empty assignee filter would match every incident.
        """
        if not users:
            logger.info("No targeted users; skipping incident query")
            return []
        incidents = await self.get_incidents(high_urgency_acknowledged_filter(users))
        logger.info("Found %d high-urgency acknowledged incident(s) for %d user(s)", len(incidents), len(users))
        return incidents

    async def get_incidents(self, filters: IncidentFilter | None = None) -> list[Incident]:
        """Return every incident matching *filters* (default: triggered or acknowledged)."""
        if filters is None:
            filters = IncidentFilter(statuses=list(DEFAULT_INCIDENT_STATUSES))
        try:
            return await self._paginator.collect(
                lambda offset, limit: self._provider.list_incidents_page(filters, offset, limit),
                label="incidents",
            )
        except IntegrationError as e:
            raise with_context(e, "failed to get incidents") from e

    async def get_incident(self, incident_id: str) -> Incident:
        try:
            return await self._provider.get_incident(incident_id)
        except IntegrationError as e:
            raise with_context(e, f"failed to get incident '{incident_id}'") from e

    async def get_alerts(self, incident_id: str) -> list[RawAlert]:
        """Return every alert attached to *incident_id*."""
        try:
            return await self._paginator.collect(
                lambda offset, limit: self._provider.list_incident_alerts_page(incident_id, offset, limit),
                label=f"alerts for {incident_id}",
            )
        except IntegrationError as e:
            raise with_context(e, f"failed to get alerts for incident '{incident_id}'") from e

    async def get_notes(self, incident_id: str) -> list[Note]:
        try:
            return await self._paginator.collect(
                lambda offset, limit: self._provider.list_incident_notes_page(incident_id, offset, limit),
                label=f"notes for {incident_id}",
            )
        except IntegrationError as e:
            raise with_context(e, f"failed to get notes for incident '{incident_id}'") from e

    async def get_cluster_name(self, service_id: str) -> str:
        """Return the cluster name for a service: the first word of its description.

        Lookup errors propagate; callers decide whether they are fatal.
        """
        service = await self._provider.get_service(service_id)
        words = service.description.split()
        return words[0] if words else NOT_AVAILABLE
