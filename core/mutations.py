"""Batched incident state changes and incident notes."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from core.exceptions import (
    IntegrationError,
    InvalidIncidentError,
    MutationMismatchError,
    with_context,
)
from core.models import Incident, IncidentStatus, MutationIntent, Note, Reference, User
from core.pagination import expect_single_page

if TYPE_CHECKING:
    from integrations.base import AlertingProvider

logger = logging.getLogger(__name__)


class BulkMutator:
    """Applies one status/assignment change to many incidents in a single upstream call.

    Inputs are validated before anything is sent. The upstream response must
    be a single page covering exactly the submitted incidents; nothing is
    retried.
    """

    def __init__(self, provider: AlertingProvider) -> None:
        self._provider = provider

    async def apply_status(
        self,
        incidents: Sequence[Incident | None],
        status: IncidentStatus | str,
        acting_user: User,
    ) -> list[Incident]:
        """Set *status* on every incident and assign each one to *acting_user*."""
        try:
            target = IncidentStatus(status)
        except ValueError as e:
            raise InvalidIncidentError(f"unknown incident status '{status}'") from e
        return await self._submit(
            "apply_status",
            incidents,
            acting_user,
            status=target,
            assignees=[acting_user.reference],
        )

    async def acknowledge(self, incidents: Sequence[Incident | None], acting_user: User) -> list[Incident]:
        return await self.apply_status(incidents, IncidentStatus.ACKNOWLEDGED, acting_user)

    async def reassign(
        self,
        incidents: Sequence[Incident | None],
        acting_user: User,
        target_users: Sequence[User],
    ) -> list[Incident]:
        """Replace the assignees of every incident with *target_users*."""
        if not target_users:
            raise InvalidIncidentError("reassign requires at least one target user")
        return await self._submit(
            "reassign",
            incidents,
            acting_user,
            status=None,
            assignees=[u.reference for u in target_users],
        )

    async def silence(
        self, incidents: Sequence[Incident | None], acting_user: User, silent_user: User
    ) -> list[Incident]:
        """Hand the incidents to the silent user so they stop paging the team."""
        return await self.reassign(incidents, acting_user, [silent_user])

    async def post_note(self, incident_id: str, author: User, content: str) -> Note:
        try:
            note = await self._provider.create_incident_note(incident_id, author, content)
        except IntegrationError as e:
            raise with_context(e, f"failed to add note to incident '{incident_id}'") from e
        logger.info("Added note to incident %s as %s", incident_id, author.email or author.id)
        return note

    async def _submit(
        self,
        operation: str,
        incidents: Sequence[Incident | None],
        acting_user: User,
        status: IncidentStatus | None,
        assignees: list[Reference],
    ) -> list[Incident]:
        for position, incident in enumerate(incidents):
            if incident is None:
                raise InvalidIncidentError(f"{operation}: incident at position {position} is None")
        if not incidents:
            return []

        intents = [
            MutationIntent(id=incident.id, status=status, assignments=assignees)
            for incident in incidents
        ]
        submitted = [intent.id for intent in intents]

        try:
            response = await self._provider.manage_incidents(acting_user.email, intents)
        except IntegrationError as e:
            raise with_context(e, f"{operation}: failed to update incident(s) {submitted}") from e

        applied = expect_single_page(response, operation)
        returned = [incident.id for incident in applied]
        if set(returned) != set(submitted):
            raise MutationMismatchError(submitted, returned)

        logger.info("%s applied to %d incident(s) by %s", operation, len(applied), acting_user.email)
        return applied
