"""Mock PagerDuty provider — implements AlertingProvider with scenario fixtures."""

from __future__ import annotations

from datetime import datetime, timezone

from app.config import Settings
from core.exceptions import NotFoundError
from core.models import (
    Acknowledgement,
    Assignment,
    Incident,
    IncidentFilter,
    IncidentStatus,
    MutationIntent,
    Note,
    Page,
    RawAlert,
    Reference,
    Service,
    Team,
    TeamMember,
    User,
)
from integrations.base import AlertingProvider
from integrations.mock.base import MockBase, page_of


class MockPagerDuty(AlertingProvider, MockBase):
    provider_key = "pagerduty"

    def __init__(self, settings: Settings) -> None:
        self._incidents: dict[str, Incident] = {}
        self._notes: dict[str, list[Note]] = {}
        # Every batch submitted through manage_incidents, in call order
        self.submitted_batches: list[tuple[str, list[MutationIntent]]] = []
        self.incident_queries: list[IncidentFilter] = []
        MockBase.__init__(self, settings)

    def _on_scenario_loaded(self) -> None:
        self._incidents = {inc["id"]: Incident(**inc) for inc in self._get("incidents", [])}
        self._notes = {
            incident_id: [Note(**n) for n in notes]
            for incident_id, notes in self._get("notes", {}).items()
        }
        self.submitted_batches = []
        self.incident_queries = []

    def _not_found(self, kind: str, object_id: str) -> NotFoundError:
        return NotFoundError(self.provider_key, f"{kind} '{object_id}' not found", status_code=404)

    def _find(self, key: str, object_id: str) -> dict:
        for obj in self._get(key, []):
            if obj["id"] == object_id:
                return obj
        raise self._not_found(key.rstrip("s"), object_id)

    # ------------------------------------------------------------------
    # Paged listings
    # ------------------------------------------------------------------

    async def list_incidents_page(
        self, filters: IncidentFilter, offset: int, limit: int
    ) -> Page[Incident]:
        await self._simulate_delay()
        if offset == 0:
            self.incident_queries.append(filters)
        matches = [inc for inc in self._incidents.values() if _matches(inc, filters)]
        return page_of(matches, offset, limit)

    async def list_incident_alerts_page(
        self, incident_id: str, offset: int, limit: int
    ) -> Page[RawAlert]:
        await self._simulate_delay()
        if incident_id not in self._incidents:
            raise self._not_found("incident", incident_id)
        alerts = [RawAlert(**a) for a in self._get("alerts", {}).get(incident_id, [])]
        return page_of(alerts, offset, limit)

    async def list_team_members_page(
        self, team_id: str, offset: int, limit: int
    ) -> Page[TeamMember]:
        await self._simulate_delay()
        team = self._find("teams", team_id)
        members = [
            TeamMember(user=Reference(id=user_id, type="user_reference"), role="responder")
            for user_id in team.get("members", [])
        ]
        return page_of(members, offset, limit)

    async def list_incident_notes_page(
        self, incident_id: str, offset: int, limit: int
    ) -> Page[Note]:
        await self._simulate_delay()
        if incident_id not in self._incidents:
            raise self._not_found("incident", incident_id)
        return page_of(self._notes.get(incident_id, []), offset, limit)

    # ------------------------------------------------------------------
    # Single lookups
    # ------------------------------------------------------------------

    async def get_incident(self, incident_id: str) -> Incident:
        await self._simulate_delay()
        if incident_id not in self._incidents:
            raise self._not_found("incident", incident_id)
        return self._incidents[incident_id]

    async def get_service(self, service_id: str) -> Service:
        await self._simulate_delay()
        return Service(**self._find("services", service_id))

    async def get_team(self, team_id: str) -> Team:
        await self._simulate_delay()
        team = self._find("teams", team_id)
        return Team(id=team["id"], name=team.get("name", ""), summary=team.get("name", ""))

    async def get_user(self, user_id: str) -> User:
        await self._simulate_delay()
        return User(**self._find("users", user_id))

    async def get_current_user(self) -> User:
        return await self.get_user(self._get("current_user", ""))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def manage_incidents(
        self, acting_user_email: str, intents: list[MutationIntent]
    ) -> Page[Incident]:
        await self._simulate_delay()
        for intent in intents:
            if intent.id not in self._incidents:
                raise self._not_found("incident", intent.id)
        self.submitted_batches.append((acting_user_email, list(intents)))

        updated: list[Incident] = []
        now = datetime.now(timezone.utc)
        for intent in intents:
            incident = self._incidents[intent.id]
            changes: dict = {}
            if intent.status is not None:
                changes["status"] = intent.status
                if intent.status == IncidentStatus.ACKNOWLEDGED:
                    changes["acknowledgements"] = [
                        Acknowledgement(at=now, acknowledger=a) for a in intent.assignments
                    ]
            if intent.assignments:
                changes["assignments"] = [Assignment(at=now, assignee=a) for a in intent.assignments]
            incident = incident.model_copy(update=changes)
            self._incidents[intent.id] = incident
            updated.append(incident)
        return Page(items=updated, more=False, offset=0, limit=len(updated))

    async def create_incident_note(
        self, incident_id: str, author: User, content: str
    ) -> Note:
        await self._simulate_delay()
        if incident_id not in self._incidents:
            raise self._not_found("incident", incident_id)
        notes = self._notes.setdefault(incident_id, [])
        note = Note(
            id=f"PNOTE{len(notes) + 1:02d}-{incident_id}",
            content=content,
            user=author.reference,
            created_at=datetime.now(timezone.utc),
        )
        notes.append(note)
        return note


def _matches(incident: Incident, filters: IncidentFilter) -> bool:
    """Server-side filter semantics: every non-empty criterion must match."""
    if filters.statuses and incident.status not in filters.statuses:
        return False
    if filters.urgencies and incident.urgency not in filters.urgencies:
        return False
    if filters.user_ids:
        assignees = {a.assignee.id for a in incident.assignments}
        if not assignees.intersection(filters.user_ids):
            return False
    return True
