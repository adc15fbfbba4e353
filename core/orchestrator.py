"""Orchestrator — wires the query, normalization and mutation components for one run."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from core.exceptions import ConfigurationError
from core.models import Incident, IncidentReport, Note, OnCallContext
from core.mutations import BulkMutator
from core.normalizer import normalize_alerts
from core.pagination import Paginator
from core.queries import IncidentQuery
from core.team import TeamResolver

if TYPE_CHECKING:
    from app.config import Settings
    from integrations.registry import IntegrationRegistry

logger = logging.getLogger(__name__)


class Orchestrator:
    """Central coordinator for one stateless fetch → normalize → act cycle.

    Lifecycle: resolve users → query incidents → fetch alerts → normalize → report or mutate

    Every call hits the upstream service again; nothing is cached between
    calls except the provider held by the registry.
    """

    def __init__(self, settings: Settings, registry: IntegrationRegistry) -> None:
        self._settings = settings
        self._provider = registry.get_provider("alerting")
        paginator = Paginator(limit=settings.page_limit, max_pages=settings.max_pages)
        self.query = IncidentQuery(self._provider, paginator)
        self.teams = TeamResolver(self._provider, paginator)
        self.mutator = BulkMutator(self._provider)

    async def aclose(self) -> None:
        await self._provider.aclose()

    # ------------------------------------------------------------------
    # 1. Resolve users
    # ------------------------------------------------------------------

    async def load_context(self) -> OnCallContext:
        return await self.teams.resolve_context(self._settings)

    # ------------------------------------------------------------------
    # 2. Query, fetch and normalize
    # ------------------------------------------------------------------

    async def collect_report(self, context: OnCallContext) -> list[IncidentReport]:
        """Fetch the targeted incidents and normalize every alert attached to them.

        Upstream failures abort the report; a malformed alert only marks
        its own entry as failed.
        """
        incidents = await self.query.find_high_urgency_acknowledged(context.targeted_user_ids)
        reports: list[IncidentReport] = []
        for incident in incidents:
            reports.append(await self.report_incident(incident))

        failed = sum(len(r.failed) for r in reports)
        total = sum(len(r.alerts) for r in reports)
        logger.info("Normalized %d alert(s) across %d incident(s), %d failed", total - failed, len(reports), failed)
        return reports

    async def report_incident(self, incident: Incident) -> IncidentReport:
        alerts = await self.query.get_alerts(incident.id)
        results = await normalize_alerts(alerts, self.query.get_cluster_name, incident_id=incident.id)
        return IncidentReport(incident=incident, alerts=results)

    # ------------------------------------------------------------------
    # 3. Act
    # ------------------------------------------------------------------

    async def _incidents(self, incident_ids: list[str]) -> list[Incident]:
        return [await self.query.get_incident(incident_id) for incident_id in incident_ids]

    async def acknowledge(self, context: OnCallContext, incident_ids: list[str]) -> list[Incident]:
        incidents = await self._incidents(incident_ids)
        return await self.mutator.acknowledge(incidents, context.current_user)

    async def reassign(
        self, context: OnCallContext, incident_ids: list[str], user_ids: list[str]
    ) -> list[Incident]:
        targets = [await self.teams.get_user(user_id) for user_id in user_ids]
        incidents = await self._incidents(incident_ids)
        return await self.mutator.reassign(incidents, context.current_user, targets)

    async def silence(self, context: OnCallContext, incident_ids: list[str]) -> list[Incident]:
        if context.silent_user is None:
            raise ConfigurationError("No silent user configured; set 'silentuser' in the config file")
        incidents = await self._incidents(incident_ids)
        return await self.mutator.silence(incidents, context.current_user, context.silent_user)

    async def annotate(self, context: OnCallContext, incident_id: str, content: str) -> Note:
        return await self.mutator.post_note(incident_id, context.current_user, content)

    async def notes(self, incident_id: str) -> list[Note]:
        return await self.query.get_notes(incident_id)
