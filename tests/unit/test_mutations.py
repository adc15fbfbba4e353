"""Tests for core/mutations.py — BulkMutator."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import make_incident
from core.exceptions import (
    IntegrationError,
    InvalidIncidentError,
    MutationMismatchError,
    ProtocolAnomalyError,
)
from core.models import IncidentStatus, Note, Page, User
from core.mutations import BulkMutator
from integrations.base import AlertingProvider


def _echo(more: bool = False):
    """manage_incidents side_effect answering with the submitted incidents."""

    async def manage(email, intents):
        incidents = [make_incident(i.id, status=i.status or IncidentStatus.ACKNOWLEDGED) for i in intents]
        return Page(items=incidents, more=more)

    return manage


@pytest.fixture
def provider():
    provider = MagicMock(spec=AlertingProvider)
    provider.manage_incidents = AsyncMock(side_effect=_echo())
    return provider


@pytest.fixture
def mutator(provider):
    return BulkMutator(provider)


class TestApplyStatus:
    @pytest.mark.asyncio
    async def test_submits_one_batch(self, provider, mutator, acting_user):
        incidents = [make_incident("P1"), make_incident("P2"), make_incident("P3")]

        result = await mutator.apply_status(incidents, "acknowledged", acting_user)

        assert [i.id for i in result] == ["P1", "P2", "P3"]
        provider.manage_incidents.assert_awaited_once()
        email, intents = provider.manage_incidents.await_args.args
        assert email == "arivera@example.com"
        assert [i.id for i in intents] == ["P1", "P2", "P3"]
        assert all(i.status == IncidentStatus.ACKNOWLEDGED for i in intents)
        assert all([a.id for a in i.assignments] == ["PUSER01"] for i in intents)

    @pytest.mark.asyncio
    async def test_resolve(self, provider, mutator, acting_user):
        await mutator.apply_status([make_incident("P1")], IncidentStatus.RESOLVED, acting_user)
        intents = provider.manage_incidents.await_args.args[1]
        assert intents[0].status == IncidentStatus.RESOLVED

    @pytest.mark.asyncio
    async def test_unknown_status_rejected_before_any_call(self, provider, mutator, acting_user):
        with pytest.raises(InvalidIncidentError, match="snoozed"):
            await mutator.apply_status([make_incident("P1")], "snoozed", acting_user)
        provider.manage_incidents.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_none_incident_rejected_before_any_call(self, provider, mutator, acting_user):
        with pytest.raises(InvalidIncidentError, match="position 1"):
            await mutator.acknowledge([make_incident("P1"), None, make_incident("P3")], acting_user)
        provider.manage_incidents.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_batch_makes_no_call(self, provider, mutator, acting_user):
        assert await mutator.acknowledge([], acting_user) == []
        provider.manage_incidents.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_more_pages_is_a_protocol_anomaly(self, provider, mutator, acting_user):
        provider.manage_incidents = AsyncMock(side_effect=_echo(more=True))
        with pytest.raises(ProtocolAnomalyError):
            await mutator.acknowledge([make_incident("P1"), make_incident("P2")], acting_user)

    @pytest.mark.asyncio
    async def test_partial_application_is_an_error(self, provider, mutator, acting_user):
        provider.manage_incidents = AsyncMock(
            return_value=Page(items=[make_incident("P1")], more=False)
        )
        with pytest.raises(MutationMismatchError) as exc_info:
            await mutator.acknowledge([make_incident("P1"), make_incident("P2")], acting_user)
        assert exc_info.value.submitted == ["P1", "P2"]
        assert exc_info.value.returned == ["P1"]

    @pytest.mark.asyncio
    async def test_upstream_failure_is_not_retried(self, provider, mutator, acting_user):
        provider.manage_incidents = AsyncMock(side_effect=IntegrationError("pagerduty", "500", 500))
        with pytest.raises(IntegrationError, match="P1"):
            await mutator.acknowledge([make_incident("P1")], acting_user)
        assert provider.manage_incidents.await_count == 1


class TestReassign:
    @pytest.mark.asyncio
    async def test_assigns_every_target_user(self, provider, mutator, acting_user):
        targets = [User(id="PUSER02"), User(id="PUSER03")]
        await mutator.reassign([make_incident("P1"), make_incident("P2")], acting_user, targets)

        email, intents = provider.manage_incidents.await_args.args
        assert email == acting_user.email
        for intent in intents:
            assert intent.status is None
            assert [a.id for a in intent.assignments] == ["PUSER02", "PUSER03"]
            assert all(a.type == "user_reference" for a in intent.assignments)

    @pytest.mark.asyncio
    async def test_requires_a_target(self, provider, mutator, acting_user):
        with pytest.raises(InvalidIncidentError):
            await mutator.reassign([make_incident("P1")], acting_user, [])
        provider.manage_incidents.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_none_incident_rejected(self, provider, mutator, acting_user):
        with pytest.raises(InvalidIncidentError):
            await mutator.reassign([None], acting_user, [User(id="PUSER02")])
        provider.manage_incidents.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_silence_hands_over_to_silent_user(self, provider, mutator, acting_user, silent_user):
        await mutator.silence([make_incident("P1")], acting_user, silent_user)
        intents = provider.manage_incidents.await_args.args[1]
        assert [a.id for a in intents[0].assignments] == ["PSILENT"]


class TestPostNote:
    @pytest.mark.asyncio
    async def test_posts_note_as_author(self, provider, mutator, acting_user):
        provider.create_incident_note = AsyncMock(return_value=Note(id="N1", content="on it"))
        note = await mutator.post_note("P1", acting_user, "on it")
        assert note.id == "N1"
        provider.create_incident_note.assert_awaited_once_with("P1", acting_user, "on it")

    @pytest.mark.asyncio
    async def test_failure_propagates(self, provider, mutator, acting_user):
        provider.create_incident_note = AsyncMock(side_effect=IntegrationError("pagerduty", "nope"))
        with pytest.raises(IntegrationError, match="P1"):
            await mutator.post_note("P1", acting_user, "on it")
