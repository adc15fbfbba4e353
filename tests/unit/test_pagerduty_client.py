"""Tests for integrations/providers/pagerduty/client.py."""

import json

import httpx
import pytest
import respx

from app.config import Settings
from conftest import make_alert
from core.exceptions import ConfigurationError, IntegrationError, NotFoundError
from core.models import (
    NOT_AVAILABLE,
    IncidentFilter,
    IncidentStatus,
    MutationIntent,
    Reference,
    Urgency,
    User,
)
from core.normalizer import normalize
from core.pagination import Paginator
from core.queries import IncidentQuery
from integrations.providers.pagerduty.client import PagerDutyClient

BASE = "https://api.pagerduty.test"


@pytest.fixture
def settings():
    return Settings(
        alertops_mode="live",
        pagerduty_mode="",
        pagerduty_token="tok-abc",
        pagerduty_api_base_url=BASE,
    )


class TestPagerDutyClientInit:
    def test_requires_token(self):
        with pytest.raises(ConfigurationError):
            PagerDutyClient(Settings(alertops_mode="live", pagerduty_mode="", pagerduty_token=""))

    def test_no_http_client_until_first_request(self, settings):
        client = PagerDutyClient(settings)
        assert client.base_url == BASE
        assert client._client is None


class TestListIncidents:
    @pytest.mark.asyncio
    @respx.mock
    async def test_sends_filter_and_auth(self, settings):
        route = respx.get(f"{BASE}/incidents").mock(
            return_value=httpx.Response(
                200,
                json={
                    "incidents": [{"id": "PINC01", "status": "acknowledged", "urgency": "high"}],
                    "more": True,
                    "offset": 0,
                    "limit": 2,
                },
            )
        )
        filters = IncidentFilter(
            statuses=[IncidentStatus.ACKNOWLEDGED], urgencies=[Urgency.HIGH], user_ids=["U1", "U2"]
        )
        async with PagerDutyClient(settings) as client:
            page = await client.list_incidents_page(filters, 0, 2)

        assert [i.id for i in page.items] == ["PINC01"]
        assert page.more is True

        request = route.calls.last.request
        assert request.headers["Authorization"] == "Token token=tok-abc"
        assert request.headers["Accept"] == "application/vnd.pagerduty+json;version=2"
        params = request.url.params
        assert params.get_list("statuses[]") == ["acknowledged"]
        assert params.get_list("urgencies[]") == ["high"]
        assert params.get_list("user_ids[]") == ["U1", "U2"]
        assert params["offset"] == "0"
        assert params["limit"] == "2"

    @pytest.mark.asyncio
    @respx.mock
    async def test_missing_more_means_last_page(self, settings):
        respx.get(f"{BASE}/incidents").mock(return_value=httpx.Response(200, json={"incidents": []}))
        async with PagerDutyClient(settings) as client:
            page = await client.list_incidents_page(IncidentFilter(), 0, 100)
        assert page.items == []
        assert page.more is False


class TestErrors:
    @pytest.mark.asyncio
    @respx.mock
    async def test_404_is_not_found(self, settings):
        respx.get(f"{BASE}/services/PSVCGONE").mock(return_value=httpx.Response(404))
        async with PagerDutyClient(settings) as client:
            with pytest.raises(NotFoundError) as exc_info:
                await client.get_service("PSVCGONE")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    @respx.mock
    async def test_error_message_from_body(self, settings):
        respx.get(f"{BASE}/users/me").mock(
            return_value=httpx.Response(401, json={"error": {"message": "Unauthorized", "code": 2006}})
        )
        async with PagerDutyClient(settings) as client:
            with pytest.raises(IntegrationError, match="Unauthorized") as exc_info:
                await client.get_current_user()
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    @respx.mock
    async def test_transport_failure_is_not_retried(self, settings):
        route = respx.get(f"{BASE}/users/me").mock(side_effect=httpx.ConnectTimeout("timed out"))
        async with PagerDutyClient(settings) as client:
            with pytest.raises(IntegrationError, match="timed out"):
                await client.get_current_user()
        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_invalid_json(self, settings):
        respx.get(f"{BASE}/users/me").mock(return_value=httpx.Response(200, text="<html>"))
        async with PagerDutyClient(settings) as client:
            with pytest.raises(IntegrationError, match="invalid JSON"):
                await client.get_current_user()


class TestLookups:
    @pytest.mark.asyncio
    @respx.mock
    async def test_alert_with_null_body(self, settings):
        respx.get(f"{BASE}/incidents/PINC01/alerts").mock(
            return_value=httpx.Response(
                200, json={"alerts": [{"id": "PALERT01", "body": None}], "more": False}
            )
        )
        async with PagerDutyClient(settings) as client:
            page = await client.list_incident_alerts_page("PINC01", 0, 100)
        assert page.items[0].details == {}

    @pytest.mark.asyncio
    @respx.mock
    async def test_service_with_null_description(self, settings):
        respx.get(f"{BASE}/services/PSVC01").mock(
            return_value=httpx.Response(200, json={"service": {"id": "PSVC01", "description": None}})
        )
        async with PagerDutyClient(settings) as client:
            service = await client.get_service("PSVC01")
        assert service.description == ""

    @pytest.mark.asyncio
    @respx.mock
    async def test_team_members(self, settings):
        respx.get(f"{BASE}/teams/PTEAM01/members").mock(
            return_value=httpx.Response(
                200,
                json={"members": [{"user": {"id": "PUSER01", "type": "user_reference"}, "role": "manager"}], "more": False},
            )
        )
        async with PagerDutyClient(settings) as client:
            page = await client.list_team_members_page("PTEAM01", 0, 100)
        assert page.items[0].user.id == "PUSER01"


class TestMutations:
    @pytest.mark.asyncio
    @respx.mock
    async def test_manage_incidents_body_and_from_header(self, settings):
        route = respx.put(f"{BASE}/incidents").mock(
            return_value=httpx.Response(
                200, json={"incidents": [{"id": "PINC01", "status": "acknowledged"}]}
            )
        )
        intents = [
            MutationIntent(
                id="PINC01",
                status=IncidentStatus.ACKNOWLEDGED,
                assignments=[Reference(id="PUSER01", type="user_reference")],
            )
        ]
        async with PagerDutyClient(settings) as client:
            page = await client.manage_incidents("arivera@example.com", intents)

        assert [i.id for i in page.items] == ["PINC01"]
        assert page.more is False
        request = route.calls.last.request
        assert request.headers["From"] == "arivera@example.com"
        assert json.loads(request.content) == {
            "incidents": [
                {
                    "id": "PINC01",
                    "type": "incident_reference",
                    "status": "acknowledged",
                    "assignments": [{"assignee": {"id": "PUSER01", "type": "user_reference"}}],
                }
            ]
        }

    @pytest.mark.asyncio
    @respx.mock
    async def test_reassign_omits_status(self, settings):
        route = respx.put(f"{BASE}/incidents").mock(
            return_value=httpx.Response(200, json={"incidents": [{"id": "PINC01"}]})
        )
        intents = [MutationIntent(id="PINC01", assignments=[Reference(id="PSILENT")])]
        async with PagerDutyClient(settings) as client:
            await client.manage_incidents("arivera@example.com", intents)

        body = json.loads(route.calls.last.request.content)
        assert "status" not in body["incidents"][0]
        assert body["incidents"][0]["assignments"][0]["assignee"]["type"] == "user_reference"

    @pytest.mark.asyncio
    @respx.mock
    async def test_create_note(self, settings):
        route = respx.post(f"{BASE}/incidents/PINC01/notes").mock(
            return_value=httpx.Response(201, json={"note": {"id": "PNOTE02", "content": "on it"}})
        )
        author = User(id="PUSER01", email="arivera@example.com")
        async with PagerDutyClient(settings) as client:
            note = await client.create_incident_note("PINC01", author, "on it")

        assert note.id == "PNOTE02"
        request = route.calls.last.request
        assert request.headers["From"] == "arivera@example.com"
        assert json.loads(request.content) == {"note": {"content": "on it"}}


class TestMissingEnvelope:
    @pytest.mark.parametrize("body", [b"", b"{}", b'{"service": null}'])
    @pytest.mark.asyncio
    @respx.mock
    async def test_lookup_without_object_is_integration_error(self, settings, body):
        respx.get(f"{BASE}/services/PSVC01").mock(return_value=httpx.Response(200, content=body))
        async with PagerDutyClient(settings) as client:
            with pytest.raises(IntegrationError, match="no 'service' object") as exc_info:
                await client.get_service("PSVC01")
        assert not isinstance(exc_info.value, NotFoundError)

    @pytest.mark.asyncio
    @respx.mock
    async def test_current_user_without_object(self, settings):
        respx.get(f"{BASE}/users/me").mock(return_value=httpx.Response(200, json={}))
        async with PagerDutyClient(settings) as client:
            with pytest.raises(IntegrationError, match="GET /users/me"):
                await client.get_current_user()

    @pytest.mark.asyncio
    @respx.mock
    async def test_cluster_name_degrades_to_sentinel(self, settings, generic_details):
        respx.get(f"{BASE}/services/PSVC01").mock(return_value=httpx.Response(200, json={}))
        async with PagerDutyClient(settings) as client:
            query = IncidentQuery(client, Paginator(limit=10))
            alert = await normalize(make_alert(generic_details), query.get_cluster_name)
        assert alert.cluster_name == NOT_AVAILABLE
        assert alert.cluster_id == "9f8e7d6c"
