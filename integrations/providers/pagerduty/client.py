"""PagerDuty REST API v2 client implementing AlertingProvider."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.config import Settings
from core.exceptions import IntegrationError, NotFoundError
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
from integrations.base import AlertingProvider

logger = logging.getLogger(__name__)

PROVIDER = "pagerduty"
ACCEPT_HEADER = "application/vnd.pagerduty+json;version=2"


def _page(data: dict[str, Any], key: str, offset: int, limit: int) -> dict[str, Any]:
    return {
        "items": data.get(key) or [],
        "more": bool(data.get("more", False)),
        "offset": data.get("offset", offset),
        "limit": data.get("limit", limit),
    }


def _unwrap(data: dict[str, Any], key: str, request: str) -> dict[str, Any]:
    obj = data.get(key)
    if not isinstance(obj, dict):
        raise IntegrationError(PROVIDER, f"{request}: response has no '{key}' object")
    return obj


def _raw_alert(data: dict[str, Any]) -> RawAlert:
    # PagerDuty sends "body": null for alerts created without a payload
    return RawAlert(**{**data, "body": data.get("body") or {}})


class PagerDutyClient(AlertingProvider):
    """Client for the PagerDuty REST API.

    No retries: every failure surfaces as :class:`IntegrationError` on the
    first attempt. The only timeout applied is ``Settings.request_timeout``.
    """

    def __init__(self, settings: Settings) -> None:
        settings.require_live_credentials()
        self.base_url = settings.pagerduty_api_base_url.rstrip("/")
        self._token = settings.pagerduty_token
        self._timeout = settings.request_timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> PagerDutyClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self._timeout,
                headers={
                    "Authorization": f"Token token={self._token}",
                    "Accept": ACCEPT_HEADER,
                    "Content-Type": "application/json",
                },
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        """Send one request and return the decoded JSON body.

        Raises:
            NotFoundError: on 404.
            IntegrationError: on any other HTTP error status or transport failure.
        """
        try:
            response = await self._http().request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise IntegrationError(PROVIDER, f"{method} {path} failed: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(PROVIDER, f"{method} {path}: not found", status_code=404)
        if response.is_error:
            raise IntegrationError(
                PROVIDER,
                f"{method} {path} returned {response.status_code}: {self._error_message(response)}",
                status_code=response.status_code,
            )

        logger.debug("%s %s -> %d", method, path, response.status_code)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise IntegrationError(PROVIDER, f"{method} {path} returned invalid JSON") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            error = response.json().get("error", {})
        except ValueError:
            return response.text[:200]
        if isinstance(error, dict):
            return error.get("message", "") or str(error)
        return str(error)

    # ------------------------------------------------------------------
    # Paged listings
    # ------------------------------------------------------------------

    async def list_incidents_page(
        self, filters: IncidentFilter, offset: int, limit: int
    ) -> Page[Incident]:
        params: dict[str, Any] = {"offset": offset, "limit": limit}
        if filters.statuses:
            params["statuses[]"] = [s.value for s in filters.statuses]
        if filters.urgencies:
            params["urgencies[]"] = [u.value for u in filters.urgencies]
        if filters.user_ids:
            params["user_ids[]"] = list(filters.user_ids)
        data = await self._request("GET", "/incidents", params=params)
        return Page[Incident](**_page(data, "incidents", offset, limit))

    async def list_incident_alerts_page(
        self, incident_id: str, offset: int, limit: int
    ) -> Page[RawAlert]:
        data = await self._request(
            "GET", f"/incidents/{incident_id}/alerts", params={"offset": offset, "limit": limit}
        )
        page = _page(data, "alerts", offset, limit)
        page["items"] = [_raw_alert(a) for a in page["items"]]
        return Page[RawAlert](**page)

    async def list_team_members_page(
        self, team_id: str, offset: int, limit: int
    ) -> Page[TeamMember]:
        data = await self._request(
            "GET", f"/teams/{team_id}/members", params={"offset": offset, "limit": limit}
        )
        return Page[TeamMember](**_page(data, "members", offset, limit))

    async def list_incident_notes_page(
        self, incident_id: str, offset: int, limit: int
    ) -> Page[Note]:
        # The notes endpoint is not paginated; everything comes back at once
        data = await self._request("GET", f"/incidents/{incident_id}/notes")
        notes = data.get("notes") or []
        return Page[Note](items=notes[offset:], more=False, offset=offset, limit=limit)

    # ------------------------------------------------------------------
    # Single lookups
    # ------------------------------------------------------------------

    async def get_incident(self, incident_id: str) -> Incident:
        path = f"/incidents/{incident_id}"
        return Incident(**_unwrap(await self._request("GET", path), "incident", f"GET {path}"))

    async def get_service(self, service_id: str) -> Service:
        path = f"/services/{service_id}"
        service = _unwrap(await self._request("GET", path), "service", f"GET {path}")
        return Service(**{**service, "description": service.get("description") or ""})

    async def get_team(self, team_id: str) -> Team:
        path = f"/teams/{team_id}"
        return Team(**_unwrap(await self._request("GET", path), "team", f"GET {path}"))

    async def get_user(self, user_id: str) -> User:
        path = f"/users/{user_id}"
        return User(**_unwrap(await self._request("GET", path), "user", f"GET {path}"))

    async def get_current_user(self) -> User:
        return User(**_unwrap(await self._request("GET", "/users/me"), "user", "GET /users/me"))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def manage_incidents(
        self, acting_user_email: str, intents: list[MutationIntent]
    ) -> Page[Incident]:
        incidents = []
        for intent in intents:
            entry: dict[str, Any] = {"id": intent.id, "type": "incident_reference"}
            if intent.status is not None:
                entry["status"] = intent.status.value
            if intent.assignments:
                entry["assignments"] = [
                    {"assignee": {"id": a.id, "type": a.type or "user_reference"}}
                    for a in intent.assignments
                ]
            incidents.append(entry)

        data = await self._request(
            "PUT",
            "/incidents",
            headers={"From": acting_user_email},
            json={"incidents": incidents},
        )
        return Page[Incident](**_page(data, "incidents", 0, len(intents)))

    async def create_incident_note(
        self, incident_id: str, author: User, content: str
    ) -> Note:
        data = await self._request(
            "POST",
            f"/incidents/{incident_id}/notes",
            headers={"From": author.email},
            json={"note": {"content": content}},
        )
        return Note(**_unwrap(data, "note", f"POST /incidents/{incident_id}/notes"))
