"""Alert payload classification and normalization.

Alert ``details`` arrive in one of several loosely typed shapes depending on
the alert source. Each shape has its own decoder; decoders are tried in a
fixed order and the first one that recognizes the payload wins:

1. health check       -- has a ``notes`` key
2. certificate expiry -- has a ``hostname`` key
3. generic            -- everything else

Every field read is guarded: a missing key reads as an empty string.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict

from core.exceptions import IntegrationError, MalformedAlertError
from core.models import (
    NOT_AVAILABLE,
    AlertResult,
    AlertShape,
    NormalizedAlert,
    RawAlert,
)
from core.utils import format_timestamp

logger = logging.getLogger(__name__)

# Resolves a service id to the name of the cluster it monitors.
ClusterNameLookup = Callable[[str], Awaitable[str]]

CLUSTER_ID_PREFIX = "cluster_id: "
RUNBOOK_PREFIX = "runbook: "
LAST_CHECK_IN_KEY = "last healthy check-in"
SUMMARY_HOST_SEPARATOR = " on "


def _present(details: dict[str, Any], key: str) -> bool:
    return details.get(key) is not None


def _text(value: Any) -> str:
    """Render a detail value as a string; missing values become ``""``."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def _field(details: dict[str, Any], key: str) -> str:
    return _text(details.get(key))


# ---------------------------------------------------------------------------
# Detail shapes
# ---------------------------------------------------------------------------


class HealthCheckDetails(BaseModel):
    """A cluster that stopped checking in with its health monitor."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[AlertShape.HEALTH_CHECK] = AlertShape.HEALTH_CHECK
    notes: str
    name: str = ""
    last_check_in: str = ""
    token: str = ""
    tags: str = ""

    @classmethod
    def decode(cls, details: dict[str, Any]) -> HealthCheckDetails | None:
        if not _present(details, "notes"):
            return None
        return cls(
            notes=_field(details, "notes"),
            name=_field(details, "name"),
            last_check_in=_field(details, LAST_CHECK_IN_KEY),
            token=_field(details, "token"),
            tags=_field(details, "tags"),
        )

    @property
    def cluster_id(self) -> str:
        return self._note_line(0).replace(CLUSTER_ID_PREFIX, "", 1)

    @property
    def runbook(self) -> str:
        return self._note_line(1).replace(RUNBOOK_PREFIX, "", 1)

    @property
    def cluster_name(self) -> str:
        return self.name.split(".")[0]

    def _note_line(self, index: int) -> str:
        lines = self.notes.split("\n")
        return lines[index] if index < len(lines) else ""


class CertificateExpiryDetails(BaseModel):
    """A TLS certificate on a host nearing expiry."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[AlertShape.CERTIFICATE_EXPIRY] = AlertShape.CERTIFICATE_EXPIRY
    hostname: str
    ip: str = ""
    url: str = ""

    @classmethod
    def decode(cls, details: dict[str, Any]) -> CertificateExpiryDetails | None:
        if not _present(details, "hostname"):
            return None
        return cls(
            hostname=_field(details, "hostname"),
            ip=_field(details, "ip"),
            url=_field(details, "url"),
        )


class GenericDetails(BaseModel):
    """Any other alert; cluster name comes from the alerting service."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[AlertShape.GENERIC] = AlertShape.GENERIC
    cluster_id: str = ""
    console: str = ""
    firing: str = ""
    link: str = ""

    @classmethod
    def decode(cls, details: dict[str, Any]) -> GenericDetails:
        return cls(
            cluster_id=_field(details, "cluster_id"),
            console=_field(details, "console"),
            firing=_field(details, "firing"),
            link=_field(details, "link"),
        )


AlertDetails = Union[HealthCheckDetails, CertificateExpiryDetails, GenericDetails]


def decode_details(details: dict[str, Any]) -> AlertDetails:
    """Decode a raw ``details`` mapping into exactly one known shape."""
    return (
        HealthCheckDetails.decode(details)
        or CertificateExpiryDetails.decode(details)
        or GenericDetails.decode(details)
    )


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


async def normalize(
    alert: RawAlert,
    cluster_name_lookup: ClusterNameLookup,
    incident_id: str = "",
) -> NormalizedAlert:
    """Build a :class:`NormalizedAlert` from *alert*.

    *incident_id* is used only when the alert does not carry its own
    incident reference.

    Raises:
        MalformedAlertError: if a health-check alert has an unparseable
            check-in timestamp.
    """
    shape = decode_details(alert.details)
    fields: dict[str, str] = {
        "incident_id": alert.incident.id if alert.incident else incident_id,
        "alert_id": alert.id,
        "name": alert.summary,
        "status": alert.status,
        "web_url": alert.html_url,
        "severity": alert.severity,
    }

    if isinstance(shape, HealthCheckDetails):
        try:
            last_check_in = format_timestamp(shape.last_check_in)
        except ValueError as e:
            raise MalformedAlertError(alert.id, f"bad '{LAST_CHECK_IN_KEY}' timestamp: {e}") from e
        fields.update(
            cluster_id=shape.cluster_id,
            cluster_name=shape.cluster_name,
            last_check_in=last_check_in,
            token=shape.token,
            tags=shape.tags,
            sop=shape.runbook,
        )
    elif isinstance(shape, CertificateExpiryDetails):
        fields.update(
            name=alert.summary.split(SUMMARY_HOST_SEPARATOR)[0],
            hostname=shape.hostname,
            ip=shape.ip,
            sop=shape.url,
            cluster_name=NOT_AVAILABLE,
        )
    else:
        fields.update(
            cluster_id=shape.cluster_id,
            cluster_name=await _resolve_cluster_name(alert, cluster_name_lookup),
            console=shape.console,
            labels=shape.firing,
            sop=shape.link,
        )

    fields["cluster_id"] = fields.get("cluster_id") or NOT_AVAILABLE
    fields["cluster_name"] = fields.get("cluster_name") or NOT_AVAILABLE
    return NormalizedAlert(shape=shape.kind, **fields)


async def _resolve_cluster_name(alert: RawAlert, lookup: ClusterNameLookup) -> str:
    if alert.service is None or not alert.service.id:
        return NOT_AVAILABLE
    try:
        return await lookup(alert.service.id)
    except IntegrationError as e:
        # The service behind an incident may have been deleted
        logger.warning(
            "Cluster name lookup failed for alert %s (service %s): %s",
            alert.id, alert.service.id, e,
        )
        return NOT_AVAILABLE


async def normalize_alerts(
    alerts: Iterable[RawAlert],
    cluster_name_lookup: ClusterNameLookup,
    incident_id: str = "",
) -> list[AlertResult]:
    """Normalize each alert independently; a malformed alert does not stop the rest."""
    results: list[AlertResult] = []
    for alert in alerts:
        try:
            normalized = await normalize(alert, cluster_name_lookup, incident_id)
        except MalformedAlertError as e:
            logger.warning("%s", e)
            results.append(
                AlertResult(
                    alert_id=alert.id,
                    incident_id=alert.incident.id if alert.incident else incident_id,
                    error=e.reason,
                )
            )
            continue
        results.append(
            AlertResult(alert_id=alert.id, incident_id=normalized.incident_id, alert=normalized)
        )
    return results
