"""Command-line entry point: report on and act upon acknowledged high-urgency incidents."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from app.config import load_settings
from core.exceptions import AlertOpsError
from core.models import Incident, IncidentReport, NormalizedAlert
from core.orchestrator import Orchestrator
from integrations.registry import IntegrationRegistry

logger = logging.getLogger(__name__)

# NormalizedAlert field -> label, in display order. Empty fields are skipped.
_ALERT_FIELDS: list[tuple[str, str]] = [
    ("name", "Alert"),
    ("alert_id", "Alert ID"),
    ("status", "Status"),
    ("severity", "Severity"),
    ("cluster_id", "Cluster ID"),
    ("cluster_name", "Cluster"),
    ("last_check_in", "Last check-in"),
    ("hostname", "Hostname"),
    ("ip", "IP"),
    ("console", "Console"),
    ("labels", "Labels"),
    ("tags", "Tags"),
    ("sop", "SOP"),
    ("web_url", "URL"),
]


def format_alert(alert: NormalizedAlert) -> list[str]:
    lines = []
    for field, label in _ALERT_FIELDS:
        value = getattr(alert, field)
        if value:
            lines.append(f"    {label + ':':<15}{value}")
    return lines


def format_report(reports: list[IncidentReport]) -> str:
    if not reports:
        return "No acknowledged high-urgency incidents."
    lines: list[str] = []
    for report in reports:
        incident = report.incident
        lines.append(f"{incident.id}  {incident.title}")
        lines.append(f"  {incident.html_url}")
        for result in report.alerts:
            lines.append("")
            if result.alert is not None:
                lines.extend(format_alert(result.alert))
            else:
                lines.append(f"    Alert {result.alert_id}: could not normalize ({result.error})")
        lines.append("")
    return "\n".join(lines).rstrip()


def _format_incidents(incidents: list[Incident]) -> str:
    return "\n".join(f"{i.id}  {i.status.value:<13} {i.title}" for i in incidents)


async def run(args: argparse.Namespace) -> int:
    overrides = {"alertops_mode": args.mode} if args.mode else {}
    settings = load_settings(args.config, **overrides)
    logging.getLogger().setLevel(settings.log_level.upper())

    orchestrator = Orchestrator(settings, IntegrationRegistry(settings))
    try:
        context = await orchestrator.load_context()

        if args.command == "ack":
            incidents = await orchestrator.acknowledge(context, args.incident_ids)
        elif args.command == "reassign":
            incidents = await orchestrator.reassign(context, args.incident_ids, args.to)
        elif args.command == "silence":
            incidents = await orchestrator.silence(context, args.incident_ids)
        elif args.command == "note":
            note = await orchestrator.annotate(context, args.incident_id, args.content)
            print(note.model_dump_json(indent=2) if args.output_json else f"Added note {note.id}")
            return 0
        elif args.command == "notes":
            notes = await orchestrator.notes(args.incident_id)
            if args.output_json:
                print(json.dumps([n.model_dump(mode="json") for n in notes], indent=2))
            else:
                for n in notes:
                    print(f"{n.created_at or ''}  {n.user.summary if n.user else ''}: {n.content}")
            return 0
        else:
            reports = await orchestrator.collect_report(context)
            if args.output_json:
                print(json.dumps([r.model_dump(mode="json") for r in reports], indent=2))
            else:
                print(format_report(reports))
            return 0

        if args.output_json:
            print(json.dumps([i.model_dump(mode="json") for i in incidents], indent=2))
        else:
            print(_format_incidents(incidents))
        return 0
    finally:
        await orchestrator.aclose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="alertops",
        description="Report on and manage acknowledged high-urgency PagerDuty incidents",
    )
    parser.add_argument("--config", help="Path to the srepd YAML config file")
    parser.add_argument("--mode", choices=["mock", "live"], help="Override ALERTOPS_MODE")
    parser.add_argument(
        "--json",
        action="store_true",
        dest="output_json",
        help="Output results as JSON",
    )

    sub = parser.add_subparsers(dest="command")
    sub.add_parser("report", help="List incidents with their normalized alerts (default)")

    ack = sub.add_parser("ack", help="Acknowledge incidents as the current user")
    ack.add_argument("incident_ids", nargs="+")

    reassign = sub.add_parser("reassign", help="Reassign incidents to other users")
    reassign.add_argument("incident_ids", nargs="+")
    reassign.add_argument("--to", nargs="+", required=True, metavar="USER_ID")

    silence = sub.add_parser("silence", help="Reassign incidents to the silent user")
    silence.add_argument("incident_ids", nargs="+")

    note = sub.add_parser("note", help="Add a note to an incident")
    note.add_argument("incident_id")
    note.add_argument("content")

    notes = sub.add_parser("notes", help="List the notes on an incident")
    notes.add_argument("incident_id")

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(run(args))
    except AlertOpsError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
