"""Small helpers shared across the core."""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime

_TIMESTAMP_RE = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z", re.ASCII)

INPUT_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
OUTPUT_TIMESTAMP_FORMAT = "%m-%d-%Y %H:%M UTC"


def format_timestamp(timestamp: str) -> str:
    """Reformat ``YYYY-MM-DDTHH:MM:SSZ`` as ``MM-DD-YYYY HH:MM UTC``.

    Raises:
        ValueError: if *timestamp* does not match the input format exactly.
    """
    if not isinstance(timestamp, str) or not _TIMESTAMP_RE.fullmatch(timestamp):
        raise ValueError(f"timestamp {timestamp!r} does not match {INPUT_TIMESTAMP_FORMAT}")
    parsed = datetime.strptime(timestamp, INPUT_TIMESTAMP_FORMAT)
    return parsed.strftime(OUTPUT_TIMESTAMP_FORMAT)


def difference(a: Iterable[str], b: Iterable[str]) -> list[str]:
    """Return the items of *a* not present in *b*, keeping the order of *a*."""
    excluded = set(b)
    return [x for x in a if x not in excluded]


def unique(items: Iterable[str]) -> list[str]:
    """De-duplicate *items*, keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result
