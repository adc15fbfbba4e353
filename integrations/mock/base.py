"""Shared base class and utilities for mock providers."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, TypeVar

from app.config import Settings
from core.models import Page

T = TypeVar("T")

SCENARIOS_DIR = Path(__file__).resolve().parent / "fixtures" / "scenarios"

MOCK_DELAYS: dict[str, float] = {
    "pagerduty": 0.2,
}


def page_of(items: list[T], offset: int, limit: int) -> Page[T]:
    """Slice *items* into the window an offset/limit API would return."""
    window = items[offset:offset + limit]
    return Page(items=window, more=offset + limit < len(items), offset=offset, limit=limit)


class MockBase:
    """Base class for mock providers.

    Reads the provider's section of the active scenario fixture and adds
    optional artificial latency to every call.
    """

    provider_key: str = ""  # Override in subclasses (e.g. "pagerduty")

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._scenario_data: dict[str, Any] = {}
        self.reload_scenario()

    def reload_scenario(self) -> None:
        """Re-read the scenario file; in-memory changes are discarded."""
        scenario_path = SCENARIOS_DIR / f"{self._settings.mock_scenario}.json"
        if not scenario_path.exists():
            self._scenario_data = {}
        else:
            with open(scenario_path) as f:
                self._scenario_data = json.load(f).get(self.provider_key, {})
        self._on_scenario_loaded()

    def _on_scenario_loaded(self) -> None:
        """Hook for subclasses to rebuild state from ``_scenario_data``."""

    async def _simulate_delay(self) -> None:
        if self._settings.mock_delay_enabled:
            await asyncio.sleep(MOCK_DELAYS.get(self.provider_key, 0.2))

    def _get(self, key: str, default: Any = None) -> Any:
        return self._scenario_data.get(key, default)
