"""Picks the mock or live PagerDuty provider for the configured mode."""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

from core.exceptions import ProviderNotFoundError

if TYPE_CHECKING:
    from app.config import Settings
    from integrations.base import AlertingProvider

# (module, class) per mode. Imported on first use so mock mode never loads httpx.
ALERTING_PROVIDERS: dict[str, tuple[str, str]] = {
    "mock": ("integrations.mock.mock_pagerduty", "MockPagerDuty"),
    "live": ("integrations.providers.pagerduty.client", "PagerDutyClient"),
}


class IntegrationRegistry:
    """Holds one provider per registry; call :meth:`reset` to rebuild it."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._provider: AlertingProvider | None = None

    @property
    def mode(self) -> str:
        # PAGERDUTY_MODE overrides ALERTOPS_MODE; any value but "mock" means live
        return "mock" if self._settings.get_integration_mode("pagerduty") == "mock" else "live"

    def get_provider(self, category: str = "alerting") -> AlertingProvider:
        if category != "alerting":
            raise ProviderNotFoundError(category)
        if self._provider is None:
            module_path, class_name = ALERTING_PROVIDERS[self.mode]
            provider_cls = getattr(importlib.import_module(module_path), class_name)
            self._provider = provider_cls(self._settings)
        return self._provider

    def reset(self) -> None:
        self._provider = None
