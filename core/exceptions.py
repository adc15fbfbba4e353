"""Custom exceptions for the alertops application."""


class AlertOpsError(Exception):
    """Base exception for all alertops errors."""


class ConfigurationError(AlertOpsError):
    """Raised when configuration is invalid or missing."""


class IntegrationError(AlertOpsError):
    """Raised when a call to the upstream incident service fails."""

    def __init__(self, provider: str, message: str, status_code: int | None = None):
        self.provider = provider
        self.message = message
        self.status_code = status_code
        super().__init__(f"[{provider}] {message}")


class NotFoundError(IntegrationError):
    """Raised when the upstream service answers 404 for a resource."""


def with_context(error: IntegrationError, context: str) -> IntegrationError:
    """Return a copy of *error* (same class) with *context* prefixed to its message."""
    return type(error)(error.provider, f"{context}: {error.message}", error.status_code)


class ProviderNotFoundError(AlertOpsError):
    """Raised when a requested integration provider is not registered."""

    def __init__(self, category: str, provider: str | None = None):
        self.category = category
        self.provider = provider
        detail = f" (provider={provider})" if provider else ""
        super().__init__(f"No provider found for category '{category}'{detail}")


class MalformedAlertError(AlertOpsError):
    """Raised when a single alert payload cannot be normalized."""

    def __init__(self, alert_id: str, reason: str):
        self.alert_id = alert_id
        self.reason = reason
        super().__init__(f"Cannot normalize alert '{alert_id}': {reason}")


class InvalidIncidentError(AlertOpsError):
    """Raised when a mutation batch is rejected before any remote call."""


class PaginationError(AlertOpsError):
    """Raised when a paged source does not terminate or stops making progress."""


class MutationMismatchError(AlertOpsError):
    """Raised when a batch mutation response does not cover the submitted incidents."""

    def __init__(self, submitted: list[str], returned: list[str]):
        self.submitted = submitted
        self.returned = returned
        super().__init__(
            f"Batch mutation applied to {sorted(set(returned))}, expected {sorted(set(submitted))}"
        )


class ProtocolAnomalyError(Exception):
    """Raised when the upstream service breaks the single-page batch mutation contract.

    This signals the upstream contract has changed and must abort the run. It
    is not an AlertOpsError, so handlers for ordinary failures never catch it.
    """
