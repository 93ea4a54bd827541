"""
Application-wide exception hierarchy.

Services raise these types; the app factory registers one handler per type
(see leaderdojo.blueprints.register_error_handlers) so every route gets the
same HTTP status codes and error envelope.

Usage:
    from leaderdojo.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Project", resource_id=project_id)
    raise ValidationError("title is required", details={"title": "required"})
"""


class NotFoundError(Exception):
    """Raised when a requested resource does not exist for the calling user.

    Used for BOTH genuinely missing records AND records owned by another
    user. The two cases are indistinguishable to the caller.

    Args:
        resource: Human-readable entity name (e.g. "Project", "Entry").
        resource_id: The id that was looked up. Included in logs, not in HTTP response.
    """

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when input fails validation in the service layer.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for structured API responses.
                 Keys are field names; values are error descriptions.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


# ── AI failures ──────────────────────────────────────────────────────────────


class AIUnavailableError(Exception):
    """Raised when an AI-backed operation cannot produce a usable result.

    Whatever the user captured before the AI call is already persisted;
    callers surface this as "service unavailable, your entry is saved".

    Args:
        purpose: The gateway operation that failed (e.g. "entry_summary").
        message: Detail for logs.
    """

    reason = "unavailable"

    def __init__(self, purpose: str, message: str = "") -> None:
        self.purpose = purpose
        super().__init__(f"AI {purpose} failed: {message}" if message else f"AI {purpose} failed")


class AIProviderError(AIUnavailableError):
    """The provider call itself failed (network, HTTP status, timeout, empty reply)."""

    reason = "provider_error"


class MalformedAIResponseError(AIUnavailableError):
    """The provider answered, but not with JSON matching the expected schema.

    Args:
        errors: Validation error list (pydantic ``errors()`` format) when available.
    """

    reason = "malformed_response"

    def __init__(self, purpose: str, message: str = "", errors: list | None = None) -> None:
        self.errors = errors or []
        super().__init__(purpose, message)


# ── Capture saga ─────────────────────────────────────────────────────────────


class PartialCaptureError(Exception):
    """Raised when a capture persisted its entry but a dependent write failed.

    Args:
        result: The CaptureResult with every id that did get written.
        failed_steps: Names of the dependent steps that failed
                      ("project_last_active", "commitment", "reflection").
    """

    def __init__(self, result, failed_steps: list[str]) -> None:
        self.result = result
        self.failed_steps = list(failed_steps)
        super().__init__(
            f"Entry {result.entry_id} saved but {', '.join(self.failed_steps)} failed"
        )
