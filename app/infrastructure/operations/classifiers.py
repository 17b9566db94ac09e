"""Error classifiers for Slack Web API exceptions.

Converts exceptions raised by slack_sdk into OperationResult objects so the
delivery worker can decide between retrying and giving up.

Usage:
    from infrastructure.operations.classifiers import classify_slack_error

    try:
        client.chat_postMessage(channel="#general", text="hello")
    except Exception as exc:
        return classify_slack_error(exc)
"""

from typing import Optional

from slack_sdk.errors import SlackApiError

from infrastructure.operations.result import OperationResult

# Slack error codes that describe a server-side condition rather than a bad request
TRANSIENT_SLACK_ERRORS = frozenset(
    {
        "ratelimited",
        "internal_error",
        "fatal_error",
        "service_unavailable",
        "request_timeout",
    }
)


def _retry_after(exc: SlackApiError) -> Optional[int]:
    headers = getattr(exc.response, "headers", None) or {}
    value = headers.get("Retry-After") or headers.get("retry-after")
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def classify_slack_error(exc: Exception) -> OperationResult:
    """Classify a Slack client exception into an OperationResult.

    Mapping:
    - ``ratelimited`` or HTTP 429: TRANSIENT_ERROR with retry_after
    - HTTP 5xx or a server-side Slack error code: TRANSIENT_ERROR
    - Any other Slack API error: PERMANENT_ERROR
    - Non-Slack exceptions (timeouts, connection resets): TRANSIENT_ERROR

    Args:
        exc: Exception raised while calling the Slack Web API

    Returns:
        OperationResult with status, message, error_code and retry_after
    """
    if not isinstance(exc, SlackApiError):
        return OperationResult.transient_error(
            f"Connection error: {type(exc).__name__}: {str(exc)}",
            error_code="CONNECTION_ERROR",
        )

    status_code = getattr(exc.response, "status_code", None)
    try:
        error_code = exc.response.get("error") or "unknown_error"
    except AttributeError:
        error_code = "unknown_error"

    if error_code == "ratelimited" or status_code == 429:
        return OperationResult.transient_error(
            f"Slack rate limit exceeded: {error_code}",
            error_code="ratelimited",
            retry_after=_retry_after(exc),
        )

    if error_code in TRANSIENT_SLACK_ERRORS or (
        status_code is not None and status_code >= 500
    ):
        return OperationResult.transient_error(
            f"Slack API unavailable: {error_code}",
            error_code=error_code,
        )

    return OperationResult.permanent_error(
        f"Slack API error: {error_code}",
        error_code=error_code,
    )
