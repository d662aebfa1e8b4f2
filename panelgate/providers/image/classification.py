"""Failure classification for provider errors.

Classification is a pure function of what the provider reported. It
never looks at elapsed time or how many attempts were made.
"""

import re

from panelgate.providers.image.base import FailureKind

TERMINAL_CATEGORIES = frozenset(
    {
        "authentication",
        "credit_limit",
        "content_policy",
        "invalid_request",
        "invalid_reference_image",
    }
)

TRANSIENT_CATEGORIES = frozenset(
    {
        "timeout",
        "network",
        "rate_limit",
        "server_error",
        "invalid_response",
        "model_unavailable",
        "unexpected",
    }
)

TERMINAL_STATUS_CODES = frozenset({400, 401, 402, 403, 413, 422})

TRANSIENT_STATUS_CODES = frozenset({408, 409, 425, 429})

_CONTENT_POLICY_PATTERN = re.compile(
    r"NO_IMAGE|content[ _-]?policy|safety|nsfw|moderation", re.IGNORECASE
)


def is_content_policy_violation(message: str | None) -> bool:
    """Check whether provider text reports a blocked prompt or image."""
    return bool(message) and bool(_CONTENT_POLICY_PATTERN.search(message or ""))


def category_for_status(status_code: int | None) -> str:
    """Map an HTTP status to a failure category."""
    if status_code is None:
        return "unexpected"
    if status_code in (401, 403):
        return "authentication"
    if status_code == 402:
        return "credit_limit"
    if status_code in (408, 504):
        return "timeout"
    if status_code == 404:
        return "model_unavailable"
    if status_code == 429:
        return "rate_limit"
    if status_code >= 500:
        return "server_error"
    if status_code in TERMINAL_STATUS_CODES:
        return "invalid_request"
    return "unexpected"


def classify_failure(status_code: int | None, category: str | None = None) -> FailureKind:
    """Decide whether a failure should move on to the next profile.

    A known terminal category wins over the status code; unknown
    categories and statuses are transient.

    Args:
        status_code: HTTP status the provider returned, if any
        category: Failure category, if known

    Returns:
        FailureKind.TERMINAL to stop the chain, FailureKind.TRANSIENT otherwise
    """
    if category in TERMINAL_CATEGORIES:
        return FailureKind.TERMINAL
    if category in TRANSIENT_CATEGORIES:
        return FailureKind.TRANSIENT

    if status_code is None or status_code in TRANSIENT_STATUS_CODES or status_code >= 500:
        return FailureKind.TRANSIENT
    if status_code in TERMINAL_STATUS_CODES:
        return FailureKind.TERMINAL
    return FailureKind.TRANSIENT
