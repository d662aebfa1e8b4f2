"""Exception hierarchy for panelgate.

Client-facing exceptions inherit from PanelgateError, which carries the
status_code and error_code a thin HTTP layer needs to build an
ErrorResponse. The request coordinator itself reports terminal states as
tagged outcomes; these exceptions are raised at the component seams
(key validation, store access, credential resolution, persistence).
"""

from panelgate.errors import ErrorCode


class PanelgateError(Exception):
    """Base exception for all panelgate errors."""

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidKeyFormatError(PanelgateError):
    """Raised when an idempotency key fails length or charset rules."""

    status_code = 400
    error_code = ErrorCode.INVALID_IDEMPOTENCY_KEY


class LockConflictError(PanelgateError):
    """Raised when a duplicate request arrives while the first is in flight."""

    status_code = 409
    error_code = ErrorCode.GENERATION_IN_PROGRESS


class QuotaExhaustedError(PanelgateError):
    """Raised when a metered user has no credits left."""

    status_code = 429
    error_code = ErrorCode.QUOTA_EXHAUSTED


class MissingProviderCredentialError(PanelgateError):
    """Raised when no usable provider API key is available."""

    status_code = 400
    error_code = ErrorCode.MISSING_PROVIDER_CREDENTIAL


class PersistenceFailureError(PanelgateError):
    """Raised when a generated artifact cannot be persisted."""

    status_code = 500
    error_code = ErrorCode.PERSISTENCE_FAILED


class CoordinationStoreError(PanelgateError):
    """Raised when the shared coordination store is unavailable or corrupt.

    Callers fail closed: no provider call is made without a working store.
    """

    status_code = 503
    error_code = ErrorCode.SERVICE_UNAVAILABLE


class ConfigurationError(Exception):
    """Raised when coordinator configuration is inconsistent."""
