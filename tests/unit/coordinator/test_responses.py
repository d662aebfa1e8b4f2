"""Unit tests for outcome rendering."""

from datetime import UTC, datetime

import pytest

from panelgate.coordinator import (
    FailedGeneration,
    FailedPersistence,
    RejectedConflict,
    RejectedInvalidKey,
    RejectedQuotaExhausted,
    ReplayedResponse,
    ServiceUnavailable,
    SucceededGeneration,
    render_error,
    render_outcome,
)
from panelgate.exceptions import MissingProviderCredentialError


class TestRenderOutcome:
    """Tests for render_outcome."""

    def test_success(self) -> None:
        outcome = SucceededGeneration(body_text='{"imageUrl":"https://img"}', profile_id="p")
        assert render_outcome(outcome) == (200, {"imageUrl": "https://img"})

    def test_replay_returns_original(self) -> None:
        outcome = ReplayedResponse(status=200, body_text='{"imageUrl":"https://img"}')
        assert render_outcome(outcome) == (200, {"imageUrl": "https://img"})

    def test_invalid_key(self) -> None:
        status, body = render_outcome(RejectedInvalidKey(message="bad"))
        assert status == 400
        assert body == {"error": {"code": "INVALID_IDEMPOTENCY_KEY", "message": "bad"}}

    def test_conflict(self) -> None:
        status, body = render_outcome(RejectedConflict())
        assert status == 409
        assert body["error"]["code"] == "GENERATION_IN_PROGRESS"

    def test_quota_carries_reset_instant(self) -> None:
        reset_at = datetime(2025, 1, 8, tzinfo=UTC)

        status, body = render_outcome(RejectedQuotaExhausted(reset_at=reset_at))

        assert status == 429
        assert body["error"]["code"] == "QUOTA_EXHAUSTED"
        assert body["remaining"] == 0
        assert datetime.fromisoformat(body["reset_at"]) == reset_at

    @pytest.mark.parametrize(
        ("outcome", "status", "code"),
        [
            (
                FailedGeneration(attempts=2, last_category="content_policy"),
                500,
                "GENERATION_FAILED",
            ),
            (FailedPersistence(), 500, "PERSISTENCE_FAILED"),
            (ServiceUnavailable(), 503, "SERVICE_UNAVAILABLE"),
        ],
    )
    def test_internal_failures_are_generic(self, outcome, status: int, code: str) -> None:
        rendered_status, body = render_outcome(outcome)

        assert rendered_status == status
        assert body["error"]["code"] == code
        assert "content_policy" not in body["error"]["message"]
        assert "idempotency:" not in body["error"]["message"]

    def test_unknown_outcome_raises(self) -> None:
        with pytest.raises(TypeError):
            render_outcome(object())  # type: ignore[arg-type]


class TestRenderError:
    """Tests for render_error."""

    def test_missing_credential(self) -> None:
        status, body = render_error(MissingProviderCredentialError("Add a key"))
        assert status == 400
        assert body["error"] == {"code": "MISSING_PROVIDER_CREDENTIAL", "message": "Add a key"}
