"""Credit ledger models."""

from datetime import datetime

from pydantic import BaseModel, Field


class CreditReservation(BaseModel):
    """Result of a reserve call.

    A failed reservation always reports remaining=0 together with the
    instant the window resets, so clients can tell when to retry.
    """

    success: bool = Field(description="Whether one credit was taken")
    remaining: int = Field(ge=0, description="Credits left in the active window")
    reset_at: datetime | None = Field(
        default=None, description="End of the active window"
    )


class CreditStatus(BaseModel):
    """Read-only view of a user's credits."""

    remaining: int | None = Field(
        default=None, ge=0, description="Credits left; None when unlimited"
    )
    reset_at: datetime | None = Field(
        default=None, description="End of the active window, if one is open"
    )
    unlimited: bool = Field(
        default=False, description="True for users on their own provider credential"
    )
