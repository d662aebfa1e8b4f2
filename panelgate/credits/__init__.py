"""Free-tier credit ledger."""

from panelgate.credits.ledger import CreditLedger
from panelgate.credits.models import CreditReservation, CreditStatus

__all__ = [
    "CreditLedger",
    "CreditReservation",
    "CreditStatus",
]
