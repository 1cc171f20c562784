from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings


@dataclass(frozen=True)
class PaymentSummary:
    total_paid: int
    remaining_balance: int
    is_fully_paid: bool
    payment_percentage: int

    def as_dict(self) -> dict:
        return {
            "totalPaid": self.total_paid,
            "remainingBalance": self.remaining_balance,
            "isFullyPaid": self.is_fully_paid,
            "paymentPercentage": self.payment_percentage,
        }


def fee_target() -> int:
    """Return the configured flat hostel fee."""
    return int(settings.HOSTEL_FEE_AMOUNT)


def compute_summary(total_paid: int, target: int) -> PaymentSummary:
    """Map an amount paid so far onto the four summary fields for `target`.

    Percentages round half up, the way the payment page displays them.
    """
    pct = (Decimal(total_paid) * Decimal("100") / Decimal(target)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return PaymentSummary(
        total_paid=total_paid,
        remaining_balance=max(0, target - total_paid),
        is_fully_paid=total_paid >= target,
        payment_percentage=min(100, int(pct)),
    )
