import logging
import time
from dataclasses import dataclass
from typing import Optional

from django.conf import settings

from fees.models import Payment, Student

from .balance_calculator import PaymentSummary, fee_target
from .errors import IssuerError, ValidationError, store_errors
from .ledger import cached_summary, summarize_matric
from .payment_validator import validate_initiation_request
from .reconciler import record_payment
from .reference_issuer import PayerDetails, ReferenceIssuer, get_reference_issuer

logger = logging.getLogger(__name__)


@dataclass
class Initiation:
    transaction_id: str
    reference: Optional[str]
    summary: PaymentSummary

    def as_dict(self) -> dict:
        return {
            "reference": self.reference,
            "transactionId": self.transaction_id,
            "totalPaid": self.summary.total_paid,
            "remainingBalance": self.summary.remaining_balance,
            "paymentPercentage": self.summary.payment_percentage,
        }


def make_order_id(matric_number: str) -> str:
    return f"FEE-{matric_number}-{int(time.time() * 1000)}"


def initiate_payment(
    *,
    matric_number: str,
    first_name: str,
    last_name: str,
    email: str,
    amount: int,
    phone_number: Optional[str] = None,
    channel: str = "reference",
    issuer: Optional[ReferenceIssuer] = None,
    target: Optional[int] = None,
) -> Initiation:
    """Start a payment attempt and store it as a pending ledger entry.

    The "reference" channel asks the issuer for an RRR to settle on the
    hosted page. The "inline" channel is paid in the embedded widget, so
    only a transaction id is returned and the reference arrives with the
    completion report.
    """
    channel = channel or "reference"
    validate_initiation_request(
        {
            "matric_number": matric_number,
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "amount": amount,
            "channel": channel,
        }
    )
    target = fee_target() if target is None else target

    with store_errors():
        student = Student.objects.filter(matric_number=matric_number).first()
        summary = cached_summary(student, target) if student else summarize_matric(matric_number, target)

    if amount > summary.remaining_balance:
        raise ValidationError(
            f"Payment amount ({amount}) exceeds remaining balance ({summary.remaining_balance})",
            error_code="INVALID_AMOUNT",
            details={
                "totalPaid": summary.total_paid,
                "remainingBalance": summary.remaining_balance,
                "paymentPercentage": summary.payment_percentage,
            },
        )

    order_id = make_order_id(matric_number)
    reference = None
    if channel == "reference":
        issuer = issuer or get_reference_issuer()
        payer = PayerDetails(
            name=f"{first_name} {last_name}",
            email=email,
            phone=phone_number or (student.phone_number if student else "") or settings.REMITA_DEFAULT_PAYER_PHONE,
            description=f"Hostel Fee Payment for {matric_number}",
        )
        try:
            reference = issuer.issue(order_id=order_id, amount=amount, payer=payer)
        except IssuerError as e:
            logger.error("Reference generation failed for %s: %s (%s)", matric_number, e, e.error_code)
            raise

    record_payment(
        transaction_id=order_id,
        matric_number=matric_number,
        amount=amount,
        status=Payment.Status.PENDING,
        reference=reference,
        target=target,
    )
    logger.info("Initiated %s payment %s for %s", channel, order_id, matric_number)
    return Initiation(transaction_id=order_id, reference=reference, summary=summary)
