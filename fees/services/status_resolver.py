from dataclasses import dataclass
from typing import Optional

from fees.models import Payment, Student

from .balance_calculator import PaymentSummary, compute_summary, fee_target
from .errors import NotFound, store_errors
from .ledger import (
    cached_summary,
    completed_total,
    latest_payment,
    payment_details,
    payments_for_matric,
)


@dataclass
class PaymentStatus:
    status: str
    summary: PaymentSummary
    message: str
    payment_details: Optional[dict] = None

    def as_dict(self) -> dict:
        data = {"status": self.status, **self.summary.as_dict(), "message": self.message}
        if self.payment_details is not None:
            data["paymentDetails"] = self.payment_details
        return data


def resolve_by_reference(reference: str, target: Optional[int] = None) -> PaymentStatus:
    """Status of the payment carrying `reference`, with the payer's aggregate.

    The aggregate comes from the linked student's cache when there is one,
    otherwise it is re-derived from every completed entry sharing the
    entry's matric number.
    """
    target = fee_target() if target is None else target
    with store_errors():
        payment = latest_payment(Payment.objects.filter(reference=reference))
        if payment is None:
            raise NotFound(f"payment with reference {reference} not found")

        message = f"Payment status for reference {reference} is {payment.status}"
        if payment.student is not None:
            return PaymentStatus(
                status=payment.status,
                summary=cached_summary(payment.student, target),
                message=message,
                payment_details=payment_details(payment, payment.student.matric_number),
            )

        if payment.matric_number:
            summary = compute_summary(completed_total(payments_for_matric(payment.matric_number)), target)
        else:
            summary = compute_summary(payment.amount, target)
        return PaymentStatus(
            status=payment.status,
            summary=summary,
            message=message,
            payment_details=payment_details(payment),
        )


def resolve_by_identity(matric_number: str, target: Optional[int] = None) -> PaymentStatus:
    target = fee_target() if target is None else target
    with store_errors():
        student = Student.objects.filter(matric_number=matric_number).first()
        if student is not None:
            summary = cached_summary(student, target)
            latest = latest_payment(student.payments.all())
        else:
            entries = payments_for_matric(matric_number)
            latest = latest_payment(entries)
            if latest is None:
                return PaymentStatus(
                    status=Payment.Status.PENDING,
                    summary=compute_summary(0, target),
                    message=f"No payments found for matric number {matric_number}",
                )
            summary = compute_summary(completed_total(entries), target)

    status = Payment.Status.COMPLETED if summary.is_fully_paid else Payment.Status.PENDING
    return PaymentStatus(
        status=status,
        summary=summary,
        message=f"Payment status for matric number {matric_number} is {status}",
        payment_details=payment_details(latest, matric_number) if latest else None,
    )
