import logging
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from fees.models import Payment, Student

from .balance_calculator import PaymentSummary, compute_summary, fee_target
from .errors import store_errors
from .ledger import refresh_student_totals, summarize_matric
from .payment_validator import validate_record_request

logger = logging.getLogger(__name__)

# Statuses only move forward.
FORWARD_TRANSITIONS = {
    Payment.Status.PENDING: {Payment.Status.COMPLETED, Payment.Status.FAILED},
}


def record_payment(
    *,
    transaction_id: str,
    matric_number: str,
    amount: int,
    status: str = Payment.Status.COMPLETED,
    reference: Optional[str] = None,
    target: Optional[int] = None,
) -> PaymentSummary:
    """Merge one observed payment event into the ledger.

    `transaction_id` is the idempotency key: replaying a completed
    transaction never mutates the ledger, and a pending one is moved
    forward in place instead of being inserted again. Returns the
    student's aggregate after the merge.
    """
    status = status or Payment.Status.COMPLETED
    validate_record_request(
        {"transaction_id": transaction_id, "matric_number": matric_number, "amount": amount, "status": status}
    )
    target = fee_target() if target is None else target

    with store_errors():
        existing = Payment.objects.filter(transaction_id=transaction_id).first()
        if existing is None:
            try:
                return _insert_payment(
                    transaction_id=transaction_id,
                    matric_number=matric_number,
                    amount=amount,
                    status=status,
                    reference=reference,
                    target=target,
                )
            except IntegrityError:
                logger.info("Transaction %s inserted concurrently, updating instead", transaction_id)
                existing = Payment.objects.get(transaction_id=transaction_id)
        return _update_payment(existing, matric_number=matric_number, status=status, reference=reference, target=target)


@transaction.atomic
def _insert_payment(*, transaction_id, matric_number, amount, status, reference, target) -> PaymentSummary:
    student = Student.objects.filter(matric_number=matric_number).first()
    Payment.objects.create(
        transaction_id=transaction_id,
        reference=reference or None,
        student=student,
        matric_number=matric_number,
        amount=amount,
        status=status,
    )
    logger.info(
        "Recorded %s payment %s of %s for %s (student %s)",
        status, transaction_id, amount, matric_number, "linked" if student else "unlinked",
    )

    if student is None or status != Payment.Status.COMPLETED:
        return summarize_matric(matric_number, target)

    Student.objects.filter(pk=student.pk).update(total_paid=F("total_paid") + amount, updated_at=timezone.now())
    student.refresh_from_db(fields=["total_paid"])
    summary = compute_summary(student.total_paid, target)
    Student.objects.filter(pk=student.pk).update(remaining_balance=summary.remaining_balance)
    return summary


def _update_payment(payment: Payment, *, matric_number, status, reference, target) -> PaymentSummary:
    if payment.status == Payment.Status.COMPLETED:
        logger.info("Transaction %s already recorded as completed", payment.transaction_id)
        return summarize_matric(matric_number, target)

    update_fields = []
    if reference and payment.reference != reference:
        payment.reference = reference
        update_fields.append("reference")
    if status != payment.status:
        if status in FORWARD_TRANSITIONS.get(payment.status, ()):
            payment.status = status
            update_fields.append("status")
        else:
            logger.warning(
                "Ignoring %s -> %s transition for transaction %s", payment.status, status, payment.transaction_id
            )

    student = payment.student or Student.objects.filter(matric_number=payment.matric_number).first()
    if student is not None and payment.student_id is None:
        payment.student = student
        update_fields.append("student")

    if update_fields:
        payment.save(update_fields=update_fields + ["updated_at"])
        logger.info("Updated transaction %s: %s", payment.transaction_id, ", ".join(update_fields))

    if student is not None:
        refresh_student_totals(student, target)
    return summarize_matric(matric_number, target)
