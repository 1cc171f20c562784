from typing import Optional

from django.db.models import Q, QuerySet, Sum
from django.utils import timezone

from fees.models import Payment, Student

from .balance_calculator import PaymentSummary, compute_summary


def completed_total(queryset: QuerySet) -> int:
    value = queryset.filter(status=Payment.Status.COMPLETED).aggregate(total=Sum("amount")).get("total")
    return int(value or 0)


def payments_for_matric(matric_number: str) -> QuerySet:
    return Payment.objects.filter(matric_number=matric_number)


def payments_for_student(student: Student) -> QuerySet:
    """Entries linked to the student plus unlinked entries carrying its matric number."""
    return Payment.objects.filter(
        Q(student=student) | Q(student__isnull=True, matric_number=student.matric_number)
    )


def latest_payment(queryset: QuerySet) -> Optional[Payment]:
    return queryset.order_by("-created_at", "-id").first()


def summarize_matric(matric_number: str, target: int) -> PaymentSummary:
    return compute_summary(completed_total(payments_for_matric(matric_number)), target)


def cached_summary(student: Student, target: int) -> PaymentSummary:
    return compute_summary(student.total_paid, target)


def refresh_student_totals(student: Student, target: int) -> PaymentSummary:
    """Re-derive the student's cached totals from raw completed entries."""
    summary = compute_summary(completed_total(payments_for_student(student)), target)
    Student.objects.filter(pk=student.pk).update(
        total_paid=summary.total_paid,
        remaining_balance=summary.remaining_balance,
        updated_at=timezone.now(),
    )
    student.total_paid = summary.total_paid
    student.remaining_balance = summary.remaining_balance
    return summary


def payment_details(payment: Payment, matric_number: str = None) -> dict:
    return {
        "reference": payment.reference,
        "amount": payment.amount,
        "status": payment.status,
        "paymentDate": payment.created_at.isoformat(),
        "transactionId": payment.transaction_id,
        "matricNumber": matric_number or payment.matric_number,
    }
