import logging
from typing import Optional

from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from fees.models import Payment, Student

from .balance_calculator import fee_target
from .errors import store_errors
from .ledger import latest_payment, refresh_student_totals
from .payment_validator import validate_registration_request

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone_number",
    "faculty",
    "department",
    "level",
    "date_of_birth",
    "gender",
    "state_of_origin",
    "address",
    "emergency_contact",
    "emergency_contact_name",
    "emergency_contact_relationship",
)


def complete_registration(
    *,
    matric_number: str,
    profile: dict,
    reference: Optional[str] = None,
    paid_amount: Optional[int] = None,
    target: Optional[int] = None,
) -> int:
    """Create or update the student record and attach its payments.

    Payment completion is checked by the client before it submits the
    registration form; here an unknown or unpaid reference is only logged.
    Returns the student id.
    """
    validate_registration_request({"matric_number": matric_number, **profile})
    target = fee_target() if target is None else target

    with store_errors():
        payment = _find_payment(reference, paid_amount)
        student, created = _upsert_student(matric_number, profile)
        if payment is not None:
            _link_reference_payments(student, payment)
        summary = refresh_student_totals(student, target)

    logger.info(
        "%s student %s: paid %s, remaining %s",
        "Registered" if created else "Updated", matric_number, summary.total_paid, summary.remaining_balance,
    )
    return student.pk


def _find_payment(reference: Optional[str], paid_amount: Optional[int]) -> Optional[Payment]:
    if not reference:
        return None
    payment = latest_payment(Payment.objects.filter(reference=reference))
    if payment is None:
        logger.warning("Registration reference %s not found, continuing without payment", reference)
        return None
    if payment.status != Payment.Status.COMPLETED:
        logger.warning("Registration reference %s has status %s", reference, payment.status)
    if paid_amount is not None and paid_amount != payment.amount:
        logger.warning(
            "Registration reference %s claims %s paid, ledger has %s", reference, paid_amount, payment.amount
        )
    return payment


def _upsert_student(matric_number: str, profile: dict):
    values = {f: profile[f] for f in PROFILE_FIELDS if profile.get(f) is not None}
    student = _update_student(matric_number, values)
    if student is not None:
        return student, False
    try:
        return _create_student(matric_number, values), True
    except IntegrityError:
        logger.info("Student %s registered concurrently, updating instead", matric_number)
    return _update_student(matric_number, values), False


@transaction.atomic
def _update_student(matric_number: str, values: dict) -> Optional[Student]:
    student = Student.objects.select_for_update().filter(matric_number=matric_number).first()
    if student is None:
        return None
    for field, value in values.items():
        setattr(student, field, value)
    student.registration_completed = True
    student.save()
    return student


@transaction.atomic
def _create_student(matric_number: str, values: dict) -> Student:
    student = Student.objects.create(matric_number=matric_number, registration_completed=True, **values)
    linked = Payment.objects.filter(student__isnull=True, matric_number=matric_number).update(
        student=student, updated_at=timezone.now()
    )
    if linked:
        logger.info("Linked %s earlier payments to new student %s", linked, matric_number)
    return student


def _link_reference_payments(student: Student, payment: Payment) -> None:
    try:
        with transaction.atomic():
            Payment.objects.filter(pk=payment.pk).update(student=student, updated_at=timezone.now())
            others = Payment.objects.filter(reference=payment.reference, student__isnull=True).update(student=student, updated_at=timezone.now())
    except DatabaseError:
        logger.exception("Could not link payments with reference %s to student %s", payment.reference, student.pk)
        return
    if others:
        logger.info("Linked %s more payments with reference %s to student %s", others, payment.reference, student.pk)
