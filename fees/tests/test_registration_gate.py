from unittest import mock

from django.db import DatabaseError, IntegrityError
from django.test import TestCase

from fees.models import Payment, Student
from fees.services.errors import ValidationError
from fees.services.reconciler import record_payment
from fees.services.registration_gate import complete_registration

PROFILE = {
    "first_name": "Ada",
    "last_name": "Obi",
    "email": "ada@example.com",
    "faculty": "Engineering",
}


class CompleteRegistrationTests(TestCase):
    def test_new_student_folds_unlinked_payments(self):
        record_payment(transaction_id="TXN2", matric_number="2020/5555", amount=100000)
        record_payment(transaction_id="TXN3", matric_number="2020/5555", amount=50000)

        student_id = complete_registration(matric_number="2020/5555", profile=PROFILE, reference=None)

        student = Student.objects.get(pk=student_id)
        self.assertEqual(student.total_paid, 150000)
        self.assertEqual(student.remaining_balance, 69000)
        self.assertTrue(student.registration_completed)
        self.assertEqual(student.level, "100")
        self.assertEqual(set(student.payments.values_list("transaction_id", flat=True)), {"TXN2", "TXN3"})

    def test_new_student_without_payments(self):
        student_id = complete_registration(matric_number="2020/0001", profile=PROFILE)
        student = Student.objects.get(pk=student_id)
        self.assertEqual(student.total_paid, 0)
        self.assertEqual(student.remaining_balance, 219000)

    def test_reference_links_every_entry_sharing_it(self):
        record_payment(transaction_id="TXN5", matric_number="2021/0001", amount=100000, reference="270005")
        # retry created under a mistyped matric number
        record_payment(transaction_id="TXN6", matric_number="2021/001", amount=20000, reference="270005")

        student_id = complete_registration(
            matric_number="2021/0001", profile=PROFILE, reference="270005", paid_amount=100000
        )

        self.assertEqual(Payment.objects.filter(student_id=student_id).count(), 2)
        student = Student.objects.get(pk=student_id)
        self.assertEqual(student.total_paid, 120000)

    def test_existing_student_is_updated_without_double_counting(self):
        student = Student.objects.create(
            matric_number="2020/1234", first_name="A", last_name="O", email="old@example.com",
            remaining_balance=219000,
        )
        Payment.objects.create(
            transaction_id="TXN1",
            reference="270001",
            matric_number="2020/1234",
            amount=50000,
            status=Payment.Status.COMPLETED,
        )

        complete_registration(matric_number="2020/1234", profile=PROFILE, reference="270001")
        complete_registration(matric_number="2020/1234", profile=PROFILE, reference="270001")

        student.refresh_from_db()
        self.assertEqual(student.email, "ada@example.com")
        self.assertEqual(student.faculty, "Engineering")
        self.assertEqual(student.total_paid, 50000)
        self.assertEqual(student.remaining_balance, 169000)
        self.assertTrue(student.registration_completed)
        self.assertEqual(Student.objects.count(), 1)

    def test_pending_reference_is_linked_but_not_counted(self):
        record_payment(
            transaction_id="TXN7", matric_number="2020/7777", amount=80000, status="pending", reference="270007"
        )
        with self.assertLogs("fees.services.registration_gate", level="WARNING"):
            student_id = complete_registration(matric_number="2020/7777", profile=PROFILE, reference="270007")
        student = Student.objects.get(pk=student_id)
        self.assertEqual(student.total_paid, 0)
        self.assertEqual(Payment.objects.get(transaction_id="TXN7").student, student)

    def test_unknown_reference_does_not_block_registration(self):
        student_id = complete_registration(matric_number="2020/8888", profile=PROFILE, reference="does-not-exist")
        self.assertTrue(Student.objects.get(pk=student_id).registration_completed)

    def test_link_failure_is_logged(self):
        Payment.objects.create(
            transaction_id="TXN9",
            reference="270009",
            matric_number="2020/9999",
            amount=219000,
            status=Payment.Status.COMPLETED,
        )
        with mock.patch(
            "fees.services.registration_gate.transaction.atomic", side_effect=DatabaseError("link failed")
        ):
            with self.assertLogs("fees.services.registration_gate", level="ERROR"):
                student_id = complete_registration(matric_number="2020/9999", profile=PROFILE, reference="270009")
        self.assertEqual(Student.objects.get(pk=student_id).total_paid, 219000)

    def test_concurrent_insert_falls_back_to_update(self):
        record_payment(transaction_id="TXN2", matric_number="2020/5555", amount=100000)

        def racing_create(matric_number, values):
            other = Student.objects.create(
                matric_number=matric_number, first_name="A", last_name="O", email="old@example.com"
            )
            Payment.objects.filter(matric_number=matric_number).update(student=other)
            raise IntegrityError("duplicate key value violates unique constraint")

        with mock.patch("fees.services.registration_gate._create_student", side_effect=racing_create):
            student_id = complete_registration(matric_number="2020/5555", profile=PROFILE)

        self.assertEqual(Student.objects.count(), 1)
        student = Student.objects.get(pk=student_id)
        self.assertEqual(student.email, "ada@example.com")
        self.assertTrue(student.registration_completed)
        self.assertEqual(student.total_paid, 100000)
        self.assertEqual(student.remaining_balance, 119000)

    def test_missing_profile_fields(self):
        with self.assertRaises(ValidationError):
            complete_registration(matric_number="2020/5555", profile={"first_name": "Ada"})
        with self.assertRaises(ValidationError):
            complete_registration(matric_number="", profile=PROFILE)
        self.assertFalse(Student.objects.exists())
