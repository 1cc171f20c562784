import logging

from django.core.management.base import BaseCommand

from fees.models import Payment, Student
from fees.services.balance_calculator import fee_target
from fees.services.ledger import refresh_student_totals

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Re-derives every student's cached totals from completed payment entries."

    def add_arguments(self, parser):
        parser.add_argument("--matric", help="Only reconcile this matric number.")
        parser.add_argument(
            "--link",
            action="store_true",
            help="Also link unlinked payments to the student sharing their matric number.",
        )

    def handle(self, *args, **options):
        target = fee_target()
        students = Student.objects.order_by("id")
        if options.get("matric"):
            students = students.filter(matric_number=options["matric"])

        changed = 0
        for student in students.iterator():
            if options.get("link"):
                linked = Payment.objects.filter(student__isnull=True, matric_number=student.matric_number).update(
                    student=student
                )
                if linked:
                    self.stdout.write(f"{student.matric_number}: linked {linked} payments")

            before = (student.total_paid, student.remaining_balance)
            summary = refresh_student_totals(student, target)
            if before != (summary.total_paid, summary.remaining_balance):
                changed += 1
                logger.info(
                    "Cached totals for %s corrected from %s to %s", student.matric_number, before[0], summary.total_paid
                )
                self.stdout.write(f"{student.matric_number}: {before[0]} -> {summary.total_paid}")

        self.stdout.write(self.style.SUCCESS(f"Reconciled ledger, {changed} students corrected."))
