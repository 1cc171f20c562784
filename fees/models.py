from django.db import models
from django.utils import timezone

from fees.services.balance_calculator import fee_target


class Student(models.Model):
    matric_number = models.CharField(max_length=32, unique=True)
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField()
    phone_number = models.CharField(max_length=20, blank=True, default="")
    faculty = models.CharField(max_length=100, blank=True, default="")
    department = models.CharField(max_length=100, blank=True, default="")
    level = models.CharField(max_length=10, default="100")
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=20, blank=True, default="")
    state_of_origin = models.CharField(max_length=50, blank=True, default="")
    address = models.TextField(blank=True, default="")
    emergency_contact = models.CharField(max_length=20, blank=True, default="")
    emergency_contact_name = models.CharField(max_length=100, blank=True, default="")
    emergency_contact_relationship = models.CharField(max_length=50, blank=True, default="")

    # cached aggregate, re-derivable from completed Payment rows
    total_paid = models.PositiveIntegerField(default=0)
    remaining_balance = models.PositiveIntegerField(default=fee_target)
    registration_completed = models.BooleanField(default=False)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.matric_number


class Payment(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"

    transaction_id = models.CharField(max_length=128, unique=True)
    reference = models.CharField(max_length=64, null=True, blank=True, db_index=True)
    student = models.ForeignKey(
        Student,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments",
    )
    matric_number = models.CharField(max_length=32, db_index=True)
    amount = models.PositiveIntegerField()
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.transaction_id}:{self.amount}:{self.status}"
