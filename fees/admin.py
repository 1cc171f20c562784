from django.contrib import admin
from .models import Payment, Student


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ('matric_number', 'first_name', 'last_name', 'total_paid', 'remaining_balance', 'registration_completed')
    list_filter = ('registration_completed', 'level')
    search_fields = ('matric_number', 'first_name', 'last_name', 'email')


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('transaction_id', 'reference', 'matric_number', 'amount', 'status', 'created_at')
    list_filter = ('status',)
    search_fields = ('transaction_id', 'reference', 'matric_number')
