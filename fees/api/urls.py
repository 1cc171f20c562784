from django.urls import path
from .views import (
    InitiatePaymentView,
    PaymentNotificationView,
    PaymentStatusView,
    PaymentView,
    RegistrationView,
    VerifyReferenceView,
)

urlpatterns = [
    path("payments", PaymentView.as_view(), name="payments"),
    path("payments/status", PaymentStatusView.as_view(), name="payment-status"),
    path("payments/initiate", InitiatePaymentView.as_view(), name="payment-initiate"),
    path("payments/notification", PaymentNotificationView.as_view(), name="payment-notification"),
    path("payments/<str:reference>/verify", VerifyReferenceView.as_view(), name="payment-verify"),
    path("registrations", RegistrationView.as_view(), name="registrations"),
]
