import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from fees.services.completion import process_notification, verify_reference
from fees.services.errors import FeeServiceError, ValidationError
from fees.services.initiation import initiate_payment
from fees.services.reconciler import record_payment
from fees.services.registration_gate import complete_registration
from fees.services.status_resolver import resolve_by_identity, resolve_by_reference

from .serializers import (
    PROFILE_KEYS,
    InitiatePaymentSerializer,
    RecordPaymentSerializer,
    RegistrationSerializer,
)

logger = logging.getLogger(__name__)


def error_response(exc: FeeServiceError) -> Response:
    body = {"success": False, "error": str(exc), "errorCode": exc.error_code, **exc.details}
    return Response(body, status=exc.status_code)


def validated(serializer_class, data) -> dict:
    serializer = serializer_class(data=data)
    if not serializer.is_valid():
        field, errors = next(iter(serializer.errors.items()))
        detail = errors[0] if isinstance(errors, list) and errors else errors
        raise ValidationError(f"{field}: {detail}", error_code="INVALID_FIELDS")
    return serializer.validated_data


class PaymentStatusView(APIView):
    def get(self, request):
        params = request.query_params
        reference = params.get("reference") or params.get("rrr")
        matric_number = params.get("matricNumber")
        if not reference and not matric_number:
            return Response(
                {"success": False, "error": "Missing reference or matricNumber parameter", "errorCode": "MISSING_IDENTIFIER"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            if reference:
                result = resolve_by_reference(reference)
            else:
                result = resolve_by_identity(matric_number)
        except FeeServiceError as e:
            return error_response(e)
        return Response({"success": True, **result.as_dict()})


class PaymentView(APIView):
    def post(self, request):
        try:
            data = validated(RecordPaymentSerializer, request.data)
            # the gateway reference doubles as the idempotency key when no transaction id is sent
            transaction_id = data.get("transactionId") or data.get("reference")
            summary = record_payment(
                transaction_id=transaction_id,
                matric_number=data.get("matricNumber"),
                amount=data.get("amount"),
                status=data.get("status"),
                reference=data.get("reference"),
            )
        except FeeServiceError as e:
            return error_response(e)
        return Response({"success": True, "message": "Payment recorded successfully", **summary.as_dict()})


class InitiatePaymentView(APIView):
    def post(self, request):
        try:
            data = validated(InitiatePaymentSerializer, request.data)
            result = initiate_payment(
                matric_number=data.get("matricNumber"),
                first_name=data.get("firstName"),
                last_name=data.get("lastName"),
                email=data.get("email"),
                amount=data.get("amount"),
                phone_number=data.get("phoneNumber"),
                channel=data.get("channel"),
            )
        except FeeServiceError as e:
            return error_response(e)
        message = (
            "Payment reference generated successfully"
            if result.reference
            else "Transaction initialized for direct payment"
        )
        return Response({"success": True, "message": message, **result.as_dict()}, status=status.HTTP_201_CREATED)


class RegistrationView(APIView):
    def post(self, request):
        payload = dict(request.data) if isinstance(request.data, dict) else {}
        # field names sent by the registration form
        payload.setdefault("reference", payload.pop("paymentRRR", None))
        payload.setdefault("paidAmount", payload.pop("paymentAmount", None))
        try:
            data = validated(RegistrationSerializer, payload)
            profile = {
                field: data[key]
                for key, field in PROFILE_KEYS.items()
                if data.get(key) not in (None, "")
            }
            student_id = complete_registration(
                matric_number=data.get("matricNumber"),
                profile=profile,
                reference=data.get("reference") or None,
                paid_amount=data.get("paidAmount"),
            )
        except FeeServiceError as e:
            return error_response(e)
        return Response({"success": True, "message": "Student registered successfully", "studentId": student_id})


class PaymentNotificationView(APIView):
    def post(self, request):
        items = request.data
        if isinstance(items, dict):
            items = [items]
        if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
            return Response(
                {"success": False, "error": "Invalid notification payload", "errorCode": "INVALID_PAYLOAD"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        try:
            processed = process_notification(items)
        except FeeServiceError as e:
            logger.error("Payment notification failed: %s", e)
            return error_response(e)
        return Response({"success": True, "processed": processed})


class VerifyReferenceView(APIView):
    def post(self, request, reference):
        try:
            result = verify_reference(reference)
        except FeeServiceError as e:
            return error_response(e)
        return Response({"success": True, **result.as_dict()})
