from fees.models import Payment

from .errors import ValidationError

INITIATION_CHANNELS = ("reference", "inline")

# PositiveIntegerField ceiling
MAX_AMOUNT = 2147483647


def validate_required(data: dict, fields) -> None:
    missing = [f for f in fields if data.get(f) in (None, "")]
    if missing:
        raise ValidationError(f"missing required fields: {', '.join(missing)}")


def validate_amount(amount) -> None:
    if amount is None:
        raise ValidationError("amount required")
    if amount <= 0:
        raise ValidationError("amount must be > 0", error_code="INVALID_AMOUNT")
    if amount > MAX_AMOUNT:
        raise ValidationError(f"amount must not exceed {MAX_AMOUNT}", error_code="INVALID_AMOUNT")


def validate_status(status: str) -> None:
    if status not in Payment.Status.values:
        raise ValidationError(f"unsupported status: {status}", error_code="INVALID_STATUS")


def validate_channel(channel: str) -> None:
    if channel not in INITIATION_CHANNELS:
        raise ValidationError(f"unsupported channel: {channel}", error_code="INVALID_CHANNEL")


def validate_record_request(data: dict) -> None:
    """Checks for a payment being recorded against the ledger."""
    validate_required(data, ("transaction_id", "matric_number", "amount"))
    validate_amount(data["amount"])
    validate_status(data.get("status") or Payment.Status.COMPLETED)


def validate_initiation_request(data: dict) -> None:
    validate_required(data, ("matric_number", "first_name", "last_name", "email", "amount"))
    validate_amount(data["amount"])
    validate_channel(data.get("channel") or "reference")


def validate_registration_request(data: dict) -> None:
    validate_required(data, ("matric_number", "first_name", "last_name", "email"))
