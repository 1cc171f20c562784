import logging
from typing import Iterable, Optional

from fees.models import Payment

from .balance_calculator import fee_target
from .errors import NotFound, store_errors
from .ledger import latest_payment
from .reconciler import record_payment
from .reference_issuer import ReferenceIssuer, get_reference_issuer
from .status_resolver import PaymentStatus, resolve_by_reference

logger = logging.getLogger(__name__)


def _find_entry(order_ref: Optional[str], reference: Optional[str]) -> Optional[Payment]:
    payment = None
    if order_ref:
        payment = Payment.objects.filter(transaction_id=order_ref).first()
    if payment is None and reference:
        payment = latest_payment(Payment.objects.filter(reference=reference))
    return payment


def process_notification(items: Iterable[dict], target: Optional[int] = None) -> int:
    """Mark the entries named by a gateway payment notification as completed.

    Each item identifies a settled payment by its RRR and, when the gateway
    echoes it, the order id we sent. Returns the number of entries matched.
    """
    target = fee_target() if target is None else target
    processed = 0
    for item in items:
        reference = item.get("rrr") or item.get("RRR")
        order_ref = item.get("orderRef") or item.get("orderId")
        with store_errors():
            payment = _find_entry(order_ref, reference)
        if payment is None:
            logger.warning("Notification for unknown payment rrr=%s orderRef=%s", reference, order_ref)
            continue
        record_payment(
            transaction_id=payment.transaction_id,
            matric_number=payment.matric_number,
            amount=payment.amount,
            status=Payment.Status.COMPLETED,
            reference=reference,
            target=target,
        )
        processed += 1
    return processed


def verify_reference(
    reference: str, issuer: Optional[ReferenceIssuer] = None, target: Optional[int] = None
) -> PaymentStatus:
    """Poll the gateway for a pending reference and fold the answer into the ledger."""
    target = fee_target() if target is None else target
    with store_errors():
        payment = latest_payment(Payment.objects.filter(reference=reference))
    if payment is None:
        raise NotFound(f"payment with reference {reference} not found")

    if payment.status == Payment.Status.PENDING:
        issuer = issuer or get_reference_issuer()
        gateway_status = issuer.check_status(reference)
        logger.info("Gateway reports %s for reference %s", gateway_status, reference)
        if gateway_status != Payment.Status.PENDING:
            record_payment(
                transaction_id=payment.transaction_id,
                matric_number=payment.matric_number,
                amount=payment.amount,
                status=gateway_status,
                reference=reference,
                target=target,
            )
    return resolve_by_reference(reference, target)
