import hashlib
import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import requests
from django.conf import settings

from fees.models import Payment

from .errors import IssuerAuthError, IssuerError, IssuerNetworkError, IssuerTimeout

logger = logging.getLogger(__name__)

# Remita paymentinit answers "025" when an RRR was generated.
RRR_GENERATED = "025"
COMPLETED_CODES = {"00", "01"}
PENDING_CODES = {"020", "021"}


@dataclass(frozen=True)
class PayerDetails:
    name: str
    email: str
    phone: str
    description: str


class ReferenceIssuer(ABC):
    @abstractmethod
    def issue(self, *, order_id: str, amount: int, payer: PayerDetails) -> str:
        """Return a reference code the payer can settle on the hosted page."""
        raise NotImplementedError

    @abstractmethod
    def check_status(self, reference: str) -> str:
        """Return the gateway's view of `reference` as a Payment status."""
        raise NotImplementedError


class RemitaClient(ReferenceIssuer):
    def __init__(self, base_url, api_key, merchant_id, service_type_id, timeout=30):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.merchant_id = merchant_id
        self.service_type_id = service_type_id
        self.timeout = timeout

    def _consumer_token(self, order_id: str, amount: int) -> str:
        raw = f"{self.merchant_id}{self.service_type_id}{order_id}{amount}{self.api_key}"
        return hashlib.sha512(raw.encode("utf-8")).hexdigest()

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            resp = requests.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout as e:
            raise IssuerTimeout("payment service is taking too long to respond") from e
        except requests.ConnectionError as e:
            raise IssuerNetworkError(f"could not reach payment service: {e}") from e
        if resp.status_code in (401, 403):
            raise IssuerAuthError(f"payment service rejected credentials: HTTP {resp.status_code}")
        if not resp.ok:
            raise IssuerError(f"payment service error: HTTP {resp.status_code}: {resp.text}")
        return resp

    def issue(self, *, order_id: str, amount: int, payer: PayerDetails) -> str:
        url = f"{self.base_url}/remita/exapp/api/v1/send/api/echannelsvc/merchant/api/paymentinit"
        headers = {
            "Content-Type": "application/json",
            "Authorization": (
                f"remitaConsumerKey={self.merchant_id},"
                f"remitaConsumerToken={self._consumer_token(order_id, amount)}"
            ),
        }
        payload = {
            "serviceTypeId": self.service_type_id,
            "amount": str(amount),
            "orderId": order_id,
            "payerName": payer.name,
            "payerEmail": payer.email,
            "payerPhone": payer.phone,
            "description": payer.description,
        }
        logger.info("Requesting RRR for order %s (%s)", order_id, amount)
        resp = self._request("POST", url, json=payload, headers=headers)
        try:
            body = resp.json()
        except ValueError as e:
            raise IssuerError(f"payment service returned non-JSON body: {resp.text}") from e

        rrr = body.get("RRR")
        if str(body.get("statuscode")) != RRR_GENERATED or not rrr:
            raise IssuerError(body.get("message") or "failed to generate RRR")
        return str(rrr)

    def check_status(self, reference: str) -> str:
        url = (
            f"{self.base_url}/remita/exapp/api/v1/send/api/echannelsvc/merchant/api/payment/status/"
            f"{self.merchant_id}/{reference}/{self.api_key}"
        )
        resp = self._request("GET", url, headers={"Content-Type": "application/json"})
        try:
            body = resp.json()
        except ValueError as e:
            raise IssuerError(f"payment service returned non-JSON body: {resp.text}") from e
        return status_from_code(body.get("status"))


class MockReferenceIssuer(ReferenceIssuer):
    """Issues random 9-digit RRRs without calling the gateway; used in demo mode."""

    def issue(self, *, order_id: str, amount: int, payer: PayerDetails) -> str:
        rrr = str(random.randint(100000000, 999999999))
        logger.info("Mock RRR %s generated for order %s", rrr, order_id)
        return rrr

    def check_status(self, reference: str) -> str:
        return Payment.Status.PENDING


def status_from_code(code: Optional[str]) -> str:
    code = str(code) if code is not None else ""
    if code in COMPLETED_CODES:
        return Payment.Status.COMPLETED
    if code in PENDING_CODES:
        return Payment.Status.PENDING
    return Payment.Status.FAILED


def get_reference_issuer() -> ReferenceIssuer:
    if settings.REMITA_ENV == "demo":
        return MockReferenceIssuer()
    return RemitaClient(
        base_url=settings.REMITA_API_BASE_URL,
        api_key=settings.REMITA_API_KEY,
        merchant_id=settings.REMITA_MERCHANT_ID,
        service_type_id=settings.REMITA_SERVICE_TYPE_ID,
        timeout=settings.REMITA_TIMEOUT,
    )
