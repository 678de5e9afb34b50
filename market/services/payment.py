# market/services/payment.py
# Payment port and the mock gateway used until a real provider is wired in.
import logging
import uuid
from dataclasses import dataclass
from typing import Protocol

from market.core.errors import PaymentError

logger = logging.getLogger(__name__)

PAYMENT_SUCCESS = "success"
PAYMENT_PENDING = "pending"


@dataclass
class PaymentRequest:
    order_id: int
    amount: float
    method: str
    currency: str = "USD"


@dataclass
class PaymentResult:
    transaction_id: str
    status: str
    message: str
    redirect_url: str | None = None


class PaymentGateway(Protocol):
    def process_payment(self, request: PaymentRequest) -> PaymentResult: ...

    def verify_webhook(self, payload: bytes, signature: str) -> bool: ...

    def get_payment_status(self, transaction_id: str) -> PaymentResult: ...


class MockPaymentGateway:
    """Simulates credit_card, promptpay and cash-on-delivery payments."""

    def process_payment(self, request: PaymentRequest) -> PaymentResult:
        if request.amount <= 0:
            raise PaymentError("payment amount must be positive")
        if not request.method:
            raise PaymentError("payment method is required")

        if request.method == "credit_card":
            result = PaymentResult(
                transaction_id=str(uuid.uuid4()),
                status=PAYMENT_SUCCESS,
                message="Credit card payment processed successfully",
            )
        elif request.method == "promptpay":
            # Needs a QR scan before it settles
            result = PaymentResult(
                transaction_id=str(uuid.uuid4()),
                status=PAYMENT_PENDING,
                message="Waiting for PromptPay confirmation",
                redirect_url=f"/payment/promptpay/{request.order_id}",
            )
        elif request.method == "cod":
            result = PaymentResult(
                transaction_id=str(uuid.uuid4()),
                status=PAYMENT_SUCCESS,
                message="Cash on Delivery - payment will be collected upon delivery",
            )
        else:
            raise PaymentError(f"unsupported payment method: {request.method}")

        logger.info(
            f"Payment {result.status} for order {request.order_id}: "
            f"{request.amount} {request.currency} via {request.method}"
        )
        return result

    def verify_webhook(self, payload: bytes, signature: str) -> bool:
        return True

    def get_payment_status(self, transaction_id: str) -> PaymentResult:
        return PaymentResult(
            transaction_id=transaction_id,
            status=PAYMENT_SUCCESS,
            message="Payment confirmed",
        )
