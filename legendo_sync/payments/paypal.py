"""
PayPal Payment Service

Handles PayPal REST payment operations:
- Payment creation with approval redirect
- Payment execution after payer approval
- Payment detail lookup

The SDK is blocking, so every call runs in the default executor.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import paypalrestsdk
from paypalrestsdk.exceptions import ConnectionError as PayPalConnectionError
from paypalrestsdk.exceptions import MissingConfig, ResourceNotFound
from requests.exceptions import RequestException

from .exceptions import PaymentError, PaymentNotFoundError

logger = logging.getLogger(__name__)


DEFAULT_CURRENCY = "USD"
DEFAULT_DESCRIPTION = "LEGENDO SYNC Payment"
DEFAULT_RETURN_URL = "http://localhost:3000/success"
DEFAULT_CANCEL_URL = "http://localhost:3000/cancel"


@dataclass
class PaymentRequest:
    """A request to create a PayPal payment."""

    amount: float
    currency: str = DEFAULT_CURRENCY
    description: str = DEFAULT_DESCRIPTION
    item_name: str = "LEGENDO SYNC Service"
    sku: str = "LS001"
    quantity: int = 1

    def to_payment_json(self, return_url: str, cancel_url: str) -> Dict[str, Any]:
        """Build the PayPal v1 payment body."""
        total = f"{self.amount:.2f}"
        return {
            "intent": "sale",
            "payer": {"payment_method": "paypal"},
            "redirect_urls": {
                "return_url": return_url,
                "cancel_url": cancel_url,
            },
            "transactions": [
                {
                    "item_list": {
                        "items": [
                            {
                                "name": self.item_name,
                                "sku": self.sku,
                                "price": total,
                                "currency": self.currency,
                                "quantity": self.quantity,
                            }
                        ]
                    },
                    "amount": {
                        "currency": self.currency,
                        "total": total,
                    },
                    "description": self.description,
                }
            ],
        }


def approval_url(payment: Dict[str, Any]) -> Optional[str]:
    """Extract the approval redirect from a created payment."""
    for link in payment.get("links") or []:
        if link.get("rel") == "approval_url":
            return link.get("href")
    return None


class PayPalService:
    """
    Service for PayPal payment operations.

    Each service owns its own SDK ``Api`` handle instead of the SDK's
    module-level configuration.
    """

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        mode: str = "sandbox",
        return_url: str = DEFAULT_RETURN_URL,
        cancel_url: str = DEFAULT_CANCEL_URL,
    ):
        if mode not in ("sandbox", "live"):
            raise ValueError(f"PayPal mode must be 'sandbox' or 'live', got {mode!r}")

        self.mode = mode
        self.return_url = return_url
        self.cancel_url = cancel_url
        self._api = paypalrestsdk.Api({
            "mode": mode,
            "client_id": client_id,
            "client_secret": client_secret,
        })

    @classmethod
    def from_config(cls, config) -> "PayPalService":
        """Create a service from a PayPalConfig."""
        return cls(
            client_id=config.client_id,
            client_secret=config.client_secret,
            mode=config.mode,
            return_url=config.return_url,
            cancel_url=config.cancel_url,
        )

    async def _run(
        self,
        fn: Callable[..., Any],
        *args: Any,
        payment_id: Optional[str] = None,
    ) -> Any:
        """
        Run a blocking SDK call in the executor.

        A 404 becomes PaymentNotFoundError only when ``payment_id`` names the
        payment being looked up. Any other SDK or transport failure becomes
        PaymentError.
        """
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, fn, *args)
        except ResourceNotFound as e:
            if payment_id is not None:
                logger.error(f"Failed to retrieve payment details: {payment_id}")
                raise PaymentNotFoundError(payment_id, original_error=e)
            raise PaymentError(f"PayPal request failed: {e}", original_error=e)
        except (PayPalConnectionError, MissingConfig, RequestException) as e:
            raise PaymentError(f"PayPal request failed: {e}", original_error=e)

    async def create_payment(self, request: PaymentRequest) -> Dict[str, Any]:
        """
        Create a PayPal payment.

        Args:
            request: Payment request

        Returns:
            Created payment as a dict (includes ``links`` with the approval URL)

        Raises:
            PaymentError: If PayPal rejects the payment
        """
        payment = paypalrestsdk.Payment(
            request.to_payment_json(self.return_url, self.cancel_url),
            api=self._api,
        )

        if not await self._run(payment.create):
            logger.error(f"PayPal payment creation failed: {payment.error}")
            raise PaymentError(
                "PayPal payment creation failed",
                details=_error_details(payment),
            )

        logger.info(f"PayPal payment created: {payment.id}")
        return payment.to_dict()

    async def execute_payment(self, payment_id: str, payer_id: str) -> Dict[str, Any]:
        """
        Execute an approved PayPal payment.

        Args:
            payment_id: Payment ID from PayPal
            payer_id: Payer ID from PayPal

        Returns:
            Executed payment as a dict

        Raises:
            PaymentNotFoundError: If the payment id is unknown
            PaymentError: If execution fails
        """
        payment = await self._find(payment_id)

        if not await self._run(payment.execute, {"payer_id": payer_id}):
            logger.error(f"PayPal payment execution failed: {payment.error}")
            raise PaymentError(
                "PayPal payment execution failed",
                details=_error_details(payment),
            )

        logger.info(f"PayPal payment executed successfully: {payment.id}")
        return payment.to_dict()

    async def get_payment_details(self, payment_id: str) -> Dict[str, Any]:
        """Get payment details."""
        payment = await self._find(payment_id)
        return payment.to_dict()

    async def _find(self, payment_id: str):
        return await self._run(self._find_sync, payment_id, payment_id=payment_id)

    def _find_sync(self, payment_id: str):
        return paypalrestsdk.Payment.find(payment_id, api=self._api)


def _error_details(payment) -> Dict[str, Any]:
    error = getattr(payment, "error", None)
    if isinstance(error, dict):
        return error
    return {"message": str(error)} if error else {}


def summarize_execution(payment: Dict[str, Any]) -> Dict[str, Any]:
    """Reduce an executed payment to the fields returned to clients."""
    transactions: List[Dict[str, Any]] = payment.get("transactions") or []
    return {
        "status": "success",
        "paymentId": payment.get("id"),
        "state": payment.get("state"),
        "payer": payment.get("payer"),
        "transactions": transactions,
    }
