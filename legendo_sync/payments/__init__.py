"""
LEGENDO SYNC Payments

PayPal REST integration used by the payment routes.
"""

from .exceptions import PaymentError, PaymentNotFoundError
from .paypal import (
    PaymentRequest,
    PayPalService,
    approval_url,
    summarize_execution,
)

__all__ = [
    "PaymentError",
    "PaymentNotFoundError",
    "PaymentRequest",
    "PayPalService",
    "approval_url",
    "summarize_execution",
]
