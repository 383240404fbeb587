"""
Payment Exceptions
"""

from typing import Any, Dict, Optional


class PaymentError(Exception):
    """A payment gateway call failed."""

    def __init__(
        self,
        message: str,
        status_code: int = 502,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        self.status_code = status_code
        self.details = details or {}
        self.original_error = original_error
        super().__init__(message)


class PaymentNotFoundError(PaymentError):
    """The gateway does not know the payment id."""

    def __init__(self, payment_id: str, original_error: Optional[Exception] = None):
        self.payment_id = payment_id
        super().__init__(
            f"Payment not found: {payment_id}",
            status_code=404,
            original_error=original_error,
        )
