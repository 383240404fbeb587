"""
Payment API Routes

Provides endpoints for creating and executing PayPal payments, plus the
redirect targets PayPal sends the payer back to.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException

from legendo_sync.payments import (
    PaymentRequest,
    PayPalService,
    approval_url,
    summarize_execution,
)
from legendo_sync.vault import SyncVault

from ..dependencies import get_payment_service, get_vault, validate_request
from ..models import (
    BAD_REQUEST_RESPONSE,
    GATEWAY_ERROR_RESPONSE,
    NOT_FOUND_RESPONSE,
    UNAUTHORIZED_RESPONSE,
    CreatePaymentRequest,
    ExecutePaymentRequest,
    bad_request,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/payment/create",
    dependencies=[Depends(validate_request)],
    responses={**BAD_REQUEST_RESPONSE, **UNAUTHORIZED_RESPONSE, **GATEWAY_ERROR_RESPONSE},
)
async def create_payment(
    body: CreatePaymentRequest,
    service: PayPalService = Depends(get_payment_service),
    vault: SyncVault = Depends(get_vault),
) -> Dict[str, Any]:
    """
    Create a PayPal payment.

    The payment summary is kept in the vault; ``recordId`` addresses it.

    Example:
        POST /payment/create {"amount": 10.00, "currency": "USD"}
    """
    if not body.amount or body.amount <= 0:
        raise HTTPException(status_code=400, detail=bad_request("Valid amount is required"))

    payment = await service.create_payment(
        PaymentRequest(
            amount=body.amount,
            currency=body.currency,
            description=body.description,
        )
    )

    result = {
        "paymentId": payment.get("id"),
        "approvalUrl": approval_url(payment),
        "status": payment.get("state"),
        "amount": body.amount,
        "currency": body.currency,
    }
    result["recordId"] = vault.store({**result, "kind": "payment"})
    return result


@router.post(
    "/payment/execute",
    dependencies=[Depends(validate_request)],
    responses={
        **BAD_REQUEST_RESPONSE,
        **UNAUTHORIZED_RESPONSE,
        **NOT_FOUND_RESPONSE,
        **GATEWAY_ERROR_RESPONSE,
    },
)
async def execute_payment(
    body: ExecutePaymentRequest,
    service: PayPalService = Depends(get_payment_service),
) -> Dict[str, Any]:
    """
    Execute an approved PayPal payment.

    Example:
        POST /payment/execute {"paymentId": "PAYID-XXXXXX", "payerId": "PAYERID123"}
    """
    if not body.paymentId or not body.payerId:
        raise HTTPException(
            status_code=400,
            detail=bad_request("paymentId and payerId are required"),
        )

    payment = await service.execute_payment(body.paymentId, body.payerId)
    return summarize_execution(payment)


@router.get("/success")
async def payment_success(
    paymentId: Optional[str] = None,
    PayerID: Optional[str] = None,
) -> Dict[str, Any]:
    """Payment success callback."""
    return {
        "message": "Payment successful",
        "paymentId": paymentId,
        "payerId": PayerID,
        "instructions": "Use POST /payment/execute to complete the payment",
    }


@router.get("/cancel")
async def payment_cancel() -> Dict[str, Any]:
    """Payment cancel callback."""
    return {
        "message": "Payment cancelled",
        "timestamp": datetime.utcnow().isoformat() + "Z",
    }


@router.get(
    "/payment/{payment_id}",
    dependencies=[Depends(validate_request)],
    responses={**UNAUTHORIZED_RESPONSE, **NOT_FOUND_RESPONSE, **GATEWAY_ERROR_RESPONSE},
)
async def get_payment(
    payment_id: str,
    service: PayPalService = Depends(get_payment_service),
) -> Dict[str, Any]:
    """Get payment details."""
    return await service.get_payment_details(payment_id)
