"""
Shared API Models

Request models and common error response definitions for OpenAPI.
"""

from typing import Optional

from pydantic import BaseModel, Field


# =============================================================================
# Common Error Response Definitions for OpenAPI
# =============================================================================

BAD_REQUEST_RESPONSE = {
    400: {
        "description": "Bad Request - Missing or invalid parameters",
        "content": {
            "application/json": {
                "example": {"error": "Bad Request", "message": "Input parameter is required"}
            }
        },
    }
}

UNAUTHORIZED_RESPONSE = {
    401: {
        "description": "Unauthorized - API key required",
        "content": {
            "application/json": {
                "example": {"error": "Unauthorized", "message": "API key required"}
            }
        },
    }
}

NOT_FOUND_RESPONSE = {
    404: {
        "description": "Not Found - Resource does not exist or has expired",
        "content": {
            "application/json": {
                "example": {"error": "Not Found", "message": "Resource not found"}
            }
        },
    }
}

GATEWAY_ERROR_RESPONSE = {
    502: {
        "description": "Bad Gateway - Payment provider call failed",
        "content": {
            "application/json": {
                "example": {
                    "error": "PayPal payment creation failed",
                    "timestamp": "2024-01-01T00:00:00Z",
                }
            }
        },
    }
}


# =============================================================================
# Request Models
# =============================================================================


class TriggerRequest(BaseModel):
    """Request to start an asset sync."""

    input: Optional[str] = Field(default=None, description="Input data for the sync operation")


class CreatePaymentRequest(BaseModel):
    """Request to create a PayPal payment."""

    amount: Optional[float] = None
    currency: str = "USD"
    description: str = "LEGENDO SYNC Payment"


class ExecutePaymentRequest(BaseModel):
    """Request to execute an approved PayPal payment."""

    paymentId: Optional[str] = None
    payerId: Optional[str] = None


def bad_request(message: str) -> dict:
    return {"error": "Bad Request", "message": message}


def not_found(message: str = "Resource not found") -> dict:
    return {"error": "Not Found", "message": message}
