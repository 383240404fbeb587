"""
API Routes

FastAPI route handlers for the LEGENDO SYNC service.
"""

from . import payment, sync, system

__all__ = [
    "payment",
    "sync",
    "system",
]
