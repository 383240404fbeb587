"""
LEGENDO SYNC - asset sync and PayPal payment service

This package provides:
- An encrypted, expiring in-memory vault for sync and payment records
- Asset sync jobs backed by the vault
- PayPal REST payment creation and execution
- A FastAPI HTTP interface
"""

__version__ = "1.0.0"
__author__ = "LEGENDO SYNC Contributors"
