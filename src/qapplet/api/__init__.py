"""
Host API package - signal endpoint schemas and HTTP client
"""

from .schemas import SignalRequest, SignalResponse, ZoneAction, PRODUCT_ID
from .signal_client import SignalClient, SignalResult, DEFAULT_BACKEND_URL

__all__ = [
    "SignalRequest",
    "SignalResponse",
    "ZoneAction",
    "PRODUCT_ID",
    "SignalClient",
    "SignalResult",
    "DEFAULT_BACKEND_URL",
]
