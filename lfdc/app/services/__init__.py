"""
Client services: API access and client-side state.
"""

from .api_client import ApiClient, ApiError, ApiUnavailable
from .storefront import StorefrontApi, LEADERBOARDS
from .auth_store import AuthStore
from .modal_store import Modal, ModalStore
from .sessions import BusyError, BusyFlags, Session, SessionRegistry

__all__ = [
    "ApiClient", "ApiError", "ApiUnavailable",
    "StorefrontApi", "LEADERBOARDS",
    "AuthStore", "Modal", "ModalStore",
    "BusyError", "BusyFlags", "Session", "SessionRegistry",
]
