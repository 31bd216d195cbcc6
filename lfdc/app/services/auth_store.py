"""
Authenticated user and auth request lifecycle.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from ..models import ProfileUpdate, User
from .api_client import ApiError
from .store import Store
from .storefront import StorefrontApi

logger = logging.getLogger(__name__)


class AuthStore(Store):
    """
    Holds the current user for one chat.

    ``auth_user`` is set from whatever the backend returns for
    check/signup/login/update and cleared on logout. Every operation raises
    its busy flag for the duration of the request and lowers it in all
    outcomes. Failures are logged and leave ``auth_user`` as it was, except
    ``check_auth`` which treats any failure as "not logged in".
    """

    def __init__(self, api: StorefrontApi):
        super().__init__()
        self.api = api
        self.auth_user: Optional[User] = None
        self.is_checking_auth: bool = True
        self.is_signing_up: bool = False
        self.is_logging_in: bool = False
        self.is_updating_profile: bool = False
        self.is_logging_out: bool = False
        self.last_error: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.auth_user is not None

    async def check_auth(self) -> Optional[User]:
        try:
            user = await self.api.check_auth()
            self.set(auth_user=user)
        except ApiError as e:
            logger.info("Auth check failed: %s", e.message)
            self.set(auth_user=None)
        except ValidationError as e:
            logger.warning("Unexpected auth/check response: %s", e)
            self.set(auth_user=None)
        finally:
            self.set(is_checking_auth=False)
        return self.auth_user

    async def signup(self, username: str, password: str) -> bool:
        self.set(is_signing_up=True, last_error=None)
        try:
            user = await self.api.signup(username, password)
            self.set(auth_user=user)
            return True
        except ApiError as e:
            logger.error("Error in signup: %s", e.message)
            self.set(last_error=e.message)
            return False
        finally:
            self.set(is_signing_up=False)

    async def login(self, username: str, password: str) -> bool:
        self.set(is_logging_in=True, last_error=None)
        try:
            user = await self.api.login(username, password)
            self.set(auth_user=user)
            return True
        except ApiError as e:
            logger.error("Error in login: %s", e.message)
            self.set(last_error=e.message)
            return False
        finally:
            self.set(is_logging_in=False)

    async def logout(self) -> bool:
        self.set(is_logging_out=True, last_error=None)
        try:
            await self.api.logout()
            self.set(auth_user=None)
            return True
        except ApiError as e:
            logger.error("Error in logout: %s", e.message)
            self.set(last_error=e.message)
            return False
        finally:
            self.set(is_logging_out=False)

    async def update_profile(self, **fields) -> bool:
        update = ProfileUpdate(**fields)
        self.set(is_updating_profile=True, last_error=None)
        try:
            user = await self.api.update_profile(update)
            self.set(auth_user=user)
            return True
        except ApiError as e:
            logger.error("Error in update_profile: %s", e.message)
            self.set(last_error=e.message)
            return False
        finally:
            self.set(is_updating_profile=False)
