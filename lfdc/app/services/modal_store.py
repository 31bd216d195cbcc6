"""
Which auth modal (login / signup / logout prompt) is visible.
"""

from enum import Enum
from typing import Optional

from .store import Store


class Modal(str, Enum):
    LOGIN = "login"
    SIGNUP = "signup"
    LOGOUT = "logout"


class ModalStore(Store):
    """At most one modal is open at a time."""

    def __init__(self):
        super().__init__()
        self.current: Optional[Modal] = None

    @property
    def is_login_open(self) -> bool:
        return self.current is Modal.LOGIN

    @property
    def is_signup_open(self) -> bool:
        return self.current is Modal.SIGNUP

    @property
    def is_logout_open(self) -> bool:
        return self.current is Modal.LOGOUT

    def open_login(self) -> None:
        self.set(current=Modal.LOGIN)

    def open_signup(self) -> None:
        self.set(current=Modal.SIGNUP)

    def open_logout(self) -> None:
        self.set(current=Modal.LOGOUT)

    def close_modals(self) -> None:
        self.set(current=None)
