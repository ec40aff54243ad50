from __future__ import annotations

import logging
import threading

from pydantic import ValidationError

from .client import OrderServiceClient
from .errors import AuthError, Result
from .models import Credentials

logger = logging.getLogger(__name__)


class SessionGate:
    """Tracks whether the operator is logged in.

    Credentials only live for the duration of one login or registration
    call; nothing about them is kept on the gate.
    """

    def __init__(self, client: OrderServiceClient):
        self.client = client
        self._authenticated = False
        self._lock = threading.Lock()

    @property
    def authenticated(self) -> bool:
        return self._authenticated

    def login(self, username: str, password: str) -> Result:
        try:
            credentials = _credentials(username, password)
            message = self.client.login(credentials)
        except AuthError as e:
            logger.warning("Login failed: %s", e.message)
            return Result.failure(e)

        with self._lock:
            self._authenticated = True
        logger.info("Operator logged in")
        return Result.success(message=message)

    def register(self, username: str, password: str) -> Result:
        """Create an account. Does not log the operator in."""
        try:
            credentials = _credentials(username, password)
            message = self.client.register(credentials)
        except AuthError as e:
            logger.warning("Registration failed: %s", e.message)
            return Result.failure(e)
        return Result.success(message=message)

    def logout(self) -> None:
        with self._lock:
            self._authenticated = False


def _credentials(username: str, password: str) -> Credentials:
    try:
        return Credentials(username=username, password=password)
    except ValidationError as e:
        raise AuthError("Username and password are required") from e
