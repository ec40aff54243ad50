"""HTTP client for the order-management service.

Wraps the five endpoints the console consumes. Every transport or HTTP
failure is re-raised as one of the console's error types; callers never see
``requests`` exceptions.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Union

import requests
from pydantic import TypeAdapter, ValidationError

from .config import Settings
from .errors import AuthError, FetchError, UpdateError
from .models import Credentials, Order, StatusUpdate

logger = logging.getLogger(__name__)

# Service paths.
ORDERS_PATH = "/api/pedidos"
ORDER_PATH = "/api/pedidos/{order_id}"
LOGIN_PATH = "/api/usuarios/login"
REGISTER_PATH = "/api/usuarios/registrar"

CONNECTION_ERROR_MESSAGE = "Could not connect to the server."

_snapshot_adapter = TypeAdapter(List[Order])


def _message_from(resp: requests.Response, default: str) -> str:
    """Pull the ``message`` field out of a JSON body, if there is one."""
    try:
        data = resp.json()
    except ValueError:
        return default
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return default


class OrderServiceClient:
    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or Settings.from_env()
        self.base_url = self.settings.api_base.rstrip("/")
        self.http = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        kwargs.setdefault("timeout", self.settings.request_timeout)
        url = self.base_url + path
        logger.debug("%s %s", method, url)
        return self.http.request(method, url, **kwargs)

    # --- Orders ---

    def fetch_orders(self) -> List[Order]:
        """Return the full order snapshot, in the order the service sent it."""
        try:
            resp = self._request("GET", ORDERS_PATH)
            resp.raise_for_status()  # 4xx/5xx become HTTPError
            data = resp.json()
        except requests.exceptions.HTTPError as e:
            raise FetchError("Error fetching orders", status_code=e.response.status_code) from e
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Error fetching orders: {e}") from e
        except ValueError as e:
            raise FetchError("Order snapshot is not valid JSON") from e

        if not isinstance(data, list):
            raise FetchError("Order snapshot is not a list")
        try:
            orders = _snapshot_adapter.validate_python(data)
        except ValidationError as e:
            raise FetchError(f"Order snapshot is malformed: {e.error_count()} invalid field(s)") from e

        seen = set()
        for order in orders:
            if order.id in seen:
                raise FetchError(f"Order snapshot repeats id {order.id}")
            seen.add(order.id)
        return orders

    def update_status(self, order_id: Union[int, str], status: str) -> None:
        body = StatusUpdate(status=status).model_dump()
        self._write("PUT", order_id, "Error updating status", json=body)

    def delete_order(self, order_id: Union[int, str]) -> None:
        self._write("DELETE", order_id, "Error removing order")

    def _write(self, method: str, order_id: Union[int, str], failure: str, **kwargs) -> None:
        try:
            resp = self._request(method, ORDER_PATH.format(order_id=order_id), **kwargs)
            resp.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise UpdateError(failure, status_code=e.response.status_code) from e
        except requests.exceptions.RequestException as e:
            raise UpdateError(f"Connection error: {e}") from e

    # --- Accounts ---

    def login(self, credentials: Credentials) -> str:
        return self._account(LOGIN_PATH, credentials)

    def register(self, credentials: Credentials) -> str:
        return self._account(REGISTER_PATH, credentials)

    def _account(self, path: str, credentials: Credentials) -> str:
        """POST credentials and return the server's message."""
        try:
            resp = self._request("POST", path, json=credentials.to_wire())
        except requests.exceptions.RequestException as e:
            raise AuthError(CONNECTION_ERROR_MESSAGE) from e

        if not resp.ok:
            message = _message_from(resp, f"Request failed with HTTP {resp.status_code}")
            raise AuthError(message, status_code=resp.status_code)
        return _message_from(resp, "OK")

    def close(self) -> None:
        self.http.close()

