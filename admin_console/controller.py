"""Order sync controller.

Keeps the local order collection consistent with the order-management
service. Local state is never changed on a guess: every confirmed write is
followed by a full re-fetch, and every successful fetch replaces the whole
collection.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Callable, Dict, Mapping, Optional, Set, Union

from .client import OrderServiceClient
from .config import Settings
from .errors import FetchError, Result, UpdateError
from .models import Order, allowed_transitions
from .session import SessionGate

logger = logging.getLogger(__name__)

OrderId = Union[int, str]
Confirmation = Union[bool, Callable[[str], bool]]

COMPLETE_PROMPT = "Are you sure you want to complete and remove this order?"
NOT_LOGGED_IN = "Operator is not logged in"
CANCELLED = "Request cancelled"


def _empty_orders() -> Mapping[OrderId, Order]:
    return MappingProxyType({})


@dataclass(frozen=True)
class ConsoleState:
    """Everything the presentation layer may read.

    ``error`` is the persistent fetch-error indicator. ``notice`` is the last
    message meant for the operator (login result, failed update, ...).
    """
    orders: Mapping[OrderId, Order] = field(default_factory=_empty_orders)
    loading: bool = False
    error: Optional[str] = None
    authenticated: bool = False
    notice: Optional[str] = None


class RequestHandle:
    """Marks one in-flight request. A cancelled handle's result is dropped."""

    def __init__(self, kind: str, order_id: Optional[OrderId] = None):
        self.kind = kind
        self.order_id = order_id
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def __repr__(self) -> str:
        return f"<RequestHandle {self.kind} order={self.order_id} cancelled={self.cancelled}>"


class OrderSyncController:
    def __init__(
        self,
        client: Optional[OrderServiceClient] = None,
        gate: Optional[SessionGate] = None,
        settings: Optional[Settings] = None,
    ):
        self.client = client or OrderServiceClient(settings)
        self.gate = gate or SessionGate(self.client)

        self._state = ConsoleState()
        self._state_lock = threading.RLock()
        # Held while a request is admitted and while logging out, so no
        # request can start after logout has cancelled the in-flight ones.
        self._session_lock = threading.RLock()

        # Fetch bookkeeping, guarded by _state_lock.
        self._generation = 0          # last fetch issued
        self._applied_generation = 0  # last fetch whose outcome reached the state
        self._fetches_in_flight = 0

        self._handles: Set[RequestHandle] = set()
        self._handles_lock = threading.Lock()
        self._order_locks: Dict[OrderId, threading.Lock] = {}

    # --- Read side ---

    @property
    def state(self) -> ConsoleState:
        return replace(self._state, authenticated=self.gate.authenticated)

    @property
    def orders(self) -> Mapping[OrderId, Order]:
        return self._state.orders

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    @property
    def notice(self) -> Optional[str]:
        return self._state.notice

    @property
    def authenticated(self) -> bool:
        return self.gate.authenticated

    # --- Session ---

    def login(self, username: str, password: str) -> Result:
        """Log in and, on success, load the first snapshot."""
        result = self.gate.login(username, password)
        self._update(notice=result.message)
        if result.ok:
            self.fetch_orders()
        return result

    def register(self, username: str, password: str) -> Result:
        result = self.gate.register(username, password)
        self._update(notice=result.message)
        return result

    def logout(self) -> None:
        with self._session_lock:
            self.gate.logout()
            self.cancel_all()
            with self._state_lock:
                self._state = ConsoleState()
            with self._handles_lock:
                self._order_locks.clear()
        logger.info("Operator logged out")

    def cancel_all(self) -> int:
        """Cancel every in-flight request and return how many there were."""
        with self._handles_lock:
            handles = list(self._handles)
        for handle in handles:
            handle.cancel()
        if handles:
            logger.info("Cancelled %d in-flight request(s)", len(handles))
        return len(handles)

    # --- Orders ---

    def fetch_orders(self) -> Result:
        """Replace the collection with a fresh snapshot from the service."""
        with self._session_lock:
            if not self.gate.authenticated:
                return Result.failure(FetchError(NOT_LOGGED_IN))
            handle = self._open("fetch")
            with self._state_lock:
                self._generation += 1
                generation = self._generation
                self._fetches_in_flight += 1
                self._state = replace(self._state, loading=True)

        try:
            if not self._admitted(handle):
                return self._finish_fetch(handle, generation, error=FetchError(NOT_LOGGED_IN))
            orders = self.client.fetch_orders()
        except FetchError as e:
            logger.warning("Fetching orders failed: %s", e.message)
            return self._finish_fetch(handle, generation, error=e)
        finally:
            self._close(handle)
        return self._finish_fetch(handle, generation, orders=orders)

    def _finish_fetch(self, handle, generation, orders=None, error=None) -> Result:
        with self._state_lock:
            self._fetches_in_flight -= 1
            loading = self._fetches_in_flight > 0

            if handle.cancelled or not self.gate.authenticated:
                self._state = replace(self._state, loading=loading)
                return Result.skipped(CANCELLED)

            # A newer fetch already landed; this outcome is out of date.
            if generation < self._applied_generation:
                self._state = replace(self._state, loading=loading)
                if error is not None:
                    return Result.failure(error)
                return Result.success(self._state.orders, message="Superseded by a newer snapshot")

            self._applied_generation = generation
            if error is not None:
                # Keep the previous orders on screen.
                self._state = replace(self._state, loading=loading, error=error.message)
                return Result.failure(error)

            collection = MappingProxyType({order.id: order for order in orders})
            self._state = replace(self._state, orders=collection, loading=loading, error=None)
        logger.info("Order collection replaced with %d order(s)", len(collection))
        return Result.success(collection)

    def set_status(self, order_id: OrderId, new_status: str) -> Result:
        """Ask the service to move an order to ``new_status``, then re-sync."""
        if not self.gate.authenticated:
            return Result.failure(UpdateError(NOT_LOGGED_IN))
        current = self.orders.get(order_id)
        if new_status not in allowed_transitions(current.status if current else None):
            return self._reject(UpdateError(f"Unknown status: {new_status!r}"))

        return self._write(
            "status",
            order_id,
            lambda: self.client.update_status(order_id, new_status),
            f"Order {order_id} moved to {new_status}",
        )

    def complete_order(self, order_id: OrderId, confirm: Confirmation = False) -> Result:
        """Delete a finished order once the operator confirms it.

        ``confirm`` is either the operator's answer or a callable that is
        asked ``COMPLETE_PROMPT`` and returns it.
        """
        if not self.gate.authenticated:
            return Result.failure(UpdateError(NOT_LOGGED_IN))

        affirmed = confirm(COMPLETE_PROMPT) if callable(confirm) else confirm is True
        if not affirmed:
            return Result.skipped("Order completion was not confirmed")

        return self._write(
            "delete",
            order_id,
            lambda: self.client.delete_order(order_id),
            f"Order {order_id} completed",
        )

    def _write(self, kind: str, order_id: OrderId, call: Callable[[], None], done: str) -> Result:
        with self._session_lock:
            if not self.gate.authenticated:
                return Result.failure(UpdateError(NOT_LOGGED_IN))
            handle = self._open(kind, order_id)
        try:
            # One write per order at a time.
            with self._lock_for(order_id):
                if not self._admitted(handle):
                    return Result.skipped(CANCELLED)
                try:
                    call()
                except UpdateError as e:
                    logger.warning("%s on order %s failed: %s", kind, order_id, e.message)
                    if handle.cancelled:
                        return Result.skipped(CANCELLED)
                    return self._reject(e)
        finally:
            self._close(handle)

        if handle.cancelled:
            return Result.skipped(CANCELLED)

        if kind == "delete":
            self._forget(order_id)
        self._update(notice=done)
        # Re-derive local state from the service; never patch it locally.
        self.fetch_orders()
        return Result.success(message=done)

    def _reject(self, error: UpdateError) -> Result:
        self._update(notice=error.message)
        return Result.failure(error)

    # --- Helpers ---

    def _update(self, **changes) -> None:
        with self._state_lock:
            self._state = replace(self._state, **changes)

    def _lock_for(self, order_id: OrderId) -> threading.Lock:
        with self._handles_lock:
            return self._order_locks.setdefault(order_id, threading.Lock())

    def _forget(self, order_id: OrderId) -> None:
        """Drop the write lock of a deleted order unless someone is waiting on it."""
        with self._handles_lock:
            lock = self._order_locks.get(order_id)
            if lock is not None and not lock.locked():
                del self._order_locks[order_id]

    def _admitted(self, handle: RequestHandle) -> bool:
        """Last check before a request goes out."""
        return not handle.cancelled and self.gate.authenticated

    def _open(self, kind: str, order_id: Optional[OrderId] = None) -> RequestHandle:
        handle = RequestHandle(kind, order_id)
        with self._handles_lock:
            self._handles.add(handle)
        return handle

    def _close(self, handle: RequestHandle) -> None:
        with self._handles_lock:
            self._handles.discard(handle)

    def pending(self) -> int:
        """Number of requests currently in flight."""
        with self._handles_lock:
            return len(self._handles)
