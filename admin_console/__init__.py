"""Administrative console for the food-ordering workflow."""

from .controller import OrderSyncController, ConsoleState
from .errors import AuthError, ConsoleError, FetchError, UpdateError
from .models import Order, OrderStatus
from .session import SessionGate

__all__ = [
    "AuthError",
    "ConsoleError",
    "ConsoleState",
    "FetchError",
    "Order",
    "OrderStatus",
    "OrderSyncController",
    "SessionGate",
    "UpdateError",
]
