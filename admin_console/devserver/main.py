# In file: admin_console/devserver/main.py
#
# In-memory stand-in for the order-management service. It speaks the same
# contract the console consumes, so the console can be run locally.

import hashlib
import hmac
import itertools
import logging
import secrets
import threading
from typing import Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..config import Settings
from ..models import Customer, Order, OrderStatus, StatusUpdate

logger = logging.getLogger(__name__)


# --- Request Models ---
class UserRequest(BaseModel):
    """Login or registration body."""
    nome: str = Field(min_length=1)
    senha: str = Field(min_length=1)


class NewItem(BaseModel):
    """An item on a newly placed order."""
    nome: str
    quantidade: int = Field(ge=1)


class NewOrder(BaseModel):
    """Body used by the ordering system to place an order."""
    cliente: Customer
    itens: List[NewItem]
    total: float = Field(ge=0)


# --- Storage ---
class OrderStore:
    """Users and orders kept in process memory."""

    def __init__(self):
        self.lock = threading.Lock()
        self.orders: Dict[int, Order] = {}
        self.users: Dict[str, tuple] = {}  # name -> (salt, digest)
        self._ids = itertools.count(1)

    def add_user(self, name: str, password: str) -> bool:
        with self.lock:
            if name in self.users:
                return False
            salt = secrets.token_bytes(16)
            self.users[name] = (salt, _digest(password, salt))
            return True

    def check_user(self, name: str, password: str) -> bool:
        entry = self.users.get(name)
        if entry is None:
            return False
        salt, digest = entry
        return hmac.compare_digest(digest, _digest(password, salt))

    def place(self, req: NewOrder) -> Order:
        with self.lock:
            order_id = next(self._ids)
            order = Order(
                id=order_id,
                customer=req.cliente,
                items=[
                    {"id": n, "nome": item.nome, "quantidade": item.quantidade}
                    for n, item in enumerate(req.itens, start=1)
                ],
                total=req.total,
                status=OrderStatus.RECEIVED,
            )
            self.orders[order_id] = order
            return order

    def set_status(self, order_id: int, status: str) -> Optional[Order]:
        with self.lock:
            order = self.orders.get(order_id)
            if order is None:
                return None
            updated = order.model_copy(update={"status": status})
            self.orders[order_id] = updated
            return updated

    def remove(self, order_id: int) -> bool:
        with self.lock:
            return self.orders.pop(order_id, None) is not None


def _digest(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, 100_000)


def _wire(order: Order) -> dict:
    return order.model_dump(by_alias=True)


# --- App Instance ---
def create_app(store: Optional[OrderStore] = None) -> FastAPI:
    store = store or OrderStore()
    app = FastAPI(title="Order service (development)")
    app.state.store = store

    @app.get("/")
    def root():
        """Health check endpoint."""
        return {"message": "Order service is running"}

    # --- Accounts ---
    @app.post("/api/usuarios/registrar", status_code=201)
    def register(req: UserRequest):
        if not store.add_user(req.nome, req.senha):
            return JSONResponse(status_code=400, content={"message": "Username already exists"})
        logger.info("Registered user %s", req.nome)
        return {"message": "User registered successfully!"}

    @app.post("/api/usuarios/login")
    def login(req: UserRequest):
        if not store.check_user(req.nome, req.senha):
            return JSONResponse(status_code=401, content={"message": "Invalid credentials"})
        return {"message": "Login successful!"}

    # --- Orders ---
    @app.get("/api/pedidos")
    def list_orders():
        """Full snapshot, oldest order first."""
        with store.lock:
            orders = list(store.orders.values())
        return [_wire(o) for o in orders]

    @app.post("/api/pedidos", status_code=201)
    def place_order(req: NewOrder):
        order = store.place(req)
        logger.info("Order %s placed", order.id)
        return _wire(order)

    @app.put("/api/pedidos/{order_id}")
    def update_order(order_id: int, req: StatusUpdate):
        order = store.set_status(order_id, req.status)
        if order is None:
            raise HTTPException(status_code=404, detail="Order not found")
        return _wire(order)

    @app.delete("/api/pedidos/{order_id}")
    def delete_order(order_id: int):
        if not store.remove(order_id):
            raise HTTPException(status_code=404, detail="Order not found")
        return {"message": "Order removed"}

    return app


app = create_app()


def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)
    uvicorn.run(app, host=settings.devserver_host, port=settings.devserver_port)


if __name__ == "__main__":
    main()
