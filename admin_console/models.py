from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# Status vocabulary used by the order-management service.
class OrderStatus:
    RECEIVED = "Recebido"
    IN_PREPARATION = "Em preparação"
    READY_FOR_DELIVERY = "Pronto para entrega"
    DELIVERED = "Entregue"


# The three targets an operator can move an order to. Any target is
# reachable from any current status.
TRANSITION_TARGETS = (
    OrderStatus.IN_PREPARATION,
    OrderStatus.READY_FOR_DELIVERY,
    OrderStatus.DELIVERED,
)


def allowed_transitions(current_status: Optional[str]) -> tuple:
    """Return the targets an order in ``current_status`` may move to."""
    return TRANSITION_TARGETS


# --- Wire models ---
# Field names on the wire are Portuguese; populate_by_name lets tests and
# callers build models with the Python names as well.

class Customer(BaseModel):
    """The customer an order is delivered to."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(alias="nome")
    address: str = Field(alias="endereco")


class OrderItem(BaseModel):
    """One line of an order."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Union[int, str]
    name: str = Field(alias="nome")
    quantity: int = Field(alias="quantidade", ge=1)


class Order(BaseModel):
    """An order as returned in the service's snapshot."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Union[int, str]
    customer: Customer = Field(alias="cliente")
    items: List[OrderItem] = Field(alias="itens", default_factory=list)
    total: float = Field(ge=0)
    status: str


class Credentials(BaseModel):
    """Login/registration payload. Built per submission and never stored."""
    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(alias="nome", min_length=1)
    password: str = Field(alias="senha", min_length=1)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class StatusUpdate(BaseModel):
    """Body of a status change request."""
    status: str
