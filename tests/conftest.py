import pytest
import responses

from admin_console.client import OrderServiceClient
from admin_console.config import Settings
from admin_console.controller import OrderSyncController

from support import BASE, LOGIN_URL, ORDERS_URL, make_order


@pytest.fixture
def settings():
    return Settings(api_base=BASE, request_timeout=2)


@pytest.fixture
def client(settings):
    c = OrderServiceClient(settings)
    yield c
    c.close()


@pytest.fixture
def controller(client):
    return OrderSyncController(client=client)


@pytest.fixture
def logged_in(controller):
    """Controller after a successful login whose first snapshot is order 1."""
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, LOGIN_URL, json={"message": "Login successful!"}, status=200)
        rsps.add(responses.GET, ORDERS_URL, json=[make_order(1)], status=200)
        controller.login("admin", "secret")
    return controller
