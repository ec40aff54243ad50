import pytest
from fastapi.testclient import TestClient

from admin_console.devserver.main import OrderStore, create_app
from admin_console.models import Order


@pytest.fixture
def api():
    return TestClient(create_app(OrderStore()))


def place(api, name="Ana"):
    resp = api.post(
        "/api/pedidos",
        json={
            "cliente": {"nome": name, "endereco": "Rua das Flores, 10"},
            "itens": [{"nome": "Pizza", "quantidade": 2}, {"nome": "Suco", "quantidade": 1}],
            "total": 59.9,
        },
    )
    assert resp.status_code == 201
    return resp.json()


def test_health(api):
    assert api.get("/").json() == {"message": "Order service is running"}


def test_register_then_login(api):
    resp = api.post("/api/usuarios/registrar", json={"nome": "admin", "senha": "pw"})
    assert resp.status_code == 201
    assert "message" in resp.json()

    dup = api.post("/api/usuarios/registrar", json={"nome": "admin", "senha": "other"})
    assert dup.status_code == 400

    bad = api.post("/api/usuarios/login", json={"nome": "admin", "senha": "nope"})
    assert bad.status_code == 401
    assert bad.json()["message"] == "Invalid credentials"

    good = api.post("/api/usuarios/login", json={"nome": "admin", "senha": "pw"})
    assert good.status_code == 200


def test_login_unknown_user(api):
    resp = api.post("/api/usuarios/login", json={"nome": "ghost", "senha": "pw"})
    assert resp.status_code == 401


def test_placed_orders_match_console_model(api):
    place(api, "Ana")
    place(api, "Bruno")

    snapshot = api.get("/api/pedidos").json()
    orders = [Order.model_validate(o) for o in snapshot]
    assert [o.id for o in orders] == [1, 2]
    assert orders[0].status == "Recebido"
    assert [i.id for i in orders[0].items] == [1, 2]
    assert orders[1].customer.name == "Bruno"


def test_update_and_delete(api):
    order = place(api)

    resp = api.put(f"/api/pedidos/{order['id']}", json={"status": "Entregue"})
    assert resp.status_code == 200
    assert api.get("/api/pedidos").json()[0]["status"] == "Entregue"

    assert api.delete(f"/api/pedidos/{order['id']}").status_code == 200
    assert api.get("/api/pedidos").json() == []


def test_unknown_order_is_404(api):
    assert api.put("/api/pedidos/99", json={"status": "Entregue"}).status_code == 404
    assert api.delete("/api/pedidos/99").status_code == 404
