"""Shared URLs and payload builders for the test suite."""

BASE = "http://orders.test"
ORDERS_URL = BASE + "/api/pedidos"
LOGIN_URL = BASE + "/api/usuarios/login"
REGISTER_URL = BASE + "/api/usuarios/registrar"


def order_url(order_id):
    return f"{ORDERS_URL}/{order_id}"


def make_order(order_id, status="Recebido", name="Ana", total=42.5):
    return {
        "id": order_id,
        "cliente": {"nome": name, "endereco": "Rua das Flores, 10"},
        "itens": [{"id": 1, "nome": "Pizza", "quantidade": 2}],
        "total": total,
        "status": status,
    }
