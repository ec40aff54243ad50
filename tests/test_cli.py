import responses

from admin_console.cli import Console, main, render_orders, status_key

from support import LOGIN_URL, ORDERS_URL, make_order, order_url


class Keyboard:
    """Feeds scripted answers to the console prompts."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.prompts = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        return self.answers.pop(0)


def test_status_key():
    assert status_key("Pronto para entrega") == "pronto-para-entrega"
    assert status_key("Em  preparação") == "em-preparação"


def test_render_states(logged_in):
    assert "Pizza (x2)" in render_orders(logged_in)
    assert "Order #1" in render_orders(logged_in)

    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, ORDERS_URL, json=[], status=200)
        logged_in.fetch_orders()
    assert render_orders(logged_in) == "No orders received yet."

    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, ORDERS_URL, status=500)
        logged_in.fetch_orders()
    assert "Error:" in render_orders(logged_in)


def test_login_hides_password_by_default(controller):
    line, secret = Keyboard(), Keyboard("secret")
    console = Console(controller, read_line=line, read_secret=secret)

    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, LOGIN_URL, json={"message": "Welcome"}, status=200)
        rsps.add(responses.GET, ORDERS_URL, json=[make_order(1)], status=200)
        res = console.handle("login admin")

    assert res["ok"]
    assert "Welcome" in res["data"]
    assert secret.prompts == ["Password: "]
    assert line.prompts == []


def test_show_password_reads_visible_input(controller):
    line, secret = Keyboard("admin", "secret"), Keyboard()
    console = Console(controller, show_password=True, read_line=line, read_secret=secret)

    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, LOGIN_URL, json={"message": "Invalid credentials"}, status=401)
        res = console.handle("login")

    assert not res["ok"]
    assert res["error"] == "Invalid credentials"
    assert line.prompts == ["Username: ", "Password: "]
    assert secret.prompts == []


def test_order_commands_need_login(controller):
    console = Console(controller, read_line=Keyboard(), read_secret=Keyboard())
    res = console.handle("delivered 1")
    assert not res["ok"]
    assert "log in first" in res["error"]


def test_status_command(logged_in):
    console = Console(logged_in, read_line=Keyboard(), read_secret=Keyboard())
    with responses.RequestsMock() as rsps:
        rsps.add(responses.PUT, order_url(1), json={}, status=200)
        rsps.add(responses.GET, ORDERS_URL, json=[make_order(1, status="Pronto para entrega")], status=200)
        res = console.handle("ready #1")

    assert res["ok"]
    assert logged_in.orders[1].status == "Pronto para entrega"


def test_complete_declined_sends_nothing(logged_in):
    line = Keyboard("n")
    console = Console(logged_in, read_line=line, read_secret=Keyboard())
    with responses.RequestsMock() as rsps:
        res = console.handle("complete 1")
        assert len(rsps.calls) == 0

    assert not res["ok"]
    assert line.prompts[0].endswith("[y/N] ")
    assert 1 in logged_in.orders


def test_complete_confirmed(logged_in):
    console = Console(logged_in, read_line=Keyboard("y"), read_secret=Keyboard())
    with responses.RequestsMock() as rsps:
        rsps.add(responses.DELETE, order_url(1), json={}, status=200)
        rsps.add(responses.GET, ORDERS_URL, json=[], status=200)
        res = console.handle("complete 1")

    assert res["ok"]
    assert "No orders received yet." in res["data"]


def test_usage_and_unknown(logged_in):
    console = Console(logged_in, read_line=Keyboard(), read_secret=Keyboard())
    assert console.handle("prep")["error"] == "usage: prep <id>"
    assert not console.handle("dance")["ok"]
    assert console.handle("exit")["exit"] is True


def test_main_exits_on_eof(monkeypatch):
    def eof(prompt=""):
        raise EOFError

    monkeypatch.setattr("builtins.input", eof)
    monkeypatch.setenv("ORDER_API_BASE", "http://orders.test")
    assert main([]) == 0
