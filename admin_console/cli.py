#!/usr/bin/env python3
"""
Terminal front end for the order admin console.

Run:
  admin-console [--show-password]

Optional env:
  ORDER_API_BASE=http://localhost:3001
  REQUEST_TIMEOUT=8
  LOG_LEVEL=WARNING
"""
from __future__ import annotations

import argparse
import getpass
import logging
import re
import sys
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

from .config import Settings
from .controller import OrderSyncController
from .errors import Result
from .models import Order, OrderStatus

# =========================
# Simple CLI UI (ANSI)
# =========================


class Style:
    RESET = "\033[0m"
    BOLD = "\033[1m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"


# Colour per status key (see status_key).
STATUS_COLORS = {
    "recebido": Style.CYAN,
    "em-preparação": Style.YELLOW,
    "pronto-para-entrega": Style.BLUE,
    "entregue": Style.GREEN,
}

# Command word -> status it sets.
STATUS_COMMANDS = {
    "prep": OrderStatus.IN_PREPARATION,
    "ready": OrderStatus.READY_FOR_DELIVERY,
    "delivered": OrderStatus.DELIVERED,
}


def status_key(status: str) -> str:
    """'Pronto para entrega' -> 'pronto-para-entrega'."""
    return re.sub(r"\s+", "-", status).lower()


def render_order(order: Order) -> str:
    color = STATUS_COLORS.get(status_key(order.status), "")
    lines = [
        f"{Style.BOLD}Order #{order.id}{Style.RESET}",
        f"  Customer: {order.customer.name}",
        f"  Address:  {order.customer.address}",
        f"  Total:    R$ {order.total:.2f}",
        f"  Status:   {color}{order.status}{Style.RESET}",
        "  Items:",
    ]
    lines.extend(f"    - {item.name} (x{item.quantity})" for item in order.items)
    return "\n".join(lines)


def render_orders(controller: OrderSyncController) -> str:
    state = controller.state
    if state.loading and not state.orders:
        return "Loading orders..."
    if state.error:
        header = f"{Style.RED}Error: {state.error}{Style.RESET}"
        if not state.orders:
            return header
        return header + "\n\n" + "\n\n".join(render_order(o) for o in state.orders.values())
    if not state.orders:
        return "No orders received yet."
    return "\n\n".join(render_order(o) for o in state.orders.values())


def help_text(authenticated: bool) -> str:
    if not authenticated:
        return (
            "Commands:\n"
            "  login [name]      - log in as administrator\n"
            "  register [name]   - create an account\n"
            "  help|h|?          - help\n"
            "  exit|quit         - quit\n"
        )
    return (
        "Commands:\n"
        "  list | ls           - show orders\n"
        "  refresh | r         - reload orders from the server\n"
        "  prep <id>           - mark order as in preparation\n"
        "  ready <id>          - mark order as ready for delivery\n"
        "  delivered <id>      - mark order as delivered\n"
        "  complete <id>       - complete and remove an order\n"
        "  logout              - log out\n"
        "  help|h|?            - help\n"
        "  exit|quit           - quit\n"
    )


# =========================
# Console
# =========================


class Console:
    """Maps typed commands onto the controller.

    ``handle`` never prints; it returns a dict the caller renders.
    """

    def __init__(
        self,
        controller: OrderSyncController,
        show_password: bool = False,
        read_line: Optional[Callable[[str], str]] = None,
        read_secret: Optional[Callable[[str], str]] = None,
    ):
        self.controller = controller
        # Password visibility is a display choice only.
        self.show_password = show_password
        self.read_line = read_line or input
        self.read_secret = read_secret or getpass.getpass

    def _ask_password(self) -> str:
        if self.show_password:
            return self.read_line("Password: ")
        return self.read_secret("Password: ")

    def _confirm(self, prompt: str) -> bool:
        answer = self.read_line(f"{prompt} [y/N] ")
        return answer.strip().lower() in {"y", "yes"}

    def handle(self, line: str) -> Dict[str, Any]:
        parts = (line or "").strip().split()
        if not parts:
            return {"ok": False, "error": "empty command"}
        cmd, args = parts[0].lower(), parts[1:]

        if cmd in ("help", "h", "?"):
            return {"ok": True, "data": help_text(self.controller.authenticated)}
        if cmd in ("exit", "quit"):
            return {"ok": True, "exit": True}

        if not self.controller.authenticated:
            if cmd in ("login", "register"):
                return self._account(cmd, args)
            return {"ok": False, "error": f"unknown command: {cmd} (log in first)"}

        if cmd in ("list", "ls"):
            return {"ok": True, "data": render_orders(self.controller)}
        if cmd in ("refresh", "r"):
            return self._from_result(self.controller.fetch_orders(), render=True)
        if cmd in STATUS_COMMANDS:
            order_id = self._order_id(args)
            if order_id is None:
                return {"ok": False, "error": f"usage: {cmd} <id>"}
            return self._from_result(self.controller.set_status(order_id, STATUS_COMMANDS[cmd]), render=True)
        if cmd == "complete":
            order_id = self._order_id(args)
            if order_id is None:
                return {"ok": False, "error": "usage: complete <id>"}
            return self._from_result(self.controller.complete_order(order_id, confirm=self._confirm), render=True)
        if cmd == "logout":
            self.controller.logout()
            return {"ok": True, "data": "Logged out."}
        return {"ok": False, "error": f"unknown command: {cmd}"}

    def _account(self, cmd: str, args: List[str]) -> Dict[str, Any]:
        username = args[0] if args else self.read_line("Username: ").strip()
        password = self._ask_password()
        if cmd == "login":
            result = self.controller.login(username, password)
            return self._from_result(result, render=result.ok)
        result = self.controller.register(username, password)
        if result.ok:
            return {"ok": True, "data": f"{result.message}\nYou can now log in."}
        return self._from_result(result)

    def _order_id(self, args: List[str]) -> Optional[Any]:
        """Match the typed id against the ids in the current collection."""
        if len(args) != 1:
            return None
        raw = args[0].lstrip("#")
        for order_id in self.controller.orders:
            if str(order_id) == raw:
                return order_id
        return int(raw) if raw.isdigit() else raw

    def _from_result(self, result: Result, render: bool = False) -> Dict[str, Any]:
        out: Dict[str, Any] = {"ok": result.ok}
        if result.ok:
            data = result.message or ""
            if render:
                data = (data + "\n\n" if data else "") + render_orders(self.controller)
            out["data"] = data
        else:
            out["error"] = result.message or "failed"
        return out


def print_result(res: Dict[str, Any]) -> None:
    if res.get("ok") is False:
        print(f"{Style.RED}✘ {res.get('error')}{Style.RESET}")
    elif res.get("data"):
        print(res["data"])


def repl(console: Console) -> None:
    print(f"{Style.CYAN}Order admin console{Style.RESET}. Type 'help' to see commands.")
    while True:
        prompt = "admin> " if console.controller.authenticated else "> "
        try:
            line = console.read_line(prompt).strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break
        res = console.handle(line)
        if res.get("exit"):
            break
        print_result(res)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="admin-console", description="Order administration console")
    parser.add_argument("--show-password", action="store_true", help="echo the password while typing")
    parser.add_argument("--api-base", help="order service base URL (overrides ORDER_API_BASE)")
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    if args.api_base:
        settings = replace(settings, api_base=args.api_base.rstrip("/"))
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    controller = OrderSyncController(settings=settings)
    try:
        repl(Console(controller, show_password=args.show_password))
    finally:
        controller.cancel_all()
        controller.client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
