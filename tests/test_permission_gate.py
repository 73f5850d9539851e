"""Tests for the permission plugin gating every transition."""

import logging

import pytest
from pydantic import ValidationError

from shoproute import LayoutDispatcher, MemoryConfigStore, Router


class DictAuthority:
    def __init__(self, allowed=()):
        self.allowed = set(allowed)
        self.calls = []

    def has_permission(self, route_name, principal_id):
        self.calls.append((route_name, principal_id))
        return route_name in self.allowed


class BrokenAuthority:
    def has_permission(self, route_name, principal_id):
        raise RuntimeError("roles service unavailable")


class RecordingRenderer:
    def __init__(self):
        self.calls = []

    def render(self, layout, structure=None):
        self.calls.append((layout, structure))


def make_router(authority, **config):
    router = Router(name="storefront").plug("permission", authority=authority, **config)
    router.route("/", name="index")
    router.group(name="shop", prefix="/acme").route("/orders/:_id?", name="orders")
    return router


def test_granted_transition_is_not_flagged():
    router = make_router(DictAuthority({"orders"}))
    router.initialize()
    context = router.go("/acme/orders")
    assert context.unauthorized is None


def test_denied_registered_path_is_flagged_and_navigation_continues():
    entered = []
    authority = DictAuthority()
    router = make_router(authority)
    router.route_named("orders").triggers_enter.append(entered.append)
    router.initialize()

    context = router.go("/acme/orders/42")
    assert context.unauthorized is True
    assert context.params == {"_id": "42"}
    assert entered == [context]
    assert router.current() is context


def test_denied_unregistered_path_is_not_flagged():
    router = make_router(DictAuthority())
    router.initialize()
    context = router.go("/nowhere")
    assert context.route is router.not_found
    assert context.unauthorized is None


def test_principal_is_resolved_per_transition():
    session = {"user": "u1"}
    authority = DictAuthority({"orders"})
    router = make_router(authority, principal=lambda: session["user"])
    router.initialize()
    router.go("/acme/orders")
    session["user"] = "u2"
    router.go("/")
    assert authority.calls == [("orders", "u1"), ("index", "u2")]


def test_principal_can_be_a_plain_value():
    authority = DictAuthority({"orders"})
    router = make_router(authority, principal="guest")
    router.initialize()
    router.go("/acme/orders")
    assert authority.calls == [("orders", "guest")]


def test_stale_flag_is_cleared_on_grant():
    router = make_router(DictAuthority({"orders"}))
    router.initialize()
    context = router.go("/acme/orders")
    context.unauthorized = True
    router.permission.check(router, context)
    assert context.unauthorized is None


def test_gate_runs_before_enter_hooks_regardless_of_plug_order():
    seen = []
    router = Router(name="storefront").plug("logging", flags="log:off")
    router.plug("permission", authority=DictAuthority())
    router.triggers.enter(lambda context: seen.append(("global", context.unauthorized)))
    router.route(
        "/orders",
        name="orders",
        triggers_enter=[lambda context: seen.append(("route", context.unauthorized))],
        action=lambda params, query: seen.append(("action", None)),
    )
    router.initialize()
    router.go("/orders")
    assert seen == [("global", True), ("route", True), ("action", None)]
    assert [plugin.name for plugin in router.iter_plugins()] == ["permission", "logging"]


def test_gate_cannot_be_disabled_per_route():
    router = make_router(DictAuthority())
    router.set_plugin_enabled("orders", "permission", False)
    router.initialize()
    assert router.go("/acme/orders").unauthorized is True


def test_authority_failure_fails_closed(caplog):
    router = make_router(BrokenAuthority())
    router.initialize()
    with caplog.at_level(logging.WARNING, logger="shoproute"):
        context = router.go("/acme/orders")
    assert context.unauthorized is True
    assert "Authority failed for route 'orders'" in caplog.text


def test_authority_failure_can_fail_open():
    router = make_router(BrokenAuthority(), fail_closed=False)
    router.initialize()
    assert router.go("/acme/orders").unauthorized is None


def test_missing_authority_is_denied():
    router = make_router(None)
    router.initialize()
    assert router.go("/acme/orders").unauthorized is True


def test_unauthorized_renders_the_unauthorized_slot():
    store = MemoryConfigStore(
        "shop-1",
        shops=[
            {
                "_id": "shop-1",
                "name": "Acme",
                "layout": [
                    {
                        "layout": "coreLayout",
                        "workflow": "coreWorkflow",
                        "enabled": True,
                        "structure": {"template": "products"},
                    }
                ],
            }
        ],
    )
    renderer = RecordingRenderer()
    router = Router(name="storefront").plug("permission", authority=DictAuthority())
    dispatch = LayoutDispatcher(router, store, renderer)
    router.route("/orders", name="orders", action=lambda params, query: dispatch({"template": "orders"}))
    router.initialize()
    router.go("/orders")
    layout, structure = renderer.calls[-1]
    assert layout == "coreLayout"
    assert structure["template"] == "unauthorized"


def test_configuration_is_validated():
    with pytest.raises(ValidationError):
        Router(name="storefront").plug("permission", fail_closed="maybe")
