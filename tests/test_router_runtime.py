"""Tests for the navigation runtime: table, groups, triggers and lifecycle."""

import pytest

from shoproute import RouteNotFound, Router, RouterAlreadyInitialized
from shoproute.core import BaseRouter


def test_groups_prefix_and_name_routes():
    router = BaseRouter(name="storefront")
    shop = router.group(name="shop", prefix="acme")
    entry = shop.route("/orders/:_id", name="orders/detail")
    nested = shop.group(prefix="admin").route("/", name="admin")
    assert entry.full_path == "/acme/orders/:_id"
    assert entry.group == "shop"
    assert nested.full_path == "/acme/admin"
    assert nested.group == "shop"


def test_empty_path_is_rejected():
    with pytest.raises(ValueError):
        BaseRouter().route("")


def test_first_registered_match_wins():
    router = BaseRouter()
    first = router.route("/orders/:_id", name="detail")
    router.route("/orders/new", name="new")
    entry, params = router.match("/orders/new")
    assert entry is first
    assert params == {"_id": "new"}


def test_trailing_slash_and_query_are_ignored_by_match():
    router = BaseRouter()
    entry = router.route("/tags")
    assert router.has_path("/tags/")
    assert router.has_path("/tags?page=2")
    assert not router.has_path("/tags/extra")
    assert router.match("/tags/")[0] is entry


def test_initialize_twice_raises():
    router = BaseRouter(name="storefront")
    router.initialize()
    with pytest.raises(RouterAlreadyInitialized):
        router.initialize()


def test_ensure_initialized_initializes_once():
    router = BaseRouter()
    assert router.ensure_initialized() is True
    assert router.ensure_initialized() is False


def test_navigation_is_deferred_until_initialize():
    calls = []
    router = BaseRouter()
    router.route("/a", action=lambda params, query: calls.append("a"))
    router.route("/b", action=lambda params, query: calls.append("b"))
    assert router.go("/a") is None
    assert router.go("/b") is None
    assert calls == []
    router.initialize()
    assert calls == ["a", "b"]
    assert router.current().path == "/b"


def test_action_receives_params_and_query():
    received = []
    router = BaseRouter()
    router.route("/orders/:_id", action=lambda params, query: received.append((params, query)))
    router.initialize()
    router.go("/orders/42?tab=items")
    assert received == [({"_id": "42"}, {"tab": "items"})]


def test_hook_order_on_enter_and_exit():
    events = []
    router = BaseRouter()
    router.triggers.enter(lambda c: events.append("global-enter"))
    router.triggers.enter([lambda c: events.append("first-enter")], first=True)
    router.triggers.exit(lambda c: events.append("global-exit"))
    router.route(
        "/a",
        triggersEnter=lambda c: events.append("route-enter"),
        triggers_exit=[lambda c: events.append("route-exit")],
        action=lambda params, query: events.append("action"),
    )
    router.route("/b")
    router.initialize()
    router.go("/a")
    router.go("/b")
    assert events == [
        "first-enter",
        "global-enter",
        "route-enter",
        "action",
        "route-exit",
        "global-exit",
        "first-enter",
        "global-enter",
    ]


def test_non_callable_hook_is_rejected():
    router = BaseRouter()
    with pytest.raises(TypeError):
        router.triggers.enter(["not callable"])


def test_leaving_a_transition_stops_owned_computations():
    class Stoppable:
        stopped = False

        def stop(self):
            self.stopped = True

    router = BaseRouter()
    router.route("/a")
    router.route("/b")
    router.initialize()
    context = router.go("/a")
    owned = context.own(Stoppable())
    router.go("/b")
    assert owned.stopped


def test_reload_navigates_to_current_path_again():
    calls = []
    router = BaseRouter()
    router.route("/tags", action=lambda params, query: calls.append(dict(query)))
    assert router.reload() is None
    router.initialize()
    first = router.go("/tags?page=2")
    second = router.reload()
    assert second is not first
    assert calls == [{"page": "2"}, {"page": "2"}]


def test_not_found_accepts_callable_or_mapping():
    calls = []
    router = BaseRouter()
    router.not_found = lambda params, query: calls.append("callable")
    router.initialize()
    router.go("/missing")
    router.not_found = {"action": lambda params, query: calls.append("mapping")}
    router.go("/still-missing")
    assert calls == ["callable", "mapping"]
    assert router.not_found.name == "notFound"
    assert router.not_found not in router.routes


def test_route_named_lookup():
    router = BaseRouter(name="storefront")
    entry = router.route("/tags", name="tags/tagGrid")
    assert router.route_named("tags/tagGrid") is entry
    with pytest.raises(RouteNotFound):
        router.route_named("missing")


def test_options_are_kept_on_entry():
    router = BaseRouter()
    entry = router.route("/tags", name="tags", template="tagGrid", layout=None)
    assert entry.options == {"template": "tagGrid", "layout": None}


def test_members_describes_table_and_plugins():
    router = Router(name="storefront").plug("logging", flags="before:off")
    router.group(name="shop", prefix="/acme").route("/tags", name="tags/tagGrid", template="tagGrid")
    members = router.members()
    assert members["name"] == "storefront"
    assert members["initialized"] is False
    [info] = members["routes"]
    assert info["name"] == "tags/tagGrid"
    assert info["full_path"] == "/acme/tags"
    assert info["group"] == "shop"
    assert info["options"] == {"template": "tagGrid"}
    assert info["plugins"] == ["logging"]
    assert info["plugin_data"]["logging"]["config"]["before"] is False
    assert members["not_found"]["name"] == "notFound"
    assert "logging" in members["plugin_info"]
