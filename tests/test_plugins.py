"""Tests for the plugin registry, configuration and the logging plugin."""

import pytest

from shoproute import Router
from shoproute.plugins._base_plugin import BasePlugin


class DummyLogger:
    def __init__(self, handlers=True):
        self.records = []
        self._handlers = handlers

    def hasHandlers(self):
        return self._handlers

    def info(self, message):
        self.records.append(message)


class TraceRecorder(BasePlugin):
    plugin_code = "trace_recorder"
    plugin_description = "Records the order transitions pass through"

    __slots__ = ("events",)

    def __init__(self, router, **config):
        self.events = []
        super().__init__(router, **config)

    def wrap_handler(self, router, entry, call_next):
        def traced(context):
            self.events.append(("before", context.route_name))
            result = call_next(context)
            self.events.append(("after", context.route_name))
            return result

        return traced

    def entry_metadata(self, router, entry):
        return {"traced": True}


Router.register_plugin(TraceRecorder)


def make_router():
    router = Router(name="storefront")
    router.route("/tags", name="tags/tagGrid", action=lambda params, query: None)
    return router


def test_builtin_plugins_are_registered():
    available = Router.available_plugins()
    assert {"logging", "permission"} <= set(available)


def test_register_plugin_rejects_non_plugins():
    with pytest.raises(TypeError):
        Router.register_plugin(object)


def test_register_plugin_requires_code():
    class Nameless(BasePlugin):
        pass

    with pytest.raises(ValueError):
        Router.register_plugin(Nameless)


def test_register_plugin_refuses_silent_replacement():
    class OtherLogging(BasePlugin):
        plugin_code = "logging"

    with pytest.raises(ValueError):
        Router.register_plugin(OtherLogging)


def test_plug_unknown_plugin_lists_available():
    with pytest.raises(ValueError, match="Available plugins"):
        Router().plug("missing")


def test_plug_requires_a_name():
    with pytest.raises(TypeError):
        Router().plug(TraceRecorder)


def test_plug_twice_is_rejected():
    router = Router().plug("trace_recorder")
    with pytest.raises(ValueError, match="already attached"):
        router.plug("trace_recorder")


def test_plugin_applies_to_routes_registered_before_and_after():
    router = make_router()
    router.plug("trace_recorder")
    router.route("/orders", name="orders")
    router.initialize()
    router.go("/tags")
    router.go("/orders")
    assert router.trace_recorder.events == [
        ("before", "tags/tagGrid"),
        ("after", "tags/tagGrid"),
        ("before", "orders"),
        ("after", "orders"),
    ]
    assert router.route_named("orders").plugins == ["trace_recorder"]


def test_plugin_can_be_disabled_per_route():
    router = make_router().plug("trace_recorder")
    router.route("/orders", name="orders")
    router.set_plugin_enabled("tags/tagGrid", "trace_recorder", False)
    router.initialize()
    router.go("/tags")
    router.go("/orders")
    assert [event[1] for event in router.trace_recorder.events] == ["orders", "orders"]
    assert router.is_plugin_enabled("tags/tagGrid", "trace_recorder") is False
    assert router.is_plugin_enabled("orders", "trace_recorder") is True


def test_runtime_data_is_stored_per_route():
    router = make_router().plug("trace_recorder")
    router.set_runtime_data("tags/tagGrid", "trace_recorder", "hits", 3)
    assert router.get_runtime_data("tags/tagGrid", "trace_recorder", "hits") == 3
    assert router.get_runtime_data("orders", "trace_recorder", "hits", 0) == 0


def test_unknown_plugin_attribute_raises():
    router = make_router()
    with pytest.raises(AttributeError):
        router.permission
    with pytest.raises(AttributeError):
        router.set_plugin_enabled("tags/tagGrid", "permission", False)


def test_entry_metadata_is_described():
    router = make_router().plug("trace_recorder")
    [info] = router.members()["routes"]
    assert info["plugin_data"]["trace_recorder"]["metadata"] == {"traced": True}


def test_logging_plugin_emits_start_and_end():
    logger = DummyLogger()
    router = make_router().plug("logging", logger=logger)
    router.initialize()
    router.go("/tags")
    assert logger.records[0] == "tags/tagGrid start /tags"
    assert logger.records[1].startswith("tags/tagGrid end (")
    assert logger.records[1].endswith(" ms)")


def test_logging_plugin_marks_unauthorized_transitions():
    class DenyAll:
        def has_permission(self, route_name, principal_id):
            return False

    logger = DummyLogger()
    router = make_router().plug("logging", logger=logger).plug("permission", authority=DenyAll())
    router.initialize()
    router.go("/tags")
    assert logger.records[-1].endswith(" [unauthorized]")


def test_logging_plugin_per_route_configuration():
    logger = DummyLogger()
    router = make_router().plug("logging", logger=logger)
    router.route("/orders", name="orders")
    router.logging.configure(_target="tags/tagGrid", before=False, after=False)
    router.initialize()
    router.go("/tags")
    router.go("/orders")
    assert [record.split(" ")[0] for record in logger.records] == ["orders", "orders"]
    assert router.get_config("logging", "tags/tagGrid")["before"] is False


def test_logging_plugin_prints_without_handlers(capsys):
    router = make_router().plug("logging", logger=DummyLogger(handlers=False), flags="after:off")
    router.initialize()
    router.go("/tags")
    assert capsys.readouterr().out.strip() == "tags/tagGrid start /tags"


def test_logging_plugin_can_be_silenced(capsys):
    logger = DummyLogger()
    router = make_router().plug("logging", logger=logger, flags="log:off")
    router.initialize()
    router.go("/tags")
    assert logger.records == []
    assert capsys.readouterr().out == ""
