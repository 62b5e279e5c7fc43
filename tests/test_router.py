import spout2gelf.adapter  # noqa: F401  registers the gelf adapter and transports
from spout2gelf.router import Registry, Route, adapter_factories, adapter_transports


class TestRoute:
    def test_bare_adapter(self):
        route = Route(adapter="gelf", address="graylog:12201")
        assert route.adapter_type() == "gelf"
        assert route.adapter_transport("udp") == "udp"

    def test_adapter_with_transport(self):
        route = Route(adapter="gelf+tcp", address="graylog:12201")
        assert route.adapter_type() == "gelf"
        assert route.adapter_transport("udp") == "tcp"

    def test_empty_transport_uses_default(self):
        assert Route(adapter="gelf+", address="x:1").adapter_transport("udp") == "udp"


class TestRegistry:
    def test_register_and_lookup(self):
        registry = Registry("test")
        factory = object()
        registry.register(factory, "thing")

        assert registry.lookup("thing") is factory
        assert "thing" in registry
        assert registry.lookup("other") is None

    def test_builtin_registrations(self):
        assert "gelf" in adapter_factories
        assert "udp" in adapter_transports
        assert "tcp" in adapter_transports
