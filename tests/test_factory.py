# tests/test_factory.py
"""Tests for signalfan.factory -- Dispatcher creation from settings."""

from __future__ import annotations

from typing import Any
from unittest.mock import patch

import pytest

from signalfan.base import BaseAnalyticsClient
from signalfan.clients import DebugAnalyticsClient, DebugErrorClient
from signalfan.config import ClientSettings, DispatcherSettings
from signalfan.dispatcher import Dispatcher
from signalfan.enums import ErrorLogLevel
from signalfan.errors import ClientConfigurationError
from signalfan.factory import build_clients, create_dispatcher, discover_client_registry
from signalfan.hookspecs import hookimpl
from signalfan.links import LinkClick
from signalfan.scheduling import ManualScheduler
from tests.fixtures import RecordingAnalyticsClient, RecordingErrorClient


class _WarehouseClient(RecordingAnalyticsClient):
    """Analytics client shipped by a third-party plugin."""

    name = "warehouse"

    def __init__(self) -> None:
        super().__init__("warehouse")


class WarehousePlugin:
    @hookimpl
    def signalfan_get_clients(self) -> list[type]:
        return [_WarehouseClient]


def _make_settings(*clients: ClientSettings, isolate: bool = False) -> DispatcherSettings:
    return DispatcherSettings(clients=clients, isolate_client_failures=isolate)


class TestDiscoverClientRegistry:
    def test_builtin_clients_discovered(self) -> None:
        registry = discover_client_registry()
        assert registry == {
            "debug_analytics": DebugAnalyticsClient,
            "debug_error": DebugErrorClient,
        }

    def test_extra_plugin_clients_discovered(self) -> None:
        registry = discover_client_registry([WarehousePlugin()])
        assert registry["warehouse"] is _WarehouseClient

    def test_duplicate_client_name_rejected(self) -> None:
        class Shadow(DebugAnalyticsClient):
            pass

        class ShadowPlugin:
            @hookimpl
            def signalfan_get_clients(self) -> list[type]:
                return [Shadow]

        with pytest.raises(ClientConfigurationError, match="Duplicate client name 'debug_analytics'"):
            discover_client_registry([ShadowPlugin()])

    def test_non_client_class_rejected(self) -> None:
        class NotAClient:
            name = "nope"

        class BadPlugin:
            @hookimpl
            def signalfan_get_clients(self) -> list[type]:
                return [NotAClient]

        with pytest.raises(ClientConfigurationError, match="must subclass"):
            discover_client_registry([BadPlugin()])

    def test_class_without_name_rejected(self) -> None:
        class Nameless(RecordingErrorClient):
            pass

        class NamelessPlugin:
            @hookimpl
            def signalfan_get_clients(self) -> list[type]:
                return [Nameless]

        with pytest.raises(ClientConfigurationError, match="non-empty string"):
            discover_client_registry([NamelessPlugin()])

    def test_abstract_client_class_rejected(self) -> None:
        class HalfClient(BaseAnalyticsClient):
            name = "half"

            def identify_user(self, user_id: str, other_info: Any = None) -> None: ...

        class HalfPlugin:
            @hookimpl
            def signalfan_get_clients(self) -> list[type]:
                return [HalfClient]

        with pytest.raises(ClientConfigurationError, match=r"abstract methods: \['page', 'send_event'\]"):
            create_dispatcher(_make_settings(ClientSettings(name="half")), client_plugins=[HalfPlugin()])

    @pytest.mark.parametrize("returned", [None, "debug", 42], ids=["none", "string", "int"])
    def test_hook_returning_non_iterable_rejected(self, returned) -> None:
        class WeirdPlugin:
            @hookimpl
            def signalfan_get_clients(self):
                return returned

        with pytest.raises(ClientConfigurationError, match="expected iterable of client classes"):
            discover_client_registry([WeirdPlugin()])

    def test_hook_raising_is_wrapped(self) -> None:
        class ExplodingPlugin:
            @hookimpl
            def signalfan_get_clients(self):
                raise RuntimeError("boom")

        with pytest.raises(ClientConfigurationError, match="boom"):
            discover_client_registry([ExplodingPlugin()])

    def test_hook_spec_mismatch_rejected(self) -> None:
        class MisspelledPlugin:
            @hookimpl
            def signalfan_get_client(self):
                return []

        with pytest.raises(ClientConfigurationError, match="Invalid client plugin MisspelledPlugin"):
            discover_client_registry([MisspelledPlugin()])


class TestBuildClients:
    def test_clients_built_in_settings_order(self) -> None:
        settings = _make_settings(
            ClientSettings(name="debug_error", options={"default_level": "warn"}),
            ClientSettings(name="debug_analytics"),
        )

        clients = build_clients(settings)

        assert [client.name for client in clients] == ["debug_error", "debug_analytics"]
        assert clients[0].default_level is ErrorLogLevel.WARN

    def test_unknown_client_lists_available(self) -> None:
        settings = _make_settings(ClientSettings(name="mixpanel"))

        with pytest.raises(ClientConfigurationError) as exc_info:
            build_clients(settings)

        assert exc_info.value.client_name == "mixpanel"
        assert "debug_analytics" in exc_info.value.message

    def test_instantiation_error_is_wrapped(self) -> None:
        class KeyedClient(RecordingAnalyticsClient):
            name = "keyed"

            def __init__(self, write_key: str) -> None:
                super().__init__("keyed")

        class KeyedPlugin:
            @hookimpl
            def signalfan_get_clients(self) -> list[type]:
                return [KeyedClient]

        settings = _make_settings(ClientSettings(name="keyed"))
        with pytest.raises(ClientConfigurationError, match="Could not instantiate client") as exc_info:
            build_clients(settings, client_plugins=[KeyedPlugin()])

        assert exc_info.value.client_name == "keyed"
        assert isinstance(exc_info.value.__cause__, TypeError)

    def test_invalid_options_propagate(self) -> None:
        settings = _make_settings(ClientSettings(name="debug_analytics", options={"log_level": "loud"}))
        with pytest.raises(ClientConfigurationError, match="Invalid log_level"):
            build_clients(settings)


class TestCreateDispatcher:
    def test_dispatcher_has_configured_clients(self) -> None:
        settings = _make_settings(ClientSettings(name="debug_analytics"), ClientSettings(name="debug_error"))

        with create_dispatcher(settings) as dispatcher:
            assert isinstance(dispatcher, Dispatcher)
            assert dispatcher.registered_analytics_clients == ("debug_analytics",)
            assert dispatcher.registered_error_clients == ("debug_error",)

    def test_plugin_clients_receive_events(self) -> None:
        settings = _make_settings(ClientSettings(name="warehouse"))

        with create_dispatcher(settings, client_plugins=[WarehousePlugin()]) as dispatcher:
            (client,) = dispatcher.registry.clients
            dispatcher.send_event("signup", {"plan": "pro"})
            assert client.calls_to("send_event") == [("signup", {"plan": "pro"})]

    def test_settings_flow_into_dispatcher(self) -> None:
        scheduler = ManualScheduler()
        visited: list[str] = []
        settings = DispatcherSettings(redirect_delay_seconds=0.5, isolate_client_failures=True)

        with create_dispatcher(settings, navigate=visited.append, scheduler=scheduler) as dispatcher:
            dispatcher.get_link_click_event_handler("click")(LinkClick(href="/a"))
            scheduler.advance(0.25)
            assert visited == []
            scheduler.advance(0.25)
            assert visited == ["/a"]

    def test_no_clients_still_creates_dispatcher(self) -> None:
        with create_dispatcher(DispatcherSettings()) as dispatcher:
            assert len(dispatcher.registry) == 0

    def test_discovery_uses_supplied_plugins(self) -> None:
        with patch("signalfan.factory.discover_client_registry", return_value={}) as mock_discover:
            create_dispatcher(DispatcherSettings(), client_plugins=[WarehousePlugin()]).close()
            (args, _), = mock_discover.call_args_list
            assert isinstance(args[0][0], WarehousePlugin)
