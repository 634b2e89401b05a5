# src/signalfan/factory.py
"""Factory functions for creating a Dispatcher from configuration.

This module provides the glue between configuration (DispatcherSettings)
and the runtime Dispatcher instance. It handles:
1. Discovering client classes via pluggy hooks
2. Instantiating and configuring clients
3. Creating the Dispatcher with the configured clients registered

Usage:
    from signalfan.config import load_settings
    from signalfan.factory import create_dispatcher

    settings = load_settings(Path("signalfan.yaml"))
    dispatcher = create_dispatcher(settings, navigate=open_url)
"""

from __future__ import annotations

import inspect
from collections.abc import Iterable
from typing import Any

import pluggy
import structlog

from signalfan.base import BaseAnalyticsClient, BaseErrorClient
from signalfan.clients import BuiltinClientsPlugin
from signalfan.config import DispatcherSettings
from signalfan.dispatcher import Dispatcher
from signalfan.errors import ClientConfigurationError
from signalfan.hookspecs import PROJECT_NAME, SignalfanClientSpec
from signalfan.links import Navigator
from signalfan.protocols import DispatchClient
from signalfan.scheduling import Scheduler

logger = structlog.get_logger(__name__)

ClientClass = type[BaseAnalyticsClient] | type[BaseErrorClient]


def _resolve_client_name(client_class: Any) -> str:
    """Validate a discovered client class and return its registry name.

    Raises:
        ClientConfigurationError: If the declaration is not a client class,
            is abstract, or its class-level name is not a non-empty string.
    """
    if not isinstance(client_class, type) or not issubclass(client_class, BaseAnalyticsClient | BaseErrorClient):
        raise ClientConfigurationError(
            "client_plugins",
            f"Client declarations must subclass BaseAnalyticsClient or BaseErrorClient, got {client_class!r}",
        )
    if inspect.isabstract(client_class):
        missing = sorted(client_class.__abstractmethods__)
        raise ClientConfigurationError(
            client_class.__name__,
            f"Client class does not implement abstract methods: {missing}",
        )

    name = getattr(client_class, "name", None)
    if type(name) is not str or name == "":
        raise ClientConfigurationError(
            client_class.__name__,
            f"Client class attribute name must be a non-empty string, got {name!r}",
        )
    return name


def discover_client_registry(client_plugins: Iterable[Any] = ()) -> dict[str, ClientClass]:
    """Discover client classes via pluggy hooks.

    Registers the built-in clients plus any additional plugin objects
    provided by the caller, then calls ``signalfan_get_clients`` hooks to
    build the name->class registry.

    Args:
        client_plugins: Optional additional plugin objects implementing
            ``signalfan_get_clients``.

    Returns:
        Mapping of client name to client class.

    Raises:
        ClientConfigurationError: If plugin registration fails, a hook
            returns something other than an iterable of client classes,
            or duplicate client names are discovered.
    """
    plugin_manager = pluggy.PluginManager(PROJECT_NAME)
    plugin_manager.add_hookspecs(SignalfanClientSpec)

    for plugin in [BuiltinClientsPlugin(), *client_plugins]:
        try:
            plugin_manager.register(plugin)
            plugin_manager.check_pending()
        except (pluggy.PluginValidationError, ValueError) as e:
            # PluginValidationError: hook spec mismatch (wrong method names, etc.)
            # ValueError: duplicate plugin object or plugin name already registered
            if isinstance(e, pluggy.PluginValidationError):
                plugin_manager.unregister(plugin=plugin)
            raise ClientConfigurationError(
                "client_plugins",
                f"Invalid client plugin {type(plugin).__name__}: {e}",
            ) from e

    registry: dict[str, ClientClass] = {}
    for hook_impl in plugin_manager.hook.signalfan_get_clients.get_hookimpls():
        plugin_name = type(hook_impl.plugin).__name__
        try:
            classes = hook_impl.function()
        except Exception as e:
            raise ClientConfigurationError(
                "client_plugins",
                f"Client plugin {plugin_name} failed in signalfan_get_clients: {e}",
            ) from e

        if classes is None or isinstance(classes, str | bytes):
            raise ClientConfigurationError(
                "client_plugins",
                f"signalfan_get_clients in plugin {plugin_name} returned {type(classes).__name__}; "
                "expected iterable of client classes",
            )
        try:
            class_iter = iter(classes)
        except TypeError as e:
            raise ClientConfigurationError(
                "client_plugins",
                f"signalfan_get_clients in plugin {plugin_name} returned {type(classes).__name__}; "
                "expected iterable of client classes",
            ) from e

        for client_class in class_iter:
            client_name = _resolve_client_name(client_class)
            if client_name in registry:
                raise ClientConfigurationError(
                    client_name,
                    f"Duplicate client name '{client_name}' discovered: "
                    f"{registry[client_name].__name__} and {client_class.__name__}",
                )
            registry[client_name] = client_class

    return registry


def build_clients(
    settings: DispatcherSettings,
    *,
    client_plugins: Iterable[Any] = (),
) -> list[DispatchClient]:
    """Instantiate and configure every client named in settings, in order.

    Raises:
        ClientConfigurationError: If a client name is unknown or a client
            rejects its options.
    """
    client_registry = discover_client_registry(client_plugins)

    clients: list[DispatchClient] = []
    for client_settings in settings.clients:
        try:
            client_class = client_registry[client_settings.name]
        except KeyError:
            available = sorted(client_registry.keys())
            raise ClientConfigurationError(
                client_name=client_settings.name,
                message=f"Unknown client. Available clients: {available}",
            ) from None

        try:
            client = client_class()
        except (TypeError, ValueError) as e:
            raise ClientConfigurationError(client_settings.name, f"Could not instantiate client: {e}") from e
        client.configure(dict(client_settings.options))
        clients.append(client)
        logger.debug(
            "client_configured",
            client=client_settings.name,
            options_keys=list(client_settings.options.keys()),
        )
    return clients


def create_dispatcher(
    settings: DispatcherSettings,
    *,
    client_plugins: Iterable[Any] = (),
    navigate: Navigator | None = None,
    scheduler: Scheduler | None = None,
) -> Dispatcher:
    """Create a Dispatcher with the clients configured in settings registered.

    Args:
        settings: Validated dispatcher settings.
        client_plugins: Optional additional client plugin objects providing
            ``signalfan_get_clients`` hooks.
        navigate: Navigation callable for link-click handlers.
        scheduler: Timer for deferred navigation (defaults to ThreadingScheduler).

    Raises:
        ClientConfigurationError: If discovery fails, unknown client names
            are configured, or client configuration fails.
    """
    clients = build_clients(settings, client_plugins=client_plugins)
    if not clients:
        logger.warning("dispatcher_no_clients", message="Dispatcher created with no configured clients")

    return Dispatcher(
        clients,
        navigate=navigate,
        scheduler=scheduler,
        isolate_client_failures=settings.isolate_client_failures,
        redirect_delay=settings.redirect_delay_seconds,
    )
