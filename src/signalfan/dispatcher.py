# src/signalfan/dispatcher.py
"""Dispatcher routes analytics and error calls to registered clients.

The Dispatcher is the single owner of client registration state:
1. Holds an immutable ClientRegistry snapshot
2. Replaces the snapshot on register/unregister (insert-or-replace by name)
3. Filters each call to the clients with the matching capability
4. Narrows to an explicit client list when the caller passes one
5. Builds link-click handlers that send an event then navigate

Design principles:
- Each call reads one snapshot; registration during a dispatch never
  changes the set of clients that dispatch reaches
- Delivery is synchronous, in registration order, at most once per client
- A client error propagates and stops later clients, unless the Dispatcher
  was built with isolate_client_failures=True

Thread Safety:
    Writers (register_clients, unregister_clients, close) serialize on
    _lock and swap in a new snapshot. Readers never lock; assigning the
    snapshot reference is atomic, so a reader sees either the old or the
    new set, never a mix. health_metrics reads are approximately consistent.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Sequence
from types import TracebackType
from typing import Any, TypeVar

import structlog

from signalfan.enums import ErrorLogLevel
from signalfan.links import DEFAULT_REDIRECT_DELAY, LinkClickEvent, Navigator, build_link_click_handler
from signalfan.protocols import AnalyticsClientProtocol, DispatchClient, ErrorClientProtocol
from signalfan.registry import ClientRegistry
from signalfan.scheduling import ScheduledCall, Scheduler, ThreadingScheduler

logger = structlog.get_logger(__name__)

_C = TypeVar("_C", bound=DispatchClient)


def normalize_error_info(error_info: Any) -> list[Any]:
    """Return error_info as a list.

    Lists and tuples keep their items in order. Any other value, None
    included, becomes a one-element list.
    """
    if isinstance(error_info, list):
        return error_info
    if isinstance(error_info, tuple):
        return list(error_info)
    return [error_info]


def _select(pool: tuple[_C, ...], clients: Sequence[str] | None) -> tuple[_C, ...]:
    """Narrow pool to the explicitly named clients, keeping pool order."""
    if clients is None:
        return pool
    if isinstance(clients, str):
        clients = (clients,)
    wanted = set(clients)
    return tuple(client for client in pool if client.name in wanted)


class Dispatcher:
    """Routes identify, page, event and error calls to registered clients.

    Capability routing:
    - identify_user: every registered client (analytics and error)
    - page, send_event: analytics clients only
    - track_error: error clients only

    Every operation accepts ``clients=[...]`` to target a subset by name.
    Names that are not registered are skipped silently.

    Example:
        >>> dispatcher = Dispatcher([SegmentClient(...), SentryClient(...)])
        >>> dispatcher.identify_user("u-1", {"email": "a@b.c"})
        >>> dispatcher.send_event("add_to_cart_clicked", {"product": "Henley"})
        >>> dispatcher.track_error("Checkout failed", exc, ErrorLogLevel.CRITICAL)
        >>> dispatcher.close()
    """

    def __init__(
        self,
        initial_clients: Iterable[DispatchClient] = (),
        *,
        navigate: Navigator | None = None,
        scheduler: Scheduler | None = None,
        isolate_client_failures: bool = False,
        redirect_delay: float = DEFAULT_REDIRECT_DELAY,
    ) -> None:
        """Initialize the Dispatcher.

        Args:
            initial_clients: Clients registered up front. Duplicate names
                resolve last-wins, as with register_clients().
            navigate: Called with the destination URL by link-click
                handlers. Required only for get_link_click_event_handler().
            scheduler: Timer for deferred navigation. Defaults to
                ThreadingScheduler.
            isolate_client_failures: If True, a client that raises is
                logged and skipped and delivery continues. If False (the
                default) the error propagates and later clients are not called.
            redirect_delay: Default link-click delay in seconds.
        """
        self._registry = ClientRegistry.of(initial_clients)
        self._navigate = navigate
        self._scheduler: Scheduler = scheduler if scheduler is not None else ThreadingScheduler()
        self._isolate_client_failures = isolate_client_failures
        self._redirect_delay = redirect_delay

        self._lock = threading.Lock()
        self._closed = False
        self._pending_navigations: list[ScheduledCall] = []

        # Health metrics
        self._dispatch_counts: dict[str, int] = {}
        self._client_failures: dict[str, int] = {}

        if len(self._registry):
            logger.debug("Dispatcher created", clients=list(self._registry.names))

    # =========================================================================
    # Registry
    # =========================================================================

    @property
    def registry(self) -> ClientRegistry:
        """Current snapshot of registered clients."""
        return self._registry

    @property
    def registered_analytics_clients(self) -> tuple[str, ...]:
        """Names of registered analytics clients, in registration order."""
        return self._registry.analytics_names

    @property
    def registered_error_clients(self) -> tuple[str, ...]:
        """Names of registered error clients, in registration order."""
        return self._registry.error_names

    def register_clients(self, clients: Iterable[DispatchClient]) -> None:
        """Insert or replace clients by name.

        The batch is applied as one update: existing clients sharing a name
        with any incoming client are removed, then all incoming clients are
        appended. Duplicate names within the batch keep the last occurrence.

        Raises:
            RuntimeError: If the Dispatcher has been closed.
        """
        incoming = list(clients)
        with self._lock:
            if self._closed:
                raise RuntimeError("Cannot register clients on a closed Dispatcher")
            previous = self._registry
            self._registry = previous.with_clients(incoming)

        replaced = sorted({client.name for client in incoming if client.name in previous})
        logger.debug(
            "Clients registered",
            clients=[client.name for client in incoming],
            replaced=replaced,
        )

    def unregister_clients(self, names: Iterable[str]) -> None:
        """Remove clients by name. Unknown names are ignored.

        Raises:
            RuntimeError: If the Dispatcher has been closed.
        """
        if isinstance(names, str):
            names = (names,)
        removing = list(names)
        with self._lock:
            if self._closed:
                raise RuntimeError("Cannot unregister clients on a closed Dispatcher")
            previous = self._registry
            self._registry = previous.without_names(removing)

        logger.debug(
            "Clients unregistered",
            clients=[name for name in removing if name in previous],
            unknown=[name for name in removing if name not in previous],
        )

    # =========================================================================
    # Dispatch
    # =========================================================================

    def identify_user(
        self,
        user_id: str,
        other_info: Any = None,
        clients: Sequence[str] | None = None,
    ) -> None:
        """Identify a user on every registered client (both kinds).

        Args:
            user_id: Application user identifier
            other_info: Optional traits, passed through unchanged
            clients: Explicit client names, or None for all clients
        """
        targets = _select(self._registry.clients, clients)
        self._deliver("identify_user", targets, lambda client: client.identify_user(user_id, other_info))

    def page(
        self,
        page_name: str,
        properties: Any = None,
        clients: Sequence[str] | None = None,
    ) -> None:
        """Record a page view on analytics clients."""
        targets = _select(self._registry.analytics_clients, clients)
        self._deliver("page", targets, lambda client: client.page(page_name, properties))

    def send_event(
        self,
        event_name: str,
        properties: Any = None,
        clients: Sequence[str] | None = None,
    ) -> None:
        """Record a named event on analytics clients."""
        targets = _select(self._registry.analytics_clients, clients)
        self._deliver("send_event", targets, lambda client: client.send_event(event_name, properties))

    def track_error(
        self,
        message: str,
        error_info: Any = None,
        level: ErrorLogLevel | str | None = None,
        clients: Sequence[str] | None = None,
    ) -> None:
        """Report an error to error clients.

        error_info is normalized to a list before delivery (see
        normalize_error_info), so a call without error_info reaches clients
        as ``[None]``. When level is None each client applies its own default.

        Raises:
            ValueError: If level is a string that is not an ErrorLogLevel.
        """
        resolved_level = ErrorLogLevel(level) if level is not None else None
        targets = _select(self._registry.error_clients, clients)
        normalized = normalize_error_info(error_info)
        self._deliver(
            "track_error",
            targets,
            lambda client: client.track_error(message, normalized, resolved_level),
        )

    def _deliver(
        self,
        operation: str,
        targets: tuple[_C, ...],
        call: Callable[[_C], None],
    ) -> None:
        """Invoke call on each target in order.

        Without isolation, the first client error propagates and the
        remaining targets are not invoked.
        """
        self._dispatch_counts[operation] = self._dispatch_counts.get(operation, 0) + 1

        for client in targets:
            if not self._isolate_client_failures:
                call(client)
                continue
            try:
                call(client)
            except Exception as e:
                self._client_failures[client.name] = self._client_failures.get(client.name, 0) + 1
                logger.warning(
                    "Client dispatch failed",
                    client=client.name,
                    operation=operation,
                    error_type=type(e).__name__,
                    error=str(e),
                )

    # =========================================================================
    # Link clicks
    # =========================================================================

    def get_link_click_event_handler(
        self,
        event_name: str,
        properties: Any = None,
        redirect_delay: float | None = None,
        clients: Sequence[str] | None = None,
    ) -> Callable[[LinkClickEvent], ScheduledCall]:
        """Build a handler that sends an event, then navigates after a delay.

        The handler prevents the click's default navigation, captures its
        href, calls send_event() synchronously and schedules navigation to
        the captured href. It returns the ScheduledCall, which can be
        cancelled; close() cancels any navigation still pending.

        Args:
            event_name: Event sent on each click
            properties: Event properties
            redirect_delay: Seconds before navigating. Defaults to the
                Dispatcher's redirect_delay (0.2s unless configured).
            clients: Explicit client names, or None for all analytics clients

        Raises:
            RuntimeError: If the Dispatcher was created without navigate,
                or has been closed. The returned handler raises RuntimeError
                once the Dispatcher is closed.
            ValueError: If redirect_delay is negative.
        """
        if self._closed:
            raise RuntimeError("Cannot create link-click handlers on a closed Dispatcher")
        if self._navigate is None:
            raise RuntimeError("Dispatcher was created without a navigate callable")

        handler = build_link_click_handler(
            self.send_event,
            scheduler=self._scheduler,
            navigate=self._navigate,
            event_name=event_name,
            properties=properties,
            redirect_delay=self._redirect_delay if redirect_delay is None else redirect_delay,
            clients=clients,
        )

        def tracked(click: LinkClickEvent) -> ScheduledCall:
            if self._closed:
                raise RuntimeError("Cannot handle link clicks on a closed Dispatcher")
            scheduled = handler(click)
            with self._lock:
                if self._closed:
                    # Closed while the event was being sent
                    scheduled.cancel()
                    raise RuntimeError("Cannot handle link clicks on a closed Dispatcher")
                self._pending_navigations = [call for call in self._pending_navigations if not call.done]
                self._pending_navigations.append(scheduled)
            return scheduled

        return tracked

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def health_metrics(self) -> dict[str, Any]:
        """Return a snapshot of dispatcher health.

        - registered_clients: Number of clients in the current snapshot
        - dispatches: Per-operation call counts
        - client_failures: Per-client failure counts (isolation mode only)
        - pending_navigations: Link-click navigations not yet run
        """
        return {
            "registered_clients": len(self._registry),
            "dispatches": self._dispatch_counts.copy(),
            "client_failures": self._client_failures.copy(),
            "pending_navigations": sum(1 for call in self._pending_navigations if not call.done),
        }

    def close(self) -> None:
        """Cancel pending navigations and discard all registered clients.

        Idempotent. After close(), dispatch calls reach no clients and
        register_clients(), unregister_clients() and link-click handlers raise.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            pending = self._pending_navigations
            self._pending_navigations = []
            self._registry = ClientRegistry()

        for call in pending:
            call.cancel()
        logger.info("Dispatcher closing", **self.health_metrics)

    def __enter__(self) -> Dispatcher:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()
