# src/signalfan/registry.py
"""Immutable snapshot of the clients registered with a Dispatcher.

A ClientRegistry is never mutated. with_clients() and without_names()
return a new snapshot, so a dispatch that captured the old snapshot keeps
iterating a consistent set while registration happens elsewhere.

Ordering:
    Iteration order is registration order. Replacing a client by name drops
    the old entry and appends the new one, so the replacement takes the
    newest position.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from functools import cached_property

from signalfan.enums import ClientType
from signalfan.protocols import AnalyticsClientProtocol, DispatchClient, ErrorClientProtocol


def _dedupe_last_wins(clients: Iterable[DispatchClient]) -> tuple[DispatchClient, ...]:
    """Keep only the last occurrence of each name, in order of that occurrence."""
    by_name: dict[str, DispatchClient] = {}
    for client in clients:
        by_name.pop(client.name, None)
        by_name[client.name] = client
    return tuple(by_name.values())


@dataclass(frozen=True)
class ClientRegistry:
    """Ordered, name-unique set of registered clients.

    The analytics and error views are derived once per snapshot and cached.

    Example:
        >>> registry = ClientRegistry.of([segment, sentry])
        >>> registry.analytics_names
        ('segment',)
        >>> registry.with_clients([other_segment]).without_names(["sentry"])
    """

    clients: tuple[DispatchClient, ...] = ()

    @classmethod
    def of(cls, clients: Iterable[DispatchClient] = ()) -> ClientRegistry:
        """Build a snapshot, resolving duplicate names last-wins."""
        return cls(_dedupe_last_wins(clients))

    def with_clients(self, incoming: Iterable[DispatchClient]) -> ClientRegistry:
        """Return a new snapshot with ``incoming`` inserted or replaced by name.

        Removals are computed against this snapshot before any incoming
        client is appended. Duplicate names within ``incoming`` keep the
        last occurrence.
        """
        added = _dedupe_last_wins(incoming)
        replaced = {client.name for client in added}
        kept = tuple(client for client in self.clients if client.name not in replaced)
        return ClientRegistry(kept + added)

    def without_names(self, names: Iterable[str]) -> ClientRegistry:
        """Return a new snapshot without the named clients. Unknown names are ignored."""
        removed = set(names)
        return ClientRegistry(tuple(client for client in self.clients if client.name not in removed))

    @cached_property
    def analytics_clients(self) -> tuple[AnalyticsClientProtocol, ...]:
        return tuple(c for c in self.clients if c.client_type == ClientType.ANALYTICS)  # type: ignore[misc]

    @cached_property
    def error_clients(self) -> tuple[ErrorClientProtocol, ...]:
        return tuple(c for c in self.clients if c.client_type == ClientType.ERROR)  # type: ignore[misc]

    @cached_property
    def analytics_names(self) -> tuple[str, ...]:
        return tuple(client.name for client in self.analytics_clients)

    @cached_property
    def error_names(self) -> tuple[str, ...]:
        return tuple(client.name for client in self.error_clients)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(client.name for client in self.clients)

    def __contains__(self, name: object) -> bool:
        return any(client.name == name for client in self.clients)

    def __iter__(self) -> Iterator[DispatchClient]:
        return iter(self.clients)

    def __len__(self) -> int:
        return len(self.clients)
