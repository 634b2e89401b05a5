"""Built-in dispatch clients.

Available clients:
- DebugAnalyticsClient: Log identify, page and event calls (``debug_analytics``)
- DebugErrorClient: Log identify and error calls (``debug_error``)

Plugin registration:
    Clients are registered via the signalfan_get_clients hook.
    The BuiltinClientsPlugin in this module registers all built-in clients.
"""

from signalfan.clients.debug import DebugAnalyticsClient, DebugErrorClient
from signalfan.hookspecs import hookimpl


class BuiltinClientsPlugin:
    """Plugin that registers built-in clients."""

    @hookimpl
    def signalfan_get_clients(self) -> list[type]:
        """Return built-in client classes."""
        return [DebugAnalyticsClient, DebugErrorClient]


__all__ = [
    "BuiltinClientsPlugin",
    "DebugAnalyticsClient",
    "DebugErrorClient",
]
