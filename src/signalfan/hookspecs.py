# src/signalfan/hookspecs.py
"""pluggy hook specifications for dispatch clients.

Client plugins implement these hooks to make their client classes
available to create_dispatcher() and the CLI.

Usage (implementing a client plugin):
    from signalfan.hookspecs import hookimpl

    class SegmentPlugin:
        @hookimpl
        def signalfan_get_clients(self):
            return [SegmentClient]
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from signalfan.base import BaseAnalyticsClient, BaseErrorClient

PROJECT_NAME = "signalfan"

# Hook specification marker
hookspec = pluggy.HookspecMarker(PROJECT_NAME)

# Hook implementation marker (for client plugins to use)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class SignalfanClientSpec:
    """Hook specifications for client plugins."""

    @hookspec
    def signalfan_get_clients(self) -> list[type["BaseAnalyticsClient | BaseErrorClient"]]:  # type: ignore[empty-body]
        """Return client classes.

        Called during discovery. Classes are instantiated and configured
        by create_dispatcher() based on DispatcherSettings.

        Returns:
            List of client classes (not instances) deriving from
            BaseAnalyticsClient or BaseErrorClient
        """
