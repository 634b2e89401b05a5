# src/signalfan/links.py
"""Outbound link tracking: fire an event, then navigate after a delay.

Some analytics transports are fire-and-forget network calls that the
host aborts as soon as the page navigates away. The handler built here
stops the immediate navigation, sends the event synchronously and then
navigates after ``redirect_delay`` seconds. The delay is best effort;
nothing confirms that the event was delivered.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import structlog

from signalfan.scheduling import ScheduledCall, Scheduler

logger = structlog.get_logger(__name__)

DEFAULT_REDIRECT_DELAY = 0.2

Navigator = Callable[[str], None]


class LinkClickEvent(Protocol):
    """A click occurrence on an anchor-like element."""

    @property
    def href(self) -> str:
        """Destination URL of the anchor that was clicked."""
        ...

    def prevent_default(self) -> None:
        """Stop the host from navigating immediately."""
        ...


@dataclass
class LinkClick:
    """Concrete LinkClickEvent for hosts without their own event type."""

    href: str
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True


def build_link_click_handler(
    send_event: Callable[[str, Any, Sequence[str] | None], None],
    *,
    scheduler: Scheduler,
    navigate: Navigator,
    event_name: str,
    properties: Any = None,
    redirect_delay: float = DEFAULT_REDIRECT_DELAY,
    clients: Sequence[str] | None = None,
) -> Callable[[LinkClickEvent], ScheduledCall]:
    """Bind event arguments into a reusable click handler.

    Every invocation schedules its own navigation; a second click before
    the first timer fires produces a second, independent navigation.

    Args:
        send_event: Dispatch function, called as send_event(name, properties, clients)
        scheduler: Timer used to defer navigation
        navigate: Called with the captured destination URL
        event_name: Event to send on click
        properties: Event properties
        redirect_delay: Seconds to wait before navigating
        clients: Explicit client names, or None for all analytics clients

    Returns:
        Handler that returns the ScheduledCall for the pending navigation.

    Raises:
        ValueError: If redirect_delay is negative.
    """
    if redirect_delay < 0:
        raise ValueError(f"redirect_delay must be non-negative, got {redirect_delay}")

    def handle(click: LinkClickEvent) -> ScheduledCall:
        click.prevent_default()
        destination = click.href

        send_event(event_name, properties, clients)

        def go() -> None:
            logger.debug("Navigating after link click", event_name=event_name, href=destination)
            navigate(destination)

        return scheduler.call_later(redirect_delay, go)

    return handle
