# src/signalfan/protocols.py
"""Protocol definitions for dispatch clients.

Clients ship analytics and error events to external vendors (Segment,
Amplitude, Sentry, Rollbar, etc.). The Dispatcher depends only on these
protocols, never on a concrete vendor class.
"""

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from signalfan.enums import ClientType, ErrorLogLevel


@runtime_checkable
class AnalyticsClientProtocol(Protocol):
    """Protocol for analytics clients.

    Analytics clients receive identify, page view and custom event calls.

    Error handling:
        Exceptions raised by a capability method propagate through the
        Dispatcher to the caller unless the Dispatcher was built with
        ``isolate_client_failures=True``.
    """

    @property
    def name(self) -> str:
        """Client name used for explicit targeting and deduplication.

        Unique among the clients registered with one Dispatcher,
        across both kinds.
        """
        ...

    @property
    def client_type(self) -> ClientType:
        """Always ClientType.ANALYTICS."""
        ...

    def identify_user(self, user_id: str, other_info: Any = None) -> None:
        """Associate subsequent calls with a user.

        Args:
            user_id: Application user identifier
            other_info: Optional traits (email, username, ...)
        """
        ...

    def page(self, page_name: str, properties: Any = None) -> None:
        """Record a page view.

        Args:
            page_name: Page name, e.g. "Shop - Clothing"
            properties: Optional page properties
        """
        ...

    def send_event(self, event_name: str, properties: Any = None) -> None:
        """Record a named event ("Clicked CTA", "Submitted Form", ...).

        Args:
            event_name: Event name
            properties: Optional event properties
        """
        ...


@runtime_checkable
class ErrorClientProtocol(Protocol):
    """Protocol for error-tracking clients.

    Error clients receive identify and error report calls.
    """

    @property
    def name(self) -> str:
        """Client name used for explicit targeting and deduplication."""
        ...

    @property
    def client_type(self) -> ClientType:
        """Always ClientType.ERROR."""
        ...

    def identify_user(self, user_id: str, other_info: Any = None) -> None:
        """Associate subsequent error reports with a user."""
        ...

    def track_error(
        self,
        message: str,
        error_info: Sequence[Any] | None = None,
        level: ErrorLogLevel | None = None,
    ) -> None:
        """Record an error.

        The Dispatcher always passes ``error_info`` as a list. When the
        caller supplied nothing the list is ``[None]``, so implementations
        must tolerate a ``None`` item.

        Args:
            message: Error message
            error_info: Ordered exceptions and/or structured context
            level: Severity, or None to use the client's own default
        """
        ...


DispatchClient = AnalyticsClientProtocol | ErrorClientProtocol
