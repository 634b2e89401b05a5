# src/signalfan/base.py
"""Base classes for client implementations.

Clients MUST subclass BaseAnalyticsClient or BaseErrorClient.

Why base class inheritance is required:
- Client discovery uses issubclass() checks against base classes
- Python's Protocol with non-method members (name, client_type) cannot
  support issubclass() - only isinstance() on already-instantiated objects
- The base class fixes client_type per kind, so an instance can never
  change which view it is partitioned into

The protocol definitions (AnalyticsClientProtocol, ErrorClientProtocol)
exist for type-checking the Dispatcher.

Naming:
    ``name`` is normally a class attribute. Clients that are registered
    several times under different names (e.g. two Segment write keys) pass
    ``name=`` to ``__init__`` instead.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, ClassVar

from signalfan.enums import ClientType, ErrorLogLevel
from signalfan.errors import ClientConfigurationError


class _BaseClient(ABC):
    """Shared naming and configuration behaviour."""

    name: str
    client_type: ClassVar[ClientType]

    def __init__(self, name: str | None = None) -> None:
        if name is not None:
            self.name = name
        if type(getattr(self, "name", None)) is not str or self.name == "":
            raise ValueError(f"{type(self).__name__} must define a non-empty string name")

    def configure(self, options: dict[str, Any]) -> None:
        """Apply client-specific options from settings.

        Called once by the factory right after instantiation. The default
        accepts no options.

        Raises:
            ClientConfigurationError: If options are invalid
        """
        if options:
            raise ClientConfigurationError(self.name, f"Unexpected options: {sorted(options)}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class BaseAnalyticsClient(_BaseClient):
    """Base class for analytics clients.

    Example:
        class SegmentClient(BaseAnalyticsClient):
            name = "segment"

            def identify_user(self, user_id, other_info=None):
                self._segment.identify(user_id, other_info or {})

            def page(self, page_name, properties=None):
                self._segment.page(None, page_name, properties or {})

            def send_event(self, event_name, properties=None):
                self._segment.track(event_name, properties or {})
    """

    client_type: ClassVar[ClientType] = ClientType.ANALYTICS

    @abstractmethod
    def identify_user(self, user_id: str, other_info: Any = None) -> None: ...

    @abstractmethod
    def page(self, page_name: str, properties: Any = None) -> None: ...

    @abstractmethod
    def send_event(self, event_name: str, properties: Any = None) -> None: ...


class BaseErrorClient(_BaseClient):
    """Base class for error-tracking clients."""

    client_type: ClassVar[ClientType] = ClientType.ERROR

    @abstractmethod
    def identify_user(self, user_id: str, other_info: Any = None) -> None: ...

    @abstractmethod
    def track_error(
        self,
        message: str,
        error_info: Sequence[Any] | None = None,
        level: ErrorLogLevel | None = None,
    ) -> None: ...
