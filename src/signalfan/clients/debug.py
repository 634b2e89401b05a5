# src/signalfan/clients/debug.py
"""Debug clients that write every call to the structured log.

Primarily used for local development and for checking which events an
application emits before wiring up real vendors.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Literal, TypeGuard

import structlog

from signalfan.base import BaseAnalyticsClient, BaseErrorClient
from signalfan.enums import ErrorLogLevel
from signalfan.errors import ClientConfigurationError

logger = structlog.get_logger(__name__)

# ErrorLogLevel -> structlog method name
_ERROR_LOG_METHODS: dict[ErrorLogLevel, str] = {
    ErrorLogLevel.LOG: "info",
    ErrorLogLevel.DEBUG: "debug",
    ErrorLogLevel.INFO: "info",
    ErrorLogLevel.WARN: "warning",
    ErrorLogLevel.ERROR: "error",
    ErrorLogLevel.CRITICAL: "critical",
}


def _is_valid_log_level(v: str) -> TypeGuard[Literal["debug", "info"]]:
    return v in {"debug", "info"}


class DebugAnalyticsClient(BaseAnalyticsClient):
    """Log analytics calls instead of sending them anywhere.

    Configuration options:
        log_level: "info" (default) or "debug"

    Example configuration:
        clients:
          - name: debug_analytics
            options:
              log_level: debug
    """

    name = "debug_analytics"

    _VALID_LOG_LEVELS: frozenset[str] = frozenset({"debug", "info"})

    def __init__(self, name: str | None = None) -> None:
        super().__init__(name)
        self._log_level: Literal["debug", "info"] = "info"

    def configure(self, options: dict[str, Any]) -> None:
        """Validate and apply options.

        Raises:
            ClientConfigurationError: If log_level is not a valid string
        """
        unknown = set(options) - {"log_level"}
        if unknown:
            raise ClientConfigurationError(self.name, f"Unexpected options: {sorted(unknown)}")

        log_level = options.get("log_level", "info")
        if not isinstance(log_level, str):
            raise ClientConfigurationError(
                self.name,
                f"'log_level' must be a string, got {type(log_level).__name__}",
            )
        if _is_valid_log_level(log_level):
            self._log_level = log_level
        else:
            raise ClientConfigurationError(
                self.name,
                f"Invalid log_level '{log_level}'. Must be one of: {', '.join(sorted(self._VALID_LOG_LEVELS))}",
            )

    def _log(self, message: str, **fields: Any) -> None:
        getattr(logger, self._log_level)(message, client=self.name, **fields)

    def identify_user(self, user_id: str, other_info: Any = None) -> None:
        self._log("identified user", user_id=user_id, other_info=other_info)

    def page(self, page_name: str, properties: Any = None) -> None:
        self._log("page view", page=page_name, properties=properties)

    def send_event(self, event_name: str, properties: Any = None) -> None:
        self._log("event", event_name=event_name, properties=properties)


class DebugErrorClient(BaseErrorClient):
    """Log error reports at a log level matching their severity.

    When the Dispatcher passes no level, ``default_level`` applies.

    Configuration options:
        default_level: Any ErrorLogLevel value (default "error")
    """

    name = "debug_error"

    def __init__(self, name: str | None = None) -> None:
        super().__init__(name)
        self._default_level = ErrorLogLevel.ERROR

    @property
    def default_level(self) -> ErrorLogLevel:
        return self._default_level

    def configure(self, options: dict[str, Any]) -> None:
        """Validate and apply options.

        Raises:
            ClientConfigurationError: If default_level is not an ErrorLogLevel
        """
        unknown = set(options) - {"default_level"}
        if unknown:
            raise ClientConfigurationError(self.name, f"Unexpected options: {sorted(unknown)}")

        default_level = options.get("default_level", ErrorLogLevel.ERROR.value)
        try:
            self._default_level = ErrorLogLevel(default_level)
        except ValueError:
            valid = ", ".join(level.value for level in ErrorLogLevel)
            raise ClientConfigurationError(
                self.name,
                f"Invalid default_level {default_level!r}. Must be one of: {valid}",
            ) from None

    def identify_user(self, user_id: str, other_info: Any = None) -> None:
        logger.info("identified user", client=self.name, user_id=user_id, other_info=other_info)

    def track_error(
        self,
        message: str,
        error_info: Sequence[Any] | None = None,
        level: ErrorLogLevel | str | None = None,
    ) -> None:
        effective = ErrorLogLevel(level) if level is not None else self._default_level
        log = getattr(logger, _ERROR_LOG_METHODS[effective])
        log(
            message,
            client=self.name,
            severity=effective.value,
            error_info=[repr(item) for item in error_info or ()],
        )
