"""Kinds and levels shared across the client boundary."""

from enum import StrEnum


class ClientType(StrEnum):
    """Capability kind of a client.

    Fixed per client class. The registry uses it to partition clients
    into the analytics and error views.
    """

    ANALYTICS = "analytics"
    ERROR = "error"


class ErrorLogLevel(StrEnum):
    """Severity attached to an error report.

    Clients map these onto their vendor's own scale (e.g. ``warn`` ->
    ``warning``, ``critical`` -> ``fatal``).
    """

    LOG = "log"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    CRITICAL = "critical"
