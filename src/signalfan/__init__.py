"""
signalfan: fan application analytics and error events out to pluggable clients.

Application code emits each semantic event once (identify, page view,
custom event, error report) and the Dispatcher routes it to every
registered client that has the matching capability.
"""

__version__ = "0.1.0"

from signalfan.base import BaseAnalyticsClient, BaseErrorClient
from signalfan.dispatcher import Dispatcher
from signalfan.enums import ClientType, ErrorLogLevel
from signalfan.errors import ClientConfigurationError
from signalfan.factory import create_dispatcher
from signalfan.links import LinkClick
from signalfan.protocols import AnalyticsClientProtocol, ErrorClientProtocol
from signalfan.registry import ClientRegistry
from signalfan.scheduling import ManualScheduler, ScheduledCall, Scheduler, ThreadingScheduler

__all__ = [
    "AnalyticsClientProtocol",
    "BaseAnalyticsClient",
    "BaseErrorClient",
    "ClientConfigurationError",
    "ClientRegistry",
    "ClientType",
    "Dispatcher",
    "ErrorClientProtocol",
    "ErrorLogLevel",
    "LinkClick",
    "ManualScheduler",
    "ScheduledCall",
    "Scheduler",
    "ThreadingScheduler",
    "__version__",
    "create_dispatcher",
]
