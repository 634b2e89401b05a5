# tests/fixtures.py
"""Reusable test doubles for dispatcher testing.

These provide:
1. RecordingAnalyticsClient / RecordingErrorClient - capture every call
2. FailingAnalyticsClient - raises on every capability call
3. Navigator - records navigation targets
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from signalfan.base import BaseAnalyticsClient, BaseErrorClient
from signalfan.enums import ErrorLogLevel


@dataclass(frozen=True)
class Call:
    """One recorded capability call."""

    method: str
    args: tuple[Any, ...]


class RecordingAnalyticsClient(BaseAnalyticsClient):
    """Analytics client that records calls for assertions.

    ``on_call`` runs inside every capability call, which lets a test
    mutate the dispatcher mid-dispatch.
    """

    def __init__(self, name: str = "recording", on_call: Callable[[], None] | None = None) -> None:
        super().__init__(name)
        self.calls: list[Call] = []
        self._on_call = on_call

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append(Call(method, args))
        if self._on_call is not None:
            self._on_call()

    def identify_user(self, user_id: str, other_info: Any = None) -> None:
        self._record("identify_user", user_id, other_info)

    def page(self, page_name: str, properties: Any = None) -> None:
        self._record("page", page_name, properties)

    def send_event(self, event_name: str, properties: Any = None) -> None:
        self._record("send_event", event_name, properties)

    def calls_to(self, method: str) -> list[tuple[Any, ...]]:
        return [call.args for call in self.calls if call.method == method]


class RecordingErrorClient(BaseErrorClient):
    """Error client that records calls for assertions."""

    def __init__(self, name: str = "recording_error") -> None:
        super().__init__(name)
        self.calls: list[Call] = []

    def identify_user(self, user_id: str, other_info: Any = None) -> None:
        self.calls.append(Call("identify_user", (user_id, other_info)))

    def track_error(
        self,
        message: str,
        error_info: Sequence[Any] | None = None,
        level: ErrorLogLevel | None = None,
    ) -> None:
        self.calls.append(Call("track_error", (message, error_info, level)))

    def calls_to(self, method: str) -> list[tuple[Any, ...]]:
        return [call.args for call in self.calls if call.method == method]


class FailingAnalyticsClient(BaseAnalyticsClient):
    """Analytics client whose capability methods always raise."""

    def __init__(self, name: str = "failing") -> None:
        super().__init__(name)
        self.attempts = 0

    def _fail(self) -> None:
        self.attempts += 1
        raise RuntimeError(f"Simulated vendor failure in {self.name}")

    def identify_user(self, user_id: str, other_info: Any = None) -> None:
        self._fail()

    def page(self, page_name: str, properties: Any = None) -> None:
        self._fail()

    def send_event(self, event_name: str, properties: Any = None) -> None:
        self._fail()


class Navigator:
    """Callable navigate() double that records destinations."""

    def __init__(self) -> None:
        self.visited: list[str] = []

    def __call__(self, url: str) -> None:
        self.visited.append(url)
