"""Shared test doubles for the quiz test-suite."""

from __future__ import annotations

from typing import Any, Callable, Optional

import requests

from timed_quiz.quiz.models import SourceRecord

__all__ = [
    "FakeHttpSession",
    "FakeResponse",
    "FakeScheduler",
    "FakeTimer",
    "make_payload",
    "make_records",
]


def make_records(count: int) -> list[SourceRecord]:
    """Build records whose four option candidates are all distinct."""

    return [
        SourceRecord(
            id=index + 1,
            primary_text=f"title {index} alpha beta gamma delta epsilon",
            secondary_text=(
                f"body {index} one two three four five six seven eight "
                "nine ten eleven"
            ),
        )
        for index in range(count)
    ]


def make_payload(count: int) -> list[dict[str, Any]]:
    return [
        {
            "userId": 1,
            "id": record.id,
            "title": record.primary_text,
            "body": record.secondary_text,
        }
        for record in make_records(count)
    ]


class FakeTimer:
    def __init__(self, interval: float, callback: Callable[[], None]) -> None:
        self.interval = interval
        self.callback = callback
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            if self.stopped:
                return
            self.callback()


class FakeScheduler:
    """Scheduler double that records the timers it hands out."""

    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def __call__(
        self, interval: float, callback: Callable[[], None]
    ) -> FakeTimer:
        timer = FakeTimer(interval, callback)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> FakeTimer:
        return self.timers[-1]


class FakeResponse:
    def __init__(
        self,
        payload: Any = None,
        *,
        status_code: int = 200,
        json_error: Optional[Exception] = None,
    ) -> None:
        self.payload = payload
        self.status_code = status_code
        self.json_error = json_error

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> Any:
        if self.json_error is not None:
            raise self.json_error
        return self.payload


class FakeHttpSession:
    def __init__(
        self,
        response: Optional[FakeResponse] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.response = response
        self.error = error
        self.calls: list[tuple[str, float]] = []

    def get(self, url: str, timeout: float) -> FakeResponse:
        self.calls.append((url, timeout))
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response
