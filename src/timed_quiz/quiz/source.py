"""Question sources that supply raw records for the bank builder."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

import requests

from .errors import SourceUnavailableError
from .models import SourceRecord

__all__ = [
    "DEFAULT_SOURCE_URL",
    "DEFAULT_TIMEOUT",
    "FieldMap",
    "QuestionSource",
    "HttpQuestionSource",
    "StaticQuestionSource",
    "parse_records",
]

DEFAULT_SOURCE_URL = "https://jsonplaceholder.typicode.com/posts"
DEFAULT_TIMEOUT = 10.0

logger = logging.getLogger(__name__)


class QuestionSource(Protocol):
    """Anything that can return an ordered list of raw records."""

    def fetch(self) -> list[SourceRecord]: ...


@dataclass(frozen=True)
class FieldMap:
    """Names of the JSON keys a payload item is read from."""

    id: str = "id"
    primary: str = "title"
    secondary: str = "body"


def parse_records(
    payload: Any, fields: FieldMap = FieldMap()
) -> list[SourceRecord]:
    """Normalize a decoded JSON payload into :class:`SourceRecord` values.

    The payload must be a list of objects. Each object needs a unique integer
    id and string primary/secondary fields; anything else is reported as
    :class:`SourceUnavailableError` because the source is unusable.
    """

    if not isinstance(payload, list):
        raise SourceUnavailableError(
            "Question source returned {0}, expected a list.".format(
                type(payload).__name__
            )
        )
    records: list[SourceRecord] = []
    seen: set[int] = set()
    for position, item in enumerate(payload):
        if not isinstance(item, Mapping):
            raise SourceUnavailableError(
                f"Record {position} is not an object."
            )
        record = _parse_item(item, position, fields)
        if record.id in seen:
            raise SourceUnavailableError(
                f"Record {position} repeats {fields.id} {record.id}."
            )
        seen.add(record.id)
        records.append(record)
    return records


def _parse_item(
    item: Mapping[str, Any], position: int, fields: FieldMap
) -> SourceRecord:
    raw_id = item.get(fields.id)
    if isinstance(raw_id, bool) or not isinstance(raw_id, (int, str)):
        raise SourceUnavailableError(
            f"Record {position} has no usable '{fields.id}' field."
        )
    try:
        identifier = int(raw_id)
    except ValueError as exc:
        raise SourceUnavailableError(
            f"Record {position} has a non-integer '{fields.id}': {raw_id!r}"
        ) from exc
    texts = []
    for key in (fields.primary, fields.secondary):
        value = item.get(key)
        if not isinstance(value, str):
            raise SourceUnavailableError(
                f"Record {position} is missing text field '{key}'."
            )
        texts.append(value)
    return SourceRecord(
        id=identifier, primary_text=texts[0], secondary_text=texts[1]
    )


@dataclass
class HttpQuestionSource:
    """Fetch records from a JSON endpoint with ``requests``."""

    url: str = DEFAULT_SOURCE_URL
    timeout: float = DEFAULT_TIMEOUT
    fields: FieldMap = field(default_factory=FieldMap)
    session: Optional[requests.Session] = None

    def fetch(self) -> list[SourceRecord]:
        client = self.session or requests
        logger.info("Fetching questions", extra={"url": self.url})
        try:
            response = client.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            logger.error(
                "Question source request failed",
                extra={"url": self.url, "error": str(exc)},
            )
            raise SourceUnavailableError(
                f"Could not fetch questions from {self.url}: {exc}"
            ) from exc
        except ValueError as exc:
            raise SourceUnavailableError(
                f"Question source at {self.url} did not return JSON."
            ) from exc
        records = parse_records(payload, self.fields)
        logger.info(
            "Fetched question records",
            extra={"url": self.url, "records": len(records)},
        )
        return records


class StaticQuestionSource:
    """In-memory source for offline play and tests."""

    def __init__(self, records: Iterable[SourceRecord]) -> None:
        self._records: Sequence[SourceRecord] = tuple(records)

    def fetch(self) -> list[SourceRecord]:
        return list(self._records)
