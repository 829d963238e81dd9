from __future__ import annotations

import pytest
import requests

from fixtures import FakeHttpSession, FakeResponse, make_payload, make_records

from timed_quiz.quiz.errors import SourceUnavailableError
from timed_quiz.quiz.models import SourceRecord
from timed_quiz.quiz.source import (
    DEFAULT_SOURCE_URL,
    FieldMap,
    HttpQuestionSource,
    StaticQuestionSource,
    parse_records,
)


def test_parse_records_maps_default_fields():
    records = parse_records(make_payload(2))

    assert records == make_records(2)


def test_parse_records_accepts_numeric_string_ids_and_custom_fields():
    payload = [{"pk": "7", "question": "Q", "text": "some body text"}]

    records = parse_records(
        payload, FieldMap(id="pk", primary="question", secondary="text")
    )

    assert records == [
        SourceRecord(id=7, primary_text="Q", secondary_text="some body text")
    ]


@pytest.mark.parametrize(
    "payload",
    [
        {"id": 1},
        ["not an object"],
        [{"title": "t", "body": "b"}],
        [{"id": "abc", "title": "t", "body": "b"}],
        [{"id": True, "title": "t", "body": "b"}],
        [{"id": 1, "title": None, "body": "b"}],
        [{"id": 1, "title": "t"}],
    ],
)
def test_parse_records_rejects_malformed_payloads(payload):
    with pytest.raises(SourceUnavailableError):
        parse_records(payload)


def test_parse_records_rejects_repeated_ids():
    payload = make_payload(2)
    payload[1]["id"] = payload[0]["id"]

    with pytest.raises(SourceUnavailableError, match="repeats id 1"):
        parse_records(payload)


def test_http_source_fetches_and_parses():
    session = FakeHttpSession(FakeResponse(make_payload(3)))
    source = HttpQuestionSource(timeout=2.5, session=session)

    records = source.fetch()

    assert [record.id for record in records] == [1, 2, 3]
    assert session.calls == [(DEFAULT_SOURCE_URL, 2.5)]


def test_http_source_is_idempotent():
    session = FakeHttpSession(FakeResponse(make_payload(2)))
    source = HttpQuestionSource(session=session)

    assert source.fetch() == source.fetch()


@pytest.mark.parametrize(
    "session",
    [
        FakeHttpSession(error=requests.ConnectionError("offline")),
        FakeHttpSession(error=requests.Timeout("slow")),
        FakeHttpSession(FakeResponse([], status_code=503)),
        FakeHttpSession(FakeResponse(json_error=ValueError("bad json"))),
    ],
)
def test_http_source_failures_raise_source_unavailable(session):
    source = HttpQuestionSource(url="https://example.invalid/q", session=session)

    with pytest.raises(SourceUnavailableError):
        source.fetch()


def test_static_source_returns_copies():
    records = make_records(2)
    source = StaticQuestionSource(records)

    fetched = source.fetch()
    fetched.clear()

    assert source.fetch() == records
