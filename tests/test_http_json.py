from __future__ import annotations

import json
import time
from urllib.parse import urlsplit

import pytest
import requests

from cep_race.errors import ParseError, SourceError, TransportError
from cep_race.race import race
from cep_race.sources.base import SourceDescriptor
from cep_race.sources.http_json import USER_AGENT, fetch_json
from cep_race.validation import LookupKey

ENDPOINT = "https://viacep.com.br/ws/01310-100/json/"


class FakeResponse:
    def __init__(self, content: bytes, status_code: int = 200):
        self.content = content
        self.status_code = status_code


class FakeSession:
    def __init__(self, response: FakeResponse | None = None, exc: Exception | None = None):
        self.response = response
        self.exc = exc
        self.calls: list[dict] = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return self.response


def test_fetch_returns_json_object():
    doc = {"cep": "01310-100", "logradouro": "Avenida Paulista", "ibge": 3550308, "gia": None}
    session = FakeSession(FakeResponse(json.dumps(doc).encode("utf-8")))

    assert fetch_json(ENDPOINT, session=session, timeout_seconds=2.5) == doc
    assert session.calls == [{"url": ENDPOINT, "headers": {"User-Agent": USER_AGENT}, "timeout": 2.5}]


def test_fetch_keeps_nested_values():
    doc = {"a": {"b": [1, 2.5, True, None, "x"]}}
    session = FakeSession(FakeResponse(json.dumps(doc).encode("utf-8")))
    assert fetch_json(ENDPOINT, session=session) == doc


@pytest.mark.parametrize("body", [b"[1, 2, 3]", b'"text"', b"42", b"null"])
def test_non_object_body_is_a_parse_error(body):
    session = FakeSession(FakeResponse(body))
    with pytest.raises(ParseError) as excinfo:
        fetch_json(ENDPOINT, session=session)
    assert not isinstance(excinfo.value, TransportError)
    assert excinfo.value.source_id == "viacep.com.br"


@pytest.mark.parametrize("body", [b"<html>not found</html>", b"", b"{'cep': 1}", b"\xff\xfe\x00"])
def test_invalid_json_is_a_parse_error(body):
    session = FakeSession(FakeResponse(body))
    with pytest.raises(ParseError) as excinfo:
        fetch_json(ENDPOINT, session=session)
    assert excinfo.value.code == "PARSE_ERROR"
    assert excinfo.value.http_status == 200


@pytest.mark.parametrize(
    "exc",
    [
        requests.ConnectionError("connection refused"),
        requests.Timeout("read timed out"),
        requests.exceptions.ChunkedEncodingError("broken body"),
    ],
)
def test_connection_failures_are_transport_errors(exc):
    session = FakeSession(exc=exc)
    with pytest.raises(TransportError) as excinfo:
        fetch_json(ENDPOINT, session=session)
    assert not isinstance(excinfo.value, ParseError)
    assert excinfo.value.__cause__ is exc


def test_http_error_status_is_a_transport_error():
    session = FakeSession(FakeResponse(b'{"erro": true}', status_code=503))
    with pytest.raises(TransportError) as excinfo:
        fetch_json(ENDPOINT, session=session)
    assert excinfo.value.http_status == 503
    assert excinfo.value.to_dict()["code"] == "TRANSPORT_ERROR"


def test_unbuildable_request_is_a_transport_error():
    with pytest.raises(TransportError) as excinfo:
        fetch_json("not-a-url/01310-100")
    assert isinstance(excinfo.value, SourceError)


DEEP_ARRAY = b"[" * 200000 + b"]" * 200000


def test_deeply_nested_body_is_a_parse_error():
    session = FakeSession(FakeResponse(DEEP_ARRAY))
    with pytest.raises(ParseError):
        fetch_json(ENDPOINT, session=session)


@pytest.mark.parametrize("body", [b'{"lat": NaN}', b'{"lat": Infinity}', b'{"lat": -Infinity}'])
def test_non_standard_constants_are_parse_errors(body):
    session = FakeSession(FakeResponse(body))
    with pytest.raises(ParseError):
        fetch_json(ENDPOINT, session=session)


def test_deeply_nested_body_only_loses_that_source():
    slow_doc = {"cep": "01310-100"}
    sources = (
        SourceDescriptor(name="A", url_template="http://a.test/{cep}"),
        SourceDescriptor(name="B", url_template="http://b.test/{cep}"),
    )

    def fetch(endpoint: str):
        if urlsplit(endpoint).netloc == "a.test":
            return fetch_json(endpoint, session=FakeSession(FakeResponse(DEEP_ARRAY)))
        time.sleep(0.2)
        return slow_doc

    outcome = race(LookupKey("01310-100"), sources, 1.0, fetch=fetch)

    assert outcome.winner == sources[1]
    assert outcome.result is slow_doc
    assert isinstance(outcome.failures["A"], ParseError)
    assert outcome.failures["A"].source_id == "A"


def test_renamed_error_keeps_its_cause():
    exc = requests.ConnectionError("connection refused")
    session = FakeSession(exc=exc)
    with pytest.raises(TransportError) as excinfo:
        fetch_json(ENDPOINT, session=session)

    renamed = excinfo.value.for_source("ViaCep")

    assert renamed.source_id == "ViaCep"
    assert type(renamed) is TransportError
    assert renamed.message == excinfo.value.message
    assert renamed.__cause__ is exc
    assert excinfo.value.for_source("viacep.com.br") is excinfo.value
