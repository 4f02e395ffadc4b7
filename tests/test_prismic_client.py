from __future__ import annotations

from types import SimpleNamespace

import pytest
import requests

from spacetraveling.config import BlogConfig
from spacetraveling.services.prismic import (
    MASTER_REF_TTL_SECONDS,
    DocumentNotFoundError,
    MalformedResponseError,
    PrismicClient,
    at,
)

API = "https://blog.cdn.prismic.io/api/v2"
SEARCH = f"{API}/documents/search"


class DummyResponse:
    def __init__(self, payload=None, status_code: int = 200, invalid_json: bool = False) -> None:
        self._payload = payload
        self.status_code = status_code
        self._invalid_json = invalid_json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"status {self.status_code}")

    def json(self):
        if self._invalid_json:
            raise ValueError("not json")
        return self._payload


API_INFO = DummyResponse({"refs": [{"id": "master", "ref": "YF-master", "isMasterRef": True}]})


def _client(handler, **config_overrides) -> tuple[PrismicClient, list]:
    calls: list = []

    def fake_get(url, params=None, timeout=None):
        calls.append((url, params, timeout))
        if url == API:
            return API_INFO
        return handler(url, params)

    config = BlogConfig(api_endpoint=API, **config_overrides)
    session = SimpleNamespace(get=fake_get, headers={})
    return PrismicClient(config, session=session), calls


def test_at_predicate_quotes_value() -> None:
    assert at("document.type", "publicationspace") == '[at(document.type, "publicationspace")]'
    assert at("my.post.uid", 'say "hi"') == '[at(my.post.uid, "say \\"hi\\"")]'


def test_query_sends_predicates_and_paging() -> None:
    client, calls = _client(
        lambda url, params: DummyResponse({"results": [], "next_page": None}),
        access_token="token",
    )

    client.query(
        [at("document.type", "publicationspace")],
        fetch=["publicationspace.title", "publicationspace.author"],
        page_size=1,
        page=1,
    )

    url, params, timeout = calls[-1]
    assert url == SEARCH
    assert params["ref"] == "YF-master"
    assert params["q"] == '[[at(document.type, "publicationspace")]]'
    assert params["fetch"] == "publicationspace.title,publicationspace.author"
    assert params["pageSize"] == 1
    assert params["page"] == 1
    assert params["access_token"] == "token"
    assert timeout == (10, 60)


def test_query_uses_newly_published_master_ref() -> None:
    now = [0.0]
    master = ["ref-1"]
    sent_refs: list[str] = []

    def fake_get(url, params=None, timeout=None):
        if url == API:
            return DummyResponse({"refs": [{"id": "master", "ref": master[0], "isMasterRef": True}]})
        sent_refs.append(params["ref"])
        return DummyResponse({"results": []})

    session = SimpleNamespace(get=fake_get, headers={})
    client = PrismicClient(BlogConfig(api_endpoint=API), session=session, clock=lambda: now[0])

    client.query([at("document.type", "publicationspace")])
    master[0] = "ref-2"
    now[0] += MASTER_REF_TTL_SECONDS
    client.query([at("document.type", "publicationspace")])

    assert sent_refs == ["ref-1", "ref-2"]


def test_master_ref_is_reused_within_ttl() -> None:
    client, calls = _client(lambda url, params: DummyResponse({"results": []}))

    client.query([at("document.type", "publicationspace")])
    client.query([at("document.type", "publicationspace")])

    assert [url for url, _, _ in calls].count(API) == 1


def test_get_by_uid_returns_first_match() -> None:
    document = {"uid": "hello", "data": {"title": "Hello"}}
    client, calls = _client(lambda url, params: DummyResponse({"results": [document]}))

    assert client.get_by_uid("publicationspace", "hello") == document
    assert calls[-1][1]["q"] == '[[at(my.publicationspace.uid, "hello")]]'


def test_get_by_uid_raises_when_missing() -> None:
    client, _ = _client(lambda url, params: DummyResponse({"results": []}))

    with pytest.raises(DocumentNotFoundError) as excinfo:
        client.get_by_uid("publicationspace", "ghost")

    assert excinfo.value.uid == "ghost"


def test_fetch_page_rejects_malformed_payload() -> None:
    client, _ = _client(lambda url, params: DummyResponse({"items": []}))

    with pytest.raises(MalformedResponseError):
        client.fetch_page(f"{SEARCH}?page=2")


def test_fetch_page_rejects_non_json_body() -> None:
    client, _ = _client(lambda url, params: DummyResponse(invalid_json=True))

    with pytest.raises(MalformedResponseError):
        client.fetch_page(f"{SEARCH}?page=2")


def test_fetch_page_propagates_http_errors() -> None:
    client, _ = _client(lambda url, params: DummyResponse(status_code=503))

    with pytest.raises(requests.HTTPError):
        client.fetch_page(f"{SEARCH}?page=2")


def test_iter_documents_walks_every_page() -> None:
    pages = {
        SEARCH: DummyResponse({"results": [{"uid": "a"}, {"uid": "b"}], "next_page": f"{SEARCH}?page=2"}),
        f"{SEARCH}?page=2": DummyResponse({"results": [{"uid": "c"}], "next_page": None}),
    }
    client, _ = _client(lambda url, params: pages[url])

    uids = [document["uid"] for document in client.iter_documents([at("document.type", "publicationspace")])]

    assert uids == ["a", "b", "c"]
