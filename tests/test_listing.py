from __future__ import annotations

import threading

import pytest
import requests
from bs4 import BeautifulSoup

from spacetraveling.config import BlogConfig
from spacetraveling.models import PostPagination, PostSummary
from spacetraveling.services.listing import ListingPageController, ListingSession, PaginationInProgress
from spacetraveling.services.prismic import MalformedResponseError

API = "https://blog.cdn.prismic.io/api/v2"
CURSOR_X = f"{API}/documents/search?page=2"
CURSOR_Y = f"{API}/documents/search?page=3"


def _document(uid: str) -> dict:
    return {
        "uid": uid,
        "first_publication_date": "2021-03-15T19:25:28+0000",
        "data": {"title": f"Title {uid}", "subtitle": f"Subtitle {uid}", "author": "Danilo Vieira"},
    }


class FakeClient:
    """Stands in for :class:`PrismicClient` with canned page results."""

    def __init__(self, first_page: dict | None = None, pages: dict | None = None) -> None:
        self.config = BlogConfig(api_endpoint=API)
        self.first_page = first_page or {"results": [], "next_page": None}
        self.pages = pages or {}
        self.queries: list = []
        self.fetched: list[str] = []

    def query(self, predicates, *, fetch=None, page_size=None, page=1):
        self.queries.append({"predicates": list(predicates), "fetch": fetch, "page_size": page_size, "page": page})
        return self.first_page

    def fetch_page(self, url):
        self.fetched.append(url)
        result = self.pages[url]
        if isinstance(result, Exception):
            raise result
        return result


def test_get_static_props_queries_first_page() -> None:
    client = FakeClient({"results": [_document("a")], "next_page": CURSOR_X})
    controller = ListingPageController(client)

    pagination = controller.get_static_props()

    assert [post.uid for post in pagination.results] == ["a"]
    assert pagination.next_page == CURSOR_X
    assert client.queries == [
        {
            "predicates": ['[at(document.type, "publicationspace")]'],
            "fetch": ["publicationspace.title", "publicationspace.subtitle", "publicationspace.author"],
            "page_size": 1,
            "page": 1,
        }
    ]


def test_load_more_appends_in_fetch_order() -> None:
    client = FakeClient(
        pages={
            CURSOR_X: {"results": [_document("b"), _document("c")], "next_page": CURSOR_Y},
            CURSOR_Y: {"results": [_document("d")], "next_page": None},
        }
    )
    session = ListingSession(client, PostPagination(results=[PostSummary(uid="a")], next_page=CURSOR_X))

    first = session.load_more()
    second = session.load_more()

    assert [post.uid for post in first] == ["b", "c"]
    assert [post.uid for post in second] == ["d"]
    assert [post.uid for post in session.posts] == ["a", "b", "c", "d"]
    assert session.next_page is None
    assert client.fetched == [CURSOR_X, CURSOR_Y]


def test_load_more_keeps_duplicate_uids() -> None:
    client = FakeClient(pages={CURSOR_X: {"results": [_document("a")], "next_page": None}})
    session = ListingSession(client, PostPagination(results=[PostSummary(uid="a")], next_page=CURSOR_X))

    session.load_more()

    assert [post.uid for post in session.posts] == ["a", "a"]


@pytest.mark.parametrize("cursor", [None, ""])
def test_load_more_without_cursor_is_a_no_op(cursor: str | None) -> None:
    client = FakeClient()
    session = ListingSession(client, PostPagination(results=[PostSummary(uid="a")], next_page=cursor))

    assert session.load_more() == []
    assert [post.uid for post in session.posts] == ["a"]
    assert client.fetched == []


@pytest.mark.parametrize(
    "error",
    [requests.ConnectionError("offline"), MalformedResponseError("no results")],
)
def test_load_more_failure_leaves_state_unchanged(error: Exception) -> None:
    client = FakeClient(pages={CURSOR_X: error})
    session = ListingSession(client, PostPagination(results=[PostSummary(uid="a")], next_page=CURSOR_X))

    with pytest.raises(type(error)):
        session.load_more()

    assert [post.uid for post in session.posts] == ["a"]
    assert session.next_page == CURSOR_X


def test_load_more_rejects_concurrent_trigger() -> None:
    started = threading.Event()
    release = threading.Event()

    class SlowClient(FakeClient):
        def fetch_page(self, url):
            started.set()
            release.wait(timeout=5)
            return {"results": [_document("b")], "next_page": None}

    session = ListingSession(SlowClient(), PostPagination(next_page=CURSOR_X))
    worker = threading.Thread(target=session.load_more)
    worker.start()
    assert started.wait(timeout=5)

    try:
        with pytest.raises(PaginationInProgress):
            session.load_more()
    finally:
        release.set()
        worker.join(timeout=5)

    assert [post.uid for post in session.posts] == ["b"]


def test_render_shows_load_more_until_exhausted() -> None:
    client = FakeClient(
        {"results": [_document("docA")], "next_page": CURSOR_X},
        pages={CURSOR_X: {"results": [_document("docB")], "next_page": None}},
    )
    controller = ListingPageController(client)
    session = controller.session()

    soup = BeautifulSoup(controller.render(session), "html.parser")
    assert [anchor["data-uid"] for anchor in soup.select("#post-list a")] == ["docA"]
    button = soup.find("button", id="load-more")
    assert button is not None
    assert button["data-cursor"] == CURSOR_X
    assert button.get_text() == "Carregar mais posts"

    session.load_more()

    soup = BeautifulSoup(controller.render(session), "html.parser")
    assert [anchor["data-uid"] for anchor in soup.select("#post-list a")] == ["docA", "docB"]
    assert soup.find("button", id="load-more") is None


def test_render_formats_entries() -> None:
    client = FakeClient({"results": [_document("a")], "next_page": None})
    controller = ListingPageController(client)

    soup = BeautifulSoup(controller.render(controller.session()), "html.parser")
    entry = soup.select_one("#post-list a")

    assert entry["href"] == "/post/a"
    assert entry.strong.get_text() == "Title a"
    assert entry.p.get_text() == "Subtitle a"
    assert entry.time.get_text() == "15 mar 2021"
    assert "Danilo Vieira" in entry.get_text()


def test_render_hides_load_more_for_empty_cursor() -> None:
    client = FakeClient({"results": [_document("a")], "next_page": ""})
    controller = ListingPageController(client)

    soup = BeautifulSoup(controller.render(controller.session()), "html.parser")

    assert soup.find("button", id="load-more") is None
