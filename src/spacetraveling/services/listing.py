"""Listing page: first page of posts plus incremental "load more" pagination."""

from __future__ import annotations

import logging
import threading
from typing import List

from spacetraveling.config import BlogConfig
from spacetraveling.models import PostPagination, PostSummary
from spacetraveling.services.mapper import to_pagination
from spacetraveling.services.prismic import PrismicClient, at
from spacetraveling.templates import (
    BASE_STYLE,
    HEADER_HTML,
    HOME_HTML,
    LOAD_MORE_HTML,
    LOAD_MORE_TEXT,
    escape,
    fill,
    render_post_items,
)

__all__ = ["ListingPageController", "ListingSession", "PaginationInProgress"]

logger = logging.getLogger(__name__)


class PaginationInProgress(RuntimeError):
    """Raised when ``load_more`` is triggered while a fetch is still running."""


class ListingSession:
    """Accumulated posts and the cursor of the next page for one visitor."""

    def __init__(self, client: PrismicClient, pagination: PostPagination) -> None:
        self._client = client
        self.posts: List[PostSummary] = list(pagination.results)
        self.next_page: str | None = pagination.next_page
        self._in_flight = threading.Lock()

    @property
    def has_more(self) -> bool:
        return bool(self.next_page)

    def load_more(self) -> List[PostSummary]:
        """Fetch the next page and append its posts.

        Returns the appended posts, or an empty list without any request when
        the listing is exhausted. Errors from the client propagate and leave
        ``posts`` and ``next_page`` untouched. Posts are appended in fetch
        order; uids repeated across pages are kept.
        """

        if not self.has_more:
            return []

        if not self._in_flight.acquire(blocking=False):
            raise PaginationInProgress("A page is already being fetched for this listing")

        try:
            payload = self._client.fetch_page(self.next_page)
            page = to_pagination(payload)
        finally:
            self._in_flight.release()

        self.next_page = page.next_page
        self.posts.extend(page.results)
        logger.info("Loaded %d more posts (more available: %s)", len(page.results), self.has_more)
        return page.results


class ListingPageController:
    """Build, paginate and render the home page listing."""

    def __init__(self, client: PrismicClient, config: BlogConfig | None = None) -> None:
        self._client = client
        self._config = config or client.config

    def get_static_props(self) -> PostPagination:
        """Return the first page of posts used to seed the listing."""

        payload = self._client.query(
            [at("document.type", self._config.document_type)],
            fetch=self._config.fetch_fields,
            page_size=self._config.page_size,
            page=1,
        )
        return to_pagination(payload)

    def session(self, pagination: PostPagination | None = None) -> ListingSession:
        return ListingSession(self._client, pagination or self.get_static_props())

    def render_items(self, posts: List[PostSummary]) -> str:
        return render_post_items(posts, self._config.locale)

    def render(self, session: ListingSession) -> str:
        """Render the listing; the load-more control only appears when a cursor remains."""

        load_more = ""
        if session.has_more:
            load_more = fill(
                LOAD_MORE_HTML,
                cursor=escape(session.next_page),
                endpoint=escape(self._config.load_more_endpoint),
                label=LOAD_MORE_TEXT,
            )

        return fill(
            HOME_HTML,
            lang=escape(self._config.locale),
            site_name=escape(self._config.site_name),
            base_style=BASE_STYLE,
            header=HEADER_HTML,
            posts=self.render_items(session.posts),
            load_more=load_more,
        )
