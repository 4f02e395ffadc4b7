"""Post page: static paths, props, reading time and rendering."""

from __future__ import annotations

import logging
import math
from typing import Iterable, List

from pydantic import BaseModel, Field

from spacetraveling.config import BlogConfig
from spacetraveling.models import ContentBlock, PostDetail
from spacetraveling.services.dates import format_publication_date
from spacetraveling.services.mapper import to_detail
from spacetraveling.services.prismic import PrismicClient, at
from spacetraveling.services.richtext import as_html, as_text
from spacetraveling.templates import (
    BASE_STYLE,
    CONTENT_BLOCK_HTML,
    FALLBACK_HTML,
    FALLBACK_TEXT,
    HEADER_HTML,
    NOT_FOUND_HTML,
    POST_HTML,
    escape,
    fill,
)

__all__ = [
    "PostPageController",
    "PostPageProps",
    "StaticPaths",
    "WORDS_PER_MINUTE",
    "reading_time",
]

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200
FALLBACK_REFRESH_SECONDS = 2


def reading_time(content: Iterable[ContentBlock], words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """Return the estimated reading time of ``content`` in whole minutes.

    Headings and the plain text of every body are split on whitespace; blocks
    without a heading add no heading words. Partial minutes round up.
    """

    blocks = list(content)
    heading_words = sum(len(block.heading.split()) for block in blocks if block.heading)
    body = as_text(node for block in blocks for node in block.body)
    body_words = len(body.split())
    return math.ceil((body_words + heading_words) / words_per_minute)


class StaticPaths(BaseModel):
    """Known post uids to pre-render; ``fallback`` allows rendering others on demand."""

    paths: List[str] = Field(default_factory=list)
    fallback: bool = True


class PostPageProps(BaseModel):
    post: PostDetail
    reading_time: int
    revalidate: int


class PostPageController:
    """Fetch and render individual posts."""

    def __init__(self, client: PrismicClient, config: BlogConfig | None = None) -> None:
        self._client = client
        self._config = config or client.config

    def get_static_paths(self) -> StaticPaths:
        documents = self._client.iter_documents([at("document.type", self._config.document_type)])
        uids = [str(document["uid"]) for document in documents if document.get("uid")]
        logger.info("Discovered %d post paths", len(uids))
        return StaticPaths(paths=uids, fallback=True)

    def get_static_props(self, uid: str) -> PostPageProps:
        """Load the post ``uid``; :class:`DocumentNotFoundError` propagates."""

        document = self._client.get_by_uid(self._config.document_type, uid)
        post = to_detail(document)
        return PostPageProps(
            post=post,
            reading_time=reading_time(post.content, self._config.words_per_minute),
            revalidate=self._config.revalidate_seconds,
        )

    def render(self, props: PostPageProps) -> str:
        post = props.post
        blocks = "".join(
            fill(CONTENT_BLOCK_HTML, heading=escape(block.heading), body=as_html(block.body))
            for block in post.content
        )

        return fill(
            POST_HTML,
            lang=escape(self._config.locale),
            site_name=escape(self._config.site_name),
            base_style=BASE_STYLE,
            header=HEADER_HTML,
            title=escape(post.title),
            banner=escape(post.banner.url if post.banner else None),
            date=escape(format_publication_date(post.first_publication_date, self._config.locale)),
            author=escape(post.author),
            reading_time=props.reading_time,
            content=blocks,
        )

    def render_fallback(self) -> str:
        """Placeholder shown while a post that was not pre-rendered is generated."""

        return fill(
            FALLBACK_HTML,
            lang=escape(self._config.locale),
            site_name=escape(self._config.site_name),
            refresh=FALLBACK_REFRESH_SECONDS,
            text=FALLBACK_TEXT,
        )

    def render_not_found(self) -> str:
        return fill(
            NOT_FOUND_HTML,
            lang=escape(self._config.locale),
            site_name=escape(self._config.site_name),
            base_style=BASE_STYLE,
            header=HEADER_HTML,
        )
