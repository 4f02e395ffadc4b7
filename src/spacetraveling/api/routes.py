"""JSON API routes backing the listing page's incremental pagination."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

import requests
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from spacetraveling.config import BlogConfig
from spacetraveling.models import PostDetail, PostPagination, PostSummary
from spacetraveling.services.listing import ListingPageController, ListingSession
from spacetraveling.services.page_cache import PageCache
from spacetraveling.services.post import PostPageController
from spacetraveling.services.prismic import ContentClientError, DocumentNotFoundError, PrismicClient
from spacetraveling.services.static_site import StaticSiteBuilder

logger = logging.getLogger(__name__)

router = APIRouter()

UPSTREAM_ERRORS = (requests.RequestException, ContentClientError)


@dataclass
class BlogServices:
    """Objects shared by every request, created once per application."""

    config: BlogConfig
    client: PrismicClient
    listing: ListingPageController
    posts: PostPageController
    cache: PageCache
    builder: StaticSiteBuilder

    @classmethod
    def create(cls, config: BlogConfig, client: PrismicClient | None = None) -> "BlogServices":
        client = client or PrismicClient(config)
        listing = ListingPageController(client, config)
        posts = PostPageController(client, config)
        return cls(
            config=config,
            client=client,
            listing=listing,
            posts=posts,
            cache=PageCache(),
            builder=StaticSiteBuilder(listing, posts),
        )


def get_services(request: Request) -> BlogServices:
    return request.app.state.services


class LoadMoreRequest(BaseModel):
    cursor: str = Field(..., min_length=1, description="next_page URL returned with the previous page")


class LoadMoreResponse(BaseModel):
    results: List[PostSummary] = Field(default_factory=list)
    next_page: str | None = None
    html: str = ""


class PostResponse(BaseModel):
    post: PostDetail
    reading_time: int


@router.get("/posts", response_model=PostPagination)
async def list_posts(services: BlogServices = Depends(get_services)) -> PostPagination:
    """Return the first listing page."""

    try:
        return await run_in_threadpool(services.listing.get_static_props)
    except UPSTREAM_ERRORS as exc:
        logger.exception("Failed to query the first page of posts")
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@router.post("/posts/more", response_model=LoadMoreResponse)
async def load_more_posts(
    payload: LoadMoreRequest, services: BlogServices = Depends(get_services)
) -> LoadMoreResponse:
    """Fetch the page behind ``cursor`` and return its posts plus rendered markup."""

    if not payload.cursor.startswith(services.config.api_root + "/"):
        raise HTTPException(status_code=400, detail="Cursor does not point at the configured repository.")

    session = ListingSession(services.client, PostPagination(next_page=payload.cursor))
    try:
        appended = await run_in_threadpool(session.load_more)
    except UPSTREAM_ERRORS as exc:
        logger.exception("Failed to load more posts from %s", payload.cursor)
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return LoadMoreResponse(
        results=appended,
        next_page=session.next_page,
        html=services.listing.render_items(appended),
    )


@router.get("/posts/{uid}", response_model=PostResponse)
async def retrieve_post(uid: str, services: BlogServices = Depends(get_services)) -> PostResponse:
    """Return a single post with its reading time."""

    try:
        props = await run_in_threadpool(services.posts.get_static_props, uid)
    except DocumentNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except UPSTREAM_ERRORS as exc:
        logger.exception("Failed to load post %s", uid)
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    return PostResponse(post=props.post, reading_time=props.reading_time)
