"""FastAPI application serving the blog pages."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse

from spacetraveling.api.routes import UPSTREAM_ERRORS, BlogServices, router
from spacetraveling.config import BlogConfig
from spacetraveling.services.prismic import DocumentNotFoundError, PrismicClient
from spacetraveling.services.static_site import HOME_ROUTE, post_route

logger = logging.getLogger(__name__)


def regenerate_post(services: BlogServices, uid: str) -> None:
    """Generate ``/post/{uid}`` and store it in the page cache.

    Runs as a background task after the caller claimed the route with
    :meth:`PageCache.begin_generation`. When the CMS is unreachable the previous
    page, if any, keeps being served.
    """

    route = post_route(uid)
    try:
        try:
            props = services.posts.get_static_props(uid)
        except DocumentNotFoundError:
            logger.info("No post with uid %s; caching not found page", uid)
            services.cache.put(
                route,
                services.posts.render_not_found(),
                status_code=404,
                revalidate=services.config.revalidate_seconds,
            )
            return
        except UPSTREAM_ERRORS:
            logger.exception("Failed to generate %s", route)
            return

        services.cache.put(route, services.posts.render(props), revalidate=props.revalidate)
        logger.info("Generated %s", route)
    finally:
        services.cache.end_generation(route)


def create_app(
    config: BlogConfig | None = None,
    client: PrismicClient | None = None,
    *,
    prerender: bool = False,
) -> FastAPI:
    """Create the application.

    ``prerender`` generates the listing and every known post at startup, the
    way a build would; otherwise pages are generated on first request.
    """

    services = BlogServices.create(config or BlogConfig.from_env(), client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if prerender:
            count = await run_in_threadpool(
                services.builder.prime, services.cache, revalidate=services.config.revalidate_seconds
            )
            logger.info("Pre-rendered %d pages", count)
        yield

    app = FastAPI(title="spacetraveling", description="Blog pages rendered from Prismic", lifespan=lifespan)
    app.state.services = services
    app.include_router(router, prefix="/api")

    @app.get("/", response_class=HTMLResponse)
    async def index() -> HTMLResponse:
        cached = services.cache.get(HOME_ROUTE)
        if cached is not None:
            return HTMLResponse(cached.html, status_code=cached.status_code)

        try:
            session = await run_in_threadpool(services.listing.session)
        except UPSTREAM_ERRORS as exc:
            logger.exception("Failed to generate the listing page")
            raise HTTPException(status_code=502, detail="Could not load posts.") from exc

        page = services.cache.put(HOME_ROUTE, services.listing.render(session))
        return HTMLResponse(page.html, status_code=page.status_code)

    @app.get("/post/{uid}", response_class=HTMLResponse)
    async def post(uid: str, background_tasks: BackgroundTasks) -> HTMLResponse:
        route = post_route(uid)
        cached = services.cache.get(route)

        if cached is not None:
            if services.cache.is_stale(cached) and services.cache.begin_generation(route):
                logger.info("Revalidating %s in the background", route)
                background_tasks.add_task(regenerate_post, services, uid)
            return HTMLResponse(cached.html, status_code=cached.status_code)

        if services.cache.begin_generation(route):
            background_tasks.add_task(regenerate_post, services, uid)
        return HTMLResponse(services.posts.render_fallback())

    return app
