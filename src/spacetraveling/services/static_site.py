"""Build-time generation of every known page."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Dict, List

from spacetraveling.services.listing import ListingPageController
from spacetraveling.services.page_cache import PageCache
from spacetraveling.services.post import PostPageController

__all__ = ["DEFAULT_EXPORT_ROOT", "HOME_ROUTE", "StaticSiteBuilder", "post_route", "route_to_file"]

logger = logging.getLogger(__name__)

HOME_ROUTE = "/"

#: Directory next to ``data/`` that receives the exported pages.
DEFAULT_EXPORT_ROOT = Path(__file__).resolve().parents[3] / "out"


def post_route(uid: str) -> str:
    return f"/post/{uid}"


def route_to_file(route: str) -> PurePosixPath:
    """Map a route such as ``/post/hello`` to ``post/hello/index.html``."""

    parts = [part for part in route.split("/") if part]
    if any(part in {".", ".."} for part in parts):
        raise ValueError(f"Route cannot be exported: {route!r}")
    return PurePosixPath(*parts, "index.html")


class StaticSiteBuilder:
    """Render the listing page and every known post.

    Any upstream failure aborts the build; no partial output is written.
    """

    def __init__(self, listing: ListingPageController, posts: PostPageController) -> None:
        self._listing = listing
        self._posts = posts

    def generate(self) -> Dict[str, str]:
        """Return the rendered HTML of every known route."""

        pages = {HOME_ROUTE: self._listing.render(self._listing.session())}

        for uid in self._posts.get_static_paths().paths:
            props = self._posts.get_static_props(uid)
            pages[post_route(uid)] = self._posts.render(props)
            logger.info("Rendered %s (%d min read)", post_route(uid), props.reading_time)

        return pages

    def build(self, export_root: Path | str | None = None) -> List[Path]:
        """Write every generated page below ``export_root`` and return the files."""

        pages = self.generate()
        root = Path(export_root) if export_root is not None else DEFAULT_EXPORT_ROOT

        written: List[Path] = []
        for route, html in pages.items():
            target = root / route_to_file(route)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(html, encoding="utf-8")
            written.append(target)

        logger.info("Wrote %d pages to %s", len(written), root)
        return written

    def prime(self, cache: PageCache, *, revalidate: int | None = None) -> int:
        """Seed ``cache`` with every generated page; post pages get ``revalidate``."""

        pages = self.generate()
        for route, html in pages.items():
            cache.put(route, html, revalidate=None if route == HOME_ROUTE else revalidate)
        return len(pages)
