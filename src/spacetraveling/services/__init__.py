"""Service layer entry points for spacetraveling."""

from __future__ import annotations

from .listing import ListingPageController, ListingSession, PaginationInProgress  # noqa: F401
from .post import PostPageController, reading_time  # noqa: F401
from .prismic import PrismicClient  # noqa: F401
from .static_site import StaticSiteBuilder  # noqa: F401

__all__ = [
    "ListingPageController",
    "ListingSession",
    "PaginationInProgress",
    "PostPageController",
    "PrismicClient",
    "StaticSiteBuilder",
    "reading_time",
]
