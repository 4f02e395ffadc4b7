"""Project raw CMS documents onto the listing and post view models."""

from __future__ import annotations

from typing import Any, Dict, Mapping

from spacetraveling.models import Banner, ContentBlock, PostDetail, PostPagination, PostSummary

__all__ = ["to_detail", "to_pagination", "to_summary"]


def _data(document: Mapping[str, Any]) -> Dict[str, Any]:
    data = document.get("data")
    return data if isinstance(data, dict) else {}


def to_summary(document: Mapping[str, Any]) -> PostSummary:
    """Copy the listing fields of ``document``; absent fields stay ``None``."""

    data = _data(document)
    return PostSummary(
        uid=document.get("uid"),
        first_publication_date=document.get("first_publication_date"),
        title=data.get("title"),
        subtitle=data.get("subtitle"),
        author=data.get("author"),
    )


def to_detail(document: Mapping[str, Any]) -> PostDetail:
    """Copy the fields rendered on the post page."""

    data = _data(document)
    banner = data.get("banner")
    content = data.get("content") or []

    return PostDetail(
        uid=document.get("uid"),
        first_publication_date=document.get("first_publication_date"),
        title=data.get("title"),
        subtitle=data.get("subtitle"),
        author=data.get("author"),
        banner=Banner(url=banner.get("url")) if isinstance(banner, dict) else None,
        content=[
            ContentBlock(heading=block.get("heading"), body=list(block.get("body") or []))
            for block in content
            if isinstance(block, dict)
        ],
    )


def to_pagination(payload: Mapping[str, Any]) -> PostPagination:
    """Map a page result (``results`` and ``next_page``) to listing entries."""

    return PostPagination(
        results=[to_summary(document) for document in payload.get("results") or []],
        next_page=payload.get("next_page"),
    )
