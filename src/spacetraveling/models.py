"""View models rendered by the listing and post pages."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class PostSummary(BaseModel):
    """Listing entry for a single post."""

    uid: Optional[str] = None
    first_publication_date: Optional[str] = None
    title: Optional[str] = None
    subtitle: Optional[str] = None
    author: Optional[str] = None


class PostPagination(BaseModel):
    """One page of listing entries plus the cursor of the following page."""

    results: List[PostSummary] = Field(default_factory=list)
    next_page: Optional[str] = None


class RichTextSpan(BaseModel):
    start: int = 0
    end: int = 0
    type: str = ""
    data: Dict[str, Any] = Field(default_factory=dict)


class RichTextNode(BaseModel):
    """A rich-text block such as a paragraph, heading or list item."""

    type: str = "paragraph"
    text: Optional[str] = ""
    spans: List[RichTextSpan] = Field(default_factory=list)
    url: Optional[str] = None
    alt: Optional[str] = None


class ContentBlock(BaseModel):
    """Named section of a post: a heading followed by rich-text paragraphs."""

    heading: Optional[str] = None
    body: List[RichTextNode] = Field(default_factory=list)


class Banner(BaseModel):
    url: Optional[str] = None


class PostDetail(BaseModel):
    """Full post as shown on its own page."""

    uid: Optional[str] = None
    first_publication_date: Optional[str] = None
    title: Optional[str] = None
    subtitle: Optional[str] = None
    author: Optional[str] = None
    banner: Optional[Banner] = None
    content: List[ContentBlock] = Field(default_factory=list)
