"""Render Prismic rich-text fields to plain text and to sanitised HTML."""

from __future__ import annotations

import html
from itertools import groupby
from typing import Iterable, List, Sequence
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from spacetraveling.models import RichTextNode, RichTextSpan

__all__ = ["as_html", "as_text", "sanitize_html"]

ALLOWED_TAGS = {
    "p",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "pre",
    "ul",
    "ol",
    "li",
    "strong",
    "em",
    "b",
    "i",
    "u",
    "blockquote",
    "br",
    "hr",
    "span",
    "div",
    "a",
    "img",
}
DROPPED_TAGS = ["script", "style", "iframe", "object", "embed", "noscript", "template"]
ALLOWED_ATTRIBUTES = {
    "a": {"href", "target", "rel"},
    "img": {"src", "alt"},
    "p": {"class"},
    "span": {"class"},
}
SAFE_SCHEMES = {"", "http", "https", "mailto"}

_BLOCK_TAGS = {
    "paragraph": "p",
    "preformatted": "pre",
    "heading1": "h1",
    "heading2": "h2",
    "heading3": "h3",
    "heading4": "h4",
    "heading5": "h5",
    "heading6": "h6",
}
_LIST_TAGS = {"list-item": "ul", "o-list-item": "ol"}


def as_text(nodes: Iterable[RichTextNode], separator: str = " ") -> str:
    """Return the text of ``nodes`` joined by ``separator``."""

    return separator.join(node.text or "" for node in nodes)


def _open_tag(span: RichTextSpan) -> str:
    if span.type == "strong":
        return "<strong>"
    if span.type == "em":
        return "<em>"
    if span.type == "hyperlink":
        url = html.escape(str(span.data.get("url") or ""), quote=True)
        target = span.data.get("target")
        target_attr = f' target="{html.escape(str(target), quote=True)}"' if target else ""
        return f'<a href="{url}"{target_attr}>'
    label = html.escape(str(span.data.get("label") or span.type), quote=True)
    return f'<span class="{label}">'


def _close_tag(span: RichTextSpan) -> str:
    if span.type in {"strong", "em"}:
        return f"</{span.type}>"
    if span.type == "hyperlink":
        return "</a>"
    return "</span>"


def _escape_segment(segment: str) -> str:
    return html.escape(segment, quote=False).replace("\n", "<br />")


def _code_point_offsets(text: str) -> List[int]:
    """Map each UTF-16 code unit offset of ``text`` to a code point index."""

    offsets: List[int] = []
    for index, char in enumerate(text):
        offsets.extend([index] * (2 if ord(char) > 0xFFFF else 1))
    offsets.append(len(text))
    return offsets


def _to_code_points(text: str, spans: Sequence[RichTextSpan]) -> List[RichTextSpan]:
    """Convert span offsets, counted in UTF-16 code units by the CMS, to ``text`` indices."""

    offsets = _code_point_offsets(text)
    last = len(offsets) - 1
    return [
        span.model_copy(update={"start": offsets[min(span.start, last)], "end": offsets[min(span.end, last)]})
        if span.start >= 0 and span.end >= 0
        else span
        for span in spans
    ]


def _render_spans(text: str, spans: Sequence[RichTextSpan]) -> str:
    """Serialise ``text`` with its inline ``spans``.

    Overlapping spans that do not nest are closed and re-opened at the
    boundary so the output stays well formed.
    """

    spans = _to_code_points(text, spans)
    length = len(text)
    valid = [
        (index, span)
        for index, span in enumerate(spans)
        if 0 <= span.start < span.end and span.start < length
    ]
    if not valid:
        return _escape_segment(text)

    boundaries = sorted({0, length, *(span.start for _, span in valid), *(min(span.end, length) for _, span in valid)})

    parts: List[str] = []
    stack: List[tuple[int, RichTextSpan]] = []
    for start, end in zip(boundaries, boundaries[1:]):
        active = sorted(
            (entry for entry in valid if entry[1].start <= start and entry[1].end >= end),
            key=lambda entry: (entry[1].start, -entry[1].end, entry[0]),
        )
        common = 0
        while common < len(stack) and common < len(active) and stack[common][0] == active[common][0]:
            common += 1
        while len(stack) > common:
            parts.append(_close_tag(stack.pop()[1]))
        for entry in active[common:]:
            parts.append(_open_tag(entry[1]))
            stack.append(entry)
        parts.append(_escape_segment(text[start:end]))

    while stack:
        parts.append(_close_tag(stack.pop()[1]))
    return "".join(parts)


def _render_node(node: RichTextNode) -> str:
    if node.type == "image":
        src = html.escape(node.url or "", quote=True)
        alt = html.escape(node.alt or "", quote=True)
        return f'<p class="block-img"><img src="{src}" alt="{alt}" /></p>'

    content = _render_spans(node.text or "", node.spans)
    tag = _BLOCK_TAGS.get(node.type, "p")
    return f"<{tag}>{content}</{tag}>"


def as_html(nodes: Iterable[RichTextNode]) -> str:
    """Serialise rich-text ``nodes`` to HTML.

    Consecutive list items are grouped into a single ``ul``/``ol``. The output
    is passed through :func:`sanitize_html` before it is returned.
    """

    chunks: List[str] = []
    for list_tag, group in groupby(nodes, key=lambda node: _LIST_TAGS.get(node.type)):
        if list_tag is None:
            chunks.extend(_render_node(node) for node in group)
            continue
        items = "".join(f"<li>{_render_spans(node.text or '', node.spans)}</li>" for node in group)
        chunks.append(f"<{list_tag}>{items}</{list_tag}>")

    return sanitize_html("".join(chunks))


def _is_safe_url(value: str) -> bool:
    scheme = urlparse(value.strip()).scheme.lower()
    return scheme in SAFE_SCHEMES


def sanitize_html(markup: str) -> str:
    """Return ``markup`` restricted to an allow list of tags and attributes.

    Script-like elements are removed together with their content, other
    unknown elements are replaced by their children, and links or images with
    a non http(s)/mailto scheme lose the offending attribute.
    """

    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup.find_all(DROPPED_TAGS):
        tag.decompose()

    for tag in soup.find_all(True):
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
            continue

        allowed = ALLOWED_ATTRIBUTES.get(tag.name, set())
        for attribute in list(tag.attrs):
            if attribute not in allowed:
                del tag[attribute]

        for attribute in ("href", "src"):
            value = tag.get(attribute)
            if value is not None and not _is_safe_url(str(value)):
                del tag[attribute]

        if tag.name == "a" and tag.get("href"):
            tag["target"] = "_blank"
            tag["rel"] = "noopener noreferrer"

    return str(soup)
