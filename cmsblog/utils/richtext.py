"""Render Prismic structured text (rich text fields) to HTML or plain text.

A rich text field is a list of blocks such as::

    {"type": "paragraph", "text": "Hello world", "spans": [
        {"start": 0, "end": 5, "type": "strong"}
    ]}

Consecutive ``list-item`` / ``o-list-item`` blocks are grouped into a
single ``<ul>`` / ``<ol>``.
"""
from __future__ import annotations

from itertools import groupby
from typing import Any, Callable, Iterable

from markupsafe import escape

LinkResolver = Callable[[dict], str]

HEADINGS = {f"heading{n}": f"h{n}" for n in range(1, 7)}
LIST_TYPES = {"list-item": "ul", "o-list-item": "ol"}


def default_link_resolver(link: dict) -> str:
    """Resolve document links to post pages; everything else falls back to the home page."""
    uid = link.get("uid")
    if uid:
        return f"/post/{uid}"
    return "/"


def _link_href(data: dict, link_resolver: LinkResolver) -> str:
    if data.get("link_type") == "Document":
        return link_resolver(data)
    return data.get("url") or "#"


def _open_tag(span: dict, link_resolver: LinkResolver) -> str:
    kind = span.get("type")
    data = span.get("data") or {}
    if kind == "strong":
        return "<strong>"
    if kind == "em":
        return "<em>"
    if kind == "hyperlink":
        attrs = f' href="{escape(_link_href(data, link_resolver))}"'
        if data.get("target"):
            attrs += f' target="{escape(data["target"])}" rel="noopener"'
        return f"<a{attrs}>"
    if kind == "label":
        return f'<span class="{escape(data.get("label", ""))}">'
    return ""


def _close_tag(span: dict) -> str:
    return {
        "strong": "</strong>",
        "em": "</em>",
        "hyperlink": "</a>",
        "label": "</span>",
    }.get(span.get("type"), "")


def _escape_text(text: str, keep_newlines: bool = False) -> str:
    escaped = str(escape(text))
    if keep_newlines:
        return escaped
    return escaped.replace("\n", "<br />")


def _valid_span(span: Any, length: int) -> bool:
    if not isinstance(span, dict):
        return False
    start, end = span.get("start"), span.get("end")
    return isinstance(start, int) and isinstance(end, int) and 0 <= start < end <= length


def render_spans(
    text: str,
    spans: Iterable[dict] | None,
    link_resolver: LinkResolver = default_link_resolver,
    keep_newlines: bool = False,
) -> str:
    """Render ``text`` with its inline spans, closing and reopening tags where spans overlap."""
    text = text or ""
    pending = sorted(
        (s for s in spans or [] if _valid_span(s, len(text))),
        key=lambda s: (s["start"], -s["end"]),
    )
    bounds = sorted({0, len(text), *(s["start"] for s in pending), *(s["end"] for s in pending)})

    out: list[str] = []
    stack: list[dict] = []
    for i, pos in enumerate(bounds):
        if any(s["end"] <= pos for s in stack):
            reopen = []
            while stack:
                span = stack.pop()
                out.append(_close_tag(span))
                if span["end"] > pos:
                    reopen.append(span)
                if not any(s["end"] <= pos for s in stack):
                    break
            for span in reversed(reopen):
                out.append(_open_tag(span, link_resolver))
                stack.append(span)

        while pending and pending[0]["start"] == pos:
            span = pending.pop(0)
            out.append(_open_tag(span, link_resolver))
            stack.append(span)

        if i + 1 < len(bounds):
            out.append(_escape_text(text[pos:bounds[i + 1]], keep_newlines))

    for span in reversed(stack):
        out.append(_close_tag(span))
    return "".join(out)


def _label_attr(block: dict) -> str:
    label = block.get("label")
    return f' class="{escape(label)}"' if label else ""


def _render_block(block: dict, link_resolver: LinkResolver) -> str:
    kind = block.get("type")
    text = block.get("text") or ""
    spans = block.get("spans")

    if kind == "paragraph":
        return f"<p{_label_attr(block)}>{render_spans(text, spans, link_resolver)}</p>"
    if kind in HEADINGS:
        tag = HEADINGS[kind]
        return f"<{tag}{_label_attr(block)}>{render_spans(text, spans, link_resolver)}</{tag}>"
    if kind == "preformatted":
        return f"<pre{_label_attr(block)}>{render_spans(text, spans, link_resolver, keep_newlines=True)}</pre>"
    if kind in LIST_TYPES:
        return f"<li{_label_attr(block)}>{render_spans(text, spans, link_resolver)}</li>"
    if kind == "image":
        src = escape(block.get("url") or "")
        alt = escape(block.get("alt") or "")
        return f'<p class="block-img"><img src="{src}" alt="{alt}" /></p>'
    if kind == "embed":
        oembed = block.get("oembed") or {}
        return (
            f'<div data-oembed="{escape(oembed.get("embed_url") or "")}"'
            f' data-oembed-type="{escape(oembed.get("type") or "")}"'
            f' data-oembed-provider="{escape(oembed.get("provider_name") or "")}">'
            f'{oembed.get("html") or ""}</div>'
        )
    return ""


def as_html(blocks: Iterable[dict] | None, link_resolver: LinkResolver = default_link_resolver) -> str:
    """Serialize a rich text field to an HTML string (not yet sanitized)."""
    parts: list[str] = []
    blocks = [b for b in blocks or [] if isinstance(b, dict)]
    for kind, group in groupby(blocks, key=lambda b: b.get("type")):
        rendered = "".join(_render_block(b, link_resolver) for b in group)
        if kind in LIST_TYPES:
            tag = LIST_TYPES[kind]
            rendered = f"<{tag}>{rendered}</{tag}>"
        parts.append(rendered)
    return "".join(parts)


def as_text(blocks: Iterable[dict] | None) -> str:
    """Plain text of a rich text field, one space between blocks."""
    return " ".join(
        b.get("text") or "" for b in blocks or [] if isinstance(b, dict) and b.get("text")
    )
