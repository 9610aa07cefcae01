"""Rewrite matching text in a document tree into automatic links."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from .document import rewrite_inline_sequences, with_content
from .models import (
    LINK_AUTO_CLASS,
    Attr,
    Code,
    Definition,
    Document,
    Image,
    Inline,
    Link,
    MatchResult,
    Space,
    Span,
    Text,
)

log = logging.getLogger(__name__)

_LINK_AUTO_ATTR = Attr(classes=(LINK_AUTO_CLASS,))


def merge_spaces(inlines: Iterable[Inline]) -> list[Inline]:
    """Merge runs of Text and Space nodes into single Text nodes.

    Parsers split prose into words and spaces; patterns spanning several
    words can only match once the run is one string again.
    """
    merged: list[Inline] = []
    run: list[str] = []

    def flush() -> None:
        text = "".join(run)
        if text:
            merged.append(Text(text))
        run.clear()

    for inline in inlines:
        match inline:
            case Text(text=text):
                run.append(text)
            case Space():
                run.append(" ")
            case _:
                flush()
                merged.append(inline)
    flush()
    return merged


def find_match(definitions: Sequence[Definition], text: str) -> MatchResult | None:
    """Split ``text`` around the first definition, in priority order, that matches.

    The guard is zero-width, so the delimiter characters flanking the match
    are recovered by position and reported separately.
    """
    for definition in definitions:
        m = definition.regex.search(text)
        if m is None:
            continue
        start, end = m.span()
        lead = start - 1 if start > 0 else start
        trail = end + 1 if end < len(text) else end
        return MatchResult(
            before=text[:lead],
            leading=text[lead:start],
            core=text[start:end],
            trailing=text[end:trail],
            after=text[trail:],
            target=definition.target,
        )
    return None


def make_link(text: str, target: str) -> Link:
    return Link((Text(text),), target, _LINK_AUTO_ATTR)


def link_text(definitions: Sequence[Definition], text: str) -> list[Inline]:
    """Link every definition occurrence in one Text payload."""
    if not text:
        return []

    result = find_match(definitions, text)
    if result is None:
        return [Text(text)]

    if not result.core:
        # An empty match has nothing to link; keep looking on either side
        if not result.matched:
            return [Text(text)]
        return [
            *link_text(definitions, result.before),
            Text(result.matched),
            *link_text(definitions, result.after),
        ]

    # The match is the first hit of the highest-priority definition, but a
    # lower-priority definition may still match earlier in the text.
    out = link_text(definitions, result.before)
    if result.leading:
        out.append(Text(result.leading))
    out.append(make_link(result.core, result.target))
    if result.trailing:
        out.append(Text(result.trailing))
    out.extend(link_text(definitions, result.after))
    return out


def define_links(definitions: Sequence[Definition], inlines: Iterable[Inline]) -> list[Inline]:
    """Rewrite one inline sequence.

    Links, images and code are never entered; spans are rewritten inside.
    """
    if not definitions:
        return list(inlines)

    out: list[Inline] = []
    for inline in merge_spaces(inlines):
        match inline:
            case Link() | Image() | Code():
                out.append(inline)
            case Span(content=content, attr=attr, mark=mark):
                out.append(Span(tuple(define_links(definitions, content)), attr, mark))
            case Text(text=text):
                out.extend(link_text(definitions, text))
            case _:
                out.append(inline)
    return out


def rewrite_document(
    document: Document,
    definitions: Sequence[Definition],
    *,
    include_headings: bool = False,
) -> Document:
    """Insert automatic links into every paragraph of the document.

    Headings are left alone unless ``include_headings`` is set: a link inside
    a heading breaks its anchor.
    """
    content = rewrite_inline_sequences(
        document.content,
        lambda inlines: define_links(definitions, inlines),
        include_headings=include_headings,
    )
    return with_content(document, content)
