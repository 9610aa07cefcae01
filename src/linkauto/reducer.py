"""Keep only the first automatic link to each target.

A term like "GAN" may occur hundreds of times on a page; linking every
occurrence is clutter. The first automatic link per target, in reading order,
is tagged ``link-auto-first``; every later one is demoted to a
``link-auto-skipped`` span carrying the same text and no link.

The traversal threads the set of seen targets explicitly: every step takes
the set in and hands the (possibly grown) set back.
"""

from __future__ import annotations

from .document import with_content
from .models import (
    LINK_AUTO_CLASS,
    LINK_AUTO_FIRST_CLASS,
    LINK_AUTO_SKIPPED_CLASS,
    Attr,
    Block,
    BlockQuote,
    BulletList,
    Div,
    Document,
    Heading,
    Inline,
    Link,
    OrderedList,
    Paragraph,
    Span,
)

Seen = frozenset[str]
Items = tuple[tuple[Block, ...], ...]

_SKIPPED_ATTR = Attr(classes=(LINK_AUTO_SKIPPED_CLASS,))


def _annotate_inline(inline: Inline, seen: Seen) -> tuple[Inline, Seen]:
    match inline:
        case Link(content=content, target=target, attr=attr, title=title) if attr.has_class(LINK_AUTO_CLASS):
            if target in seen:
                return Span(content, _SKIPPED_ATTR), seen
            return Link(content, target, attr.with_class(LINK_AUTO_FIRST_CLASS), title), seen | {target}
        case Link(content=content, target=target, attr=attr, title=title):
            content, seen = _annotate_inlines(content, seen)
            return Link(content, target, attr, title), seen
        case Span(content=content, attr=attr, mark=mark):
            content, seen = _annotate_inlines(content, seen)
            return Span(content, attr, mark), seen
    return inline, seen


def _annotate_inlines(inlines: tuple[Inline, ...], seen: Seen) -> tuple[tuple[Inline, ...], Seen]:
    out: list[Inline] = []
    for inline in inlines:
        inline, seen = _annotate_inline(inline, seen)
        out.append(inline)
    return tuple(out), seen


def _annotate_blocks(blocks: tuple[Block, ...], seen: Seen) -> tuple[tuple[Block, ...], Seen]:
    out: list[Block] = []
    for block in blocks:
        match block:
            case Paragraph(content=content):
                content, seen = _annotate_inlines(content, seen)
                block = Paragraph(content)
            case Heading(level=level, content=content):
                content, seen = _annotate_inlines(content, seen)
                block = Heading(level, content)
            case Div(content=content, attr=attr):
                content, seen = _annotate_blocks(content, seen)
                block = Div(content, attr)
            case BlockQuote(content=content):
                content, seen = _annotate_blocks(content, seen)
                block = BlockQuote(content)
            case BulletList(items=items):
                items, seen = _annotate_items(items, seen)
                block = BulletList(items)
            case OrderedList(items=items, start=start):
                items, seen = _annotate_items(items, seen)
                block = OrderedList(items, start)
        out.append(block)
    return tuple(out), seen


def _annotate_items(items: Items, seen: Seen) -> tuple[Items, Seen]:
    out: list[tuple[Block, ...]] = []
    for item in items:
        item, seen = _annotate_blocks(item, seen)
        out.append(item)
    return tuple(out), seen


def annotate_first_links(document: Document, seen: Seen = frozenset()) -> Document:
    """Tag first automatic links and demote the repeats.

    Args:
        document: A rewritten document.
        seen: Targets to treat as already linked before the first block.
    """
    content, _ = _annotate_blocks(document.content, seen)
    return with_content(document, content)
