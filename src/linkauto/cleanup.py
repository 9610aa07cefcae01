"""Flattening passes run after linking.

A span or div wrapper cannot simply be deleted: its payload has to survive in
the parent sequence. Each pass therefore maps a node to the list of nodes
replacing it and the parent sequence is rebuilt from those lists:

    [Text("foo"), Span((Text("Bar"), Span((Text("Baz"),), mark="em")), skipped), Text("Quux")]
    becomes
    [Text("foo"), Text("Bar"), Span((Text("Baz"),), mark="em"), Text("Quux")]
"""

from __future__ import annotations

from collections.abc import Iterable

from .document import inline_text, rewrite_inline_sequences, splice_blocks, splice_inlines, with_content
from .models import LINK_AUTO_SKIPPED_CLASS, Block, Div, Document, Inline, Link, Span, Text


def _unwrap_skipped(inline: Inline) -> Iterable[Inline]:
    if isinstance(inline, Span) and inline.attr.has_class(LINK_AUTO_SKIPPED_CLASS):
        return inline.content
    return (inline,)


def flatten_skipped_spans(document: Document) -> Document:
    """Splice demoted ``link-auto-skipped`` spans into their parent sequence."""
    content = rewrite_inline_sequences(
        document.content, lambda inlines: splice_inlines(inlines, _unwrap_skipped),
    )
    return with_content(document, content)


def _unwrap_empty_div(block: Block) -> Iterable[Block]:
    # A Div with any id, class or attribute means something (an abstract, a
    # column layout...) and stays.
    if isinstance(block, Div) and block.attr.is_null:
        return block.content
    return (block,)


def flatten_empty_div_blocks(blocks: Iterable[Block]) -> tuple[Block, ...]:
    return splice_blocks(blocks, _unwrap_empty_div)


def flatten_empty_divs(document: Document) -> Document:
    """Splice attribute-less Div wrappers into their parent sequence."""
    return with_content(document, flatten_empty_div_blocks(document.content))


def _link_to_text(inline: Inline) -> Iterable[Inline]:
    if isinstance(inline, Link):
        return (Text(inline_text(inline.content)),)
    return (inline,)


def _flatten_inner_links(inline: Inline) -> Iterable[Inline]:
    if isinstance(inline, Link):
        return (Link(splice_inlines(inline.content, _link_to_text), inline.target, inline.attr, inline.title),)
    return (inline,)


def flatten_nested_links(document: Document) -> Document:
    """Reduce any link found inside another link to its plain text."""
    content = rewrite_inline_sequences(
        document.content, lambda inlines: splice_inlines(inlines, _flatten_inner_links),
    )
    return with_content(document, content)
