"""Document trees: ProseMirror-style JSON <-> node dataclasses, traversal, queries.

The JSON shape follows ProseMirror (``type``/``content``/``attrs``/``text``,
with ``marks`` on text nodes), extended with explicit ``span``, ``link``,
``image``, ``code``, ``space`` and ``div`` nodes so that any tree can be
written back out losslessly.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path

from .models import (
    Attr,
    Block,
    BlockQuote,
    Break,
    BulletList,
    Code,
    CodeBlock,
    Div,
    Document,
    Heading,
    HorizontalRule,
    Image,
    Inline,
    Link,
    OrderedList,
    Paragraph,
    Space,
    Span,
    Text,
)

log = logging.getLogger(__name__)

_MARK_ALIASES = {
    "bold": "strong",
    "strong": "strong",
    "italic": "em",
    "em": "em",
    "strike": "strike",
    "strikethrough": "strike",
    "smallcaps": "smallcaps",
}


# ---------------------------------------------------------------------------
# JSON -> tree
# ---------------------------------------------------------------------------


def load_document(path: Path) -> Document:
    """Read a JSON document file."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return parse_document(data)


def parse_document(data: dict) -> Document:
    """Convert a ProseMirror-style document dict into a Document."""
    if not isinstance(data, dict):
        raise ValueError("Invalid document: expected a JSON object")
    node_type = data.get("type", "doc")
    if node_type != "doc":
        raise ValueError(f"Invalid document: root type is {node_type!r}, expected 'doc'")
    meta = data.get("meta", {})
    return Document(
        content=_parse_blocks(data.get("content", [])),
        meta=meta if isinstance(meta, dict) else {},
    )


def _parse_attr(attrs: dict) -> Attr:
    kv = attrs.get("attributes", {}) or {}
    return Attr(
        identifier=attrs.get("id", "") or "",
        classes=tuple(attrs.get("classes", []) or ()),
        attributes=tuple((str(k), str(v)) for k, v in kv.items()),
    )


def _parse_blocks(nodes: list[dict]) -> tuple[Block, ...]:
    blocks: list[Block] = []
    for node in nodes:
        block = _parse_block(node)
        if block is not None:
            blocks.append(block)
    return tuple(blocks)


def _parse_items(nodes: list[dict]) -> tuple[tuple[Block, ...], ...]:
    return tuple(_parse_blocks(item.get("content", [])) for item in nodes)


def _parse_block(node: dict) -> Block | None:
    node_type = node.get("type", "")
    content = node.get("content", [])
    attrs = node.get("attrs", {}) or {}

    match node_type:
        case "paragraph":
            return Paragraph(_parse_inlines(content))

        case "heading":
            return Heading(int(attrs.get("level", 1)), _parse_inlines(content))

        case "div":
            return Div(_parse_blocks(content), _parse_attr(attrs))

        case "blockquote":
            return BlockQuote(_parse_blocks(content))

        case "bulletList":
            return BulletList(_parse_items(content))

        case "orderedList":
            return OrderedList(_parse_items(content), int(attrs.get("start", 1)))

        case "codeBlock":
            text = "".join(child.get("text", "") for child in content)
            return CodeBlock(text, attrs.get("language", "") or "")

        case "horizontalRule":
            return HorizontalRule()

        case _:
            # Unknown block - keep its children in a plain wrapper
            if content:
                return Div(_parse_blocks(content))
            log.debug("Dropping unknown block node %r", node_type)
            return None


def _parse_inlines(nodes: list[dict]) -> tuple[Inline, ...]:
    inlines: list[Inline] = []
    for node in nodes:
        inline = _parse_inline(node)
        if inline is not None:
            inlines.append(inline)
    return tuple(inlines)


def _parse_inline(node: dict) -> Inline | None:
    node_type = node.get("type", "")
    content = node.get("content", [])
    attrs = node.get("attrs", {}) or {}

    match node_type:
        case "text":
            return _parse_text(node)

        case "space":
            return Space()

        case "hardBreak":
            return Break()

        case "span":
            return Span(_parse_inlines(content), _parse_attr(attrs), attrs.get("mark"))

        case "link":
            return Link(
                _parse_inlines(content),
                attrs.get("href", ""),
                _parse_attr(attrs),
                attrs.get("title", "") or "",
            )

        case "image":
            return Image(attrs.get("alt", "") or "", attrs.get("src", ""), _parse_attr(attrs))

        case "code":
            return Code(node.get("text", ""), _parse_attr(attrs))

        case _:
            if content:
                return Span(_parse_inlines(content))
            log.debug("Dropping unknown inline node %r", node_type)
            return None


def _parse_text(node: dict) -> Inline:
    """Turn a marked ProseMirror text node into nested wrapper nodes.

    The first mark ends up innermost.
    """
    text = node.get("text", "")
    marks = node.get("marks", []) or []

    inline: Inline = Text(text)
    if any(mark.get("type") == "code" for mark in marks):
        inline = Code(text)

    for mark in marks:
        mark_type = mark.get("type", "")
        if mark_type == "code":
            continue
        if mark_type == "link":
            mark_attrs = mark.get("attrs", {}) or {}
            inline = Link(
                (inline,),
                mark_attrs.get("href", ""),
                _parse_attr(mark_attrs),
                mark_attrs.get("title", "") or "",
            )
        elif mark_type in _MARK_ALIASES:
            inline = Span((inline,), mark=_MARK_ALIASES[mark_type])
        else:
            log.debug("Ignoring unknown mark %r", mark_type)
    return inline


# ---------------------------------------------------------------------------
# tree -> JSON
# ---------------------------------------------------------------------------


def document_to_dict(document: Document) -> dict:
    """Convert a Document back to its JSON form."""
    data: dict = {"type": "doc", "content": [_block_to_dict(b) for b in document.content]}
    if document.meta:
        data["meta"] = document.meta
    return data


def _attr_to_dict(attr: Attr) -> dict:
    data: dict = {}
    if attr.identifier:
        data["id"] = attr.identifier
    if attr.classes:
        data["classes"] = list(attr.classes)
    if attr.attributes:
        data["attributes"] = dict(attr.attributes)
    return data


def _node(node_type: str, attrs: dict | None = None, content: list | None = None) -> dict:
    data: dict = {"type": node_type}
    if attrs:
        data["attrs"] = attrs
    if content is not None:
        data["content"] = content
    return data


def _items_to_dict(items: tuple[tuple[Block, ...], ...]) -> list[dict]:
    return [_node("listItem", content=[_block_to_dict(b) for b in item]) for item in items]


def _block_to_dict(block: Block) -> dict:
    match block:
        case Paragraph(content=content):
            return _node("paragraph", content=[_inline_to_dict(i) for i in content])
        case Heading(level=level, content=content):
            return _node("heading", {"level": level}, [_inline_to_dict(i) for i in content])
        case Div(content=content, attr=attr):
            return _node("div", _attr_to_dict(attr), [_block_to_dict(b) for b in content])
        case BlockQuote(content=content):
            return _node("blockquote", content=[_block_to_dict(b) for b in content])
        case BulletList(items=items):
            return _node("bulletList", content=_items_to_dict(items))
        case OrderedList(items=items, start=start):
            attrs = {"start": start} if start != 1 else None
            return _node("orderedList", attrs, _items_to_dict(items))
        case CodeBlock(text=text, language=language):
            attrs = {"language": language} if language else None
            return _node("codeBlock", attrs, [{"type": "text", "text": text}] if text else [])
        case HorizontalRule():
            return _node("horizontalRule")
    raise TypeError(f"Not a block node: {block!r}")


def _inline_to_dict(inline: Inline) -> dict:
    match inline:
        case Text(text=text):
            return {"type": "text", "text": text}
        case Space():
            return {"type": "space"}
        case Break():
            return {"type": "hardBreak"}
        case Span(content=content, attr=attr, mark=mark):
            attrs = _attr_to_dict(attr)
            if mark:
                attrs["mark"] = mark
            return _node("span", attrs, [_inline_to_dict(i) for i in content])
        case Link(content=content, target=target, attr=attr, title=title):
            attrs = {"href": target, **_attr_to_dict(attr)}
            if title:
                attrs["title"] = title
            return _node("link", attrs, [_inline_to_dict(i) for i in content])
        case Image(alt=alt, src=src, attr=attr):
            return _node("image", {"src": src, "alt": alt, **_attr_to_dict(attr)})
        case Code(text=text, attr=attr):
            data = {"type": "code", "text": text}
            if not attr.is_null:
                data["attrs"] = _attr_to_dict(attr)
            return data
    raise TypeError(f"Not an inline node: {inline!r}")


# ---------------------------------------------------------------------------
# Sequence rewriting
# ---------------------------------------------------------------------------


def splice_inlines(
    inlines: Iterable[Inline],
    fn: Callable[[Inline], Iterable[Inline]],
) -> tuple[Inline, ...]:
    """Rewrite an inline sequence bottom-up, letting ``fn`` splice.

    Children of Span and Link nodes are rewritten first; ``fn`` then maps each
    node to zero, one or many replacement nodes.
    """
    out: list[Inline] = []
    for inline in inlines:
        match inline:
            case Span(content=content, attr=attr, mark=mark):
                inline = Span(splice_inlines(content, fn), attr, mark)
            case Link(content=content, target=target, attr=attr, title=title):
                inline = Link(splice_inlines(content, fn), target, attr, title)
        out.extend(fn(inline))
    return tuple(out)


def splice_blocks(
    blocks: Iterable[Block],
    fn: Callable[[Block], Iterable[Block]],
) -> tuple[Block, ...]:
    """Block-level counterpart of :func:`splice_inlines`."""
    out: list[Block] = []
    for block in blocks:
        match block:
            case Div(content=content, attr=attr):
                block = Div(splice_blocks(content, fn), attr)
            case BlockQuote(content=content):
                block = BlockQuote(splice_blocks(content, fn))
            case BulletList(items=items):
                block = BulletList(tuple(splice_blocks(item, fn) for item in items))
            case OrderedList(items=items, start=start):
                block = OrderedList(tuple(splice_blocks(item, fn) for item in items), start)
        out.extend(fn(block))
    return tuple(out)


def rewrite_inline_sequences(
    blocks: Iterable[Block],
    fn: Callable[[tuple[Inline, ...]], Iterable[Inline]],
    *,
    include_headings: bool = True,
) -> tuple[Block, ...]:
    """Apply ``fn`` to the inline sequence of every paragraph (and heading)."""

    def on_block(block: Block) -> list[Block]:
        match block:
            case Paragraph(content=content):
                return [Paragraph(tuple(fn(content)))]
            case Heading(level=level, content=content) if include_headings:
                return [Heading(level, tuple(fn(content)))]
        return [block]

    return splice_blocks(blocks, on_block)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def _block_inlines(block: Block) -> Iterator[tuple[Inline, ...]]:
    match block:
        case Paragraph(content=content) | Heading(content=content):
            yield content
        case Div(content=content) | BlockQuote(content=content):
            for child in content:
                yield from _block_inlines(child)
        case BulletList(items=items) | OrderedList(items=items):
            for item in items:
                for child in item:
                    yield from _block_inlines(child)


def _walk(inlines: Iterable[Inline]) -> Iterator[Inline]:
    for inline in inlines:
        yield inline
        match inline:
            case Span(content=content) | Link(content=content):
                yield from _walk(content)


def walk_inlines(blocks: Iterable[Block]) -> Iterator[Inline]:
    """Yield every inline node, depth-first in reading order."""
    for block in blocks:
        for sequence in _block_inlines(block):
            yield from _walk(sequence)


def extract_link_targets(document: Document) -> list[str]:
    """Return the distinct outbound link targets already in the document."""
    targets = (i.target for i in walk_inlines(document.content) if isinstance(i, Link))
    return list(dict.fromkeys(targets))


def inline_text(inlines: Iterable[Inline]) -> str:
    """Flatten inline content to its visible text."""
    parts: list[str] = []
    for inline in inlines:
        match inline:
            case Text(text=text) | Code(text=text):
                parts.append(text)
            case Space() | Break():
                parts.append(" ")
            case Span(content=content) | Link(content=content):
                parts.append(inline_text(content))
            case Image(alt=alt):
                parts.append(alt)
    return "".join(parts)


def _plain_inlines(inlines: Iterable[Inline]) -> str:
    parts: list[str] = []
    for inline in inlines:
        match inline:
            case Text(text=text):
                parts.append(text)
            case Space():
                parts.append(" ")
            case Break():
                parts.append("\n")
            case Span(content=content) | Link(content=content):
                parts.append(f" {_plain_inlines(content)} ")
            case Code(text=text):
                parts.append(f" {text} ")
            case Image(alt=alt):
                parts.append(f" {alt} ")
    return "".join(parts)


def _plain_block(block: Block) -> str:
    match block:
        case Paragraph(content=content) | Heading(content=content):
            return _plain_inlines(content)
        case Div(content=content) | BlockQuote(content=content):
            return "\n".join(_plain_block(b) for b in content)
        case BulletList(items=items) | OrderedList(items=items):
            return "\n".join(_plain_block(b) for item in items for b in item)
        case CodeBlock(text=text):
            return text
    return ""


def render_plain_text(document: Document) -> str:
    """Render the whole document as one plain-text string.

    Wrapped inline content (spans, links, code, image alt text) is padded with
    blanks and blocks are separated by newlines, so every text run in the tree
    appears contiguously and flanked by whitespace or a string edge.
    """
    return "\n".join(_plain_block(b) for b in document.content)


def with_content(document: Document, content: Iterable[Block]) -> Document:
    """A copy of ``document`` with new block content and the same metadata."""
    return Document(tuple(content), document.meta)

