"""Render a document tree as Markdown.

Link and span attributes use Pandoc's ``{#id .class key="value"}`` syntax so
automatic-link classes survive into the output.
"""

from __future__ import annotations

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

_MARK_DELIMITERS = {
    "strong": "**",
    "em": "*",
    "strike": "~~",
}


def document_to_markdown(document: Document) -> str:
    """Convert a Document to markdown."""
    return _render_blocks(document.content).strip()


def _render_attr(attr: Attr) -> str:
    if attr.is_null:
        return ""
    parts: list[str] = []
    if attr.identifier:
        parts.append(f"#{attr.identifier}")
    parts.extend(f".{cls}" for cls in attr.classes)
    parts.extend(f'{k}="{v}"' for k, v in attr.attributes)
    return "{" + " ".join(parts) + "}"


def _render_blocks(blocks: tuple[Block, ...]) -> str:
    return "".join(_render_block(block) for block in blocks)


def _render_block(block: Block) -> str:
    match block:
        case Paragraph(content=content):
            text = _render_inline(content)
            return f"{text}\n\n"

        case Heading(level=level, content=content):
            text = _render_inline(content)
            prefix = "#" * level
            return f"{prefix} {text}\n\n"

        case Div(content=content, attr=attr):
            inner = _render_blocks(content)
            if attr.is_null:
                return inner
            return f"::: {_render_attr(attr)}\n{inner.strip()}\n:::\n\n"

        case BlockQuote(content=content):
            inner = _render_blocks(content).strip()
            lines = inner.split("\n")
            quoted = "\n".join(f"> {line}" if line else ">" for line in lines)
            return f"{quoted}\n\n"

        case BulletList(items=items):
            return _render_list(items, ordered=False)

        case OrderedList(items=items, start=start):
            return _render_list(items, ordered=True, start=start)

        case CodeBlock(text=text, language=language):
            return f"```{language}\n{text}\n```\n\n"

        case HorizontalRule():
            return "---\n\n"

    return ""


def _render_inline(nodes: tuple[Inline, ...]) -> str:
    parts: list[str] = []
    for node in nodes:
        match node:
            case Text(text=text):
                parts.append(text)
            case Space():
                parts.append(" ")
            case Break():
                parts.append("\\\n")
            case Code(text=text, attr=attr):
                parts.append(f"`{text}`{_render_attr(attr)}")
            case Image(alt=alt, src=src, attr=attr):
                parts.append(f"![{alt}]({src}){_render_attr(attr)}")
            case Link(content=content, target=target, attr=attr, title=title):
                dest = f'{target} "{title}"' if title else target
                parts.append(f"[{_render_inline(content)}]({dest}){_render_attr(attr)}")
            case Span(content=content, attr=attr, mark=mark):
                parts.append(_render_span(_render_inline(content), attr, mark))
    return "".join(parts)


def _render_span(text: str, attr: Attr, mark: str | None) -> str:
    delim = _MARK_DELIMITERS.get(mark or "")
    if delim:
        text = f"{delim}{text}{delim}"
    elif mark == "smallcaps":
        attr = attr.with_class("smallcaps")
    if attr.is_null:
        return text
    return f"[{text}]{_render_attr(attr)}"


def _render_list(items: tuple[tuple[Block, ...], ...], ordered: bool, start: int = 1) -> str:
    lines: list[str] = []
    for i, item in enumerate(items):
        text = _render_blocks(item).strip()
        # Handle multi-line list items
        item_lines = text.split("\n")
        prefix = f"{start + i}. " if ordered else "- "
        indent = " " * len(prefix)
        for j, line in enumerate(item_lines):
            if j == 0:
                lines.append(f"{prefix}{line}")
            elif line:
                lines.append(f"{indent}{line}")
            else:
                lines.append("")
    return "\n".join(lines) + "\n\n"
