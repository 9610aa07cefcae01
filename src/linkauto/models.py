"""Data models for documents and link definitions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

LINK_AUTO_CLASS = "link-auto"
LINK_AUTO_FIRST_CLASS = "link-auto-first"
LINK_AUTO_SKIPPED_CLASS = "link-auto-skipped"


@dataclass(frozen=True)
class Attr:
    """Identifier, classes and key/value attributes of a node."""

    identifier: str = ""
    classes: tuple[str, ...] = ()
    attributes: tuple[tuple[str, str], ...] = ()

    @property
    def is_null(self) -> bool:
        return not (self.identifier or self.classes or self.attributes)

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def with_class(self, name: str) -> Attr:
        if name in self.classes:
            return self
        return Attr(self.identifier, self.classes + (name,), self.attributes)


NULL_ATTR = Attr()


# Inline nodes


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Space:
    pass


@dataclass(frozen=True)
class Break:
    """Hard line break."""


@dataclass(frozen=True)
class Span:
    """Formatted inline content: emphasis marks or a classed span."""

    content: tuple[Inline, ...] = ()
    attr: Attr = NULL_ATTR
    mark: str | None = None


@dataclass(frozen=True)
class Link:
    content: tuple[Inline, ...]
    target: str
    attr: Attr = NULL_ATTR
    title: str = ""


@dataclass(frozen=True)
class Image:
    alt: str
    src: str
    attr: Attr = NULL_ATTR


@dataclass(frozen=True)
class Code:
    text: str
    attr: Attr = NULL_ATTR


Inline = Text | Space | Break | Span | Link | Image | Code


# Block nodes


@dataclass(frozen=True)
class Paragraph:
    content: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Heading:
    level: int
    content: tuple[Inline, ...] = ()


@dataclass(frozen=True)
class Div:
    """Generic block container; an attribute-less Div is pure wrapping."""

    content: tuple[Block, ...] = ()
    attr: Attr = NULL_ATTR


@dataclass(frozen=True)
class BlockQuote:
    content: tuple[Block, ...] = ()


@dataclass(frozen=True)
class BulletList:
    items: tuple[tuple[Block, ...], ...] = ()


@dataclass(frozen=True)
class OrderedList:
    items: tuple[tuple[Block, ...], ...] = ()
    start: int = 1


@dataclass(frozen=True)
class CodeBlock:
    text: str
    language: str = ""


@dataclass(frozen=True)
class HorizontalRule:
    pass


Block = Paragraph | Heading | Div | BlockQuote | BulletList | OrderedList | CodeBlock | HorizontalRule


@dataclass(frozen=True)
class Document:
    content: tuple[Block, ...] = ()
    meta: dict = field(default_factory=dict, compare=False)


# Link definitions


@dataclass(frozen=True)
class Definition:
    """A compiled, boundary-guarded pattern and the target it links to."""

    pattern: str
    regex: re.Pattern
    target: str


@dataclass(frozen=True)
class MatchResult:
    """A Text payload split around the first matching definition.

    ``leading`` and ``trailing`` hold the delimiter characters (blank or
    punctuation) flanking the match; they are empty at a string edge.
    """

    before: str
    leading: str
    core: str
    trailing: str
    after: str
    target: str

    @property
    def matched(self) -> str:
        return self.leading + self.core + self.trailing
