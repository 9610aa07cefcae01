"""Tests for linkauto.reducer — first-occurrence tagging and demotion."""

from __future__ import annotations

from linkauto.models import (
    Attr,
    BulletList,
    Document,
    Link,
    Paragraph,
    Span,
    Text,
)
from linkauto.reducer import annotate_first_links
from linkauto.rewriter import make_link

FIRST = Attr(classes=("link-auto", "link-auto-first"))
SKIPPED = Attr(classes=("link-auto-skipped",))


class TestAnnotateFirstLinks:
    def test_first_kept_rest_demoted(self, make_doc):
        doc = make_doc(
            make_link("GAN", "/gan"), Text(" "),
            make_link("GAN", "/gan"), Text(" "),
            make_link("GAN", "/gan"),
        )
        result = annotate_first_links(doc)
        assert result.content[0].content == (
            Link((Text("GAN"),), "/gan", FIRST),
            Text(" "),
            Span((Text("GAN"),), SKIPPED),
            Text(" "),
            Span((Text("GAN"),), SKIPPED),
        )

    def test_each_target_has_own_first(self, make_doc):
        doc = make_doc(make_link("GAN", "/gan"), Text(" "), make_link("CNN", "/cnn"))
        inlines = annotate_first_links(doc).content[0].content
        assert inlines[0].attr == FIRST
        assert inlines[2].attr == FIRST

    def test_manual_links_untouched(self, make_doc):
        manual = Link((Text("GAN"),), "/gan")
        doc = make_doc(manual, Text(" "), make_link("GAN", "/gan"))
        inlines = annotate_first_links(doc).content[0].content
        assert inlines[0] == manual
        assert inlines[2].attr == FIRST

    def test_reading_order_across_blocks(self):
        doc = Document((
            Paragraph((Text("intro"),)),
            BulletList(((Paragraph((make_link("GAN", "/gan"),)),),)),
            Paragraph((make_link("GAN", "/gan"),)),
        ))
        result = annotate_first_links(doc)
        assert result.content[1].items[0][0].content == (Link((Text("GAN"),), "/gan", FIRST),)
        assert result.content[2].content == (Span((Text("GAN"),), SKIPPED),)

    def test_inside_spans(self, make_doc):
        doc = make_doc(
            Span((make_link("GAN", "/gan"),), mark="em"),
            make_link("GAN", "/gan"),
        )
        inlines = annotate_first_links(doc).content[0].content
        assert inlines[0] == Span((Link((Text("GAN"),), "/gan", FIRST),), mark="em")
        assert inlines[1] == Span((Text("GAN"),), SKIPPED)

    def test_seen_targets_can_be_seeded(self, make_doc):
        doc = make_doc(make_link("GAN", "/gan"))
        result = annotate_first_links(doc, frozenset({"/gan"}))
        assert result.content[0].content == (Span((Text("GAN"),), SKIPPED),)

    def test_input_not_mutated(self, make_doc):
        doc = make_doc(make_link("GAN", "/gan"), make_link("GAN", "/gan"))
        annotate_first_links(doc)
        assert doc.content[0].content[1] == make_link("GAN", "/gan")

    def test_no_links(self, make_doc):
        doc = make_doc(Text("plain"))
        assert annotate_first_links(doc) == doc
