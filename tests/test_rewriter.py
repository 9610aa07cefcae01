"""Tests for linkauto.rewriter — pure transformation tests, no mocks needed."""

from __future__ import annotations

from linkauto.definitions import build_definitions
from linkauto.models import (
    Attr,
    Break,
    Code,
    Div,
    Document,
    Heading,
    Image,
    Link,
    Paragraph,
    Space,
    Span,
    Text,
)
from linkauto.rewriter import (
    define_links,
    find_match,
    link_text,
    make_link,
    merge_spaces,
    rewrite_document,
)


class TestMergeSpaces:
    def test_words_and_spaces_merged(self):
        assert merge_spaces([Text("Big"), Space(), Text("GAN")]) == [Text("Big GAN")]

    def test_leading_and_trailing_spaces(self):
        assert merge_spaces([Space(), Text("GAN"), Space()]) == [Text(" GAN ")]

    def test_adjacent_text_merged(self):
        assert merge_spaces([Text("Big"), Text("GAN")]) == [Text("BigGAN")]

    def test_empty_text_dropped(self):
        assert merge_spaces([Text(""), Code("x"), Text("a"), Text("b")]) == [Code("x"), Text("ab")]

    def test_other_nodes_split_runs(self):
        result = merge_spaces([Text("a"), Break(), Text("b"), Space()])
        assert result == [Text("a"), Break(), Text("b ")]

    def test_empty(self):
        assert merge_spaces([]) == []


class TestFindMatch:
    def test_no_match(self):
        defs = build_definitions([("GAN", "/gan")])
        assert find_match(defs, "nothing here") is None

    def test_delimiters_split_out(self):
        defs = build_definitions([("GAN", "/gan")])
        result = find_match(defs, "(see GAN)")
        assert result.before == "(see"
        assert result.leading == " "
        assert result.core == "GAN"
        assert result.trailing == ")"
        assert result.after == ""
        assert result.matched == " GAN)"
        assert result.target == "/gan"

    def test_string_edges(self):
        defs = build_definitions([("GAN", "/gan")])
        result = find_match(defs, "GAN")
        assert (result.before, result.matched, result.after) == ("", "GAN", "")

    def test_priority_order_wins_over_position(self):
        defs = build_definitions([("GAN", "/gan"), ("BigGAN", "/biggan")])
        result = find_match(defs, "GAN and BigGAN")
        assert result.target == "/biggan"
        assert result.before == "GAN and"


class TestLinkText:
    def test_empty(self):
        defs = build_definitions([("GAN", "/gan")])
        assert link_text(defs, "") == []

    def test_no_match_keeps_text(self):
        defs = build_definitions([("GAN", "/gan")])
        assert link_text(defs, "StyleGAN") == [Text("StyleGAN")]

    def test_delimiters_outside_link(self):
        defs = build_definitions([("GAN", "/gan")])
        assert link_text(defs, "(see GAN)") == [
            Text("(see"),
            Text(" "),
            make_link("GAN", "/gan"),
            Text(")"),
        ]

    def test_longest_pattern_wins(self):
        defs = build_definitions([("GAN", "/gan"), ("BigGAN", "/biggan")])
        assert link_text(defs, "BigGAN") == [make_link("BigGAN", "/biggan")]

    def test_short_pattern_never_matches_inside_long_token(self):
        defs = build_definitions([("GAN", "/gan")])
        assert link_text(defs, "BigGAN") == [Text("BigGAN")]

    def test_lower_priority_match_before_found(self):
        defs = build_definitions([("GAN", "/gan"), ("BigGAN", "/biggan")])
        assert link_text(defs, "GAN and BigGAN") == [
            make_link("GAN", "/gan"),
            Text(" "),
            Text("and"),
            Text(" "),
            make_link("BigGAN", "/biggan"),
        ]

    def test_every_occurrence_linked(self):
        defs = build_definitions([("GAN", "/gan")])
        result = link_text(defs, "GAN GAN")
        assert result == [make_link("GAN", "/gan"), Text(" "), make_link("GAN", "/gan")]

    def test_multi_word_pattern(self):
        defs = build_definitions([("[Hh]idden [Mm]arkov [Mm]odels?", "/hmm")])
        result = link_text(defs, "A hidden Markov model, again.")
        assert result == [
            Text("A"),
            Text(" "),
            make_link("hidden Markov model", "/hmm"),
            Text(","),
            Text(" again."),
        ]

    def test_empty_match_suppressed(self):
        defs = build_definitions([("x?", "/x")])
        result = link_text(defs, "a  b")
        assert result == [Text("a"), Text("  "), Text("b")]
        assert not any(isinstance(i, Link) for i in result)

    def test_empty_match_recurses_after(self):
        defs = build_definitions([("x?", "/x")])
        assert link_text(defs, "a  x") == [Text("a"), Text("  "), make_link("x", "/x")]

    def test_link_is_marked_auto(self):
        link = make_link("GAN", "/gan")
        assert link.attr == Attr(classes=("link-auto",))
        assert link.content == (Text("GAN"),)
        assert link.target == "/gan"


class TestDefineLinks:
    def test_match_across_space_nodes(self):
        defs = build_definitions([("[Hh]idden [Mm]arkov", "/hmm")])
        result = define_links(defs, [Text("hidden"), Space(), Text("Markov")])
        assert result == [make_link("hidden Markov", "/hmm")]

    def test_links_not_entered(self):
        defs = build_definitions([("GAN", "/gan")])
        existing = Link((Text("GAN"),), "/other")
        assert define_links(defs, [existing]) == [existing]

    def test_code_and_images_untouched(self):
        defs = build_definitions([("GAN", "/gan")])
        nodes = [Code("GAN"), Image("GAN", "gan.png")]
        assert define_links(defs, nodes) == nodes

    def test_text_around_code(self):
        defs = build_definitions([("GAN", "/gan")])
        result = define_links(defs, [Text("see"), Space(), Code("GAN"), Space(), Text("GAN")])
        assert result == [Text("see "), Code("GAN"), Text(" "), make_link("GAN", "/gan")]

    def test_span_rewritten_inside(self):
        defs = build_definitions([("GAN", "/gan")])
        span = Span((Text("GAN"),), Attr(classes=("smallcaps",)), "em")
        assert define_links(defs, [span]) == [
            Span((make_link("GAN", "/gan"),), Attr(classes=("smallcaps",)), "em"),
        ]

    def test_no_match_across_span_boundary(self):
        defs = build_definitions([("BigGAN", "/biggan")])
        nodes = [Text("Big"), Span((Text("GAN"),), mark="em")]
        assert define_links(defs, nodes) == nodes

    def test_no_definitions(self):
        nodes = [Text("GAN"), Space()]
        assert define_links([], nodes) == nodes


class TestRewriteDocument:
    def test_paragraphs_in_containers(self):
        defs = build_definitions([("GAN", "/gan")])
        doc = Document((Div((Paragraph((Text("GAN"),)),), Attr(classes=("abstract",))),))
        result = rewrite_document(doc, defs)
        assert result.content == (
            Div((Paragraph((make_link("GAN", "/gan"),)),), Attr(classes=("abstract",))),
        )

    def test_headings_untouched(self):
        defs = build_definitions([("GAN", "/gan")])
        doc = Document((Heading(2, (Text("GAN"),)), Paragraph((Text("GAN"),))))
        result = rewrite_document(doc, defs)
        assert result.content[0] == Heading(2, (Text("GAN"),))
        assert result.content[1] == Paragraph((make_link("GAN", "/gan"),))

    def test_headings_rewritten_on_request(self):
        defs = build_definitions([("GAN", "/gan")])
        doc = Document((Heading(2, (Text("GAN"),)),))
        result = rewrite_document(doc, defs, include_headings=True)
        assert result.content == (Heading(2, (make_link("GAN", "/gan"),)),)

    def test_meta_preserved(self):
        defs = build_definitions([("GAN", "/gan")])
        doc = Document((Paragraph((Text("GAN"),)),), meta={"title": "GANs"})
        assert rewrite_document(doc, defs).meta == {"title": "GANs"}
