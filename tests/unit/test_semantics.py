"""Tests for semantic tag normalization and paragraph wrapping."""

from src.services.cleaning.semantics import ensure_wrapped, normalize_semantics

# ===========================================================================
# Presentational tags
# ===========================================================================


class TestPresentationalTags:
    def test_bold_italic_underline_mapped(self):
        result = normalize_semantics("<p><b>x</b> <i>y</i> <u>z</u></p>")
        assert result.text == "<p><strong>x</strong> <em>y</em> <em>z</em></p>"
        assert result.counts == {"presentational_tags": 3}

    def test_uppercase_tags_lowercased(self):
        result = normalize_semantics("<P><B>x</B></P>")
        assert result.text == "<p><strong>x</strong></p>"
        assert result.counts == {"presentational_tags": 1}

    def test_attributes_on_bold_dropped(self):
        assert normalize_semantics('<b class="x">y</b>').text == "<strong>y</strong>"

    def test_similar_tag_names_untouched(self):
        text = "<blockquote>q</blockquote><ul><li>a<br></li></ul>"
        assert normalize_semantics(text).text == text

    def test_font_unwrapped(self):
        result = normalize_semantics('<p><font color="red" face="Arial">red</font></p>')
        assert result.text == "<p>red</p>"
        assert result.counts == {"presentational_tags": 2}

    def test_plain_text_is_noop(self):
        result = normalize_semantics("plain words")
        assert result.text == "plain words"
        assert result.counts == {}


# ===========================================================================
# Attribute rules
# ===========================================================================


class TestAttributeRules:
    def test_anchor_keeps_only_href(self):
        result = normalize_semantics('<a href="https://x.com" title="t" target="_blank" rel="nofollow">x</a>')
        assert result.text == '<a href="https://x.com">x</a>'
        assert result.counts == {"presentational_tags": 1}

    def test_anchor_attribute_name_lowercased(self):
        assert normalize_semantics('<a HREF="/x">x</a>').text == '<a href="/x">x</a>'

    def test_anchor_unsafe_href_dropped(self):
        assert normalize_semantics('<a href="javascript:x()">x</a>').text == "<a>x</a>"

    def test_clean_anchor_not_counted(self):
        result = normalize_semantics('<a href="/x">x</a>')
        assert result.text == '<a href="/x">x</a>'
        assert result.counts == {}

    def test_heading_attributes_stripped(self):
        result = normalize_semantics('<h2 class="title" id="x">T</h2>')
        assert result.text == "<h2>T</h2>"
        assert result.counts == {"presentational_tags": 1}

    def test_image_keeps_src_and_alt(self):
        text = '<img src="a.jpg" alt="A" width="300" height="200" title="t">'
        assert normalize_semantics(text).text == '<img src="a.jpg" alt="A" />'

    def test_image_empty_alt_kept(self):
        assert normalize_semantics('<img src="a.jpg" alt="">').text == '<img src="a.jpg" alt="" />'

    def test_image_without_src_removed(self):
        result = normalize_semantics('<p>x<img alt="nothing"></p>')
        assert result.text == "<p>x</p>"
        assert result.counts == {"presentational_tags": 1}

    def test_normalized_image_is_stable(self):
        result = normalize_semantics('<img src="a.jpg" />')
        assert result.text == '<img src="a.jpg" />'
        assert result.counts == {}


# ===========================================================================
# Wrapping
# ===========================================================================


class TestEnsureWrapped:
    def test_bare_text_wrapped_in_paragraph(self):
        result = ensure_wrapped("Hello")
        assert result.text == "<p>Hello</p>"
        assert result.counts == {"unwrapped_content": 1}

    def test_block_start_left_alone(self):
        result = ensure_wrapped("<p>x</p>")
        assert result.text == "<p>x</p>"
        assert result.counts == {}

    def test_uppercase_block_start_left_alone(self):
        assert ensure_wrapped("<H2>Title</H2>").text == "<H2>Title</H2>"

    def test_leading_inline_run_wrapped(self):
        assert ensure_wrapped("Intro <strong>x</strong><p>y</p>").text == "<p>Intro <strong>x</strong></p><p>y</p>"

    def test_leading_inline_element_wrapped(self):
        assert ensure_wrapped("<strong>x</strong><p>y</p>").text == "<p><strong>x</strong></p><p>y</p>"

    def test_table_wrapped_in_div(self):
        text = "<table><tr><td>x</td></tr></table>"
        assert ensure_wrapped(text).text == f"<div>{text}</div>"

    def test_preformatted_wrapped_in_div(self):
        assert ensure_wrapped("<pre>code</pre>").text == "<div><pre>code</pre></div>"

    def test_blank_becomes_empty(self):
        result = ensure_wrapped("   ")
        assert result.text == ""
        assert result.counts == {}
