"""Tests for unsafe markup removal.

Covers executable and embedded elements, reassembly bypasses, comments,
inline event handlers and script-capable URLs.
"""

import time

from src.services.cleaning.pipeline import clean_content
from src.services.cleaning.sanitizer import remove_unsafe_markup

# ===========================================================================
# Elements
# ===========================================================================


class TestElementRemoval:
    def test_script_block_removed_with_contents(self):
        result = remove_unsafe_markup("<p>Hi</p><script>alert(1)</script>")
        assert result.text == "<p>Hi</p>"
        assert result.counts == {"script_tags": 1}

    def test_script_with_attributes_and_case(self):
        result = remove_unsafe_markup('<SCRIPT type="text/javascript">x()</SCRIPT>after')
        assert result.text == "after"

    def test_style_block_removed(self):
        result = remove_unsafe_markup("<style>.a { color: red; }</style><p>x</p>")
        assert result.text == "<p>x</p>"
        assert result.counts == {"style_tags": 1}

    def test_embedded_objects_removed(self):
        text = '<iframe src="https://example.com"></iframe><object data="a.swf"></object><embed src="b.swf">'
        result = remove_unsafe_markup(text)
        assert result.text == ""
        assert result.counts == {"embedded_objects": 3}

    def test_form_removed_with_controls(self):
        text = '<form action="/go"><input type="text"><button>Go</button></form>Rest'
        assert remove_unsafe_markup(text).text == "Rest"

    def test_loose_form_controls_removed(self):
        text = '<input type="hidden" value="x"><select><option>A</option></select><textarea>t</textarea>Rest'
        assert remove_unsafe_markup(text).text == "Rest"

    def test_meta_and_link_tags_removed(self):
        result = remove_unsafe_markup('<meta charset="utf-8"><link rel="stylesheet" href="a.css">Text')
        assert result.text == "Text"
        assert result.counts == {"meta_tags": 2}

    def test_unterminated_script_opener_removed(self):
        result = remove_unsafe_markup("<p>ok</p><script>alert(1)")
        assert "<script" not in result.text.lower()

    def test_reassembled_script_caught(self):
        result = remove_unsafe_markup("<scr<script></script>ipt>alert(1)</script>")
        assert "<script" not in result.text.lower()

    def test_safe_markup_untouched(self):
        text = '<p>Text with <a href="https://example.com">a link</a> and <strong>bold</strong>.</p>'
        result = remove_unsafe_markup(text)
        assert result.text == text
        assert result.counts == {}


# ===========================================================================
# Comments
# ===========================================================================


class TestComments:
    def test_comment_removed(self):
        result = remove_unsafe_markup("a<!-- hidden note -->b")
        assert result.text == "ab"
        assert result.counts == {"html_comments": 1}

    def test_multiline_comment_removed(self):
        assert remove_unsafe_markup("a<!--\nline one\nline two\n-->b").text == "ab"

    def test_unterminated_opener_removed(self):
        assert "<!--" not in remove_unsafe_markup("<p>a</p><!-- never closed").text


# ===========================================================================
# Attributes
# ===========================================================================


class TestAttributes:
    def test_event_handler_stripped(self):
        result = remove_unsafe_markup('<img src="a.jpg" onerror="alert(1)">')
        assert result.text == '<img src="a.jpg">'
        assert result.counts == {"event_handlers": 1}

    def test_event_handler_in_malformed_tag_stripped(self):
        result = remove_unsafe_markup("<img/src=x onerror=alert(1)>")
        assert "onerror" not in result.text

    def test_quoted_gt_does_not_hide_handler(self):
        result = remove_unsafe_markup('<a title="a > b" onclick="steal()">x</a>')
        assert result.text == '<a title="a > b">x</a>'

    def test_javascript_url_dropped(self):
        result = remove_unsafe_markup('<a href="javascript:alert(1)">x</a>')
        assert result.text == "<a>x</a>"
        assert result.counts == {"unsafe_urls": 1}

    def test_obfuscated_scheme_dropped(self):
        assert remove_unsafe_markup('<a href=" JaVa\tScRiPt:alert(1)">x</a>').text == "<a>x</a>"

    def test_data_html_url_dropped(self):
        assert remove_unsafe_markup('<a href="data:text/html;base64,PHNjcmlwdD4=">x</a>').text == "<a>x</a>"

    def test_inline_raster_image_kept(self):
        text = '<img src="data:image/png;base64,iVBORw0KGgo=" alt="dot">'
        assert remove_unsafe_markup(text).text == text

    def test_style_attribute_stripped(self):
        result = remove_unsafe_markup('<p style="color: red;" class="intro">x</p>')
        assert result.text == '<p class="intro">x</p>'
        assert result.counts == {"style_tags": 1}

    def test_self_closing_slash_preserved(self):
        assert remove_unsafe_markup('<img src="a.jpg" onload="x()" />').text == '<img src="a.jpg" />'


class TestStability:
    def test_second_run_changes_nothing(self):
        text = '<div onclick="x()"><script>a()</script><!-- c -->Keep <a href="javascript:x">me</a></div>'
        once = remove_unsafe_markup(text)
        twice = remove_unsafe_markup(once.text)
        assert twice.text == once.text
        assert twice.counts == {}

    def test_plain_text_is_noop(self):
        assert remove_unsafe_markup("no markup at all").text == "no markup at all"


# ===========================================================================
# Large input
# ===========================================================================


class TestLargeInput:
    def test_many_unclosed_script_openers(self):
        text = "<script>" * 20000 + "x" * 100000

        t0 = time.perf_counter()
        result = remove_unsafe_markup(text)
        elapsed = time.perf_counter() - t0

        assert result.text == "x" * 100000
        assert result.counts == {"script_tags": 20000}
        assert elapsed < 2.0

    def test_many_unclosed_comment_openers(self):
        t0 = time.perf_counter()
        result = remove_unsafe_markup("-->" + "<!--" * 20000 + "x" * 100000)
        elapsed = time.perf_counter() - t0

        assert result.text == "-->" + "x" * 100000
        assert elapsed < 2.0

    def test_closer_after_unclosed_openers_still_pairs(self):
        result = remove_unsafe_markup("a<script>b<script>c</script>d<iframe>e")
        assert result.text == "ade"
        assert result.counts == {"script_tags": 1, "embedded_objects": 1}

    def test_full_pipeline_on_unclosed_openers(self):
        t0 = time.perf_counter()
        cleaned = clean_content("<script>" * 20000 + "x" * 100000)
        elapsed = time.perf_counter() - t0

        assert "<script" not in cleaned
        assert elapsed < 5.0
