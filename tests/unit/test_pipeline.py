"""Tests for the full cleaning pipeline.

Covers stage ordering, convergence, configuration, statistics and the
failure path. Individual stage behaviour is tested in its own module.
"""

import pytest

from src.core.config import Settings
from src.core.exceptions import ContentCleaningError
from src.services.cleaning import pipeline
from src.services.cleaning.pipeline import STAGE_NAMES, ContentCleaner, PipelineStage, clean_content
from tests.conftest import END_TO_END_INPUT

IDEMPOTENCE_CORPUS = [
    END_TO_END_INPUT,
    "Plain text with no markup",
    "<p>Hello <b>world</b></p>",
    '<div class="wp-caption alignleft"><p>x</p></div>',
    "<h2 style='color:red'>Title</h2>text after",
    "[vc_row]Column[/vc_row]<br><br><br>more",
    "<p>intro<ul><li>one<li>two</ul>",
    '<a href="javascript:void(0)" onclick="go()">link</a> &amp; more',
    "<p><i>a</p></i><p></p><!-- note -->",
    "<scr<script></script>ipt>alert(1)</script>",
]

# ===========================================================================
# End to end
# ===========================================================================


class TestCleanContent:
    def test_mixed_legacy_post(self):
        assert clean_content(END_TO_END_INPUT) == "<p><strong>bold</strong></p>"

    def test_empty_paragraphs_and_bare_text(self):
        assert clean_content("<p></p><p>&nbsp;</p>Hello") == "<p>Hello</p>"

    def test_entities_decoded_and_wrapped(self):
        assert clean_content("&amp;") == "<p>&</p>"
        assert clean_content("&#65;") == "<p>A</p>"

    def test_shortcode_only_content_becomes_empty(self):
        assert clean_content('[gallery ids="1,2,3"]') == ""

    def test_already_clean_content_unchanged(self):
        text = '<p>Read <a href="https://example.com">this</a>.</p><ul><li>One</li></ul>'
        assert clean_content(text) == text

    @pytest.mark.parametrize("raw", [None, "", 42, b"<p>x</p>"])
    def test_missing_or_non_text_yields_empty(self, raw):
        assert clean_content(raw) == ""  # type: ignore[arg-type]


# ===========================================================================
# Convergence and safety
# ===========================================================================


class TestConvergence:
    @pytest.mark.parametrize("raw", IDEMPOTENCE_CORPUS)
    def test_cleaning_twice_changes_nothing(self, raw):
        once = clean_content(raw)
        assert clean_content(once) == once

    @pytest.mark.parametrize("raw", IDEMPOTENCE_CORPUS)
    def test_output_has_no_executable_markup(self, raw):
        cleaned = clean_content(raw).lower()
        assert "<script" not in cleaned
        assert "javascript:" not in cleaned
        assert "onclick" not in cleaned

    def test_double_escaped_entities_decode_one_level_per_run(self):
        once = clean_content("&amp;lt;b&amp;gt;x")
        assert once == "<p>&lt;b&gt;x</p>"
        assert clean_content(once) == "<p><strong>x</strong></p>"

    def test_reassembled_script_removed_with_single_pass(self):
        # Dropping the empty paragraph rebuilds "<script>" after sanitizing.
        cleaner = ContentCleaner(max_passes=1)
        cleaned = cleaner.clean("<scr<p></p>ipt>alert(1)</script>")
        assert "<script" not in cleaned.lower()

    def test_reassembled_script_removed_with_default_passes(self):
        assert "<script" not in clean_content("<scr<p></p>ipt>alert(1)</script>").lower()


# ===========================================================================
# Configuration
# ===========================================================================


class TestConfiguration:
    def test_default_runs_every_stage(self):
        assert ContentCleaner().stage_names == STAGE_NAMES

    def test_disabled_wrap_leaves_bare_text(self):
        cleaner = ContentCleaner(disabled_stages=["wrap"])
        assert "wrap" not in cleaner.stage_names
        assert cleaner.clean("Hello") == "Hello"

    def test_disabled_shortcodes_keeps_tokens(self):
        assert ContentCleaner(disabled_stages=["shortcodes"]).clean("[gallery]") == "<p>[gallery]</p>"

    def test_unknown_stage_rejected(self):
        with pytest.raises(ValueError, match="Unknown cleaning stages"):
            ContentCleaner(disabled_stages=["spellcheck"])

    def test_zero_passes_rejected(self):
        with pytest.raises(ValueError, match="max_passes"):
            ContentCleaner(max_passes=0)

    def test_from_settings(self):
        settings = Settings(cleaner_disabled_stages=["semantics"], cleaner_max_passes=2)
        cleaner = ContentCleaner.from_settings(settings)
        assert "semantics" not in cleaner.stage_names
        assert cleaner.clean("<b>x</b>") == "<p><b>x</b></p>"


# ===========================================================================
# Statistics
# ===========================================================================


class TestStatistics:
    def test_per_call_counts(self):
        result = ContentCleaner().clean_with_stats(END_TO_END_INPUT)
        assert result.text == "<p><strong>bold</strong></p>"
        assert result.stats.as_dict() == {
            "html_entities": 4,
            "presentational_tags": 1,
            "script_tags": 1,
            "shortcodes": 1,
            "unwrapped_content": 1,
        }

    def test_clean_content_reports_nothing(self):
        result = ContentCleaner().clean_with_stats("<p>Fine.</p>")
        assert result.stats.total == 0

    def test_instance_totals_accumulate(self):
        cleaner = ContentCleaner()
        cleaner.clean("&amp;")
        cleaner.clean("&amp;&amp;")
        assert cleaner.stats.counts["html_entities"] == 3

    def test_per_call_counts_independent_of_history(self):
        cleaner = ContentCleaner()
        cleaner.clean(END_TO_END_INPUT)
        assert cleaner.clean_with_stats("&amp;").stats.as_dict() == {"html_entities": 1, "unwrapped_content": 1}


# ===========================================================================
# Failures
# ===========================================================================


class TestStageFailure:
    def test_stage_error_wrapped_with_stage_name(self, monkeypatch):
        def broken(text: str):
            raise RuntimeError("boom")

        stages = tuple(
            PipelineStage(stage.name, broken) if stage.name == "artifacts" else stage for stage in pipeline.STAGES
        )
        monkeypatch.setattr(pipeline, "STAGES", stages)

        with pytest.raises(ContentCleaningError) as exc_info:
            ContentCleaner().clean("<p>x</p>")

        assert exc_info.value.stage == "artifacts"
        assert exc_info.value.details["stage"] == "artifacts"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_disabled_broken_stage_never_runs(self, monkeypatch):
        def broken(text: str):
            raise RuntimeError("boom")

        stages = tuple(
            PipelineStage(stage.name, broken) if stage.name == "artifacts" else stage for stage in pipeline.STAGES
        )
        monkeypatch.setattr(pipeline, "STAGES", stages)

        assert ContentCleaner(disabled_stages=["artifacts"]).clean("x") == "<p>x</p>"
