"""Built-in problem samples for demonstrating the cleaner offline."""

from __future__ import annotations

from dataclasses import dataclass

from src.services.cleaning.pipeline import CleaningResult, ContentCleaner

SAMPLE_POST = """
<style>
.brutalist-button { left: -100%; transition: none; opacity: 0; }
</style>

<div class="content-wrapper" style="margin: 10px; color: red;">
  <span style="font-family: Arial;">
    &lt;strong&gt;IELTS Reading&lt;/strong&gt; tips for an 8+ band score
  </span>
</div>

[caption id="attachment_123" align="aligncenter" width="300"]
<img src="ielts-tips.jpg" alt="IELTS Tips" class="wp-image-123 size-medium">
A caption that only made sense on the old theme
[/caption]

<p></p><p>&nbsp;</p>

Split your time across passages. &quot;Time Management&quot; matters most.

<br><br><br>

1. Start by &lt;em&gt;skimming&lt;/em&gt;<br>
2. Then move on to &lt;b&gt;scanning&lt;/b&gt;<br>
3. Read every question carefully

[gallery ids="1,2,3"]

<font face="Verdana" color="blue">Follow these steps and your score will improve.</font>

<script>
  console.log("This should be removed");
</script>

&lt;p&gt;Final word: practise regularly.&lt;/p&gt;
"""

EXTRA_SAMPLES: dict[str, str] = {
    "HTML entities": "&lt;p&gt;IELTS &amp; PTE &quot;best&quot; tips.&lt;/p&gt; &nbsp;&nbsp; &mdash; Banglay IELTS",
    "Shortcodes": "[embed]https://youtube.com/watch?v=123[/embed] Watch this video [wp_custom_widget id=5] first.",
    "Broken HTML": (
        "<div><span style='color:red;'><font face='Arial'>IELTS Speaking</font></span> "
        "test <p></p><br><br> how to do well</div>"
    ),
}


@dataclass(frozen=True)
class DemoCase:
    name: str
    before: str
    result: CleaningResult


def run_demo(cleaner: ContentCleaner | None = None) -> list[DemoCase]:
    """Clean the main sample and the smaller examples."""
    cleaner = cleaner or ContentCleaner()
    samples = {"WordPress post": SAMPLE_POST, **EXTRA_SAMPLES}
    return [DemoCase(name, text, cleaner.clean_with_stats(text)) for name, text in samples.items()]
