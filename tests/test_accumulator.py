"""Tests for content item extraction."""

from qaclipper.conversion import add_text_item, extract_items
from qaclipper.models import CodeBlockItem, ConversionOptions, ImageItem, Platform, TextItem, items_to_markdown


class TestAddTextItem:
    """Tests for add_text_item()."""

    def test_appends_trimmed_text(self):
        """Test that text is trimmed before it is stored."""
        items = []

        add_text_item(items, "  hello \n")

        assert items == [TextItem(content="hello")]

    def test_merges_with_trailing_text_item(self):
        """Test that adjacent text is merged with a blank line."""
        items = [TextItem(content="a")]

        add_text_item(items, "b")

        assert items == [TextItem(content="a\n\nb")]

    def test_starts_new_item_after_code(self):
        """Test that text after a code block is a new item."""
        items = [CodeBlockItem(language="py", content="x")]

        add_text_item(items, "after")

        assert len(items) == 2
        assert items[1] == TextItem(content="after")

    def test_blank_text_ignored(self):
        """Test that blank or missing text adds nothing."""
        items = []

        add_text_item(items, "   ")
        add_text_item(items, None)

        assert items == []


class TestExtractItems:
    """Tests for extract_items()."""

    def test_mixed_content(self):
        """Test splitting text, code and images into separate items."""
        html = (
            '<div class="markdown"><p>Intro</p>'
            '<div><div class="code-language">Python</div><button>Copy</button><pre><code>print(1)</code></pre></div>'
            '<p>Outro</p><p><img src="https://x/c.png" alt="Chart"></p></div>'
        )

        items = extract_items(html)

        assert items == [
            TextItem(content="Intro"),
            CodeBlockItem(language="python", content="print(1)"),
            TextItem(content="Outro"),
            ImageItem(src="https://x/c.png", alt="Chart"),
        ]

    def test_inline_data_image_skipped(self):
        """Test that data: images disappear and the text around them merges."""
        html = '<p>a</p><img src="data:image/png;base64,AAAA"><p>b</p>'

        assert extract_items(html) == [TextItem(content="a\n\nb")]

    def test_empty_code_block_dropped(self):
        """Test that blank code yields no item and text merges across it."""
        html = "<p>a</p><pre><code>  </code></pre><p>b</p>"

        assert extract_items(html) == [TextItem(content="a\n\nb")]

    def test_wrapper_div_looked_through(self):
        """Test that code inside a content wrapper is still its own item."""
        html = '<div><p>x</p><pre><code class="language-sh">ls</code></pre></div>'

        assert extract_items(html) == [
            TextItem(content="x"),
            CodeBlockItem(language="sh", content="ls"),
        ]

    def test_prose_beside_code_kept(self):
        """Test that text sharing a wrapper with a <pre> becomes its own text item."""
        html = "<div><div>Run this command first: <pre><code>ls -la</code></pre></div></div>"

        assert extract_items(html) == [
            TextItem(content="Run this command first:"),
            CodeBlockItem(language="text", content="ls -la"),
        ]

    def test_grok_code_wrapper(self):
        """Test that Grok's <pre>-less code wrapper becomes a code item."""
        html = (
            '<p>Try:</p><div class="not-prose"><div class="relative">'
            '<div class="flex"><span class="font-mono text-xs">Bash</span></div>'
            '<div style="display: block"><code style="white-space: pre">echo hi</code></div></div></div>'
        )

        items = extract_items(html, ConversionOptions(platform=Platform.GROK))

        assert items == [TextItem(content="Try:"), CodeBlockItem(language="bash", content="echo hi")]

    def test_image_within_text_stays_inline(self):
        """Test that an image mixed with text is rendered in the text."""
        html = '<p>See <img src="https://x/a.png"> here</p>'

        assert extract_items(html) == [TextItem(content="See ![Image](https://x/a.png) here")]

    def test_never_two_adjacent_text_items(self):
        """Test the merge invariant over a longer turn."""
        html = "<p>1</p><ul><li>a</li></ul><pre>code</pre><h2>T</h2><p>2</p><blockquote>q</blockquote>"

        items = extract_items(html)

        for first, second in zip(items, items[1:]):
            assert not (isinstance(first, TextItem) and isinstance(second, TextItem))

    def test_platform_options_apply(self):
        """Test that platform rules are used for code items."""
        html = (
            '<code-block><div class="code-block-decoration"><span>Python</span></div>'
            "<pre><code>x = 1</code></pre></code-block>"
        )

        items = extract_items(html, ConversionOptions(platform=Platform.GEMINI))

        assert items == [CodeBlockItem(language="python", content="x = 1")]

    def test_skipped_root(self):
        """Test that a skipped root yields no items."""
        options = ConversionOptions(skip_element_check=lambda el: True)

        assert extract_items("<p>a</p>", options) == []

    def test_empty_input(self):
        """Test empty input."""
        assert extract_items("") == []

    def test_deeply_nested_input(self):
        """Test the plain-text fallback when nesting exceeds the recursion limit."""
        html = "<p>intro</p>" + "<div>" * 5000 + "<pre><code>x</code></pre>" + "</div>" * 5000

        assert extract_items(html) == [TextItem(content="intro\nx")]

    def test_items_to_markdown(self):
        """Test joining items back into one document."""
        items = extract_items('<p>Intro</p><pre><code class="language-py">x</code></pre>')

        assert items_to_markdown(items) == "Intro\n\n```py\nx\n```"
