"""Tests for HTML to plain text conversion."""

from bs4 import BeautifulSoup

from qaclipper.conversion import HtmlToPlainText
from qaclipper.models import ConversionOptions


class TestHtmlToPlainText:
    """Test HtmlToPlainText."""

    def test_emphasis_and_links_dropped(self):
        """Test that Markdown markers are not produced."""
        converter = HtmlToPlainText()

        text = converter.convert('<p>Hello <b>world</b>, see <a href="https://e.com">docs</a></p>')

        assert text == "Hello world, see docs\n"

    def test_converter_reusable(self):
        """Test that one instance converts several documents independently."""
        converter = HtmlToPlainText()

        assert converter.convert("<p>first</p>") == "first\n"
        assert converter.convert("<p>second</p>") == "second\n"

    def test_skip_predicate_applied(self):
        """Test that options prune the tree first."""
        options = ConversionOptions(skip_element_check=lambda el: el.name == "aside")

        text = HtmlToPlainText().convert("<p>keep</p><aside>drop</aside>", options)

        assert text == "keep\n"

    def test_element_input_not_mutated(self):
        """Test converting an element of a caller's tree."""
        doc = BeautifulSoup("<div><p>a</p><script>x()</script></div>", "html.parser")

        assert HtmlToPlainText().convert(doc.div) == "a\n"
        assert doc.find("script") is not None

    def test_empty_input(self):
        """Test empty and whitespace-only input."""
        converter = HtmlToPlainText()

        assert converter.convert("") == ""
        assert converter.convert("<div> </div>") == ""
