"""Tests for formatter modules."""

import pytest

from qaclipper.formatters import (
    PlainTranscriptFormatter,
    TranscriptFormatter,
    format_number,
    get_formatter,
    get_label,
)
from qaclipper.models import (
    CodeBlockItem,
    Conversation,
    ConversationTurn,
    FormatSettings,
    ImageItem,
    Platform,
    TextItem,
)


def make_conversation():
    return Conversation(
        platform=Platform.CLAUDE,
        turns=[
            ConversationTurn(index=0, role="user", text="Q?", images=["https://x/a.png"]),
            ConversationTurn(
                index=1,
                role="assistant",
                items=[TextItem(content="Ans"), ImageItem(src="https://x/b.png")],
            ),
        ],
    )


class TestFormatterFactory:
    """Test formatter factory function."""

    def test_get_markdown_formatter(self):
        """Test getting markdown formatter."""
        assert isinstance(get_formatter("markdown"), TranscriptFormatter)

    def test_get_text_formatter(self):
        """Test getting plain text formatter."""
        assert isinstance(get_formatter("TEXT"), PlainTranscriptFormatter)

    def test_get_invalid_formatter(self):
        """Test getting invalid formatter."""
        with pytest.raises(ValueError):
            get_formatter("invalid")

    def test_settings_passed_through(self):
        """Test that settings reach the formatter."""
        settings = FormatSettings(header_level=4)

        assert get_formatter("markdown", settings).settings is settings


class TestLabelsAndNumbers:
    """Test label and number helpers."""

    @pytest.mark.parametrize(
        "number_format,expected",
        [
            ("noSpace", "1"),
            ("space", " 1"),
            ("dashNoSpace", "-1"),
            ("dash", "- 1"),
            ("spaceDashNoSpace", " -1"),
            ("spaceDash", " - 1"),
            ("colonNoSpace", ":1"),
            ("colon", ": 1"),
            ("spaceColonNoSpace", " :1"),
            ("spaceColon", " : 1"),
        ],
    )
    def test_number_formats(self, number_format, expected):
        """Test every number format."""
        assert format_number(number_format, 1) == expected

    def test_labels(self):
        """Test label lookup and fallback."""
        assert get_label("qa", "user") == "Question"
        assert get_label("prompt", "assistant") == "Response"
        assert get_label("german", "user") == "Frage"
        assert get_label("nonexistent", "assistant") == "Answer"


class TestTranscriptFormatter:
    """Test TranscriptFormatter."""

    def test_full_transcript(self):
        """Test the default transcript layout."""
        result = TranscriptFormatter().format_conversation(make_conversation())

        assert result == (
            "## Question 1\n\nQ?\n\n[Image URL]: https://x/a.png\n\n"
            "## Answer 1\n\nAns\n\n[Image URL]: https://x/b.png"
        )

    def test_pair_numbering(self):
        """Test that consecutive questions share a number and unknown turns are skipped."""
        conversation = Conversation(
            platform=Platform.DEFAULT,
            turns=[
                ConversationTurn(index=0, role="user", text="a"),
                ConversationTurn(index=1, role="assistant", items=[TextItem(content="b")]),
                ConversationTurn(index=2, role="unknown"),
                ConversationTurn(index=3, role="user", text="c"),
                ConversationTurn(index=4, role="user", text="d"),
                ConversationTurn(index=5, role="assistant", items=[TextItem(content="e")]),
            ],
        )

        result = TranscriptFormatter().format_conversation(conversation)
        headings = [line for line in result.split("\n") if line.startswith("#")]

        assert headings == ["## Question 1", "## Answer 1", "## Question 2", "## Question 2", "## Answer 2"]

    @pytest.mark.parametrize(
        "image_format,expected",
        [
            ("bracketed", "[Image URL]: https://x/a.png"),
            ("markdown", "[Image URL](https://x/a.png)"),
            ("plain", "https://x/a.png"),
        ],
    )
    def test_image_formats(self, image_format, expected):
        """Test the three image styles."""
        formatter = TranscriptFormatter(FormatSettings(image_format=image_format))

        assert formatter.format_image("https://x/a.png") == expected

    def test_heading_settings(self):
        """Test header level, label style and number format together."""
        settings = FormatSettings(header_level=3, label_style="short", number_format="colon")

        result = TranscriptFormatter(settings).format_conversation(make_conversation())

        assert result.startswith("### Q: 1\n\nQ?")
        assert "### A: 1" in result

    def test_code_items(self):
        """Test that code blocks are fenced in the answer body."""
        conversation = Conversation(
            platform=Platform.DEFAULT,
            turns=[
                ConversationTurn(
                    index=0,
                    role="assistant",
                    items=[TextItem(content="Run"), CodeBlockItem(language="sh", content="ls")],
                )
            ],
        )

        result = TranscriptFormatter().format_conversation(conversation)

        assert result.endswith("\n\nRun\n\n```sh\nls\n```")

    def test_empty_conversation(self):
        """Test formatting nothing."""
        assert TranscriptFormatter().format_conversation(Conversation(platform=Platform.DEFAULT)) == ""

    def test_save_formatted(self, tmp_path):
        """Test writing a transcript to disk."""
        output = tmp_path / "out" / "chat.md"

        path = TranscriptFormatter().save_formatted(make_conversation(), output)

        assert path == output
        assert output.read_text(encoding="utf-8").startswith("## Question 1\n")
        assert output.read_text(encoding="utf-8").endswith("https://x/b.png\n")

    def test_file_extension(self):
        """Test the Markdown extension."""
        assert TranscriptFormatter().get_file_extension() == ".md"


class TestPlainTranscriptFormatter:
    """Test PlainTranscriptFormatter."""

    def test_plain_layout(self):
        """Test bare labels and raw image URLs."""
        result = PlainTranscriptFormatter().format_conversation(make_conversation())

        assert result == "Question 1\n\nQ?\n\nhttps://x/a.png\n\nAnswer 1\n\nAns\n\nhttps://x/b.png"

    def test_file_extension(self):
        """Test the text extension."""
        assert PlainTranscriptFormatter().get_file_extension() == ".txt"
