"""Tests for the command-line interface."""

import io
import json

import pytest
from rich.console import Console

from qaclipper.cli import build_config, create_parser, main
from qaclipper.doctor import run_doctor

PAGE = """
<article data-testid="conversation-turn-1">
  <div data-message-author-role="user"><div class="whitespace-pre-wrap">q</div></div>
</article>
<article data-testid="conversation-turn-2">
  <div data-message-author-role="assistant"><div class="markdown"><p>a</p></div></div>
</article>
"""


@pytest.fixture
def page_file(tmp_path):
    path = tmp_path / "chat.html"
    path.write_text(PAGE, encoding="utf-8")
    return path


@pytest.fixture
def fragment_file(tmp_path):
    path = tmp_path / "fragment.html"
    path.write_text("<p>Hello <strong>world</strong></p>", encoding="utf-8")
    return path


class TestMain:
    """Test main()."""

    def test_fragment(self, fragment_file, capsys):
        """Test converting a fragment to stdout."""
        assert main([str(fragment_file), "--fragment"]) == 0

        assert capsys.readouterr().out == "Hello **world**\n"

    def test_fragment_text_format(self, fragment_file, capsys):
        """Test plain text output of a fragment."""
        assert main([str(fragment_file), "--fragment", "--format", "text"]) == 0

        assert capsys.readouterr().out == "Hello world\n"

    def test_fragment_structured(self, fragment_file, capsys):
        """Test JSON content items."""
        assert main([str(fragment_file), "--fragment", "--structured"]) == 0

        assert json.loads(capsys.readouterr().out) == [{"content": "Hello **world**", "type": "text"}]

    def test_conversation_page(self, page_file, capsys):
        """Test the transcript of a conversation page."""
        assert main([str(page_file)]) == 0

        captured = capsys.readouterr()
        assert captured.out == "## Question 1\n\nq\n\n## Answer 1\n\na\n"
        assert "chatgpt" in captured.err

    def test_conversation_structured(self, page_file, capsys):
        """Test the JSON form of a conversation."""
        assert main([str(page_file), "--structured", "--quiet"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["platform"] == "chatgpt"
        assert [turn["role"] for turn in data["turns"]] == ["user", "assistant"]
        assert data["turns"][1]["items"] == [{"content": "a", "type": "text"}]

    def test_format_options(self, page_file, capsys):
        """Test heading overrides from the command line."""
        args = [str(page_file), "--header-level", "3", "--label-style", "short", "--number-format", "dash"]

        assert main(args) == 0

        assert capsys.readouterr().out.startswith("### Q- 1\n")

    def test_output_file(self, page_file, tmp_path, capsys):
        """Test writing to --output."""
        output = tmp_path / "out" / "chat.md"

        assert main([str(page_file), "--output", str(output)]) == 0

        assert output.read_text(encoding="utf-8").startswith("## Question 1")
        assert capsys.readouterr().out == ""

    def test_empty_page_fails(self, tmp_path):
        """Test that a page without turns is an error."""
        path = tmp_path / "empty.html"
        path.write_text("<p>nothing</p>", encoding="utf-8")

        assert main([str(path), "--platform", "claude"]) == 1

    def test_missing_input(self):
        """Test that an input argument is required."""
        assert main([]) == 1

    def test_nonexistent_file(self, tmp_path):
        """Test a missing input file."""
        assert main([str(tmp_path / "nope.html")]) == 1

    def test_config_file(self, page_file, tmp_path, capsys):
        """Test settings from a YAML config file."""
        pytest.importorskip("yaml")
        config = tmp_path / "qaclipper.yaml"
        config.write_text("format:\n  header_level: 3\n", encoding="utf-8")

        assert main([str(page_file), "--config", str(config)]) == 0

        assert capsys.readouterr().out.startswith("### Question 1")

    def test_missing_config_file(self, page_file, tmp_path):
        """Test a config path that does not exist."""
        assert main([str(page_file), "--config", str(tmp_path / "missing.yaml")]) == 1

    def test_version(self):
        """Test --version."""
        with pytest.raises(SystemExit):
            main(["--version"])


class TestBuildConfig:
    """Test build_config()."""

    def test_defaults(self):
        """Test config without overrides."""
        config = build_config(create_parser().parse_args(["page.html"]))

        assert config.platform is None
        assert config.output_format == "markdown"
        assert config.format.header_level == 2
        assert config.log_level == "WARNING"

    def test_overrides(self):
        """Test command-line overrides."""
        args = create_parser().parse_args(
            ["page.html", "-p", "gemini", "-f", "text", "--exclude-file-citations", "--image-format", "plain", "-v"]
        )

        config = build_config(args)

        assert config.platform.value == "gemini"
        assert config.output_format == "text"
        assert config.exclude_file_citations is True
        assert config.format.image_format == "plain"
        assert config.log_level == "DEBUG"


class TestDoctor:
    """Test run_doctor()."""

    def test_doctor_reports_core_dependencies(self):
        """Test that the diagnostics pass in the test environment."""
        buffer = io.StringIO()

        assert run_doctor(console=Console(file=buffer, width=120)) == 0

        output = buffer.getvalue()
        assert "[OK] beautifulsoup4" in output
        assert "[OK] CSS selector support" in output
