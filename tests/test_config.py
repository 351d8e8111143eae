"""Tests for configuration models."""

import pytest
from pydantic import ValidationError

from qaclipper.models import ClipperConfig, ConversionOptions, FormatSettings, Platform


class TestPlatform:
    """Test Platform.coerce()."""

    def test_coerce_names(self):
        """Test case-insensitive names and enum passthrough."""
        assert Platform.coerce("ChatGPT") is Platform.CHATGPT
        assert Platform.coerce(" claude ") is Platform.CLAUDE
        assert Platform.coerce(Platform.GEMINI) is Platform.GEMINI
        assert Platform.coerce("Grok") is Platform.GROK

    def test_unknown_names_are_default(self):
        """Test that unknown platforms never raise."""
        assert Platform.coerce("mistral") is Platform.DEFAULT
        assert Platform.coerce("") is Platform.DEFAULT
        assert Platform.coerce(None) is Platform.DEFAULT


class TestConversionOptions:
    """Test ConversionOptions."""

    def test_defaults(self):
        """Test default options."""
        options = ConversionOptions()

        assert options.skip_element_check is None
        assert options.ignore_tags == frozenset()
        assert options.platform is Platform.DEFAULT

    def test_ignore_tags_normalized(self):
        """Test lowercasing and blank removal."""
        options = ConversionOptions(ignore_tags=["TABLE", " Tr ", ""])

        assert options.ignore_tags == frozenset({"table", "tr"})

    def test_single_tag_string(self):
        """Test that a lone tag name is accepted."""
        assert ConversionOptions(ignore_tags="Nav").ignore_tags == frozenset({"nav"})

    def test_platform_coerced(self):
        """Test platform names in options."""
        assert ConversionOptions(platform="GEMINI").platform is Platform.GEMINI
        assert ConversionOptions(platform="unknown-ui").platform is Platform.DEFAULT

    def test_extra_fields_forbidden(self):
        """Test that typos are rejected."""
        with pytest.raises(ValidationError):
            ConversionOptions(ignore_tag={"p"})

    def test_derive(self):
        """Test copying with overrides."""

        def predicate(el):
            return False

        options = ConversionOptions(skip_element_check=predicate, platform="claude")

        derived = options.derive(ignore_tags={"td"})

        assert derived.skip_element_check is predicate
        assert derived.platform is Platform.CLAUDE
        assert derived.ignore_tags == frozenset({"td"})
        assert options.ignore_tags == frozenset()


class TestFormatSettings:
    """Test FormatSettings."""

    def test_defaults(self):
        """Test default transcript settings."""
        settings = FormatSettings()

        assert settings.header_level == 2
        assert settings.label_style == "qa"
        assert settings.number_format == "space"
        assert settings.image_format == "bracketed"

    @pytest.mark.parametrize("level", [0, 7])
    def test_header_level_bounds(self, level):
        """Test heading level validation."""
        with pytest.raises(ValidationError):
            FormatSettings(header_level=level)

    def test_unknown_label_style(self):
        """Test label style validation."""
        with pytest.raises(ValidationError):
            FormatSettings(label_style="klingon")


class TestClipperConfig:
    """Test ClipperConfig."""

    def test_defaults(self):
        """Test default config."""
        config = ClipperConfig()

        assert config.platform is None
        assert config.output_format == "markdown"
        assert config.exclude_file_citations is False

    def test_platform_coerced(self):
        """Test that platform names are normalized."""
        assert ClipperConfig(platform="Claude").platform is Platform.CLAUDE

    def test_yaml_round_trip(self):
        """Test YAML serialization."""
        pytest.importorskip("yaml")
        config = ClipperConfig(platform=Platform.CHATGPT, format=FormatSettings(label_style="short"))

        loaded = ClipperConfig.from_yaml(config.to_yaml())

        assert loaded == config

    def test_empty_yaml(self):
        """Test that an empty document gives defaults."""
        pytest.importorskip("yaml")

        assert ClipperConfig.from_yaml("") == ClipperConfig()

    def test_yaml_file(self, tmp_path):
        """Test loading from a file."""
        pytest.importorskip("yaml")
        path = tmp_path / "config.yaml"
        path.write_text("platform: gemini\nformat:\n  number_format: colon\n", encoding="utf-8")

        config = ClipperConfig.from_yaml_file(path)

        assert config.platform is Platform.GEMINI
        assert config.format.number_format == "colon"

    def test_missing_yaml_file(self, tmp_path):
        """Test a config path that does not exist."""
        with pytest.raises(FileNotFoundError):
            ClipperConfig.from_yaml_file(tmp_path / "missing.yaml")
