"""Pydantic configuration models for qaclipper."""

from enum import Enum
from pathlib import Path
from typing import Any, Callable, Literal, Optional

from bs4 import Tag
from pydantic import BaseModel, Field, field_validator


class Platform(str, Enum):
    """Chat front-ends whose markup has dedicated conversion rules."""

    CLAUDE = "claude"
    CHATGPT = "chatgpt"
    GEMINI = "gemini"
    GROK = "grok"
    DEFAULT = "default"

    @classmethod
    def coerce(cls, value: Any) -> "Platform":
        """
        Normalize a platform name.

        Unknown or empty names resolve to DEFAULT instead of raising, so a
        caller passing e.g. "mistral" still gets the generic rules.

        Examples:
            >>> Platform.coerce("ChatGPT")
            <Platform.CHATGPT: 'chatgpt'>
            >>> Platform.coerce("mistral")
            <Platform.DEFAULT: 'default'>
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.DEFAULT


class ConversionOptions(BaseModel):
    """
    Per-call options for the HTML to Markdown engine.

    Example:
        options = ConversionOptions(
            platform=Platform.CHATGPT,
            ignore_tags={"table", "tr", "th", "td"},
            skip_element_check=lambda el: el.name == "button",
        )
    """

    skip_element_check: Optional[Callable[[Tag], bool]] = Field(
        None,
        description="Predicate over element nodes; matching subtrees are pruned",
    )
    ignore_tags: frozenset[str] = Field(
        default_factory=frozenset,
        description="Tag names always dropped (with their content) below the root",
    )
    platform: Platform = Field(
        Platform.DEFAULT,
        description="Platform whose rule variants are active",
    )

    model_config = {"extra": "forbid", "arbitrary_types_allowed": True}

    @field_validator("ignore_tags", mode="before")
    @classmethod
    def _lowercase_tags(cls, v: Any) -> frozenset[str]:
        if v is None:
            return frozenset()
        if isinstance(v, str):
            v = [v]
        return frozenset(str(tag).strip().lower() for tag in v if str(tag).strip())

    @field_validator("platform", mode="before")
    @classmethod
    def _coerce_platform(cls, v: Any) -> Platform:
        return Platform.coerce(v)

    def derive(self, **overrides: Any) -> "ConversionOptions":
        """Return a copy with some fields replaced (used for nested cell conversion)."""
        data = {
            "skip_element_check": self.skip_element_check,
            "ignore_tags": self.ignore_tags,
            "platform": self.platform,
        }
        data.update(overrides)
        return ConversionOptions(**data)


LabelStyle = Literal[
    "qa",
    "prompt",
    "short",
    "korean",
    "chinese",
    "japanese",
    "vietnamese",
    "indonesian",
    "hindi",
    "spanish",
    "portuguese",
    "french",
    "german",
    "italian",
    "russian",
    "arabic",
    "swahili",
]

NumberFormat = Literal[
    "noSpace",
    "space",
    "dashNoSpace",
    "dash",
    "spaceDashNoSpace",
    "spaceDash",
    "colonNoSpace",
    "colon",
    "spaceColonNoSpace",
    "spaceColon",
]


class FormatSettings(BaseModel):
    """Settings for rendering a whole conversation as a Q&A transcript."""

    header_level: int = Field(2, ge=1, le=6, description="Markdown heading level for turn labels")
    label_style: LabelStyle = Field("qa", description="Question/answer label vocabulary")
    number_format: NumberFormat = Field("space", description="How the pair number follows the label")
    image_format: Literal["bracketed", "markdown", "plain"] = Field(
        "bracketed",
        description="How image URLs are written after a turn",
    )
    image_label: str = Field("Image URL", description="Label used for image links")

    model_config = {"extra": "forbid"}


class ClipperConfig(BaseModel):
    """
    Root configuration model for qaclipper.

    Example:
        config = ClipperConfig(
            platform=Platform.CLAUDE,
            format=FormatSettings(header_level=3, label_style="short"),
        )

    YAML format:
        platform: claude
        output_format: markdown
        format:
          header_level: 3
          label_style: short
    """

    platform: Optional[Platform] = Field(
        None,
        description="Force a platform (None = detect from the page)",
    )
    output_format: Literal["markdown", "text"] = Field(
        "markdown",
        description="Render turns as Markdown or plain text",
    )
    format: FormatSettings = Field(default_factory=FormatSettings)  # noqa: A003
    exclude_file_citations: bool = Field(
        False,
        description="Drop ChatGPT file-citation pills from assistant turns",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "WARNING",
        description="Logging level",
    )
    log_file: Optional[Path] = Field(None, description="Log file path")

    model_config = {"extra": "forbid"}

    @field_validator("platform", mode="before")
    @classmethod
    def _coerce_platform(cls, v: Any) -> Optional[Platform]:
        if v is None:
            return None
        return Platform.coerce(v)

    def to_yaml(self) -> str:
        """Serialize config to YAML string."""
        import yaml

        return yaml.dump(self.model_dump(mode="json", exclude_none=True), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ClipperConfig":
        """Load config from YAML string."""
        import yaml

        data = yaml.safe_load(yaml_str) or {}
        return cls.model_validate(data)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "ClipperConfig":
        """Load config from YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        return cls.from_yaml(path.read_text(encoding="utf-8"))
