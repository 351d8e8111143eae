"""Command-line interface for qaclipper."""

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional

# Check if --doctor flag is present before checking dependencies
if "--doctor" in sys.argv:
    from .doctor import run_doctor

    sys.exit(run_doctor())

# Verify core dependencies
try:
    import bs4  # noqa: F401
    import html2text  # noqa: F401
    import pydantic  # noqa: F401
    import rich  # noqa: F401
except ImportError as e:
    print(f"\nERROR: Missing required dependency: {e.name}", file=sys.stderr)
    print("\nqaclipper requires all core dependencies to be installed.", file=sys.stderr)
    print("\nRecommended fixes:", file=sys.stderr)
    print("  1. For pip users: pip install --upgrade --force-reinstall qaclipper", file=sys.stderr)
    print("  2. For development: pip install -e .[dev]", file=sys.stderr)
    print("\nTo diagnose issues, run: qaclipper --doctor", file=sys.stderr)
    sys.exit(1)

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from . import __version__
from .conversion import HtmlToPlainText, convert, extract_items
from .extraction import extract_conversation
from .formatters import get_formatter
from .logging_config import resolve_level, setup_logging
from .models.config import ClipperConfig, ConversionOptions, Platform
from .models.items import Conversation, ContentItem

LABEL_STYLES = [
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

NUMBER_FORMATS = [
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


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="qaclipper",
        description="Convert a saved chat conversation (Claude, ChatGPT, Gemini, Grok) to Markdown",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert a saved conversation page (platform detected from the page)
  qaclipper conversation.html

  # Force the platform and write to a file
  qaclipper page.html --platform chatgpt --output chat.md

  # Convert an HTML fragment read from stdin
  echo '<p>Hello <b>world</b></p>' | qaclipper - --fragment

  # Short labels, level 3 headings, "Q: 1" numbering
  qaclipper page.html --label-style short --header-level 3 --number-format colon

  # Content items as JSON
  qaclipper page.html --structured
        """,
    )

    parser.add_argument(
        "input",
        nargs="?",
        help="HTML file to convert ('-' reads stdin)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--doctor",
        action="store_true",
        help="Run diagnostic checks",
    )

    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        metavar="FILE",
        help="YAML config file (requires pyyaml)",
    )

    # Input handling
    input_group = parser.add_argument_group("input")
    input_group.add_argument(
        "--platform",
        "-p",
        choices=[p.value for p in Platform],
        default=None,
        help="Chat platform (default: detect from the page)",
    )
    input_group.add_argument(
        "--url",
        type=str,
        default=None,
        help="Original page URL, used for platform detection",
    )
    input_group.add_argument(
        "--fragment",
        action="store_true",
        help="Treat input as an HTML fragment rather than a conversation page",
    )
    input_group.add_argument(
        "--exclude-file-citations",
        action="store_true",
        default=None,
        help="Drop ChatGPT file-citation pills from answers",
    )

    # Formatting
    format_group = parser.add_argument_group("formatting")
    format_group.add_argument(
        "--format",
        "-f",
        choices=["markdown", "text"],
        default=None,
        dest="output_format",
        help="Output format (default: markdown)",
    )
    format_group.add_argument(
        "--structured",
        action="store_true",
        help="Print content items as JSON instead of a transcript",
    )
    format_group.add_argument(
        "--header-level",
        type=int,
        choices=range(1, 7),
        default=None,
        metavar="1-6",
        help="Heading level of question/answer labels (default: 2)",
    )
    format_group.add_argument(
        "--label-style",
        choices=LABEL_STYLES,
        default=None,
        help="Question/answer labels (default: qa)",
    )
    format_group.add_argument(
        "--number-format",
        choices=NUMBER_FORMATS,
        default=None,
        help="How pair numbers follow labels (default: space)",
    )
    format_group.add_argument(
        "--image-format",
        choices=["bracketed", "markdown", "plain"],
        default=None,
        help="How image URLs are listed (default: bracketed)",
    )

    # Output control
    output_group = parser.add_argument_group("output control")
    output_group.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        metavar="FILE",
        help="Write the result to FILE instead of stdout",
    )
    output_group.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )
    output_group.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress output",
    )

    return parser


def build_config(args: argparse.Namespace) -> ClipperConfig:
    """
    Merge the config file (if any) with command-line overrides.

    Raises:
        FileNotFoundError: If the config file does not exist
        ValidationError: If the merged settings are invalid
    """
    base = ClipperConfig.from_yaml_file(args.config) if args.config else ClipperConfig()
    data: dict[str, Any] = base.model_dump()

    if args.platform is not None:
        data["platform"] = args.platform
    if args.output_format is not None:
        data["output_format"] = args.output_format
    if args.exclude_file_citations is not None:
        data["exclude_file_citations"] = args.exclude_file_citations

    format_overrides = {
        "header_level": args.header_level,
        "label_style": args.label_style,
        "number_format": args.number_format,
        "image_format": args.image_format,
    }
    data["format"].update({key: value for key, value in format_overrides.items() if value is not None})

    data["log_level"] = resolve_level(data["log_level"], verbose=args.verbose, quiet=args.quiet)

    return ClipperConfig.model_validate(data)


def read_input(source: str) -> str:
    """Read HTML from a file path or stdin ('-')."""
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    return path.read_text(encoding="utf-8", errors="replace")


def _items_json(items: list[ContentItem]) -> list[dict[str, Any]]:
    return [asdict(item) for item in items]


def _conversation_json(conversation: Conversation) -> dict[str, Any]:
    return {
        "platform": conversation.platform.value,
        "turns": [
            {
                "index": turn.index,
                "role": turn.role,
                "text": turn.text,
                "items": _items_json(turn.items),
                "images": turn.images,
            }
            for turn in conversation.turns
        ],
    }


def render(args: argparse.Namespace, config: ClipperConfig, html: str, console: Console) -> Optional[str]:
    """Produce the output document, or None if nothing could be extracted."""
    if args.fragment:
        options = ConversionOptions(platform=config.platform or Platform.DEFAULT)
        if args.structured:
            return json.dumps(_items_json(extract_items(html, options)), ensure_ascii=False, indent=2)
        if config.output_format == "text":
            return HtmlToPlainText().convert(html, options).strip()
        return convert(html, options)

    conversation = extract_conversation(
        html,
        platform=config.platform,
        url=args.url,
        exclude_file_citations=config.exclude_file_citations,
        output_format=config.output_format,
    )
    if conversation.is_empty:
        console.print("[yellow]Warning:[/yellow] No conversation turns found (use --fragment for plain HTML)")
        return None

    if not args.quiet:
        console.print(f"[dim]Platform: {conversation.platform.value}, turns: {len(conversation.turns)}[/dim]")

    if args.structured:
        return json.dumps(_conversation_json(conversation), ensure_ascii=False, indent=2)
    formatter = get_formatter(config.output_format, config.format)
    return formatter.format_conversation(conversation)


def run_clipper(args: argparse.Namespace) -> int:
    """Run the conversion with given arguments."""
    # Messages go to stderr, the converted document to stdout
    console = Console(stderr=True)

    if not args.input:
        console.print("[red]Error:[/red] Please provide an HTML file to convert ('-' for stdin)")
        return 1

    try:
        config = build_config(args)
    except (FileNotFoundError, ValidationError, ImportError) as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        return 1

    logger = setup_logging(level=config.log_level, log_file=config.log_file, force=True)
    logger.debug(f"Config: {config.model_dump(mode='json')}")

    try:
        html = read_input(args.input)
    except OSError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return 1

    try:
        output = render(args, config, html, console)
    except Exception as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1

    if output is None:
        return 1

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(output + "\n", encoding="utf-8")
        if not args.quiet:
            console.print(f"[green]Saved[/green] {args.output}")
    else:
        sys.stdout.write(output + "\n")

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.doctor:
        from .doctor import run_doctor

        return run_doctor()

    return run_clipper(args)


if __name__ == "__main__":
    sys.exit(main())
