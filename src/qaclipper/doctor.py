"""Diagnostic tool for verifying qaclipper installation and dependencies."""

import sys
from importlib import import_module
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table


def check_dependency(
    module_name: str, package_name: Optional[str] = None, optional: bool = False
) -> tuple[bool, str]:
    """
    Check if a Python module is importable.

    Args:
        module_name: Name of the module to import
        package_name: Display name of the package (defaults to module_name)
        optional: Whether this is an optional dependency

    Returns:
        Tuple of (success: bool, message: str)
    """
    display_name = package_name or module_name

    try:
        import_module(module_name)
        return True, f"[OK] {display_name}"
    except ImportError:
        if optional:
            return False, f"[WARN] {display_name} (optional - not installed)"
        else:
            return False, f"[MISSING] {display_name}"


def check_css_selectors() -> tuple[bool, str]:
    """
    Check that BeautifulSoup can evaluate the CSS selectors the rules use.

    Returns:
        Tuple of (success: bool, message: str)
    """
    try:
        from bs4 import BeautifulSoup

        soup = BeautifulSoup('<div><pre><code class="language-py">x</code></pre></div>', "html.parser")
        div = soup.div
        if div is None or div.select_one(":scope > pre > code") is None or not div.css.match("div"):
            return False, "[FAIL] CSS selector support - unexpected result"
        return True, "[OK] CSS selector support"
    except ImportError:
        return False, "[FAIL] CSS selector support - beautifulsoup4 missing"
    except Exception as e:
        return False, f"[FAIL] CSS selector support - {str(e)} (beautifulsoup4 >= 4.12 required)"


def run_doctor(console: Optional[Console] = None) -> int:
    """
    Run diagnostic checks and display results.

    Args:
        console: Console to print to (defaults to a new stdout console)

    Returns:
        Exit code (0 if all core dependencies OK, 1 if any core dependency missing)
    """
    console = console or Console()

    console.print("Running qaclipper diagnostics...\n")

    # Core dependencies
    core_checks = [
        ("bs4", "beautifulsoup4"),
        ("soupsieve", "soupsieve"),
        ("html2text", "html2text"),
        ("pydantic", "pydantic"),
        ("rich", "rich"),
    ]

    # Optional dependencies
    optional_checks = [
        ("yaml", "pyyaml", True),
        ("lxml", "lxml", True),
    ]

    core_results = [check_dependency(mod, pkg) for mod, pkg in core_checks]
    optional_results = [check_dependency(mod, pkg, opt) for mod, pkg, opt in optional_checks]

    all_checks = {
        "Core Dependencies": core_results,
        "Optional Dependencies": optional_results,
        "System": [check_css_selectors()],
    }

    for category, results in all_checks.items():
        table = Table(title=category, show_header=False, box=None)
        table.add_column("Status", style="bold")

        for success, message in results:
            style = "green" if success else ("yellow" if "optional" in message else "red")
            table.add_row(escape(message), style=style)

        console.print(table)
        console.print()

    core_failed = any(not success for success, _ in core_results)

    if core_failed:
        console.print("\n[red]WARNING: Some core dependencies are missing![/red]")
        console.print("\nRecommended fixes:")
        console.print("  1. For pip users: pip install --upgrade --force-reinstall qaclipper")
        console.print("  2. For development: pip install -e .\\[dev]")
        return 1

    console.print("\n[green]All core dependencies installed correctly![/green]")

    optional_missing = [msg for success, msg in optional_results if not success]
    if optional_missing:
        console.print("\nOptional features available:")
        console.print("  - YAML config support: pip install qaclipper\\[yaml]")
        console.print("  - Faster HTML parsing: pip install lxml")

    return 0


if __name__ == "__main__":
    sys.exit(run_doctor())
