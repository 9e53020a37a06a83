"""
Terminal output helpers.
"""
import click

from prereview.models import Suggestion

DIVIDER = "─" * 60

SEVERITY_COLORS = {
    "error": "red",
    "warning": "yellow",
    "info": "blue",
    "hint": "cyan",
}

SEVERITY_ICONS = {
    "error": "✗",
    "warning": "⚠",
    "info": "ℹ",
    "hint": "💡",
}


def echo(message: str = "", nl: bool = True) -> None:
    click.echo(message, nl=nl)


def success(message: str) -> None:
    click.echo(click.style(message, fg="green"))


def warning(message: str) -> None:
    click.echo(click.style(message, fg="yellow"))


def error(message: str) -> None:
    click.echo(click.style(message, fg="red", bold=True), err=True)


def info(message: str) -> None:
    click.echo(click.style(message, fg="blue"))


def muted(message: str) -> None:
    click.echo(click.style(message, dim=True))


def option(key: str) -> str:
    """Highlight the shortcut letter of a menu option."""
    return click.style(key, fg="cyan", bold=True)


def divider() -> None:
    click.echo(click.style(DIVIDER, dim=True))


def progress(kind: str, message: str) -> None:
    """Progress callback for ReviewService."""
    if kind == "success":
        success(f"    ✓ {message}")
    elif kind == "error":
        error(f"    ✗ {message}")
    else:
        echo(f"  {message}")


def print_suggestion(suggestion: Suggestion, number: int, total: int) -> None:
    divider()
    click.echo(click.style(f" 📄 {suggestion.file_path} [{number}/{total}] ", bold=True, reverse=True))
    divider()

    if suggestion.line > 0:
        location = f"Line {suggestion.line}"
        if suggestion.end_line > suggestion.line:
            location = f"Lines {suggestion.line}-{suggestion.end_line}"
        muted(f"  {location}")

    color = SEVERITY_COLORS.get(suggestion.severity, "white")
    icon = SEVERITY_ICONS.get(suggestion.severity, "•")
    click.echo()
    click.echo(click.style(f"  {icon} {suggestion.title}", fg=color, bold=True))

    if suggestion.description:
        click.echo()
        click.echo(f"  {suggestion.description}")

    if suggestion.suggested_fix:
        click.echo()
        click.echo(click.style("  Suggested fix:", fg="green", bold=True))
        for line in suggestion.suggested_fix.split("\n"):
            click.echo(click.style(f"    {line}", fg="green"))

    badges = [b for b in (suggestion.category, suggestion.confidence and f"confidence: {suggestion.confidence}") if b]
    if badges:
        click.echo()
        click.echo("  " + "  ".join(click.style(f" {b} ", reverse=True, dim=True) for b in badges))


def print_summary(fixed: int, skipped: int, remaining: int) -> None:
    divider()
    click.echo(click.style("Summary", bold=True))
    click.echo(f"  {click.style('✓', fg='green')} {fixed} fixed")
    click.echo(f"  {click.style('⏭', fg='yellow')} {skipped} skipped")
    if remaining > 0:
        click.echo(f"  {click.style('•', fg='red')} {remaining} remaining")
    divider()
