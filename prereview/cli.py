"""
Command line entry point for PreReview.
"""
import logging
import sys
from typing import Callable, Optional

import click
import yaml

from prereview.config import CONFIG_FILENAME, ReviewConfig, load_config, write_default_config
from prereview.exceptions import ConfigError, GitError, HookError
from prereview.models import SessionAction
from prereview.services.assistant_service import AssistantService
from prereview.services.change_filter import ChangeFilter
from prereview.services.doctor_service import DoctorService
from prereview.services.git_service import GitService
from prereview.services.hook_service import HookService
from prereview.services.patch_service import PatchService
from prereview.services.review_service import ReviewService
from prereview.services.standards_service import StandardsService
from prereview.ui import terminal
from prereview.ui.session import ReviewSession, read_line

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def run_review(
    config: ReviewConfig,
    assistant: Optional[AssistantService] = None,
    read_input: Callable[[str], Optional[str]] = read_line,
    interactive: bool = True,
) -> int:
    """
    Review staged changes and run the interactive session.

    Args:
        config: Settings for this run.
        assistant: Reply source, defaults to the configured Ollama model.
        read_input: Reads one answer from the user.
        interactive: False in hook mode, where suggestions are listed and
            block the commit without asking anything.

    Returns:
        Process exit code: 0 when the commit may proceed, 1 otherwise.
    """
    while True:
        git = GitService()
        if not git.is_repository():
            terminal.error("Not a git repository")
            return 1

        try:
            repo_root = git.repo_root()
        except GitError as e:
            logger.debug("Could not determine repository root: %s", e)
            terminal.warning("Could not determine repository root")
            repo_root = "."
        git = GitService(cwd=repo_root)

        try:
            changes = git.get_staged_changes()
        except GitError as e:
            terminal.error(f"Failed to get staged changes: {e}")
            return 1

        changes = ChangeFilter(config.ignore_patterns, config.max_file_size).filter(changes)
        if not changes:
            terminal.info("No staged changes to review")
            return 0

        terminal.info(f"🔍 Reviewing {len(changes)} changed file(s)...\n")

        standards_context = StandardsService(repo_root, config.coding_standards).get_context()
        reviewer = ReviewService(
            config,
            assistant=assistant,
            standards_context=standards_context,
            progress=terminal.progress,
        )
        result = reviewer.review(changes)

        if result.errors:
            terminal.warning(f"Could not review {len(result.errors)} file(s)")
        if not result.suggestions:
            terminal.success("✓ No issues found! Your code looks good.")
            return 0

        if not interactive:
            for number, suggestion in enumerate(result.suggestions, start=1):
                terminal.print_suggestion(suggestion, number, len(result.suggestions))
            terminal.echo()
            terminal.warning(f"Found {len(result.suggestions)} issue(s). Run 'prereview' to review and fix them.")
            return 1

        session = ReviewSession(
            result.suggestions,
            patcher=PatchService(git=git, repo_root=repo_root),
            git=git,
            read_input=read_input,
        )
        outcome = session.run()

        if outcome.action == SessionAction.COMMIT:
            terminal.success(f"\n✓ Review complete: {outcome.fixed} fixed, {outcome.skipped} skipped")
            if config.strict and outcome.skipped > 0:
                terminal.warning("Strict mode: Cannot commit with skipped issues")
                return 1
            return 0

        if outcome.action == SessionAction.ABORT:
            terminal.info("\n✗ Review aborted")
            return 1

        terminal.info("\n🔄 Re-reviewing changes...")


@click.group(invoke_without_command=True)
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help=f"Config file (default {CONFIG_FILENAME}).")
@click.option("--hook", is_flag=True, help="Pre-commit hook mode: list issues and fail instead of asking.")
@click.pass_context
def cli(ctx, config_path, hook):
    """AI-powered code review of staged changes before you commit."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["hook"] = hook
    if ctx.invoked_subcommand is None:
        ctx.invoke(review)


@cli.command()
@click.option("--model", help="Ollama model to use.")
@click.option("--tolerance", type=click.Choice(["strict", "moderate", "relaxed"]), help="How aggressively issues are reported.")
@click.option("--strict", is_flag=True, help="Refuse to commit when any suggestion was skipped.")
@click.option("--verbose", is_flag=True, help="Show detailed output.")
@click.pass_context
def review(ctx, model=None, tolerance=None, strict=False, verbose=False):
    """Review staged changes."""
    overrides = {
        "model": model,
        "tolerance": tolerance,
        "strict": True if strict else None,
        "verbose": True if verbose else None,
    }
    try:
        config = load_config(ctx.obj.get("config_path"), overrides)
    except ConfigError as e:
        terminal.error(str(e))
        ctx.exit(1)

    configure_logging(config.verbose)
    ctx.exit(run_review(config, interactive=not ctx.obj.get("hook")))


@cli.group("config")
def config_group():
    """View or create configuration."""


@config_group.command("init")
@click.option("--path", default=CONFIG_FILENAME, show_default=True)
def config_init(path):
    """Create a default configuration file."""
    if write_default_config(path):
        terminal.success(f"✓ Created configuration file: {path}")
    else:
        terminal.warning(f"Configuration file already exists: {path}")


@config_group.command("show")
@click.pass_context
def config_show(ctx):
    """Print the effective configuration."""
    try:
        config = load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        terminal.error(str(e))
        ctx.exit(1)
    terminal.echo(yaml.safe_dump(config.model_dump(), sort_keys=True).rstrip())


@cli.command()
@click.pass_context
def install(ctx):
    """Install PreReview as the git pre-commit hook."""
    hooks = _hook_service(ctx)
    try:
        updated = hooks.install()
    except HookError as e:
        terminal.error(str(e))
        ctx.exit(1)

    if updated:
        terminal.info("Updated existing prereview hook")
    terminal.success("✓ Pre-commit hook installed successfully!")
    terminal.info("  PreReview will now run automatically before each commit.")
    terminal.info("  Run 'prereview uninstall' to remove the hook.")


@cli.command()
@click.pass_context
def uninstall(ctx):
    """Remove the PreReview pre-commit hook."""
    hooks = _hook_service(ctx)
    try:
        removed = hooks.uninstall()
    except HookError as e:
        terminal.error(str(e))
        ctx.exit(1)

    if removed:
        terminal.success("✓ Pre-commit hook removed successfully!")
    else:
        terminal.info("No pre-commit hook found")


def _hook_service(ctx) -> HookService:
    git = GitService()
    if not git.is_repository():
        terminal.error("Not a git repository")
        ctx.exit(1)
    try:
        return HookService(git.git_dir())
    except GitError as e:
        terminal.error(f"Failed to find .git directory: {e}")
        ctx.exit(1)


@cli.command()
@click.pass_context
def doctor(ctx):
    """Check that git and the Ollama model are ready."""
    try:
        config = load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        terminal.error(str(e))
        ctx.exit(1)

    terminal.info("\n🩺 PreReview Doctor\n")
    results = DoctorService(config).run()

    for result in results:
        if result.ok:
            terminal.success(f"  ✓ {result.name}")
        else:
            terminal.warning(f"  ✗ {result.name}")
        if result.message:
            terminal.muted(f"     {result.message}")

    failed = [r for r in results if not r.ok]
    helps = [r.help for r in failed if r.help]
    if helps:
        terminal.echo()
        terminal.divider()
        terminal.info("📋 How to fix\n")
        for text in helps:
            terminal.echo(text + "\n")

    terminal.divider()
    if failed:
        terminal.warning("⚠ Some checks failed. Please fix the issues above.")
        ctx.exit(1)
    terminal.success("✓ All checks passed! PreReview is ready to use.")


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, type=int, show_default=True)
def serve(host, port):
    """Run the HTTP API for editor integrations."""
    import uvicorn

    uvicorn.run("prereview.main:app", host=host, port=port)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
