"""CLI entry point for git-scribe."""

import logging
import sys
from typing import Optional

import click

from git_scribe import __version__


def configure_logging(verbose: bool) -> None:
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(show_path=False, rich_tracebacks=True)],
        force=True,
    )


@click.command()
@click.version_option(version=__version__)
@click.option(
    "--repo", "-r",
    default=".",
    show_default=True,
    type=click.Path(file_okay=False),
    help="Path to the git repository.",
)
@click.option(
    "--backend", "-b",
    type=click.Choice(["copilot", "openai"]),
    default=None,
    help="Generation backend (default: env SCRIBE_BACKEND or copilot).",
)
@click.option(
    "--model", "-m",
    default=None,
    help="Model name (default: env SCRIBE_MODEL or gpt-4.1).",
)
@click.option(
    "--mode",
    type=click.Choice(["commit_message", "file_analysis", "contributor_analysis"]),
    default=None,
    help="Skip the mode menu and run this flow directly.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(
    repo: str,
    backend: Optional[str],
    model: Optional[str],
    mode: Optional[str],
    verbose: bool,
) -> None:
    """Git Scribe: AI commit messages, change explanations and contributor insights."""
    from dotenv import load_dotenv

    load_dotenv()  # Load .env file (e.g. OPENAI_API_KEY)
    configure_logging(verbose)

    from git_scribe.app import EXIT_ERROR, ScribeApp
    from git_scribe.config import Settings
    from git_scribe.errors import ConfigError
    from git_scribe.modes import Mode

    try:
        settings = Settings.from_env(backend=backend, model=model)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(EXIT_ERROR)

    app = ScribeApp(settings, repo_path=repo)
    sys.exit(app.run(Mode(mode) if mode else None))


if __name__ == "__main__":
    main()
