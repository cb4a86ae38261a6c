import sys
from pathlib import Path

import click
from loguru import logger

from registry_tag_cleanup import __version__
from registry_tag_cleanup.errors import ConfigError
from registry_tag_cleanup.orchestrator import CleanupOrchestrator
from registry_tag_cleanup.settings import Settings


def configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format="<level>{message}</level>",
    )


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="registry-tag-cleanup")
@click.option("-r", "--repository", default=None, help="Repository name.")
@click.option("-u", "--registry-url", default=None, help="Registry URL.")
@click.option(
    "-s",
    "--suffixes",
    default=None,
    help="Comma-separated suffixes to delete (e.g. -SNAPSHOT,-dev).",
)
@click.option(
    "-m", "--min-version", default=None, help="Minimum version to keep (e.g. 2.0.0)."
)
@click.option(
    "-e",
    "--excluded",
    default=None,
    help="Comma-separated tags to exclude (e.g. latest,stable).",
)
@click.option(
    "-f",
    "--settings-file",
    type=click.Path(path_type=Path),
    default=Path("settings"),
    show_default=True,
    help="KEY=value settings file; command-line options override its values.",
)
@click.option("-i", "--interactive", is_flag=True, help="Force interactive mode.")
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation prompts.")
@click.option("--dry-run", is_flag=True, help="Show the plan without deleting.")
@click.option("-v", "--verbose", is_flag=True, help="Show debug output.")
def cli(
    repository: str | None,
    registry_url: str | None,
    suffixes: str | None,
    min_version: str | None,
    excluded: str | None,
    settings_file: Path,
    interactive: bool,
    yes: bool,
    dry_run: bool,
    verbose: bool,
) -> None:
    """Delete Docker registry tags by suffix, minimum version and exclusions."""
    configure_logging(verbose)

    try:
        settings = Settings.load(
            settings_file,
            repository=repository,
            registry_url=registry_url,
            delete_suffixes=suffixes,
            min_version=min_version,
            excluded_tags=excluded,
            # Unset flags leave the settings file value alone
            interactive=interactive or None,
            auto_confirm=yes or None,
            dry_run=dry_run or None,
        )
    except ConfigError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    sys.exit(CleanupOrchestrator(settings).run())


if __name__ == "__main__":
    cli()
