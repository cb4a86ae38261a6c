"""End-to-end cleanup run: configure, list, partition, confirm, delete."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

import click
from loguru import logger

from registry_tag_cleanup.errors import (
    AuthError,
    ConfigError,
    EmptyRepositoryError,
    NetworkError,
)
from registry_tag_cleanup.logic import (
    DeletionReport,
    RetentionPlan,
    RetentionRules,
    create_plan,
    execute_plan,
    write_summary,
)
from registry_tag_cleanup.registry import RegistryClient, init_registry
from registry_tag_cleanup.settings import Settings, split_csv


class State(StrEnum):
    CONFIGURING = "configuring"
    LISTING = "listing"
    PARTITIONING = "partitioning"
    CONFIRMING_PREVIEW = "confirming_preview"
    CONFIRMING_DELETION = "confirming_deletion"
    DELETING = "deleting"
    DONE = "done"
    ABORTED = "aborted"


def _click_confirm(text: str) -> bool:
    return click.confirm(text, default=False)


def _click_ask(text: str, default: str) -> str:
    return str(click.prompt(text, default=default, show_default=bool(default)))


@dataclass
class Prompter:
    """Terminal interaction used by the orchestrator."""

    confirm: Callable[[str], bool] = _click_confirm
    ask: Callable[[str, str], str] = _click_ask


class CleanupOrchestrator:
    def __init__(
        self,
        settings: Settings,
        prompter: Prompter | None = None,
        registry_factory: Callable[
            [Settings], tuple[RegistryClient, str]
        ] = init_registry,
    ):
        self.settings = settings
        self.prompter = prompter or Prompter()
        self.registry_factory = registry_factory
        self.state = State.CONFIGURING
        self.plan: RetentionPlan | None = None
        self.report: DeletionReport | None = None

    def run(self) -> int:
        """Run the cleanup and return the process exit code."""
        self.configure()

        try:
            registry, registry_info = self.registry_factory(self.settings)
        except (ConfigError, AuthError) as e:
            logger.error(f"Error: {e}")
            return self._abort(1)

        self.state = State.LISTING
        logger.info(f"Fetching available tags for {registry_info}...")
        try:
            tags = registry.list_tags()
        except EmptyRepositoryError as e:
            logger.warning(str(e))
            return self._abort(0)
        except NetworkError as e:
            logger.error(f"Error: {e}")
            return self._abort(1)
        logger.info(f"Found {len(tags)} tag(s)")

        self.state = State.PARTITIONING
        rules = RetentionRules.from_settings(self.settings)
        plan = self.plan = create_plan(tags, rules)
        self._log_plan(plan)
        count = len(plan.tags_to_delete)
        if not count:
            logger.info("No tags to delete. Exiting.")
            return self._abort(0)

        if self.settings.dry_run:
            logger.info(f"DRY RUN: Would delete {count} tags")
            write_summary(plan, None, self.settings)
            self.state = State.DONE
            return 0

        self.state = State.CONFIRMING_PREVIEW
        if not self._confirm(f"Proceed with deleting {count} tags?"):
            logger.info("Aborted.")
            return self._abort(0)

        self.state = State.CONFIRMING_DELETION
        if not self._confirm(
            f"Are you absolutely sure you want to delete {count} tags? "
            f"This action cannot be undone."
        ):
            logger.info("Aborted.")
            return self._abort(0)

        self.state = State.DELETING
        report = self.report = execute_plan(registry, plan)

        self.state = State.DONE
        logger.success(
            f"Deletion complete. Processed {report.attempted} tags "
            f"({report.succeeded} deleted, {report.failed} failed)."
        )
        logger.warning(
            "Note: deleting tags does not free up space in the registry "
            "until its garbage collection runs."
        )
        write_summary(plan, report, self.settings)
        return 0

    def configure(self) -> Settings:
        """Ask for the configuration when requested or when no rule is set."""
        rules = RetentionRules.from_settings(self.settings)
        if self.settings.interactive or rules.is_empty:
            self.settings = self._collect_settings()
        self._log_configuration()
        return self.settings

    def _collect_settings(self) -> Settings:
        s = self.settings
        ask = self.prompter.ask
        logger.info("Docker Registry Cleanup Configuration")

        registry_url = ask("Docker registry URL", s.registry_url)
        repository = ask("Repository name", s.repository)
        suffixes = ask(
            "Suffixes to delete (comma-separated, e.g. -SNAPSHOT,-dev,-test)",
            ",".join(s.delete_suffixes),
        )
        min_version = ask("Minimum version to keep", s.min_version or "")
        excluded = ask(
            "Tags to exclude from deletion (comma-separated)",
            ",".join(s.excluded_tags),
        )

        return s.model_copy(
            update={
                "registry_url": registry_url.strip(),
                "repository": repository.strip(),
                "delete_suffixes": split_csv(suffixes),
                "min_version": min_version.strip() or None,
                "excluded_tags": split_csv(excluded),
            }
        )

    def _log_configuration(self) -> None:
        s = self.settings
        suffixes = " ".join(s.delete_suffixes) or "(none)"
        min_version = s.min_version or "(none - no version filtering)"
        excluded = " ".join(s.excluded_tags) or "(none)"
        logger.info("Configuration Summary:")
        logger.info(f"  Repository:              {s.repository}")
        logger.info(f"  Registry URL:            {s.registry_url}")
        logger.info(f"  Delete suffixes:         {suffixes}")
        logger.info(f"  Minimum version to keep: {min_version}")
        logger.info(f"  Excluded tags:           {excluded}")

    @staticmethod
    def _log_plan(plan: RetentionPlan) -> None:
        logger.info(f"Tags to KEEP ({len(plan.tags_to_keep)} total):")
        for tag, _ in plan.tags_to_keep:
            logger.info(f"  {tag}")
        if not plan.tags_to_keep:
            logger.info("  (none)")

        logger.info(f"Tags to DELETE ({len(plan.tags_to_delete)} total):")
        for tag, reason in plan.tags_to_delete:
            logger.info(f"  {tag} ({reason})")
        if not plan.tags_to_delete:
            logger.info("  (none)")

    def _confirm(self, text: str) -> bool:
        if self.settings.auto_confirm:
            logger.info("Auto-confirm enabled, proceeding...")
            return True
        return self.prompter.confirm(text)

    def _abort(self, exit_code: int) -> int:
        self.state = State.ABORTED
        return exit_code
