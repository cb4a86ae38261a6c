"""Core logic for registry tag cleanup."""

from dataclasses import dataclass, field

from loguru import logger

from registry_tag_cleanup.errors import (
    DeletionFailedError,
    DigestNotFoundError,
    NetworkError,
)
from registry_tag_cleanup.registry.base import (
    DeletionOutcome,
    OutcomeStatus,
    RegistryClient,
)
from registry_tag_cleanup.settings import Settings
from registry_tag_cleanup.version import VERSION_PREFIX, is_less_than


@dataclass(frozen=True)
class Keep:
    reason: str = "keeping"


@dataclass(frozen=True)
class Delete:
    reason: str


Verdict = Keep | Delete


@dataclass(frozen=True)
class RetentionRules:
    delete_suffixes: tuple[str, ...] = ()
    min_version: str | None = None
    excluded_tags: frozenset[str] = frozenset()

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetentionRules":
        return cls(
            delete_suffixes=settings.delete_suffixes,
            min_version=settings.min_version,
            excluded_tags=frozenset(settings.excluded_tags),
        )

    @property
    def is_empty(self) -> bool:
        return not (self.delete_suffixes or self.min_version or self.excluded_tags)


def decide(tag: str, rules: RetentionRules) -> Verdict:
    """Decide whether a tag is kept or deleted. The first matching rule wins.

    Exclusions are checked first so an excluded tag is never deleted. The
    suffix rule is checked before the version rule, so ``1.0.0-SNAPSHOT``
    reports its suffix even when it is also below the version floor.
    """
    if tag in rules.excluded_tags:
        return Keep("excluded tag")

    for suffix in rules.delete_suffixes:
        if suffix and tag.endswith(suffix):
            return Delete(f"ends with {suffix}")

    if (
        rules.min_version
        and VERSION_PREFIX.match(tag)
        and is_less_than(tag, rules.min_version)
    ):
        return Delete(f"version < {rules.min_version}")

    return Keep()


@dataclass
class RetentionPlan:
    verdicts: dict[str, Verdict]

    @property
    def tags_to_keep(self) -> list[tuple[str, str]]:
        return [(t, v.reason) for t, v in self.verdicts.items() if isinstance(v, Keep)]

    @property
    def tags_to_delete(self) -> list[tuple[str, str]]:
        return [
            (t, v.reason) for t, v in self.verdicts.items() if isinstance(v, Delete)
        ]


def create_plan(tags: list[str], rules: RetentionRules) -> RetentionPlan:
    verdicts: dict[str, Verdict] = {}
    for tag in tags:
        verdict = decide(tag, rules)
        verdicts[tag] = verdict
        action = "DELETE" if isinstance(verdict, Delete) else "KEEP"
        logger.debug(f"tag '{tag}': {action} - {verdict.reason}")
    return RetentionPlan(verdicts)


@dataclass
class DeletionReport:
    outcomes: dict[str, DeletionOutcome] = field(default_factory=dict)

    def record(self, tag: str, outcome: DeletionOutcome) -> None:
        self.outcomes[tag] = outcome

    @property
    def attempted(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes.values() if o.ok)

    @property
    def failed(self) -> int:
        return self.attempted - self.succeeded


def _delete_tag(registry: RegistryClient, tag: str) -> DeletionOutcome:
    # Resolved right before deleting: the tag may have moved since listing
    digest = registry.resolve_digest(tag)
    if not digest:
        raise DigestNotFoundError(tag)
    logger.info(f"  Digest: {digest}")

    outcome = registry.delete_manifest(digest)
    if not outcome.ok:
        raise DeletionFailedError(tag, outcome.http_status, digest)
    return outcome


def execute_plan(registry: RegistryClient, plan: RetentionPlan) -> DeletionReport:
    """Delete every tag marked for deletion, one at a time.

    A failure on one tag is logged and recorded, and the next tag is tried.
    """
    report = DeletionReport()
    logger.info("Starting deletion process...")

    for tag, reason in plan.tags_to_delete:
        logger.info(f"Deleting: {tag} ({reason})")
        try:
            outcome = _delete_tag(registry, tag)
        except DigestNotFoundError as e:
            logger.warning(f"  {e}")
            outcome = DeletionOutcome(OutcomeStatus.DIGEST_NOT_FOUND)
        except DeletionFailedError as e:
            logger.warning(f"  {e}")
            outcome = DeletionOutcome(OutcomeStatus.FAILED, e.status, e.digest)
        except NetworkError as e:
            logger.error(f"  Error deleting {tag}: {e}")
            outcome = DeletionOutcome(OutcomeStatus.FAILED)
        else:
            logger.success(f"  Successfully deleted: {tag}")
        report.record(tag, outcome)

    return report


def write_summary(
    plan: RetentionPlan, report: DeletionReport | None, settings: Settings
) -> None:
    """Write a Markdown cleanup summary to ``settings.summary_file``."""
    if not settings.summary_file:
        return

    outcomes = report.outcomes if report else {}
    mode = "Dry Run" if settings.dry_run else "Live"
    action = "To delete" if settings.dry_run else "Deleted"

    with open(settings.summary_file, "w") as f:
        f.write(
            f"### Registry Tag Cleanup: {settings.repository}\n\n"
            f"| Metric | Count |\n"
            f"|--------|-------|\n"
            f"| Tags: kept | {len(plan.tags_to_keep)} |\n"
            f"| Tags: to delete | {len(plan.tags_to_delete)} |\n"
            f"| Deleted | {report.succeeded if report else 0} |\n"
            f"| Errors | {report.failed if report else 0} |\n\n"
            f"**Mode:** {mode}\n\n"
        )

        if plan.tags_to_delete:
            f.write(f"**{action}: {len(plan.tags_to_delete)} tags**\n\n")
            f.write("| Tag | Reason | Outcome |\n")
            f.write("|-----|--------|---------|\n")
            for tag, reason in plan.tags_to_delete:
                outcome = outcomes.get(tag)
                if outcome is None:
                    result = "not attempted"
                elif outcome.http_status and not outcome.ok:
                    result = f"{outcome.status} (HTTP {outcome.http_status})"
                else:
                    result = str(outcome.status)
                f.write(f"| `{tag}` | {reason} | {result} |\n")
            f.write("\n")

        if plan.tags_to_keep:
            f.write(f"**Kept: {len(plan.tags_to_keep)} tags**\n\n")
            f.write("| Tag | Reason |\n")
            f.write("|-----|--------|\n")
            for tag, reason in plan.tags_to_keep:
                f.write(f"| `{tag}` | {reason} |\n")
