from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from registry_tag_cleanup.settings import Settings


class OutcomeStatus(StrEnum):
    SUCCESS = "success"
    FAILED = "failed"
    DIGEST_NOT_FOUND = "digest not found"


@dataclass(frozen=True)
class DeletionOutcome:
    """Result of trying to delete the manifest behind one tag."""

    status: OutcomeStatus
    http_status: int | None = None
    digest: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS


class RegistryClient(ABC):
    """Abstract base class for registry implementations."""

    @classmethod
    @abstractmethod
    def from_settings(cls, settings: Settings) -> RegistryClient:
        pass

    @abstractmethod
    def list_tags(self) -> list[str]:
        pass

    @abstractmethod
    def resolve_digest(self, tag: str) -> str | None:
        pass

    @abstractmethod
    def delete_manifest(self, digest: str) -> DeletionOutcome:
        pass
