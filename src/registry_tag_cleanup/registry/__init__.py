from __future__ import annotations

from registry_tag_cleanup.registry.base import (
    DeletionOutcome,
    OutcomeStatus,
    RegistryClient,
)
from registry_tag_cleanup.settings import Settings

from .distribution import DistributionClient

__all__ = [
    "DeletionOutcome",
    "DistributionClient",
    "OutcomeStatus",
    "RegistryClient",
    "init_registry",
]


def init_registry(settings: Settings) -> tuple[RegistryClient, str]:
    registry = DistributionClient.from_settings(settings)
    info = f"{registry.registry_url}/{registry.repository}"
    return registry, info
