"""Errors raised while cleaning up a registry repository.

Errors raised before the delete set is committed to (config, auth, listing)
end the run. Per-tag errors raised while deleting are recorded and the run
moves on to the next tag.
"""

from __future__ import annotations


class CleanupError(Exception):
    """Base class for all cleanup errors."""


class ConfigError(CleanupError):
    pass


class AuthError(CleanupError):
    pass


class NetworkError(CleanupError):
    pass


class EmptyRepositoryError(CleanupError):
    def __init__(self, repository: str):
        super().__init__(f"No tags found in repository {repository}")
        self.repository = repository


class DigestNotFoundError(CleanupError):
    def __init__(self, tag: str):
        super().__init__(f"No digest found for tag: {tag}")
        self.tag = tag


class DeletionFailedError(CleanupError):
    def __init__(self, tag: str, status: int | None, digest: str | None = None):
        super().__init__(f"Failed to delete: {tag} (HTTP: {status})")
        self.tag = tag
        self.status = status
        self.digest = digest
