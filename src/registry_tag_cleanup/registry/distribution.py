from __future__ import annotations

from urllib.parse import urljoin

import requests
from loguru import logger

from registry_tag_cleanup.errors import ConfigError, EmptyRepositoryError, NetworkError
from registry_tag_cleanup.registry.base import (
    DeletionOutcome,
    OutcomeStatus,
    RegistryClient,
)
from registry_tag_cleanup.registry.credentials import get_auth_header
from registry_tag_cleanup.settings import Settings

MANIFEST_V2 = "application/vnd.docker.distribution.manifest.v2+json"


class DistributionClient(RegistryClient):
    """Docker Registry HTTP API V2 client.

    Required settings:
      registry_url,
      repository
    Credentials are read from the Docker client config (see docker_config).
    """

    @classmethod
    def from_settings(cls, settings: Settings) -> DistributionClient:
        required = ("registry_url", "repository")
        missing = [name for name in required if not getattr(settings, name)]
        if missing:
            raise ConfigError(f"Missing required setting(s): {', '.join(missing)}")

        auth_header = get_auth_header(settings.registry_host, settings.docker_config)
        return cls(
            settings.registry_url,
            settings.repository,
            auth_header,
            timeout=settings.request_timeout,
        )

    def __init__(
        self,
        registry_url: str,
        repository: str,
        auth_header: str,
        timeout: float = 30.0,
    ):
        self.registry_url = registry_url.strip().rstrip("/")
        if not self.registry_url.startswith("http"):
            self.registry_url = f"https://{self.registry_url}"
        self.repository = repository.strip("/")
        self.timeout = timeout
        self.headers = {"Authorization": auth_header}

    def _get_api_url(self, path: str) -> str:
        return f"{self.registry_url}/v2/{self.repository}{path}"

    def list_tags(self) -> list[str]:
        """Return every tag of the repository, sorted.

        Follows ``Link: <...>; rel="next"`` pagination when the registry uses it.
        """
        url: str | None = self._get_api_url("/tags/list")
        tags: set[str] = set()
        seen: set[str] = set()

        while url:
            seen.add(url)
            try:
                response = requests.get(url, headers=self.headers, timeout=self.timeout)
                response.raise_for_status()
                payload = response.json()
            except requests.exceptions.RequestException as e:
                raise NetworkError(
                    f"Failed to fetch tags for {self.repository}: {e}"
                ) from e
            if not isinstance(payload, dict):
                raise NetworkError(f"Unexpected tags response for {self.repository}")

            tags.update(payload.get("tags") or [])

            next_url = response.links.get("next", {}).get("url")
            url = urljoin(self.registry_url, next_url) if next_url else None
            if url in seen:
                logger.warning(f"Pagination repeats {url}, stopping")
                url = None

        if not tags:
            raise EmptyRepositoryError(self.repository)
        return sorted(tags)

    def resolve_digest(self, tag: str) -> str | None:
        """Look up the manifest digest a tag currently points to.

        Returns None when the registry answers without a Docker-Content-Digest
        header, e.g. because the tag was removed since it was listed.
        """
        url = self._get_api_url(f"/manifests/{tag}")
        headers = {**self.headers, "Accept": MANIFEST_V2}
        try:
            response = requests.get(url, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Failed to fetch manifest for {tag}: {e}") from e

        digest = response.headers.get("Docker-Content-Digest", "").strip()
        if not digest:
            logger.debug(
                f"No Docker-Content-Digest header for {tag} (HTTP {response.status_code})"
            )
            return None
        return digest

    def delete_manifest(self, digest: str) -> DeletionOutcome:
        url = self._get_api_url(f"/manifests/{digest}")
        try:
            response = requests.delete(url, headers=self.headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Failed to delete manifest {digest}: {e}") from e

        # The registry answers 202 Accepted, and nothing else, on success
        if response.status_code == 202:
            return DeletionOutcome(OutcomeStatus.SUCCESS, 202, digest)
        return DeletionOutcome(OutcomeStatus.FAILED, response.status_code, digest)
