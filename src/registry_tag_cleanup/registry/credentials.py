"""Read registry credentials stored by ``docker login``."""

from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from registry_tag_cleanup.errors import AuthError


class DockerAuth(BaseModel):
    auth: str | None = None


class DockerConfig(BaseModel):
    auths: dict[str, DockerAuth] = Field(default_factory=dict)


def load_docker_config(path: Path) -> DockerConfig:
    try:
        return DockerConfig.model_validate_json(path.read_text())
    except (OSError, ValidationError) as e:
        raise AuthError(f"Could not read Docker config {path}: {e}") from e


def get_auth_header(registry_host: str, config_path: Path) -> str:
    """Return the ``Authorization`` header value stored for ``registry_host``.

    ``docker login`` stores the pre-encoded ``user:password`` token under the
    bare host, older clients under ``https://<host>``.
    """
    config = load_docker_config(config_path)
    for key in (registry_host, f"https://{registry_host}"):
        entry = config.auths.get(key)
        if entry is not None and entry.auth:
            return f"Basic {entry.auth}"
    raise AuthError(
        f"No authentication found for {registry_host}. "
        f"Please run: docker login {registry_host}"
    )
