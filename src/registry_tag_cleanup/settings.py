import re
from pathlib import Path
from typing import Annotated, Any

from loguru import logger
from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from registry_tag_cleanup.errors import ConfigError

SETTING_LINE = re.compile(r"^([A-Z_][A-Z0-9_]*)=(.*)$")

# Settings file keys and the Settings field each one sets.
SETTINGS_FILE_KEYS: dict[str, str] = {
    "REPOSITORY": "repository",
    "REGISTRY_URL": "registry_url",
    "DELETE_SUFFIXES": "delete_suffixes",
    "MIN_VERSION": "min_version",
    "EXCLUDED_TAGS": "excluded_tags",
    "AUTO_CONFIRM": "auto_confirm",
    "DRY_RUN": "dry_run",
    "DOCKER_CONFIG": "docker_config",
    "REQUEST_TIMEOUT": "request_timeout",
    "SUMMARY_FILE": "summary_file",
}


def split_csv(value: str) -> tuple[str, ...]:
    """Split a comma-separated list, trimming blanks and dropping empty items."""
    return tuple(item.strip() for item in value.split(",") if item.strip())


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, extra="ignore", frozen=True
    )

    registry_url: str = ""
    repository: str = ""

    delete_suffixes: Annotated[tuple[str, ...], NoDecode] = ()
    min_version: str | None = None
    excluded_tags: Annotated[tuple[str, ...], NoDecode] = ()

    interactive: bool = False
    auto_confirm: bool = False
    dry_run: bool = False

    docker_config: Path = Path.home() / ".docker" / "config.json"
    request_timeout: float = 30.0
    summary_file: Path | None = None

    @field_validator("interactive", "auto_confirm", "dry_run", mode="before")
    @classmethod
    def _parse_bool(cls, v: str | bool) -> bool:
        return v if isinstance(v, bool) else v.strip().lower() == "true"

    @field_validator("delete_suffixes", "excluded_tags", mode="before")
    @classmethod
    def _parse_list(cls, v: str | list[str] | tuple[str, ...]) -> tuple[str, ...]:
        if isinstance(v, str):
            return split_csv(v)
        return tuple(item.strip() for item in v if item.strip())

    @field_validator("min_version", mode="before")
    @classmethod
    def _empty_as_none(cls, v: str | None) -> str | None:
        if isinstance(v, str):
            return v.strip() or None
        return v

    @field_validator("docker_config", mode="after")
    @classmethod
    def _config_json(cls, v: Path) -> Path:
        # DOCKER_CONFIG names the directory holding config.json
        v = v.expanduser()
        return v / "config.json" if v.is_dir() else v

    @property
    def registry_host(self) -> str:
        host = re.sub(r"^https?://", "", self.registry_url.strip())
        return host.rstrip("/")

    @classmethod
    def load(cls, settings_file: Path | None = None, **overrides: Any) -> "Settings":
        """Build settings from environment, settings file and overrides.

        Overrides (usually command-line options) win over the settings file,
        which wins over environment variables.
        """
        values = load_settings_file(settings_file) if settings_file else {}
        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigError(f"Invalid settings: {e}") from e


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] in "\"'" and value[-1] in "\"'":
        return value[1:-1]
    return value


def parse_settings_line(line: str) -> tuple[str, str] | None:
    """Parse one ``KEY=value`` line. Returns None for blank lines and comments."""
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    match = SETTING_LINE.match(line)
    if not match:
        raise ConfigError(f"Invalid setting format: {line}")
    key, value = match.groups()
    return key, _unquote(value.strip())


def load_settings_file(path: Path) -> dict[str, str]:
    """Read a settings file into a mapping of Settings field names to raw values.

    Malformed lines and unknown keys are reported and skipped. A missing file
    yields no values.
    """
    if not path.is_file():
        logger.debug(f"Settings file {path} not found, skipping")
        return {}

    logger.info(f"Loading settings from {path}...")
    values: dict[str, str] = {}
    for lineno, line in enumerate(path.read_text().splitlines(), start=1):
        try:
            parsed = parse_settings_line(line)
        except ConfigError as e:
            logger.warning(f"{path}:{lineno}: {e}")
            continue
        if parsed is None:
            continue

        key, value = parsed
        field = SETTINGS_FILE_KEYS.get(key)
        if field is None:
            logger.warning(f"{path}:{lineno}: Unknown setting {key}, ignoring")
            continue
        values[field] = value
        logger.debug(f"Loaded setting: {key}={value}")

    logger.info(f"Finished loading settings from {path}")
    return values
