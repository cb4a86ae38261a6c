import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from loguru import logger

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def log_messages() -> Iterator[list[str]]:
    """Collect loguru messages emitted during a test."""
    messages: list[str] = []
    handler_id = logger.add(
        lambda m: messages.append(str(m).rstrip("\n")), format="{message}"
    )
    yield messages
    logger.remove(handler_id)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep settings read from the environment out of the tests."""
    for name in (
        "REGISTRY_URL",
        "REPOSITORY",
        "DELETE_SUFFIXES",
        "MIN_VERSION",
        "EXCLUDED_TAGS",
        "INTERACTIVE",
        "AUTO_CONFIRM",
        "DRY_RUN",
        "DOCKER_CONFIG",
        "REQUEST_TIMEOUT",
        "SUMMARY_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
