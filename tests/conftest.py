"""Pytest configuration and shared fixtures.

Provides common test fixtures and configuration for the test suite.
"""

import logging
import sys
from pathlib import Path
from typing import Generator

import pytest

# Add parent directory to path so imports work
# This allows: from models import ... to find /project/models.py
sys.path.insert(0, str(Path(__file__).parent.parent))

from logging_config import setup_logging
from models import OSRelease, Provider, Selection, SystemPaths
from resolver.catalog import get_provider


# Configure logging once for entire test session
# This prevents logging handler MagicMock errors
@pytest.fixture(scope="session", autouse=True)
def configure_logging() -> Generator[None, None, None]:
    """Configure logging for all tests.

    Runs once before any tests (scope="session", autouse=True).
    """
    setup_logging(verbose=False)
    yield


class ScriptedPrompter:
    """Prompter that replays canned answers and records every question."""

    def __init__(self, answers: list[str] | None = None, confirms: list[bool] | None = None) -> None:
        self.answers = list(answers or [])
        self.confirms = list(confirms or [])
        self.questions: list[str] = []

    def ask(self, question: str, default: str | None = None) -> str:
        self.questions.append(question)
        if not self.answers:
            return default or ""
        answer = self.answers.pop(0)
        return answer if answer else (default or "")

    def confirm(self, question: str, default: bool = False) -> bool:
        self.questions.append(question)
        if not self.confirms:
            return default
        return self.confirms.pop(0)


@pytest.fixture
def prompter() -> ScriptedPrompter:
    """Prompter with no scripted answers (defaults everywhere)."""
    return ScriptedPrompter()


@pytest.fixture
def make_prompter() -> type[ScriptedPrompter]:
    """Factory for prompters with scripted answers."""
    return ScriptedPrompter


@pytest.fixture
def paths(tmp_path: Path) -> SystemPaths:
    """System paths rebased under a temp directory with parent dirs created."""
    rebased = SystemPaths.under(tmp_path)
    for path in vars(rebased).values():
        path.parent.mkdir(parents=True, exist_ok=True)
    return rebased


@pytest.fixture
def debian12() -> OSRelease:
    """A release that does not ship resolvconf by default."""
    return OSRelease(id="debian", version_id="12", codename="bookworm")


@pytest.fixture
def ubuntu2204() -> OSRelease:
    """The legacy release that ships resolvconf."""
    return OSRelease(id="ubuntu", version_id="22.04", codename="jammy")


@pytest.fixture
def cloudflare() -> Provider:
    provider = get_provider(1)
    assert provider is not None
    return provider


@pytest.fixture
def custom_no_dot() -> Provider:
    """Custom provider without a DNS-over-TLS name."""
    return Provider(name="Custom", ipv4=("10.0.0.53",), ipv6=("fd00::53",))


@pytest.fixture
def cloudflare_google() -> Selection:
    """Selection "1 2" without IPv6."""
    first = get_provider(1)
    second = get_provider(2)
    assert first is not None and second is not None
    return Selection(providers=(first.without_ipv6(), second.without_ipv6()))


@pytest.fixture(autouse=True)
def quiet_root_logger() -> Generator[None, None, None]:
    """Keep tests from leaking log level changes into each other."""
    level = logging.getLogger().level
    yield
    logging.getLogger().setLevel(level)
