"""
Shared test fixtures for OneLiner tests.

This module contains pytest fixtures that are shared across all test modules,
including mocks for the provider client, keyring and generated test data.
"""

import os
from types import SimpleNamespace
from typing import List
from unittest.mock import AsyncMock, Mock, patch

import pytest
from faker import Faker

from oneliner.commands.generator import OptionGenerator
from oneliner.models.command_models import CommandOption

fake = Faker()


# ============================================================================
# API Key Fixtures
# ============================================================================


@pytest.fixture
def valid_api_key() -> str:
    """Return a valid OpenAI API key format for testing."""
    return "sk-" + "a" * 48


@pytest.fixture
def invalid_api_key() -> str:
    """Return an invalid API key format for testing."""
    return "invalid-key-format"


@pytest.fixture
def mock_keyring():
    """Mock the keyring module for testing."""
    with (
        patch("keyring.get_password") as mock_get,
        patch("keyring.set_password") as mock_set,
        patch("keyring.delete_password") as mock_delete,
    ):
        # Default behavior: no key stored
        mock_get.return_value = None
        mock_set.return_value = None
        mock_delete.return_value = None

        yield {"get": mock_get, "set": mock_set, "delete": mock_delete}


# ============================================================================
# Option Fixtures
# ============================================================================


def _make_option(command: str = "ls -la", **kwargs) -> CommandOption:
    """Build a CommandOption with generated title and description."""
    return CommandOption(
        title=kwargs.pop("title", fake.sentence(nb_words=3).rstrip(".")),
        command=command,
        description=kwargs.pop("description", fake.sentence()),
        **kwargs,
    )


def _generated_record(command: str, title: str = "", description: str = ""):
    """A record shaped like the provider's generation output."""
    return SimpleNamespace(
        title=title or fake.sentence(nb_words=3).rstrip("."),
        command=command,
        description=description or fake.sentence(),
    )


def _risk_record(level: str, reason: str = "", command: str = ""):
    """A record shaped like the provider's safety output."""
    return SimpleNamespace(command=command, risk_level=level, reason=reason)


@pytest.fixture
def sample_options() -> List[CommandOption]:
    """Three options in display order."""
    return [
        _make_option("ls -la", title="Long listing"),
        _make_option("find . -maxdepth 1", title="Find entries"),
        _make_option("rm -rf ./build", title="Clean build"),
    ]


# ============================================================================
# Provider Client Fixtures
# ============================================================================


@pytest.fixture
def mock_client():
    """Provider client with both structured-output calls mocked."""
    client = Mock()
    client.generate_options = AsyncMock(
        return_value=[
            _generated_record("ls -la"),
            _generated_record("find . -maxdepth 1"),
            _generated_record("rm -rf ./build"),
        ]
    )
    client.assess_commands = AsyncMock(
        return_value=[
            _risk_record("none"),
            _risk_record("low", "Scans the directory"),
            _risk_record("high", "Deletes files permanently"),
        ]
    )
    return client


@pytest.fixture
def generator(mock_client) -> OptionGenerator:
    """Option generator on top of the mocked client."""
    return OptionGenerator(mock_client)


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture
def clean_environment():
    """Provide a clean environment without API keys."""
    original_env = os.environ.get("OPENAI_API_KEY")
    if "OPENAI_API_KEY" in os.environ:
        del os.environ["OPENAI_API_KEY"]

    yield

    if original_env:
        os.environ["OPENAI_API_KEY"] = original_env


@pytest.fixture
def mock_env_api_key(valid_api_key):
    """Mock environment variable with API key."""
    with patch.dict(os.environ, {"OPENAI_API_KEY": valid_api_key}):
        yield valid_api_key


@pytest.fixture
def make_option():
    """Factory for CommandOption objects."""
    return _make_option


@pytest.fixture
def generated_record():
    """Factory for generation records."""
    return _generated_record


@pytest.fixture
def risk_record():
    """Factory for safety records."""
    return _risk_record
