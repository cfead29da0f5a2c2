"""
Unit tests for oneliner.config.providers.
"""

import pytest

from oneliner.config.providers import DEFAULT_PROVIDER, get_provider, supported_providers


class TestProviders:
    def test_openai_is_default(self):
        assert DEFAULT_PROVIDER.name == "openai"
        assert DEFAULT_PROVIDER.env_var == "OPENAI_API_KEY"
        assert DEFAULT_PROVIDER.key_prefix == "sk-"
        assert DEFAULT_PROVIDER.requires_api_key is True

    def test_supported_providers(self):
        assert [p.name for p in supported_providers()] == ["openai"]

    @pytest.mark.parametrize("name", ["openai", "OpenAI", " openai "])
    def test_get_provider(self, name):
        assert get_provider(name) == DEFAULT_PROVIDER

    @pytest.mark.parametrize("name", ["anthropic", "", None])
    def test_unknown_provider(self, name):
        assert get_provider(name) is None
