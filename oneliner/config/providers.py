"""
LLM provider registry for OneLiner.
"""

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Provider:
    """Static description of a supported LLM provider."""

    name: str
    default_model: str
    requires_api_key: bool = True
    env_var: str = ""
    key_prefix: str = ""
    min_key_length: int = 20


def supported_providers() -> List[Provider]:
    """
    Get all supported LLM providers.

    Returns:
        List[Provider]: Provider definitions, default first.
    """
    return [
        Provider(
            name="openai",
            default_model="gpt-4.1-mini-2025-04-14",
            requires_api_key=True,
            env_var="OPENAI_API_KEY",
            key_prefix="sk-",
        ),
    ]


def get_provider(name: Optional[str]) -> Optional[Provider]:
    """
    Look up a provider by name.

    Args:
        name (Optional[str]): Provider name, case-insensitive.

    Returns:
        Optional[Provider]: The provider, or None if unsupported.
    """
    if not name:
        return None
    wanted = name.strip().lower()
    for provider in supported_providers():
        if provider.name == wanted:
            return provider
    return None


DEFAULT_PROVIDER = supported_providers()[0]
