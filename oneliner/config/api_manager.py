"""
API key management for OneLiner.

This module handles secure storage and retrieval of API keys
using the system keyring, with environment and settings fallbacks.
"""

import logging
import os
from typing import Optional

import keyring
import keyring.errors

from oneliner.config.providers import DEFAULT_PROVIDER, Provider
from oneliner.config.settings import settings

# Constants
SERVICE_NAME = "oneliner"

logger = logging.getLogger(__name__)


def _key_name(provider: Provider) -> str:
    return f"{provider.name}_api_key"


def _is_missing_backend(error: Exception) -> bool:
    return isinstance(error, keyring.errors.NoKeyringError) or (
        "No recommended backend" in str(error)
    )


def get_api_key(provider: Provider = DEFAULT_PROVIDER) -> Optional[str]:
    """
    Retrieve the API key for a provider.

    Lookup order: system keyring, the provider's environment variable,
    then ``api.api_key`` in the settings file.

    Args:
        provider (Provider): Provider whose key to look up.

    Returns:
        str or None: The API key if found, None otherwise.
    """
    api_key = None
    try:
        api_key = keyring.get_password(SERVICE_NAME, _key_name(provider))
    except Exception as e:
        if _is_missing_backend(e):
            logger.debug(f"Keyring backend not available: {e}")
        else:
            raise

    if not api_key and provider.env_var:
        api_key = os.environ.get(provider.env_var)
        if api_key:
            logger.info(f"Using API key from environment variable {provider.env_var}")

    if not api_key:
        api_key = settings.get("api", "api_key", "") or None
        if api_key:
            logger.info("Using API key from settings file")

    return api_key


def save_api_key(api_key: str, provider: Provider = DEFAULT_PROVIDER) -> bool:
    """
    Save an API key to the system keyring.

    Args:
        api_key (str): The API key to save.
        provider (Provider): Provider the key belongs to.

    Returns:
        bool: True if successful, False otherwise.
    """
    if not api_key or not api_key.strip():
        logger.error("Cannot save empty API key")
        return False

    try:
        keyring.set_password(SERVICE_NAME, _key_name(provider), api_key)
        logger.info("API key saved successfully")
        return True
    except Exception as e:
        logger.error(f"Failed to save API key: {e}")
        return False


def delete_api_key(provider: Provider = DEFAULT_PROVIDER) -> bool:
    """
    Delete the stored API key from the system keyring.

    Returns:
        bool: True if successful (or nothing was stored), False otherwise.
    """
    try:
        keyring.delete_password(SERVICE_NAME, _key_name(provider))
        logger.info("API key deleted successfully")
        return True
    except keyring.errors.PasswordDeleteError:
        logger.info("No API key found to delete")
        return True
    except Exception as e:
        if _is_missing_backend(e):
            return True
        logger.error(f"Failed to delete API key: {e}")
        return False


def is_api_key_valid(api_key: Optional[str], provider: Provider = DEFAULT_PROVIDER) -> bool:
    """
    Validate the format of an API key.

    Args:
        api_key (str): The API key to validate.
        provider (Provider): Provider whose key format applies.

    Returns:
        bool: True if the key format is valid, False otherwise.
    """
    if not api_key or not isinstance(api_key, str):
        return False

    if api_key != api_key.strip() or any(c.isspace() for c in api_key):
        return False

    if provider.key_prefix and not api_key.startswith(provider.key_prefix):
        return False

    return len(api_key) >= provider.min_key_length
