"""
OpenAI API client for OneLiner.

This module provides an async client for the two structured-output calls
OneLiner makes: proposing command options and scoring command risk. Each
call is attempted exactly once; failures are surfaced, never retried.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx
from openai import APIError, AsyncOpenAI, RateLimitError
from pydantic import BaseModel, ValidationError

# Import from our own modules
from oneliner.config import api_manager
from oneliner.config.providers import DEFAULT_PROVIDER
from oneliner.translator.prompt_builder import (
    OPTIONS_SCHEMA,
    SAFETY_SCHEMA,
    PromptBuilder,
)

# Set up logging
logger = logging.getLogger(__name__)

DEFAULT_MODEL = DEFAULT_PROVIDER.default_model


class GeneratedOption(BaseModel):
    """One option as returned by the generation call."""

    title: str
    command: str
    description: str


class CommandRisk(BaseModel):
    """One risk record as returned by the safety call."""

    command: str = ""
    risk_level: str
    reason: str = ""


class OptionsResponse(BaseModel):
    options: List[GeneratedOption]


class SafetyResponse(BaseModel):
    evaluations: List[CommandRisk]


class OpenAIClient:
    """
    Async client for interacting with the OpenAI API.

    This class handles authentication and error translation for the
    generation and safety requests.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 2048,
        prompt_builder: Optional[PromptBuilder] = None,
    ):
        """
        Initialize the OpenAI client.

        Args:
            api_key (Optional[str]): OpenAI API key. If None, will attempt to
                retrieve it through the API key manager.
            model (str): The model to use for completions.
            max_tokens (int): Completion token cap for each request.
            prompt_builder (Optional[PromptBuilder]): Prompt builder to use;
                one bound to the current platform is created if omitted.
        """
        self.api_key = api_key or api_manager.get_api_key()
        if not self.api_key:
            logger.error("No API key provided or found in keyring")
            raise ValueError("OpenAI API key is required")

        if not api_manager.is_api_key_valid(self.api_key):
            logger.error("Invalid API key format")
            raise ValueError("Invalid OpenAI API key format")

        self.model = model
        self.max_tokens = max_tokens
        self.prompt_builder = prompt_builder or PromptBuilder()

        logger.info(f"OpenAI client initialized with model {model}")

    async def complete_json(
        self,
        messages: List[Dict[str, str]],
        schema_name: str,
        schema: Dict[str, Any],
    ) -> str:
        """
        Run one chat completion constrained to a JSON schema.

        Args:
            messages (List[Dict[str, str]]): Chat messages.
            schema_name (str): Name reported to the API for the schema.
            schema (Dict[str, Any]): Strict JSON schema for the reply.

        Returns:
            str: The raw JSON text of the reply.

        Raises:
            ValueError: On API, network or empty-response failures.
        """
        try:
            async with AsyncOpenAI(api_key=self.api_key, max_retries=0) as client:
                response = await client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    max_completion_tokens=self.max_tokens,
                    response_format={
                        "type": "json_schema",
                        "json_schema": {
                            "name": schema_name,
                            "strict": True,
                            "schema": schema,
                        },
                    },
                )

        except RateLimitError as e:
            logger.warning(f"Rate limit exceeded: {e}")
            raise ValueError(f"OpenAI API rate limit exceeded: {e}") from e

        except APIError as e:
            logger.warning(f"OpenAI API error: {e}")
            raise ValueError(f"Error communicating with OpenAI API: {e}") from e

        except httpx.HTTPError as e:
            logger.warning(f"HTTP error during API request: {e}")
            raise ValueError(f"Network error during API request: {e}") from e

        if not response.choices:
            raise ValueError("Empty response from API")

        content = response.choices[0].message.content
        if not content:
            raise ValueError("No text content in response")

        return content

    async def generate_options(
        self, query: str, num_options: int = 3
    ) -> List[GeneratedOption]:
        """
        Ask the model for several alternative commands for a request.

        Args:
            query (str): The natural language request.
            num_options (int): Number of options to ask for.

        Returns:
            List[GeneratedOption]: Options in the order the model gave them.

        Raises:
            ValueError: If the call fails or the reply cannot be parsed.
        """
        messages = self.prompt_builder.build_generation_messages(query, num_options)
        content = await self.complete_json(messages, "command_options", OPTIONS_SCHEMA)

        try:
            payload = OptionsResponse.model_validate_json(content)
        except ValidationError as e:
            logger.warning(f"Failed to parse options response: {e}")
            raise ValueError(f"Failed to parse API response: {e}") from e

        logger.debug(f"Received {len(payload.options)} options for query")
        return payload.options

    async def assess_commands(self, commands: Sequence[str]) -> List[CommandRisk]:
        """
        Score a batch of commands for risk in a single call.

        Args:
            commands (Sequence[str]): Commands in display order.

        Returns:
            List[CommandRisk]: One record per command, as returned.

        Raises:
            ValueError: If the call fails or the reply cannot be parsed.
        """
        messages = self.prompt_builder.build_safety_messages(commands)
        content = await self.complete_json(messages, "safety_evaluations", SAFETY_SCHEMA)

        try:
            payload = SafetyResponse.model_validate_json(content)
        except ValidationError as e:
            logger.warning(f"Failed to parse safety response: {e}")
            raise ValueError(f"Failed to parse API response: {e}") from e

        return payload.evaluations
