"""
Exception types for OneLiner.

Only configuration and generation failures end the process with a
non-zero exit code; evaluation failures are absorbed by the caller.
"""


class OneLinerError(Exception):
    """Base class for all OneLiner errors."""


class ConfigurationError(OneLinerError):
    """Missing or invalid API key, settings file or provider."""


class GenerationError(OneLinerError):
    """The generation call failed or produced no options."""


class EvaluationError(OneLinerError):
    """The safety evaluation call failed or returned a mismatched batch."""
