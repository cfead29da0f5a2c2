"""OneLiner: natural language to shell one-liners."""

__version__ = "0.1.0"
