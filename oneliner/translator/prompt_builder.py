"""
Prompt builder for OneLiner.

This module builds the messages and JSON schemas for the two model
calls: proposing command options and scoring them for risk.
"""

from typing import Any, Dict, List, Optional, Sequence

from oneliner.utils import platform_utils

OPTIONS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "options": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "title": {
                        "type": "string",
                        "description": "Brief title for this command option (2-5 words)",
                    },
                    "command": {
                        "type": "string",
                        "description": "The actual shell command to execute",
                    },
                    "description": {
                        "type": "string",
                        "description": (
                            "Clear explanation of what this command does and any "
                            "important details"
                        ),
                    },
                },
                "required": ["title", "command", "description"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["options"],
    "additionalProperties": False,
}

SAFETY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "evaluations": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "command": {"type": "string"},
                    "risk_level": {"type": "string", "enum": ["none", "low", "high"]},
                    "reason": {
                        "type": "string",
                        "description": "Short justification, under 100 characters",
                    },
                },
                "required": ["command", "risk_level", "reason"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["evaluations"],
    "additionalProperties": False,
}

SAFETY_SYSTEM_PROMPT = """You are a security expert evaluating shell commands for safety risks.

Risk levels:
- HIGH: Destructive operations that could cause data loss or system damage (rm -rf, dd, mkfs, formatting, permanent deletion)
- LOW: Operations that interact with external systems or require careful attention (network operations, downloads, system scans, privilege changes)
- NONE: Safe read-only operations (ls, grep, find, echo, cat, viewing files)

Be practical and context-aware. Flag commands that users should think twice about before running.
Return exactly one evaluation per command, in the order given."""  # noqa: E501


class PromptBuilder:
    """
    Builder for the generation and safety prompts.

    The generation prompt is grounded in the detected platform and shell
    so the model proposes commands that actually run on the host.
    """

    def __init__(self, system_context: Optional[Dict[str, Any]] = None):
        self.system_context = (
            system_context if system_context is not None else self.build_system_context()
        )

    def build_system_context(self) -> Dict[str, Any]:
        """
        Build a system context dictionary with platform and shell information.

        Returns:
            Dict[str, Any]: System context dictionary.
        """
        return platform_utils.get_platform_info()

    def _environment_lines(self) -> List[str]:
        lines = []
        os_name = self.system_context.get("os_name")
        shell_name = self.system_context.get("shell_name")
        if os_name:
            lines.append(f"- Operating system: {os_name}")
        if shell_name:
            lines.append(f"- Shell: {shell_name}")
        return lines

    def build_generation_messages(self, query: str, num_options: int = 3) -> List[Dict[str, str]]:
        """
        Build the messages asking for command options.

        Args:
            query (str): The user's natural language request.
            num_options (int): How many options to ask for.

        Returns:
            List[Dict[str, str]]: Chat messages for the API.
        """
        prompt = (
            f'Given this user request: "{query}"\n\n'
            f"Generate exactly {num_options} different shell command options that "
            "accomplish the task.\n\n"
            "Requirements:\n"
            f"- Provide exactly {num_options} different approaches when possible\n"
            "- Commands should be safe and practical\n"
            "- Prefer commonly available tools\n"
            "- Include relevant flags and options\n"
            "- Descriptions should explain the approach and any caveats"
        )

        env = self._environment_lines()
        if env:
            prompt += "\n\nTarget environment:\n" + "\n".join(env)

        return [{"role": "user", "content": prompt}]

    def build_safety_messages(self, commands: Sequence[str]) -> List[Dict[str, str]]:
        """
        Build the messages asking for a risk score per command.

        Args:
            commands (Sequence[str]): Commands in display order.

        Returns:
            List[Dict[str, str]]: Chat messages for the API.
        """
        return [
            {"role": "system", "content": SAFETY_SYSTEM_PROMPT},
            {"role": "user", "content": build_safety_prompt(commands)},
        ]


def build_safety_prompt(commands: Sequence[str]) -> str:
    """Number the commands so the model can keep them in order."""
    lines = ["Evaluate these commands:", ""]
    for i, command in enumerate(commands, start=1):
        lines.append(f"{i}. {command}")
    return "\n".join(lines) + "\n"
