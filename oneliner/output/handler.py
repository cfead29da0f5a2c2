"""
Final disposal of the selected command.

Depending on the output mode the command is copied to the system
clipboard, printed with a confirmation, or written as a bare line for a
shell wrapper function to capture.
"""

import logging
import subprocess
import sys
from typing import List, Optional, TextIO, Union

from oneliner.models.command_models import CommandOption, OutputMode

logger = logging.getLogger(__name__)

# Tried in order; the first one that succeeds wins.
CLIPBOARD_BACKENDS: List[List[str]] = [
    ["pbcopy"],
    ["xclip", "-selection", "clipboard"],
    ["wl-copy"],
]


def copy_to_clipboard(text: str) -> bool:
    """
    Copy text to the system clipboard.

    Args:
        text (str): The text to copy.

    Returns:
        bool: True if one of the clipboard backends accepted the text.
    """
    for argv in CLIPBOARD_BACKENDS:
        try:
            subprocess.run(argv, input=text, text=True, check=True, capture_output=True)
        except (OSError, subprocess.CalledProcessError) as e:
            logger.debug(f"Clipboard backend {argv[0]} unavailable: {e}")
            continue
        logger.debug(f"Copied command with {argv[0]}")
        return True
    return False


class OutputHandler:
    """
    Writes the selected command according to an output mode.

    Args:
        mode: An ``OutputMode`` or its string value. Unrecognised values
            fall back to the clipboard.
        stream: Where to write. Defaults to the current ``sys.stdout``.
    """

    def __init__(self, mode: Union[OutputMode, str] = OutputMode.CLIPBOARD, stream: Optional[TextIO] = None):
        self.mode = mode if isinstance(mode, OutputMode) else OutputMode.parse(mode)
        self.stream = stream

    def _write(self, text: str) -> None:
        stream = self.stream or sys.stdout
        stream.write(text)
        stream.flush()

    def output(self, option: CommandOption) -> None:
        if self.mode is OutputMode.SHELL_FUNCTION:
            self._output_shell_function(option)
        elif self.mode is OutputMode.STDOUT:
            self._output_stdout(option)
        else:
            self._output_clipboard(option)

    def _output_shell_function(self, option: CommandOption) -> None:
        # The wrapper reads this line verbatim
        self._write(option.command + "\n")

    def _output_stdout(self, option: CommandOption) -> None:
        self._write(f"\n✓ Selected command:\n{option.command}\n")

    def _output_clipboard(self, option: CommandOption) -> None:
        if copy_to_clipboard(option.command):
            self._write(f"\n✓ Copied to clipboard: {option.command}\n")
            return

        self._write("\n⚠ Clipboard not available\n")
        self._output_stdout(option)
