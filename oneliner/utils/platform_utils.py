"""
Platform detection and utilities for OneLiner.

This module provides functions to detect the operating system,
shell environment, and terminal capabilities so prompts and output
backends can be adapted to the host.
"""

import os
import platform
import sys
from typing import Dict, Optional

KNOWN_SHELLS = ("bash", "zsh", "fish", "sh", "dash", "ksh", "tcsh", "pwsh", "powershell")


def get_platform_info() -> Dict[str, str]:
    """
    Get basic information about the current platform.

    Returns:
        Dict[str, str]: Dictionary containing platform information.
    """
    info = {
        "os_name": platform.system(),
        "architecture": platform.machine(),
        "python_version": platform.python_version(),
    }

    shell_name = detect_shell()
    if shell_name:
        info["shell_name"] = shell_name

    return info


def is_windows() -> bool:
    """
    Check if the current platform is Windows.

    Returns:
        bool: True if Windows, False otherwise.
    """
    return platform.system().lower() == "windows"


def is_macos() -> bool:
    """
    Check if the current platform is macOS.

    Returns:
        bool: True if macOS, False otherwise.
    """
    return platform.system().lower() == "darwin"


def detect_shell() -> Optional[str]:
    """
    Detect the user's interactive shell from the environment.

    Returns:
        Optional[str]: Shell name (e.g. "bash", "zsh") or None if unknown.
    """
    if is_windows():
        # PSModulePath is set for every process started from PowerShell
        if os.environ.get("PSModulePath") and not os.environ.get("SHELL"):
            return "powershell"
        if not os.environ.get("SHELL"):
            return "cmd"

    shell_path = os.environ.get("SHELL", "")
    if not shell_path:
        return None

    name = os.path.basename(shell_path).lower()
    if name.endswith(".exe"):
        name = name[:-4]
    return name if name in KNOWN_SHELLS else None


def supports_ansi_colors() -> bool:
    """
    Check if the terminal supports ANSI colors.

    Returns:
        bool: True if ANSI colors are supported, False otherwise.
    """
    if os.environ.get("NO_COLOR"):
        return False

    if is_windows():
        if os.environ.get("WT_SESSION") or os.environ.get("ANSICON"):
            return True
        try:
            if hasattr(sys, "getwindowsversion"):
                if sys.getwindowsversion().major >= 10:
                    return True
        except AttributeError:
            pass

    term_env = os.environ.get("TERM")
    if term_env and term_env != "dumb":
        return True

    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()
