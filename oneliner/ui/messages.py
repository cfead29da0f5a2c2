"""
Messages and commands exchanged between the Program and its stages.

A stage never performs I/O itself. It returns a ``Cmd``: a zero-argument
coroutine function the Program runs as its own task; whatever message
the coroutine returns is fed back into the current stage.
"""

from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Union

from oneliner.models.command_models import CommandOption, PipelineStage

Msg = object
Cmd = Callable[[], Awaitable[Optional[Msg]]]


@dataclass(frozen=True)
class KeyMsg:
    """A decoded key press: a named key such as "up" or a single character."""

    key: str
    text: bool = False


@dataclass(frozen=True)
class WindowSizeMsg:
    width: int
    height: int = 24


@dataclass(frozen=True)
class SpinnerTickMsg:
    spinner_id: int


@dataclass(frozen=True)
class ProgressMsg:
    stage: PipelineStage


@dataclass(frozen=True)
class OptionsMsg:
    options: List[CommandOption] = field(default_factory=list)
    error: Optional[Exception] = None


@dataclass(frozen=True)
class RiskResultMsg:
    options: Optional[List[CommandOption]] = None
    error: Optional[Exception] = None


@dataclass(frozen=True)
class QuitMsg:
    pass


class Batch:
    """Several commands to run concurrently."""

    def __init__(self, cmds: List[Cmd]):
        self.cmds = cmds


def batch(*cmds: Optional[Cmd]) -> Optional[Union[Cmd, Batch]]:
    """Combine commands, dropping empty ones."""
    valid = [cmd for cmd in cmds if cmd is not None]
    if not valid:
        return None
    if len(valid) == 1:
        return valid[0]
    return Batch(valid)


async def quit_cmd() -> QuitMsg:
    return QuitMsg()
