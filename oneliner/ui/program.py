"""
The terminal UI event loop.

A ``Program`` owns the current stage and a single message queue. Key
presses, resize events and the results of commands all arrive on the
queue and are handed to ``stage.update`` one at a time, so stage state
is only ever touched from this loop. The screen is redrawn after every
message.
"""

import asyncio
import logging
import signal
from typing import List, Optional, Set

from rich.console import Console
from rich.live import Live

from oneliner.exceptions import OneLinerError
from oneliner.ui.messages import Batch, Cmd, KeyMsg, QuitMsg, WindowSizeMsg
from oneliner.ui.keys import KeyReader

logger = logging.getLogger(__name__)


class ProgramError(OneLinerError):
    """A command raised instead of returning a message."""


class _CommandFailed:
    def __init__(self, error: BaseException):
        self.error = error


class Program:
    """
    Args:
        stage: The initial stage.
        console: Console to render on; also the source of the initial
            window size.
        input_stream: Terminal to read keys from. ``None`` disables key
            input, which is how tests drive a Program with ``send``.
    """

    def __init__(self, stage, console: Optional[Console] = None, input_stream=None):
        self.stage = stage
        self.console = console or Console()
        self.input_stream = input_stream
        self._queue: Optional[asyncio.Queue] = None
        self._pending: List[object] = []
        self._tasks: Set[asyncio.Task] = set()

    def send(self, msg: object) -> None:
        """Deliver a message from outside the loop."""
        if self._queue is None:
            self._pending.append(msg)
        else:
            self._queue.put_nowait(msg)

    def _on_key(self, key: KeyMsg) -> None:
        self.send(key)

    def _on_resize(self) -> None:
        width, height = self.console.size
        self.send(WindowSizeMsg(width, height))

    def _dispatch(self, cmd) -> None:
        if cmd is None:
            return
        if isinstance(cmd, Batch):
            for sub in cmd.cmds:
                self._dispatch(sub)
            return

        task = asyncio.ensure_future(self._run_cmd(cmd))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_cmd(self, cmd: Cmd) -> None:
        try:
            msg = await cmd()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.debug(f"Command failed: {e}")
            msg = _CommandFailed(e)
        if msg is not None and self._queue is not None:
            self._queue.put_nowait(msg)

    def _watch_resize(self, loop: asyncio.AbstractEventLoop) -> bool:
        try:
            loop.add_signal_handler(signal.SIGWINCH, self._on_resize)
        except (NotImplementedError, RuntimeError, AttributeError, ValueError):
            return False
        return True

    async def run(self):
        """Run until a stage asks to quit. Returns the final stage."""
        loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()

        # Stages learn the real width before anything else
        self._on_resize()
        for msg in self._pending:
            self._queue.put_nowait(msg)
        self._pending.clear()

        reader: Optional[KeyReader] = None
        if self.input_stream is not None:
            reader = KeyReader(self.input_stream, self._on_key)
            reader.start(loop)

        watching_resize = self._watch_resize(loop)

        try:
            with Live(
                self.stage.view(),
                console=self.console,
                auto_refresh=False,
                redirect_stdout=False,
                redirect_stderr=False,
                transient=False,
            ) as live:
                self._dispatch(self.stage.init())

                while True:
                    msg = await self._queue.get()
                    if isinstance(msg, QuitMsg):
                        break
                    if isinstance(msg, _CommandFailed):
                        raise ProgramError(str(msg.error)) from msg.error

                    self.stage, cmd = self.stage.update(msg)
                    self._dispatch(cmd)
                    live.update(self.stage.view(), refresh=True)

                live.update(self.stage.view(), refresh=True)
        finally:
            for task in list(self._tasks):
                task.cancel()
            if self._tasks:
                await asyncio.gather(*self._tasks, return_exceptions=True)
            if watching_resize:
                loop.remove_signal_handler(signal.SIGWINCH)
            if reader is not None:
                reader.stop()
            self._queue = None

        return self.stage
