"""
Progress stage: runs generation while showing a spinner.

Generation runs as its own task and reports stage changes through a
bounded channel that the stage keeps listening on. The notifications
only change the message on screen; the stage moves on when the
generation result itself arrives.
"""

import logging
from typing import Optional, Tuple, Union

from rich.console import RenderableType
from rich.text import Text

from oneliner.exceptions import GenerationError
from oneliner.models.command_models import PipelineStage
from oneliner.ui import styles
from oneliner.ui.channel import ProgressChannel
from oneliner.ui.messages import (
    Cmd,
    KeyMsg,
    OptionsMsg,
    ProgressMsg,
    WindowSizeMsg,
    batch,
    quit_cmd,
)
from oneliner.ui.selection_stage import SelectionStage
from oneliner.ui.spinner import Spinner

logger = logging.getLogger(__name__)

QUIT_KEYS = ("ctrl+c", "q", "esc")


class ProgressStage:
    """
    Args:
        generator: The option generator.
        query (str): The submitted query.
        width (int): Terminal width, handed on to the selection stage.
        safety_mode (str): "background" runs the safety pass in the
            selection stage, "inline" runs it here before showing the
            options, "off" skips it.
    """

    def __init__(self, generator, query: str, width: int = 80, safety_mode: str = "background"):
        self.generator = generator
        self.query = query
        self.width = width
        self.safety_mode = safety_mode
        self.stage = PipelineStage.GENERATING
        self.progress: ProgressChannel[PipelineStage] = ProgressChannel(capacity=2)
        self.spinner = Spinner(style=styles.TITLE)
        self.err: Optional[Exception] = None
        self.finished = False

    def init(self) -> Optional[Cmd]:
        return batch(self.spinner.tick(), self._load_options, self._wait_for_progress)

    async def _load_options(self) -> OptionsMsg:
        try:
            options = await self.generator.generate_with_progress(
                self.query,
                self.progress.send_nowait,
                evaluate=self.safety_mode == "inline",
            )
        except GenerationError as e:
            logger.debug(f"Generation failed: {e}")
            return OptionsMsg(error=e)
        finally:
            self.progress.close()

        return OptionsMsg(options=options)

    async def _wait_for_progress(self) -> Optional[ProgressMsg]:
        stage = await self.progress.receive()
        if stage is None:
            return None
        return ProgressMsg(stage)

    def update(self, msg: object) -> Tuple[Union["ProgressStage", SelectionStage], Optional[Cmd]]:
        if isinstance(msg, KeyMsg):
            if msg.key in QUIT_KEYS:
                self.finished = True
                return self, quit_cmd

        elif isinstance(msg, ProgressMsg):
            if self.finished:
                return self, None
            self.stage = msg.stage
            return self, self._wait_for_progress

        elif isinstance(msg, OptionsMsg):
            self.finished = True

            if msg.error is not None:
                self.err = msg.error
                return self, quit_cmd

            if not msg.options:
                self.err = GenerationError("no options generated")
                return self, quit_cmd

            selector = SelectionStage(
                msg.options,
                generator=None if self.safety_mode == "off" else self.generator,
                width=self.width,
                evaluated=self.safety_mode == "inline",
            )
            return selector, selector.init()

        elif isinstance(msg, WindowSizeMsg):
            self.width = msg.width

        elif self.spinner.owns(msg):
            if not self.finished:
                return self, self.spinner.update(msg)

        return self, None

    def view(self) -> RenderableType:
        if self.err is not None or self.finished:
            return Text("")
        return Text.assemble("\n", self.spinner.view(), " ", self.stage.message, "\n")
