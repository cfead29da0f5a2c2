"""
Tick-driven spinner.

Unlike ``rich``'s time-based spinner, this one only advances when the
stage that owns it receives its tick message, so a stage can stop the
animation simply by not scheduling the next tick.
"""

import asyncio
import itertools
from typing import Optional

from rich.spinner import Spinner as RichSpinner
from rich.style import Style
from rich.text import Text

from oneliner.ui.messages import Cmd, SpinnerTickMsg

_spinner_ids = itertools.count(1)


class Spinner:
    def __init__(self, name: str = "dots", style: Optional[Style] = None):
        frames_source = RichSpinner(name)
        self.frames = list(frames_source.frames)
        self.interval = frames_source.interval / 1000.0
        self.style = style
        self.id = next(_spinner_ids)
        self.frame = 0

    def tick(self) -> Cmd:
        """Command that delivers this spinner's next tick."""
        spinner_id = self.id
        interval = self.interval

        async def _tick() -> SpinnerTickMsg:
            await asyncio.sleep(interval)
            return SpinnerTickMsg(spinner_id)

        return _tick

    def owns(self, msg: object) -> bool:
        return isinstance(msg, SpinnerTickMsg) and msg.spinner_id == self.id

    def update(self, msg: object) -> Optional[Cmd]:
        """Advance one frame on our own tick and schedule the next one."""
        if not self.owns(msg):
            return None
        self.frame = (self.frame + 1) % len(self.frames)
        return self.tick()

    def view(self) -> Text:
        return Text(self.frames[self.frame], style=self.style or "")
