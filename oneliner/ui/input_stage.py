"""Query entry stage."""

from typing import Optional, Tuple, Union

from rich.console import Group, RenderableType
from rich.text import Text

from oneliner.ui import styles
from oneliner.ui.messages import Cmd, KeyMsg, WindowSizeMsg, quit_cmd
from oneliner.ui.progress_stage import ProgressStage

PLACEHOLDER = "e.g., search git history for myFunction"
CHAR_LIMIT = 200


class InputStage:
    """
    Single-line text entry for the query.

    Enter submits a non-blank query and hands it to a new progress
    stage; Esc or Ctrl+C quits without output.
    """

    def __init__(self, generator, width: int = 80, safety_mode: str = "background"):
        self.generator = generator
        self.safety_mode = safety_mode
        self.buffer = ""
        self.submitted = False
        self.query: Optional[str] = None
        self.width = width

    def init(self) -> Optional[Cmd]:
        return None

    def update(self, msg: object) -> Tuple[Union["InputStage", ProgressStage], Optional[Cmd]]:
        if isinstance(msg, KeyMsg):
            if msg.key == "enter":
                query = self.buffer.strip()
                if not query:
                    return self, None
                self.query = query
                self.submitted = True
                loading = ProgressStage(
                    self.generator, query, width=self.width, safety_mode=self.safety_mode
                )
                return loading, loading.init()

            if msg.key in ("ctrl+c", "esc"):
                return self, quit_cmd

            if msg.key == "backspace":
                self.buffer = self.buffer[:-1]
            elif msg.key == "ctrl+u":
                self.buffer = ""
            elif msg.text and len(self.buffer) < CHAR_LIMIT:
                self.buffer += msg.key

        elif isinstance(msg, WindowSizeMsg):
            self.width = msg.width

        return self, None

    def view(self) -> RenderableType:
        if self.submitted:
            return Text("")

        field_width = max(self.width - 4, 10)
        if self.buffer:
            # Keep the end of a long query visible
            shown = Text(self.buffer[-(field_width - 3):])
        else:
            shown = Text(PLACEHOLDER, style=styles.HELP)

        return Group(
            Text(""),
            Text("What command do you need?", style=styles.TITLE),
            Text(""),
            Text.assemble("> ", shown, Text("█", style="blink")),
            Text(""),
            Text("Enter to submit • Esc/Ctrl+C to quit", style=styles.HELP),
        )
