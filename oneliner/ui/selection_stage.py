"""
Option selection stage.

Shows the candidate options immediately and runs the safety pass in the
background. Risk annotations are overlaid when the pass completes; if it
fails the options stay exactly as generated and only the "checking"
indicator disappears.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from rich.console import Group, RenderableType
from rich.constrain import Constrain
from rich.padding import Padding
from rich.style import Style
from rich.text import Text

from oneliner.exceptions import EvaluationError
from oneliner.models.command_models import CommandOption, RiskAnnotation, RiskLevel
from oneliner.ui import styles
from oneliner.ui.messages import (
    Cmd,
    KeyMsg,
    RiskResultMsg,
    WindowSizeMsg,
    batch,
    quit_cmd,
)
from oneliner.ui.spinner import Spinner

logger = logging.getLogger(__name__)

QUIT_KEYS = ("ctrl+c", "q", "esc")
UP_KEYS = ("up", "k")
DOWN_KEYS = ("down", "j")


def format_risk_warning(risk: RiskAnnotation, selected: bool) -> Text:
    """Render a risk annotation; a NONE level renders as nothing."""
    if risk.level is RiskLevel.LOW:
        icon, style = "⚠️", styles.WARNING_LOW
    elif risk.level is RiskLevel.HIGH:
        icon, style = "🚨", styles.WARNING_HIGH
    else:
        return Text("")

    if selected:
        style = style + Style(bold=True)
    return Text(f"{icon} {risk.message}", style=style)


class SelectionStage:
    """
    Lets the user pick one option.

    Args:
        options: The generated options, in display order.
        generator: Runs the background safety pass. ``None`` disables it.
        width (int): Terminal width used for wrapping.
        evaluated (bool): The options already carry their safety result,
            so no background pass is started.
    """

    def __init__(
        self,
        options: Sequence[CommandOption],
        generator=None,
        width: int = 80,
        evaluated: bool = False,
    ):
        self.options: List[CommandOption] = list(options)
        self.generator = generator
        self.cursor = 0
        self.selected: Optional[CommandOption] = None
        self.quitting = False
        self.width = width
        self.safety_done = evaluated or generator is None
        self.spinner = Spinner(style=styles.CHECKING)

    def init(self) -> Optional[Cmd]:
        if self.safety_done:
            return None
        return batch(self._evaluate_safety(list(self.options)), self.spinner.tick())

    def _evaluate_safety(self, snapshot: List[CommandOption]) -> Cmd:
        generator = self.generator

        async def _run() -> RiskResultMsg:
            try:
                options = await generator.evaluate_safety(snapshot)
            except EvaluationError as e:
                logger.debug(f"Safety evaluation failed: {e}")
                return RiskResultMsg(error=e)
            return RiskResultMsg(options=options)

        return _run

    def update(self, msg: object) -> Tuple["SelectionStage", Optional[Cmd]]:
        if self.quitting:
            return self, None

        if isinstance(msg, KeyMsg):
            if msg.key in QUIT_KEYS:
                self.quitting = True
                return self, quit_cmd

            if msg.key in UP_KEYS:
                if self.cursor > 0:
                    self.cursor -= 1

            elif msg.key in DOWN_KEYS:
                if self.cursor < len(self.options) - 1:
                    self.cursor += 1

            elif msg.key == "enter":
                self.selected = self.options[self.cursor]
                self.quitting = True
                return self, quit_cmd

        elif isinstance(msg, RiskResultMsg):
            self.safety_done = True
            if msg.error is None and msg.options is not None:
                if len(msg.options) == len(self.options):
                    self.options = list(msg.options)
                else:
                    logger.debug("Discarding safety result with mismatched length")

        elif isinstance(msg, WindowSizeMsg):
            self.width = msg.width

        elif self.spinner.owns(msg):
            if not self.safety_done:
                return self, self.spinner.update(msg)

        return self, None

    def _risk_line(self, option: CommandOption, selected: bool) -> Optional[Text]:
        if option.risk is not None:
            return format_risk_warning(option.risk, selected)
        if not self.safety_done:
            return Text.assemble(
                self.spinner.view(), Text(" checking safety...", style=styles.CHECKING)
            )
        return None

    def view(self) -> RenderableType:
        if self.quitting and self.selected is None:
            return Text("")

        content_width = max(self.width - 4, 10)
        parts: List[RenderableType] = [Text(""), Text("Select a command:"), Text("")]

        for i, option in enumerate(self.options):
            is_cursor = self.cursor == i
            marker = Text("▸", style=styles.SELECTED) if is_cursor else Text(" ")
            title_style = styles.SELECTED if is_cursor else styles.TITLE
            parts.append(Text.assemble(marker, " ", Text(option.title, style=title_style)))

            body: List[RenderableType] = [Text(option.command, style=styles.COMMAND)]
            risk_line = self._risk_line(option, is_cursor)
            if risk_line is not None and risk_line.plain:
                body.append(risk_line)
            body.append(Text(option.description, style=styles.DESCRIPTION))
            body.append(Text(""))

            parts.append(Padding(Constrain(Group(*body), width=content_width), (0, 0, 0, 2)))

        if self.selected is None:
            parts.append(
                Text("↑/k: up • ↓/j: down • enter: select • q: quit", style=styles.HELP)
            )

        return Group(*parts)
