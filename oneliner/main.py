"""
Main entry point for the OneLiner CLI.

This module provides the command-line interface: it loads configuration,
builds the generator, runs the terminal UI and hands the selected
command to the output handler.
"""

import asyncio
import importlib.metadata
import sys
from typing import List, Optional

import keyring.errors
import typer
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from oneliner import __version__
from oneliner.commands.generator import OptionGenerator
from oneliner.config import api_manager
from oneliner.config.providers import get_provider
from oneliner.config.settings import settings
from oneliner.exceptions import ConfigurationError
from oneliner.models.command_models import OutputMode
from oneliner.output.handler import OutputHandler
from oneliner.translator.openai_client import OpenAIClient
from oneliner.ui import styles
from oneliner.ui.input_stage import InputStage
from oneliner.ui.program import Program
from oneliner.ui.progress_stage import ProgressStage
from oneliner.ui.selection_stage import SelectionStage
from oneliner.utils.logging import initialize_logging

# Create Typer app
app = typer.Typer(
    name="oneliner",
    help="Generate shell one-liners from natural language",
    add_completion=False,
)

# Set up consoles for rich output; errors never go to stdout
console = Console()
err_console = Console(stderr=True)

SHELL_INIT_SCRIPTS = {
    "bash": """\
# oneliner: press Ctrl+G to turn the current line into a command
_oneliner_widget() {
  local cmd
  cmd="$(oneliner --output shell-function "$READLINE_LINE")"
  if [ -n "$cmd" ]; then
    READLINE_LINE="$cmd"
    READLINE_POINT=${#cmd}
  fi
}
bind -x '"\\C-g": _oneliner_widget'
""",
    "zsh": """\
# oneliner: press Ctrl+G to turn the current line into a command
_oneliner_widget() {
  local cmd
  cmd="$(oneliner --output shell-function "$BUFFER")"
  if [[ -n "$cmd" ]]; then
    BUFFER="$cmd"
    CURSOR=${#BUFFER}
  fi
  zle reset-prompt
}
zle -N _oneliner_widget
bindkey '^G' _oneliner_widget

# or: ol <query>, which leaves the command on the next prompt
ol() {
  local cmd
  cmd="$(oneliner --output shell-function "$@")" && [[ -n "$cmd" ]] && print -z -- "$cmd"
}
""",
    "fish": """\
# oneliner: press Ctrl+G to turn the current line into a command
function _oneliner_widget
    set -l cmd (oneliner --output shell-function (commandline))
    if test -n "$cmd"
        commandline -r -- $cmd
    end
    commandline -f repaint
end
bind \\cg _oneliner_widget
""",
}


def get_version() -> str:
    """Get the installed version of OneLiner."""
    try:
        return importlib.metadata.version("oneliner")
    except importlib.metadata.PackageNotFoundError:
        return __version__  # Default during development


def fail(message: str) -> None:
    """Print an error to stderr and exit with status 1."""
    err_console.print(Text.assemble(("Error:", styles.ERROR), " ", message), highlight=False)
    raise typer.Exit(1)


def reset_api_key_flow() -> None:
    """Delete the stored API key and optionally store a new one."""
    if api_manager.delete_api_key():
        console.print("[bold green]API key deleted successfully.[/]")
    else:
        console.print("[bold red]Failed to delete API key.[/]")
        raise typer.Exit(1)

    set_new_key = typer.confirm("Do you want to set a new API key now?", default=True)
    if not set_new_key:
        console.print(
            "Set OPENAI_API_KEY or run 'oneliner --reset-api-key' again before "
            "generating commands."
        )
        raise typer.Exit()

    console.print(
        Panel(
            "Please enter your OpenAI API key.\n"
            "Your API key will be stored securely in your system's keyring.\n"
            "You can find your API key at: "
            "[link]https://platform.openai.com/api-keys[/link]",
            title="Set New API Key",
            border_style="green",
        )
    )

    api_key = typer.prompt("Enter your OpenAI API key", hide_input=True)

    if not api_manager.is_api_key_valid(api_key):
        console.print("[bold red]Invalid API key format.[/]")
        raise typer.Exit(1)

    if api_manager.save_api_key(api_key):
        console.print("[bold green]New API key saved successfully![/]")
    else:
        console.print("[bold red]Failed to save new API key.[/]")
        raise typer.Exit(1)

    raise typer.Exit()


def build_generator(api_key: Optional[str], model: Optional[str]) -> OptionGenerator:
    """
    Resolve configuration and build the option generator.

    Raises:
        ConfigurationError: If the settings file, provider or API key is
            unusable.
    """
    if settings.load_error:
        raise ConfigurationError(f"failed to load config: {settings.load_error}")

    provider_name = settings.get("api", "provider", "openai")
    provider = get_provider(provider_name)
    if provider is None:
        raise ConfigurationError(f"unsupported provider: {provider_name}")

    try:
        key = api_key or api_manager.get_api_key(provider)
    except keyring.errors.KeyringError as e:
        raise ConfigurationError(f"failed to read API key from keyring: {e}") from e

    if provider.requires_api_key:
        if not key:
            raise ConfigurationError(
                f"{provider.name} API key not set. Set {provider.env_var}, pass "
                "--api-key, or run 'oneliner --reset-api-key'."
            )
        if not api_manager.is_api_key_valid(key, provider):
            raise ConfigurationError("invalid API key format")

    try:
        client = OpenAIClient(
            api_key=key,
            model=model or settings.get("api", "model", provider.default_model),
            max_tokens=settings.get("api", "max_tokens", 2048),
        )
    except ValueError as e:
        raise ConfigurationError(f"failed to create LLM client: {e}") from e

    return OptionGenerator(client, option_count=settings.get_option_count())


# Define typer arguments at module level to avoid B008
_QUERY_ARG = typer.Argument(
    None, help="What you want to do, in plain words. Prompts for it if omitted."
)


@app.command()
def run(
    query: Optional[List[str]] = _QUERY_ARG,
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output mode: clipboard, shell-function, stdout.",
    ),
    model: Optional[str] = typer.Option(
        None, "--model", "-m", help="OpenAI model to use."
    ),
    api_key: Optional[str] = typer.Option(
        None, "--api-key", help="OpenAI API key (overrides stored key)."
    ),
    debug: bool = typer.Option(
        False, "--debug", "-d", help="Enable debug logging."
    ),
    version: bool = typer.Option(
        False, "--version", "-v", help="Show the application version and exit."
    ),
    reset_api_key: bool = typer.Option(
        False, "--reset-api-key", help="Reset the stored OpenAI API key."
    ),
    shell_init: Optional[str] = typer.Option(
        None,
        "--shell-init",
        help="Print shell integration for bash, zsh or fish and exit.",
    ),
) -> None:
    """
    Generate shell one-liners from natural language.

    Describe what you want to do, pick one of the suggested commands and
    it is copied to the clipboard (or printed, or handed to your shell).
    """
    if version:
        console.print(f"[bold green]OneLiner Version:[/] {get_version()}")
        raise typer.Exit()

    if shell_init is not None:
        script = SHELL_INIT_SCRIPTS.get(shell_init.strip().lower())
        if script is None:
            fail(f"unsupported shell: {shell_init} (choose bash, zsh or fish)")
        sys.stdout.write(script)
        raise typer.Exit()

    if reset_api_key:
        reset_api_key_flow()

    logger = initialize_logging(debug)

    mode = OutputMode.parse(output or settings.get("output", "mode", "clipboard"))
    try:
        generator = build_generator(api_key, model)
    except ConfigurationError as e:
        fail(str(e))
    safety_mode = settings.get_safety_mode()

    query_text = " ".join(query or []).strip()
    if query_text:
        stage = ProgressStage(generator, query_text, safety_mode=safety_mode)
    else:
        stage = InputStage(generator, safety_mode=safety_mode)

    tty = None
    try:
        if mode is OutputMode.SHELL_FUNCTION:
            # stdout belongs to the shell wrapper; draw on the terminal itself
            tty = open("/dev/tty", "r+", encoding="utf-8")
            program = Program(stage, console=Console(file=tty), input_stream=tty)
        else:
            program = Program(stage, console=console, input_stream=sys.stdin)

        final = asyncio.run(program.run())

    except Exception as e:
        logger.debug(f"UI failed: {e}", exc_info=True)
        fail(f"error running UI: {e}")

    finally:
        if tty is not None:
            tty.close()

    if isinstance(final, ProgressStage) and final.err is not None:
        fail(f"failed to generate options: {final.err}")

    if not isinstance(final, SelectionStage):
        # Quit before any options were shown
        return

    if final.selected is None:
        if mode is not OutputMode.SHELL_FUNCTION:
            console.print("No option selected")
        return

    OutputHandler(mode).output(final.selected)


if __name__ == "__main__":
    app()
