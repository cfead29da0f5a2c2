"""
Unit tests for the main CLI module.

This module tests the CLI entry point including configuration checks,
stage selection, exit codes and hand-off to the output handler.
"""

from unittest.mock import AsyncMock, Mock, patch

import keyring.errors
import pytest
from typer.testing import CliRunner

from oneliner.config.providers import Provider
from oneliner.exceptions import GenerationError
from oneliner.main import SHELL_INIT_SCRIPTS, app, get_version
from oneliner.ui.input_stage import InputStage
from oneliner.ui.progress_stage import ProgressStage
from oneliner.ui.selection_stage import SelectionStage

runner = CliRunner()


class TestVersionHandling:
    """Test version handling functionality."""

    @patch("oneliner.main.importlib.metadata.version")
    def test_get_version_success(self, mock_version):
        mock_version.return_value = "1.2.3"

        assert get_version() == "1.2.3"
        mock_version.assert_called_once_with("oneliner")

    @patch("oneliner.main.importlib.metadata.version")
    def test_get_version_package_not_found(self, mock_version):
        from importlib.metadata import PackageNotFoundError

        mock_version.side_effect = PackageNotFoundError()

        assert get_version() == "0.1.0"

    @patch("oneliner.main.get_version", return_value="1.2.3")
    def test_version_option(self, _version):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "OneLiner Version: 1.2.3" in result.stdout


class TestShellInit:
    @pytest.mark.parametrize("shell", ["bash", "zsh", "fish"])
    def test_prints_script(self, shell):
        result = runner.invoke(app, ["--shell-init", shell])

        assert result.exit_code == 0
        assert result.stdout == SHELL_INIT_SCRIPTS[shell]
        assert "--output shell-function" in result.stdout

    def test_unknown_shell(self):
        result = runner.invoke(app, ["--shell-init", "tcsh"])

        assert result.exit_code == 1


class TestResetApiKey:
    @patch("oneliner.main.api_manager.delete_api_key", return_value=True)
    @patch("oneliner.main.typer.confirm", return_value=False)
    def test_reset_without_new_key(self, _confirm, mock_delete):
        result = runner.invoke(app, ["--reset-api-key"])

        assert result.exit_code == 0
        assert "API key deleted successfully" in result.stdout
        mock_delete.assert_called_once()

    @patch("oneliner.main.api_manager.delete_api_key", return_value=True)
    @patch("oneliner.main.api_manager.save_api_key", return_value=True)
    @patch("oneliner.main.typer.confirm", return_value=True)
    @patch("oneliner.main.typer.prompt")
    def test_reset_with_new_key(
        self, mock_prompt, _confirm, mock_save, _delete, valid_api_key
    ):
        mock_prompt.return_value = valid_api_key

        result = runner.invoke(app, ["--reset-api-key"])

        assert result.exit_code == 0
        assert "New API key saved successfully" in result.stdout
        mock_save.assert_called_once_with(valid_api_key)

    @patch("oneliner.main.api_manager.delete_api_key", return_value=True)
    @patch("oneliner.main.typer.confirm", return_value=True)
    @patch("oneliner.main.typer.prompt", return_value="bad")
    def test_reset_with_invalid_key(self, _prompt, _confirm, _delete):
        result = runner.invoke(app, ["--reset-api-key"])

        assert result.exit_code == 1
        assert "Invalid API key format" in result.stdout

    @patch("oneliner.main.api_manager.delete_api_key", return_value=False)
    def test_reset_delete_failure(self, _delete):
        result = runner.invoke(app, ["--reset-api-key"])

        assert result.exit_code == 1


@pytest.fixture
def cli_env(valid_api_key):
    """Patch configuration, logging and the UI program for CLI runs."""
    with (
        patch("oneliner.main.initialize_logging") as mock_logging,
        patch("oneliner.main.settings") as mock_settings,
        patch("oneliner.main.api_manager.get_api_key", return_value=valid_api_key),
        patch("oneliner.main.Program") as mock_program,
        patch("oneliner.main.OutputHandler") as mock_output,
    ):
        mock_settings.load_error = None
        mock_settings.get.side_effect = lambda section, key, default=None: default
        mock_settings.get_option_count.return_value = 3
        mock_settings.get_safety_mode.return_value = "background"
        mock_program.return_value.run = AsyncMock()
        yield Mock(
            logging=mock_logging,
            settings=mock_settings,
            program=mock_program,
            output=mock_output,
        )


def finish_with(cli_env, stage):
    cli_env.program.return_value.run.return_value = stage


class TestRun:
    def test_query_args_skip_input_stage(self, cli_env, generator):
        finish_with(cli_env, ProgressStage(generator, "x"))

        result = runner.invoke(app, ["list", "all", "files"])

        assert result.exit_code == 0
        stage = cli_env.program.call_args.args[0]
        assert isinstance(stage, ProgressStage)
        assert stage.query == "list all files"

    def test_no_args_starts_with_input(self, cli_env, generator):
        finish_with(cli_env, InputStage(generator))

        result = runner.invoke(app, [])

        assert result.exit_code == 0
        assert isinstance(cli_env.program.call_args.args[0], InputStage)

    def test_selected_option_is_dispatched(self, cli_env, sample_options):
        stage = SelectionStage(sample_options, evaluated=True)
        stage.selected = sample_options[1]
        finish_with(cli_env, stage)

        result = runner.invoke(app, ["--output", "stdout", "find", "things"])

        assert result.exit_code == 0
        mode = cli_env.output.call_args.args[0]
        assert mode.value == "stdout"
        cli_env.output.return_value.output.assert_called_once_with(sample_options[1])

    def test_default_output_mode_is_clipboard(self, cli_env, sample_options):
        stage = SelectionStage(sample_options, evaluated=True)
        stage.selected = sample_options[0]
        finish_with(cli_env, stage)

        runner.invoke(app, ["list", "files"])

        assert cli_env.output.call_args.args[0].value == "clipboard"

    def test_no_selection(self, cli_env, sample_options):
        finish_with(cli_env, SelectionStage(sample_options, evaluated=True))

        result = runner.invoke(app, ["list", "files"])

        assert result.exit_code == 0
        assert "No option selected" in result.stdout
        cli_env.output.assert_not_called()

    def test_generation_failure_exits_non_zero(self, cli_env, generator):
        stage = ProgressStage(generator, "list files")
        stage.err = GenerationError("no options generated")
        finish_with(cli_env, stage)

        result = runner.invoke(app, ["list", "files"])

        assert result.exit_code == 1
        assert "failed to generate options" in result.output
        cli_env.output.assert_not_called()

    def test_ui_failure_exits_non_zero(self, cli_env):
        cli_env.program.return_value.run.side_effect = RuntimeError("no terminal")

        result = runner.invoke(app, ["list", "files"])

        assert result.exit_code == 1
        assert "error running UI" in result.output

    def test_debug_flag_enables_debug_logging(self, cli_env, generator):
        finish_with(cli_env, InputStage(generator))

        runner.invoke(app, ["--debug"])

        cli_env.logging.assert_called_once_with(True)

    def test_model_option(self, cli_env, generator):
        finish_with(cli_env, InputStage(generator))

        with patch("oneliner.main.OpenAIClient") as mock_client:
            runner.invoke(app, ["--model", "gpt-test"])

        assert mock_client.call_args.kwargs["model"] == "gpt-test"


class TestConfigurationErrors:
    def test_missing_api_key(self, cli_env):
        with patch("oneliner.main.api_manager.get_api_key", return_value=None):
            result = runner.invoke(app, ["list", "files"])

        assert result.exit_code == 1
        assert "API key not set" in result.output
        cli_env.program.assert_not_called()

    def test_invalid_api_key(self, cli_env, invalid_api_key):
        result = runner.invoke(app, ["--api-key", invalid_api_key, "list", "files"])

        assert result.exit_code == 1
        cli_env.program.assert_not_called()

    def test_unreadable_settings(self, cli_env):
        cli_env.settings.load_error = "settings.json: bad JSON"

        result = runner.invoke(app, ["list", "files"])

        assert result.exit_code == 1
        assert "failed to load config" in result.output
        cli_env.program.assert_not_called()

    def test_unknown_provider(self, cli_env):
        cli_env.settings.get.side_effect = lambda section, key, default=None: (
            "acme" if key == "provider" else default
        )

        result = runner.invoke(app, ["list", "files"])

        assert result.exit_code == 1
        assert "unsupported provider" in result.output

    def test_keyring_failure(self, cli_env):
        error = keyring.errors.KeyringLocked("keyring is locked")
        with patch("oneliner.main.api_manager.get_api_key", side_effect=error):
            result = runner.invoke(app, ["list", "files"])

        assert result.exit_code == 1
        assert "failed to read API key from keyring" in result.output
        cli_env.program.assert_not_called()

    def test_provider_without_api_key(self, cli_env, generator):
        local = Provider(name="local", default_model="local-model", requires_api_key=False)
        finish_with(cli_env, InputStage(generator))

        with (
            patch("oneliner.main.get_provider", return_value=local),
            patch("oneliner.main.api_manager.get_api_key", return_value=None),
            patch("oneliner.main.OpenAIClient") as mock_client,
        ):
            result = runner.invoke(app, [])

        assert result.exit_code == 0
        assert mock_client.call_args.kwargs["api_key"] is None
        cli_env.program.assert_called_once()


@pytest.fixture
def tty():
    """Stand-in for the controlling terminal opened in shell-function mode."""
    handle = Mock()
    with (
        patch("oneliner.main.open", create=True, return_value=handle) as mock_open,
        patch("oneliner.main.Console") as mock_console,
    ):
        yield Mock(handle=handle, open=mock_open, console=mock_console)


class TestShellFunctionMode:
    def test_ui_runs_on_the_terminal(self, cli_env, tty, sample_options):
        finish_with(cli_env, SelectionStage(sample_options, evaluated=True))

        result = runner.invoke(app, ["--output", "shell-function", "list", "files"])

        assert result.exit_code == 0
        tty.open.assert_called_once_with("/dev/tty", "r+", encoding="utf-8")
        tty.console.assert_called_once_with(file=tty.handle)
        kwargs = cli_env.program.call_args.kwargs
        assert kwargs["input_stream"] is tty.handle
        assert kwargs["console"] is tty.console.return_value

    def test_terminal_is_closed(self, cli_env, tty, sample_options):
        finish_with(cli_env, SelectionStage(sample_options, evaluated=True))

        runner.invoke(app, ["--output", "shell-function", "list", "files"])

        tty.handle.close.assert_called_once()

    def test_terminal_is_closed_when_ui_fails(self, cli_env, tty):
        cli_env.program.return_value.run.side_effect = RuntimeError("no terminal")

        result = runner.invoke(app, ["--output", "shell-function", "list", "files"])

        assert result.exit_code == 1
        tty.handle.close.assert_called_once()

    def test_no_selection_writes_nothing(self, cli_env, tty, sample_options):
        finish_with(cli_env, SelectionStage(sample_options, evaluated=True))

        result = runner.invoke(app, ["--output", "shell-function", "list", "files"])

        assert result.exit_code == 0
        assert result.stdout == ""
        cli_env.output.assert_not_called()

    def test_selection_is_dispatched(self, cli_env, tty, sample_options):
        stage = SelectionStage(sample_options, evaluated=True)
        stage.selected = sample_options[2]
        finish_with(cli_env, stage)

        result = runner.invoke(app, ["--output", "shell-function", "list", "files"])

        assert result.exit_code == 0
        assert cli_env.output.call_args.args[0].value == "shell-function"
        cli_env.output.return_value.output.assert_called_once_with(sample_options[2])
