"""Tests for the command line interface."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from hal_assistant.cli.main import cli
from hal_assistant.hooks import hook_id


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("hal_assistant.cli.main.setup_logging"):
        yield


class TestCli:
    """Tests for the hal command group."""

    def setup_method(self):
        self.runner = CliRunner()

    def invoke(self, tmp_path, *args, input=None):
        base = ["--config", str(tmp_path / "params.json"), "--data-dir", str(tmp_path)]
        return self.runner.invoke(
            cli, base + list(args), input=input, env={"OPENAI_API_KEY": "sk-test"}
        )

    def test_help(self):
        result = self.runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("run", "session", "hook", "keyword"):
            assert command in result.output

    def test_hook_list_on_first_run(self, tmp_path):
        result = self.invoke(tmp_path, "hook", "list")

        assert result.exit_code == 0
        assert "create session -> CreateSession" in result.output
        assert "list session -> ListSessions" in result.output

    def test_hook_add_and_duplicate(self, tmp_path):
        result = self.invoke(tmp_path, "hook", "add", "new chat", "createsession")
        assert result.exit_code == 0

        with open(tmp_path / "hooks.json", "r", encoding="utf-8") as f:
            configs = json.load(f)["hookConfigs"]
        assert configs[hook_id("new chat", "CreateSession")] == {
            "keyword": "new chat",
            "hook": "CreateSession",
            "enable": True,
        }
        assert len(configs) == 5

        result = self.invoke(tmp_path, "hook", "add", "new chat", "CreateSession")
        assert result.exit_code == 1
        assert "Found a same config" in result.output

    def test_hook_add_unknown_kind(self, tmp_path):
        result = self.invoke(tmp_path, "hook", "add", "wipe", "DeleteEverything")

        assert result.exit_code == 1
        assert "Unknown hook kind" in result.output

    def test_hook_disable_enable_delete(self, tmp_path):
        config_id = hook_id("list session", "ListSessions")

        result = self.invoke(tmp_path, "hook", "disable", config_id[:8])
        assert result.exit_code == 0
        assert "[off] list session" in self.invoke(tmp_path, "hook", "list").output

        result = self.invoke(tmp_path, "hook", "enable", config_id[:8])
        assert result.exit_code == 0
        assert "[on ] list session" in self.invoke(tmp_path, "hook", "list").output

        result = self.invoke(tmp_path, "hook", "delete", config_id)
        assert result.exit_code == 0
        assert "list session" not in self.invoke(tmp_path, "hook", "list").output

    def test_hook_unknown_id(self, tmp_path):
        result = self.invoke(tmp_path, "hook", "delete", "zzzz")

        assert result.exit_code == 1
        assert "No hook with id zzzz" in result.output

    def test_session_create_and_list(self, tmp_path):
        result = self.invoke(tmp_path, "session", "create", input="Work\nBe brief.\n")
        assert result.exit_code == 0

        with open(tmp_path / "sessions.json", "r", encoding="utf-8") as f:
            clients = json.load(f)["clients"]
        assert clients["work"]["default"] is True
        assert clients["work"]["key"] == "sk-test"

        result = self.invoke(tmp_path, "session", "list")
        assert "[✓] work[gpt-3.5-turbo]  Be brief." in result.output

    def test_session_delete(self, tmp_path):
        self.invoke(tmp_path, "session", "create", input="work\n\n")

        result = self.invoke(tmp_path, "session", "delete", input="1\ny\n")

        assert result.exit_code == 0
        assert "No sessions yet." in self.invoke(tmp_path, "session", "list").output

    def test_malformed_sessions_file(self, tmp_path):
        (tmp_path / "sessions.json").write_text("[]", encoding="utf-8")

        result = self.invoke(tmp_path, "session", "list")

        assert result.exit_code == 1
        assert "malformed" in result.output

    def test_keyword_set_and_show(self, tmp_path):
        result = self.invoke(tmp_path, "keyword", "set", "--keyword", "jarvis", "--language", "en")
        assert result.exit_code == 0

        with open(tmp_path / "params.json", "r", encoding="utf-8") as f:
            assert json.load(f)["speech"]["keyword"] == "jarvis"

        result = self.invoke(tmp_path, "keyword", "show")
        assert "Keyword: jarvis, Language: en" in result.output

    @patch("hal_assistant.cli.main.signal.signal")
    @patch("hal_assistant.cli.main.ConversationManager")
    def test_run(self, mock_manager, mock_signal, tmp_path):
        result = self.invoke(tmp_path, "run", "--silent", "--history", "2", "--model", "gpt-4")

        assert result.exit_code == 0
        assert "Goodbye!" in result.output
        mock_manager.return_value.run.assert_called_once_with()

        app = mock_manager.call_args.args[0]
        assert app.settings.chat.model == "gpt-4"
        assert app.settings.chat.max_history == 2
        assert mock_manager.call_args.kwargs["silent"] is True

    @patch("hal_assistant.cli.main.signal.signal")
    @patch("hal_assistant.cli.main.ConversationManager")
    def test_run_interrupted(self, mock_manager, mock_signal, tmp_path):
        mock_manager.return_value.run.side_effect = KeyboardInterrupt

        result = self.invoke(tmp_path, "run")

        assert result.exit_code == 0
        assert "Shutting down" in result.output

    def test_run_unknown_recognizer(self, tmp_path):
        result = self.invoke(tmp_path, "run", "--recognizer", "whisper")

        assert result.exit_code == 1
        assert "Unknown stt provider: whisper" in result.output

    def test_providers(self, tmp_path):
        result = self.invoke(tmp_path, "providers")

        assert result.exit_code == 0
        assert "Recognizers: console (using console)" in result.output
        assert "Chat backends: openai" in result.output
        assert "Synthesizers: silent (using silent)" in result.output
