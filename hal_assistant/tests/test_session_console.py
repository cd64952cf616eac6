"""Tests for the interactive session console."""

from unittest.mock import patch

from hal_assistant.cli.session_console import SessionConsole
from hal_assistant.config.settings import Settings
from hal_assistant.state.session_store import SessionStore
from hal_assistant.tests.fakes import FakeBackend


class TestSessionConsole:
    """Tests for SessionConsole dialogs."""

    def setup_method(self):
        self.store = SessionStore(lambda key: FakeBackend())

    def console(self, tmp_path):
        settings = Settings(config_file=tmp_path / "params.json", load_env=False)
        settings.chat.openai_key = "sk-test"
        self.sessions_path = tmp_path / "sessions.json"
        return SessionConsole(self.store, settings, self.sessions_path)

    @patch("click.prompt")
    def test_create_session(self, mock_prompt, tmp_path):
        self.store.get_or_create("home", "k", "m")
        mock_prompt.side_effect = ["", "Home", "Work", "Be brief."]

        name = self.console(tmp_path).create_session()

        assert name == "work"
        session = self.store.get("work")
        assert session.persona == "Be brief."
        assert session.key == "sk-test"
        assert self.store.get_default()[0] == "work"
        assert self.sessions_path.exists()

    @patch("click.prompt")
    def test_create_session_without_persona(self, mock_prompt, tmp_path):
        mock_prompt.side_effect = ["work", ""]

        self.console(tmp_path).create_session()

        assert self.store.get("work").persona is None

    def test_describe(self, tmp_path):
        work = self.store.get_or_create("work", "k", "gpt-4")
        work.set_persona("Be brief.")
        self.store.get_or_create("home", "k", "gpt-3.5-turbo")
        self.store.set_default("work")

        lines = self.console(tmp_path).describe()

        assert lines == [
            "[ ] home[gpt-3.5-turbo]  ",
            "[✓] work[gpt-4]  Be brief.",
        ]

    @patch("click.prompt", return_value=2)
    def test_select_session(self, mock_prompt, tmp_path):
        self.store.get_or_create("a", "k", "m")
        self.store.get_or_create("b", "k", "m")

        assert self.console(tmp_path).select_session() == "b"
        assert self.store.get_default()[0] == "b"

    @patch("click.prompt")
    def test_select_with_no_sessions(self, mock_prompt, tmp_path):
        assert self.console(tmp_path).select_session() is None
        mock_prompt.assert_not_called()

    @patch("click.confirm", return_value=True)
    @patch("click.prompt", return_value=1)
    def test_delete_session(self, mock_prompt, mock_confirm, tmp_path):
        self.store.get_or_create("a", "k", "m")
        self.store.get_or_create("b", "k", "m")

        assert self.console(tmp_path).delete_session() == "a"
        assert self.store.list() == ["b"]

    @patch("click.confirm", return_value=False)
    @patch("click.prompt", return_value=1)
    def test_delete_declined(self, mock_prompt, mock_confirm, tmp_path):
        self.store.get_or_create("a", "k", "m")

        assert self.console(tmp_path).delete_session() is None
        assert "a" in self.store

    @patch("click.prompt")
    def test_configure_session(self, mock_prompt, tmp_path):
        self.store.get_or_create("a", "k", "m")
        self.store.get_or_create("b", "k", "m")
        mock_prompt.side_effect = [
            1,
            "n", "b",
            "n", "Renamed",
            "m", "gpt-4",
            "d", "Answer in French.",
            "q",
        ]

        name = self.console(tmp_path).configure_session()

        assert name == "renamed"
        session = self.store.get("renamed")
        assert session.model == "gpt-4"
        assert session.persona == "Answer in French."
        assert sorted(self.store.list()) == ["b", "renamed"]

    @patch("click.prompt")
    def test_configure_rename_rejects_blank_name(self, mock_prompt, tmp_path):
        session = self.store.get_or_create("work", "k", "m")
        mock_prompt.side_effect = [1, "n", "   ", "work2", "q"]

        name = self.console(tmp_path).configure_session()

        assert name == "work2"
        assert self.store.get("work2") is session
        assert self.store.list() == ["work2"]
        assert "" not in self.store

    @patch("click.prompt")
    def test_configure_key_rebuilds_backend(self, mock_prompt, tmp_path):
        session = self.store.get_or_create("a", "k", "m")
        old_backend = session.backend
        mock_prompt.side_effect = [1, "k", "sk-new", "q"]

        self.console(tmp_path).configure_session()

        assert session.key == "sk-new"
        assert session.backend is not old_backend
