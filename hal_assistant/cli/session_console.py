"""Interactive session management on the terminal."""

from pathlib import Path
from typing import List, Optional, Union
import click
import structlog

from ..config.settings import Settings
from ..exceptions import SessionExistsError
from ..state.session_store import SessionStore


logger = structlog.get_logger()


DEFAULT_MARK = "✓"


class SessionConsole:
    """
    Terminal dialogs over a session store.

    Every dialog that changes the store saves it afterwards when a
    ``sessions_path`` is set.
    """

    def __init__(
        self,
        store: SessionStore,
        settings: Settings,
        sessions_path: Optional[Union[str, Path]] = None,
    ):
        self.store = store
        self.settings = settings
        self.sessions_path = sessions_path

    def save(self) -> None:
        if self.sessions_path:
            self.store.save(self.sessions_path)

    def _choose(self, action: str) -> Optional[str]:
        names = sorted(self.store.list())
        if not names:
            click.echo("No sessions yet.")
            return None

        click.echo(f"Please select a session to {action}:")
        for i, name in enumerate(names, start=1):
            click.echo(f"{i}. {name}")

        idx = click.prompt("Session", type=click.IntRange(1, len(names)))
        return names[idx - 1]

    def describe(self) -> List[str]:
        """One line per session: default mark, name, model and persona."""
        lines = []
        for name, session in sorted(self.store):
            flag = DEFAULT_MARK if session.is_default else " "
            lines.append(f"[{flag}] {name}[{session.model}]  {session.persona or ''}")
        return lines

    def list_sessions(self) -> None:
        lines = self.describe()
        if not lines:
            click.echo("No sessions yet.")
        for line in lines:
            click.echo(line)

    def create_session(self) -> str:
        """Ask for a name and a persona, then make the new session the default."""
        while True:
            name = click.prompt("Please give a session name (case insensitive)").strip().lower()
            if not name:
                click.echo("Can not be empty. Please input again.")
            elif name in self.store:
                click.echo("Session exist. Please choose other name.")
            else:
                break

        persona = click.prompt(
            "What do you want the assistant to do?", default="", show_default=False
        ).strip()

        session = self.store.get_or_create(
            name, self.settings.chat.openai_key, self.settings.chat.model
        )
        if persona:
            session.set_persona(persona)

        self.store.set_default(name)
        self.save()
        click.echo(f"Session {name} created.")
        return name

    def select_session(self) -> Optional[str]:
        name = self._choose("start")
        if name is None:
            return None

        self.store.set_default(name)
        self.save()
        click.echo(f"Session {name} selected.")
        return name

    def delete_session(self) -> Optional[str]:
        name = self._choose("delete")
        if name is None:
            return None
        if not click.confirm(f"Delete session {name}?", default=False):
            return None

        self.store.delete(name)
        self.save()
        click.echo(f"Session {name} deleted.")
        return name

    def configure_session(self) -> Optional[str]:
        """Edit name, model, key or persona of one session until 'q'."""
        name = self._choose("config")
        if name is None:
            return None

        session = self.store.get(name)
        while True:
            click.echo(
                f"(N)ame: {name}, (M)odel: {session.model}, "
                f"(K)ey: {_mask(session.key)}, (D)escription: {session.persona or ''}"
            )
            choice = click.prompt(
                "Enter the key to config, q for quit", default="", show_default=False
            ).strip().lower()

            if choice == "q":
                break
            elif choice == "n":
                new_name = click.prompt("Enter the new name").strip()
                while not new_name:
                    click.echo("Can not be empty. Please input again.")
                    new_name = click.prompt("Enter the new name").strip()
                try:
                    self.store.rename(name, new_name)
                except SessionExistsError:
                    click.echo(f"{new_name} exist. Please choose new name.")
                    continue
                name = self.store.normalize(new_name)
            elif choice == "m":
                session.set_model(click.prompt("Model", default=session.model))
            elif choice == "k":
                key = click.prompt("API key", default="", show_default=False).strip()
                if key:
                    session.key = key
                    session.backend = self.store.backend_factory(key)
            elif choice == "d":
                session.set_persona(click.prompt("What do you want the assistant to do?"))

        self.save()
        return name

    def show_keyword(self) -> None:
        speech = self.settings.speech
        click.echo(
            f"Keyword: {speech.keyword}, Language: {speech.keyword_language}, "
            f"Path: {speech.keyword_model}"
        )


def _mask(secret: str) -> str:
    if len(secret) <= 8:
        return "***" if secret else ""
    return secret[:3] + "..." + secret[-4:]
