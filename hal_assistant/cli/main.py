"""CLI entry point for the assistant."""

import signal
import sys
from pathlib import Path
from typing import Optional
import click
import structlog

from ..config.settings import Settings
from ..core.context import AppContext
from ..core.conversation_manager import ConversationManager
from ..exceptions import HookError, SessionError, StoreFormatError
from ..hooks import HookConfig, HookRegistry
from ..utils.logging import setup_logging


logger = structlog.get_logger()


def _settings(ctx: click.Context) -> Settings:
    return ctx.obj["settings"]


def _context(ctx: click.Context) -> AppContext:
    """Build the application context once per invocation."""
    if "context" not in ctx.obj:
        app = AppContext.create(_settings(ctx))
        try:
            app.load()
        except StoreFormatError as e:
            raise click.ClickException(f"Stored state is malformed: {e}")
        ctx.obj["context"] = app

    return ctx.obj["context"]


def _ensure_initialized(settings: Settings) -> None:
    """Ask for the credentials a first run needs."""
    if settings.chat.openai_key:
        return

    click.echo("It seems this is the first time you run the assistant.")
    settings.chat.openai_key = click.prompt("Please input your OpenAI key", hide_input=True).strip()
    settings.initialized = True
    settings.save_to_file()


def _find_hook(hooks: HookRegistry, prefix: str) -> HookConfig:
    """Find a hook by id or unique id prefix."""
    matches = [config for config_id, config in hooks.configs.items() if config_id.startswith(prefix)]
    if not matches:
        raise click.ClickException(f"No hook with id {prefix}")
    if len(matches) > 1:
        raise click.ClickException(f"Hook id {prefix} is ambiguous")
    return matches[0]


@click.group()
@click.option("--config", type=click.Path(dir_okay=False), help="Path to configuration file")
@click.option("--data-dir", type=click.Path(file_okay=False), help="Directory for sessions and hooks")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], data_dir: Optional[str], debug: bool):
    """A voice assistant on top of chat completions."""
    settings = Settings(config_file=config)
    if data_dir:
        settings.storage.data_dir = data_dir
        if not config:
            settings.config_file = settings.storage.base_path / "params.json"
            if settings.config_file.exists():
                settings.load_from_file()
                settings.storage.data_dir = data_dir

    setup_logging(
        debug=debug,
        log_file=settings.logging.file_enabled,
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        log_dir=settings.storage.base_path / "logs",
        file_rotation_mb=settings.logging.file_rotation_mb,
        file_backup_count=settings.logging.file_backup_count,
    )

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command()
@click.option("--silent", is_flag=True, help="Print replies without speaking them")
@click.option("--history", type=click.IntRange(min=0), help="History pairs kept per session")
@click.option("--model", help="Model for new sessions")
@click.option("--language", help="Recognition language, e.g. en-US")
@click.option("--voice", help="Synthesizer voice name")
@click.option("--stop-word", help="Word that ends an activation")
@click.option("--recognizer", help="Speech recognizer provider")
@click.option("--synthesizer", help="Speech synthesizer provider")
@click.pass_context
def run(
    ctx: click.Context,
    silent: bool,
    history: Optional[int],
    model: Optional[str],
    language: Optional[str],
    voice: Optional[str],
    stop_word: Optional[str],
    recognizer: Optional[str],
    synthesizer: Optional[str],
):
    """
    Start the voice loop.

    Say the keyword to activate, then talk. Saying the stop word or
    staying silent three times deactivates the assistant again.
    """
    settings = _settings(ctx)
    if silent:
        settings.speech.silent = True
    if history is not None:
        settings.chat.max_history = history
    if model:
        settings.chat.model = model
    if language:
        settings.speech.language = language
    if voice:
        settings.speech.voice = voice
    if stop_word:
        settings.speech.stop_word = stop_word
    if recognizer:
        settings.speech.recognizer = recognizer
    if synthesizer:
        settings.speech.synthesizer = synthesizer

    _ensure_initialized(settings)
    for issue in settings.validate():
        logger.warning("Configuration issue", issue=issue)

    app = _context(ctx)
    try:
        stt = app.providers.get_recognizer(settings.speech.recognizer)
        tts = app.providers.get_synthesizer(settings.speech.synthesizer)
    except ValueError as e:
        raise click.ClickException(str(e))

    manager = ConversationManager(app, stt, tts, silent=settings.speech.silent)

    def signal_handler(signum, frame):
        """Handle shutdown signals gracefully."""
        logger.info("Received shutdown signal", signal=signum)
        manager.stop()
        sys.exit(0)

    signal.signal(signal.SIGTERM, signal_handler)

    try:
        manager.run()
    except (KeyboardInterrupt, click.Abort):
        click.echo("\nShutting down...")

    click.echo("Goodbye!")


@cli.command()
@click.pass_context
def providers(ctx: click.Context):
    """List available providers."""
    registry = _context(ctx).providers
    settings = _settings(ctx)

    click.echo(f"Recognizers: {', '.join(registry.list_recognizers())} (using {settings.speech.recognizer})")
    click.echo(f"Chat backends: {', '.join(registry.list_backends())}")
    click.echo(f"Synthesizers: {', '.join(registry.list_synthesizers())} (using {settings.speech.synthesizer})")


@cli.group()
def session():
    """Manage chat sessions."""


@session.command("list")
@click.pass_context
def session_list(ctx: click.Context):
    """List sessions, marking the default one."""
    _context(ctx).console.list_sessions()


@session.command("create")
@click.pass_context
def session_create(ctx: click.Context):
    """Create a session and make it the default."""
    _context(ctx).console.create_session()


@session.command("select")
@click.pass_context
def session_select(ctx: click.Context):
    """Choose the default session."""
    _context(ctx).console.select_session()


@session.command("config")
@click.pass_context
def session_config(ctx: click.Context):
    """Edit name, model, key or persona of a session."""
    try:
        _context(ctx).console.configure_session()
    except SessionError as e:
        raise click.ClickException(str(e))


@session.command("delete")
@click.pass_context
def session_delete(ctx: click.Context):
    """Delete a session."""
    _context(ctx).console.delete_session()


@cli.group()
def hook():
    """Manage keyword hooks."""


def _save_hooks(app: AppContext) -> None:
    app.hooks.save(app.settings.storage.hooks_path)


@hook.command("list")
@click.pass_context
def hook_list(ctx: click.Context):
    """List configured hooks."""
    app = _context(ctx)
    if not app.hooks.configs:
        click.echo("No hooks configured.")
        return

    for config in app.hooks.configs.values():
        state = "on " if config.enabled else "off"
        click.echo(f"{config.id[:8]}  [{state}] {config.keyword} -> {config.kind}")

    click.echo(f"Available kinds: {', '.join(app.hooks.kinds())}")


@hook.command("add")
@click.argument("keyword")
@click.argument("kind")
@click.pass_context
def hook_add(ctx: click.Context, keyword: str, kind: str):
    """Bind KEYWORD to a hook KIND."""
    app = _context(ctx)
    resolved = app.hooks.resolve_kind(kind) or kind
    try:
        config = app.hooks.add(keyword, resolved)
    except HookError as e:
        raise click.ClickException(str(e))

    _save_hooks(app)
    click.echo(f"Hook {config.id[:8]} added.")


@hook.command("delete")
@click.argument("hook_id")
@click.pass_context
def hook_delete(ctx: click.Context, hook_id: str):
    """Delete the hook with HOOK_ID (a unique prefix is enough)."""
    app = _context(ctx)
    config = _find_hook(app.hooks, hook_id)
    app.hooks.delete(config.id)
    _save_hooks(app)
    click.echo(f"Hook {config.id[:8]} deleted.")


@hook.command("enable")
@click.argument("hook_id")
@click.pass_context
def hook_enable(ctx: click.Context, hook_id: str):
    """Enable the hook with HOOK_ID."""
    app = _context(ctx)
    config = _find_hook(app.hooks, hook_id)
    app.hooks.enable(config.id)
    _save_hooks(app)
    click.echo(f"Hook {config.id[:8]} enabled.")


@hook.command("disable")
@click.argument("hook_id")
@click.pass_context
def hook_disable(ctx: click.Context, hook_id: str):
    """Disable the hook with HOOK_ID."""
    app = _context(ctx)
    config = _find_hook(app.hooks, hook_id)
    app.hooks.disable(config.id)
    _save_hooks(app)
    click.echo(f"Hook {config.id[:8]} disabled.")


@cli.group()
def keyword():
    """Show or change the activation keyword."""


@keyword.command("show")
@click.pass_context
def keyword_show(ctx: click.Context):
    """Show the activation keyword settings."""
    _context(ctx).console.show_keyword()


@keyword.command("set")
@click.option("--keyword", "word", prompt="Keyword", help="Activation keyword")
@click.option("--model-path", default="", help="Keyword model file")
@click.option("--language", default="", help="Keyword language")
@click.pass_context
def keyword_set(ctx: click.Context, word: str, model_path: str, language: str):
    """Change the activation keyword."""
    settings = _settings(ctx)
    settings.speech.keyword = word.strip()
    if model_path:
        settings.speech.keyword_model = str(Path(model_path).expanduser())
    if language:
        settings.speech.keyword_language = language

    settings.save_to_file()
    click.echo(f"Keyword set to {settings.speech.keyword}.")


if __name__ == "__main__":
    cli()
