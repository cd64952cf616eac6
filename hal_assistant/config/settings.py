"""Configuration settings for the assistant."""

import os
from pathlib import Path
from typing import Optional, Dict, Any, Union
from dataclasses import dataclass, asdict
import json
import structlog
from dotenv import load_dotenv


logger = structlog.get_logger()


DEFAULT_DATA_DIR = "~/.hal-assistant"


@dataclass
class ChatSettings:
    """Chat model settings."""
    openai_key: str = ""
    model: str = "gpt-3.5-turbo"
    max_history: int = 4  # pairs
    classifier_model: str = "gpt-3.5-turbo"
    stream_max_tokens: int = 2048
    request_timeout: Optional[float] = None  # seconds, None keeps the client default


@dataclass
class SpeechSettings:
    """Speech recognition and synthesis settings."""
    speech_key: str = ""
    speech_region: str = ""
    language: str = "en-US"  # BCP-47 code
    voice: str = "en-US-ElizabethNeural"
    stop_word: str = "goodbye"
    keyword: str = ""
    keyword_model: str = ""
    keyword_language: str = ""
    recognizer: str = "console"
    synthesizer: str = "silent"
    silent: bool = False


@dataclass
class StorageSettings:
    """Where persisted documents live."""
    data_dir: str = DEFAULT_DATA_DIR
    sessions_file: str = "sessions.json"
    hooks_file: str = "hooks.json"

    @property
    def base_path(self) -> Path:
        return Path(self.data_dir).expanduser()

    @property
    def sessions_path(self) -> Path:
        return self.base_path / self.sessions_file

    @property
    def hooks_path(self) -> Path:
        return self.base_path / self.hooks_file


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = "INFO"
    format: str = "dev"
    file_enabled: bool = False
    file_rotation_mb: int = 10
    file_backup_count: int = 7


SECTIONS = ("chat", "speech", "storage", "logging")


def _env_flag(value: str) -> bool:
    return value.lower() in ("true", "1", "yes", "on")


class Settings:
    """
    Main settings object.

    Values are layered: dataclass defaults, then the params file, then
    environment variables (a ``.env`` file is honoured). The object is built
    once at start-up and passed to whatever needs it.
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None, load_env: bool = True):
        self.chat = ChatSettings()
        self.speech = SpeechSettings()
        self.storage = StorageSettings()
        self.logging = LoggingSettings()
        self.initialized = False

        if load_env:
            self._load_env_file()
            data_dir = os.getenv("HAL_DATA_DIR")
            if data_dir:
                self.storage.data_dir = data_dir

        self.config_file = (
            Path(config_file).expanduser()
            if config_file
            else self.storage.base_path / "params.json"
        )

        if self.config_file.exists():
            self.load_from_file()

        if load_env:
            self.load_from_env()

    def _load_env_file(self) -> None:
        """Load environment variables from the nearest .env file."""
        current_dir = Path.cwd()
        for parent in [current_dir] + list(current_dir.parents):
            env_file = parent / ".env"
            if env_file.exists():
                load_dotenv(env_file)
                logger.debug("Loaded .env file", path=str(env_file))
                break

    def load_from_file(self) -> None:
        """
        Load settings from the params file.

        Unknown keys are ignored. An unreadable file is logged and the
        current values are kept.
        """
        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load settings from file",
                         file=str(self.config_file), error=str(e))
            return

        if not isinstance(config, dict):
            logger.error("Settings file is not an object", file=str(self.config_file))
            return

        self.initialized = bool(config.get("initialized", self.initialized))
        for section in SECTIONS:
            values = config.get(section)
            if not isinstance(values, dict):
                continue

            target = getattr(self, section)
            for key, value in values.items():
                if hasattr(target, key):
                    setattr(target, key, value)

        logger.info("Loaded settings from file", file=str(self.config_file))

    def load_from_env(self) -> None:
        """Override settings with environment variables."""
        if os.getenv("OPENAI_API_KEY"):
            self.chat.openai_key = os.getenv("OPENAI_API_KEY")
        if os.getenv("HAL_MODEL"):
            self.chat.model = os.getenv("HAL_MODEL")
        if os.getenv("HAL_MAX_HISTORY"):
            self.chat.max_history = int(os.getenv("HAL_MAX_HISTORY"))
        if os.getenv("HAL_CLASSIFIER_MODEL"):
            self.chat.classifier_model = os.getenv("HAL_CLASSIFIER_MODEL")
        if os.getenv("HAL_REQUEST_TIMEOUT"):
            self.chat.request_timeout = float(os.getenv("HAL_REQUEST_TIMEOUT"))

        if os.getenv("SPEECH_KEY"):
            self.speech.speech_key = os.getenv("SPEECH_KEY")
        if os.getenv("SPEECH_REGION"):
            self.speech.speech_region = os.getenv("SPEECH_REGION")
        if os.getenv("HAL_LANGUAGE"):
            self.speech.language = os.getenv("HAL_LANGUAGE")
        if os.getenv("HAL_VOICE"):
            self.speech.voice = os.getenv("HAL_VOICE")
        if os.getenv("HAL_STOP_WORD"):
            self.speech.stop_word = os.getenv("HAL_STOP_WORD")
        if os.getenv("HAL_SILENT"):
            self.speech.silent = _env_flag(os.getenv("HAL_SILENT"))

        if os.getenv("LOG_LEVEL"):
            self.logging.level = os.getenv("LOG_LEVEL")
        if os.getenv("LOG_FORMAT"):
            self.logging.format = os.getenv("LOG_FORMAT")
        if os.getenv("LOG_FILE_ENABLED"):
            self.logging.file_enabled = _env_flag(os.getenv("LOG_FILE_ENABLED"))

    def save_to_file(self, file_path: Optional[Union[str, Path]] = None) -> None:
        """Save current settings to file."""
        save_path = Path(file_path) if file_path else self.config_file

        try:
            save_path.parent.mkdir(parents=True, exist_ok=True)
            with open(save_path, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error("Failed to save settings to file", file=str(save_path), error=str(e))
            raise

        logger.debug("Saved settings to file", file=str(save_path))

    def validate(self) -> list[str]:
        """Validate current settings and return list of issues."""
        issues = []

        if not self.chat.openai_key:
            issues.append("OpenAI API key is not set")
        if not self.chat.model:
            issues.append("Chat model is not set")
        if self.chat.stream_max_tokens <= 0:
            issues.append(f"Invalid stream max tokens: {self.chat.stream_max_tokens}")
        if self.chat.request_timeout is not None and self.chat.request_timeout <= 0:
            issues.append(f"Invalid request timeout: {self.chat.request_timeout}")
        if not self.speech.stop_word:
            issues.append("Stop word is not set")
        if self.logging.level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            issues.append(f"Invalid log level: {self.logging.level}")

        return issues

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary for serialization."""
        data: Dict[str, Any] = {"initialized": self.initialized}
        for section in SECTIONS:
            data[section] = asdict(getattr(self, section))
        return data

    def __str__(self) -> str:
        data = self.to_dict()
        # Never print credentials in full.
        for section, key in (("chat", "openai_key"), ("speech", "speech_key")):
            value = data[section][key]
            if value:
                data[section][key] = value[:3] + "..." + value[-4:] if len(value) > 8 else "***"
        return json.dumps(data, indent=1, ensure_ascii=False)
