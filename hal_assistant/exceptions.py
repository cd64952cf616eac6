"""Custom exceptions raised by the HAL assistant.

Errors coming back from the remote model API are never wrapped: they
propagate to the caller exactly as the ``openai`` client raised them.
"""


class HalError(Exception):
    """Base exception for the assistant."""

    pass


class SessionError(HalError):
    """Session store errors."""

    pass


class SessionNotFoundError(SessionError, KeyError):
    """The named session does not exist."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Session not found: {self.name}"


class SessionExistsError(SessionError):
    """A session with the target name already exists."""

    def __init__(self, name: str):
        super().__init__(f"Session already exists: {name}")
        self.name = name


class HookError(HalError):
    """Hook registry errors."""

    pass


class DuplicateHookError(HookError):
    """A hook config with the same keyword and kind is already registered."""

    def __init__(self, keyword: str, kind: str):
        super().__init__(f"Found a same config: keyword={keyword!r} hook={kind!r}")
        self.keyword = keyword
        self.kind = kind


class UnknownHookKindError(HookError):
    """No factory is registered for the hook kind."""

    def __init__(self, kind: str):
        super().__init__(f"Unknown hook kind: {kind}")
        self.kind = kind


class HookNotFoundError(HookError):
    """No live hook instance is bound for the kind."""

    def __init__(self, kind: str):
        super().__init__(f"Hook not exists: {kind}")
        self.kind = kind


class StoreFormatError(HalError):
    """A persisted document could not be decoded."""

    pass


class SpeechRecognitionTimeout(HalError):
    """Nothing was recognized before the recognizer gave up."""

    pass
