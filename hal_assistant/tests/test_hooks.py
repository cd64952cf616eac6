"""Tests for hooks and the hook registry."""

import hashlib
import json
import pytest
from unittest.mock import Mock

from hal_assistant.exceptions import (
    DuplicateHookError,
    HookNotFoundError,
    StoreFormatError,
    UnknownHookKindError,
)
from hal_assistant.hooks import DEFAULT_HOOKS, Hook, HookRegistry, hook_id, register_session_hooks


class RecordingHook(Hook):
    kind = "Record"

    def __init__(self, keyword):
        super().__init__(keyword)
        self.executed = 0

    def execute(self):
        self.executed += 1


class TestHook:
    """Tests for hook identity."""

    def test_hook_id_is_sha1_of_keyword_and_kind(self):
        expected = hashlib.sha1("list session\tListSessions".encode("utf-8")).hexdigest()

        assert hook_id("list session", "ListSessions") == expected

    def test_hook_id_depends_on_both_fields(self):
        assert hook_id("a", "X") != hook_id("a", "Y")
        assert hook_id("a", "X") != hook_id("b", "X")

    def test_identify_exact_keyword(self):
        hook = RecordingHook("take note")

        assert hook.identify("take note")
        assert hook.identify("  Take Note ")
        assert not hook.identify("please take note")


class TestHookRegistry:
    """Tests for HookRegistry."""

    def setup_method(self):
        self.registry = HookRegistry()
        self.registry.register("Record", RecordingHook)

    def test_register_twice(self):
        assert not self.registry.register("Record", RecordingHook)
        assert self.registry.kinds() == ["Record"]

    def test_add_returns_bound_config(self):
        config = self.registry.add("take note", "Record")

        assert config.id == hook_id("take note", "Record")
        assert config.enabled
        assert isinstance(config.instance, RecordingHook)
        assert self.registry.get(config.id) is config

    def test_add_duplicate(self):
        self.registry.add("take note", "Record")

        with pytest.raises(DuplicateHookError):
            self.registry.add("take note", "Record")

        assert len(self.registry.configs) == 1

    def test_add_unknown_kind(self):
        with pytest.raises(UnknownHookKindError):
            self.registry.add("take note", "Nope")

        assert self.registry.configs == {}

    def test_exec_runs_instance(self):
        config = self.registry.add("take note", "Record")

        self.registry.exec("Record")
        self.registry.exec("record")

        assert config.instance.executed == 2

    def test_exec_without_config(self):
        with pytest.raises(HookNotFoundError):
            self.registry.exec("Record")

    def test_exec_unknown_kind(self):
        with pytest.raises(HookNotFoundError):
            self.registry.exec("Nope")

    def test_disabled_hooks_are_not_live(self):
        config = self.registry.add("take note", "Record")

        assert self.registry.disable(config.id)
        assert not self.registry.is_live("Record")
        with pytest.raises(HookNotFoundError):
            self.registry.exec("Record")
        assert self.registry.identify("take note") is None

        assert self.registry.enable(config.id)
        self.registry.exec("Record")
        assert config.instance.executed == 1

    def test_enable_disable_delete_unknown_id(self):
        assert not self.registry.enable("missing")
        assert not self.registry.disable("missing")
        assert not self.registry.delete("missing")

    def test_delete(self):
        config = self.registry.add("take note", "Record")

        assert self.registry.delete(config.id)
        assert self.registry.get(config.id) is None

    def test_identify(self):
        config = self.registry.add("take note", "Record")

        assert self.registry.identify("Take note") is config
        assert self.registry.identify("take a note") is None

    def test_add_defaults_skips_unregistered_kinds(self):
        self.registry.add_defaults()

        assert self.registry.configs == {}


class TestHookPersistence:
    """Tests for saving and loading hook configs."""

    def setup_method(self):
        self.registry = HookRegistry()
        self.registry.register("Record", RecordingHook)

    def test_round_trip(self, tmp_path):
        kept = self.registry.add("take note", "Record")
        off = self.registry.add("jot", "Record")
        self.registry.disable(off.id)
        path = tmp_path / "hooks.json"
        self.registry.save(path)

        restored = HookRegistry()
        restored.register("Record", RecordingHook)
        restored.load(path)

        assert restored.to_document() == self.registry.to_document()
        assert restored.get(kept.id).enabled
        assert not restored.get(off.id).enabled
        assert isinstance(restored.get(kept.id).instance, RecordingHook)

    def test_document_shape(self, tmp_path):
        config = self.registry.add("take note", "Record")
        path = tmp_path / "hooks.json"
        self.registry.save(path)

        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)

        assert document == {
            "hookConfigs": {config.id: {"keyword": "take note", "hook": "Record", "enable": True}}
        }

    def test_ids_are_recomputed_on_load(self):
        self.registry.load_document(
            {"hookConfigs": {"stale": {"keyword": "jot", "hook": "Record", "enable": True}}}
        )

        assert list(self.registry.configs) == [hook_id("jot", "Record")]

    def test_unknown_kind_in_document(self):
        with pytest.raises(UnknownHookKindError):
            self.registry.load_document(
                {"hookConfigs": {"x": {"keyword": "jot", "hook": "Nope", "enable": True}}}
            )

    @pytest.mark.parametrize(
        "document",
        [
            {"hookConfigs": {"x": {"keyword": 1}}},
            {"hookConfigs": []},
            {"hookConfigs": ""},
            {"hookConfigs": {"x": []}},
        ],
    )
    def test_malformed_document(self, document):
        config = self.registry.add("take note", "Record")

        with pytest.raises(StoreFormatError):
            self.registry.load_document(document)

        assert list(self.registry.configs) == [config.id]


class TestSessionHooks:
    """Tests for the stock session hooks."""

    def setup_method(self):
        self.console = Mock()
        self.registry = HookRegistry()
        register_session_hooks(self.registry, self.console)

    def test_all_kinds_registered(self):
        assert sorted(self.registry.kinds()) == sorted(kind for _, kind in DEFAULT_HOOKS)

    def test_add_defaults(self):
        self.registry.add_defaults()
        self.registry.add_defaults()

        keywords = sorted(config.keyword for config in self.registry.configs.values())
        assert keywords == ["configure session", "create session", "list session", "select session"]

    @pytest.mark.parametrize(
        "kind, method",
        [
            ("CreateSession", "create_session"),
            ("ListSessions", "list_sessions"),
            ("SelectSession", "select_session"),
            ("ConfigureSession", "configure_session"),
        ],
    )
    def test_exec_drives_console(self, kind, method):
        self.registry.add_defaults()

        self.registry.exec(kind)

        getattr(self.console, method).assert_called_once_with()
