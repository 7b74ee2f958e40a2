"""Tests for the editor bridge."""

import asyncio
import threading
from concurrent.futures import CancelledError

import pytest

from execsave.bridge import EditorBridge
from execsave.document import Document
from execsave.errors import BridgeError, ErrorKind
from execsave.handler import REASON_DISABLED, Host, OutcomeKind

SCRIPT = "/work/tool"


@pytest.fixture
def bridge_factory():
    bridges = []

    def _make(host):
        bridge = EditorBridge(host=host)
        bridges.append(bridge)
        return bridge

    yield _make
    for bridge in bridges:
        bridge.shutdown()


class TestOnDidSave:

    def test_processes_saved_document(self, bridge_factory, make_host, fake_fs, notifier):
        fake_fs.modes[SCRIPT] = 0o644
        bridge = bridge_factory(make_host())
        outcome = bridge.on_did_save(Document(path=SCRIPT, text="#!/bin/sh"))
        assert outcome.kind is OutcomeKind.MODE_CHANGED
        assert fake_fs.modes[SCRIPT] == 0o755
        assert notifier.infos == ["tool: Made executable (644 -> 755)"]

    def test_respects_enabled_setting(self, bridge_factory, make_host, fake_fs):
        fake_fs.modes[SCRIPT] = 0o644
        bridge = bridge_factory(make_host(overrides={"enabled": False}))
        outcome = bridge.on_did_save(Document(path=SCRIPT, text="#!/bin/sh"))
        assert outcome.reason == REASON_DISABLED
        assert fake_fs.modes[SCRIPT] == 0o644

    def test_returns_future_without_waiting(self, bridge_factory, make_host, fake_fs):
        fake_fs.modes[SCRIPT] = 0o644
        bridge = bridge_factory(make_host())
        future = bridge.on_did_save(Document(path=SCRIPT, text="#!/bin/sh"), wait=False)
        assert future.result(timeout=5).kind is OutcomeKind.MODE_CHANGED

    def test_failing_notifier_keeps_mode_change(self, bridge_factory, make_host, fake_fs,
                                                notifier, log_entries):
        async def broken(message):
            raise RuntimeError("UI gone")

        notifier.show_info = broken
        fake_fs.modes[SCRIPT] = 0o644
        bridge = bridge_factory(make_host())
        outcome = bridge.on_did_save(Document(path=SCRIPT, text="#!/bin/sh"))
        assert outcome.kind is OutcomeKind.MODE_CHANGED
        assert (outcome.old_mode, outcome.new_mode) == (0o644, 0o755)
        assert fake_fs.modes[SCRIPT] == 0o755
        assert "notification_failed" in [e["event"] for e in log_entries()]

    def test_failing_host_capability_is_contained(self, bridge_factory, fake_fs, notifier):
        class BrokenLoader:
            def load(self, project_root=None):
                raise RuntimeError("settings store offline")

        host = Host(file_system=fake_fs, notifier=notifier,
                    config_loader=BrokenLoader(), umask=0o022, posix=True)
        bridge = bridge_factory(host)
        outcome = bridge.on_did_save(Document(path=SCRIPT, text="#!/bin/sh"))
        assert outcome.kind is OutcomeKind.ERROR
        assert outcome.error.kind is ErrorKind.UNEXPECTED
        assert outcome.error.detail == "settings store offline"


class TestManualCommand:

    def test_no_active_document(self, bridge_factory, make_host):
        bridge = bridge_factory(make_host())
        assert bridge.make_executable_if_script() is None

    def test_runs_when_disabled(self, bridge_factory, make_host, fake_fs):
        fake_fs.modes[SCRIPT] = 0o644
        bridge = bridge_factory(make_host(overrides={"enabled": False}))
        bridge.set_active_document(Document(path=SCRIPT, text="#!/bin/sh"))
        outcome = bridge.make_executable_if_script()
        assert outcome.kind is OutcomeKind.MODE_CHANGED
        assert fake_fs.modes[SCRIPT] == 0o755

    def test_idempotent(self, bridge_factory, make_host, fake_fs, notifier):
        fake_fs.modes[SCRIPT] = 0o644
        bridge = bridge_factory(make_host())
        bridge.set_active_document(Document(path=SCRIPT, text="#!/bin/sh"))
        bridge.make_executable_if_script()
        bridge.make_executable_if_script()
        assert len(fake_fs.chmod_calls) == 1
        assert len(notifier.infos) == 1


class TestLifecycle:

    def test_shutdown_rejects_new_work(self, make_host):
        bridge = EditorBridge(host=make_host())
        assert bridge.is_running
        bridge.shutdown()
        assert not bridge.is_running
        with pytest.raises(BridgeError):
            bridge.on_did_save(Document(path=SCRIPT, text="#!/bin/sh"))

    def test_shutdown_twice(self, make_host):
        bridge = EditorBridge(host=make_host())
        bridge.shutdown()
        bridge.shutdown()

    def test_shutdown_cancels_pending_work(self, make_host, fake_fs):
        entered = threading.Event()

        class StalledFileSystem:
            async def stat_mode(self, path):
                entered.set()
                await asyncio.Event().wait()

            async def chmod(self, path, mode):
                fake_fs.modes[path] = mode

        bridge = EditorBridge(host=make_host(file_system=StalledFileSystem()))
        future = bridge.on_did_save(Document(path=SCRIPT, text="#!/bin/sh"), wait=False)
        assert entered.wait(timeout=5)

        bridge.shutdown()
        with pytest.raises(CancelledError):
            future.result(timeout=5)
        assert not bridge.is_running
        assert SCRIPT not in fake_fs.modes

    def test_configure_logging(self, bridge_factory, make_host, tmp_path):
        bridge = bridge_factory(make_host())
        target = tmp_path / "host-logs"
        bridge.configure_logging({
            "logLevel": "DEBUG",
            "logDirectory": str(target),
            "sessionId": "host-session",
        })
        assert (target / "execsave_host-session.jsonl").exists()
