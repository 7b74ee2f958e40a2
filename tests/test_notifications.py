"""Tests for user-facing notifications."""

import asyncio
import errno

import pytest

from execsave.config import ExecSaveConfig
from execsave.document import Document, Workspace
from execsave.errors import ErrorKind
from execsave.notifications import (
    announce_mode_change,
    format_mode,
    format_relative_path,
    report_error,
    show_error_message,
)


@pytest.fixture
def project(tmp_path):
    root = tmp_path / "project"
    (root / "bin").mkdir(parents=True)
    return root


@pytest.fixture
def document(project):
    return Document(path=str(project / "bin" / "deploy.sh"), text="#!/bin/sh")


class TestFormatting:

    @pytest.mark.parametrize("mode,expected", [
        (0o755, "755"),
        (0o644, "644"),
        (0o044, "044"),
        (0o007, "007"),
        (0o000, "000"),
    ])
    def test_format_mode(self, mode, expected):
        assert format_mode(mode) == expected

    def test_relative_to_workspace_folder(self, project, document):
        ws = Workspace(folders=[str(project)])
        assert format_relative_path(document.path, ws) == "bin/deploy.sh"

    def test_basename_outside_workspace(self, document):
        assert format_relative_path(document.path, Workspace()) == "deploy.sh"

    def test_unknown_without_path(self):
        assert format_relative_path(None) == "unknown"


class TestShowErrorMessage:

    def test_shows_when_not_silenced(self, notifier):
        shown = asyncio.run(show_error_message(notifier, "boom", ExecSaveConfig()))
        assert shown is True
        assert notifier.errors == ["boom"]

    @pytest.mark.parametrize("config", [
        ExecSaveConfig(silent_errors=True),
        ExecSaveConfig(silent=True),
    ])
    def test_suppressed(self, notifier, config):
        shown = asyncio.run(show_error_message(notifier, "boom", config))
        assert shown is False
        assert notifier.errors == []


class TestReportError:

    def test_permission_denied_message(self, notifier, document, project):
        ws = Workspace(folders=[str(project)])
        error = PermissionError(errno.EACCES, "Permission denied")
        result = asyncio.run(report_error(notifier, document, error, ExecSaveConfig(), ws))
        assert result.kind is ErrorKind.PERMISSION_DENIED
        assert notifier.errors == [
            "bin/deploy.sh: Permission denied when updating permissions."
        ]

    def test_not_found_message(self, notifier, document):
        error = FileNotFoundError(errno.ENOENT, "No such file")
        asyncio.run(report_error(notifier, document, error, ExecSaveConfig()))
        assert notifier.errors == ["deploy.sh: File no longer exists."]

    def test_unexpected_message(self, notifier, document):
        error = RuntimeError("Something went wrong")
        asyncio.run(report_error(notifier, document, error, ExecSaveConfig()))
        assert notifier.errors == ["deploy.sh: Unexpected error – Something went wrong"]

    def test_non_exception_value(self, notifier, document):
        asyncio.run(report_error(notifier, document, "String error", ExecSaveConfig()))
        assert notifier.errors == ["deploy.sh: Unexpected error – String error"]

    def test_always_logged_even_when_silent(self, notifier, document, log_entries):
        config = ExecSaveConfig(silent=True)
        asyncio.run(report_error(notifier, document, RuntimeError("disk"), config))

        assert notifier.errors == []
        events = [(e["level"], e["event"]) for e in log_entries()]
        assert ("ERROR", "unexpected_error") in events
        assert ("WARN", "error_reported") in events

    def test_missing_document(self, notifier):
        asyncio.run(report_error(notifier, None, RuntimeError("x"), ExecSaveConfig()))
        assert notifier.errors == ["unknown: Unexpected error – x"]


class TestAnnounceModeChange:

    def test_message_format(self, notifier, document, project):
        ws = Workspace(folders=[str(project)])
        message = asyncio.run(announce_mode_change(notifier, document, 0o644, 0o755, ws))
        assert message == "bin/deploy.sh: Made executable (644 -> 755)"
        assert notifier.infos == [message]

    def test_leading_zeros(self, notifier, document):
        asyncio.run(announce_mode_change(notifier, document, 0o044, 0o055))
        assert notifier.infos == ["deploy.sh: Made executable (044 -> 055)"]


class TestFailingNotifier:

    def test_show_error_failure_is_logged(self, notifier, log_entries):
        async def broken(message):
            raise RuntimeError("UI gone")

        notifier.show_error = broken
        shown = asyncio.run(show_error_message(notifier, "boom", ExecSaveConfig()))
        assert shown is False
        assert "notification_failed" in [e["event"] for e in log_entries()]
