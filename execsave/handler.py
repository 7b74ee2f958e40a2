"""
Document Handler - Decide whether a saved script becomes executable.

One call to process_document() handles one document and is independent of
every other call. The checks run cheapest first and the first failing one
ends the invocation without touching the file:

    platform -> trust -> identity -> enabled -> shebang
        -> stat -> already executable -> strategy -> chmod -> notify

Only the chmod and the notification have side effects. Filesystem failures
are classified and reported, never raised to the caller.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .config import ConfigLoader, ExecSaveConfig
from .document import Document, FileSystem, Workspace
from .errors import ClassifiedError
from .logger import get_logger
from .notifications import Notifier, announce_mode_change, report_error
from .permission import (
    PERMISSION_BITS,
    calculate_new_mode,
    get_system_umask,
    is_executable,
)
from .shebang import SHEBANG, has_shebang


class OutcomeKind(Enum):
    """What a single invocation did."""
    SKIP = "skip"
    NO_CHANGE = "no_change"
    MODE_CHANGED = "mode_changed"
    ERROR = "error"


# Exit reasons recorded on SKIP / NO_CHANGE outcomes
REASON_PLATFORM = "platform_unsupported"
REASON_UNTRUSTED = "workspace_untrusted"
REASON_NOT_FILE = "not_a_local_file"
REASON_DISABLED = "disabled"
REASON_NO_SHEBANG = "no_shebang"
REASON_ALREADY_EXECUTABLE = "already_executable"
REASON_NO_GRANT = "strategy_grants_nothing"


@dataclass(frozen=True)
class DecisionOutcome:
    """Result of processing one document.

    Attributes:
        kind: What happened
        reason: Which check ended a SKIP or NO_CHANGE invocation
        old_mode: Permission bits before the change (low 9 bits)
        new_mode: Permission bits after the change (low 9 bits)
        error: Classification of an ERROR outcome
    """
    kind: OutcomeKind
    reason: Optional[str] = None
    old_mode: Optional[int] = None
    new_mode: Optional[int] = None
    error: Optional[ClassifiedError] = None

    @classmethod
    def skip(cls, reason: str) -> "DecisionOutcome":
        return cls(OutcomeKind.SKIP, reason=reason)

    @classmethod
    def no_change(cls, reason: str) -> "DecisionOutcome":
        return cls(OutcomeKind.NO_CHANGE, reason=reason)

    @property
    def changed(self) -> bool:
        return self.kind is OutcomeKind.MODE_CHANGED


def _platform_supports_permissions() -> bool:
    return os.name == "posix"


@dataclass
class Host:
    """Capabilities the pipeline calls into.

    Every field has a local default so the package works without an editor;
    an integration replaces the pieces it owns.

    Attributes:
        file_system: stat/chmod capability
        notifier: User message capability
        config_loader: Resource-scoped configuration lookup
        workspace: Trust state and workspace folders
        posix: Whether the platform has POSIX permission bits
        umask: Umask used by the UMASK strategy
    """
    file_system: FileSystem = field(default_factory=FileSystem)
    notifier: Notifier = field(default_factory=Notifier)
    config_loader: ConfigLoader = field(default_factory=ConfigLoader)
    workspace: Workspace = field(default_factory=Workspace)
    posix: bool = field(default_factory=_platform_supports_permissions)
    umask: int = field(default_factory=get_system_umask)

    def read_config(self, document: Document) -> ExecSaveConfig:
        """Resolve configuration for the document's workspace folder."""
        folder = self.workspace.folder_for(document.path) if document.path else None
        return self.config_loader.load(project_root=str(folder) if folder else None)


def skip_reason(document: Document, host: Host) -> Optional[str]:
    """Return why a document must not be processed, or None."""
    if not host.posix:
        return REASON_PLATFORM

    if not host.workspace.is_trusted:
        return REASON_UNTRUSTED

    if not document.is_local_file:
        return REASON_NOT_FILE

    return None


async def process_document(
    document: Document,
    host: Optional[Host] = None,
    check_enabled: bool = True,
) -> DecisionOutcome:
    """Make a shebang document executable if its configuration allows.

    Args:
        document: Snapshot of the saved (or active) document
        host: Host capabilities (default: local file system, log-only notifier)
        check_enabled: Honor the enabled setting. Save events pass True;
                       the manual command passes False.

    Returns:
        DecisionOutcome describing what happened
    """
    host = host or Host()
    logger = get_logger()

    reason = skip_reason(document, host)
    if reason is not None:
        logger.debug("handler", "document_skipped", {
            "uri": document.uri,
            "reason": reason,
        })
        return DecisionOutcome.skip(reason)

    config = host.read_config(document)
    if check_enabled and not config.enabled:
        logger.debug("handler", "document_skipped", {
            "path": document.path,
            "reason": REASON_DISABLED,
        })
        return DecisionOutcome.skip(REASON_DISABLED)

    with logger.span("handler", "process_document", {"path": document.path}) as span:
        outcome = await _handle_document(document, host, config)
        span.set_data({"outcome": outcome.kind.value, "reason": outcome.reason})
    return outcome


async def _handle_document(
    document: Document,
    host: Host,
    config: ExecSaveConfig,
) -> DecisionOutcome:
    """Run the shebang, stat, strategy and chmod steps for one document."""
    logger = get_logger()
    path = document.path

    if not has_shebang(document.read_prefix(len(SHEBANG))):
        return DecisionOutcome.no_change(REASON_NO_SHEBANG)

    try:
        mode = await host.file_system.stat_mode(path)

        if is_executable(mode):
            return DecisionOutcome.no_change(REASON_ALREADY_EXECUTABLE)

        new_mode = calculate_new_mode(mode, config.strategy, umask=host.umask)
        if new_mode is None:
            logger.info("handler", "no_execute_bits_granted", {
                "path": path,
                "mode": format(mode & PERMISSION_BITS, "o"),
                "strategy": config.strategy.value,
            })
            return DecisionOutcome.no_change(REASON_NO_GRANT)

        await host.file_system.chmod(path, new_mode)
    except Exception as error:
        classified = await report_error(
            host.notifier, document, error, config, host.workspace
        )
        return DecisionOutcome(OutcomeKind.ERROR, error=classified)

    old_bits = mode & PERMISSION_BITS
    new_bits = new_mode & PERMISSION_BITS
    logger.info("handler", "mode_changed", {
        "path": path,
        "old_mode": format(old_bits, "o"),
        "new_mode": format(new_bits, "o"),
        "strategy": config.strategy.value,
    })

    if not config.silent:
        try:
            await announce_mode_change(
                host.notifier, document, old_bits, new_bits, host.workspace
            )
        except Exception as e:
            # Mode is already changed
            logger.warn("handler", "notification_failed", {
                "path": path,
                "error": e,
            })

    return DecisionOutcome(
        OutcomeKind.MODE_CHANGED, old_mode=old_bits, new_mode=new_bits
    )
