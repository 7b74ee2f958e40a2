"""
Notifications - User-facing messages for mode changes and failures.

Messages go through a Notifier supplied by the host. Error messages are
always written to the diagnostic log; whether the user also sees them
depends on the silent and silentErrors settings.
"""

import os
from typing import Any, Optional

from .config import ExecSaveConfig
from .document import Document, Workspace
from .errors import ClassifiedError, ErrorKind, classify_error
from .logger import get_logger


class Notifier:
    """Host capability for showing messages to the user.

    The default implementation only writes to the diagnostic log; editor
    integrations subclass it and forward to their message UI.
    """

    async def show_info(self, message: str) -> None:
        get_logger().info("notifications", "info_message", {"message": message})

    async def show_error(self, message: str) -> None:
        get_logger().info("notifications", "error_message", {"message": message})


def format_mode(mode: int) -> str:
    """Format a permission mode as zero-padded octal (e.g. 755, 044)."""
    return format(mode, "o").zfill(3)


def format_relative_path(path: Optional[str], workspace: Optional[Workspace] = None) -> str:
    """Format a path relative to its workspace folder.

    Falls back to the basename when the file is outside every workspace
    folder, and to "unknown" when there is no path at all.
    """
    if not path:
        return "unknown"

    folder = workspace.folder_for(path) if workspace else None
    if folder is None:
        return os.path.basename(path)

    relative = os.path.relpath(os.path.realpath(path), str(folder))
    if relative == os.curdir:
        return os.path.basename(path)
    return relative


async def announce_mode_change(
    notifier: Notifier,
    document: Document,
    old_mode: int,
    new_mode: int,
    workspace: Optional[Workspace] = None,
) -> str:
    """Tell the user that a file was made executable.

    Args:
        notifier: Host message capability
        document: The document whose permissions changed
        old_mode: Previous permission bits (e.g. 0o644)
        new_mode: New permission bits (e.g. 0o755)
        workspace: Workspace used to shorten the path

    Returns:
        The message shown
    """
    relative_path = format_relative_path(document.path, workspace)
    message = (
        f"{relative_path}: Made executable "
        f"({format_mode(old_mode)} -> {format_mode(new_mode)})"
    )
    await notifier.show_info(message)
    return message


def error_message(classified: ClassifiedError, relative_path: str) -> str:
    """Render the user-facing message for a classified failure."""
    if classified.kind is ErrorKind.PERMISSION_DENIED:
        return f"{relative_path}: Permission denied when updating permissions."
    if classified.kind is ErrorKind.NOT_FOUND:
        return f"{relative_path}: File no longer exists."
    return f"{relative_path}: Unexpected error – {classified.detail}"


async def report_error(
    notifier: Notifier,
    document: Optional[Document],
    error: Any,
    config: ExecSaveConfig,
    workspace: Optional[Workspace] = None,
) -> ClassifiedError:
    """Classify, log and (unless silenced) show a processing failure.

    Args:
        notifier: Host message capability
        document: The document being processed, if known
        error: The raised exception or other failure value
        config: Configuration deciding whether the user is told
        workspace: Workspace used to shorten the path

    Returns:
        The classification of the error
    """
    logger = get_logger()
    file_path = document.path if document and document.path else "unknown"
    relative_path = format_relative_path(document.path if document else None, workspace)

    classified = classify_error(error)
    message = error_message(classified, relative_path)

    if classified.kind is ErrorKind.UNEXPECTED:
        logger.error("notifications", "unexpected_error", {
            "path": file_path,
            "error_type": classified.error_type,
            "error": classified.detail,
        })

    logger.warn("notifications", "error_reported", {
        "path": file_path,
        "kind": classified.kind.value,
        "message": message,
    })

    await show_error_message(notifier, message, config)
    return classified


async def show_error_message(
    notifier: Notifier,
    message: str,
    config: ExecSaveConfig,
) -> bool:
    """Show an error message unless silent or silentErrors is set.

    Returns:
        True if the message was shown
    """
    if config.silent or config.silent_errors:
        return False

    try:
        await notifier.show_error(message)
    except Exception as e:
        get_logger().warn("notifications", "notification_failed", {
            "message": message,
            "error": e,
        })
        return False
    return True
