"""
Editor Bridge - Entry point for an editor host to drive execsave.

The host forwards save events and the "make executable if script" command
to a single EditorBridge. Work runs on a persistent event loop in a
background thread, so callbacks may arrive on any host thread and several
documents can be processed at the same time.

Example:
    bridge = EditorBridge(host=Host(notifier=MyEditorNotifier()))
    bridge.on_did_save(Document(path="/work/deploy.sh", text="#!/bin/sh"))
"""

import asyncio
import atexit
import threading
from concurrent.futures import Future
from typing import Any, Dict, Optional, Union

from .document import Document
from .errors import BridgeError, classify_error
from .handler import DecisionOutcome, Host, OutcomeKind, process_document
from .logger import get_logger
from .logging_config import configure_from_host_settings

DEFAULT_TIMEOUT: Optional[float] = None  # wait until processed


class EditorBridge:
    """Bridge class for editor integration.

    Example (host side):
        bridge = EditorBridge()
        bridge.set_active_document(doc)
        outcome = bridge.make_executable_if_script()
    """

    def __init__(self, host: Optional[Host] = None):
        """Initialize the bridge and start its event loop.

        Args:
            host: Host capabilities (default: local file system and
                  log-only notifier)
        """
        self._logger = get_logger()
        self.host = host or Host()

        self._active_document: Optional[Document] = None
        self._state_lock = threading.Lock()

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._loop_thread: Optional[threading.Thread] = None
        self._loop_ready = threading.Event()

        self._shutdown_requested = False
        self._shutdown_lock = threading.Lock()

        self._start_persistent_loop()

        self._logger.info("EditorBridge", "bridge_initialized", {
            "posix": self.host.posix,
            "umask": format(self.host.umask, "03o"),
            "trusted": self.host.workspace.is_trusted,
        })

    def _start_persistent_loop(self) -> None:
        """Start the event loop in a background thread."""
        def run_loop():
            self._loop = asyncio.new_event_loop()
            asyncio.set_event_loop(self._loop)
            self._loop.call_soon(self._loop_ready.set)
            self._loop.run_forever()
            self._loop.close()

        self._loop_thread = threading.Thread(
            target=run_loop, name="execsave-loop", daemon=True
        )
        self._loop_thread.start()
        self._loop_ready.wait()

        atexit.register(self.shutdown)

    def _submit(self, coro) -> Future:
        """Schedule a coroutine on the bridge loop.

        Raises:
            BridgeError: If shutdown was requested or the loop is not running
        """
        with self._shutdown_lock:
            if self._shutdown_requested:
                coro.close()
                raise BridgeError("Bridge is shutting down")

            if not self._loop or not self._loop.is_running():
                coro.close()
                raise BridgeError("Event loop not running")

            return asyncio.run_coroutine_threadsafe(coro, self._loop)

    async def _run_guarded(self, document: Document, check_enabled: bool) -> DecisionOutcome:
        """Run the pipeline; a failing host capability never escapes."""
        try:
            return await process_document(document, self.host, check_enabled=check_enabled)
        except Exception as e:
            self._logger.error("EditorBridge", "processing_failed", {
                "uri": document.uri,
                "error": e,
            })
            return DecisionOutcome(OutcomeKind.ERROR, error=classify_error(e))

    def _dispatch(
        self,
        document: Document,
        check_enabled: bool,
        wait: bool,
        timeout: Optional[float],
    ) -> Union[DecisionOutcome, Future]:
        future = self._submit(self._run_guarded(document, check_enabled))
        if not wait:
            return future
        return future.result(timeout=timeout)

    def on_did_save(
        self,
        document: Document,
        wait: bool = True,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ) -> Union[DecisionOutcome, Future]:
        """Handle a save event.

        Args:
            document: Snapshot of the saved document
            wait: Block until processed. If False, return the Future.
            timeout: Seconds to wait when blocking (default: no limit)

        Returns:
            DecisionOutcome, or a Future resolving to one
        """
        return self._dispatch(document, True, wait, timeout)

    def make_executable_if_script(
        self,
        wait: bool = True,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ) -> Union[DecisionOutcome, Future, None]:
        """Manual command: process the active document.

        Runs even when on-save processing is disabled. Does nothing when no
        document is active.

        Returns:
            DecisionOutcome (or Future), or None without an active document
        """
        document = self.active_document
        if document is None:
            self._logger.debug("EditorBridge", "command_without_document")
            return None
        return self._dispatch(document, False, wait, timeout)

    def set_active_document(self, document: Optional[Document]) -> None:
        """Record which document the host shows in the focused editor."""
        with self._state_lock:
            self._active_document = document

    @property
    def active_document(self) -> Optional[Document]:
        with self._state_lock:
            return self._active_document

    def configure_logging(self, settings: Dict[str, Any]) -> None:
        """Configure logging from host settings.

        Args:
            settings: Dict with loggingEnabled, logLevel, logDirectory,
                      sessionId and related keys
        """
        configure_from_host_settings(settings)
        self._logger.info("EditorBridge", "logging_configured", {
            "level": settings.get("logLevel", "INFO"),
        })

    @property
    def is_running(self) -> bool:
        return bool(self._loop and self._loop.is_running()) and not self._shutdown_requested

    async def _cancel_pending(self) -> int:
        current = asyncio.current_task()
        pending = [task for task in asyncio.all_tasks() if task is not current]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        return len(pending)

    def shutdown(self, timeout: float = 5.0) -> None:
        """Cancel pending work and stop the event loop.

        Safe to call more than once.
        """
        with self._shutdown_lock:
            if self._shutdown_requested:
                return
            self._shutdown_requested = True

        if self._loop and self._loop.is_running():
            if self._loop_thread is not threading.current_thread():
                future = asyncio.run_coroutine_threadsafe(self._cancel_pending(), self._loop)
                try:
                    cancelled = future.result(timeout=timeout)
                except Exception as e:
                    self._logger.warn("EditorBridge", "cancel_pending_failed", {"error": e})
                else:
                    if cancelled:
                        self._logger.info("EditorBridge", "pending_cancelled", {
                            "count": cancelled,
                        })
            self._loop.call_soon_threadsafe(self._loop.stop)
        if self._loop_thread and self._loop_thread is not threading.current_thread():
            self._loop_thread.join(timeout=timeout)

        atexit.unregister(self.shutdown)
        self._logger.info("EditorBridge", "bridge_shutdown")
