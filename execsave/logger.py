"""
Structured JSON-lines logger for the execsave Python core.

Each pipeline decision (skip, mode change, classified error) becomes one
JSON object per line. The host can pass its own session ID so these
entries line up with the editor's logs.

Usage:
    from execsave.logger import get_logger

    logger = get_logger()
    logger.info("handler", "mode_changed", {"path": path, "new_mode": "755"})

    with logger.span("handler", "process_document") as span:
        outcome = await process_document(document, host)
        span.set_data({"outcome": outcome.kind.value})
"""

import json
import tempfile
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, Generator, Optional, TextIO

DEFAULT_LOG_DIRECTORY = Path(tempfile.gettempdir()) / "execsave_logs"


class LogLevel(IntEnum):
    """Log level enumeration shared with the host."""
    TRACE = 5
    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40

    @classmethod
    def from_string(cls, level_str: str) -> "LogLevel":
        """Parse a level name; unknown names mean INFO."""
        name = level_str.strip().upper()
        if name == "WARNING":
            return cls.WARN
        return cls.__members__.get(name, cls.INFO)


class LogSpan:
    """Times a block and logs ``<event>_complete`` or ``<event>_error``."""

    def __init__(self, logger: "StructuredLogger", level: LogLevel,
                 component: str, event: str, data: Optional[Dict[str, Any]] = None):
        self._logger = logger
        self._level = level
        self._component = component
        self._event = event
        self.data: Dict[str, Any] = dict(data or {})
        self._started = 0.0

    def __enter__(self) -> "LogSpan":
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        elapsed_ms = (time.perf_counter() - self._started) * 1000
        if exc_type is None:
            self._logger._log(self._level, self._component,
                              f"{self._event}_complete", self.data, elapsed_ms)
        else:
            self.data.update(error=str(exc_val), error_type=exc_type.__name__)
            self._logger._log(LogLevel.ERROR, self._component,
                              f"{self._event}_error", self.data, elapsed_ms)
        return False

    def set_data(self, data: Dict[str, Any]) -> None:
        """Attach results before the span closes."""
        self.data.update(data)


class StructuredLogger:
    """Thread-safe JSON-lines logger writing to one file per session."""

    def __init__(self):
        self._lock = threading.RLock()
        self._session_id = self._new_session_id()
        self._level = LogLevel.INFO
        self._enabled = True
        self._directory: Optional[Path] = None
        self._console_output = False
        self._stream: Optional[TextIO] = None
        self._path: Optional[Path] = None

    @staticmethod
    def _new_session_id() -> str:
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"{stamp}_{int(time.time() * 1000000) % 65536:04X}"

    @property
    def session_id(self) -> str:
        return self._session_id

    @session_id.setter
    def session_id(self, value: str) -> None:
        with self._lock:
            self._session_id = value
            self._close_stream()

    @property
    def level(self) -> LogLevel:
        return self._level

    @level.setter
    def level(self, value: LogLevel) -> None:
        self._level = value

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def current_file_path(self) -> Optional[Path]:
        """Log file currently open, if any."""
        return self._path

    def configure(
        self,
        enabled: bool = True,
        level: str = "INFO",
        log_directory: Optional[str] = None,
        session_id: Optional[str] = None,
        console_output: bool = False,
    ) -> None:
        """Apply settings; the next entry opens a fresh file."""
        with self._lock:
            self._enabled = enabled
            self._level = LogLevel.from_string(level)
            self._directory = Path(log_directory) if log_directory else None
            self._console_output = console_output
            if session_id:
                self._session_id = session_id
            self._close_stream()

    def error(self, component: str, event: str, data: Optional[Dict[str, Any]] = None) -> None:
        self._log(LogLevel.ERROR, component, event, data)

    def warn(self, component: str, event: str, data: Optional[Dict[str, Any]] = None) -> None:
        self._log(LogLevel.WARN, component, event, data)

    def info(self, component: str, event: str, data: Optional[Dict[str, Any]] = None) -> None:
        self._log(LogLevel.INFO, component, event, data)

    def debug(self, component: str, event: str, data: Optional[Dict[str, Any]] = None) -> None:
        self._log(LogLevel.DEBUG, component, event, data)

    def trace(self, component: str, event: str, data: Optional[Dict[str, Any]] = None) -> None:
        self._log(LogLevel.TRACE, component, event, data)

    @contextmanager
    def span(
        self,
        component: str,
        event: str,
        data: Optional[Dict[str, Any]] = None,
        level: LogLevel = LogLevel.DEBUG,
    ) -> Generator[LogSpan, None, None]:
        """Time the enclosed block.

        Usage:
            with logger.span("handler", "chmod") as span:
                await fs.chmod(path, mode)
                span.set_data({"mode": oct(mode)})
        """
        with LogSpan(self, level, component, event, data) as active:
            yield active

    def flush(self) -> None:
        with self._lock:
            if self._stream:
                self._stream.flush()

    def close(self) -> None:
        with self._lock:
            self._close_stream()

    def _log(
        self,
        level: LogLevel,
        component: str,
        event: str,
        data: Optional[Dict[str, Any]] = None,
        duration_ms: Optional[float] = None,
    ) -> None:
        if not self._enabled or level < self._level:
            return

        entry: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": level.name,
            "session_id": self._session_id,
            "component": component,
            "event": event,
        }
        if data:
            entry["data"] = _jsonable(data)
        if duration_ms is not None:
            entry["duration_ms"] = round(duration_ms, 3)

        line = json.dumps(entry, default=str)
        if self._console_output:
            print(f"[{level.name}] {component}.{event}: {line}")
        self._write(line)

    def _write(self, line: str) -> None:
        with self._lock:
            if self._stream is None and not self._open_stream():
                return
            try:
                self._stream.write(line + "\n")
                self._stream.flush()
            except OSError as e:
                # Logging must never break a save
                if self._console_output:
                    print(f"execsave logger error: {e}")

    def _open_stream(self) -> bool:
        directory = self._directory or DEFAULT_LOG_DIRECTORY
        path = directory / f"execsave_{self._session_id}.jsonl"
        try:
            directory.mkdir(parents=True, exist_ok=True)
            self._stream = open(path, "a", encoding="utf-8")
        except OSError as e:
            if self._console_output:
                print(f"execsave logger cannot open {path}: {e}")
            return False
        self._path = path
        return True

    def _close_stream(self) -> None:
        if self._stream:
            try:
                self._stream.close()
            except OSError:
                pass
        self._stream = None
        self._path = None


def _jsonable(value: Any) -> Any:
    """Reduce log data to JSON-friendly values."""
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, BaseException):
        return {"type": type(value).__name__, "message": str(value)}
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


_logger_instance: Optional[StructuredLogger] = None
_logger_lock = threading.Lock()


def get_logger() -> StructuredLogger:
    """Get the process-wide logger."""
    global _logger_instance
    with _logger_lock:
        if _logger_instance is None:
            _logger_instance = StructuredLogger()
        return _logger_instance


def set_session_id(session_id: str) -> None:
    """Correlate entries with the host's session."""
    get_logger().session_id = session_id


def configure_logger(
    enabled: bool = True,
    level: str = "INFO",
    log_directory: Optional[str] = None,
    session_id: Optional[str] = None,
    console_output: bool = False,
) -> None:
    """Configure the process-wide logger."""
    get_logger().configure(
        enabled=enabled,
        level=level,
        log_directory=log_directory,
        session_id=session_id,
        console_output=console_output,
    )
