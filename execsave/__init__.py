"""
execsave - Make shebang scripts executable when they are saved.

This package provides the Python core for an editor integration: the
permission strategies, the per-document decision pipeline and the error
and notification handling. The host calls it through EditorBridge.
"""

from .bridge import EditorBridge
from .config import ConfigLoader, ExecSaveConfig, load_config
from .document import Document, FileSystem, Workspace
from .errors import (
    BridgeError,
    ClassifiedError,
    ConfigError,
    ErrorKind,
    ExecSaveError,
    classify_error,
)
from .handler import DecisionOutcome, Host, OutcomeKind, process_document
from .notifications import Notifier
from .permission import (
    Strategy,
    SYSTEM_UMASK,
    calculate_new_mode,
    calculate_umask_execute_bits,
    is_executable,
)
from .shebang import has_shebang, starts_with_shebang

__version__ = "0.1.0"
__all__ = [
    "EditorBridge",
    "ConfigLoader",
    "ExecSaveConfig",
    "load_config",
    "Document",
    "FileSystem",
    "Workspace",
    "BridgeError",
    "ClassifiedError",
    "ConfigError",
    "ErrorKind",
    "ExecSaveError",
    "classify_error",
    "DecisionOutcome",
    "Host",
    "OutcomeKind",
    "process_document",
    "Notifier",
    "Strategy",
    "SYSTEM_UMASK",
    "calculate_new_mode",
    "calculate_umask_execute_bits",
    "is_executable",
    "has_shebang",
    "starts_with_shebang",
]
