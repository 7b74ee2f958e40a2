"""
Permission Strategies - Execute-bit calculation for shebang scripts.

Provides:
- Strategy: Enum of umask/read-based/all strategies
- calculate_new_mode: Mode after granting execute bits (or None)
- calculate_umask_execute_bits: Execute bits allowed by a umask
- is_executable: Whether any execute bit is set
- SYSTEM_UMASK: Process umask captured at import time
"""

from .permission import (
    Strategy,
    LEGACY_STRATEGY_NAMES,
    SYSTEM_UMASK,
    EXECUTE_BITS,
    PERMISSION_BITS,
    SPECIAL_BITS,
    calculate_new_mode,
    calculate_umask_execute_bits,
    get_system_umask,
    is_executable,
)

__all__ = [
    "Strategy",
    "LEGACY_STRATEGY_NAMES",
    "SYSTEM_UMASK",
    "EXECUTE_BITS",
    "PERMISSION_BITS",
    "SPECIAL_BITS",
    "calculate_new_mode",
    "calculate_umask_execute_bits",
    "get_system_umask",
    "is_executable",
]
