"""
Permission Strategies - Execute-bit arithmetic over POSIX file modes.

Three strategies decide which execute bits a non-executable script gets:
- umask: the execute bits a newly created file would receive under the
  process umask
- read-based: execute only where the matching read bit is already set
- all: execute for user, group and other unconditionally

Every strategy only ORs low-order bits into the mode, so setuid, setgid
and sticky bits pass through untouched and no existing bit is ever cleared.
"""

import os
from enum import Enum
from typing import Optional

from ..logger import get_logger

EXECUTE_BITS = 0o111
READ_BITS = 0o444
PERMISSION_BITS = 0o777
SPECIAL_BITS = 0o7000


class Strategy(Enum):
    """Permission strategy for granting execute bits."""
    UMASK = "umask"
    READ_BASED = "read-based"
    ALL = "all"

    @classmethod
    def from_config(
        cls,
        value: Optional[str],
        default: Optional["Strategy"] = None
    ) -> "Strategy":
        """Parse a configured strategy name.

        Accepts the current names plus the legacy ``safe`` (read-based) and
        ``standard`` (all) names. Unknown values fall back to ``default``.

        Args:
            value: Strategy name from configuration
            default: Strategy to use when value is missing or unknown

        Returns:
            Parsed Strategy
        """
        fallback = default or cls.UMASK
        if value is None:
            return fallback

        name = str(value).strip().lower()
        for strategy in cls:
            if strategy.value == name:
                return strategy

        if name in LEGACY_STRATEGY_NAMES:
            strategy = LEGACY_STRATEGY_NAMES[name]
            get_logger().warn("permission", "legacy_strategy_name", {
                "configured": name,
                "mapped_to": strategy.value,
            })
            return strategy

        get_logger().warn("permission", "unknown_strategy", {
            "configured": name,
            "fallback": fallback.value,
        })
        return fallback


# Names used before the umask strategy existed
LEGACY_STRATEGY_NAMES = {
    "safe": Strategy.READ_BASED,
    "standard": Strategy.ALL,
}


def _read_system_umask() -> int:
    """Read the process umask without changing it.

    os.umask() can only be queried by setting it, so the previous value is
    restored immediately. Must run once, before any concurrent file creation.
    """
    previous = os.umask(0)
    os.umask(previous)
    return previous & PERMISSION_BITS


# Captured once at import; never re-read per call
SYSTEM_UMASK: int = _read_system_umask()


def get_system_umask() -> int:
    """Return the umask captured when the package was imported."""
    return SYSTEM_UMASK


def calculate_umask_execute_bits(umask: int) -> int:
    """Execute bits a new file would receive under ``umask``.

    Example:
        calculate_umask_execute_bits(0o022)  # 0o111
        calculate_umask_execute_bits(0o077)  # 0o100
        calculate_umask_execute_bits(0o177)  # 0o000
    """
    return (PERMISSION_BITS & ~umask) & EXECUTE_BITS


def calculate_new_mode(
    mode: int,
    strategy: Strategy,
    umask: Optional[int] = None
) -> Optional[int]:
    """Calculate the mode after adding execute bits for ``strategy``.

    Args:
        mode: Current file mode, special bits included
        strategy: Strategy deciding which execute bits to add
        umask: Umask for the UMASK strategy (default: the system umask)

    Returns:
        The new mode, or None when the strategy grants no execute bit.
        For example 0o644 becomes 0o755 under READ_BASED, while 0o200
        (write-only) returns None.

    Raises:
        ValueError: If strategy is not a Strategy member
    """
    if strategy is Strategy.UMASK:
        if umask is None:
            umask = SYSTEM_UMASK
        execute_bits = calculate_umask_execute_bits(umask)
        if execute_bits == 0:
            return None
        return mode | execute_bits

    if strategy is Strategy.READ_BASED:
        execute_bits = ((mode & READ_BITS) >> 2) & EXECUTE_BITS
        if execute_bits == 0:
            return None
        return mode | execute_bits

    if strategy is Strategy.ALL:
        return mode | EXECUTE_BITS

    raise ValueError(f"Unknown permission strategy: {strategy!r}")


def is_executable(mode: int) -> bool:
    """Check if any execute bit (user, group or other) is set."""
    return (mode & EXECUTE_BITS) != 0
