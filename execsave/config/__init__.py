"""
Configuration System - Load configs from multiple sources with precedence.

Provides:
- ConfigLoader: Load and merge configuration for a workspace folder
- ExecSaveConfig: Resolved enabled/strategy/silent/silentErrors settings

Configuration precedence (low → high):
1. ~/.execsave/config.yaml (global defaults)
2. <workspace>/.execsave/config.yaml (workspace folder config)
3. Environment variables (EXECSAVE_*)
4. Runtime overrides
"""

from .loader import ConfigLoader, ExecSaveConfig, load_config

__all__ = ["ConfigLoader", "ExecSaveConfig", "load_config"]
