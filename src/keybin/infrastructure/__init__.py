"""
Infrastructure layer: byte codec, traversal planning, array operations,
runtime configuration and NumPy interop.
"""

from ._config import EngineConfig, get_config, reload_config

__all__ = ["EngineConfig", "get_config", "reload_config"]
