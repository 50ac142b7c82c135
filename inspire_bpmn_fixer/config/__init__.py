"""
Configuration Management
========================

Configuration utilities for the BPMN fixing pipeline.
"""

from inspire_bpmn_fixer.config.settings import (
    FixerConfig,
    load_config,
    save_config,
    get_default_config,
)

__all__ = [
    "FixerConfig",
    "load_config",
    "save_config",
    "get_default_config",
]
