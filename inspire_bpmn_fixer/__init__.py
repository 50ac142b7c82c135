"""
Inspire BPMN Fixer
==================

Repairs BPMN process definitions exported from BPM Inspire so they load in
Camunda Platform 7:

- Inspire expression tags (``inspire:Rule``, ``inspire:StringExpression``)
  are converted to ``bpmn:tFormalExpression`` elements
- IDs and references that aren't valid XML qualified names (leading digit
  or minus sign) are prefixed with a configurable character

Architecture
------------

    inspire_bpmn_fixer/
    ├── config/        - Fixer configuration (defaults, JSON/YAML files)
    ├── xml/           - Loading, serialization and element helpers
    ├── fixing/        - Fixer framework and the BPM Inspire fixer
    ├── runner.py      - File discovery and batch runs
    └── cli.py         - Command-line entry point

Usage
-----

    from inspire_bpmn_fixer import FixerConfig, InspireBPMNFixer, run_fixer

    # Fix a whole directory into <dir>/fixed
    result = run_fixer("exports/", FixerConfig())
    print(result.summary())

    # Fix a document in memory
    fixer = InspireBPMNFixer(FixerConfig(qname_prefix="_"))
    fixed_bytes, result = fixer.fix_bytes(data)
"""

__version__ = "1.0.0"

from inspire_bpmn_fixer.errors import (
    BPMNFixerError,
    ConfigurationError,
    DiscoveryError,
    ParseError,
    WriteError,
)

from inspire_bpmn_fixer.config.settings import (
    FixerConfig,
    load_config,
    save_config,
)

from inspire_bpmn_fixer.fixing.base import (
    BaseFixer,
    FixResult,
)

from inspire_bpmn_fixer.fixing.inspire_fixer import InspireBPMNFixer

from inspire_bpmn_fixer.runner import (
    DiscoveryResult,
    discover_bpmn_files,
    run_fixer,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "BPMNFixerError",
    "ConfigurationError",
    "DiscoveryError",
    "ParseError",
    "WriteError",
    # Config
    "FixerConfig",
    "load_config",
    "save_config",
    # Fixing
    "BaseFixer",
    "FixResult",
    "InspireBPMNFixer",
    # Runner
    "DiscoveryResult",
    "discover_bpmn_files",
    "run_fixer",
]
