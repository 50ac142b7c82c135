"""
Configuration Settings
======================

Configuration dataclass for the BPMN fixing pipeline. The defaults are the
values the fixer was built around; a JSON or YAML file may override them.
"""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Tuple, Any
import json
import logging
import re

import yaml

from inspire_bpmn_fixer.errors import ConfigurationError

logger = logging.getLogger(__name__)

# XML Name start characters allowed for the prefix
QNAME_PREFIX_PATTERN = re.compile(r"[A-Za-z_:]")

DEFAULT_QNAME_PREFIX = "A"

DEFAULT_ATTRIBUTES_TO_FIX: Tuple[str, ...] = (
    "attachedToRef",
    "bpmnElement",
    "default",
    "id",
    "sourceElement",
    "sourceRef",
    "targetElement",
    "targetRef",
)

DEFAULT_FILE_EXTENSIONS: Tuple[str, ...] = (".bpmn",)

DEFAULT_OUTPUT_FOLDER_NAME = "fixed"

# Expression tag -> xsi:type written by BPM Inspire
DEFAULT_EXPRESSION_TAGS: Dict[str, str] = {
    "bpmn2:conditionExpression": "inspire:Rule",
    "bpmn2:timeDuration": "inspire:StringExpression",
}

FORMAL_EXPRESSION_TYPE = "bpmn:tFormalExpression"
TYPE_ATTRIBUTE = "xsi:type"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

STRING_FIELDS = (
    "qname_prefix",
    "output_folder_name",
    "formal_expression_type",
    "type_attribute",
    "log_level",
)
SEQUENCE_FIELDS = ("attributes_to_fix", "file_extensions")


def _is_string_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value)


@dataclass(frozen=True)
class FixerConfig:
    """
    Complete fixer configuration.

    Built once at startup, validated, then passed to the fixer and runner.
    Lists are stored as tuples and the expression tag table as a read-only
    mapping, so a config can't change after construction.

    Example:
        config = FixerConfig(qname_prefix="_").validate()
        fixer = InspireBPMNFixer(config)
    """

    qname_prefix: str = DEFAULT_QNAME_PREFIX
    attributes_to_fix: Tuple[str, ...] = DEFAULT_ATTRIBUTES_TO_FIX
    file_extensions: Tuple[str, ...] = DEFAULT_FILE_EXTENSIONS
    output_folder_name: str = DEFAULT_OUTPUT_FOLDER_NAME
    expression_tags: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_EXPRESSION_TAGS))
    )
    formal_expression_type: str = FORMAL_EXPRESSION_TYPE
    type_attribute: str = TYPE_ATTRIBUTE
    log_level: str = "INFO"

    def __post_init__(self):
        if isinstance(self.expression_tags, Mapping):
            object.__setattr__(self, 'expression_tags', MappingProxyType(dict(self.expression_tags)))
        for name in SEQUENCE_FIELDS:
            value = getattr(self, name)
            if isinstance(value, list):
                object.__setattr__(self, name, tuple(value))

    def validate(self) -> "FixerConfig":
        """
        Check the configuration before any file is touched.

        Returns:
            The config itself, so calls can be chained

        Raises:
            ConfigurationError: If a value is unusable or has the wrong type
        """
        for name in STRING_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, str):
                raise ConfigurationError(f"{name} must be a string, got {type(value).__name__}")
        for name in SEQUENCE_FIELDS:
            value = getattr(self, name)
            if not _is_string_sequence(value):
                raise ConfigurationError(f"{name} must be a list of strings, got {value!r}")
        if not isinstance(self.expression_tags, Mapping) or not all(
                isinstance(tag, str) and isinstance(xsi_type, str)
                for tag, xsi_type in self.expression_tags.items()):
            raise ConfigurationError("expression_tags must map tag names to xsi:type strings")

        if not QNAME_PREFIX_PATTERN.fullmatch(self.qname_prefix):
            raise ConfigurationError(
                f"QName prefix character {self.qname_prefix!r} is invalid. "
                "Allowed characters are [A-Z][a-z]_:"
            )
        if not self.file_extensions:
            raise ConfigurationError("At least one BPMN file extension is required")
        name = self.output_folder_name
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            raise ConfigurationError(f"Invalid output folder name: {name!r}")
        if not self.formal_expression_type or not self.type_attribute:
            raise ConfigurationError("formal_expression_type and type_attribute must not be empty")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"Unknown log level: {self.log_level!r}")
        return self

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'qname_prefix': self.qname_prefix,
            'attributes_to_fix': list(self.attributes_to_fix),
            'file_extensions': list(self.file_extensions),
            'output_folder_name': self.output_folder_name,
            'expression_tags': dict(self.expression_tags),
            'formal_expression_type': self.formal_expression_type,
            'type_attribute': self.type_attribute,
            'log_level': self.log_level,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FixerConfig":
        """
        Create from dictionary, falling back to defaults for missing keys.

        Values are not type-checked here; call ``validate`` on the result.

        Raises:
            ConfigurationError: If the dictionary has unknown keys
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")

        return replace(cls(), **data)


def load_config(config_path: Path) -> FixerConfig:
    """
    Load configuration from file.

    Supports JSON and YAML formats based on file extension.

    Args:
        config_path: Path to config file

    Returns:
        Validated FixerConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is not supported
        ConfigurationError: If the content is not a valid configuration
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()

    with open(config_path, 'r', encoding='utf-8') as f:
        if suffix in ['.yaml', '.yml']:
            data = yaml.safe_load(f)
        elif suffix == '.json':
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {suffix}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file must contain a mapping: {config_path}")

    logger.info(f"Loaded configuration from {config_path}")
    return FixerConfig.from_dict(data).validate()


def save_config(config: FixerConfig, config_path: Path) -> None:
    """
    Save configuration to file.

    Supports JSON and YAML formats based on file extension.

    Raises:
        ValueError: If file format is not supported
    """
    suffix = config_path.suffix.lower()
    data = config.to_dict()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        if suffix in ['.yaml', '.yml']:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
        elif suffix == '.json':
            json.dump(data, f, indent=2)
        else:
            raise ValueError(f"Unsupported config format: {suffix}")

    logger.info(f"Saved configuration to {config_path}")


def get_default_config() -> FixerConfig:
    """Get default configuration."""
    return FixerConfig()
