"""
Batch Runner
============

Finds the BPMN files behind a path and fixes them one after another into
the output folder next to them. The first failure aborts the run; files
fixed before it stay written.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
import logging

from inspire_bpmn_fixer.config.settings import FixerConfig
from inspire_bpmn_fixer.errors import DiscoveryError, WriteError
from inspire_bpmn_fixer.fixing.base import FixResult
from inspire_bpmn_fixer.fixing.inspire_fixer import InspireBPMNFixer

logger = logging.getLogger(__name__)


@dataclass
class DiscoveryResult:
    """
    BPMN files found for a path.

    Attributes:
        scan_dir: Directory the files live in (None if nothing usable was given)
        files: Files to fix, sorted by name
        output_folder_name: Name of the folder created inside scan_dir
    """
    scan_dir: Optional[Path] = None
    files: List[Path] = field(default_factory=list)
    output_folder_name: str = "fixed"

    @property
    def output_dir(self) -> Optional[Path]:
        if self.scan_dir is None:
            return None
        return self.scan_dir / self.output_folder_name


def has_bpmn_extension(path: Path, config: FixerConfig) -> bool:
    """Check whether a file name ends with one of the configured extensions."""
    return any(path.name.endswith(ext) for ext in config.file_extensions)


def discover_bpmn_files(path: str, config: FixerConfig) -> DiscoveryResult:
    """
    Collect the BPMN files for a directory or single file path.

    Directories are scanned non-recursively. A single file is accepted only
    with a BPMN extension; any other path yields no files.

    Args:
        path: Path as given on the command line
        config: Fixer configuration

    Returns:
        DiscoveryResult with the files to fix

    Raises:
        DiscoveryError: If the directory can't be listed
    """
    # Quoted Windows paths ending in a backslash keep a stray quote
    if path.endswith('"'):
        path = path[:-1]

    logger.info(f"Provided path: \"{path}\"")
    target = Path(path)
    result = DiscoveryResult(output_folder_name=config.output_folder_name)

    if target.is_dir():
        logger.info(f"Detecting BPMN files in \"{path}\"")
        result.scan_dir = target
        try:
            result.files = sorted(
                (child for child in target.iterdir()
                 if child.is_file() and has_bpmn_extension(child, config)),
                key=lambda p: p.name,
            )
        except OSError as e:
            raise DiscoveryError(f"Error while detecting BPMN files in \"{path}\": {e}", target) from e
    elif target.is_file() and has_bpmn_extension(target, config):
        result.scan_dir = target.parent
        result.files = [target]

    return result


def ensure_output_dir(output_dir: Path) -> None:
    """
    Create the output folder if it doesn't exist yet.

    Raises:
        WriteError: If the folder can't be created or a file is in the way
    """
    if output_dir.is_dir():
        return
    try:
        output_dir.mkdir()
    except OSError as e:
        raise WriteError(f"Error while creating output folder: {output_dir}", output_dir) from e


def run_fixer(path: str, config: FixerConfig) -> FixResult:
    """
    Fix every BPMN file found for a path.

    Args:
        path: Directory of .bpmn files or a single .bpmn file
        config: Fixer configuration

    Returns:
        Merged FixResult of all files (empty if none were found)

    Raises:
        ConfigurationError: If the configuration is invalid
        DiscoveryError: If the directory can't be listed
        ParseError: If an input file can't be read or parsed
        WriteError: If the output folder or a fixed file can't be written
    """
    fixer = InspireBPMNFixer(config)
    discovery = discover_bpmn_files(path, config)
    result = FixResult()

    if not discovery.files:
        logger.info("Couldn't find any BPMN files to fix")
        return result

    file_count = len(discovery.files)
    logger.info(f"Found {file_count} file{'s' if file_count > 1 else ''} to fix")

    output_dir = discovery.output_dir
    ensure_output_dir(output_dir)

    for file_path in discovery.files:
        result.merge(fixer.fix_file(file_path, output_dir / file_path.name))

    result.metadata['output_dir'] = str(output_dir)
    logger.info(
        f"Fixed file{'s have' if file_count > 1 else ' has'} been written to: \"{output_dir}\""
    )
    return result
