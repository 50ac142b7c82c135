"""
Base Fixer Classes
==================

Abstract base classes for the fixing framework. Extend BaseFixer and
implement ``fix_element`` to add a rule set; the base class walks the tree.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Dict, Any
import logging

from inspire_bpmn_fixer.xml.utils import iter_elements, is_attached

logger = logging.getLogger(__name__)


@dataclass
class FixResult:
    """
    Container for fix results.

    Attributes:
        files_processed: Number of files processed
        files_fixed: Number of files that had fixes applied
        total_fixes: Total number of individual fixes applied
        fixes_by_type: Count of fixes by type
        fix_descriptions: Detailed descriptions of all fixes
        output_files: Paths of the written fixed files
        metadata: Additional metadata about the fixing process
    """
    files_processed: int = 0
    files_fixed: int = 0
    total_fixes: int = 0
    fixes_by_type: Dict[str, int] = field(default_factory=dict)
    fix_descriptions: List[str] = field(default_factory=list)
    output_files: List[Path] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_fix(self, fix_type: str, description: str) -> None:
        """
        Record a fix that was applied.

        Args:
            fix_type: Type/category of fix
            description: Description of what was fixed
        """
        self.total_fixes += 1
        self.fix_descriptions.append(description)
        self.fixes_by_type[fix_type] = self.fixes_by_type.get(fix_type, 0) + 1

    def merge(self, other: 'FixResult') -> None:
        """Merge another result into this one."""
        self.files_processed += other.files_processed
        self.files_fixed += other.files_fixed
        self.total_fixes += other.total_fixes
        self.fix_descriptions.extend(other.fix_descriptions)
        self.output_files.extend(other.output_files)

        for fix_type, count in other.fixes_by_type.items():
            self.fixes_by_type[fix_type] = self.fixes_by_type.get(fix_type, 0) + count

        self.metadata.update(other.metadata)

    def summary(self) -> str:
        """Generate a text summary of fix results."""
        lines = [
            f"Files processed: {self.files_processed}",
            f"Files with fixes: {self.files_fixed}",
            f"Total fixes applied: {self.total_fixes}",
        ]

        if self.fixes_by_type:
            lines.append("\nFixes by type:")
            for fix_type, count in sorted(self.fixes_by_type.items(), key=lambda x: -x[1]):
                lines.append(f"  {fix_type}: {count}")

        return "\n".join(lines)


class BaseFixer(ABC):
    """
    Abstract base class for fixers.

    Subclasses decide what happens to a single element; ``fix_tree`` visits
    every element of a document exactly once, in document order.

    Example:
        class UppercaseIdFixer(BaseFixer):
            def fix_element(self, element, file_context, result):
                value = element.get("id")
                if value and value != value.upper():
                    element.set("id", value.upper())
                    result.add_fix("Uppercase Id", f"{value} in {file_context}")
    """

    @abstractmethod
    def fix_element(self, element: Any, file_context: str, result: FixResult) -> None:
        """
        Apply fixes to one element in place.

        Args:
            element: XML element to fix
            file_context: Context string for reporting
            result: Result collecting the applied fixes
        """
        pass

    def fix_tree(self, tree: Any, file_context: str = "document") -> FixResult:
        """
        Apply fixes to every element of a parsed document.

        Elements removed from the tree by an earlier fix in the same walk
        are skipped.

        Args:
            tree: lxml ElementTree, mutated in place
            file_context: Context string for reporting

        Returns:
            FixResult for this document
        """
        result = FixResult()
        result.files_processed = 1

        root = tree.getroot()
        for element in list(iter_elements(root)):
            if not is_attached(element, root):
                continue
            self.fix_element(element, file_context, result)

        if result.total_fixes > 0:
            result.files_fixed = 1

        return result

    @property
    def fix_categories(self) -> List[str]:
        """Return list of fix categories this fixer handles."""
        return []
