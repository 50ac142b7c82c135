"""
BPM Inspire Fixer
=================

Rewrites BPMN files exported by BPM Inspire so Camunda Platform 7 accepts
them:

1. Inspire expression tags become ``bpmn:tFormalExpression`` elements
2. Qualified names in text content starting with a digit get a prefix
3. Qualified names in ID/reference attributes starting with a digit or a
   minus sign get a prefix
"""

from pathlib import Path
from typing import Any, Dict, List, Tuple
import logging
import re

from inspire_bpmn_fixer.config.settings import FixerConfig
from inspire_bpmn_fixer.fixing.base import BaseFixer, FixResult
from inspire_bpmn_fixer.xml.utils import (
    attribute_qname,
    declared_namespaces,
    first_child_text,
    get_attribute,
    get_element_path,
    has_child_nodes,
    load_document,
    load_file,
    qualified_name,
    remove_attribute,
    serialize_document,
    set_attribute,
    set_text_content,
    write_document,
)

logger = logging.getLogger(__name__)

FIX_EXPRESSION_TAG = "Expression Tag"
FIX_TEXT_QNAME = "Text QName"
FIX_ATTRIBUTE_QNAME = "Attribute QName"

DIGIT_START = re.compile(r"[0-9]")

# Literal backslash sequences left in exported text, longest first
ESCAPED_LINE_BREAKS = ("\\r\\n", "\\n")


class InspireBPMNFixer(BaseFixer):
    """
    Fixer for BPM Inspire BPMN exports.

    Every element is handled by exactly one of two paths: expression tags
    are converted, all other elements get their qualified names fixed.
    """

    def __init__(self, config: FixerConfig):
        """
        Initialize the fixer.

        Args:
            config: Fixer configuration, validated here

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        self._config = config.validate()
        self._prefix = config.qname_prefix
        self._attributes_to_fix = frozenset(config.attributes_to_fix)
        self._expression_tags: Dict[str, str] = {
            tag.lower(): xsi_type for tag, xsi_type in config.expression_tags.items()
        }

    @property
    def config(self) -> FixerConfig:
        return self._config

    @property
    def fix_categories(self) -> List[str]:
        return [FIX_EXPRESSION_TAG, FIX_TEXT_QNAME, FIX_ATTRIBUTE_QNAME]

    def fix_element(self, element: Any, file_context: str, result: FixResult) -> None:
        inspire_type = self._expression_tags.get(qualified_name(element).lower())

        if inspire_type is not None:
            if self.convert_expression_tag(element, inspire_type):
                result.add_fix(
                    FIX_EXPRESSION_TAG,
                    f"Converted <{qualified_name(element)}> at "
                    f"{get_element_path(element)} in {file_context}",
                )
            return

        if self.fix_text_qname(element):
            result.add_fix(
                FIX_TEXT_QNAME,
                f"Prefixed text of <{qualified_name(element)}> at "
                f"{get_element_path(element)} in {file_context}",
            )

        for name in self.fix_attribute_qnames(element):
            result.add_fix(
                FIX_ATTRIBUTE_QNAME,
                f"Prefixed {name}=\"{get_attribute(element, name)}\" on "
                f"<{qualified_name(element)}> in {file_context}",
            )

    def convert_expression_tag(self, element: Any, inspire_type: str) -> bool:
        """
        Convert a BPM Inspire expression tag to Camunda Platform 7's format.

        Example:
            ``<bpmn2:conditionExpression xsi:type="inspire:Rule" id="ID"
            expression="EXPRESSION"/>`` becomes
            ``<bpmn2:conditionExpression
            xsi:type="bpmn:tFormalExpression">EXPRESSION</bpmn2:conditionExpression>``

        Args:
            element: The expression tag
            inspire_type: The BPM Inspire xsi:type this tag must carry

        Returns:
            True if the element was converted
        """
        type_attribute = self._config.type_attribute

        expression = get_attribute(element, "expression")
        id_value = get_attribute(element, "id")
        xsi_type = get_attribute(element, type_attribute)

        if expression is None or id_value is None or xsi_type is None:
            return False
        if xsi_type.lower() != inspire_type.lower():
            return False

        remove_attribute(element, "expression")
        remove_attribute(element, "id")
        set_attribute(element, type_attribute, self._config.formal_expression_type)
        set_text_content(element, expression)

        logger.debug(f"Converted expression tag {id_value!r} to {self._config.formal_expression_type}")
        return True

    def fix_text_qname(self, element: Any) -> bool:
        """
        Prefix a qualified name in a tag's text content starting with a digit.

        Only elements without attributes or namespace declarations are
        considered, e.g.
        ``<bpmn2:incoming>0123456789</bpmn2:incoming>``. Surrounding
        whitespace and literal ``\\n`` / ``\\r\\n`` sequences are dropped.

        Returns:
            True if the text was replaced
        """
        if element.attrib or declared_namespaces(element) or not has_child_nodes(element):
            return False

        text = first_child_text(element).strip()
        for sequence in ESCAPED_LINE_BREAKS:
            text = text.replace(sequence, "")

        if text and DIGIT_START.match(text):
            set_text_content(element, self._prefix + text)
            return True
        return False

    def fix_attribute_qnames(self, element: Any) -> List[str]:
        """
        Prefix qualified names in ID/reference attributes.

        A value starting with a digit gets the prefix prepended; a value
        starting with ``-`` has the minus replaced by the prefix.

        Returns:
            Qualified names of the attributes that were changed
        """
        fixed = []

        for key, value in list(element.attrib.items()):
            name = attribute_qname(element, key)
            if name not in self._attributes_to_fix:
                continue

            if DIGIT_START.match(value):
                element.set(key, self._prefix + value)
            elif value.startswith("-"):
                element.set(key, self._prefix + value[1:])
            else:
                continue
            fixed.append(name)

        return fixed

    def fix_bytes(self, data: bytes, file_context: str = "document") -> Tuple[bytes, FixResult]:
        """
        Parse, fix and serialize a document held in memory.

        Raises:
            ParseError: If the data isn't well-formed XML
            WriteError: If the fixed tree can't be serialized
        """
        tree = load_document(data, file_context)
        result = self.fix_tree(tree, file_context)
        return serialize_document(tree), result

    def fix_file(self, file_path: Path, output_path: Path) -> FixResult:
        """
        Fix a single BPMN file and write the result.

        Args:
            file_path: Input file
            output_path: Destination file, overwritten if present

        Returns:
            FixResult with fixing outcome

        Raises:
            ParseError: If the input can't be read or parsed
            WriteError: If the output can't be written
        """
        logger.info(f"Parsing \"{file_path.name}\"")
        tree = load_file(file_path)

        result = self.fix_tree(tree, file_path.name)
        if result.total_fixes > 0:
            logger.info(f"  {file_path.name}: Applied {result.total_fixes} fix(es)")

        logger.info(f"Writing fixed file to \"{output_path.parent.name}/{output_path.name}\"")
        write_document(tree, output_path)
        result.output_files.append(output_path)

        return result
