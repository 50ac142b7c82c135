"""
XML Processing Utilities
========================

Document loading, serialization and qualified-name helpers for BPMN files.
"""

from inspire_bpmn_fixer.xml.utils import (
    load_document,
    declare_missing_prefixes,
    load_file,
    serialize_document,
    write_document,
    local_name,
    qualified_name,
    attribute_qname,
    get_attribute,
    set_attribute,
    remove_attribute,
    has_child_nodes,
    declared_namespaces,
    text_content,
    first_child_text,
    set_text_content,
    iter_elements,
    is_attached,
    get_element_path,
)

__all__ = [
    "load_document",
    "declare_missing_prefixes",
    "load_file",
    "serialize_document",
    "write_document",
    "local_name",
    "qualified_name",
    "attribute_qname",
    "get_attribute",
    "set_attribute",
    "remove_attribute",
    "has_child_nodes",
    "declared_namespaces",
    "text_content",
    "first_child_text",
    "set_text_content",
    "iter_elements",
    "is_attached",
    "get_element_path",
]
