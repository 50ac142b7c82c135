"""
XML Utility Functions
=====================

Loading, serialization and element helpers for BPMN documents.
These functions work with lxml elements and address tags and attributes by
the qualified name written in the source file (``bpmn2:timeDuration``,
``xsi:type``) instead of lxml's ``{namespace}local`` form.
"""

from copy import deepcopy
from io import BytesIO
from pathlib import Path
from typing import Dict, Iterator, Optional, Set, Any
import logging

from lxml import etree

from inspire_bpmn_fixer.errors import ParseError, WriteError

logger = logging.getLogger(__name__)

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"

# URIs declared for prefixes a document uses without declaring them
KNOWN_NAMESPACES = {
    "xsi": "http://www.w3.org/2001/XMLSchema-instance",
    "bpmn2": "http://www.omg.org/spec/BPMN/20100524/MODEL",
    "bpmndi": "http://www.omg.org/spec/BPMN/20100524/DI",
    "dc": "http://www.omg.org/spec/DD/20100524/DC",
    "di": "http://www.omg.org/spec/DD/20100524/DI",
}
UNDECLARED_NAMESPACE_BASE = "urn:x-undeclared-prefix:"


def create_parser(recover: bool = False) -> Any:
    """Create the parser used for BPMN input (keeps whitespace and CDATA)."""
    return etree.XMLParser(
        remove_blank_text=False,
        strip_cdata=False,
        resolve_entities=False,
        no_network=True,
        recover=recover,
    )


def _only_namespace_errors(error_log: Any) -> bool:
    """Check whether every parse error is an undeclared-prefix style error."""
    errors = [entry for entry in error_log if entry.level >= etree.ErrorLevels.ERROR]
    return bool(errors) and all(
        entry.domain == etree.ErrorDomains.NAMESPACE for entry in errors
    )


def load_document(data: bytes, source: str = "<bytes>") -> Any:
    """
    Parse XML bytes into a mutable element tree.

    Text is exposed coalesced by lxml, so ``element.text`` is always the
    whole first text node of an element. Documents that are well-formed but
    use namespace prefixes without declaring them are parsed again in
    recovery mode and get the missing declarations added to the root.

    Args:
        data: Raw file content
        source: Name used in error messages

    Returns:
        lxml ElementTree

    Raises:
        ParseError: If the bytes are not well-formed XML
    """
    try:
        return etree.parse(BytesIO(data), create_parser())
    except etree.XMLSyntaxError as e:
        if not _only_namespace_errors(e.error_log):
            raise ParseError(f"Error while parsing {source}: {e}") from e
        error = e

    logger.debug(f"Declaring undeclared namespace prefixes in {source}: {error}")
    try:
        tree = etree.parse(BytesIO(data), create_parser(recover=True))
        return declare_missing_prefixes(tree)
    except (etree.XMLSyntaxError, ValueError) as e:
        raise ParseError(f"Error while parsing {source}: {e}") from e


def _undeclared_prefixes(root: Any) -> Set[str]:
    """Collect prefixes that lxml kept as part of literal tag or attribute names."""
    prefixes = set()
    for element in iter_elements(root):
        names = [element.tag] + list(element.attrib.keys())
        for name in names:
            if not name.startswith("{") and ":" in name:
                prefixes.add(name.split(":", 1)[0])
    return prefixes


def _resolve_name(name: str, nsmap: Dict[Optional[str], str]) -> str:
    """Turn a literal ``prefix:local`` name into lxml's ``{uri}local`` form."""
    if name.startswith("{") or ":" not in name:
        return name
    prefix, local = name.split(":", 1)
    return f"{{{nsmap[prefix]}}}{local}"


def declare_missing_prefixes(tree: Any) -> Any:
    """
    Bind prefixes a recovered document uses without declaring them.

    The root is rebuilt with a declaration for every such prefix (the
    well-known BPMN URI where there is one) and all literal ``prefix:local``
    tags and attributes are moved into those namespaces, so they stay
    addressable as ``bpmn2:...`` / ``xsi:...``. Comments and processing
    instructions around the root are kept.

    Returns:
        A new ElementTree, or the given one if nothing was undeclared
    """
    root = tree.getroot()
    prefixes = _undeclared_prefixes(root)
    if not prefixes:
        return tree

    nsmap = dict(root.nsmap)
    used = set(nsmap.values())
    for prefix in sorted(prefixes):
        uri = KNOWN_NAMESPACES.get(prefix)
        if uri is None or uri in used:
            uri = UNDECLARED_NAMESPACE_BASE + prefix
        nsmap[prefix] = uri
        used.add(uri)

    new_root = etree.Element(_resolve_name(root.tag, nsmap), nsmap=nsmap)
    for key, value in root.attrib.items():
        new_root.set(_resolve_name(key, nsmap), value)
    new_root.text = root.text
    for child in list(root):
        new_root.append(child)

    for node in reversed(list(root.itersiblings(preceding=True))):
        new_root.addprevious(deepcopy(node))
    for node in reversed(list(root.itersiblings())):
        new_root.addnext(deepcopy(node))

    for element in list(iter_elements(new_root)):
        element.tag = _resolve_name(element.tag, nsmap)
        literal = [key for key in element.attrib.keys()
                   if not key.startswith("{") and ":" in key]
        for key in literal:
            value = element.attrib.pop(key)
            element.set(_resolve_name(key, nsmap), value)

    return etree.ElementTree(new_root)


def load_file(file_path: Path) -> Any:
    """
    Read and parse an XML file.

    Raises:
        ParseError: If the file can't be read or isn't well-formed
    """
    try:
        data = file_path.read_bytes()
    except OSError as e:
        raise ParseError(f"Error while reading {file_path.name}: {e}", file_path) from e

    try:
        return load_document(data, file_path.name)
    except ParseError as e:
        e.path = file_path
        raise


def serialize_document(tree: Any) -> bytes:
    """
    Render a tree as UTF-8 XML with a declaration and no added indentation.

    Raises:
        WriteError: If lxml can't serialize the tree
    """
    try:
        return etree.tostring(
            tree,
            xml_declaration=True,
            encoding="UTF-8",
            method="xml",
            pretty_print=False,
            standalone=tree.docinfo.standalone,
        )
    except etree.LxmlError as e:
        raise WriteError(f"Error while serializing document: {e}") from e


def write_document(tree: Any, file_path: Path) -> None:
    """
    Serialize a tree and write it, replacing any existing file.

    Raises:
        WriteError: If serialization or the write fails
    """
    data = serialize_document(tree)
    try:
        file_path.write_bytes(data)
    except OSError as e:
        raise WriteError(f"Error while writing fixed BPMN file: {file_path.name}", file_path) from e


def local_name(element: Any) -> str:
    """
    Extract local name from element tag, stripping any namespace.

    Example:
        >>> elem = etree.Element("{http://www.omg.org/spec/BPMN/20100524/MODEL}task")
        >>> local_name(elem)
        'task'
    """
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def qualified_name(element: Any) -> str:
    """
    Get the tag name as written in the document, e.g. ``bpmn2:incoming``.

    Args:
        element: XML element

    Returns:
        ``prefix:local`` for prefixed elements, otherwise the local name
    """
    name = local_name(element)
    if element.prefix:
        return f"{element.prefix}:{name}"
    return name


def _attribute_key(element: Any, qname: str) -> Optional[str]:
    """Map a qualified attribute name to lxml's attribute key."""
    if ":" not in qname:
        return qname

    prefix, name = qname.split(":", 1)
    if prefix == "xml":
        namespace = XML_NAMESPACE
    else:
        namespace = element.nsmap.get(prefix)
    if namespace is None:
        return None
    return f"{{{namespace}}}{name}"


def attribute_qname(element: Any, key: str) -> str:
    """
    Get the qualified name of an attribute from its lxml key.

    Args:
        element: Element owning the attribute
        key: Attribute key as found in ``element.attrib``

    Returns:
        ``prefix:local`` for namespaced attributes, otherwise the key itself
    """
    if not key.startswith("{"):
        return key

    namespace, name = key[1:].split("}", 1)
    if namespace == XML_NAMESPACE:
        return f"xml:{name}"
    for prefix, uri in element.nsmap.items():
        if uri == namespace and prefix:
            return f"{prefix}:{name}"
    return name


def get_attribute(element: Any, qname: str) -> Optional[str]:
    """
    Look up an attribute by qualified name.

    Returns:
        The value (possibly empty) or None if the attribute is absent
    """
    key = _attribute_key(element, qname)
    if key is None:
        return None
    return element.get(key)


def set_attribute(element: Any, qname: str, value: str) -> None:
    """
    Set an existing or unprefixed attribute by qualified name.

    Raises:
        KeyError: If the prefix isn't bound on the element
    """
    key = _attribute_key(element, qname)
    if key is None:
        raise KeyError(f"Namespace prefix of {qname!r} is not declared")
    element.set(key, value)


def remove_attribute(element: Any, qname: str) -> bool:
    """
    Remove an attribute by qualified name.

    Returns:
        True if the attribute existed
    """
    key = _attribute_key(element, qname)
    if key is None or key not in element.attrib:
        return False
    del element.attrib[key]
    return True


def has_child_nodes(element: Any) -> bool:
    """Check if an element has any child node (text, element, comment or PI)."""
    return element.text is not None or len(element) > 0


def declared_namespaces(element: Any) -> Dict[Optional[str], str]:
    """
    Get the namespace declarations written on an element itself.

    Returns:
        Prefix -> URI for every ``xmlns``/``xmlns:prefix`` the element adds
        or rebinds relative to its parent
    """
    parent = element.getparent()
    inherited = parent.nsmap if parent is not None else {}
    return {
        prefix: uri for prefix, uri in element.nsmap.items()
        if prefix not in inherited or inherited[prefix] != uri
    }


def text_content(node: Any) -> str:
    """
    Get the concatenated text of a node and its descendants.

    Comments and processing instructions return their own content.
    """
    if not isinstance(node.tag, str):
        return node.text or ""

    parts = [node.text or ""]
    for child in node:
        if isinstance(child.tag, str):
            parts.append(text_content(child))
        parts.append(child.tail or "")
    return "".join(parts)


def first_child_text(element: Any) -> str:
    """
    Get the text content of an element's first child node.

    Returns:
        The leading text node, or the text content of the first child
        element/comment, or an empty string if there are no children
    """
    if element.text is not None:
        return element.text
    if len(element) == 0:
        return ""
    return text_content(element[0])


def set_text_content(element: Any, text: str) -> None:
    """Replace all children of an element with a single text node."""
    for child in list(element):
        element.remove(child)
    element.text = text


def iter_elements(root: Any) -> Iterator[Any]:
    """
    Iterate over every element in a tree in document order.

    Comments and processing instructions are skipped.
    """
    return root.iter(etree.Element)


def is_attached(element: Any, root: Any) -> bool:
    """Check whether an element is still part of the tree under root."""
    current = element
    while current is not None:
        if current is root:
            return True
        current = current.getparent()
    return False


def get_element_path(element: Any) -> str:
    """
    Get XPath-like path to an element for log messages.

    Returns:
        Path string like "/definitions/process[1]/sequenceFlow[2]"
    """
    parts = []
    current = element

    while current is not None:
        name = local_name(current)
        parent = current.getparent()

        if parent is not None:
            index = 1
            for sibling in parent:
                if sibling is current:
                    break
                if local_name(sibling) == name:
                    index += 1
            parts.append(f"{name}[{index}]")
        else:
            parts.append(name)

        current = parent

    return "/" + "/".join(reversed(parts))
