"""
Namespace-aware node lookup for MXLIFF documents.

Paths and attribute names use the 'x' (XLIFF 1.2) and 'm' (Memsource) keys
from DEFAULT_NAMESPACES. Resolution always goes through the namespace URI, so
documents that bind other prefixes to the same URIs work unchanged.
"""

from typing import Dict, List, Optional

from lxml import etree

from .constants import DEFAULT_NAMESPACES


class NodeLocator:
    """Resolves elements and attributes in the XLIFF and vendor namespaces."""

    def __init__(self, namespaces: Optional[Dict[str, str]] = None):
        self.namespaces: Dict[str, str] = dict(namespaces or DEFAULT_NAMESPACES)

    def qname(self, name: str) -> str:
        """
        Convert 'm:score' to Clark notation '{uri}score'.

        Names without a prefix are returned unchanged (no namespace), which is
        how plain XLIFF attributes such as 'id' are stored.
        """
        if ':' not in name:
            return name
        prefix, local = name.split(':', 1)
        try:
            return f'{{{self.namespaces[prefix]}}}{local}'
        except KeyError:
            raise ValueError(f"Unknown namespace prefix: '{prefix}'") from None

    def find(self, node: etree._Element, path: str) -> Optional[etree._Element]:
        return node.find(path, self.namespaces)

    def findall(self, node: etree._Element, path: str) -> List[etree._Element]:
        return node.findall(path, self.namespaces)

    def attr(self, node: Optional[etree._Element], name: str) -> Optional[str]:
        """Attribute value, or None if the node or attribute is absent."""
        if node is None:
            return None
        return node.get(self.qname(name))

    def has_attr(self, node: etree._Element, name: str) -> bool:
        return self.qname(name) in node.attrib

    def set_attr(self, node: etree._Element, name: str, value: str) -> None:
        node.set(self.qname(name), value)

    def create_element(
        self,
        parent: etree._Element,
        name: str,
        index: Optional[int] = None
    ) -> etree._Element:
        """
        Create an element in the namespace of 'name' and insert it into parent.

        Args:
            parent: Element receiving the new child
            name: Prefixed name, e.g. 'x:target' or 'm:comment'
            index: Child position; None appends as the last child

        Returns:
            The new element
        """
        # SubElement reuses the namespace declarations already in scope
        element = etree.SubElement(parent, self.qname(name))
        if index is not None:
            parent.insert(index, element)
        return element

    @staticmethod
    def _escape_xpath_value(value: str) -> str:
        """
        Escape a value for safe use in XPath queries.

        Handles quotes by using concat() when both quote types are present.
        """
        if '"' not in value:
            return f'"{value}"'
        elif "'" not in value:
            return f"'{value}'"
        else:
            # Contains both quotes - use concat()
            parts = value.split('"')
            return "concat(" + ", '\"', ".join(f'"{p}"' for p in parts) + ")"

    def find_unit_by_id(self, root: etree._Element, unit_id: str) -> Optional[etree._Element]:
        """
        Find a trans-unit element by exact id match.

        Args:
            root: Document root
            unit_id: Value of the trans-unit id attribute

        Returns:
            The trans-unit element or None if not found
        """
        units = root.xpath(
            f'//x:trans-unit[@id={self._escape_xpath_value(unit_id)}]',
            namespaces=self.namespaces,
        )
        return units[0] if units else None
