"""HTML node tree and the depth-first walker used by link extraction."""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from lxml import etree
from lxml import html as lxml_html

logger = logging.getLogger(__name__)


class DocumentParseError(RuntimeError):
    """Raised when an HTML document cannot be parsed at all."""


class NodeKind(str, enum.Enum):
    ELEMENT = "element"
    TEXT = "text"
    OTHER = "other"


@dataclass
class Node:
    """A single node of a parsed HTML document.

    Text content lives in dedicated ``TEXT`` nodes rather than on elements,
    so an element's children are its leading text, its child elements and
    the text following each child, in document order.
    """

    kind: NodeKind
    tag: Optional[str] = None
    attrs: List[Tuple[str, str]] = field(default_factory=list)
    data: str = ""
    children: List["Node"] = field(default_factory=list)

    @property
    def is_element(self) -> bool:
        return self.kind is NodeKind.ELEMENT

    @property
    def is_text(self) -> bool:
        return self.kind is NodeKind.TEXT

    def attr(self, name: str) -> Optional[str]:
        """Return the first attribute value whose key matches ``name`` ignoring case."""
        wanted = name.lower()
        for key, value in self.attrs:
            if key.lower() == wanted:
                return value
        return None


class Visitor:
    """Base visitor for :func:`walk`.

    ``enter`` decides whether a node's subtree is visited. ``child_visitor``
    supplies the visitor used for the children, which lets a visitor hand a
    scoped visitor to a subtree. ``exit`` runs on the entering visitor once
    all children have been walked.
    """

    def enter(self, node: Node) -> bool:
        return True

    def child_visitor(self, node: Node) -> "Visitor":
        return self

    def exit(self, node: Node) -> None:
        return None


def walk(root: Node, visitor: Visitor) -> None:
    """Walk ``root`` depth-first in document order.

    Uses an explicit stack so deeply nested documents cannot exhaust the
    interpreter's recursion limit.
    """
    stack: List[Tuple[Node, Visitor, bool]] = [(root, visitor, False)]
    while stack:
        node, current, leaving = stack.pop()
        if leaving:
            current.exit(node)
            continue
        if not current.enter(node):
            continue
        stack.append((node, current, True))
        inner = current.child_visitor(node)
        for child in reversed(node.children):
            stack.append((child, inner, False))


def _text_node(data: str) -> Node:
    return Node(kind=NodeKind.TEXT, data=data)


def _convert(element: etree._Element) -> Node:
    if not isinstance(element.tag, str):
        # Comments, processing instructions and entities carry no visible text.
        return Node(kind=NodeKind.OTHER, data=element.text or "")
    node = Node(
        kind=NodeKind.ELEMENT,
        tag=element.tag.lower(),
        attrs=[(str(key), str(value)) for key, value in element.attrib.items()],
    )
    if element.text:
        node.children.append(_text_node(element.text))
    return node


def from_lxml(element: etree._Element) -> Node:
    """Convert an lxml element and its descendants into :class:`Node`.

    The element's own ``tail`` belongs to its parent and is not included.
    """
    root = _convert(element)
    stack = [(element, root)]
    while stack:
        source, node = stack.pop()
        for child in source:
            child_node = _convert(child)
            node.children.append(child_node)
            if child.tail:
                node.children.append(_text_node(child.tail))
            stack.append((child, child_node))
    return root


def parse_html(raw: str) -> Node:
    """Parse ``raw`` markup into a document tree rooted at ``<html>``.

    The markup is handed to libxml2 as UTF-8 bytes so that a leading XML
    declaration naming another encoding is tolerated. A document without any
    element (empty, or only a comment) yields an empty ``<html>`` node.
    """
    if not raw.strip():
        return Node(kind=NodeKind.ELEMENT, tag="html")
    parser = lxml_html.HTMLParser(encoding="utf-8", huge_tree=True)
    try:
        document = lxml_html.document_fromstring(raw.encode("utf-8", "replace"), parser=parser)
    except etree.ParserError as exc:
        if str(exc) == "Document is empty":
            return Node(kind=NodeKind.ELEMENT, tag="html")
        raise DocumentParseError(f"unable to parse HTML document: {exc}") from exc
    except (etree.XMLSyntaxError, ValueError) as exc:
        raise DocumentParseError(f"unable to parse HTML document: {exc}") from exc

    for entry in parser.error_log:
        if "depth" in entry.message.lower():
            logger.warning(
                "HTML document truncated: %s",
                entry.message.strip(),
                extra={"event": "html.truncated"},
            )
            break
    return from_lxml(document)


__all__ = [
    "DocumentParseError",
    "Node",
    "NodeKind",
    "Visitor",
    "from_lxml",
    "parse_html",
    "walk",
]
