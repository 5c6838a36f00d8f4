"""Anchor discovery and text flattening over parsed HTML trees."""
from __future__ import annotations

import logging
import re
from typing import List
from urllib.parse import urlsplit

from linkqueue.ingestion.tree import Node, Visitor, parse_html, walk
from linkqueue.ingestion.types import Link

logger = logging.getLogger(__name__)

_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_PORT_RE = re.compile(r":([^:\]]*)\Z")


def url_host(url: str) -> str:
    """Return the host (with port, without userinfo) of ``url``.

    Raises ``ValueError`` for URLs that cannot be parsed: control characters,
    malformed percent escapes, bracket mismatches or a non-numeric port.
    """
    if _CONTROL_RE.search(url):
        raise ValueError(f"invalid control character in URL {url!r}")
    parts = urlsplit(url)
    # The query string is kept raw; everything else must be properly escaped.
    if _BAD_ESCAPE_RE.search(parts.netloc + parts.path + parts.fragment):
        raise ValueError(f"invalid URL escape in {url!r}")
    host = parts.netloc.rpartition("@")[2]
    port = _PORT_RE.search(host)
    # Only digits are required; the numeric range is not checked.
    if port and not re.fullmatch(r"[0-9]*", port.group(1)):
        raise ValueError(f"invalid port in URL {url!r}")
    return host


class TextFlattener(Visitor):
    """Concatenate every text node of a subtree, each followed by one space."""

    def __init__(self) -> None:
        self._parts: List[str] = []

    def enter(self, node: Node) -> bool:
        if node.is_text:
            self._parts.append(node.data + " ")
        return True

    @property
    def text(self) -> str:
        return "".join(self._parts)


def flatten(node: Node) -> str:
    flattener = TextFlattener()
    walk(node, flattener)
    return flattener.text


class LinkExtractor(Visitor):
    """Collect a :class:`Link` for every anchor with a usable ``href``."""

    def __init__(self) -> None:
        self.links: List[Link] = []

    def enter(self, node: Node) -> bool:
        if node.is_element and node.tag == "a":
            self._collect(node)
        # Keep descending so markup nested inside anchors is still visited.
        return True

    def _collect(self, anchor: Node) -> None:
        href = anchor.attr("href")
        if not href:
            return
        try:
            domain = url_host(href)
        except ValueError as exc:
            logger.debug("Skipping anchor with unparseable href %r: %s", href, exc)
            return
        self.links.append(Link(url=href, domain=domain, context=flatten(anchor)))


def find_links(markup: str) -> List[Link]:
    """Parse ``markup`` and return its links in document order.

    Raises :class:`~linkqueue.ingestion.tree.DocumentParseError` when the
    document cannot be parsed.
    """
    if not markup or not markup.strip():
        return []
    root = parse_html(markup)
    extractor = LinkExtractor()
    walk(root, extractor)
    return extractor.links


__all__ = ["LinkExtractor", "TextFlattener", "find_links", "flatten", "url_host"]
