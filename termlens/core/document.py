"""
TermLens Document Model
Ordered tree of text runs and containers, flattening and HTML (de)serialization
"""

import html
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Union

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

logger = logging.getLogger(__name__)

# Elements serialized without a closing tag
VOID_TAGS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img",
    "input", "link", "meta", "source", "track", "wbr",
})

# Elements whose body is kept verbatim: never flattened, scanned or re-escaped
RAW_TEXT_TAGS = frozenset({"script", "style", "template"})


@dataclass(eq=False)
class TextRun:
    """Leaf node owning a run of plain characters"""

    text: str = ""


@dataclass(eq=False)
class Container:
    """Structural node: a tag, its attributes and ordered children"""

    tag: str
    attrs: Dict[str, str] = field(default_factory=dict)
    children: List["Node"] = field(default_factory=list)

    # Verbatim body of a raw-text element; such containers have no children
    raw: Optional[str] = None


Node = Union[TextRun, Container]


def merge_adjacent_runs(nodes: List[Node]) -> List[Node]:
    """Coalesce neighbouring text runs and drop empty ones"""
    merged: List[Node] = []
    for node in nodes:
        if isinstance(node, TextRun):
            if not node.text:
                continue
            if merged and isinstance(merged[-1], TextRun):
                merged[-1] = TextRun(merged[-1].text + node.text)
                continue
        merged.append(node)
    return merged


def copy_node(node: Node) -> Node:
    if isinstance(node, TextRun):
        return TextRun(node.text)
    return Container(node.tag, dict(node.attrs), [copy_node(child) for child in node.children], node.raw)


def iter_text_runs(nodes: List[Node]) -> Iterator[TextRun]:
    """Yield every text run under nodes in document order"""
    for node in nodes:
        if isinstance(node, TextRun):
            yield node
        else:
            yield from iter_text_runs(node.children)


def _from_soup(elements) -> List[Node]:
    nodes: List[Node] = []
    for element in elements:
        # Comments, doctypes, CDATA and processing instructions carry no visible text
        if isinstance(element, PreformattedString):
            continue
        if isinstance(element, NavigableString):
            nodes.append(TextRun(str(element)))
        elif isinstance(element, Tag):
            attrs = {
                name: " ".join(value) if isinstance(value, list) else str(value)
                for name, value in element.attrs.items()
            }
            if element.name in RAW_TEXT_TAGS:
                nodes.append(Container(element.name, attrs, raw=element.decode_contents()))
            else:
                nodes.append(Container(element.name, attrs, _from_soup(element.contents)))
    return merge_adjacent_runs(nodes)


def _serialize(node: Node, parts: List[str]):
    if isinstance(node, TextRun):
        parts.append(html.escape(node.text, quote=False))
        return

    attrs = "".join(
        f' {name}="{html.escape(value, quote=True)}"' for name, value in node.attrs.items()
    )
    parts.append(f"<{node.tag}{attrs}>")
    if node.raw is not None:
        parts.append(node.raw)
        parts.append(f"</{node.tag}>")
        return
    if node.tag in VOID_TAGS and not node.children:
        return
    for child in node.children:
        _serialize(child, parts)
    parts.append(f"</{node.tag}>")


@dataclass(eq=False)
class Document:
    """
    Root of an editable note: an ordered sequence of top-level nodes
    """

    children: List[Node] = field(default_factory=list)

    @classmethod
    def from_html(cls, content: Optional[str]) -> 'Document':
        """
        Deserialize persisted note content

        Args:
            content: Tag-annotated note content (HTML fragment)

        Returns:
            New document owning a fresh tree
        """
        if not content:
            return cls()
        soup = BeautifulSoup(content, "html.parser")
        return cls(_from_soup(soup.contents))

    @classmethod
    def from_text(cls, text: str) -> 'Document':
        return cls([TextRun(text)] if text else [])

    def to_html(self) -> str:
        parts: List[str] = []
        for node in self.children:
            _serialize(node, parts)
        return "".join(parts)

    def iter_text_runs(self) -> Iterator[TextRun]:
        return iter_text_runs(self.children)

    def walk(self) -> Iterator[Node]:
        """Pre-order traversal of every node"""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            if isinstance(node, Container):
                stack.extend(reversed(node.children))

    def flatten(self) -> str:
        """Concatenate all text runs; containers contribute nothing"""
        return "".join(run.text for run in self.iter_text_runs())

    def text_length(self) -> int:
        return sum(len(run.text) for run in self.iter_text_runs())

    def contains(self, node) -> bool:
        """Identity membership of a node in this tree"""
        return any(candidate is node for candidate in self.walk())

    def copy(self) -> 'Document':
        return Document([copy_node(node) for node in self.children])

    def is_empty(self) -> bool:
        return not self.children
