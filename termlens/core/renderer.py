"""
TermLens Annotation Renderer
Rewrites a document tree so detected terms are wrapped in highlight spans
"""

import logging
from typing import Iterable, List, Optional

from .config import StyleConfig
from .detector import CATALOG, HEURISTIC, TermOccurrence
from .document import Container, Document, Node, TextRun, merge_adjacent_runs
from .glossary import TermCatalog

logger = logging.getLogger(__name__)

ANNOTATION_TAG = "span"
ANNOTATION_CLASS = "glossary-term"


def is_annotation(node) -> bool:
    """True for highlight wrappers inserted by the renderer"""
    return (
        isinstance(node, Container)
        and node.tag == ANNOTATION_TAG
        and ANNOTATION_CLASS in node.attrs.get("class", "").split()
    )


def _strip_nodes(nodes: Iterable[Node]) -> List[Node]:
    stripped: List[Node] = []
    for node in nodes:
        if isinstance(node, TextRun):
            stripped.append(TextRun(node.text))
        elif is_annotation(node):
            # Unwrap in place, keeping whatever the wrapper held
            stripped.extend(_strip_nodes(node.children))
        else:
            stripped.append(Container(node.tag, dict(node.attrs), _strip_nodes(node.children), node.raw))
    return merge_adjacent_runs(stripped)


def strip_annotations(document: Document) -> Document:
    """Return a copy of the document with every highlight wrapper removed"""
    return Document(_strip_nodes(document.children))


class _Walk:
    """Running flattened offset and first span not yet behind it"""

    def __init__(self):
        self.offset = 0
        self.index = 0


class AnnotationRenderer:
    """
    Inserts non-overlapping annotation containers around term occurrences
    """

    def __init__(self, catalog: TermCatalog, style: Optional[StyleConfig] = None):
        self.catalog = catalog
        self.style = style or StyleConfig()

    def classify(self, term: str) -> str:
        return CATALOG if term in self.catalog else HEURISTIC

    def make_annotation(self, term: str, text: str) -> Container:
        """Build the wrapper for one covered text fragment"""
        classification = self.classify(term)
        style = (
            f"background-color: {self.style.background_for(classification)}; "
            f"cursor: help; border-bottom: 1px dotted {self.style.underline_color}; "
            f"padding: 0 2px; border-radius: 2px;"
        )
        attrs = {
            "class": f"{ANNOTATION_CLASS} {ANNOTATION_CLASS}--{classification}",
            "data-term": term,
            "data-kind": classification,
            "style": style,
        }
        return Container(ANNOTATION_TAG, attrs, [TextRun(text)])

    def render(self, document: Document, occurrences: Iterable[TermOccurrence]) -> Document:
        """
        Strip previous annotations and wrap the given occurrences

        Args:
            document: Current document, left untouched
            occurrences: Spans in flattened-text coordinates

        Returns:
            New document with one wrapper per covered text-run fragment
        """
        stripped = strip_annotations(document)

        spans: List[TermOccurrence] = []
        for occurrence in sorted(occurrences, key=lambda occ: (occ.start, -occ.length)):
            if occurrence.length <= 0:
                continue
            if spans and occurrence.start < spans[-1].end:
                logger.warning(f"Skipping overlapping occurrence {occurrence}")
                continue
            spans.append(occurrence)

        if not spans:
            return stripped

        walk = _Walk()
        return Document(self._render_nodes(stripped.children, spans, walk))

    def _render_nodes(self, nodes: List[Node], spans: List[TermOccurrence], walk: _Walk) -> List[Node]:
        rendered: List[Node] = []
        for node in nodes:
            if isinstance(node, TextRun):
                rendered.extend(self._split_run(node.text, spans, walk))
            else:
                rendered.append(
                    Container(node.tag, dict(node.attrs), self._render_nodes(node.children, spans, walk), node.raw)
                )
        return rendered

    def _split_run(self, text: str, spans: List[TermOccurrence], walk: _Walk) -> List[Node]:
        base = walk.offset
        end = base + len(text)
        walk.offset = end

        while walk.index < len(spans) and spans[walk.index].end <= base:
            walk.index += 1

        pieces: List[Node] = []
        position = base
        index = walk.index
        while index < len(spans) and spans[index].start < end:
            occurrence = spans[index]
            start = max(occurrence.start, base)
            stop = min(occurrence.end, end)
            if start > position:
                pieces.append(TextRun(text[position - base:start - base]))
            pieces.append(self.make_annotation(occurrence.term, text[start - base:stop - base]))
            position = stop
            if occurrence.end > end:
                # Continues into the next run
                break
            index += 1

        if position < end:
            pieces.append(TextRun(text[position - base:]))
        return pieces
