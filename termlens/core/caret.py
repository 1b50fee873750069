"""
TermLens Caret Tracker
Maps a live selection to flattened-text offsets and back onto a rebuilt tree
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .document import Container, Document, Node, TextRun

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaretPosition:
    """Selection as [start, end] offsets into flattened text"""

    start: int
    end: int
    backward: bool = False

    @property
    def collapsed(self) -> bool:
        return self.start == self.end


@dataclass
class Selection:
    """
    Live selection on a document surface

    A text run's local offset is a character index; a container's (or the
    document's) local offset is a child index.
    """

    anchor_node: object
    anchor_offset: int
    focus_node: Optional[object] = None
    focus_offset: Optional[int] = None

    def __post_init__(self):
        if self.focus_node is None:
            self.focus_node = self.anchor_node
            self.focus_offset = self.anchor_offset
        elif self.focus_offset is None:
            self.focus_offset = 0

    @property
    def collapsed(self) -> bool:
        return self.anchor_node is self.focus_node and self.anchor_offset == self.focus_offset


def _text_length(node: Node) -> int:
    if isinstance(node, TextRun):
        return len(node.text)
    return sum(_text_length(child) for child in node.children)


def _children_prefix(children: List[Node], index: int) -> int:
    index = max(0, min(index, len(children)))
    return sum(_text_length(child) for child in children[:index])


def _search(nodes: List[Node], target, local_offset: int, total: int) -> Tuple[Optional[int], int]:
    for node in nodes:
        if node is target:
            if isinstance(node, TextRun):
                return total + max(0, min(local_offset, len(node.text))), total
            return total + _children_prefix(node.children, local_offset), total
        if isinstance(node, TextRun):
            total += len(node.text)
        else:
            found, total = _search(node.children, target, local_offset, total)
            if found is not None:
                return found, total
    return None, total


def offset_of(document: Document, node, local_offset: int) -> Optional[int]:
    """
    Convert a node + local offset into a flattened-text offset

    Returns:
        Offset, or None when the node is not part of the document
    """
    if node is document:
        return _children_prefix(document.children, local_offset)
    found, _ = _search(document.children, node, local_offset, 0)
    return found


def locate(document: Document, offset: int) -> Optional[Tuple[TextRun, int]]:
    """
    Find the text run holding a flattened-text offset

    An offset on a run boundary resolves to the end of the earlier run;
    offsets past the end clamp to the end of the last run.

    Returns:
        (run, local offset), or None for a document without text runs
    """
    last = None
    total = 0
    for run in document.iter_text_runs():
        length = len(run.text)
        if total + length >= offset:
            return run, max(0, offset - total)
        total += length
        last = run

    if last is None:
        return None
    return last, len(last.text)


def capture(document: Document, selection: Optional[Selection]) -> Optional[CaretPosition]:
    """
    Capture a live selection as flattened-text offsets

    Args:
        document: Tree the selection currently lives in
        selection: Live selection, or None

    Returns:
        CaretPosition, or None when the selection is outside the document
    """
    if selection is None:
        return None

    anchor = offset_of(document, selection.anchor_node, selection.anchor_offset)
    focus = offset_of(document, selection.focus_node, selection.focus_offset)
    if anchor is None or focus is None:
        logger.debug("Selection does not fall inside the tracked document")
        return None

    return CaretPosition(start=min(anchor, focus), end=max(anchor, focus), backward=focus < anchor)


def restore(document: Document, caret: Optional[CaretPosition]) -> Optional[Selection]:
    """
    Remap captured offsets onto a (new) document tree

    Returns:
        Selection to apply, or None when no text run can hold it
    """
    if caret is None:
        return None

    start = locate(document, caret.start)
    end = locate(document, caret.end)
    if start is None or end is None:
        logger.debug("No text run to restore the selection into")
        return None

    if caret.backward:
        start, end = end, start
    return Selection(start[0], start[1], end[0], end[1])
