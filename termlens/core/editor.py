"""
TermLens Editor Session
Owns the open note's document and runs the capture -> detect -> render -> restore cycle
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from .caret import CaretPosition, Selection, capture, restore
from .config import TermLensConfig, default_config
from .detector import TermDetector, TermOccurrence
from . import formatting
from .document import Container, Document, Node, TextRun
from .glossary import TermCatalog
from .hover import HoverController, HoverState
from .renderer import AnnotationRenderer, is_annotation, strip_annotations
from .scheduler import CallLater, RescanScheduler

logger = logging.getLogger(__name__)

UNTITLED = "Untitled Note"


@dataclass(frozen=True)
class ContentChange:
    """Annotation-free content handed to the note store"""

    html: str
    text: str
    title: str


def derive_title(text: str, max_length: int = 30) -> str:
    """First line of the note, shortened; blank notes are untitled"""
    if not text.strip():
        return UNTITLED
    return text.strip().split("\n")[0][:max_length].strip() or UNTITLED


def _find_annotation(nodes: List[Node], offset: int, total: int, inside=None):
    for node in nodes:
        if isinstance(node, TextRun):
            length = len(node.text)
            if inside is not None and total <= offset < total + length:
                return inside, total
            total += length
        else:
            found, total = _find_annotation(
                node.children, offset, total, node if is_annotation(node) else inside
            )
            if found is not None:
                return found, total
    return None, total


class EditorSession:
    """
    Term-aware editing session for one open note
    """

    def __init__(self,
                 catalog: Optional[TermCatalog] = None,
                 config: Optional[TermLensConfig] = None,
                 call_later: Optional[CallLater] = None,
                 clock: Optional[Callable[[], float]] = None,
                 on_change: Optional[Callable[[ContentChange], None]] = None):
        """
        Initialize editor session

        Args:
            catalog: Term catalog; built from config.glossary_path or the embedded glossary
            config: Engine configuration
            call_later: Timer factory for the debounce; defaults to asyncio
            clock: Monotonic clock for the debounce deadline
            on_change: Receives annotation-free content after user edits
        """
        self.config = config or default_config

        if catalog is None:
            if self.config.glossary_path:
                catalog = TermCatalog.from_file(self.config.glossary_path)
            else:
                catalog = TermCatalog()
        self.catalog = catalog

        self.detector = TermDetector(self.catalog, self.config.detection)
        self.renderer = AnnotationRenderer(self.catalog, self.config.style)
        self.hover = HoverController(self.catalog, self.config.hover)
        self.scheduler = RescanScheduler(
            self.rescan,
            debounce_ms=self.config.scheduler.debounce_ms,
            call_later=call_later,
            clock=clock,
        )

        self._change_listeners: List[Callable[[ContentChange], None]] = []
        if on_change:
            self._change_listeners.append(on_change)

        self.document = Document()
        self.selection: Optional[Union[Selection, CaretPosition]] = None
        self.occurrences: List[TermOccurrence] = []
        self.has_edited = False
        self.rescan_count = 0
        self._last_emitted: Optional[str] = None

    def on_change(self, listener: Callable[[ContentChange], None]):
        self._change_listeners.append(listener)

    # Document lifecycle

    def open(self, content: Optional[str], scan: bool = True):
        """
        Replace the session's document with a note's persisted content

        Args:
            content: Persisted HTML of the note
            scan: Annotate right away when the note has text; an empty
                first paint is never scanned
        """
        self.scheduler.cancel()
        self.hover.clear()

        self.document = strip_annotations(Document.from_html(content))
        self.selection = None
        self.occurrences = []
        self.has_edited = False
        self._last_emitted = self.document.to_html()

        logger.debug(f"Opened note with {self.document.text_length()} characters")

        if scan and self.document.text_length():
            self.rescan()

    def handle_edit(self, raw_content: Union[str, Document],
                    selection: Optional[Union[Selection, CaretPosition]] = None):
        """
        Accept the surface's raw snapshot after an edit

        Args:
            raw_content: Current surface content (HTML or a document tree)
            selection: Live selection in that snapshot, or caret offsets
        """
        if isinstance(raw_content, Document):
            self.document = raw_content
        else:
            self.document = Document.from_html(raw_content)
        self.selection = selection
        self.has_edited = True

        self._emit_if_changed()
        self.scheduler.notify_edit()

    def set_selection(self, selection: Optional[Union[Selection, CaretPosition]]):
        """Selection moved without an edit (click, arrow keys)"""
        self.selection = selection

    def toggle_format(self, name: str, caret: Optional[CaretPosition] = None) -> Optional[CaretPosition]:
        """
        Toggle bold, italic or underline over the selection

        Args:
            name: "bold", "italic", "underline" or one of their tags
            caret: Range to format; defaults to the current selection

        Returns:
            The formatted range, or None when there was nothing selected
        """
        formatting.resolve_tag(name)

        if caret is None:
            caret = self._captured_caret()
        if caret is None or caret.collapsed:
            return None

        self.document = formatting.toggle_format(
            strip_annotations(self.document), caret.start, caret.end, name
        )
        self.selection = restore(self.document, caret)
        self.has_edited = True

        self._emit_if_changed()
        self.scheduler.notify_edit()
        return caret

    def _emit_if_changed(self):
        html = self.content
        if html == self._last_emitted:
            return
        self._last_emitted = html

        text = self.document.flatten()
        change = ContentChange(html=html, text=text, title=derive_title(text))
        for listener in list(self._change_listeners):
            listener(change)

    # Rescan cycle

    def _captured_caret(self) -> Optional[CaretPosition]:
        if isinstance(self.selection, CaretPosition):
            return self.selection
        return capture(self.document, self.selection)

    def rescan(self):
        """Capture the caret, detect terms, re-annotate and restore the caret"""
        try:
            caret = self._captured_caret()
            occurrences = self.detector.detect(self.document.flatten())
            rendered = self.renderer.render(self.document, occurrences)
            selection = restore(rendered, caret)
        except Exception:
            logger.warning("Rescan failed; keeping the current document", exc_info=True)
            return

        self.document = rendered
        self.occurrences = occurrences
        self.selection = selection
        self.rescan_count += 1

        logger.debug(f"Rescan {self.rescan_count}: {len(occurrences)} annotations")

    # Accessors

    @property
    def content(self) -> str:
        """Annotation-free HTML, the form the note store persists"""
        return strip_annotations(self.document).to_html()

    @property
    def annotated_content(self) -> str:
        return self.document.to_html()

    @property
    def plain_text(self) -> str:
        return self.document.flatten()

    @property
    def caret(self) -> Optional[CaretPosition]:
        return self._captured_caret()

    def annotation_at(self, offset: int) -> Optional[Container]:
        """Annotation wrapper covering a flattened-text offset"""
        found, _ = _find_annotation(self.document.children, offset, 0)
        return found

    # Hover passthrough

    def pointer_enter(self, node, x: int, y: int) -> Optional[HoverState]:
        return self.hover.pointer_enter(node, x, y)

    def pointer_enter_offset(self, offset: int, x: int, y: int) -> Optional[HoverState]:
        node = self.annotation_at(offset)
        if node is None:
            return self.hover.state
        return self.hover.pointer_enter(node, x, y)

    def pointer_move(self, x: int, y: int, inside_surface: bool = True) -> Optional[HoverState]:
        return self.hover.pointer_move(x, y, inside_surface)

    def pointer_leave_surface(self):
        self.hover.pointer_leave_surface()

    def pointer_leave_annotation(self, related_inside_surface: bool = True):
        self.hover.pointer_leave_annotation(related_inside_surface)
