"""
TermLens Hover/Popup Controller
Tracks the pointer over annotation spans and resolves definitions for a tooltip
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple

from .config import HoverConfig
from .detector import CATALOG, HEURISTIC
from .document import iter_text_runs
from .glossary import TermCatalog, normalize_term
from .renderer import is_annotation

logger = logging.getLogger(__name__)

# (substrings, description) checked in order for terms missing from the catalog
FALLBACK_DESCRIPTIONS: Sequence[Tuple[Tuple[str, ...], str]] = (
    (("code", "program"), "A set of instructions that tells a computer what to do"),
    (("data",), "Information that can be processed by a computer"),
    (("web", "internet"), "A global network of connected computers"),
    (("app", "application"), "A software program designed for a specific purpose"),
    (("api",), "Application Programming Interface - a way for programs to communicate"),
    (("cloud",), "Remote servers and services accessed over the internet"),
)


@dataclass(frozen=True)
class HoverState:
    term: str
    classification: str
    definition: str
    x: int
    y: int

    @property
    def position(self) -> Tuple[int, int]:
        return self.x, self.y

    @property
    def title(self) -> str:
        return self.term[:1].upper() + self.term[1:]


HoverListener = Callable[[Optional[HoverState]], None]


def annotation_term(node) -> str:
    """Term carried by an annotation wrapper, falling back to its text"""
    term = node.attrs.get("data-term")
    if not term:
        term = "".join(run.text for run in iter_text_runs(node.children))
    return normalize_term(term)


class HoverController:
    """
    Publishes the hovered term and popup position to subscribers
    """

    def __init__(self,
                 catalog: TermCatalog,
                 config: Optional[HoverConfig] = None,
                 fallbacks: Sequence[Tuple[Tuple[str, ...], str]] = FALLBACK_DESCRIPTIONS):
        self.catalog = catalog
        self.config = config or HoverConfig()
        self.fallbacks = fallbacks
        self.state: Optional[HoverState] = None
        self._listeners: List[HoverListener] = []

    def subscribe(self, listener: HoverListener) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def describe(self, term: str) -> Tuple[str, str]:
        """
        Resolve a term to (definition, classification)

        Catalog definitions win; other terms get the first matching
        substring heuristic, or the generic default.
        """
        definition = self.catalog.lookup(term)
        if definition is not None:
            return definition, CATALOG

        term_lower = normalize_term(term)
        for needles, description in self.fallbacks:
            if any(needle in term_lower for needle in needles):
                return description, HEURISTIC
        return self.config.default_description, HEURISTIC

    def _anchor(self, x: int, y: int) -> Tuple[int, int]:
        return x + self.config.offset_x, y + self.config.offset_y

    def _publish(self, state: Optional[HoverState]):
        self.state = state
        for listener in list(self._listeners):
            listener(state)

    def pointer_enter(self, node, x: int, y: int) -> Optional[HoverState]:
        """Pointer entered a node; only annotation wrappers start a hover"""
        if not is_annotation(node):
            return self.state

        term = annotation_term(node)
        definition, classification = self.describe(term)
        px, py = self._anchor(x, y)
        self._publish(HoverState(term, classification, definition, px, py))
        return self.state

    def pointer_move(self, x: int, y: int, inside_surface: bool = True) -> Optional[HoverState]:
        if self.state is None:
            return None
        if not inside_surface:
            self.clear()
            return None

        px, py = self._anchor(x, y)
        self._publish(replace(self.state, x=px, y=py))
        return self.state

    def pointer_leave_annotation(self, related_inside_surface: bool = True):
        """Leaving one annotation only clears when the pointer left the surface too"""
        if not related_inside_surface:
            self.clear()

    def pointer_leave_surface(self):
        self.clear()

    def clear(self):
        if self.state is not None:
            self._publish(None)
