"""
TermLens - term-aware rich-text editing engine
"""

from .core.caret import CaretPosition, Selection, capture, restore
from .core.config import TermLensConfig, default_config
from .core.detector import TermDetector, TermOccurrence
from .core.document import Container, Document, TextRun
from .core.editor import ContentChange, EditorSession
from .core.formatting import toggle_format
from .core.glossary import TermCatalog
from .core.hover import HoverController, HoverState
from .core.renderer import AnnotationRenderer, strip_annotations
from .core.scheduler import RescanScheduler, SchedulerState

__version__ = "1.0.0"

__all__ = [
    "AnnotationRenderer",
    "CaretPosition",
    "Container",
    "ContentChange",
    "Document",
    "EditorSession",
    "HoverController",
    "HoverState",
    "RescanScheduler",
    "SchedulerState",
    "Selection",
    "TermCatalog",
    "TermDetector",
    "TermLensConfig",
    "TermOccurrence",
    "TextRun",
    "capture",
    "default_config",
    "restore",
    "strip_annotations",
    "toggle_format",
]
