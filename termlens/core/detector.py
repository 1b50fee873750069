"""
TermLens Term Detector
Finds catalog terms and frequency-derived candidate terms in flattened text
"""

import re
import logging
from collections import Counter
from dataclasses import dataclass
from functools import lru_cache
from typing import FrozenSet, List, Optional, Pattern, Tuple

from .config import DetectionConfig
from .glossary import TermCatalog

logger = logging.getLogger(__name__)

WORD_RE = re.compile(r"\w+")

CATALOG = "catalog"
HEURISTIC = "heuristic"


@dataclass(frozen=True)
class TermOccurrence:
    """Half-open [start, end) span of a term in flattened-text coordinates"""

    term: str
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start

    def overlaps(self, other: 'TermOccurrence') -> bool:
        return self.start < other.end and other.start < self.end


def build_term_pattern(term: str) -> Pattern:
    """
    Compile a case-insensitive whole-word matcher for a term

    Words are escaped individually and joined by any run of whitespace, so
    "machine learning" also matches "Machine\\n  learning".
    """
    body = r"\s+".join(re.escape(word) for word in term.split())
    return re.compile(rf"(?<!\w){body}(?!\w)", re.IGNORECASE)


class TermDetector:
    """
    Lexical term detection over flattened document text
    """

    def __init__(self, catalog: TermCatalog, config: Optional[DetectionConfig] = None):
        """
        Initialize term detector

        Args:
            catalog: Term catalog supplying the fixed part of the vocabulary
            config: Detection parameters (top-K, minimum word length)
        """
        self.catalog = catalog
        self.config = config or DetectionConfig()

        # Per-term patterns survive vocabulary changes; the ordered set is rebuilt
        self._pattern_for = lru_cache(maxsize=self.config.pattern_cache_size)(build_term_pattern)
        self._vocabulary: Optional[FrozenSet[str]] = None
        self._matchers: List[Tuple[str, Pattern]] = []

    def candidate_terms(self, text: str) -> List[str]:
        """
        Rank words of the text by frequency

        Args:
            text: Flattened document text

        Returns:
            Up to top_k lowercase words longer than min_word_length, most frequent first
        """
        min_length = self.config.min_word_length
        counts = Counter(
            word for word in WORD_RE.findall(text.lower()) if len(word) > min_length
        )
        return [word for word, _ in counts.most_common(self.config.top_k)]

    def classify(self, term: str) -> str:
        return CATALOG if term in self.catalog else HEURISTIC

    def _matchers_for(self, vocabulary: FrozenSet[str]) -> List[Tuple[str, Pattern]]:
        if vocabulary != self._vocabulary:
            # Longest terms claim their spans first
            ordered = sorted(vocabulary, key=lambda term: (-len(term), term))
            self._matchers = [(term, self._pattern_for(term)) for term in ordered]
            self._vocabulary = vocabulary
            logger.debug(f"Rebuilt matcher set for {len(ordered)} terms")
        return self._matchers

    def detect(self, text: str) -> List[TermOccurrence]:
        """
        Find non-overlapping term occurrences

        Args:
            text: Flattened document text

        Returns:
            Occurrences sorted by start, longer span first on ties
        """
        if not text:
            return []

        vocabulary = frozenset(
            term for term in self.catalog.keys() | set(self.candidate_terms(text)) if term
        )

        claimed = bytearray(len(text))
        occurrences = []

        for term, pattern in self._matchers_for(vocabulary):
            for match in pattern.finditer(text):
                start, end = match.span()
                if start == end or claimed.find(1, start, end) != -1:
                    continue
                claimed[start:end] = b"\x01" * (end - start)
                occurrences.append(TermOccurrence(term, start, end))

        occurrences.sort(key=lambda occ: (occ.start, -occ.length))

        logger.debug(f"Detected {len(occurrences)} term occurrences")
        return occurrences
