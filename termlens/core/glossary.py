"""
TermLens Term Catalog
Static term -> definition mapping consulted by detection, rendering and hover
"""

import re
import json
import logging
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Tuple, Union

import yaml

logger = logging.getLogger(__name__)

# Embedded glossary of computing terms
GLOSSARY_YAML = """
# AI & data
artificial intelligence: "A branch of computer science dealing with the simulation of intelligent behavior in computers."
machine learning: "A type of artificial intelligence that enables computers to learn without being explicitly programmed."
neural network: "A computing system inspired by biological neural networks that constitute animal brains."
algorithm: "A process or set of rules to be followed in calculations or other problem-solving operations."
data science: "An interdisciplinary field that uses scientific methods, processes, algorithms and systems to extract knowledge from data."
deep learning: "A subset of machine learning based on artificial neural networks with representation learning."

# Web & infrastructure
api: "Application Programming Interface - a set of protocols and tools for building software applications."
cloud computing: "The delivery of computing services over the internet including storage, processing power, and applications."
blockchain: "A distributed ledger technology that maintains a continuously growing list of records secured using cryptography."
react: "A JavaScript library for building user interfaces, particularly web applications."
javascript: "A high-level programming language commonly used for web development."
css: "Cascading Style Sheets - a language used for describing the presentation of web pages."
html: "HyperText Markup Language - the standard markup language for creating web pages."
database: "An organized collection of structured information or data stored electronically."
frontend: "The part of a website or application that users interact with directly."
backend: "The server-side of an application that handles data processing and storage."
responsive design: "An approach to web design that makes web pages render well on various devices and screen sizes."
user experience: "The overall experience of a person using a product, especially in terms of how easy or pleasing it is to use."
version control: "A system that records changes to files over time so you can recall specific versions later."

# Software construction
framework: "A platform for developing software applications that provides a foundation of pre-written code."
library: "A collection of pre-written code that developers can use to optimize tasks."
component: "A reusable piece of code that defines how a certain part of your UI should appear."
state: "Data that determines how a component renders and behaves at any given time."
props: "Arguments passed into React components, similar to function arguments."
hooks: "Functions that let you use state and other React features in functional components."
"""

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_term(term: str) -> str:
    """Lowercase a term and collapse internal whitespace"""
    return _WHITESPACE_RE.sub(" ", (term or "").strip()).lower()


class TermCatalog:
    """
    Read-only term -> definition mapping for one editing session
    """

    def __init__(self, custom_glossary: Optional[Dict[str, str]] = None,
                 include_defaults: bool = True):
        """
        Initialize term catalog

        Args:
            custom_glossary: Optional custom glossary to add/override
            include_defaults: Whether to load the embedded glossary
        """
        glossary = {}

        if include_defaults:
            base_glossary = yaml.safe_load(GLOSSARY_YAML) or {}
            for term, definition in base_glossary.items():
                glossary[normalize_term(term)] = str(definition)

        if custom_glossary:
            for term, definition in custom_glossary.items():
                key = normalize_term(term)
                if key:
                    glossary[key] = str(definition)

        self._glossary = glossary
        self._keys = frozenset(glossary)

        logger.info(f"Loaded glossary with {len(self._glossary)} terms")

    @classmethod
    def from_file(cls, path: Union[str, Path], include_defaults: bool = True) -> 'TermCatalog':
        """Load a YAML or JSON term mapping and merge it over the embedded glossary"""
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                if path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ValueError(f"Failed to load glossary from {path}: {e}")

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Glossary file {path} must contain a term -> definition mapping")

        return cls(custom_glossary=data, include_defaults=include_defaults)

    def lookup(self, term: str) -> Optional[str]:
        """
        Get definition for a term

        Args:
            term: Term to look up, any case

        Returns:
            Definition or None if the term is not in the catalog
        """
        return self._glossary.get(normalize_term(term))

    def keys(self) -> FrozenSet[str]:
        """All catalog terms, lowercase"""
        return self._keys

    def items(self):
        return self._glossary.items()

    def __contains__(self, term) -> bool:
        return isinstance(term, str) and normalize_term(term) in self._glossary

    def __len__(self) -> int:
        return len(self._glossary)

    def search_terms(self, query: str) -> List[Tuple[str, str]]:
        """
        Search for terms containing query string

        Args:
            query: Search query

        Returns:
            List of (term, definition) tuples, best matches first
        """
        query_lower = normalize_term(query)
        if not query_lower:
            return []

        results = [
            (term, definition)
            for term, definition in self._glossary.items()
            if query_lower in term or query_lower in definition.lower()
        ]

        # Sort by relevance
        def sort_key(item):
            term, _ = item

            # Exact match gets highest priority
            if term == query_lower:
                return (0, len(term), term)
            # Term starts with query
            elif term.startswith(query_lower):
                return (1, len(term), term)
            # Query in term
            elif query_lower in term:
                return (2, len(term), term)
            # Query in definition
            else:
                return (3, len(term), term)

        results.sort(key=sort_key)

        return results

    def export_glossary(self, format: str = "json") -> str:
        """
        Export glossary in different formats

        Args:
            format: Export format ("json", "yaml", "csv", "html")

        Returns:
            Formatted glossary string
        """
        glossary = dict(sorted(self._glossary.items()))

        if format == "json":
            return json.dumps(glossary, indent=2, ensure_ascii=False)

        elif format == "yaml":
            return yaml.dump(glossary, default_flow_style=False, allow_unicode=True, sort_keys=True)

        elif format == "csv":
            lines = ["term,definition"]
            for term, definition in glossary.items():
                # Escape quotes and commas
                definition = definition.replace('"', '""')
                if ',' in definition or '"' in definition:
                    definition = f'"{definition}"'
                lines.append(f"{term},{definition}")
            return "\n".join(lines)

        elif format == "html":
            html = "<dl>\n"
            for term, definition in glossary.items():
                html += f"  <dt><strong>{term}</strong></dt>\n"
                html += f"  <dd>{definition}</dd>\n"
            html += "</dl>"
            return html

        else:
            raise ValueError(f"Unknown format: {format}")

    def get_stats(self) -> Dict[str, int]:
        """Get statistics about the catalog"""
        multi_word = sum(1 for term in self._glossary if " " in term)
        return {
            'total_terms': len(self._glossary),
            'single_word': len(self._glossary) - multi_word,
            'multi_word': multi_word,
        }
