"""
TermLens Inline Formatting
Bold, italic and underline toggles over flattened-text ranges
"""

import logging
from typing import Iterator, List, Tuple

from .document import Container, Document, Node, TextRun, merge_adjacent_runs

logger = logging.getLogger(__name__)

# Toolbar command names and the tag each one produces
FORMAT_TAGS = {
    "bold": "b",
    "italic": "i",
    "underline": "u",
}

# Tags a surface may already use for the same format
TAG_ALIASES = {
    "b": frozenset({"b", "strong"}),
    "i": frozenset({"i", "em"}),
    "u": frozenset({"u"}),
}


def resolve_tag(name: str) -> str:
    """Map a command name ("bold") or tag ("strong") to the tag we emit"""
    name = name.lower()
    tag = FORMAT_TAGS.get(name, name)
    for canonical, aliases in TAG_ALIASES.items():
        if tag in aliases:
            return canonical
    raise ValueError(f"Unsupported format: {name}")


def _runs_with_format(nodes: List[Node], tags, inside: bool = False) -> Iterator[Tuple[TextRun, bool]]:
    for node in nodes:
        if isinstance(node, TextRun):
            yield node, inside
        else:
            yield from _runs_with_format(node.children, tags, inside or node.tag in tags)


def is_formatted(document: Document, start: int, end: int, name: str) -> bool:
    """True when every character in [start, end) already carries the format"""
    tags = TAG_ALIASES[resolve_tag(name)]
    offset = 0
    seen = False
    for run, inside in _runs_with_format(document.children, tags):
        run_start, offset = offset, offset + len(run.text)
        if run.text and run_start < end and offset > start:
            if not inside:
                return False
            seen = True
    return seen


def _merge_wrappers(nodes: List[Node], tag: str) -> List[Node]:
    merged: List[Node] = []
    for node in nodes:
        if (isinstance(node, Container) and node.tag == tag and not node.attrs
                and merged and isinstance(merged[-1], Container)
                and merged[-1].tag == tag and not merged[-1].attrs):
            merged[-1] = Container(tag, {}, merge_adjacent_runs(merged[-1].children + node.children))
            continue
        merged.append(node)
    return merged


def _wrap(nodes: List[Node], tag: str, start: int, end: int, walk: List[int], inside: bool) -> List[Node]:
    tags = TAG_ALIASES[tag]
    wrapped: List[Node] = []
    for node in nodes:
        if isinstance(node, Container):
            children = _wrap(node.children, tag, start, end, walk, inside or node.tag in tags)
            wrapped.append(Container(node.tag, dict(node.attrs), children, node.raw))
            continue

        base = walk[0]
        stop = base + len(node.text)
        walk[0] = stop
        lo, hi = max(start, base), min(end, stop)
        if inside or lo >= hi:
            wrapped.append(TextRun(node.text))
            continue

        if lo > base:
            wrapped.append(TextRun(node.text[:lo - base]))
        wrapped.append(Container(tag, {}, [TextRun(node.text[lo - base:hi - base])]))
        if hi < stop:
            wrapped.append(TextRun(node.text[hi - base:]))
    return _merge_wrappers(wrapped, tag)


def apply_format(document: Document, start: int, end: int, name: str) -> Document:
    """
    Wrap the text in [start, end) with the format's tag

    Each covered run fragment gets its own wrapper, so block structure is
    never broken; adjacent wrappers are merged. Text already carrying the
    format is left alone.
    """
    tag = resolve_tag(name)
    return Document(_wrap(document.children, tag, start, end, [0], False))


def _formatted_ranges(nodes: List[Node], tags, offset: int, ranges: List[Tuple[int, int]]) -> int:
    for node in nodes:
        if isinstance(node, TextRun):
            offset += len(node.text)
            continue
        begin = offset
        offset = _formatted_ranges(node.children, tags, offset, ranges)
        if node.tag in tags:
            ranges.append((begin, offset))
    return offset


def _unwrap(nodes: List[Node], tags, start: int, end: int, walk: List[int]) -> List[Node]:
    unwrapped: List[Node] = []
    for node in nodes:
        if isinstance(node, TextRun):
            walk[0] += len(node.text)
            unwrapped.append(TextRun(node.text))
            continue
        begin = walk[0]
        children = _unwrap(node.children, tags, start, end, walk)
        if node.tag in tags and begin < end and walk[0] > start:
            unwrapped.extend(children)
        else:
            unwrapped.append(Container(node.tag, dict(node.attrs), children, node.raw))
    return merge_adjacent_runs(unwrapped)


def remove_format(document: Document, start: int, end: int, name: str) -> Document:
    """
    Remove the format from [start, end)

    Wrappers reaching outside the range are unwrapped whole and the parts
    outside the range are re-wrapped with the canonical tag.
    """
    tag = resolve_tag(name)
    tags = TAG_ALIASES[tag]

    ranges: List[Tuple[int, int]] = []
    _formatted_ranges(document.children, tags, 0, ranges)
    touching = [(begin, stop) for begin, stop in ranges if begin < end and stop > start]

    result = Document(_unwrap(document.children, tags, start, end, [0]))
    for begin, stop in touching:
        if begin < start:
            result = apply_format(result, begin, start, tag)
        if stop > end:
            result = apply_format(result, end, stop, tag)
    return result


def toggle_format(document: Document, start: int, end: int, name: str) -> Document:
    """
    Toggle a format over a range, the way a toolbar button does

    Args:
        document: Document to format, left untouched
        start: Range start in flattened-text coordinates
        end: Range end in flattened-text coordinates
        name: "bold", "italic", "underline" or one of their tags

    Returns:
        New document; a collapsed range returns an unchanged copy
    """
    tag = resolve_tag(name)
    if start > end:
        start, end = end, start
    if start == end:
        return document.copy()

    if is_formatted(document, start, end, tag):
        logger.debug(f"Removing <{tag}> from [{start}, {end})")
        return remove_format(document, start, end, tag)

    logger.debug(f"Applying <{tag}> to [{start}, {end})")
    return apply_format(document, start, end, tag)
