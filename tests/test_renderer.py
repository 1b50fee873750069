"""
Unit tests for annotation rendering.
"""

from termlens.core.config import StyleConfig
from termlens.core.detector import TermDetector, TermOccurrence
from termlens.core.document import Container, Document, TextRun
from termlens.core.renderer import AnnotationRenderer, is_annotation, strip_annotations


def _annotations(doc):
    return [node for node in doc.walk() if is_annotation(node)]


def _annotate(catalog, content):
    doc = Document.from_html(content)
    occurrences = TermDetector(catalog).detect(doc.flatten())
    return doc, occurrences, AnnotationRenderer(catalog).render(doc, occurrences)


def test_scenario_wraps_catalog_terms(catalog):
    doc, _, rendered = _annotate(catalog, "<p>I use React and javascript daily.</p>")

    wrappers = _annotations(rendered)
    catalog_wrappers = [w for w in wrappers if w.attrs["data-kind"] == "catalog"]

    assert [w.attrs["data-term"] for w in catalog_wrappers] == ["react", "javascript"]
    assert [w.children[0].text for w in catalog_wrappers] == ["React", "javascript"]
    assert rendered.flatten() == doc.flatten()


def test_heuristic_wrappers_are_classified(catalog):
    _, _, rendered = _annotate(catalog, "<p>I use React and javascript daily.</p>")

    daily = [w for w in _annotations(rendered) if w.attrs["data-term"] == "daily"]
    assert len(daily) == 1
    assert "glossary-term--heuristic" in daily[0].attrs["class"]


def test_structure_outside_text_is_preserved(catalog):
    _, _, rendered = _annotate(catalog, "<p>I use <strong>React</strong> daily.</p>")

    paragraph = rendered.children[0]
    strong = paragraph.children[1]
    assert strong.tag == "strong"
    assert is_annotation(strong.children[0])
    assert strong.children[0].children[0].text == "React"


def test_occurrence_across_containers_wraps_each_fragment(ml_catalog):
    doc = Document.from_html("<p>machine <em>learning</em> rocks</p>")
    occurrences = [TermOccurrence("machine learning", 0, 16)]

    rendered = AnnotationRenderer(ml_catalog).render(doc, occurrences)

    wrappers = _annotations(rendered)
    assert [w.children[0].text for w in wrappers] == ["machine ", "learning"]
    assert {w.attrs["data-term"] for w in wrappers} == {"machine learning"}
    assert rendered.flatten() == doc.flatten()


def test_no_nested_or_overlapping_wrappers(catalog):
    _, _, rendered = _annotate(
        catalog,
        "<p>deep learning and machine learning with <b>neural network</b> models</p>",
    )

    for wrapper in _annotations(rendered):
        inner = Document(wrapper.children)
        assert not _annotations(inner)

    terms = [w.attrs["data-term"] for w in _annotations(rendered)]
    assert terms.count("machine learning") == 1
    assert "learning" not in terms


def test_render_is_idempotent(catalog):
    doc, occurrences, first = _annotate(catalog, "<p>React <em>hooks</em> and props and state</p>")
    renderer = AnnotationRenderer(catalog)
    detector = TermDetector(catalog)

    second = renderer.render(first, detector.detect(first.flatten()))

    assert second.flatten() == first.flatten()
    assert second.to_html() == first.to_html()


def test_strip_restores_original(catalog):
    doc, _, rendered = _annotate(catalog, "<p>I use <strong>React</strong> and javascript daily.</p>")

    assert strip_annotations(rendered).to_html() == doc.to_html()
    assert "glossary-term" not in strip_annotations(rendered).to_html()


def test_render_does_not_mutate_input(catalog):
    doc = Document.from_html("<p>React rocks</p>")
    before = doc.to_html()

    AnnotationRenderer(catalog).render(doc, [TermOccurrence("react", 0, 5)])

    assert doc.to_html() == before


def test_strip_keeps_inner_structure():
    doc = Document([Container("p", {}, [
        Container("span", {"class": "glossary-term", "data-term": "x"}, [Container("b", {}, [TextRun("bold")])]),
    ])])

    stripped = strip_annotations(doc)

    assert stripped.to_html() == "<p><b>bold</b></p>"


def test_overlapping_input_occurrences_are_skipped(catalog):
    doc = Document.from_html("<p>machine learning</p>")
    occurrences = [TermOccurrence("machine learning", 0, 16), TermOccurrence("learning", 8, 16)]

    rendered = AnnotationRenderer(catalog).render(doc, occurrences)

    assert [w.attrs["data-term"] for w in _annotations(rendered)] == ["machine learning"]


def test_dark_mode_background(catalog):
    renderer = AnnotationRenderer(catalog, StyleConfig(dark_mode=True))

    wrapper = renderer.make_annotation("react", "React")

    assert "#3b4252" in wrapper.attrs["style"]
    assert wrapper.attrs["data-kind"] == "catalog"


def test_no_occurrences_returns_stripped_copy(catalog):
    doc = Document.from_html('<p><span class="glossary-term" data-term="react">React</span> x</p>')

    rendered = AnnotationRenderer(catalog).render(doc, [])

    assert rendered.to_html() == "<p>React x</p>"
