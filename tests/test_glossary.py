"""
Unit tests for the term catalog.
"""

import json

import pytest

from termlens.core.glossary import TermCatalog, normalize_term


def test_lookup_is_case_insensitive(catalog):
    assert catalog.lookup("React") == catalog.lookup("react")
    assert catalog.lookup("REACT").startswith("A JavaScript library")


def test_missing_term_is_none(catalog):
    assert catalog.lookup("sandwich") is None
    assert "sandwich" not in catalog


def test_keys_are_lowercase(catalog):
    keys = catalog.keys()
    assert "machine learning" in keys
    assert all(key == key.lower() for key in keys)
    assert len(catalog) == len(keys)


def test_multi_word_lookup_normalizes_whitespace(catalog):
    assert catalog.lookup("Machine \n  Learning") == catalog.lookup("machine learning")


def test_custom_glossary_overrides_defaults():
    custom = TermCatalog(custom_glossary={"React": "My own definition", "  Edge   Case ": "x"})
    assert custom.lookup("react") == "My own definition"
    assert "edge case" in custom.keys()


def test_without_defaults_only_custom_terms():
    custom = TermCatalog(custom_glossary={"widget": "A small gadget"}, include_defaults=False)
    assert custom.keys() == frozenset({"widget"})


def test_normalize_term():
    assert normalize_term("  Deep\tLearning ") == "deep learning"
    assert normalize_term("") == ""


def test_from_yaml_file(tmp_path):
    path = tmp_path / "terms.yaml"
    path.write_text('Kubernetes: "Container orchestration system"\n', encoding="utf-8")

    loaded = TermCatalog.from_file(path)

    assert loaded.lookup("kubernetes") == "Container orchestration system"
    assert loaded.lookup("react") is not None


def test_from_json_file_without_defaults(tmp_path):
    path = tmp_path / "terms.json"
    path.write_text(json.dumps({"Docker": "Container runtime"}), encoding="utf-8")

    loaded = TermCatalog.from_file(path, include_defaults=False)

    assert loaded.keys() == frozenset({"docker"})


def test_from_file_rejects_non_mapping(tmp_path):
    path = tmp_path / "terms.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError):
        TermCatalog.from_file(path)


def test_from_missing_file_raises_value_error(tmp_path):
    with pytest.raises(ValueError):
        TermCatalog.from_file(tmp_path / "missing.yaml")


def test_search_ranks_exact_and_prefix_first(catalog):
    results = catalog.search_terms("api")
    assert results[0][0] == "api"

    terms = [term for term, _ in catalog.search_terms("learning")]
    assert set(terms[:2]) == {"deep learning", "machine learning"}


def test_search_empty_query(catalog):
    assert catalog.search_terms("   ") == []


def test_export_json_roundtrip(catalog):
    exported = json.loads(catalog.export_glossary("json"))
    assert exported["react"] == catalog.lookup("react")


def test_export_csv_quotes_definitions_with_commas(catalog):
    lines = catalog.export_glossary("csv").splitlines()
    assert lines[0] == "term,definition"
    data_science = next(line for line in lines if line.startswith("data science,"))
    assert data_science.startswith('data science,"')
    assert data_science.endswith('"')


def test_export_html_and_yaml(catalog):
    assert catalog.export_glossary("html").startswith("<dl>")
    assert "react:" in catalog.export_glossary("yaml")


def test_export_unknown_format(catalog):
    with pytest.raises(ValueError):
        catalog.export_glossary("pdf")


def test_stats(catalog):
    stats = catalog.get_stats()
    assert stats["total_terms"] == len(catalog)
    assert stats["multi_word"] + stats["single_word"] == stats["total_terms"]
