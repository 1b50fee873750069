"""
Tests for the Flask shell around the engine.
"""

import pytest

from termlens import api_server
from termlens.core.config import SchedulerConfig, TermLensConfig
from termlens.core.glossary import TermCatalog


@pytest.fixture
def client():
    assert api_server.initialize_components(
        custom_config=TermLensConfig(scheduler=SchedulerConfig(debounce_ms=300)),
        custom_catalog=TermCatalog(),
    )
    api_server.app.config["TESTING"] = True
    with api_server.app.test_client() as client:
        yield client


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json()["status"] == "healthy"


def test_annotate_scenario(client):
    response = client.post("/api/annotate", json={
        "content": "<p>I use React and javascript daily.</p>",
        "selection": {"start": 8, "end": 8},
    })
    data = response.get_json()

    assert response.status_code == 200
    assert data["content"] == "<p>I use React and javascript daily.</p>"
    assert 'data-term="react"' in data["annotated_content"]
    assert data["plain_text"] == "I use React and javascript daily."
    assert [(o["term"], o["classification"]) for o in data["occurrences"]] == [
        ("react", "catalog"),
        ("javascript", "catalog"),
        ("daily", "heuristic"),
    ]
    assert data["selection"] == {"start": 8, "end": 8}


def test_annotate_without_selection(client):
    data = client.post("/api/annotate", json={"content": "<p>hooks</p>"}).get_json()
    assert data["selection"] is None


def test_annotate_requires_content(client):
    response = client.post("/api/annotate", json={})
    assert response.status_code == 400


def test_annotate_rejects_bad_selection(client):
    response = client.post("/api/annotate", json={"content": "<p>x</p>", "selection": "end"})
    assert response.status_code == 400


def test_define_catalog_and_fallback(client):
    react = client.get("/api/define/react").get_json()
    assert react["classification"] == "catalog"

    dataset = client.get("/api/define/dataset").get_json()
    assert dataset["classification"] == "heuristic"
    assert dataset["definition"] == "Information that can be processed by a computer"


def test_glossary_export(client):
    assert client.get("/api/glossary").get_json()["react"].startswith("A JavaScript library")

    csv = client.get("/api/glossary?format=csv")
    assert csv.status_code == 200
    assert csv.get_data(as_text=True).startswith("term,definition")

    assert client.get("/api/glossary?format=pdf").status_code == 400


def test_glossary_search(client):
    data = client.get("/api/glossary/search?q=api").get_json()
    assert data["results"][0]["term"] == "api"

    assert client.get("/api/glossary/search").status_code == 400
