"""Tests for the FastAPI entry point."""

from __future__ import annotations

import importlib

import pytest
from fastapi.testclient import TestClient

from models import ArticleRecord
from utils.exceptions import EmbeddingDimensionError, UpstreamError

webapp_module = importlib.import_module("webapp.app")


class _FakePipeline:
    def __init__(self, result=None, error: Exception = None):
        self.result = result or []
        self.error = error
        self.theses = []

    async def run(self, thesis: str):
        self.theses.append(thesis)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def client_for():
    def _make(pipeline: _FakePipeline) -> TestClient:
        webapp_module.app.dependency_overrides[webapp_module.get_pipeline] = lambda: pipeline
        return TestClient(webapp_module.app)

    yield _make
    webapp_module.app.dependency_overrides.clear()


def test_health(client_for):
    client = client_for(_FakePipeline())
    assert client.get("/health").json() == {"status": "ok"}


def test_get_articles_returns_ranked_records(client_for):
    article = ArticleRecord(
        title="Coral decline",
        authors=["A. Reef"],
        abstract="Warming seas bleach corals.",
        release_year="2020",
        publisher="Marine Letters",
        link="https://example.com/coral",
        relevance=87.25,
    )
    pipeline = _FakePipeline(result=[article])
    client = client_for(pipeline)

    response = client.post("/getArticles", json={"thesis": "  Warming oceans drive coral loss "})

    assert response.status_code == 200
    assert response.json() == [
        {
            "title": "Coral decline",
            "authors": ["A. Reef"],
            "abstract": "Warming seas bleach corals.",
            "release_year": "2020",
            "publisher": "Marine Letters",
            "link": "https://example.com/coral",
            "relevance": 87.25,
        }
    ]
    assert pipeline.theses == ["Warming oceans drive coral loss"]


def test_empty_result_is_200(client_for):
    client = client_for(_FakePipeline(result=[]))
    response = client.post("/getArticles", json={"thesis": "anything"})
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.parametrize("body", [{}, {"thesis": ""}, {"thesis": "   "}])
def test_invalid_thesis_is_422(client_for, body):
    client = client_for(_FakePipeline())
    assert client.post("/getArticles", json=body).status_code == 422


def test_upstream_failure_is_502(client_for):
    client = client_for(_FakePipeline(error=UpstreamError("model down", stage="keywords")))
    response = client.post("/getArticles", json={"thesis": "anything"})
    assert response.status_code == 502
    assert "keywords" in response.json()["detail"]


def test_dimension_mismatch_is_500(client_for):
    error = EmbeddingDimensionError("mismatch", left=2, right=3)
    client = client_for(_FakePipeline(error=error))
    response = client.post("/getArticles", json={"thesis": "anything"})
    assert response.status_code == 500


def test_cors_allows_any_origin(client_for):
    client = client_for(_FakePipeline())
    response = client.options(
        "/getArticles",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
