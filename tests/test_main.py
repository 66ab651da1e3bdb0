"""Tests for the command line entry point."""

from __future__ import annotations

import json
import sys
from typing import List, Optional

import pytest

import main as cli
from config import Settings
from intelligence.pipeline import SourcingPipeline
from processing.embedder import BaseEmbedder


class _Embedder(BaseEmbedder):
    async def aembed(self, text: str, input_type: str) -> List[float]:
        return [1.0, 0.0]


class _Keywords:
    async def generate(self, thesis: str) -> str:
        return "coral reefs"

    async def aclose(self) -> None:
        return None


class _Scraper:
    async def search(self, query: str, max_results: Optional[int] = None) -> List[str]:
        return []

    async def close(self) -> None:
        return None


class _Metadata:
    async def aclose(self) -> None:
        return None


def _offline_pipeline(settings=None) -> SourcingPipeline:
    return SourcingPipeline(
        Settings(),
        keyword_generator=_Keywords(),
        scraper=_Scraper(),
        embedder=_Embedder("fake-embed"),
        metadata_extractor=_Metadata(),
    )


@pytest.fixture
def offline_cli(monkeypatch):
    monkeypatch.setattr(cli, "setup_logger", lambda *args, **kwargs: None)
    monkeypatch.setattr(cli.SourcingPipeline, "from_settings", staticmethod(_offline_pipeline))


def test_blank_thesis_prints_json_error(offline_cli, monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["thesis-sourcer", "search", "--thesis", "   "])

    with pytest.raises(SystemExit) as exc_info:
        cli.main()

    assert exc_info.value.code == 1
    err = capsys.readouterr().err
    assert json.loads(err) == {"error": "thesis must not be empty"}


def test_search_prints_ranked_articles(offline_cli, monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["thesis-sourcer", "search", "--thesis", "Coral reef decline"])

    with pytest.raises(SystemExit) as exc_info:
        cli.main()

    assert exc_info.value.code == 0
    assert json.loads(capsys.readouterr().out) == []
