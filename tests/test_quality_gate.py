"""Tests for the content quality gate."""

from __future__ import annotations

from processing.quality_gate import QualityGate


gate = QualityGate()


def test_rejects_empty_and_whitespace():
    assert gate.passes("") is False
    assert gate.passes("   \n\t  ") is False
    assert gate.passes(" " * 400) is False


def test_rejects_text_shorter_than_200_chars():
    assert gate.passes("a" * 199) is False


def test_accepts_200_chars_without_block_phrases():
    assert gate.passes("a" * 200) is True


def test_surrounding_whitespace_counts_towards_length():
    text = "a" * 199 + " "
    assert len(text) == 200
    assert gate.passes(text) is True
    assert gate.passes("  " + "a" * 198) is True
    assert gate.passes(" " + "a" * 198) is False


def test_block_phrases_are_case_insensitive():
    body = "x" * 300
    for phrase in (
        "Please Enable JavaScript",
        "YOU MUST BE LOGGED IN",
        "403 Forbidden",
        "access DENIED",
        "Manage your cookies",
    ):
        assert gate.passes(f"{body} {phrase} {body}") is False


def test_matched_phrase_reports_the_hit():
    assert gate.matched_phrase("Sorry, Access Denied for this page") == "access denied"
    assert gate.matched_phrase("A perfectly normal abstract") is None


def test_custom_thresholds():
    custom = QualityGate(min_chars=10, block_phrases=["Paywall"])
    assert custom.passes("long enough text") is True
    assert custom.passes("behind a paywall, sorry") is False
    assert custom.passes("short") is False


def test_from_settings_uses_extraction_thresholds():
    from config import ExtractionSettings

    configured = QualityGate.from_settings(ExtractionSettings(min_chars=5, block_phrases=["captcha"]))
    assert configured.passes("plain words") is True
    assert configured.passes("Solve the CAPTCHA first") is False
