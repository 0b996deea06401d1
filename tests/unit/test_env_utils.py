"""Tests for environment variable parsing helpers."""

from __future__ import annotations

import logging

import pytest

from utils.env_utils import env_bool, env_int, env_value

_NAME = "PLANWIRE_TEST_SETTING"


def test_env_value_strips_and_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure blank values read as unset."""
    monkeypatch.setenv(_NAME, "  x  ")
    assert env_value(_NAME) == "x"
    monkeypatch.setenv(_NAME, "   ")
    assert env_value(_NAME) is None
    monkeypatch.delenv(_NAME)
    assert env_value(_NAME) is None


@pytest.mark.parametrize(("raw", "expected"), [("1", True), ("Yes", True), ("off", False)])
def test_env_bool_parses_common_spellings(
    monkeypatch: pytest.MonkeyPatch, raw: str, *, expected: bool
) -> None:
    """Ensure boolean spellings are recognized case-insensitively."""
    monkeypatch.setenv(_NAME, raw)
    assert env_bool(_NAME, default=not expected) is expected


def test_env_bool_invalid_falls_back(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    """Ensure invalid booleans log a warning and use the default."""
    monkeypatch.setenv(_NAME, "maybe")
    with caplog.at_level(logging.WARNING, logger="utils.env_utils"):
        assert env_bool(_NAME, default=True) is True
    assert "Invalid boolean" in caplog.text


def test_env_int_minimum_and_invalid(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    """Ensure invalid or too-small integers fall back to the default."""
    monkeypatch.setenv(_NAME, "12")
    assert env_int(_NAME, default=3, minimum=1) == 12
    monkeypatch.setenv(_NAME, "0")
    with caplog.at_level(logging.WARNING, logger="utils.env_utils"):
        assert env_int(_NAME, default=3, minimum=1) == 3
        monkeypatch.setenv(_NAME, "twelve")
        assert env_int(_NAME, default=3) == 3
    assert "below minimum" in caplog.text
    assert "Invalid integer" in caplog.text
