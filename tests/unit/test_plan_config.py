"""Tests for codec and validation limits."""

from __future__ import annotations

import msgspec
import pytest

from plan_ir.config import (
    DEFAULT_MAX_DEPTH,
    ENV_ALLOW_TEST_FIXTURES,
    ENV_MAX_DEPTH,
    PlanIRConfig,
    resolve_config,
)


def test_defaults() -> None:
    """Ensure the default limits."""
    config = resolve_config(None)
    assert config.max_depth == DEFAULT_MAX_DEPTH
    assert config.allow_test_fixtures is False


def test_from_env_applies_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure environment variables override the defaults."""
    monkeypatch.setenv(ENV_MAX_DEPTH, "32")
    monkeypatch.setenv(ENV_ALLOW_TEST_FIXTURES, "true")
    assert PlanIRConfig.from_env() == PlanIRConfig(max_depth=32, allow_test_fixtures=True)


def test_from_env_ignores_invalid_depth(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure a non-positive depth falls back to the default."""
    monkeypatch.setenv(ENV_MAX_DEPTH, "0")
    monkeypatch.delenv(ENV_ALLOW_TEST_FIXTURES, raising=False)
    assert PlanIRConfig.from_env().max_depth == DEFAULT_MAX_DEPTH


def test_max_depth_lower_bound_on_convert() -> None:
    """Ensure converted configs enforce a positive depth."""
    with pytest.raises(msgspec.ValidationError):
        msgspec.convert({"max_depth": 0}, type=PlanIRConfig)


def test_max_depth_lower_bound_on_construction() -> None:
    """Ensure directly built configs enforce a positive depth."""
    with pytest.raises(ValueError, match="max_depth"):
        PlanIRConfig(max_depth=0)
