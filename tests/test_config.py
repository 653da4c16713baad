"""Tests for configuration parsing and segmentation presets."""

from __future__ import annotations

import dataclasses

import pytest

from transcript_sync import config
from transcript_sync.config import (
    LIMIT_PRESETS,
    PARAGRAPH_LIMITS,
    STANDALONE_LIMITS,
    get_limits,
)


class TestEnvParsing:
    def test_float_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("SEGMENT_TEST_VALUE", raising=False)
        assert config._env_float("SEGMENT_TEST_VALUE", 1.5) == 1.5

    def test_float_override(self, monkeypatch):
        monkeypatch.setenv("SEGMENT_TEST_VALUE", " 0.75 ")
        assert config._env_float("SEGMENT_TEST_VALUE", 1.5) == 0.75

    def test_int_override(self, monkeypatch):
        monkeypatch.setenv("SEGMENT_TEST_VALUE", "42")
        assert config._env_int("SEGMENT_TEST_VALUE", 1) == 42

    def test_invalid_value_names_variable(self, monkeypatch):
        monkeypatch.setenv("SEGMENT_TEST_VALUE", "six")
        with pytest.raises(ValueError, match="SEGMENT_TEST_VALUE"):
            config._env_float("SEGMENT_TEST_VALUE", 1.0)
        with pytest.raises(ValueError, match="SEGMENT_TEST_VALUE"):
            config._env_int("SEGMENT_TEST_VALUE", 1)


class TestPresets:
    def test_paths_use_different_soft_breaks(self):
        assert PARAGRAPH_LIMITS.soft_break == config.SOFT_BREAK_PUNCTUATION
        assert STANDALONE_LIMITS.soft_break == config.SOFT_BREAK_SPACING

    def test_get_limits(self):
        assert get_limits("paragraph") is PARAGRAPH_LIMITS
        assert get_limits("standalone") is STANDALONE_LIMITS
        assert set(LIMIT_PRESETS) == {"paragraph", "standalone"}

    def test_unknown_preset(self):
        with pytest.raises(ValueError, match="Available: paragraph, standalone"):
            get_limits("karaoke")

    def test_limits_are_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            PARAGRAPH_LIMITS.max_chars = 10
