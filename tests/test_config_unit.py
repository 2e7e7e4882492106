"""Unit tests for configuration management."""

import os
from unittest.mock import patch

import pytest

from rss_codec.config import (
    DEFAULT_LIMITS,
    MAX_DESCRIPTION_LENGTH,
    MAX_FEED_SIZE,
    MAX_GENERAL_LENGTH,
    MAX_LINK_LENGTH,
    MAX_TITLE_LENGTH,
    FeedLimits,
)
from rss_codec.errors import InvalidInput


class TestConfigUnit:
    """Unit tests for FeedLimits."""

    def test_default_limits(self):
        """The defaults are the documented ceilings."""
        assert MAX_TITLE_LENGTH == 500
        assert MAX_LINK_LENGTH == 2048
        assert MAX_DESCRIPTION_LENGTH == 100_000
        assert MAX_GENERAL_LENGTH == 1_000
        assert MAX_FEED_SIZE == 5 * 1024 * 1024

        assert DEFAULT_LIMITS == FeedLimits(
            max_title_length=500,
            max_link_length=2048,
            max_description_length=100_000,
            max_general_length=1_000,
            max_feed_size=5 * 1024 * 1024,
        )

    def test_from_env_returns_defaults_when_no_env_var(self):
        # Arrange & Act: Clear environment variables
        with patch.dict(os.environ, {}, clear=True):
            limits = FeedLimits.from_env()

        # Assert
        assert limits == DEFAULT_LIMITS

    def test_from_env_reads_overrides(self):
        with patch.dict(
            os.environ,
            {"RSS_CODEC_MAX_TITLE_LENGTH": "80", "RSS_CODEC_MAX_FEED_SIZE": "4096"},
            clear=True,
        ):
            limits = FeedLimits.from_env()

        assert limits.max_title_length == 80
        assert limits.max_feed_size == 4096
        assert limits.max_link_length == MAX_LINK_LENGTH

    def test_from_env_accepts_explicit_mapping(self):
        limits = FeedLimits.from_env({"RSS_CODEC_MAX_GENERAL_LENGTH": " 250 "})

        assert limits.max_general_length == 250

    def test_from_env_ignores_blank_values(self):
        limits = FeedLimits.from_env({"RSS_CODEC_MAX_TITLE_LENGTH": "  "})

        assert limits.max_title_length == MAX_TITLE_LENGTH

    @pytest.mark.parametrize("raw", ["abc", "1.5", "0", "-10"])
    def test_from_env_rejects_invalid_values(self, raw):
        with pytest.raises(InvalidInput) as exc_info:
            FeedLimits.from_env({"RSS_CODEC_MAX_LINK_LENGTH": raw})

        assert "RSS_CODEC_MAX_LINK_LENGTH" in str(exc_info.value)

    def test_limits_are_immutable(self):
        with pytest.raises(AttributeError):
            DEFAULT_LIMITS.max_title_length = 10
