"""Configuration management for the RSS codec."""

import os
from dataclasses import dataclass

from .errors import InvalidInput

# Character ceilings for free-text fields.
MAX_TITLE_LENGTH = 500
MAX_LINK_LENGTH = 2048
MAX_DESCRIPTION_LENGTH = 100_000
MAX_GENERAL_LENGTH = 1_000

# Byte ceiling for a serialized feed (UTF-8).
MAX_FEED_SIZE = 5 * 1024 * 1024

ENV_PREFIX = "RSS_CODEC_"


@dataclass(frozen=True)
class FeedLimits:
    """Size and length ceilings shared by the generator, parser and validator."""

    max_title_length: int = MAX_TITLE_LENGTH
    max_link_length: int = MAX_LINK_LENGTH
    max_description_length: int = MAX_DESCRIPTION_LENGTH
    max_general_length: int = MAX_GENERAL_LENGTH
    max_feed_size: int = MAX_FEED_SIZE

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "FeedLimits":
        """Build limits from RSS_CODEC_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            FeedLimits with every override applied

        Raises:
            InvalidInput: If an override is not a positive integer
        """
        environ = os.environ if environ is None else environ
        overrides = {}
        for name in cls.__dataclass_fields__:
            key = f"{ENV_PREFIX}{name.upper()}"
            raw = environ.get(key)
            if raw is None or not raw.strip():
                continue
            try:
                value = int(raw)
            except ValueError:
                raise InvalidInput(f"{key} must be an integer, got {raw!r}")
            if value <= 0:
                raise InvalidInput(f"{key} must be positive, got {value}")
            overrides[name] = value
        return cls(**overrides)


DEFAULT_LIMITS = FeedLimits()
