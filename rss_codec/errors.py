"""Error taxonomy for the RSS codec."""

import logging
from dataclasses import dataclass


class RssError(Exception):
    """Base class for every error raised by the codec."""

    label = "RSS error"
    http_status = 500

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(f"{self.label}: {detail}" if detail else self.label)

    def to_http_status(self) -> int:
        """Map the error to an HTTP status code for network-facing callers."""
        return self.http_status

    def log(self, logger: logging.Logger | None = None) -> None:
        """Log the error at ERROR level."""
        (logger or logging.getLogger("rss_codec")).error(
            "RSS error occurred: %s", self
        )


class InvalidInput(RssError):
    label = "Invalid input data provided"
    http_status = 400


class FeedSizeExceeded(InvalidInput):
    """Raised when a serialized feed is larger than the configured ceiling."""

    label = "Feed size exceeded"
    http_status = 413

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"{size} bytes exceeds the maximum of {limit} bytes")


class InvalidRssVersion(RssError):
    label = "Invalid RSS version"
    http_status = 400

    def __init__(self, value: str):
        self.value = value
        super().__init__(value)


class InvalidUrl(RssError):
    label = "Invalid URL provided"
    http_status = 400

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        super().__init__(f"{url} ({reason})" if reason else url)


class IoError(RssError):
    label = "I/O error occurred"


class ItemValidationError(RssError):
    label = "Item validation error"
    http_status = 400

    def __init__(self, detail: str, index: int | None = None):
        self.index = index
        if index is not None:
            detail = f"item {index}: {detail}"
        super().__init__(detail)


class MissingField(RssError):
    label = "A required field is missing"
    http_status = 400

    def __init__(self, field: str):
        self.field = field
        super().__init__(field)


class UnknownElement(RssError):
    label = "Unknown XML element found"

    def __init__(self, tag: str, reason: str = ""):
        self.tag = tag
        self.reason = reason
        super().__init__(f"{tag}: {reason}" if reason else tag)


class UnknownField(RssError):
    label = "Unknown field encountered"

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)


class XmlParseError(RssError):
    label = "XML parse error occurred"

    def __init__(self, detail: str, position: tuple[int, int] | None = None):
        self.position = position
        if position is not None:
            detail = f"{detail} (line {position[0]}, column {position[1]})"
        super().__init__(detail)


class XmlWriteError(RssError):
    label = "XML error occurred"


class Utf8Error(RssError):
    label = "UTF-8 conversion error occurred"

    def __init__(self, detail: str, offset: int | None = None):
        self.offset = offset
        if offset is not None:
            detail = f"{detail} at byte offset {offset}"
        super().__init__(detail)


class DateParseError(RssError):
    label = "Date parse error"
    http_status = 400

    def __init__(self, value: str):
        self.value = value
        super().__init__(value)


class Custom(RssError):
    label = "Custom error"


@dataclass(frozen=True)
class ValidationError:
    """One rule violation, keyed by the offending field."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ValidationErrors(RssError):
    """Every rule violation found in a single validation pass."""

    label = "Validation errors"
    http_status = 400

    def __init__(self, errors: list[ValidationError]):
        self.errors = list(errors)
        super().__init__("; ".join(str(error) for error in self.errors))

    def __iter__(self):
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def by_field(self) -> dict[str, list[str]]:
        """Group the error messages by field name."""
        grouped: dict[str, list[str]] = {}
        for error in self.errors:
            grouped.setdefault(error.field, []).append(error.message)
        return grouped


class DateSortError(RssError):
    """Raised for the first pair of items that breaks chronological order."""

    label = "Date sort error"

    def __init__(self, index: int, next_index: int, previous: str, current: str):
        self.index = index
        self.next_index = next_index
        self.previous = previous
        self.current = current
        super().__init__(
            f"items {index} -> {next_index} out of order ({previous} then {current})"
        )
