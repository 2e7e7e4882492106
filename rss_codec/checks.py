"""Rule functions shared by the generator and the validator.

Each `check_*` function returns a list of ValidationError records and never
raises, so callers can aggregate the full set of problems in one pass.
"""

import re
from collections.abc import Iterator
from urllib.parse import urlparse

from .config import DEFAULT_LIMITS, FeedLimits
from .dates import is_valid_date
from .errors import FeedSizeExceeded, InvalidUrl, ValidationError, XmlWriteError
from .models import (
    CHANNEL_FIELD_SUPPORT,
    ITEM_FIELD_SUPPORT,
    FieldSupport,
    RssData,
    RssItemField,
    RssVersion,
)

ALLOWED_URL_SCHEMES = ("http", "https")

# Characters outside the XML 1.0 Char production.
XML_ILLEGAL_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")

_PRESENCE_ALIASES = {
    RssItemField.ENCLOSURE_LENGTH: RssItemField.ENCLOSURE_URL,
    RssItemField.ENCLOSURE_TYPE: RssItemField.ENCLOSURE_URL,
    RssItemField.GUID_IS_PERMALINK: RssItemField.GUID,
    RssItemField.SOURCE_TITLE: RssItemField.SOURCE_URL,
}


def validate_url(url: str) -> None:
    """Check that url is absolute, http(s) and has a host.

    Raises:
        InvalidUrl: If the URL is malformed or uses another scheme
    """
    if not url or url != url.strip() or any(ch.isspace() for ch in url):
        raise InvalidUrl(url, "URL must not be empty or contain whitespace")
    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise InvalidUrl(url, str(e))
    if parsed.scheme not in ALLOWED_URL_SCHEMES:
        raise InvalidUrl(url, "URL must use http or https protocol")
    if not parsed.netloc:
        raise InvalidUrl(url, "URL must include a host")


def is_valid_url(url: str) -> bool:
    try:
        validate_url(url)
    except InvalidUrl:
        return False
    return True


def item_label(index: int, name: str) -> str:
    return f"items[{index}].{name}"


def check_required_fields(data: RssData, version: RssVersion) -> list[ValidationError]:
    """Report fields the version requires but the feed leaves empty."""
    errors = []
    present = data.present_fields()
    for field_id, support in CHANNEL_FIELD_SUPPORT.items():
        if support[version] is FieldSupport.REQUIRED and field_id not in present:
            errors.append(
                ValidationError(field_id.value, f"{field_id.value} is required for RSS {version}")
            )

    for index, item in enumerate(data.items):
        item_present = item.present_fields()
        for field_id, support in ITEM_FIELD_SUPPORT.items():
            if support[version] is FieldSupport.REQUIRED and field_id not in item_present:
                errors.append(
                    ValidationError(
                        item_label(index, field_id.value),
                        f"{field_id.value} is required for RSS {version} items",
                    )
                )
    return errors


def check_unsupported_fields(data: RssData, version: RssVersion) -> list[ValidationError]:
    """Report populated fields that RSS `version` cannot carry."""
    errors = []
    for field_id in sorted(data.present_fields(), key=lambda f: f.value):
        if CHANNEL_FIELD_SUPPORT[field_id][version] is FieldSupport.UNSUPPORTED:
            errors.append(
                ValidationError(
                    field_id.value,
                    f"{field_id.value} is not supported in RSS {version} and would be omitted",
                )
            )

    for index, item in enumerate(data.items):
        for field_id in sorted(item.present_fields(), key=lambda f: f.value):
            field_id = _PRESENCE_ALIASES.get(field_id, field_id)
            if ITEM_FIELD_SUPPORT[field_id][version] is FieldSupport.UNSUPPORTED:
                errors.append(
                    ValidationError(
                        item_label(index, field_id.value),
                        f"{field_id.value} is not supported in RSS {version} items and would be omitted",
                    )
                )
    return errors


def _text_fields(data: RssData, limits: FeedLimits) -> Iterator[tuple[str, str | None, int]]:
    yield "title", data.title, limits.max_title_length
    yield "link", data.link, limits.max_link_length
    yield "description", data.description, limits.max_description_length
    for name in (
        "language",
        "copyright",
        "managing_editor",
        "webmaster",
        "pub_date",
        "last_build_date",
        "category",
        "generator",
        "ttl",
    ):
        yield name, getattr(data, name), limits.max_general_length
    yield "docs", data.docs, limits.max_link_length
    yield "atom_link", data.atom_link, limits.max_link_length
    if data.image is not None:
        yield "image_url", data.image.url, limits.max_link_length
        yield "image_title", data.image.title, limits.max_title_length
        yield "image_link", data.image.link, limits.max_link_length

    for index, item in enumerate(data.items):
        yield item_label(index, "title"), item.title, limits.max_title_length
        yield item_label(index, "link"), item.link, limits.max_link_length
        yield item_label(index, "description"), item.description, limits.max_description_length
        yield item_label(index, "author"), item.author, limits.max_general_length
        yield item_label(index, "category"), item.category, limits.max_general_length
        yield item_label(index, "comments"), item.comments, limits.max_link_length
        yield item_label(index, "pub_date"), item.pub_date, limits.max_general_length
        if item.enclosure is not None:
            yield item_label(index, "enclosure_url"), item.enclosure.url, limits.max_link_length
            yield item_label(index, "enclosure_length"), item.enclosure.length, limits.max_general_length
            yield item_label(index, "enclosure_type"), item.enclosure.type, limits.max_general_length
        if item.guid is not None:
            yield item_label(index, "guid"), item.guid.value, limits.max_general_length
        if item.source is not None:
            yield item_label(index, "source_url"), item.source.url, limits.max_link_length
            yield item_label(index, "source_title"), item.source.title, limits.max_title_length


def check_lengths(data: RssData, limits: FeedLimits = DEFAULT_LIMITS) -> list[ValidationError]:
    """Report every text field longer than its ceiling."""
    errors = []
    for name, value, limit in _text_fields(data, limits):
        if value and len(value) > limit:
            errors.append(
                ValidationError(name, f"{name} is {len(value)} characters, maximum is {limit}")
            )
    return errors


def check_text_values(data: RssData) -> list[ValidationError]:
    """Report text that would not come back unchanged from a generated document.

    The parser strips surrounding whitespace and the generator drops
    characters XML 1.0 cannot carry.
    """
    errors = []
    for name, value, _ in _text_fields(data, DEFAULT_LIMITS):
        if not value:
            continue
        if value != value.strip():
            errors.append(ValidationError(name, f"{name} has leading or trailing whitespace"))
        if XML_ILLEGAL_CHARS.search(value):
            errors.append(
                ValidationError(name, f"{name} contains characters XML 1.0 cannot carry")
            )
    return errors


def check_image(data: RssData) -> list[ValidationError]:
    """An image needs all three of url, title and link."""
    errors = []
    if data.image is None:
        return errors
    for part in ("url", "title", "link"):
        if not getattr(data.image, part):
            errors.append(ValidationError(f"image_{part}", f"image requires a {part}"))
    return errors


def _url_fields(data: RssData) -> Iterator[tuple[str, str | None]]:
    yield "link", data.link
    yield "atom_link", data.atom_link
    yield "docs", data.docs
    if data.image is not None:
        yield "image_url", data.image.url
        yield "image_link", data.image.link
    for index, item in enumerate(data.items):
        yield item_label(index, "link"), item.link
        yield item_label(index, "comments"), item.comments
        if item.enclosure is not None:
            yield item_label(index, "enclosure_url"), item.enclosure.url
        if item.source is not None:
            yield item_label(index, "source_url"), item.source.url


def check_urls(data: RssData) -> list[ValidationError]:
    errors = []
    for name, value in _url_fields(data):
        if not value:
            continue
        try:
            validate_url(value)
        except InvalidUrl as e:
            errors.append(ValidationError(name, f"Invalid URL {value!r}: {e.reason}"))
    return errors


def check_dates(data: RssData) -> list[ValidationError]:
    errors = []
    candidates = [("pub_date", data.pub_date), ("last_build_date", data.last_build_date)]
    candidates += [
        (item_label(index, "pub_date"), item.pub_date) for index, item in enumerate(data.items)
    ]
    for name, value in candidates:
        if value and not is_valid_date(value):
            errors.append(ValidationError(name, f"Invalid date format: {value}"))
    return errors


def _is_non_negative_int(value: str) -> bool:
    return value.strip().isdigit()


def check_items(data: RssData) -> list[ValidationError]:
    """Item-level structural rules: identity, duplicates and enclosures."""
    errors = []
    seen_guids: set[str] = set()
    for index, item in enumerate(data.items):
        if not item.title and not item.description:
            errors.append(
                ValidationError(
                    item_label(index, "title"), "item must have a title or a description"
                )
            )
        if item.guid is not None and item.guid.value:
            if item.guid.value in seen_guids:
                errors.append(
                    ValidationError(
                        item_label(index, "guid"), f"Duplicate GUID found: {item.guid.value}"
                    )
                )
            seen_guids.add(item.guid.value)
        if item.enclosure is not None:
            if not item.enclosure.url:
                errors.append(
                    ValidationError(item_label(index, "enclosure_url"), "enclosure requires a url")
                )
            if not _is_non_negative_int(item.enclosure.length or ""):
                errors.append(
                    ValidationError(
                        item_label(index, "enclosure_length"),
                        f"enclosure length must be a non-negative integer, got {item.enclosure.length!r}",
                    )
                )
            if not item.enclosure.type:
                errors.append(
                    ValidationError(item_label(index, "enclosure_type"), "enclosure requires a MIME type")
                )
    return errors


def check_channel_values(data: RssData) -> list[ValidationError]:
    errors = []
    if data.ttl and not _is_non_negative_int(data.ttl):
        errors.append(
            ValidationError("ttl", f"ttl must be a non-negative number of minutes, got {data.ttl!r}")
        )
    return errors


def encoded_size(xml: str) -> int:
    """UTF-8 byte length of a serialized feed.

    Raises:
        XmlWriteError: If the text cannot be encoded as UTF-8
    """
    try:
        return len(xml.encode("utf-8"))
    except UnicodeEncodeError as e:
        raise XmlWriteError(f"feed text is not encodable as UTF-8: {e.reason}")


def check_feed_size(xml: str, limits: FeedLimits = DEFAULT_LIMITS) -> int:
    """Return the feed size in bytes.

    Raises:
        FeedSizeExceeded: If the feed is larger than limits.max_feed_size
    """
    size = encoded_size(xml)
    if size > limits.max_feed_size:
        raise FeedSizeExceeded(size, limits.max_feed_size)
    return size
