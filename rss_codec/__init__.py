"""
rss_codec

Generate and parse RSS 0.90, 0.91, 0.92, 1.0 and 2.0 feeds.

Example
-------
from rss_codec import RssData, RssItem, RssVersion, generate_rss, parse_rss

feed = (
    RssData(version=RssVersion.RSS2_0)
    .set("title", "Example")
    .set("link", "https://example.com")
    .set("description", "An example feed")
    .add_item(RssItem(title="Hello", link="https://example.com/hello"))
)

xml = generate_rss(feed)
assert parse_rss(xml).title == "Example"
"""
from .config import (
    MAX_DESCRIPTION_LENGTH,
    MAX_FEED_SIZE,
    MAX_GENERAL_LENGTH,
    MAX_LINK_LENGTH,
    MAX_TITLE_LENGTH,
    FeedLimits,
)
from .dates import format_rfc2822, parse_date
from .errors import (
    Custom,
    DateParseError,
    DateSortError,
    FeedSizeExceeded,
    InvalidInput,
    InvalidRssVersion,
    InvalidUrl,
    IoError,
    ItemValidationError,
    MissingField,
    RssError,
    UnknownElement,
    UnknownField,
    Utf8Error,
    ValidationError,
    ValidationErrors,
    XmlParseError,
    XmlWriteError,
)
from .generator import FeedGenerator, generate_rss, quick_rss
from .models import (
    Enclosure,
    FieldSupport,
    Guid,
    Image,
    RssData,
    RssDataField,
    RssItem,
    RssItemField,
    RssVersion,
    Source,
    field_support,
    is_field_legal,
)
from .parser import ElementHandler, FeedParser, ItemElementHandler, ParserConfig, parse_rss
from .validator import FeedValidator, check_date_order, validate, validate_feed

__version__ = "0.1.0"

__all__ = [
    "MAX_DESCRIPTION_LENGTH",
    "MAX_FEED_SIZE",
    "MAX_GENERAL_LENGTH",
    "MAX_LINK_LENGTH",
    "MAX_TITLE_LENGTH",
    "Custom",
    "DateParseError",
    "DateSortError",
    "ElementHandler",
    "Enclosure",
    "FeedGenerator",
    "FeedLimits",
    "FeedParser",
    "FeedSizeExceeded",
    "FeedValidator",
    "FieldSupport",
    "Guid",
    "Image",
    "InvalidInput",
    "InvalidRssVersion",
    "InvalidUrl",
    "IoError",
    "ItemElementHandler",
    "ItemValidationError",
    "MissingField",
    "ParserConfig",
    "RssData",
    "RssDataField",
    "RssError",
    "RssItem",
    "RssItemField",
    "RssVersion",
    "Source",
    "UnknownElement",
    "UnknownField",
    "Utf8Error",
    "ValidationError",
    "ValidationErrors",
    "XmlParseError",
    "XmlWriteError",
    "check_date_order",
    "field_support",
    "format_rfc2822",
    "generate_rss",
    "is_field_legal",
    "parse_date",
    "parse_rss",
    "quick_rss",
    "validate",
    "validate_feed",
]
