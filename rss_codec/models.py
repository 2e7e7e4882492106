"""Data models for RSS feeds."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .config import FeedLimits
from .dates import parse_date
from .errors import InvalidRssVersion, UnknownField
from .text import clean_html_content


class RssVersion(Enum):
    """The five RSS schema generations."""

    RSS0_90 = "0.90"
    RSS0_91 = "0.91"
    RSS0_92 = "0.92"
    RSS1_0 = "1.0"
    RSS2_0 = "2.0"

    @classmethod
    def from_str(cls, value: str) -> "RssVersion":
        try:
            return cls(value.strip())
        except (ValueError, AttributeError):
            raise InvalidRssVersion(str(value))

    @classmethod
    def default(cls) -> "RssVersion":
        return cls.RSS2_0

    def as_str(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


class RssDataField(str, Enum):
    """Settable channel attributes, keyed by their snake_case name."""

    TITLE = "title"
    LINK = "link"
    DESCRIPTION = "description"
    LANGUAGE = "language"
    COPYRIGHT = "copyright"
    MANAGING_EDITOR = "managing_editor"
    WEBMASTER = "webmaster"
    PUB_DATE = "pub_date"
    LAST_BUILD_DATE = "last_build_date"
    CATEGORY = "category"
    GENERATOR = "generator"
    DOCS = "docs"
    TTL = "ttl"
    IMAGE_URL = "image_url"
    IMAGE_TITLE = "image_title"
    IMAGE_LINK = "image_link"
    ATOM_LINK = "atom_link"

    @classmethod
    def from_name(cls, name: "str | RssDataField") -> "RssDataField":
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            raise UnknownField(str(name))


class RssItemField(str, Enum):
    """Settable item attributes, keyed by their snake_case name."""

    TITLE = "title"
    LINK = "link"
    DESCRIPTION = "description"
    AUTHOR = "author"
    CATEGORY = "category"
    COMMENTS = "comments"
    ENCLOSURE_URL = "enclosure_url"
    ENCLOSURE_LENGTH = "enclosure_length"
    ENCLOSURE_TYPE = "enclosure_type"
    GUID = "guid"
    GUID_IS_PERMALINK = "guid_is_permalink"
    PUB_DATE = "pub_date"
    SOURCE_URL = "source_url"
    SOURCE_TITLE = "source_title"

    @classmethod
    def from_name(cls, name: "str | RssItemField") -> "RssItemField":
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            raise UnknownField(str(name))


class FieldSupport(Enum):
    """How a schema version treats a field."""

    UNSUPPORTED = "unsupported"
    OPTIONAL = "optional"
    REQUIRED = "required"


_ALL_VERSIONS = tuple(RssVersion)
_V0_91_UP = (RssVersion.RSS0_91, RssVersion.RSS0_92, RssVersion.RSS2_0)
_V0_92_UP = (RssVersion.RSS0_92, RssVersion.RSS2_0)
_V2_ONLY = (RssVersion.RSS2_0,)


def _support(legal, required=()) -> dict[RssVersion, FieldSupport]:
    table = {}
    for version in RssVersion:
        if version in required:
            table[version] = FieldSupport.REQUIRED
        elif version in legal:
            table[version] = FieldSupport.OPTIONAL
        else:
            table[version] = FieldSupport.UNSUPPORTED
    return table


_IMAGE_SUPPORT = _support(_V2_ONLY)

CHANNEL_FIELD_SUPPORT: dict[RssDataField, dict[RssVersion, FieldSupport]] = {
    RssDataField.TITLE: _support(_ALL_VERSIONS, _ALL_VERSIONS),
    RssDataField.LINK: _support(_ALL_VERSIONS, _ALL_VERSIONS),
    RssDataField.DESCRIPTION: _support(_ALL_VERSIONS, _ALL_VERSIONS),
    RssDataField.LANGUAGE: _support(_V0_91_UP, (RssVersion.RSS0_91,)),
    RssDataField.COPYRIGHT: _support(_V0_91_UP),
    RssDataField.MANAGING_EDITOR: _support(_V0_91_UP),
    RssDataField.WEBMASTER: _support(_V0_91_UP),
    RssDataField.PUB_DATE: _support(_V0_91_UP),
    RssDataField.LAST_BUILD_DATE: _support(_V0_91_UP),
    RssDataField.DOCS: _support(_V0_91_UP),
    RssDataField.CATEGORY: _support(_V0_92_UP),
    RssDataField.GENERATOR: _support(_V2_ONLY),
    RssDataField.TTL: _support(_V2_ONLY),
    RssDataField.IMAGE_URL: _IMAGE_SUPPORT,
    RssDataField.IMAGE_TITLE: _IMAGE_SUPPORT,
    RssDataField.IMAGE_LINK: _IMAGE_SUPPORT,
    RssDataField.ATOM_LINK: _support(_V2_ONLY),
}

_ITEM_IDENTITY_REQUIRED = (RssVersion.RSS0_90, RssVersion.RSS0_91, RssVersion.RSS1_0)
_ENCLOSURE_SUPPORT = _support(_V0_92_UP)
_GUID_SUPPORT = _support(_V2_ONLY)
_SOURCE_SUPPORT = _support(_V0_92_UP)

ITEM_FIELD_SUPPORT: dict[RssItemField, dict[RssVersion, FieldSupport]] = {
    RssItemField.TITLE: _support(_ALL_VERSIONS, _ITEM_IDENTITY_REQUIRED),
    RssItemField.LINK: _support(_ALL_VERSIONS, _ITEM_IDENTITY_REQUIRED),
    RssItemField.DESCRIPTION: _support(
        (RssVersion.RSS0_91, RssVersion.RSS0_92, RssVersion.RSS1_0, RssVersion.RSS2_0)
    ),
    RssItemField.AUTHOR: _support(_V2_ONLY),
    RssItemField.CATEGORY: _support(_V0_92_UP),
    RssItemField.COMMENTS: _support(_V2_ONLY),
    RssItemField.ENCLOSURE_URL: _ENCLOSURE_SUPPORT,
    RssItemField.ENCLOSURE_LENGTH: _ENCLOSURE_SUPPORT,
    RssItemField.ENCLOSURE_TYPE: _ENCLOSURE_SUPPORT,
    RssItemField.GUID: _GUID_SUPPORT,
    RssItemField.GUID_IS_PERMALINK: _GUID_SUPPORT,
    RssItemField.PUB_DATE: _support(_V2_ONLY),
    RssItemField.SOURCE_URL: _SOURCE_SUPPORT,
    RssItemField.SOURCE_TITLE: _SOURCE_SUPPORT,
}


def field_support(
    version: RssVersion, field_id: RssDataField | RssItemField
) -> FieldSupport:
    """Look up how `version` treats a channel or item field."""
    if isinstance(field_id, RssItemField):
        return ITEM_FIELD_SUPPORT[field_id][version]
    return CHANNEL_FIELD_SUPPORT[field_id][version]


def is_field_legal(version: RssVersion, field_id: RssDataField | RssItemField) -> bool:
    return field_support(version, field_id) is not FieldSupport.UNSUPPORTED


@dataclass
class Image:
    """Channel image (url/title/link triple)."""

    url: str
    title: str = ""
    link: str = ""


@dataclass
class Enclosure:
    """Media attachment on an item."""

    url: str
    length: str = "0"
    type: str = ""


@dataclass
class Guid:
    """Globally unique item identifier."""

    value: str
    is_permalink: bool = True


@dataclass
class Source:
    """The channel an item was republished from."""

    url: str
    title: str = ""


def _parse_bool(value: str) -> bool:
    return str(value).strip().lower() not in ("false", "0", "no")


@dataclass
class RssItem:
    """Represents a single RSS feed item."""

    title: str = ""
    link: str = ""
    description: str = ""
    author: str | None = None
    category: str | None = None
    comments: str | None = None
    enclosure: Enclosure | None = None
    guid: Guid | None = None
    pub_date: str | None = None
    source: Source | None = None

    def set(self, field_id: "RssItemField | str", value: Any) -> "RssItem":
        """Set one attribute by field name and return the item for chaining.

        Raises:
            UnknownField: If the name is not an RssItemField
        """
        field_id = RssItemField.from_name(field_id)
        text = "" if value is None else str(value)

        if field_id in (RssItemField.TITLE, RssItemField.LINK, RssItemField.DESCRIPTION):
            setattr(self, field_id.value, text)
        elif field_id in (
            RssItemField.AUTHOR,
            RssItemField.CATEGORY,
            RssItemField.COMMENTS,
            RssItemField.PUB_DATE,
        ):
            setattr(self, field_id.value, text or None)
        elif field_id is RssItemField.ENCLOSURE_URL:
            if not text:
                self.enclosure = None
            elif self.enclosure is None:
                self.enclosure = Enclosure(url=text)
            else:
                self.enclosure.url = text
        elif field_id is RssItemField.ENCLOSURE_LENGTH:
            self.enclosure = self.enclosure or Enclosure(url="")
            self.enclosure.length = text
        elif field_id is RssItemField.ENCLOSURE_TYPE:
            self.enclosure = self.enclosure or Enclosure(url="")
            self.enclosure.type = text
        elif field_id is RssItemField.GUID:
            if not text:
                self.guid = None
            elif self.guid is None:
                self.guid = Guid(value=text)
            else:
                self.guid.value = text
        elif field_id is RssItemField.GUID_IS_PERMALINK:
            flag = value if isinstance(value, bool) else _parse_bool(text)
            self.guid = self.guid or Guid(value="")
            self.guid.is_permalink = flag
        elif field_id is RssItemField.SOURCE_URL:
            if not text:
                self.source = None
            elif self.source is None:
                self.source = Source(url=text)
            else:
                self.source.url = text
        elif field_id is RssItemField.SOURCE_TITLE:
            self.source = self.source or Source(url="")
            self.source.title = text
        return self

    def update(self, values: dict[str, Any]) -> "RssItem":
        for name, value in values.items():
            self.set(name, value)
        return self

    def parsed_pub_date(self) -> datetime | None:
        """Return pub_date as a datetime, or None when the item has no date.

        Raises:
            DateParseError: If pub_date is set but unparsable
        """
        if not self.pub_date:
            return None
        return parse_date(self.pub_date)

    def plain_description(self) -> str:
        return clean_html_content(self.description)

    def present_fields(self) -> set[RssItemField]:
        """Fields that carry a value and would be rendered."""
        present = set()
        for name in ("title", "link", "description", "author", "category", "comments", "pub_date"):
            if getattr(self, name):
                present.add(RssItemField(name))
        if self.enclosure is not None and self.enclosure.url:
            present.add(RssItemField.ENCLOSURE_URL)
        if self.guid is not None and self.guid.value:
            present.add(RssItemField.GUID)
        if self.source is not None and self.source.url:
            present.add(RssItemField.SOURCE_URL)
        return present

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


_CHANNEL_TEXT_FIELDS = (
    "title",
    "link",
    "description",
    "language",
    "copyright",
    "managing_editor",
    "webmaster",
    "pub_date",
    "last_build_date",
    "category",
    "generator",
    "docs",
    "ttl",
    "atom_link",
)


@dataclass
class RssData:
    """Represents one feed (channel) and its ordered items."""

    version: RssVersion = RssVersion.RSS2_0
    title: str = ""
    link: str = ""
    description: str = ""
    language: str | None = None
    copyright: str | None = None
    managing_editor: str | None = None
    webmaster: str | None = None
    pub_date: str | None = None
    last_build_date: str | None = None
    category: str | None = None
    generator: str | None = None
    docs: str | None = None
    ttl: str | None = None
    image: Image | None = None
    atom_link: str | None = None
    items: list[RssItem] = field(default_factory=list)

    def set(self, field_id: "RssDataField | str", value: Any) -> "RssData":
        """Set one channel attribute by field name and return the feed.

        Raises:
            UnknownField: If the name is not an RssDataField
        """
        field_id = RssDataField.from_name(field_id)
        text = "" if value is None else str(value)

        if field_id in (RssDataField.TITLE, RssDataField.LINK, RssDataField.DESCRIPTION):
            setattr(self, field_id.value, text)
        elif field_id is RssDataField.IMAGE_URL:
            if not text:
                self.image = None
            elif self.image is None:
                self.image = Image(url=text)
            else:
                self.image.url = text
        elif field_id is RssDataField.IMAGE_TITLE:
            self.image = self.image or Image(url="")
            self.image.title = text
        elif field_id is RssDataField.IMAGE_LINK:
            self.image = self.image or Image(url="")
            self.image.link = text
        else:
            setattr(self, field_id.value, text or None)
        return self

    def update(self, values: dict[str, Any]) -> "RssData":
        for name, value in values.items():
            self.set(name, value)
        return self

    def set_image(self, url: str, title: str = "", link: str = "") -> "RssData":
        self.image = Image(url=url, title=title, link=link)
        return self

    def set_item_field(self, field_id: "RssItemField | str", value: Any) -> "RssData":
        """Set a field on the last item, creating one if the feed has none."""
        if not self.items:
            self.items.append(RssItem())
        self.items[-1].set(field_id, value)
        return self

    def add_item(self, item: RssItem) -> "RssData":
        self.items.append(item)
        return self

    def remove_item(self, guid: str) -> bool:
        """Remove every item whose guid matches; True if any was removed."""
        before = len(self.items)
        self.items = [
            item for item in self.items if item.guid is None or item.guid.value != guid
        ]
        return len(self.items) < before

    @property
    def item_count(self) -> int:
        return len(self.items)

    def clear_items(self) -> None:
        self.items.clear()

    def plain_description(self) -> str:
        return clean_html_content(self.description)

    def validate(self, version: RssVersion | None = None, limits: FeedLimits | None = None) -> None:
        """Validate this feed (see FeedValidator.validate).

        Raises:
            ValidationErrors: With every violation found
        """
        from .validator import FeedValidator

        FeedValidator(limits).validate(self, version)

    def present_fields(self) -> set[RssDataField]:
        """Channel fields that carry a value and would be rendered."""
        present = {RssDataField(name) for name in _CHANNEL_TEXT_FIELDS if getattr(self, name)}
        if self.image is not None and self.image.url:
            present.add(RssDataField.IMAGE_URL)
        return present

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["version"] = self.version.value
        return data
