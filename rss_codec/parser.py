"""RSS feed parsing with pluggable handlers for extension elements."""

import io
import xml.etree.ElementTree as ET
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, runtime_checkable

import defusedxml.ElementTree as defused_ET
from defusedxml import DefusedXmlException

from .checks import encoded_size
from .errors import (
    FeedSizeExceeded,
    InvalidInput,
    MissingField,
    UnknownElement,
    Utf8Error,
    XmlParseError,
)
from .generator import ATOM_NS, RDF_NS, RSS_0_90_NS, RSS_1_0_NS
from .logging_config import create_execution_logger
from .models import (
    Enclosure,
    Guid,
    Image,
    RssData,
    RssDataField,
    RssItem,
    RssItemField,
    RssVersion,
    Source,
)

USERLAND_NS = "http://backend.userland.com/rss2"
RSS_NAMESPACES = frozenset({"", RSS_1_0_NS, RSS_0_90_NS, USERLAND_NS})

_EVENTS = ("start", "end", "start-ns", "end-ns")

CHANNEL_FIELD_TAGS = {
    "title": RssDataField.TITLE,
    "link": RssDataField.LINK,
    "description": RssDataField.DESCRIPTION,
    "language": RssDataField.LANGUAGE,
    "copyright": RssDataField.COPYRIGHT,
    "managingEditor": RssDataField.MANAGING_EDITOR,
    "webMaster": RssDataField.WEBMASTER,
    "pubDate": RssDataField.PUB_DATE,
    "lastBuildDate": RssDataField.LAST_BUILD_DATE,
    "category": RssDataField.CATEGORY,
    "generator": RssDataField.GENERATOR,
    "docs": RssDataField.DOCS,
    "ttl": RssDataField.TTL,
}

ITEM_FIELD_TAGS = {
    "title": RssItemField.TITLE,
    "link": RssItemField.LINK,
    "description": RssItemField.DESCRIPTION,
    "author": RssItemField.AUTHOR,
    "category": RssItemField.CATEGORY,
    "comments": RssItemField.COMMENTS,
    "pubDate": RssItemField.PUB_DATE,
    "guid": RssItemField.GUID,
    "enclosure": RssItemField.ENCLOSURE_URL,
    "source": RssItemField.SOURCE_URL,
}

IMAGE_FIELD_TAGS = ("url", "title", "link")

BUILTIN_CHANNEL_TAGS = frozenset(CHANNEL_FIELD_TAGS) | {
    "channel",
    "item",
    "items",
    "image",
    "atom:link",
}
BUILTIN_ITEM_TAGS = frozenset(ITEM_FIELD_TAGS)

REQUIRED_CHANNEL_TAGS = ("title", "link", "description")


@runtime_checkable
class ElementHandler(Protocol):
    """Handles a channel-level element the parser does not understand."""

    def handle(self, tag: str, text: str, feed: RssData) -> bool | None:
        ...


@runtime_checkable
class ItemElementHandler(Protocol):
    """Handles an item-level element the parser does not understand."""

    def handle(self, tag: str, text: str, item: RssItem) -> bool | None:
        ...


ChannelHandler = ElementHandler | Callable[[str, str, RssData], bool | None]
ItemHandler = ItemElementHandler | Callable[[str, str, RssItem], bool | None]


def _check_handler_tag(tag: str, builtins: frozenset[str]) -> None:
    if not tag:
        raise InvalidInput("Handler tag must not be empty")
    if tag in builtins:
        raise InvalidInput(f"Cannot register a handler for built-in element <{tag}>")


@dataclass
class ParserConfig:
    """Parser options.

    Handlers are keyed by the tag as written in the document (``dc:creator``)
    or by Clark notation (``{http://purl.org/dc/elements/1.1/}creator``).
    Registering a tag twice replaces the earlier handler; tags naming a
    built-in element are rejected.
    """

    custom_handlers: dict[str, ChannelHandler] = field(default_factory=dict)
    item_handlers: dict[str, ItemHandler] = field(default_factory=dict)
    max_input_size: int | None = None

    def __post_init__(self):
        for tag in self.custom_handlers:
            _check_handler_tag(tag, BUILTIN_CHANNEL_TAGS)
        for tag in self.item_handlers:
            _check_handler_tag(tag, BUILTIN_ITEM_TAGS)

    def register_handler(self, tag: str, handler: ChannelHandler) -> "ParserConfig":
        _check_handler_tag(tag, BUILTIN_CHANNEL_TAGS)
        self.custom_handlers[tag] = handler
        return self

    def register_item_handler(self, tag: str, handler: ItemHandler) -> "ParserConfig":
        _check_handler_tag(tag, BUILTIN_ITEM_TAGS)
        self.item_handlers[tag] = handler
        return self


class _Kind(Enum):
    ROOT = "root"
    CHANNEL = "channel"
    CHANNEL_FIELD = "channel_field"
    ATOM_LINK = "atom_link"
    IMAGE = "image"
    IMAGE_FIELD = "image_field"
    ITEM = "item"
    ITEM_FIELD = "item_field"
    EXTENSION = "extension"
    ITEM_EXTENSION = "item_extension"
    SKIP = "skip"


@dataclass
class _Frame:
    kind: _Kind
    name: str
    local: str


@dataclass
class _ParseState:
    data: RssData = field(default_factory=RssData)
    stack: list[_Frame] = field(default_factory=list)
    namespaces: list[tuple[str, str]] = field(default_factory=list)
    item: RssItem | None = None
    image_parts: dict[str, str] = field(default_factory=dict)
    seen: set[str] = field(default_factory=set)
    has_channel: bool = False
    is_rdf: bool = False


def _split_tag(tag: str) -> tuple[str, str]:
    if tag.startswith("{"):
        uri, _, local = tag[1:].partition("}")
        return uri, local
    return "", tag


def _element_text(elem: ET.Element) -> str:
    return "".join(elem.itertext()).strip()


def _parse_permalink(value: str | None) -> bool:
    if value is None:
        return True
    return value.strip().lower() != "false"


class FeedParser:
    """Deserializes RSS 0.90-2.0 documents into RssData."""

    def __init__(self, config: ParserConfig | None = None, execution_id: str | None = None):
        """Initialize FeedParser with configuration.

        Args:
            config: Handlers and input ceiling
            execution_id: Execution ID for logging context
        """
        self.config = config or ParserConfig()
        self.logger = create_execution_logger("parser", execution_id)

    def parse(self, content: str | bytes) -> RssData:
        """Parse an RSS document.

        Field lengths and URL formats are not checked here; run the
        validator on the result for that.

        Args:
            content: XML document as text or UTF-8 bytes

        Returns:
            The parsed feed, items in document order

        Raises:
            Utf8Error: If the input is not valid UTF-8
            XmlParseError: If the document is not well-formed XML
            InvalidRssVersion: If the rss version attribute is unknown
            MissingField: If the channel lacks title, link or description
            UnknownElement: If a registered handler fails
        """
        text = self._decode(content)
        self.logger.log_execution_start(input_length=len(text))

        if self.config.max_input_size is not None:
            size = encoded_size(text)
            if size > self.config.max_input_size:
                raise FeedSizeExceeded(size, self.config.max_input_size)

        state = _ParseState()
        events = defused_ET.iterparse(io.StringIO(text), events=_EVENTS)
        try:
            for event, payload in events:
                if event == "start":
                    self._on_start(state, payload)
                elif event == "end":
                    self._on_end(state, payload)
                elif event == "start-ns":
                    state.namespaces.append(payload)
                elif event == "end-ns":
                    state.namespaces.pop()
        except defused_ET.ParseError as e:
            self.logger.warning(f"Malformed XML: {e}", error=str(e))
            raise XmlParseError(str(e), getattr(e, "position", None))
        except DefusedXmlException as e:
            self.logger.warning(f"Forbidden XML construct: {e}", error=str(e))
            raise XmlParseError(f"forbidden XML construct: {e}")

        if not state.has_channel:
            raise MissingField("channel")
        for tag in REQUIRED_CHANNEL_TAGS:
            if tag not in state.seen:
                raise MissingField(tag)

        self.logger.log_execution_end(
            feed_version=state.data.version.value, items_count=len(state.data.items)
        )
        return state.data

    def _decode(self, content: str | bytes) -> str:
        if isinstance(content, (bytes, bytearray, memoryview)):
            try:
                return bytes(content).decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise Utf8Error(e.reason, e.start)
        try:
            content.encode("utf-8")
        except UnicodeEncodeError as e:
            offset = len(content[: e.start].encode("utf-8", "surrogatepass"))
            raise Utf8Error(e.reason, offset)
        return content

    def _qualified_name(self, state: _ParseState, uri: str, local: str) -> str:
        if not uri:
            return local
        for prefix, namespace in reversed(state.namespaces):
            if namespace == uri:
                return f"{prefix}:{local}" if prefix else local
        return f"{{{uri}}}{local}"

    def _root_kind(self, state: _ParseState, elem: ET.Element, uri: str, local: str) -> _Kind:
        if local == "rss":
            version = elem.get("version")
            state.data.version = (
                RssVersion.from_str(version) if version is not None else RssVersion.default()
            )
            return _Kind.ROOT
        if uri == RDF_NS and local == "RDF":
            state.is_rdf = True
            return _Kind.ROOT
        raise InvalidInput(f"Unsupported root element: {elem.tag}")

    def _classify(self, state: _ParseState, elem: ET.Element, uri: str, local: str) -> _Kind:
        if not state.stack:
            return self._root_kind(state, elem, uri, local)

        parent = state.stack[-1].kind
        is_rss = uri in RSS_NAMESPACES

        if parent in (_Kind.ROOT, _Kind.CHANNEL):
            if is_rss and local == "item":
                state.item = RssItem()
                return _Kind.ITEM
            if is_rss and local == "image":
                state.image_parts = {}
                return _Kind.IMAGE
            if parent is _Kind.ROOT and is_rss and local == "channel":
                state.has_channel = True
                if state.is_rdf:
                    state.data.version = (
                        RssVersion.RSS0_90 if uri == RSS_0_90_NS else RssVersion.RSS1_0
                    )
                return _Kind.CHANNEL
            if parent is _Kind.CHANNEL and is_rss and local in CHANNEL_FIELD_TAGS:
                return _Kind.CHANNEL_FIELD
            if parent is _Kind.CHANNEL and is_rss and local == "items":
                return _Kind.SKIP
            if parent is _Kind.CHANNEL and uri == ATOM_NS and local == "link":
                return _Kind.ATOM_LINK
            return _Kind.EXTENSION

        if parent is _Kind.ITEM:
            if is_rss and local in ITEM_FIELD_TAGS:
                return _Kind.ITEM_FIELD
            return _Kind.ITEM_EXTENSION

        if parent is _Kind.IMAGE and is_rss and local in IMAGE_FIELD_TAGS:
            return _Kind.IMAGE_FIELD

        return _Kind.SKIP

    def _on_start(self, state: _ParseState, elem: ET.Element) -> None:
        uri, local = _split_tag(elem.tag)
        kind = self._classify(state, elem, uri, local)
        state.stack.append(_Frame(kind, self._qualified_name(state, uri, local), local))

    def _on_end(self, state: _ParseState, elem: ET.Element) -> None:
        frame = state.stack.pop()
        kind = frame.kind
        data = state.data

        if kind is _Kind.CHANNEL_FIELD:
            data.set(CHANNEL_FIELD_TAGS[frame.local], _element_text(elem))
            state.seen.add(frame.local)
        elif kind is _Kind.ATOM_LINK:
            href = elem.get("href")
            if href and elem.get("rel", "self") == "self":
                data.atom_link = href.strip()
        elif kind is _Kind.IMAGE_FIELD:
            state.image_parts[frame.local] = _element_text(elem)
        elif kind is _Kind.IMAGE:
            if state.image_parts.get("url"):
                data.image = Image(
                    url=state.image_parts["url"],
                    title=state.image_parts.get("title", ""),
                    link=state.image_parts.get("link", ""),
                )
        elif kind is _Kind.ITEM_FIELD:
            self._assign_item_field(state.item, frame.local, elem)
        elif kind is _Kind.ITEM:
            data.items.append(state.item)
            state.item = None
            elem.clear()
        elif kind is _Kind.EXTENSION:
            self._dispatch(
                frame.name, elem, data, self._lookup(self.config.custom_handlers, frame.name, elem.tag)
            )
        elif kind is _Kind.ITEM_EXTENSION:
            self._dispatch(
                frame.name, elem, state.item, self._lookup(self.config.item_handlers, frame.name, elem.tag)
            )

    def _assign_item_field(self, item: RssItem, local: str, elem: ET.Element) -> None:
        text = _element_text(elem)
        if local == "guid":
            item.guid = Guid(value=text, is_permalink=_parse_permalink(elem.get("isPermaLink")))
        elif local == "enclosure":
            item.enclosure = Enclosure(
                url=(elem.get("url") or "").strip(),
                length=(elem.get("length") or "0").strip(),
                type=(elem.get("type") or "").strip(),
            )
        elif local == "source":
            item.source = Source(url=(elem.get("url") or "").strip(), title=text)
        else:
            item.set(ITEM_FIELD_TAGS[local], text)

    @staticmethod
    def _lookup(handlers: dict, name: str, clark: str):
        return handlers.get(name) or handlers.get(clark)

    def _dispatch(self, tag: str, elem: ET.Element, target, handler) -> None:
        if handler is None:
            self.logger.log_element(tag, "skipped")
            return

        text = _element_text(elem)
        try:
            if hasattr(handler, "handle"):
                result = handler.handle(tag, text, target)
            else:
                result = handler(tag, text, target)
        except UnknownElement:
            raise
        except Exception as e:
            self.logger.warning(f"Handler for <{tag}> raised: {e}", tag=tag, error=str(e))
            raise UnknownElement(tag, str(e)) from e

        if result is False:
            self.logger.warning(f"Handler for <{tag}> reported failure", tag=tag)
            raise UnknownElement(tag, "handler reported failure")
        self.logger.log_element(tag, "handled")


def parse_rss(content: str | bytes, config: ParserConfig | None = None) -> RssData:
    """Parse an RSS document (see FeedParser.parse)."""
    return FeedParser(config).parse(content)
