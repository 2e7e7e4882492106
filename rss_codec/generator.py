"""RSS feed generation for every supported schema version."""

import xml.etree.ElementTree as ET
from typing import TextIO

from .checks import XML_ILLEGAL_CHARS, check_feed_size, check_image, check_lengths
from .config import DEFAULT_LIMITS, FeedLimits
from .errors import (
    InvalidInput,
    IoError,
    ItemValidationError,
    MissingField,
)
from .logging_config import create_execution_logger
from .models import RssData, RssDataField, RssItem, RssItemField, RssVersion, is_field_legal

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
INDENT = "  "

RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
RSS_1_0_NS = "http://purl.org/rss/1.0/"
RSS_0_90_NS = "http://my.netscape.com/rdf/simple/0.9/"
ATOM_NS = "http://www.w3.org/2005/Atom"

QUICK_RSS_MAX_LENGTH = 1000

_CHANNEL_ELEMENTS = (
    ("title", RssDataField.TITLE),
    ("link", RssDataField.LINK),
    ("description", RssDataField.DESCRIPTION),
    ("language", RssDataField.LANGUAGE),
    ("copyright", RssDataField.COPYRIGHT),
    ("managingEditor", RssDataField.MANAGING_EDITOR),
    ("webMaster", RssDataField.WEBMASTER),
    ("pubDate", RssDataField.PUB_DATE),
    ("lastBuildDate", RssDataField.LAST_BUILD_DATE),
    ("category", RssDataField.CATEGORY),
    ("generator", RssDataField.GENERATOR),
    ("docs", RssDataField.DOCS),
    ("ttl", RssDataField.TTL),
)

_ITEM_ELEMENTS = (
    ("title", RssItemField.TITLE),
    ("link", RssItemField.LINK),
    ("description", RssItemField.DESCRIPTION),
    ("author", RssItemField.AUTHOR),
    ("category", RssItemField.CATEGORY),
    ("comments", RssItemField.COMMENTS),
    ("pubDate", RssItemField.PUB_DATE),
)


def sanitize_content(content: str) -> str:
    """Drop characters XML 1.0 cannot carry."""
    return XML_ILLEGAL_CHARS.sub("", content)


def _attrib(attrs: dict[str, str] | None) -> dict[str, str]:
    return {name: sanitize_content(value) for name, value in (attrs or {}).items()}


def _text_element(
    parent: ET.Element, tag: str, text: str, attrs: dict[str, str] | None = None
) -> ET.Element:
    element = ET.SubElement(parent, tag, _attrib(attrs))
    element.text = sanitize_content(text)
    return element


def serialize(root: ET.Element) -> str:
    """Indent the tree and render it with an XML declaration.

    CR in element text is written as a character reference so it survives
    end-of-line normalisation on the way back in; ElementTree already does
    this for attribute values.
    """
    ET.indent(root, space=INDENT)
    body = ET.tostring(root, encoding="unicode").replace("\r", "&#13;")
    return f"{XML_DECLARATION}\n{body}\n"


class FeedGenerator:
    """Serializes RssData into version-specific RSS XML."""

    def __init__(self, limits: FeedLimits | None = None, execution_id: str | None = None):
        """Initialize FeedGenerator with configuration.

        Args:
            limits: Length and size ceilings (defaults to the contract constants)
            execution_id: Execution ID for logging context
        """
        self.limits = limits or DEFAULT_LIMITS
        self.logger = create_execution_logger("generator", execution_id)

    def generate(self, data: RssData, version: RssVersion | None = None) -> str:
        """Generate a complete, size-checked RSS document.

        Fields the chosen version cannot carry are left out rather than
        treated as errors.

        Args:
            data: Feed to serialize
            version: Target schema; defaults to data.version

        Returns:
            The XML document as a string

        Raises:
            MissingField: If title, link or description is empty, or an
                emitted image lacks its url, title or link
            ItemValidationError: If an item has neither title nor description
            InvalidInput: If a field exceeds its length ceiling
            FeedSizeExceeded: If the document exceeds the feed size ceiling
        """
        version = version or data.version
        self.logger.log_execution_start(feed_version=version.value)

        self._check_input(data, version)
        xml = self.render(data, version)
        size = check_feed_size(xml, self.limits)

        self.logger.log_execution_end(
            feed_version=version.value, items_count=len(data.items), byte_size=size
        )
        return xml

    def write(self, data: RssData, fp: TextIO, version: RssVersion | None = None) -> int:
        """Generate the feed and write it to a text stream.

        Returns:
            Number of characters written

        Raises:
            IoError: If the stream rejects the write
        """
        xml = self.generate(data, version)
        try:
            return fp.write(xml)
        except OSError as e:
            self.logger.error(f"Failed to write feed: {e}", error=str(e))
            raise IoError(str(e))

    def render(self, data: RssData, version: RssVersion) -> str:
        """Serialize without input or size checks."""
        if version is RssVersion.RSS1_0:
            root = self._build_rss_1_0(data)
        elif version is RssVersion.RSS0_90:
            root = self._build_rss_0_90(data)
        else:
            root = self._build_rss(data, version)
        return serialize(root)

    def _check_input(self, data: RssData, version: RssVersion) -> None:
        for name in ("title", "link", "description"):
            if not getattr(data, name):
                raise MissingField(name)

        if is_field_legal(version, RssDataField.IMAGE_URL):
            image_errors = check_image(data)
            if image_errors:
                raise MissingField(image_errors[0].field)

        for index, item in enumerate(data.items):
            if not item.title and not item.description:
                raise ItemValidationError("item must have a title or a description", index)

        length_errors = check_lengths(data, self.limits)
        if length_errors:
            first = length_errors[0]
            raise InvalidInput(f"{first.field}: {first.message}")

    def _build_rss(self, data: RssData, version: RssVersion) -> ET.Element:
        attrs = {"version": version.value}
        if version is RssVersion.RSS2_0:
            attrs["xmlns:atom"] = ATOM_NS
        root = ET.Element("rss", attrs)
        channel = ET.SubElement(root, "channel")
        self._add_channel_elements(channel, data, version)
        self._add_atom_link(channel, data, version)
        self._add_image(channel, data, version)
        for item in data.items:
            self._add_item(channel, item, version)
        return root

    def _build_rss_0_90(self, data: RssData) -> ET.Element:
        version = RssVersion.RSS0_90
        root = ET.Element("rdf:RDF", {"xmlns:rdf": RDF_NS, "xmlns": RSS_0_90_NS})
        channel = ET.SubElement(root, "channel")
        self._add_channel_elements(channel, data, version)
        for item in data.items:
            self._add_item(root, item, version)
        return root

    def _build_rss_1_0(self, data: RssData) -> ET.Element:
        version = RssVersion.RSS1_0
        root = ET.Element("rdf:RDF", {"xmlns:rdf": RDF_NS, "xmlns": RSS_1_0_NS})
        channel = ET.SubElement(root, "channel", _attrib({"rdf:about": data.link}))
        self._add_channel_elements(channel, data, version)

        resources = [self._item_about(item) for item in data.items]
        if any(resources):
            seq = ET.SubElement(ET.SubElement(channel, "items"), "rdf:Seq")
            for resource in resources:
                if resource:
                    ET.SubElement(seq, "rdf:li", _attrib({"rdf:resource": resource}))

        for item in data.items:
            self._add_item(root, item, version)
        return root

    def _add_channel_elements(self, channel: ET.Element, data: RssData, version: RssVersion) -> None:
        for tag, field_id in _CHANNEL_ELEMENTS:
            value = getattr(data, field_id.value)
            if value and is_field_legal(version, field_id):
                _text_element(channel, tag, value)

    def _add_atom_link(self, channel: ET.Element, data: RssData, version: RssVersion) -> None:
        if data.atom_link and is_field_legal(version, RssDataField.ATOM_LINK):
            ET.SubElement(
                channel,
                "atom:link",
                _attrib({"href": data.atom_link, "rel": "self", "type": "application/rss+xml"}),
            )

    def _add_image(self, channel: ET.Element, data: RssData, version: RssVersion) -> None:
        image = data.image
        if image is None or not image.url or not is_field_legal(version, RssDataField.IMAGE_URL):
            return
        image_element = ET.SubElement(channel, "image")
        _text_element(image_element, "url", image.url)
        _text_element(image_element, "title", image.title)
        _text_element(image_element, "link", image.link)

    @staticmethod
    def _item_about(item: RssItem) -> str:
        if item.link:
            return item.link
        if item.guid is not None:
            return item.guid.value
        return ""

    def _add_item(self, parent: ET.Element, item: RssItem, version: RssVersion) -> None:
        attrs = None
        if version is RssVersion.RSS1_0:
            about = self._item_about(item)
            attrs = {"rdf:about": about} if about else None
        item_element = ET.SubElement(parent, "item", _attrib(attrs))

        for tag, field_id in _ITEM_ELEMENTS:
            value = getattr(item, field_id.value)
            if value and is_field_legal(version, field_id):
                _text_element(item_element, tag, value)

        if item.guid is not None and item.guid.value and is_field_legal(version, RssItemField.GUID):
            _text_element(
                item_element,
                "guid",
                item.guid.value,
                {"isPermaLink": "true" if item.guid.is_permalink else "false"},
            )

        enclosure = item.enclosure
        if enclosure is not None and enclosure.url and is_field_legal(version, RssItemField.ENCLOSURE_URL):
            ET.SubElement(
                item_element,
                "enclosure",
                _attrib({"url": enclosure.url, "length": enclosure.length or "0", "type": enclosure.type}),
            )

        source = item.source
        if source is not None and source.url and is_field_legal(version, RssItemField.SOURCE_URL):
            _text_element(item_element, "source", source.title, {"url": source.url})


def generate_rss(
    data: RssData,
    version: RssVersion | None = None,
    limits: FeedLimits | None = None,
) -> str:
    """Generate an RSS document for data (see FeedGenerator.generate)."""
    return FeedGenerator(limits).generate(data, version)


def quick_rss(title: str, link: str, description: str) -> str:
    """Build a one-item RSS 2.0 feed from the three required channel fields.

    Raises:
        InvalidInput: If a value is empty, too long, or the link is not http(s)
    """
    if not title or not link or not description:
        raise InvalidInput("Title, link, and description must not be empty")

    if max(len(title), len(link), len(description)) > QUICK_RSS_MAX_LENGTH:
        raise InvalidInput("Input exceeds maximum allowed length")

    if not link.startswith(("http://", "https://")):
        raise InvalidInput("Link must start with http:// or https://")

    data = RssData(version=RssVersion.RSS2_0, title=title, link=link, description=description)
    data.add_item(
        RssItem(
            title="Example Item",
            link=f"{link}/example-item",
            description="This is an example item in the RSS feed",
        )
    )
    return generate_rss(data)
