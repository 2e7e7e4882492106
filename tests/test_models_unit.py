"""Unit tests for the feed data model."""

import typing
from datetime import UTC, datetime

import pytest

from rss_codec.errors import DateParseError, InvalidRssVersion, UnknownField, ValidationErrors
from rss_codec.models import (
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


class TestRssVersionUnit:
    """Unit tests for RssVersion."""

    def test_default_is_rss_2_0(self):
        assert RssVersion.default() is RssVersion.RSS2_0
        assert RssData().version is RssVersion.RSS2_0

    @pytest.mark.parametrize("text", ["0.90", "0.91", "0.92", "1.0", "2.0"])
    def test_from_str_round_trip(self, text):
        version = RssVersion.from_str(text)

        assert str(version) == text
        assert version.as_str() == text

    def test_from_str_rejects_unknown_version(self):
        with pytest.raises(InvalidRssVersion) as exc_info:
            RssVersion.from_str("3.0")

        assert exc_info.value.value == "3.0"


class TestRssDataUnit:
    """Unit tests for RssData field setters."""

    def test_set_returns_same_instance_for_chaining(self):
        data = RssData()

        result = (
            data.set(RssDataField.TITLE, "My Blog")
            .set("link", "https://example.com")
            .set("description", "Posts")
        )

        assert result is data
        assert (data.title, data.link, data.description) == (
            "My Blog",
            "https://example.com",
            "Posts",
        )

    def test_set_unknown_field_raises(self):
        with pytest.raises(UnknownField) as exc_info:
            RssData().set("colour", "blue")

        assert exc_info.value.name == "colour"

    def test_update_from_mapping(self):
        data = RssData().update(
            {
                "title": "Feed",
                "language": "en-us",
                "ttl": 60,
                "image_url": "https://example.com/logo.png",
                "image_title": "Logo",
            }
        )

        assert data.language == "en-us"
        assert data.ttl == "60"
        assert data.image == Image(url="https://example.com/logo.png", title="Logo", link="")

    def test_update_stops_on_unknown_field(self):
        with pytest.raises(UnknownField):
            RssData().update({"title": "Feed", "favourite_colour": "blue"})

    def test_empty_value_clears_optional_field(self):
        data = RssData(language="en")

        data.set("language", "")

        assert data.language is None

    def test_set_image_replaces_image(self):
        data = RssData().set_image("https://example.com/a.png", "A", "https://example.com")

        assert data.image == Image("https://example.com/a.png", "A", "https://example.com")

    def test_empty_image_url_removes_image(self):
        data = RssData().set_image("https://example.com/a.png", "A", "https://example.com")

        data.set("image_url", "")

        assert data.image is None

    def test_item_management(self):
        data = (
            RssData()
            .add_item(RssItem(title="one", guid=Guid("1")))
            .add_item(RssItem(title="two", guid=Guid("2")))
            .add_item(RssItem(title="three"))
        )

        assert data.item_count == 3
        assert data.remove_item("2") is True
        assert [item.title for item in data.items] == ["one", "three"]
        assert data.remove_item("missing") is False

        data.clear_items()
        assert data.item_count == 0

    def test_set_item_field_creates_item_when_empty(self):
        data = RssData()

        data.set_item_field(RssItemField.TITLE, "First").set_item_field("link", "https://example.com/1")

        assert data.items == [RssItem(title="First", link="https://example.com/1")]

    def test_present_fields(self):
        data = RssData(
            title="t",
            link="https://example.com",
            description="d",
            atom_link="https://example.com/rss.xml",
            image=Image(url="https://example.com/logo.png"),
        )

        assert data.present_fields() == {
            RssDataField.TITLE,
            RssDataField.LINK,
            RssDataField.DESCRIPTION,
            RssDataField.ATOM_LINK,
            RssDataField.IMAGE_URL,
        }

    def test_present_fields_annotation_resolves_to_builtin_set(self):
        """The `set` method must not shadow the builtin in annotations."""
        hints = typing.get_type_hints(RssData.present_fields)

        assert hints["return"] == set[RssDataField]
        assert typing.get_type_hints(RssItem.present_fields)["return"] == set[RssItemField]

    def test_validate(self):
        data = RssData(title="t", link="https://example.com", description="d")

        data.validate()

        data.link = "not a url"
        with pytest.raises(ValidationErrors) as exc_info:
            data.validate(RssVersion.RSS0_91)

        assert set(exc_info.value.by_field()) == {"link", "language"}

    def test_to_dict_uses_version_string(self):
        data = RssData(version=RssVersion.RSS0_91, title="t")

        result = data.to_dict()

        assert result["version"] == "0.91"
        assert result["title"] == "t"
        assert result["items"] == []

    def test_plain_description_strips_html(self):
        data = RssData(description="<p>Hello <b>world</b></p>")

        assert data.plain_description() == "Hello world"


class TestRssItemUnit:
    """Unit tests for RssItem field setters."""

    def test_set_substructures_by_name(self):
        item = (
            RssItem()
            .set("enclosure_url", "https://example.com/ep1.mp3")
            .set("enclosure_length", 12345)
            .set("enclosure_type", "audio/mpeg")
            .set("guid", "ep-1")
            .set("guid_is_permalink", "false")
            .set("source_url", "https://other.example.com/rss")
            .set("source_title", "Other")
        )

        assert item.enclosure == Enclosure("https://example.com/ep1.mp3", "12345", "audio/mpeg")
        assert item.guid == Guid("ep-1", is_permalink=False)
        assert item.source == Source("https://other.example.com/rss", "Other")

    def test_guid_permalink_accepts_bool(self):
        item = RssItem().set("guid", "x").set(RssItemField.GUID_IS_PERMALINK, False)

        assert item.guid.is_permalink is False

    def test_empty_url_removes_enclosure_and_source(self):
        item = (
            RssItem(title="Episode")
            .set("enclosure_url", "https://example.com/ep1.mp3")
            .set("enclosure_type", "audio/mpeg")
            .set("source_url", "https://other.example.com/rss")
            .set("source_title", "Other")
        )

        item.set("enclosure_url", "").set("source_url", "")

        assert item.enclosure is None
        assert item.source is None
        feed = RssData(title="t", link="https://example.com", description="d").add_item(item)
        feed.validate()

    def test_set_unknown_field_raises(self):
        with pytest.raises(UnknownField):
            RssItem().set("rating", "5")

    def test_parsed_pub_date(self):
        item = RssItem(pub_date="Mon, 01 Jan 2024 10:00:00 GMT")

        assert item.parsed_pub_date() == datetime(2024, 1, 1, 10, 0, tzinfo=UTC)
        assert RssItem().parsed_pub_date() is None

    def test_parsed_pub_date_invalid(self):
        with pytest.raises(DateParseError):
            RssItem(pub_date="sometime last week").parsed_pub_date()

    def test_plain_description(self):
        item = RssItem(description="<div><h1>Title</h1><p>Content</p></div>")

        assert item.plain_description() == "Title Content"


class TestFieldSupportUnit:
    """Unit tests for the per-version legality table."""

    def test_channel_core_fields_required_everywhere(self):
        for version in RssVersion:
            for field_id in (RssDataField.TITLE, RssDataField.LINK, RssDataField.DESCRIPTION):
                assert field_support(version, field_id) is FieldSupport.REQUIRED

    def test_image_and_atom_link_only_in_rss_2_0(self):
        for version in RssVersion:
            expected = version is RssVersion.RSS2_0
            assert is_field_legal(version, RssDataField.IMAGE_URL) is expected
            assert is_field_legal(version, RssDataField.ATOM_LINK) is expected

    def test_language_required_in_rss_0_91(self):
        assert field_support(RssVersion.RSS0_91, RssDataField.LANGUAGE) is FieldSupport.REQUIRED
        assert field_support(RssVersion.RSS2_0, RssDataField.LANGUAGE) is FieldSupport.OPTIONAL
        assert field_support(RssVersion.RSS1_0, RssDataField.LANGUAGE) is FieldSupport.UNSUPPORTED

    def test_item_fields(self):
        assert field_support(RssVersion.RSS1_0, RssItemField.LINK) is FieldSupport.REQUIRED
        assert field_support(RssVersion.RSS2_0, RssItemField.LINK) is FieldSupport.OPTIONAL
        assert not is_field_legal(RssVersion.RSS0_90, RssItemField.DESCRIPTION)
        assert is_field_legal(RssVersion.RSS0_92, RssItemField.ENCLOSURE_URL)
        assert not is_field_legal(RssVersion.RSS0_92, RssItemField.GUID)
        assert is_field_legal(RssVersion.RSS2_0, RssItemField.GUID)
