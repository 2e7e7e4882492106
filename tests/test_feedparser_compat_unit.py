"""Interoperability tests: generated feeds read back with feedparser."""

import feedparser
import pytest

from rss_codec.generator import generate_rss
from rss_codec.models import Enclosure, Guid, RssData, RssItem, RssVersion


def make_feed():
    feed = RssData(
        title="AWS News Blog",
        link="https://aws.amazon.com/blogs/aws/",
        description="Announcements & updates",
        language="en-us",
    )
    feed.add_item(
        RssItem(
            title="AWS Announces New Service",
            link="https://aws.amazon.com/blogs/aws/new-service/",
            description="<p>AWS has announced a new service.</p>",
            guid=Guid("new-service-2024", is_permalink=False),
            pub_date="Mon, 01 Jan 2024 10:00:00 GMT",
            enclosure=Enclosure("https://aws.amazon.com/ep.mp3", "42", "audio/mpeg"),
        )
    )
    feed.add_item(RssItem(title="Second", link="https://aws.amazon.com/blogs/aws/second/"))
    return feed


class TestFeedparserCompatUnit:
    """Generated documents must be understood by a mainstream feed reader."""

    @pytest.mark.parametrize(
        "version, expected",
        [
            (RssVersion.RSS2_0, "rss20"),
            (RssVersion.RSS0_92, "rss092"),
            (RssVersion.RSS1_0, "rss10"),
            (RssVersion.RSS0_90, "rss090"),
        ],
    )
    def test_version_detection(self, version, expected):
        parsed = feedparser.parse(generate_rss(make_feed(), version).encode("utf-8"))

        assert not parsed.bozo, parsed.get("bozo_exception")
        assert parsed.version == expected

    @pytest.mark.parametrize("version", list(RssVersion))
    def test_titles_and_links(self, version):
        parsed = feedparser.parse(generate_rss(make_feed(), version).encode("utf-8"))

        assert parsed.feed.title == "AWS News Blog"
        assert parsed.feed.link == "https://aws.amazon.com/blogs/aws/"
        assert [entry.title for entry in parsed.entries] == [
            "AWS Announces New Service",
            "Second",
        ]
        assert [entry.link for entry in parsed.entries] == [
            "https://aws.amazon.com/blogs/aws/new-service/",
            "https://aws.amazon.com/blogs/aws/second/",
        ]

    def test_rss_2_0_item_details(self):
        parsed = feedparser.parse(generate_rss(make_feed()).encode("utf-8"))
        entry = parsed.entries[0]

        assert entry.id == "new-service-2024"
        assert entry.guidislink is False
        assert entry.published_parsed[:3] == (2024, 1, 1)
        assert entry.enclosures[0].href == "https://aws.amazon.com/ep.mp3"
        assert entry.enclosures[0].type == "audio/mpeg"
        assert "AWS has announced a new service." in entry.summary
