"""Property-based tests for RSS feed generation."""

import xml.etree.ElementTree as ET

from hypothesis import given, settings
from hypothesis import strategies as st

from syndication.generator import RSSGenerator
from syndication.models import GenerationOptions, Post, PostData

CONFIG = {
    "site": {
        "url": "https://test.dev",
        "title": "Test Blog",
        "description": "Test blog description",
        "author": "Test Author",
    },
}

# Printable text XML 1.0 can carry once escaped
titles = st.text(
    alphabet=st.characters(whitelist_categories=("L", "N", "P", "S", "Zs")),
    min_size=1,
    max_size=80,
).filter(lambda x: x.strip())


def build_post(index: int, buildable: bool) -> Post:
    return Post(
        slug=f"post-{index}",
        data=PostData(title=f"Post {index}" if buildable else "   ", date="2024-01-01"),
        body="Body content for the post.",
    )


class TestGeneratorProperties:
    """Property-based tests for RSSGenerator."""

    @settings(max_examples=50)
    @given(
        st.lists(st.booleans(), max_size=30),
        st.one_of(st.none(), st.integers(min_value=0, max_value=40)),
    )
    def test_item_accounting_property(self, buildable_flags, max_items):
        """
        Property: Every capped post is published or skipped

        item_count plus skipped_count equals the number of eligible posts
        after the cap, and never exceeds the cap.
        """
        posts = [build_post(i, flag) for i, flag in enumerate(buildable_flags)]
        generator = RSSGenerator(CONFIG)

        result = generator.generate_feed(posts, GenerationOptions(max_items=max_items))

        cap = 50 if max_items is None else max_items
        capped = buildable_flags[:cap]
        assert result.success
        assert result.item_count + result.skipped_count == len(capped)
        assert result.item_count == sum(capped)
        assert result.item_count <= cap

        items = ET.fromstring(result.xml.encode("utf-8")).findall("channel/item")
        assert len(items) == result.item_count

    @settings(max_examples=50)
    @given(titles, titles)
    def test_text_round_trip_property(self, title, description):
        """
        Property: Escaped text decodes to the original

        Titles and descriptions read back from the parsed document equal the
        values supplied on the post.
        """
        post = Post(
            slug="round-trip",
            data=PostData(title=title, date="2024-01-01", description=description),
            body="Body",
        )

        result = RSSGenerator(CONFIG).generate_feed([post])

        item = ET.fromstring(result.xml.encode("utf-8")).find("channel/item")
        assert item.findtext("title") == title
        assert item.findtext("description") == description
