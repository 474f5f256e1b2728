"""Unit tests for excerpt generation."""

from syndication.excerpt import generate_excerpt, strip_html


class TestExcerptUnit:
    """Unit tests for generate_excerpt and strip_html."""

    def test_removes_html_tags(self):
        content = "<p>This is <strong>HTML</strong> content</p>"
        assert generate_excerpt(content, 100, 10) == "This is HTML content"

    def test_returns_short_content_unchanged(self):
        assert generate_excerpt("Short content", 50, 10) == "Short content"

    def test_content_exactly_at_limit_is_not_truncated(self):
        content = "a" * 50
        assert generate_excerpt(content, 50, 10) == content

    def test_truncates_at_last_word_boundary(self):
        content = (
            "This is a very long content that should be truncated to a "
            "reasonable length for RSS feed descriptions."
        )

        excerpt = generate_excerpt(content, 50, 20)

        assert excerpt == "This is a very long content that should be..."
        assert len(excerpt) <= 53

    def test_hard_cut_without_any_space(self):
        content = "a" * 100
        assert generate_excerpt(content, 50, 10) == "a" * 50 + "..."

    def test_hard_cut_when_only_space_is_before_min_length(self):
        content = "ab " + "c" * 60

        excerpt = generate_excerpt(content, 20, 10)

        assert excerpt == "ab " + "c" * 17 + "..."

    def test_space_exactly_at_min_length_forces_hard_cut(self):
        # Last space at index 10; a word-boundary cut needs index > min_length
        content = "a" * 10 + " " + "b" * 30

        excerpt = generate_excerpt(content, 20, 10)

        assert excerpt == content[:20] + "..."

    def test_collapses_whitespace(self):
        content = "  Hello \n\n\t   world  "
        assert generate_excerpt(content, 100, 10) == "Hello world"

    def test_empty_and_none_content(self):
        assert generate_excerpt("", 100, 10) == ""
        assert generate_excerpt(None, 100, 10) == ""
        assert generate_excerpt("   ", 100, 10) == ""
        assert generate_excerpt("<p><br/></p>", 100, 10) == ""

    def test_uses_default_lengths(self):
        content = "word " * 200

        excerpt = generate_excerpt(content)

        assert excerpt.endswith("...")
        assert len(excerpt) <= 503

    def test_strip_html_specific_cases(self):
        test_cases = [
            ("<p>Simple paragraph</p>", "Simple paragraph"),
            ("<div><h1>Title</h1><p>Content</p></div>", "TitleContent"),
            ("<h1>Title</h1>\n<p>Content</p>", "Title Content"),
            ('<a href="https://example.com">link</a> text', "link text"),
            ("Plain text without HTML", "Plain text without HTML"),
            ("Unterminated <b", "Unterminated"),
        ]

        for html_input, expected_output in test_cases:
            assert strip_html(html_input) == expected_output, html_input
