"""Tests for sitecrawl.url module."""

from datetime import datetime, timezone

import pytest

from sitecrawl.url import Url, prefix_scheme


class TestUrlInit:
    def test_from_string(self):
        url = Url("http://www.google.co.uk")
        assert url == "http://www.google.co.uk"
        assert url.crawled is False
        assert url.date_crawled is None

    def test_strips_whitespace(self):
        assert Url("  http://example.com  ").value == "http://example.com"

    def test_from_url_copies_state(self):
        stamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
        original = Url("http://example.com", crawled=True, date_crawled=stamp)
        copy = Url(original)
        assert copy == original
        assert copy is not original
        assert copy.crawled is True
        assert copy.date_crawled == stamp

    def test_from_record(self):
        stamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
        record = {"url": "http://www.google.co.uk", "crawled": True, "date_crawled": stamp}
        url = Url.from_record(record)
        assert url == "http://www.google.co.uk"
        assert url.crawled is True
        assert url.to_record() == record

    def test_mark_crawled(self):
        url = Url("http://example.com")
        url.mark_crawled()
        assert url.crawled is True
        assert isinstance(url.date_crawled, datetime)


class TestUrlEquality:
    def test_equal_to_string(self):
        assert Url("http://example.com/a") == "http://example.com/a"
        assert "http://example.com/a" in {Url("http://example.com/a")}

    def test_state_ignored(self):
        assert Url("http://example.com", crawled=True) == Url("http://example.com")

    def test_hash_matches_value(self):
        assert len({Url("http://a.com"), Url("http://a.com"), Url("http://b.com")}) == 2


class TestUrlViews:
    def test_valid(self):
        assert Url("http://www.google.co.uk").is_valid()
        assert not Url("my_server").is_valid()
        assert not Url("/about.html").is_valid()
        assert not Url("http://[oops/x").is_valid()

    def test_parsable(self):
        assert Url("/about.html").is_parsable()
        assert not Url("http://[oops/x").is_parsable()

    def test_validate(self):
        Url("http://www.google.co.uk").validate()
        with pytest.raises(ValueError):
            Url("my_server").validate()

    def test_to_host(self):
        assert Url("http://www.Google.co.uk/about.html").to_host() == "www.google.co.uk"
        assert Url("http://localhost:8080/a").to_host() == "localhost:8080"
        assert Url("/about.html").to_host() is None

    def test_to_base(self):
        assert Url("http://www.google.co.uk/about.html").to_base() == "http://www.google.co.uk"
        assert Url("/about.html").to_base() is None

    def test_to_extension(self):
        assert Url("http://example.com/a/b.HTML").to_extension() == "html"
        assert Url("http://example.com/img/logo.png?x=1").to_extension() == "png"
        assert Url("http://example.com/a/b").to_extension() is None
        assert Url("http://example.com").to_extension() is None

    def test_anchor_and_query(self):
        url = Url("http://example.com/a?q=1#top")
        assert url.to_anchor() == "#top"
        assert url.to_query_string() == "?q=1"
        assert Url("#top").is_anchor()
        assert Url("?q=1").is_query_string()


class TestIsRelative:
    def test_without_host(self):
        assert Url("/about.html").is_relative()
        assert Url("about.html").is_relative()
        assert Url("#top").is_relative()
        assert not Url("http://www.google.co.uk").is_relative()
        assert not Url("//cdn.example.com/x").is_relative()

    def test_with_host(self):
        host = "http://www.example.com"
        assert Url("/about").is_relative(host=host)
        assert Url("https://www.example.com/contact").is_relative(host=host)
        assert not Url("http://other.com/contact").is_relative(host=host)
        assert not Url("http://example.com/contact").is_relative(host=host)

    def test_schemed_without_host_is_not_relative(self):
        assert not Url("mailto:me@example.com").is_relative(host="http://example.com")

    def test_host_must_be_absolute(self):
        with pytest.raises(ValueError):
            Url("/about").is_relative(host="example.com")


class TestUrlTransforms:
    def test_without_base(self):
        assert Url("http://example.com/a/b?q=1#top").without_base() == "/a/b?q=1#top"
        assert Url("/a").without_base() == "/a"
        assert Url("http://example.com").without_base() == ""

    def test_without_anchor(self):
        assert Url("http://example.com/a#top").without_anchor() == "http://example.com/a"
        assert Url("#top").without_anchor() == ""

    def test_without_query_string(self):
        assert Url("http://example.com/a?q=1").without_query_string() == "http://example.com/a"
        assert Url("/a?q=1#top").without_query_string() == "/a#top"

    def test_without_trailing_slash(self):
        assert Url("http://example.com/").without_trailing_slash() == "http://example.com"
        assert Url("/").without_trailing_slash() == "/"

    def test_toggle_trailing_slash(self):
        assert Url("http://example.com").toggle_trailing_slash() == "http://example.com/"
        assert Url("http://example.com/a/").toggle_trailing_slash() == "http://example.com/a"

    def test_concat(self):
        base = Url("http://www.google.co.uk")
        assert base.concat("/about.html") == "http://www.google.co.uk/about.html"
        assert base.concat("about.html") == "http://www.google.co.uk/about.html"
        assert Url("http://a.com/page").concat("#top") == "http://a.com/page#top"

    def test_join(self):
        page = Url("http://example.com/docs/page.html")
        assert page.join("other.html") == "http://example.com/docs/other.html"
        assert page.join("/b") == "http://example.com/b"
        assert page.join("https://other.com/x") == "https://other.com/x"


class TestPrefixScheme:
    def test_adds_http(self):
        assert prefix_scheme("my_server") == "http://my_server"

    def test_adds_https(self):
        assert prefix_scheme("my_server", https=True) == "https://my_server"

    def test_keeps_existing(self):
        assert prefix_scheme("https://example.com") == "https://example.com"
