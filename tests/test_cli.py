"""Tests for the sitecrawl command line."""

import io
import os
from unittest.mock import patch

import pytest

from sitecrawl.__main__ import build_config, main, parse_args, run
from sitecrawl.crawler import Crawler
from sitecrawl.document import Document
from sitecrawl.utils import print_search_results


@pytest.fixture
def site(client, html):
    client.page("http://example.com", html("/about", "https://ext.org/", text="Welcome to the cow farm."))
    client.page("http://example.com/about", html("/missing", text="About us"))


@pytest.fixture
def patched_crawler(client):
    def factory(config):
        return Crawler(config, client=client)

    with patch("sitecrawl.__main__.Crawler", side_effect=factory):
        yield


class TestParseArgs:
    def test_defaults(self):
        args = parse_args(["--input-address", "example.com"])
        assert args.recursive is True
        assert args.output_folder is None
        assert args.search is None
        assert args.sentence_limit == 80

        config = build_config(args)
        assert config.redirect_limit == 5
        assert config.timeout == 30
        assert config.delay == 0.0

    def test_options(self):
        args = parse_args([
            "--input-address", "https://example.com",
            "--no-recursive",
            "--redirect-limit", "2",
            "--delay", "1.5",
        ])
        assert args.recursive is False
        config = build_config(args)
        assert config.redirect_limit == 2
        assert config.delay == 1.5

    def test_input_address_required(self):
        with pytest.raises(SystemExit):
            parse_args([])


class TestRun:
    def test_recursive_crawl(self, crawler, site, capsys):
        code = run(parse_args(["--input-address", "example.com"]), crawler)
        out = capsys.readouterr().out

        assert code == 0
        assert "[1] [CRAWL] http://example.com" in out
        assert "[2] [CRAWL] http://example.com/about" in out
        assert "[FAIL] http://example.com/missing" in out
        assert "External links:\n  https://ext.org\n" in out

    def test_single_page(self, crawler, client, site, capsys):
        code = run(parse_args(["--input-address", "http://example.com", "--no-recursive"]), crawler)
        assert code == 0
        assert client.requests == ["http://example.com"]
        assert "https://ext.org" in capsys.readouterr().out

    def test_unreachable_root(self, crawler, capsys):
        code = run(parse_args(["--input-address", "http://unknown.example"]), crawler)
        assert code == 1
        assert "[ERROR] Could not crawl http://unknown.example" in capsys.readouterr().out

    def test_saves_pages(self, crawler, site, tmp_path, capsys):
        args = parse_args(["--input-address", "http://example.com", "--output-folder", str(tmp_path)])
        assert run(args, crawler) == 0
        assert os.path.isfile(tmp_path / "index.html")
        assert os.path.isfile(tmp_path / "about" / "index.html")
        assert "[SAVED]" in capsys.readouterr().out

    def test_search(self, crawler, site, capsys):
        args = parse_args(["--input-address", "http://example.com", "--search", "COW"])
        assert run(args, crawler) == 0
        out = capsys.readouterr().out
        assert "Search results for 'COW' (1 page(s))" in out
        assert "Welcome to the cow farm.\nhttp://example.com\n" in out


class TestMain:
    def test_exit_code(self, site, patched_crawler, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--input-address", "http://example.com"])
        assert exc.value.code == 0

    def test_malformed_link_does_not_abort(self, client, html, patched_crawler, capsys):
        client.page("http://example.com", html("/a", "http://[oops/x", "https://ext.org"))
        client.redirect("http://example.com/a", "http://[oops/")
        with pytest.raises(SystemExit) as exc:
            main(["--input-address", "http://example.com"])
        assert exc.value.code == 0
        out = capsys.readouterr().out
        assert "[FAIL] http://example.com/a" in out
        assert "External links:\n  https://ext.org\n" in out

    def test_odd_sentence_limit(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--input-address", "http://example.com", "--sentence-limit", "3"])
        assert exc.value.code == 2
        assert "--sentence-limit" in capsys.readouterr().out

    def test_invalid_address(self, patched_crawler, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--input-address", "http://"])
        assert exc.value.code == 2
        assert "[ERROR]" in capsys.readouterr().out


class TestPrintSearchResults:
    def test_block_per_document(self):
        doc = Document.from_html(
            "http://example.com",
            "<html><head><title>Farm</title><meta name='keywords' content='cow, pig'></head>"
            "<body><p>The cow says moo.</p></body></html>",
        )
        stream = io.StringIO()
        print_search_results([doc], "cow", stream=stream)
        assert stream.getvalue() == "Farm\ncow, pig\nThe cow says moo.\nhttp://example.com\n\n"
