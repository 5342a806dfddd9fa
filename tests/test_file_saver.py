"""Tests for sitecrawl.file_saver module."""

import os

from sitecrawl.document import Document
from sitecrawl.file_saver import file_exists, save_document, save_page, url_to_filepath

BASE = "https://example.com/docs"


class TestUrlToFilepath:
    def test_root(self, tmp_path):
        assert url_to_filepath(BASE, BASE, str(tmp_path)) == os.path.join(str(tmp_path), "index.html")

    def test_subpage(self, tmp_path):
        path = url_to_filepath(f"{BASE}/guide/setup", BASE, str(tmp_path))
        assert path == os.path.join(str(tmp_path), "guide", "setup", "index.html")

    def test_query_string(self, tmp_path):
        path = url_to_filepath(f"{BASE}?topic=intro&ref=nav", BASE, str(tmp_path))
        assert path == os.path.join(str(tmp_path), "topic--intro_ref--nav.html")

    def test_html_file(self, tmp_path):
        path = url_to_filepath(f"{BASE}/guide/a.html", BASE, str(tmp_path))
        assert path == os.path.join(str(tmp_path), "guide", "a.html")

    def test_outside_base_path(self, tmp_path):
        path = url_to_filepath("https://example.com/blog/post", BASE, str(tmp_path))
        assert path == os.path.join(str(tmp_path), "blog", "post", "index.html")

    def test_unsafe_characters(self, tmp_path):
        path = url_to_filepath(f"{BASE}/a%3Ab", BASE, str(tmp_path))
        assert path == os.path.join(str(tmp_path), "a_b", "index.html")


class TestSave:
    def test_save_page_creates_directories(self, tmp_path):
        filepath = os.path.join(str(tmp_path), "a", "b", "index.html")
        assert save_page(filepath, "<html></html>") is True
        assert file_exists(filepath)

    def test_file_exists_requires_content(self, tmp_path):
        filepath = tmp_path / "empty.html"
        filepath.write_text("")
        assert not file_exists(str(filepath))
        assert not file_exists(str(tmp_path / "missing.html"))

    def test_save_page_failure(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        assert save_page(os.path.join(str(blocker), "index.html"), "<html></html>") is False

    def test_save_document(self, tmp_path):
        doc = Document.from_html(f"{BASE}/guide", "<html>guide</html>")
        filepath = save_document(doc, BASE, str(tmp_path))
        assert filepath == os.path.join(str(tmp_path), "guide", "index.html")
        with open(filepath, encoding="utf-8") as f:
            assert f.read() == "<html>guide</html>"
