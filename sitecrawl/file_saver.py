"""Mirror crawled documents onto the local filesystem."""

import logging
import os
import re
from typing import Optional, Union
from urllib.parse import unquote

from .document import Document
from .url import Url

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*]')


def url_to_filepath(url: Union[str, Url], base_url: Union[str, Url], output_folder: str) -> str:
    """Map a page Url to a file path below ``output_folder``.

    The directory structure mirrors the Url's path relative to ``base_url``
    (the crawl root). A query string becomes the file name.

    Examples:
        base = "https://example.com/docs"
        url  = "https://example.com/docs"             -> output_folder/index.html
        url  = "https://example.com/docs/guide"       -> output_folder/guide/index.html
        url  = "https://example.com/docs?topic=intro" -> output_folder/topic--intro.html
        url  = "https://example.com/docs/a.html"      -> output_folder/a.html

    Args:
        url: The fully resolved Url of the page.
        base_url: The crawl root.
        output_folder: Local folder for output.

    Returns:
        Filesystem path for the page.
    """
    url, base_url = Url(url), Url(base_url)

    base_path = base_url.to_path().rstrip("/")
    url_path = url.to_path()
    relative_path = url_path[len(base_path):] if url_path.startswith(base_path) else url_path
    relative_path = unquote(relative_path.strip("/"))

    query = url.to_query_string()
    query_part = _sanitize_query(query[1:]) if query else ""

    sub_dir = relative_path
    if query_part:
        filename = f"{query_part}.html"
    elif Url(relative_path).to_extension() in ("htm", "html"):
        sub_dir, _, filename = relative_path.rpartition("/")
    else:
        filename = "index.html"

    sub_dir = _sanitize_path(sub_dir) if sub_dir else ""
    filename = _sanitize_filename(filename)

    return os.path.join(output_folder, sub_dir, filename) if sub_dir else os.path.join(output_folder, filename)


def save_page(filepath: str, html: str) -> bool:
    """Write HTML to ``filepath``, creating directories as needed.

    Returns:
        True if saved, False on an OS error (which is logged).
    """
    try:
        directory = os.path.dirname(filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(filepath, "w", encoding="utf-8") as f:
            f.write(html)

        return True
    except OSError as e:
        logger.error("Failed to save %s: %s", filepath, e)
        return False


def save_document(doc: Document, base_url: Union[str, Url], output_folder: str) -> Optional[str]:
    """Save a Document's HTML; returns the path written, or None on failure."""
    filepath = url_to_filepath(doc.url, base_url, output_folder)
    return filepath if save_page(filepath, doc.html) else None


def file_exists(filepath: str) -> bool:
    """True if the file exists and is not empty."""
    return os.path.isfile(filepath) and os.path.getsize(filepath) > 0


def _sanitize_query(query: str) -> str:
    """``topic=intro&ref=nav`` -> ``topic--intro_ref--nav``, at most 200 chars."""
    result = query.replace("=", "--").replace("&", "_")
    result = _UNSAFE_CHARS.sub("_", result)
    return result[:200]


def _sanitize_filename(filename: str) -> str:
    sanitized = _UNSAFE_CHARS.sub("_", filename).strip(". ")
    if not sanitized:
        sanitized = "page.html"
    if not sanitized.lower().endswith((".html", ".htm")):
        sanitized += ".html"
    return sanitized


def _sanitize_path(path: str) -> str:
    parts = []
    for part in path.split("/"):
        clean = _UNSAFE_CHARS.sub("_", part).strip(". ")
        if clean:
            parts.append(clean)
    return os.path.join(*parts) if parts else ""
