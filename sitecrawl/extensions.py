"""Document fields and the extractors that fill them.

Every field a ``Document`` exposes (title, links, text, ...) is an
``Extension``: a name plus two extractors, one reading the parsed HTML and one
reading a persisted record. ``Document`` runs each registered extension once
when it is built, using whichever extractor matches its source.

Custom fields are added with ``define_extension``:

    define_extension("tables", "table", singleton=False, text_content_only=False)
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Mapping, Optional

from bs4 import BeautifulSoup, NavigableString, Tag

from .url import Url
from .utils import process_list, process_str

logger = logging.getLogger(__name__)

# Elements whose direct text nodes make up a page's searchable text.
TEXT_ELEMENTS = [
    "dd", "div", "dl", "dt", "figcaption", "figure", "hr", "li",
    "main", "ol", "p", "pre", "span", "ul", "h1", "h2", "h3", "h4", "h5",
]

# hrefs with these schemes are not links to documents.
IGNORED_SCHEMES = ("javascript:", "mailto:", "tel:", "data:")

MarkupExtractor = Callable[[BeautifulSoup], Any]
RecordExtractor = Callable[[Mapping[str, Any]], Any]
Transform = Callable[[Any, str], Any]


@dataclass(frozen=True)
class Extension:
    """A named document field and its two extractors."""

    name: str
    from_markup: MarkupExtractor
    from_record: RecordExtractor


class ExtensionRegistry:
    """Ordered collection of extensions keyed by field name."""

    def __init__(self, extensions: tuple = ()):
        self._extensions: dict[str, Extension] = {}
        for extension in extensions:
            self.register(extension)

    def register(self, extension: Extension) -> Extension:
        """Add ``extension``, replacing any existing one with the same name."""
        self._extensions[extension.name] = extension
        return extension

    def remove(self, name: str) -> bool:
        """Remove the extension called ``name``; False if there was none."""
        return self._extensions.pop(name, None) is not None

    def names(self) -> list[str]:
        return list(self._extensions)

    def copy(self) -> "ExtensionRegistry":
        return ExtensionRegistry(tuple(self))

    def __iter__(self) -> Iterator[Extension]:
        return iter(list(self._extensions.values()))

    def __contains__(self, name: object) -> bool:
        return name in self._extensions

    def __len__(self) -> int:
        return len(self._extensions)


def _apply_transform(value: Any, source: str, transform: Optional[Transform]) -> Any:
    if transform is None:
        return value
    new_value = transform(value, source)
    return value if new_value is None else new_value


def _clean(value: Any, singleton: bool) -> Any:
    if singleton:
        return process_str(value) if isinstance(value, str) else value
    return process_list(value)


def define_extension(
    name: str,
    selector: str,
    singleton: bool = True,
    text_content_only: bool = True,
    attribute: Optional[str] = None,
    transform: Optional[Transform] = None,
    registry: Optional[ExtensionRegistry] = None,
) -> Extension:
    """Register a field extracted from HTML with a CSS selector.

    When read from HTML, the selector's first match (``singleton``) or all
    matches are taken. With ``text_content_only`` each match is reduced to its
    text, or to the value of ``attribute`` when one is given; otherwise the
    ``bs4.Tag`` itself is kept. When read from a record, the value stored
    under ``name`` is used as-is. Missing values default to None
    (``singleton``) or an empty list.

    Args:
        name: Field name, also the record key.
        selector: CSS selector evaluated against the parsed HTML.
        singleton: Keep only the first match.
        text_content_only: Reduce matches to strings.
        attribute: Read this attribute instead of the element text.
        transform: Called with ``(value, source)`` where source is
            ``"html"`` or ``"record"``; a non-None return value replaces the
            value.
        registry: Registry to add to (default: ``DEFAULT_EXTENSIONS``).

    Returns:
        The registered Extension.
    """

    def content(tag: Tag) -> Any:
        if not text_content_only:
            return tag
        if attribute:
            return tag.get(attribute)
        return tag.get_text()

    def from_markup(soup: BeautifulSoup) -> Any:
        results = soup.select(selector)
        if results:
            value = content(results[0]) if singleton else [content(tag) for tag in results]
        else:
            value = None if singleton else []
        if text_content_only:
            value = _clean(value, singleton)
        return _apply_transform(value, "html", transform)

    def from_record(record: Mapping[str, Any]) -> Any:
        value = record.get(name, None if singleton else [])
        return _apply_transform(_clean(value, singleton), "record", transform)

    extension = Extension(name, from_markup, from_record)
    return (registry if registry is not None else DEFAULT_EXTENSIONS).register(extension)


def remove_extension(name: str, registry: Optional[ExtensionRegistry] = None) -> bool:
    """Remove a field; returns False if it was never defined."""
    return (registry if registry is not None else DEFAULT_EXTENSIONS).remove(name)


# -- default fields ----------------------------------------------------------


def extract_base(soup: BeautifulSoup) -> Optional[Url]:
    tag = soup.find("base", href=True)
    href = process_str(tag["href"]) if tag else None
    base = Url(href) if href else None
    return base if base and base.is_parsable() else None


def record_base(record: Mapping[str, Any]) -> Optional[Url]:
    value = process_str(record.get("base"))
    return Url(value) if value else None


def extract_links(soup: BeautifulSoup) -> list[Url]:
    """Collect anchor hrefs in document order.

    Empty or unparsable hrefs and non-document schemes (``mailto:`` etc.)
    are skipped; duplicates are kept.
    """
    links = []
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if not href or href.lower().startswith(IGNORED_SCHEMES):
            continue
        link = Url(href)
        if not link.is_parsable():
            logger.debug("Skipping malformed href: %s", href)
            continue
        links.append(link)
    return links


def record_links(record: Mapping[str, Any]) -> list[Url]:
    links = (Url(link) for link in record.get("links") or [])
    return [link for link in links if link.value and link.is_parsable()]


def extract_text(soup: BeautifulSoup) -> list[str]:
    """Collect the text nodes sitting directly inside ``TEXT_ELEMENTS``."""
    snippets = []
    for node in soup.find_all(string=True):
        # Comments, CDATA, doctypes etc. subclass NavigableString
        if type(node) is not NavigableString:
            continue
        if node.parent is not None and node.parent.name in TEXT_ELEMENTS:
            snippets.append(str(node))
    return process_list(snippets)


def record_text(record: Mapping[str, Any]) -> list[str]:
    return process_list(record.get("text"))


def _split_keywords(value: Any, source: str) -> Optional[list]:
    if isinstance(value, str):
        return process_list(value.split(","))
    return None


DEFAULT_EXTENSIONS = ExtensionRegistry((
    Extension("base", extract_base, record_base),
    Extension("links", extract_links, record_links),
    Extension("text", extract_text, record_text),
))

define_extension("title", "title")
define_extension("author", "meta[name='author']", attribute="content")
define_extension("keywords", "meta[name='keywords']", attribute="content", transform=_split_keywords)
