"""HTML document model: extracted fields, link classification and text search."""

import json
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from bs4 import BeautifulSoup, Tag

from .extensions import DEFAULT_EXTENSIONS, ExtensionRegistry
from .url import Url
from .utils import format_sentence_length, process_list


@dataclass(frozen=True)
class HtmlSource:
    """A freshly crawled page: its Url and HTML."""

    url: Url
    html: str = ""


@dataclass(frozen=True)
class RecordSource:
    """A previously persisted document record (e.g. a storage search result)."""

    record: Mapping[str, Any]


Source = Union[HtmlSource, RecordSource]


class Document:
    """A web page: its Url, HTML and the fields extracted from it.

    A Document is built either from crawled HTML or from a persisted record;
    either way every registered extension fills its field once, so ``title``,
    ``links``, ``text`` etc. are available regardless of the source. The
    ``score`` is only meaningful for documents returned by a storage search.

    Documents are read-only after construction, with the exception of
    ``search_replace`` which narrows ``text`` to the results of a search.
    """

    def __init__(self, source: Source, extensions: Optional[ExtensionRegistry] = None):
        registry = extensions if extensions is not None else DEFAULT_EXTENSIONS

        if isinstance(source, HtmlSource):
            if not isinstance(source.url, Url):
                raise TypeError(f"Expected a Url, got {type(source.url).__name__}")
            self.url = source.url
            self.html = source.html or ""
            self.score = 0.0
            self.soup = self._parse()
            self._fields = {ext.name: ext.from_markup(self.soup) for ext in registry}
        elif isinstance(source, RecordSource):
            record = source.record
            if "url" not in record:
                raise ValueError("A document record must contain a 'url'")
            url = record["url"]
            self.url = Url.from_record(url) if isinstance(url, Mapping) else Url(url)
            self.html = record.get("html") or ""
            self.score = float(record.get("score") or 0.0)
            self.soup = self._parse()
            self._fields = {ext.name: ext.from_record(record) for ext in registry}
        else:
            raise TypeError(f"Unsupported document source: {type(source).__name__}")

    @classmethod
    def from_html(cls, url: Union[str, Url], html: Optional[str] = "", **kwargs) -> "Document":
        return cls(HtmlSource(Url(url), html or ""), **kwargs)

    @classmethod
    def from_record(cls, record: Mapping[str, Any], **kwargs) -> "Document":
        return cls(RecordSource(record), **kwargs)

    def _parse(self) -> BeautifulSoup:
        return BeautifulSoup(self.html, "html.parser")

    # -- fields ------------------------------------------------------------

    def field(self, name: str) -> Any:
        """Value of an extension field, e.g. one added with ``define_extension``."""
        return self._fields[name]

    @property
    def fields(self) -> dict:
        return dict(self._fields)

    @property
    def links(self) -> list[Url]:
        return self._fields.get("links") or []

    @property
    def text(self) -> list[str]:
        return self._fields.get("text") or []

    @property
    def title(self) -> Optional[str]:
        return self._fields.get("title")

    @property
    def author(self) -> Optional[str]:
        return self._fields.get("author")

    @property
    def keywords(self) -> Optional[list[str]]:
        return self._fields.get("keywords")

    @property
    def base(self) -> Optional[Url]:
        return self._fields.get("base")

    @property
    def date_crawled(self):
        return self.url.date_crawled

    def select(self, selector: str) -> list[Tag]:
        """Run a CSS selector against the parsed HTML."""
        return self.soup.select(selector)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return self.url == other.url and self.html == other.html

    __hash__ = None

    def __repr__(self) -> str:
        return f"Document(url={self.url.value!r}, size={self.size()})"

    def is_empty(self) -> bool:
        return not self.html

    def size(self) -> int:
        """Number of characters of HTML."""
        return len(self.html)

    def stats(self) -> dict:
        """Lengths of the Url, HTML and every sized field.

        The text field is reported as ``text_snippets`` (number of snippets)
        and ``text_bytes`` (total characters).
        """
        stats = {"url": len(self.url), "html": len(self.html)}
        for name, value in self._fields.items():
            if name == "text":
                stats["text_snippets"] = len(self.text)
                stats["text_bytes"] = sum(len(snippet) for snippet in self.text)
            elif hasattr(value, "__len__"):
                stats[name] = len(value)
        return stats

    def to_record(self, include_html: bool = False) -> dict:
        """Return a storable dict of this document's Url, score and fields."""
        record = {"url": self.url.value, "score": self.score}
        if include_html:
            record["html"] = self.html
        for name, value in self._fields.items():
            record[name] = _serialize(value)
        return record

    def to_json(self, include_html: bool = False) -> str:
        return json.dumps(self.to_record(include_html), default=str)

    # -- links -------------------------------------------------------------

    def _is_internal(self, link: Url) -> bool:
        host = self.url.to_base()
        if host is None:
            return link.is_relative()
        return link.is_relative(host=host)

    def base_url(self, link: Union[str, Url, None] = None) -> Url:
        """The Url that relative links of this document resolve against.

        This is the ``<base href>`` value when the page has one (made
        absolute against this document's Url if relative), otherwise this
        document's Url. Anchor and query string links always address the
        current page, so for those this document's own Url is returned.
        Anchors and query strings are removed from the returned Url.

        Args:
            link: Relative link that will be resolved.

        Raises:
            ValueError: If ``link`` is absolute.
        """
        if link is not None:
            link = Url(link)
            if not link.is_relative():
                raise ValueError(f"link must be relative: '{link}'")
            if link.is_anchor() or link.is_query_string():
                return self.url.without_anchor().without_query_string()

        if self.base is not None:
            base = self.base if self.base.is_valid() else self.url.join(self.base)
        else:
            base = self.url
        return base.without_anchor().without_query_string()

    @property
    def internal_links(self) -> list[Url]:
        """Links to pages on this document's host, in relative form.

        Absolute links on the same host lose their scheme and host; one with
        an empty path (e.g. ``http://host#top``) becomes ``/``.
        """
        links = []
        for link in self.links:
            if not self._is_internal(link):
                continue
            if link.to_host() is not None:
                link = link.without_base()
                if not link.to_path():
                    link = Url("/")
            links.append(link)
        return process_list(links)

    @property
    def internal_full_links(self) -> list[Url]:
        """``internal_links`` made absolute against ``base_url``."""
        return [self.base_url(link=link).join(link) for link in self.internal_links]

    @property
    def external_links(self) -> list[Url]:
        """Links to other hosts, without trailing slashes."""
        links = [
            link.without_trailing_slash()
            for link in self.links
            if not self._is_internal(link)
        ]
        return process_list(links)

    # -- search ------------------------------------------------------------

    def search(self, query: str, sentence_limit: int = 80) -> list[str]:
        """Search this document's text, most hits first.

        ``query`` is a case-insensitive regular expression. Every text
        snippet with at least one match becomes a result, cut down to
        ``sentence_limit`` characters around its first match. Results are
        ordered by number of matches, highest first; snippets with equal
        counts keep their order in the text. Identical results are merged,
        the later hit count winning.

        Examples:
            >>> doc.search("cow")
            ['How now brown cow.']

        Args:
            query: Regular expression to search for.
            sentence_limit: Even maximum length of each result (0 = no limit).

        Returns:
            The matching snippets.

        Raises:
            ValueError: If ``query`` is empty or ``sentence_limit`` is odd or
                negative.
        """
        if not query:
            raise ValueError("A search query must be provided")
        if sentence_limit < 0:
            raise ValueError("The sentence_limit value must not be negative")
        if sentence_limit % 2 != 0:
            raise ValueError("The sentence_limit value must be even")

        regex = re.compile(query, re.IGNORECASE)
        results: dict[str, int] = {}

        for sentence in self.text:
            hits = sum(1 for _ in regex.finditer(sentence))
            if not hits:
                continue

            sentence = sentence.strip()
            match = regex.search(sentence)
            index = match.start() if match else 0
            results[format_sentence_length(sentence, index, sentence_limit)] = hits

        ranked = sorted(results.items(), key=lambda item: item[1], reverse=True)
        return [sentence for sentence, _ in ranked]

    def search_replace(self, query: str, sentence_limit: int = 80) -> list[str]:
        """Like ``search`` but the results replace this document's text.

        Returns:
            The text as it was before the search.
        """
        original = self.text
        self._fields["text"] = self.search(query, sentence_limit)
        return original


def _serialize(value: Any) -> Any:
    if isinstance(value, Url):
        return value.value
    if isinstance(value, Tag):
        return str(value)
    if isinstance(value, list):
        return [_serialize(item) for item in value]
    return value
