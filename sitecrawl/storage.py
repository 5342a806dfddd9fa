"""In-memory storage of crawled documents and discovered urls."""

import logging
import re
from typing import Iterable, Union

from .document import Document
from .url import Url

logger = logging.getLogger(__name__)

Storable = Union[Document, Url, str]


class MemoryStorage:
    """Keeps url and document records in dicts keyed by url.

    Documents are stored as records (``Document.to_record(include_html=True)``)
    and come back out of ``search`` as new Documents built from those records.
    Searching is a linear regex scan over every stored document.
    """

    def __init__(self):
        self._urls: dict[str, Url] = {}
        self._docs: dict[str, dict] = {}

    def insert(self, data: Union[Storable, Iterable[Storable]]) -> int:
        """Insert a Document, a Url (or url string) or an iterable of them.

        Records whose url is already stored are skipped.

        Returns:
            Number of records inserted.
        """
        if isinstance(data, (Document, Url, str)):
            data = [data]

        inserted = 0
        for item in data:
            if isinstance(item, Document):
                if item.url.value in self._docs:
                    logger.debug("Document already stored: %s", item.url)
                    continue
                self._docs[item.url.value] = item.to_record(include_html=True)
            else:
                url = item if isinstance(item, Url) else Url(item)
                if url.value in self._urls:
                    logger.debug("Url already stored: %s", url)
                    continue
                self._urls[url.value] = Url(url)
            inserted += 1
        return inserted

    def update(self, data: Storable) -> int:
        """Insert or replace a single Document or Url; returns 1."""
        if isinstance(data, Document):
            self._docs[data.url.value] = data.to_record(include_html=True)
        else:
            url = data if isinstance(data, Url) else Url(data)
            self._urls[url.value] = Url(url)
        return 1

    def uncrawled_urls(self, limit: int = 0) -> list[Url]:
        """Stored urls not yet crawled, in insertion order (0 = no limit)."""
        urls = [url for url in self._urls.values() if not url.crawled]
        return urls[:limit] if limit > 0 else urls

    def search(self, query: str, limit: int = 10, skip: int = 0) -> list[Document]:
        """Find stored documents whose title or text matches ``query``.

        ``query`` is a case-insensitive regular expression. Each document's
        score is its total number of matches; results are ordered by score,
        highest first, then by insertion order.

        Args:
            query: Regular expression to search for.
            limit: Maximum number of results.
            skip: Number of leading results to skip.

        Returns:
            Documents rebuilt from the stored records, with ``score`` set.
        """
        if not query:
            raise ValueError("A search query must be provided")

        regex = re.compile(query, re.IGNORECASE)
        scored = []
        for record in self._docs.values():
            haystack = [record.get("title") or ""] + list(record.get("text") or [])
            score = sum(len(regex.findall(value)) for value in haystack)
            if score:
                scored.append((score, record))

        scored.sort(key=lambda item: item[0], reverse=True)
        return [
            Document.from_record({**record, "score": float(score)})
            for score, record in scored[skip:skip + limit]
        ]

    def url_exists(self, url: Union[Url, str]) -> bool:
        return str(url) in self._urls

    def doc_exists(self, doc: Document) -> bool:
        return doc.url.value in self._docs

    def num_urls(self) -> int:
        return len(self._urls)

    def num_docs(self) -> int:
        return len(self._docs)

    def num_records(self) -> int:
        return self.num_urls() + self.num_docs()

    def size(self) -> int:
        """Total characters of stored HTML."""
        return sum(len(record.get("html") or "") for record in self._docs.values())
