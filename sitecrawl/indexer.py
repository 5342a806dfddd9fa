"""Crawl sites into a storage: documents plus the external urls they link to."""

import logging
from typing import Any, Callable, Optional, Union

from .crawler import Crawler
from .document import Document
from .storage import MemoryStorage
from .url import Url

logger = logging.getLogger(__name__)

DEFAULT_MAX_DATA_SIZE = 1_048_576_000


class Indexer:
    """Fills a storage by crawling sites.

    ``index_site`` indexes one site. ``index_the_web`` keeps picking
    uncrawled urls out of the storage (typically external links stored by
    earlier site crawls) and indexes their sites in turn.
    """

    def __init__(self, storage: MemoryStorage, crawler: Optional[Crawler] = None):
        self.storage = storage
        self.crawler = crawler or Crawler()

    def index_site(
        self,
        url: Union[str, Url],
        insert_externals: bool = True,
        on_page: Optional[Callable[[Document], Any]] = None,
    ) -> int:
        """Crawl a site and store its pages.

        Args:
            url: Root Url of the site.
            insert_externals: Also store the site's external links as
                uncrawled urls.
            on_page: Called with each crawled page; a falsy return value
                keeps that page out of the storage.

        Returns:
            Number of documents stored.
        """
        url = url if isinstance(url, Url) else Url(url)
        stored = 0

        def store(doc: Document) -> None:
            nonlocal stored
            if doc.is_empty():
                return
            if on_page is not None and not on_page(doc):
                return
            stored += self.storage.insert(doc)

        externals = self.crawler.crawl_site(url, on_page=store)
        self.storage.update(url)

        if externals is None:
            logger.warning("Failed to crawl site: %s", url)
            return 0

        if insert_externals and externals:
            inserted = self.storage.insert(externals)
            logger.info("Stored %d external url(s) from %s", inserted, url)

        logger.info("Stored %d document(s) from %s", stored, url)
        return stored

    def index_the_web(self, max_sites: int = -1, max_data_size: int = DEFAULT_MAX_DATA_SIZE) -> int:
        """Index the sites of uncrawled urls held in the storage.

        Stops when there are no uncrawled urls left, ``max_sites`` sites have
        been indexed (-1 = no limit) or the stored HTML reaches
        ``max_data_size`` characters.

        Returns:
            Number of sites indexed.
        """
        site_count = 0

        while max_sites < 0 or site_count < max_sites:
            if self.storage.size() >= max_data_size:
                logger.info("Reached max data size (%d), stopping", max_data_size)
                break

            urls = self.storage.uncrawled_urls()
            if not urls:
                logger.info("No uncrawled urls left, stopping")
                break

            for url in urls:
                if 0 <= max_sites <= site_count or self.storage.size() >= max_data_size:
                    break
                self.index_site(url)
                site_count += 1

        return site_count
