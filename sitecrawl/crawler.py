"""Core crawl engine - single pages, page lists and whole sites."""

import logging
import time
from typing import Any, Callable, Iterable, Optional, Union

import requests

from .config import CrawlConfig
from .document import Document, HtmlSource
from .fetcher import HttpClient
from .resolver import FetchClient, RedirectError, RedirectResolver, Resolution
from .url import Url
from .utils import process_list

logger = logging.getLogger(__name__)

PageObserver = Callable[[Document], Any]

# Internal links with any other extension are not crawled as pages.
PAGE_EXTENSIONS = ("htm", "html")


class Crawler:
    """Crawls Urls into Documents.

    ``crawl_url`` fetches one page, ``crawl_urls`` several, and ``crawl_site``
    recursively follows a site's internal links until every reachable page
    has been visited, returning the external links found along the way.

    A page that cannot be fetched (transport error, empty body, a redirect
    the policy refuses) never raises: it yields no Document and its reason is
    kept in ``failed``. Invalid arguments do raise.
    """

    def __init__(self, config: Optional[CrawlConfig] = None, client: Optional[FetchClient] = None):
        self.config = config or CrawlConfig()
        self.client = client if client is not None else HttpClient(self.config)
        self.resolver = RedirectResolver(self.client, self.config.redirect_limit)
        self.docs: list[Optional[Document]] = []
        self.visited: set[Url] = set()
        self.failed: dict[str, str] = {}
        self.last_response: Any = None
        self.last_url: Optional[Url] = None

    def __enter__(self) -> "Crawler":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        close = getattr(self.client, "close", None)
        if close:
            close()

    # -- fetching ----------------------------------------------------------

    def resolve(self, url: Url, **kwargs) -> Resolution:
        """GET ``url`` following redirects; see ``RedirectResolver.resolve``."""
        kwargs.setdefault("on_redirect", self._log_redirect)
        return self.resolver.resolve(url, **kwargs)

    def fetch(
        self,
        url: Url,
        follow_external_redirects: bool = True,
        host: Union[str, Url, None] = None,
    ) -> tuple[Optional[str], Url]:
        """Fetch the HTML of ``url``, following redirects.

        Transport errors, refused redirects and empty bodies are logged and
        result in None rather than an exception. ``last_response`` is set to
        the last response received, or None after a transport error.

        Args:
            url: The Url to fetch.
            follow_external_redirects: Whether redirects may leave ``host``.
            host: Absolute Url bounding the redirects.

        Returns:
            The HTML (or None) and the Url it was finally fetched from.

        Raises:
            TypeError: If ``url`` is not a Url.
            ValueError: If ``host`` is missing while external redirects are
                disallowed.
        """
        if not isinstance(url, Url):
            raise TypeError(f"Expected a Url, got {type(url).__name__}")
        if not follow_external_redirects and host is None:
            raise ValueError("host cannot be None if follow_external_redirects is False")

        try:
            response, final_url = self.resolve(
                url,
                follow_external_redirects=follow_external_redirects,
                host=host,
            )
        except RedirectError as e:
            logger.debug("fetch('%s') redirect refused: %s", url, e)
            self.last_response = e.response
            self.failed[url.value] = str(e)
            return None, url
        except requests.RequestException as e:
            logger.debug("fetch('%s') transport error: %s", url, e)
            self.last_response = None
            self.failed[url.value] = f"{type(e).__name__}: {e}"
            return None, url
        except ValueError as e:
            # Malformed url values, e.g. an unbalanced IPv6 bracket
            logger.debug("fetch('%s') invalid url: %s", url, e)
            self.last_response = None
            self.failed[url.value] = f"Invalid url: {e}"
            return None, url

        self.last_response = response
        if not response.text:
            logger.debug("fetch('%s') empty body (HTTP %s)", url, response.status_code)
            self.failed[url.value] = f"Empty body (HTTP {response.status_code})"
            return None, final_url
        return response.text, final_url

    def _log_redirect(self, url: Url, response: Any, location: Url) -> None:
        logger.debug("Redirect (HTTP %s): %s -> %s", response.status_code, url, location)

    # -- crawling ----------------------------------------------------------

    def crawl_url(
        self,
        url: Url,
        follow_external_redirects: bool = True,
        host: Union[str, Url, None] = None,
        on_page: Optional[PageObserver] = None,
    ) -> Optional[Document]:
        """Crawl a single Url into a Document.

        The Url is marked crawled whether or not the fetch succeeds. The
        Document is built against the post-redirect Url and passed to
        ``on_page`` even when empty, so observers always see the attempt.

        Args:
            url: The Url to crawl.
            follow_external_redirects: Whether redirects may leave ``host``.
            host: Absolute Url bounding the redirects; required when
                ``follow_external_redirects`` is False.
            on_page: Called with the Document before it is returned.

        Returns:
            The Document, or None if no HTML could be fetched.

        Raises:
            TypeError: If ``url`` is not a Url.
            ValueError: If ``host`` is missing while external redirects are
                disallowed.
        """
        if not isinstance(url, Url):
            raise TypeError(f"Expected a Url, got {type(url).__name__}")
        if not follow_external_redirects and host is None:
            raise ValueError("host cannot be None if follow_external_redirects is False")

        html, final_url = self.fetch(
            url,
            follow_external_redirects=follow_external_redirects,
            host=host,
        )
        url.mark_crawled()
        if final_url is not url:
            final_url.mark_crawled(url.date_crawled)
        self.last_url = final_url

        doc = Document(HtmlSource(final_url, html or ""))
        if on_page:
            on_page(doc)

        return None if doc.is_empty() else doc

    def crawl_urls(
        self,
        urls: Iterable[Union[str, Url]],
        on_page: Optional[PageObserver] = None,
    ) -> Optional[Document]:
        """Crawl each Url in turn, following external redirects.

        Without ``on_page`` the results (None for failures) are collected in
        ``docs``.

        Returns:
            The last Document crawled (None if that crawl failed).

        Raises:
            ValueError: If ``urls`` is empty.
        """
        urls = [url if isinstance(url, Url) else Url(url) for url in urls]
        if not urls:
            raise ValueError("No urls to crawl")

        self.docs = []
        doc = None
        for url in urls:
            doc = self.crawl_url(url, on_page=on_page)
            if on_page is None:
                self.docs.append(doc)
        return doc

    def crawl_site(self, url: Url, on_page: Optional[PageObserver] = None) -> Optional[list[Url]]:
        """Crawl an entire site by recursively following its internal links.

        The root Url may redirect anywhere; the host it finally lands on then
        bounds the rest of the crawl, and redirects of other pages off that
        host are not followed. Each page is fetched at most once: the pre-
        and post-redirect form of every visited link, and both trailing
        slash variants of each, are recorded in ``visited``.

        Exceptions raised by ``on_page`` propagate and stop the crawl.

        Args:
            url: The root Url of the site, ideally its index page.
            on_page: Called with every crawled Document (including empty
                ones for failed pages).

        Returns:
            Unique external links found on the site's pages in first-seen
            order, or None if the root Url could not be crawled.
        """
        if not isinstance(url, Url):
            raise TypeError(f"Expected a Url, got {type(url).__name__}")

        self.visited = set()
        doc = self.crawl_url(url, on_page=on_page)
        if doc is None:
            return None

        host = doc.url.to_base()
        self._mark_visited(url, doc.url)
        externals = list(doc.external_links)
        internals = self.get_internal_links(doc)
        logger.info("Crawling site %s (%d internal links on root page)", host, len(internals))

        if not internals:
            return process_list(externals)

        while True:
            internals = process_list(internals)
            pending = [link for link in internals if link not in self.visited]
            if not pending:
                break

            for link in pending:
                # An earlier redirect in this pass may already have landed here
                if link in self.visited:
                    continue

                if self.config.delay > 0:
                    time.sleep(self.config.delay)

                original = Url(link)
                doc = self.crawl_url(
                    link,
                    follow_external_redirects=False,
                    host=host,
                    on_page=on_page,
                )
                self._mark_visited(original, self.last_url or link)
                if doc is None:
                    continue

                internals.extend(self.get_internal_links(doc))
                externals.extend(doc.external_links)

        logger.info("Finished crawling %s (%d urls visited)", host, len(self.visited))
        return process_list(externals)

    def _mark_visited(self, *urls: Url) -> None:
        for url in urls:
            self.visited.add(Url(url.value))
            self.visited.add(url.toggle_trailing_slash())

    def get_internal_links(self, doc: Document) -> list[Url]:
        """A document's internal page links in absolute form, for crawling.

        Anchors are removed (they don't change the page content) and links
        to non-HTML files are dropped.

        Args:
            doc: The Document whose links to extract.

        Returns:
            Unique absolute Urls on the document's host.
        """
        host = doc.url.to_base()
        links = process_list(link.without_anchor() for link in doc.internal_full_links)
        return [
            link for link in links
            if (host is None or link.is_relative(host=host)) and _is_page(link)
        ]


def _is_page(link: Url) -> bool:
    ext = link.to_extension()
    return ext is None or ext in PAGE_EXTENSIONS
