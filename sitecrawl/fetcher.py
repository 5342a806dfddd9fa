"""HTTP transport: one GET per call, redirects left to the resolver."""

import logging

import requests

from .config import CrawlConfig

logger = logging.getLogger(__name__)


class HttpClient:
    """Thin wrapper around a ``requests.Session``.

    Redirects are never followed here; the 3xx response is returned as-is so
    that ``RedirectResolver`` can apply its host policy to every hop.
    Transport failures (DNS, connect, timeout) raise ``requests.RequestException``.
    """

    def __init__(self, config: CrawlConfig | None = None):
        self.config = config or CrawlConfig()
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": self.config.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
            "Accept-Encoding": "gzip, deflate",
        })

    def get(self, url: str) -> requests.Response:
        """Perform a single GET request.

        Args:
            url: Absolute URL to request.

        Returns:
            The raw response, which may be a redirect.
        """
        logger.debug("GET %s", url)
        return self.session.get(
            url,
            timeout=self.config.timeout,
            allow_redirects=False,
        )

    def close(self) -> None:
        self.session.close()
