"""Configuration dataclass for sitecrawl."""

from dataclasses import dataclass

DEFAULT_REDIRECT_LIMIT = 5


@dataclass(frozen=True)
class CrawlConfig:
    """Configuration for a crawl session.

    Built once by the caller and passed to the crawler and HTTP client.
    Per-call arguments (e.g. a redirect limit given to ``resolve``) take
    precedence over these values.
    """

    redirect_limit: int = DEFAULT_REDIRECT_LIMIT
    timeout: int = 30
    delay: float = 0.0  # Seconds to wait between page requests during a site crawl
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/131.0.0.0 Safari/537.36 sitecrawl/1.0"
    )
