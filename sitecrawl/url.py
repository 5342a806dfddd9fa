"""URL value type carrying crawl state, with host/base/path views."""

from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union
from urllib.parse import ParseResult, urljoin, urlparse, urlunparse


class Url:
    """A URL string plus the state recorded when it gets crawled.

    Equality and hashing use the URL value only, so a ``Url`` can be looked
    up in sets of plain strings and vice versa. The crawl state is the only
    mutable part and is set by the crawler via ``mark_crawled``.

    Examples:
        >>> Url("https://example.com/docs/page.html").to_base()
        Url('https://example.com')
        >>> Url("/about").is_relative()
        True
    """

    def __init__(
        self,
        value: Union[str, "Url"],
        crawled: Optional[bool] = None,
        date_crawled: Optional[datetime] = None,
    ):
        if isinstance(value, Url):
            crawled = value.crawled if crawled is None else crawled
            date_crawled = date_crawled or value.date_crawled
            value = value.value

        self.value: str = (value or "").strip()
        self.crawled: bool = bool(crawled)
        self.date_crawled: Optional[datetime] = date_crawled

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Url":
        """Build a Url from a persisted record.

        Args:
            record: Mapping with a ``url`` key and optional ``crawled`` and
                ``date_crawled`` keys.

        Returns:
            Url carrying the record's crawl state.
        """
        return cls(
            record["url"],
            crawled=record.get("crawled", False),
            date_crawled=record.get("date_crawled"),
        )

    def to_record(self) -> dict:
        """Return the persisted form of this Url."""
        return {
            "url": self.value,
            "crawled": self.crawled,
            "date_crawled": self.date_crawled,
        }

    def mark_crawled(self, when: Optional[datetime] = None) -> None:
        """Flag this Url as crawled, stamping it with ``when`` (default: now)."""
        self.crawled = True
        self.date_crawled = when or datetime.now(timezone.utc)

    # -- comparison --------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Url):
            return self.value == other.value
        if isinstance(other, str):
            return self.value == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.value)

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"Url({self.value!r})"

    def __len__(self) -> int:
        return len(self.value)

    # -- views -------------------------------------------------------------

    @property
    def _parsed(self) -> ParseResult:
        return urlparse(self.value)

    def is_parsable(self) -> bool:
        """False for values ``urlparse`` rejects, e.g. ``http://[oops``."""
        try:
            self._parsed
        except ValueError:
            return False
        return True

    def is_valid(self) -> bool:
        """True if this Url is absolute: it has both a scheme and a host."""
        if not self.is_parsable():
            return False
        parsed = self._parsed
        return bool(parsed.scheme and parsed.netloc)

    def validate(self) -> None:
        """Raise ``ValueError`` unless this Url can be used as a crawl root."""
        if not self.is_valid():
            raise ValueError(f"Invalid url (must be absolute with a scheme): '{self.value}'")

    def to_host(self) -> Optional[str]:
        """Lowercased network location (port included) or None if relative."""
        netloc = self._parsed.netloc
        return netloc.lower() if netloc else None

    def to_base(self) -> Optional["Url"]:
        """Scheme and host only, e.g. ``https://example.com``; None if relative."""
        parsed = self._parsed
        if not (parsed.scheme and parsed.netloc):
            return None
        return Url(f"{parsed.scheme}://{parsed.netloc}")

    def to_path(self) -> str:
        return self._parsed.path

    def to_extension(self) -> Optional[str]:
        """Extension of the last path segment, e.g. ``html``, or None."""
        segment = self.to_path().rstrip("/").rsplit("/", 1)[-1]
        if "." not in segment:
            return None
        ext = segment.rsplit(".", 1)[-1].lower()
        return ext or None

    def to_anchor(self) -> Optional[str]:
        fragment = self._parsed.fragment
        return f"#{fragment}" if fragment else None

    def to_query_string(self) -> Optional[str]:
        query = self._parsed.query
        return f"?{query}" if query else None

    def is_anchor(self) -> bool:
        return self.value.startswith("#")

    def is_query_string(self) -> bool:
        return self.value.startswith("?")

    def is_relative(self, host: Union[str, "Url", None] = None) -> bool:
        """Determine whether this Url is relative, optionally to a given host.

        Without ``host`` a Url is relative when it has neither a scheme nor a
        network location. With ``host``, an absolute Url on that same host
        also counts as relative (i.e. it is an internal link).

        Args:
            host: Absolute Url (with scheme) whose host is compared against.

        Returns:
            True if this Url is relative (to ``host``, when given).

        Raises:
            ValueError: If ``host`` is not absolute.
        """
        parsed = self._parsed
        if host is None:
            return not (parsed.scheme or parsed.netloc)

        host = Url(host)
        if not host.is_valid():
            raise ValueError(f"host must be absolute and contain a scheme: '{host}'")

        if not parsed.netloc:
            # Schemed but host-less values (mailto: etc.) are not relative
            return not parsed.scheme
        return self.to_host() == host.to_host()

    # -- transforms --------------------------------------------------------

    def without_base(self) -> "Url":
        """Strip the scheme and host, leaving path, query and anchor."""
        parsed = self._parsed
        if not parsed.netloc:
            return Url(self.value)
        return Url(urlunparse(("", "", parsed.path, parsed.params, parsed.query, parsed.fragment)))

    def without_anchor(self) -> "Url":
        if "#" not in self.value:
            return Url(self.value)
        return Url(self.value.split("#", 1)[0])

    def without_query_string(self) -> "Url":
        if "?" not in self.value:
            return Url(self.value)
        before, _, after = self.value.partition("?")
        anchor = after.partition("#")[2]
        return Url(f"{before}#{anchor}" if anchor else before)

    def without_trailing_slash(self) -> "Url":
        if len(self.value) > 1 and self.value.endswith("/"):
            return Url(self.value[:-1])
        return Url(self.value)

    def toggle_trailing_slash(self) -> "Url":
        """Return the other slash variant of this Url (``/a`` <-> ``/a/``)."""
        if self.value.endswith("/"):
            return Url(self.value[:-1])
        return Url(self.value + "/")

    def concat(self, link: Union[str, "Url"]) -> "Url":
        """Append ``link`` to this Url with exactly one ``/`` between them.

        Anchors and query strings are appended as-is.

        Examples:
            >>> Url("http://example.com").concat("about.html")
            Url('http://example.com/about.html')
        """
        link = str(link).strip()
        if not link:
            return Url(self.value)
        if link.startswith(("#", "?")):
            return Url(self.value + link)
        return Url(self.value.rstrip("/") + "/" + link.lstrip("/"))

    def join(self, link: Union[str, "Url"]) -> "Url":
        """Resolve ``link`` against this Url (RFC 3986 reference resolution)."""
        return Url(urljoin(self.value, str(link).strip()))


def prefix_scheme(value: str, https: bool = False) -> str:
    """Prefix ``http://`` (or ``https://``) onto a value lacking a scheme.

    Args:
        value: URL string, e.g. ``example.com``.
        https: Use ``https://`` instead of ``http://``.

    Returns:
        The value with a scheme.
    """
    value = value.strip()
    if value.startswith(("http://", "https://")):
        return value
    scheme = "https" if https else "http"
    return f"{scheme}://{value.lstrip('/')}"
