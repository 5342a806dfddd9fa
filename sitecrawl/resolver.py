"""Redirect resolution with a host policy and a hop limit."""

import logging
from typing import Any, Callable, NamedTuple, Optional, Protocol, Union

from .config import DEFAULT_REDIRECT_LIMIT
from .url import Url

logger = logging.getLogger(__name__)


class FetchClient(Protocol):
    """Anything that can perform a single, non-redirecting GET."""

    def get(self, url: str) -> Any:
        ...


class RedirectError(Exception):
    """Base class for redirects the resolver refuses to follow.

    Attributes:
        response: The redirect response that triggered the error.
    """

    def __init__(self, message: str, response: Any = None):
        super().__init__(message)
        self.response = response


class TooManyRedirectsError(RedirectError):
    """The redirect chain is longer than the allowed limit."""


class ExternalRedirectError(RedirectError):
    """A redirect points outside of the permitted host."""


class InvalidRedirectError(RedirectError):
    """A redirect's ``Location`` header is not a parsable URL."""


class Resolution(NamedTuple):
    """Final (non-redirect) response and the Url it was fetched from."""

    response: Any
    url: Url


RedirectObserver = Callable[[Url, Any, Url], None]


def is_redirect(response: Any) -> bool:
    return 300 <= response.status_code < 400


class RedirectResolver:
    """Follows redirects for a GET request according to a host policy.

    Each hop is checked before it is taken: when external redirects are not
    allowed, a ``Location`` on a different host raises
    ``ExternalRedirectError``; when the hop count would exceed the limit,
    ``TooManyRedirectsError`` is raised. A limit of 0 disables redirects.
    """

    def __init__(self, client: FetchClient, redirect_limit: int = DEFAULT_REDIRECT_LIMIT):
        self.client = client
        self.redirect_limit = redirect_limit

    def resolve(
        self,
        url: Url,
        *,
        redirect_limit: Optional[int] = None,
        follow_external_redirects: bool = True,
        host: Union[str, Url, None] = None,
        on_redirect: Optional[RedirectObserver] = None,
    ) -> Resolution:
        """GET ``url``, following redirects until a final response arrives.

        Args:
            url: The Url to fetch. It is not modified.
            redirect_limit: Hops allowed for this call (default: the
                resolver's limit).
            follow_external_redirects: Whether redirects may leave ``host``.
            host: Absolute Url whose host bounds the redirects. Required when
                ``follow_external_redirects`` is False.
            on_redirect: Called with ``(url, response, location)`` for each
                redirect response before the hop is taken.

        Returns:
            Resolution holding the final response and its Url.

        Raises:
            TypeError: If ``url`` is not a Url.
            ValueError: If ``host`` is missing while external redirects are
                disallowed.
            ExternalRedirectError: On a redirect outside of ``host``.
            InvalidRedirectError: On a ``Location`` that cannot be parsed.
            TooManyRedirectsError: When the chain exceeds ``redirect_limit``.
            requests.RequestException: On transport failure.
        """
        if not isinstance(url, Url):
            raise TypeError(f"Expected a Url, got {type(url).__name__}")
        if not follow_external_redirects and host is None:
            raise ValueError("host cannot be None if follow_external_redirects is False")

        limit = self.redirect_limit if redirect_limit is None else redirect_limit
        current = Url(url)
        redirect_count = 0

        while True:
            response = self.client.get(current.value)
            location = Url(response.headers.get("location", ""))

            if not is_redirect(response) or not location.value:
                return Resolution(response, current)

            if not location.is_parsable():
                raise InvalidRedirectError(
                    f"Malformed redirect location '{location}' while fetching '{url}'",
                    response,
                )

            if on_redirect:
                on_redirect(current, response, location)

            if not follow_external_redirects and not location.is_relative(host=host):
                raise ExternalRedirectError(
                    f"External redirect not allowed - redirected to '{location}', "
                    f"which is outside of host '{Url(host).to_host()}'",
                    response,
                )

            if redirect_count >= limit:
                raise TooManyRedirectsError(
                    f"Too many redirects (limit: {limit}) while fetching '{url}'",
                    response,
                )

            redirect_count += 1
            next_url = current.join(location)
            logger.debug("Redirect %d: %s -> %s", redirect_count, current, next_url)
            current = next_url
