"""Shared fixtures: a fake HTTP client serving canned responses."""

from types import SimpleNamespace

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from sitecrawl.config import CrawlConfig
from sitecrawl.crawler import Crawler


def make_response(status: int = 200, body: str = "", headers: dict | None = None) -> SimpleNamespace:
    return SimpleNamespace(
        status_code=status,
        headers=CaseInsensitiveDict(headers or {}),
        text=body,
    )


class FakeClient:
    """Serves responses registered per url and records every GET.

    Unregistered urls raise ``requests.ConnectionError`` like an unknown host.
    """

    def __init__(self):
        self.routes: dict = {}
        self.requests: list[str] = []
        self.closed = False

    def respond(self, url: str, status: int, body: str = "", headers: dict | None = None) -> None:
        self.routes[url] = make_response(status, body, headers)

    def page(self, url: str, body: str, status: int = 200) -> None:
        self.respond(url, status, body)

    def redirect(self, url: str, location: str, status: int = 301) -> None:
        self.routes[url] = make_response(status, "", {"Location": location})

    def error(self, url: str, exc: Exception) -> None:
        self.routes[url] = exc

    def get(self, url: str):
        self.requests.append(url)
        route = self.routes.get(url)
        if route is None:
            raise requests.ConnectionError(f"Failed to resolve host for {url}")
        if isinstance(route, Exception):
            raise route
        return route

    def close(self) -> None:
        self.closed = True


def build_html(*links: str, text: str = "", title: str = "Test page") -> str:
    anchors = "".join(f'<a href="{link}">link</a>' for link in links)
    return (
        f"<html><head><title>{title}</title></head>"
        f"<body><p>{text}</p>{anchors}</body></html>"
    )


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def crawler(client: FakeClient) -> Crawler:
    return Crawler(CrawlConfig(), client=client)


@pytest.fixture
def html():
    return build_html
