import asyncio
from typing import Dict, List, Optional, Union

import pytest

from subrapid.errors import NotFoundError
from subrapid.http import FetchResult
from subrapid.observer import CrawlObserver


class FakeWeb:
    """In-memory fetch collaborator: URL -> FetchResult or exception, anything else is a 404."""

    def __init__(self, pages: Optional[Dict[str, Union[FetchResult, str, Exception]]] = None):
        self.pages = dict(pages or {})
        self.fetched: List[str] = []

    def page(self, url: str, body: str, csp: Optional[str] = None) -> None:
        headers = {"Content-Security-Policy": csp} if csp else {}
        self.pages[url] = FetchResult(url=url, status=200, body=body, headers=headers)

    async def __call__(self, url: str) -> FetchResult:
        self.fetched.append(url)
        # let other workers interleave
        await asyncio.sleep(0)
        entry = self.pages.get(url)
        if entry is None:
            raise NotFoundError(url)
        if isinstance(entry, Exception):
            raise entry
        if isinstance(entry, str):
            return FetchResult(url=url, status=200, body=entry)
        return entry


class RecordingObserver(CrawlObserver):
    def __init__(self):
        self.pages: List[str] = []
        self.discovered: List[str] = []
        self.errors: List[str] = []

    def on_page_fetched(self, worker_id, url, links, stats):
        self.pages.append(url)

    def on_subdomain_discovered(self, host, root_domain, source, worker_id=None, stats=None):
        self.discovered.append(host)

    def on_error(self, url, error, worker_id=None, stats=None):
        self.errors.append(url)


def anchors(*hrefs: str) -> str:
    return "<html><body>" + "".join(f'<a href="{h}">link</a>' for h in hrefs) + "</body></html>"


@pytest.fixture
def web():
    return FakeWeb()


@pytest.fixture
def observer():
    return RecordingObserver()
