import abc
import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from ..config import DiscoveryConfig
from ..domains import SubdomainMap, split_url
from ..errors import SourceError
from ..http import Fetcher, HttpClient
from ..observer import CrawlObserver


class DiscoverySource(abc.ABC):
    """A pluggable strategy producing the hosts it finds under the configured root domain."""

    name: str = ""
    timeout: Optional[float] = None

    def __init__(self, fetch: Optional[Fetcher] = None, observer: Optional[CrawlObserver] = None):
        self._fetch = fetch
        self.observer = observer or CrawlObserver()

    @abc.abstractmethod
    async def discover(self, config: DiscoveryConfig) -> SubdomainMap:
        ...

    @asynccontextmanager
    async def fetcher(self, config: DiscoveryConfig) -> AsyncIterator[Fetcher]:
        """The injected fetch callable, or a short-lived HttpClient for this run."""
        if self._fetch is not None:
            yield self._fetch
            return
        async with HttpClient(timeout=self.timeout or config.timeout, user_agent=config.user_agent) as http:
            yield http.fetch

    def load_json(self, body: str) -> Any:
        try:
            return json.loads(body)
        except json.JSONDecodeError as exc:
            raise SourceError(self.name, f"failed to parse JSON response: {exc}") from exc

    def record(self, results: SubdomainMap, url: str, config: DiscoveryConfig) -> bool:
        host_is_new = results.add(url, config.root_domain)
        if host_is_new:
            host, _ = split_url(url)
            if host != config.root_domain:
                self.observer.on_subdomain_discovered(host, config.root_domain, self.name)
        return host_is_new

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
