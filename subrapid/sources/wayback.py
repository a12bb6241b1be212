import logging
from typing import Set
from urllib.parse import urlencode

from ..config import WAYBACK_TIMEOUT, DiscoveryConfig
from ..domains import SubdomainMap, split_url
from ..errors import FetchError, NotFoundError, SourceError
from .base import DiscoverySource

log = logging.getLogger(__name__)

# ------------------------------ Web archive ------------------------------------


class WebArchiveSource(DiscoverySource):
    """Hosts of URLs captured by the Wayback Machine (CDX index)."""

    name = "Wayback Machine"
    timeout = WAYBACK_TIMEOUT

    @staticmethod
    def query_url(root_domain: str) -> str:
        params = {"url": root_domain, "output": "json", "limit": 100000, "fl": "original"}
        return "http://web.archive.org/cdx/search/cdx?" + urlencode(params)

    async def discover(self, config: DiscoveryConfig) -> SubdomainMap:
        url = self.query_url(config.root_domain)
        async with self.fetcher(config) as fetch:
            try:
                page = await fetch(url)
            except NotFoundError:
                return SubdomainMap()
            except FetchError as exc:
                raise SourceError(self.name, str(exc)) from exc

        # the CDX API answers an empty body when nothing was captured
        rows = self.load_json(page.body) if page.body.strip() else []
        if not isinstance(rows, list):
            raise SourceError(self.name, "response was not a JSON array")

        results = SubdomainMap()
        seen: Set[str] = set()
        # first row is the header: ["original"]
        for row in rows[1:]:
            if not isinstance(row, list) or not row or not isinstance(row[0], str):
                continue
            host, _ = split_url(row[0])
            if not host or host in seen:
                continue
            seen.add(host)
            self.record(results, row[0], config)

        log.debug("Wayback returned %d records over %d hosts", max(len(rows) - 1, 0), len(seen))
        return results
