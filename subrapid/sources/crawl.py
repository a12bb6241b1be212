from ..config import DiscoveryConfig
from ..crawler import Crawler
from ..domains import SubdomainMap
from .base import DiscoverySource


class ActiveCrawlSource(DiscoverySource):
    """Live breadth-first crawl from the start URL."""

    name = "crawl"

    async def discover(self, config: DiscoveryConfig) -> SubdomainMap:
        async with self.fetcher(config) as fetch:
            return await Crawler(config, fetch, self.observer, source_name=self.name).run()
