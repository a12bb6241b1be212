"""
Breadth-first, scope-limited crawl engine.

N worker tasks share one Frontier guarded by a single asyncio.Condition:

  - a worker pops the head of the queue and marks itself active;
  - with an empty queue it waits while any other worker is still active,
    since only an active worker can enqueue new URLs;
  - an empty queue with no active worker is final, so every worker exits.

Fetching and parsing happen outside the lock. Links found on a page are all
recorded in the result map, but only enqueued while their host is below the
per-host page cap.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Set

from .config import DiscoveryConfig
from .domains import SubdomainMap, canonical_url, host_in_scope, split_url
from .http import Fetcher
from .observer import CrawlObserver, CrawlStats
from .parse import extract_csp_links, extract_links

log = logging.getLogger(__name__)


@dataclass
class Frontier:
    queue: Deque[str] = field(default_factory=deque)
    enqueued: Set[str] = field(default_factory=set)
    host_counts: Dict[str, int] = field(default_factory=dict)
    active: int = 0

    def try_enqueue(self, url: str, host: str, cap: int) -> bool:
        if url in self.enqueued:
            return False
        if self.host_counts.get(host, 0) >= cap:
            return False
        self.enqueued.add(url)
        self.host_counts[host] = self.host_counts.get(host, 0) + 1
        self.queue.append(url)
        return True

    @property
    def drained(self) -> bool:
        return not self.queue and self.active == 0


class Crawler:
    def __init__(self, config: DiscoveryConfig, fetch: Fetcher, observer: Optional[CrawlObserver] = None,
                 source_name: str = "crawl"):
        self.config = config
        self.fetch = fetch
        self.observer = observer or CrawlObserver()
        self.source_name = source_name
        self.frontier = Frontier()
        self.results = SubdomainMap()
        self._cond: Optional[asyncio.Condition] = None

    def stats(self) -> CrawlStats:
        return CrawlStats(
            queued=len(self.frontier.enqueued),
            hosts_seen=len(self.frontier.host_counts),
            max_pages_per_host=self.config.max_pages_per_host,
        )

    async def run(self) -> SubdomainMap:
        """Crawl from the start URL until the frontier drains and return everything recorded."""
        self.frontier = Frontier()
        self.results = SubdomainMap()
        self._cond = asyncio.Condition()

        # the seed is crawled but not recorded: only hosts found in links count as discovered
        start = canonical_url(self.config.start_url) or self.config.start_url
        host, _ = split_url(start)
        self.frontier.try_enqueue(start, host or "", self.config.max_pages_per_host)

        workers = [asyncio.create_task(self._worker(i)) for i in range(self.config.workers)]
        await asyncio.gather(*workers)
        log.debug("crawl of %s drained: %d URLs enqueued across %d hosts",
                  self.config.root_domain, len(self.frontier.enqueued), len(self.frontier.host_counts))
        return self.results

    async def _next_url(self) -> Optional[str]:
        async with self._cond:
            while not self.frontier.queue:
                if self.frontier.active == 0:
                    self._cond.notify_all()
                    return None
                await self._cond.wait()
            self.frontier.active += 1
            return self.frontier.queue.popleft()

    async def _worker(self, worker_id: int) -> None:
        while True:
            url = await self._next_url()
            if url is None:
                return
            links = await self._links_for(url, worker_id)
            async with self._cond:
                self._record(links, worker_id)
                self.frontier.active -= 1
                self._cond.notify_all()
                stats = self.stats()
            self.observer.on_page_fetched(worker_id, url, len(links), stats)

    async def _links_for(self, url: str, worker_id: int) -> List[str]:
        try:
            page = await self.fetch(url)
            links = extract_links(page.body, page.url or url)
            if page.csp:
                links.extend(extract_csp_links(page.csp))
            return links
        except Exception as exc:
            # a failed page contributes no links; the crawl carries on
            log.debug("fetch of %s failed", url, exc_info=True)
            self.observer.on_error(url, exc, worker_id, self.stats())
            return []

    def _record(self, links: List[str], worker_id: int) -> None:
        root = self.config.root_domain
        for link in links:
            link = canonical_url(link)
            if link is None:
                continue
            host, _ = split_url(link)
            if not host_in_scope(host, root):
                continue
            if self.results.add(link, root) and host != root:
                self.observer.on_subdomain_discovered(host, root, self.source_name, worker_id, self.stats())
            self.frontier.try_enqueue(link, host, self.config.max_pages_per_host)
