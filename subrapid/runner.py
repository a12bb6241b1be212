import asyncio
import logging
import time
from typing import Dict, List, Sequence

import aiohttp
from rich.markup import escape

from .config import DiscoveryConfig
from .console import console
from .domains import SubdomainMap
from .errors import SubrapidError
from .sources import DiscoverySource

log = logging.getLogger(__name__)

# --------------------------------- Runner --------------------------------------


class Subrapid:
    """Runs each source in turn and merges whatever they return into one map."""

    def __init__(self, sources: Sequence[DiscoverySource]):
        self.sources = list(sources)
        self.failures: Dict[str, str] = {}
        self.counts: Dict[str, int] = {}

    async def discover(self, config: DiscoveryConfig) -> SubdomainMap:
        aggregate = SubdomainMap()
        for source in self.sources:
            console.print(f"[bold cyan][*][/] Querying {escape(source.name)}...")
            start = time.time()
            try:
                found = await source.discover(config)
            except (SubrapidError, aiohttp.ClientError, asyncio.TimeoutError) as exc:
                self.failures[source.name] = str(exc) or type(exc).__name__
                console.print(f"[bold red][!][/] {escape(source.name)} failed: {escape(self.failures[source.name])}")
                log.debug("source %s failed", source.name, exc_info=True)
                continue
            self.counts[source.name] = len(found.hosts_under(config.root_domain))
            console.print(
                f"[green]✓[/] {escape(source.name)}: {self.counts[source.name]} subdomains "
                f"in {time.time() - start:.2f}s"
            )
            aggregate.merge(found)
        return aggregate

    @property
    def succeeded(self) -> List[str]:
        return [s.name for s in self.sources if s.name not in self.failures]
