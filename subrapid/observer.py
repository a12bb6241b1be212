from dataclasses import dataclass
from typing import Optional

from rich.console import Console
from rich.markup import escape

from .console import console as default_console


@dataclass(frozen=True)
class CrawlStats:
    """Snapshot of crawl progress used for reporting."""

    queued: int
    hosts_seen: int
    max_pages_per_host: int

    @property
    def max_possible(self) -> int:
        return self.hosts_seen * self.max_pages_per_host


class CrawlObserver:
    """Receives progress events from the crawler and the passive sources. Does nothing by default."""

    def on_page_fetched(self, worker_id: int, url: str, links: int, stats: CrawlStats) -> None:
        pass

    def on_subdomain_discovered(self, host: str, root_domain: str, source: str,
                                worker_id: Optional[int] = None, stats: Optional[CrawlStats] = None) -> None:
        pass

    def on_error(self, url: str, error: BaseException, worker_id: Optional[int] = None,
                 stats: Optional[CrawlStats] = None) -> None:
        pass


class ConsoleObserver(CrawlObserver):
    def __init__(self, console: Optional[Console] = None, quiet: bool = False):
        self.console = console or default_console
        self.quiet = quiet

    @staticmethod
    def _worker_tag(worker_id: Optional[int], stats: Optional[CrawlStats]) -> str:
        if worker_id is None or stats is None:
            return ""
        return f"[worker {worker_id} ({stats.queued} queued, max {stats.max_possible} possible)] "

    def on_page_fetched(self, worker_id, url, links, stats):
        if self.quiet:
            return
        tag = self._worker_tag(worker_id, stats)
        self.console.print(f"[bold blue][~][/] [cyan]{escape(tag)}[/]Finished {escape(url)} ({links} links)")

    def on_subdomain_discovered(self, host, root_domain, source, worker_id=None, stats=None):
        tag = self._worker_tag(worker_id, stats)
        self.console.print(
            f"[bold green][+][/] [cyan]{escape(tag)}[/]Discovered subdomain [bold]{escape(host)}[/] "
            f"at {escape(root_domain)} via {escape(source)}"
        )

    def on_error(self, url, error, worker_id=None, stats=None):
        tag = self._worker_tag(worker_id, stats)
        self.console.print(f"[bold red][!][/] [yellow]{escape(tag)}[/]Error processing {escape(url)}: {escape(str(error))}")
