import argparse
import asyncio
import logging
import sys
import time
from typing import List, Optional

from rich.markup import escape
from rich.panel import Panel

from . import __version__
from .config import (
    DEFAULT_MAX_PAGES_PER_HOST,
    DEFAULT_SOURCES,
    DEFAULT_WORKERS,
    HTTP_TOTAL_TIMEOUT,
    USER_AGENT,
    DiscoveryConfig,
    parse_nameservers,
)
from .console import console, setup_logging
from .errors import ConfigError
from .observer import ConsoleObserver
from .output import OutputManager, now_utc, print_subdomains
from .runner import Subrapid
from .sources import SOURCES, build_sources
from .sources.bruteforce import load_wordlist

log = logging.getLogger(__name__)

# ----------------------------------- CLI ---------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="subrapid",
        description="Gather subdomains of a site by crawling it and querying passive sources",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("url", help='Starting URL (e.g. "https://example.com")')
    parser.add_argument("--root-domain", help="Root domain to scope to (derived from the URL host when omitted)")
    parser.add_argument("--workers", type=int, default=DEFAULT_WORKERS, help="Number of concurrent crawl workers")
    parser.add_argument("--max-pages-per-host", type=int, default=DEFAULT_MAX_PAGES_PER_HOST,
                        help="Maximum pages to crawl per host")
    parser.add_argument("--sources", default=",".join(DEFAULT_SOURCES),
                        help=f"Comma-separated discovery sources ({', '.join(SOURCES)})")
    parser.add_argument("--wordlist", help="Wordlist file for the bruteforce source")
    parser.add_argument("--nameservers", help="Comma-separated nameservers for the bruteforce source")
    parser.add_argument("--timeout", type=float, default=HTTP_TOTAL_TIMEOUT, help="Per-request HTTP timeout (seconds)")
    parser.add_argument("--user-agent", default=USER_AGENT, help="HTTP User-Agent")
    parser.add_argument("--output-dir", help="Also write <root>_subdomains.txt into this directory")
    parser.add_argument("--json", action="store_true", help="With --output-dir, also write JSON results")
    parser.add_argument("-q", "--quiet", action="store_true", help="Do not report every crawled page")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def config_from_args(args: argparse.Namespace) -> DiscoveryConfig:
    wordlist = tuple(load_wordlist(args.wordlist)) if args.wordlist else None
    return DiscoveryConfig.from_start_url(
        args.url,
        root_domain=args.root_domain,
        workers=args.workers,
        max_pages_per_host=args.max_pages_per_host,
        timeout=args.timeout,
        user_agent=args.user_agent,
        wordlist=wordlist,
        nameservers=parse_nameservers(args.nameservers),
    )


async def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = config_from_args(args)
        sources = build_sources(args.sources.split(","), observer=ConsoleObserver(quiet=args.quiet))
    except ConfigError as exc:
        console.print(f"[bold red]Error:[/] {escape(str(exc))}")
        return 2

    console.print(Panel.fit(f"[bold]Recon: [cyan]{escape(config.root_domain)}[/]", border_style="blue"))
    start = time.time()
    recon = Subrapid(sources)
    results = await recon.discover(config)

    console.print(f"\n[bold green]Discovered subdomains under '{escape(config.root_domain)}':[/]")
    total = print_subdomains(results, config.root_domain)
    console.print(f"\n[bold]Total subdomains found:[/] {total}")

    if args.output_dir:
        out = OutputManager(args.output_dir)
        out.write_txt(config.root_domain, results)
        if args.json:
            meta = {
                "root_domain": config.root_domain,
                "start_url": config.start_url,
                "generated_at": now_utc(),
                "sources": [s.name for s in sources],
                "failed_sources": recon.failures,
                "workers": config.workers,
                "max_pages_per_host": config.max_pages_per_host,
            }
            out.write_json(config.root_domain, results, meta)

    console.print(f"[bold green]Finished in {time.time() - start:.2f} seconds.[/]")
    return 0


def run() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user.[/]")
        sys.exit(130)
