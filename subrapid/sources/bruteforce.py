import asyncio
import logging
import re
from pathlib import Path
from typing import Any, Iterable, List, Optional, Set

import pycares

from ..config import DNS_TIMEOUT, DiscoveryConfig
from ..dns import EMPTY_SIGNATURE, DnsClient, signature
from ..domains import SubdomainMap
from ..errors import ConfigError, SourceError
from ..observer import CrawlObserver
from .base import DiscoverySource

log = logging.getLogger(__name__)

DEFAULT_WORDS = ("www", "mail", "ftp", "admin", "api", "dev", "test", "stage", "cdn",
                 "blog", "shop", "vpn", "portal", "static", "m", "beta", "docs", "status")

LABEL_RX = re.compile(r"[a-z0-9_](?:[a-z0-9_\-\.]{0,61}[a-z0-9])?")


def load_wordlist(path: str) -> List[str]:
    try:
        text = Path(path).read_text(encoding="utf-8", errors="ignore")
    except OSError as exc:
        raise ConfigError(f"cannot read wordlist {path}: {exc}") from exc
    return [line.strip() for line in text.splitlines() if line.strip() and not line.strip().startswith("#")]


def candidate_labels(words: Iterable[str]) -> List[str]:
    out: Set[str] = set()
    for word in words:
        word = word.strip().lower().strip(".")
        if word and not word.startswith("#") and LABEL_RX.fullmatch(word):
            out.add(word)
    return sorted(out)


class DnsBruteforceSource(DiscoverySource):
    """Resolve <label>.<root> for each wordlist label and keep the names that answer."""

    name = "dns-bruteforce"

    def __init__(self, resolver: Optional[Any] = None, observer: Optional[CrawlObserver] = None):
        super().__init__(observer=observer)
        self._resolver = resolver

    def _make_resolver(self, config: DiscoveryConfig) -> DnsClient:
        try:
            return DnsClient(nameservers=config.nameservers, timeout=DNS_TIMEOUT)
        except (pycares.AresError, ValueError) as exc:
            raise SourceError(self.name, f"cannot set up DNS resolver: {exc}") from exc

    async def discover(self, config: DiscoveryConfig) -> SubdomainMap:
        labels = candidate_labels(config.wordlist or DEFAULT_WORDS)
        resolver = self._resolver or self._make_resolver(config)
        root = config.root_domain

        wildcard = await resolver.detect_wildcard(root)
        if wildcard:
            log.debug("wildcard DNS detected under %s: %s", root, wildcard)

        async def resolve_one(label: str) -> Optional[str]:
            fqdn = f"{label}.{root}"
            sig = signature(await resolver.resolve_all(fqdn))
            if sig == EMPTY_SIGNATURE or sig in wildcard:
                return None
            return fqdn

        results = SubdomainMap()
        for fut in asyncio.as_completed([resolve_one(label) for label in labels]):
            fqdn = await fut
            if fqdn:
                self.record(results, f"https://{fqdn}", config)

        log.debug("bruteforce resolved %d of %d candidates under %s", len(results), len(labels), root)
        return results
