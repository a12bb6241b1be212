from typing import Dict, Iterable, List, Optional, Type

from ..errors import ConfigError
from ..observer import CrawlObserver
from .base import DiscoverySource
from .bruteforce import DnsBruteforceSource
from .crawl import ActiveCrawlSource
from .crtsh import CertificateTransparencySource
from .wayback import WebArchiveSource

SOURCES: Dict[str, Type[DiscoverySource]] = {
    "crawl": ActiveCrawlSource,
    "crtsh": CertificateTransparencySource,
    "wayback": WebArchiveSource,
    "bruteforce": DnsBruteforceSource,
}


def build_sources(names: Iterable[str], observer: Optional[CrawlObserver] = None) -> List[DiscoverySource]:
    sources: List[DiscoverySource] = []
    for name in names:
        key = name.strip().lower()
        if not key:
            continue
        if key not in SOURCES:
            raise ConfigError(f"unknown source '{name}' (choose from {', '.join(SOURCES)})")
        sources.append(SOURCES[key](observer=observer))
    if not sources:
        raise ConfigError("at least one discovery source is required")
    return sources


__all__ = [
    "SOURCES",
    "build_sources",
    "DiscoverySource",
    "ActiveCrawlSource",
    "CertificateTransparencySource",
    "WebArchiveSource",
    "DnsBruteforceSource",
]
