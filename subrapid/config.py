import ipaddress
import os
import re
from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import urlsplit

from .domains import is_public_suffix, resolve_root_domain
from .errors import ConfigError

# ----------------------------- Config & Defaults ------------------------------

DEFAULT_WORKERS = 8
DEFAULT_MAX_PAGES_PER_HOST = 5

HTTP_TOTAL_TIMEOUT = float(os.getenv("SUBRAPID_HTTP_TIMEOUT", "20"))
CONNECT_TIMEOUT = 6.0
DNS_TIMEOUT = 2.0
CRTSH_TIMEOUT = 20.0
WAYBACK_TIMEOUT = 60.0

USER_AGENT = os.getenv("SUBRAPID_USER_AGENT", "subrapid/0.2 (+subdomain discovery)")

DEFAULT_SOURCES = ("crawl", "crtsh", "wayback")

DOMAIN_RX = re.compile(r"[a-z0-9](?:[a-z0-9\-]{0,61}[a-z0-9])?(?:\.[a-z0-9](?:[a-z0-9\-]{0,61}[a-z0-9])?)+")


@dataclass(frozen=True)
class DiscoveryConfig:
    """Settings shared by every discovery source for one run."""

    start_url: str
    root_domain: str
    workers: int = DEFAULT_WORKERS
    max_pages_per_host: int = DEFAULT_MAX_PAGES_PER_HOST
    timeout: float = HTTP_TOTAL_TIMEOUT
    user_agent: str = USER_AGENT
    wordlist: Optional[Tuple[str, ...]] = None
    nameservers: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        root = (self.root_domain or "").strip().lower().rstrip(".")
        if not root:
            raise ConfigError("root domain must not be empty")
        if not DOMAIN_RX.fullmatch(root):
            raise ConfigError(f"'{root}' is not a valid root domain")
        if is_public_suffix(root):
            raise ConfigError(f"'{root}' is a public suffix, not a registrable root domain")
        if self.workers < 1:
            raise ConfigError("worker count must be at least 1")
        if self.max_pages_per_host < 1:
            raise ConfigError("max pages per host must be at least 1")
        object.__setattr__(self, "root_domain", root)

    @classmethod
    def from_start_url(cls, url: str, root_domain: Optional[str] = None, **kwargs) -> "DiscoveryConfig":
        """Build a config from a start URL, deriving the root domain from its host when not given."""
        try:
            parts = urlsplit(url.strip())
            host = parts.hostname
        except ValueError as exc:
            raise ConfigError(f"invalid start URL: {url} ({exc})") from exc
        if parts.scheme not in ("http", "https"):
            raise ConfigError(f"invalid start URL: {url} (expected an http:// or https:// URL)")
        if not host:
            raise ConfigError(f"Cannot derive root domain from URL {url} without host")

        if root_domain:
            root = root_domain.lower()
        else:
            root = resolve_root_domain(host)
            if root is None:
                raise ConfigError(
                    f"Cannot derive root domain from host: {host}. Please specify --root-domain"
                )
        return cls(start_url=url.strip(), root_domain=root, **kwargs)


def parse_nameservers(value: Optional[str]) -> Optional[Tuple[str, ...]]:
    """Comma-separated nameserver IPs -> tuple, or None when empty."""
    if not value:
        return None
    servers = tuple(n.strip() for n in value.split(",") if n.strip())
    for server in servers:
        try:
            ipaddress.ip_address(server)
        except ValueError as exc:
            raise ConfigError(f"invalid nameserver '{server}': expected an IP address") from exc
    return servers or None
