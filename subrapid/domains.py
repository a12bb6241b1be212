from typing import Dict, Iterator, List, Optional, Set, Tuple
from urllib.parse import urlsplit, urlunsplit

import tldextract

# bundled Public Suffix List snapshot, never refreshed over the network
_extract = tldextract.TLDExtract(suffix_list_urls=())

DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443}


def resolve_root_domain(host: str) -> Optional[str]:
    """
    Registrable ("root") domain of a host using the Public Suffix List.

    - "www.stackoverflow.com" -> "stackoverflow.com"
    - "a.b.example.co.uk"     -> "example.co.uk"
    - "co.uk"                 -> None (a public suffix is not registrable itself)
    """
    host = (host or "").strip().lower().rstrip(".")
    if not host:
        return None
    root = _extract(host).top_domain_under_public_suffix
    return root or None


def is_public_suffix(name: str) -> bool:
    """True when `name` is itself a listed public suffix such as "co.uk"."""
    name = (name or "").strip().lower().rstrip(".")
    ext = _extract(name)
    return bool(name) and not ext.domain and ext.suffix == name


def host_in_scope(host: str, root_domain: str) -> bool:
    """True for `root_domain` itself and any dotted subdomain of it."""
    host = host.lower()
    root = root_domain.lower()
    return host == root or host.endswith("." + root)


def canonical_url(url: str) -> Optional[str]:
    """
    Normalized form used to tell URLs apart: lower-case scheme and host, default
    port dropped, empty path as "/", fragment removed. None when there is no host.
    """
    try:
        parts = urlsplit(url.strip())
        host = parts.hostname
        port = parts.port
    except ValueError:
        return None
    if not host:
        return None
    scheme = parts.scheme.lower()
    netloc = f"[{host}]" if ":" in host else host
    if port is not None and DEFAULT_PORTS.get(scheme) != port:
        netloc += f":{port}"
    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, ""))


def split_url(url: str) -> Tuple[Optional[str], str]:
    """(lower-cased host, path without query/fragment) of a URL."""
    try:
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError:
        return None, ""
    return host, parts.path or "/"


class SubdomainMap:
    """host -> set of paths seen for it, restricted to one root domain per add()."""

    def __init__(self) -> None:
        self._inner: Dict[str, Set[str]] = {}

    def add(self, url: str, root_domain: str) -> bool:
        """
        Record `url` when its host is in scope of `root_domain`.

        Returns True only when the host was not in the map before, so callers can
        announce each new subdomain exactly once.
        """
        host, path = split_url(url)
        if not host or not host_in_scope(host, root_domain):
            return False
        paths = self._inner.get(host)
        if paths is None:
            self._inner[host] = {path}
            return True
        paths.add(path)
        return False

    def merge(self, other: "SubdomainMap") -> None:
        for host, paths in other._inner.items():
            self._inner.setdefault(host, set()).update(paths)

    def hosts(self) -> List[str]:
        return sorted(self._inner)

    def hosts_under(self, root_domain: str) -> List[str]:
        """Sorted hosts below `root_domain`, excluding the root domain itself."""
        root = root_domain.lower()
        return sorted(h for h in self._inner if h != root and host_in_scope(h, root))

    def paths(self, host: str) -> Set[str]:
        return set(self._inner.get(host.lower(), ()))

    def pairs(self) -> Set[Tuple[str, str]]:
        return {(host, path) for host, paths in self._inner.items() for path in paths}

    def to_dict(self) -> Dict[str, List[str]]:
        return {host: sorted(self._inner[host]) for host in sorted(self._inner)}

    def __contains__(self, host: object) -> bool:
        return isinstance(host, str) and host.lower() in self._inner

    def __iter__(self) -> Iterator[str]:
        return iter(self.hosts())

    def __len__(self) -> int:
        return len(self._inner)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SubdomainMap):
            return NotImplemented
        return self._inner == other._inner

    def __repr__(self) -> str:
        return f"SubdomainMap({self.to_dict()!r})"
