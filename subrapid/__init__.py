"""
subrapid: subdomain discovery by crawling a site and querying passive sources
(crt.sh certificate logs, the Wayback Machine, DNS bruteforce).
"""

__version__ = "0.2.0"

from .config import DiscoveryConfig  # noqa: E402
from .crawler import Crawler  # noqa: E402
from .domains import SubdomainMap, host_in_scope, resolve_root_domain  # noqa: E402
from .parse import extract_csp_links, extract_links  # noqa: E402

__all__ = [
    "__version__",
    "DiscoveryConfig",
    "Crawler",
    "SubdomainMap",
    "host_in_scope",
    "resolve_root_domain",
    "extract_links",
    "extract_csp_links",
]
