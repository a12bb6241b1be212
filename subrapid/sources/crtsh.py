import logging
from typing import Set
from urllib.parse import quote

from ..config import CRTSH_TIMEOUT, DiscoveryConfig
from ..domains import SubdomainMap
from ..errors import FetchError, NotFoundError, SourceError
from .base import DiscoverySource

log = logging.getLogger(__name__)

# ------------------------------ CT Logs ----------------------------------------


class CertificateTransparencySource(DiscoverySource):
    """Hostnames from certificates logged at crt.sh."""

    name = "crt.sh"
    timeout = CRTSH_TIMEOUT

    @staticmethod
    def query_url(root_domain: str) -> str:
        # %.example.com matches every name below the root
        return f"https://crt.sh/?q={quote('%.' + root_domain)}&output=json"

    async def discover(self, config: DiscoveryConfig) -> SubdomainMap:
        url = self.query_url(config.root_domain)
        async with self.fetcher(config) as fetch:
            try:
                page = await fetch(url)
            except NotFoundError:
                return SubdomainMap()
            except FetchError as exc:
                raise SourceError(self.name, str(exc)) from exc

        rows = self.load_json(page.body) if page.body.strip() else []
        if not isinstance(rows, list):
            raise SourceError(self.name, "response was not a JSON array")

        results = SubdomainMap()
        seen: Set[str] = set()
        for row in rows:
            if not isinstance(row, dict):
                continue
            for name in str(row.get("name_value", "")).splitlines():
                name = name.strip().lower().rstrip(".")
                if not name or "*" in name:
                    continue
                # one URL per distinct name
                if name in seen:
                    continue
                seen.add(name)
                self.record(results, f"https://{name}", config)

        log.debug("crt.sh returned %d rows, %d distinct names, %d in scope", len(rows), len(seen), len(results))
        return results
