import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Optional

import aiohttp

from .config import CONNECT_TIMEOUT, HTTP_TOTAL_TIMEOUT, USER_AGENT
from .errors import FetchError, NotFoundError

# ------------------------------ HTTP Components --------------------------------


@dataclass
class FetchResult:
    url: str
    status: int
    body: str
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def csp(self) -> Optional[str]:
        for key, value in self.headers.items():
            if key.lower() == "content-security-policy":
                return value
        return None


Fetcher = Callable[[str], Awaitable[FetchResult]]


class HttpClient:
    def __init__(self, timeout: float = HTTP_TOTAL_TIMEOUT, user_agent: str = USER_AGENT,
                 proxy: Optional[str] = None, verify_tls: bool = True, max_conc: int = 64):
        self.sem = asyncio.Semaphore(max_conc)
        self.verify_tls = verify_tls
        self.proxy = proxy
        self.user_agent = user_agent
        self.timeout = aiohttp.ClientTimeout(total=timeout, connect=min(CONNECT_TIMEOUT, timeout))
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        headers = {"User-Agent": self.user_agent}
        self.session = aiohttp.ClientSession(timeout=self.timeout, headers=headers, trust_env=True)
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self.session:
            await self.session.close()

    async def fetch(self, url: str) -> FetchResult:
        """GET `url`; 404 raises NotFoundError, any other non-2xx or transport failure FetchError."""
        if self.session is None:
            raise RuntimeError("HttpClient not started")
        async with self.sem:
            try:
                async with self.session.get(url, proxy=self.proxy, ssl=self.verify_tls) as r:
                    if r.status == 404:
                        raise NotFoundError(url)
                    if not 200 <= r.status < 300:
                        raise FetchError(url, f"request failed with status: {r.status}", status=r.status)
                    raw = await r.read()
                    return FetchResult(
                        url=str(r.url),
                        status=r.status,
                        body=raw.decode("utf-8", "ignore"),
                        headers=dict(r.headers),
                    )
            except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                raise FetchError(url, f"failed to GET: {exc or type(exc).__name__}") from exc
