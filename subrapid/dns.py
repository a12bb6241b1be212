import asyncio
import random
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

import aiodns

from .config import DNS_TIMEOUT

# ------------------------------ DNS Components --------------------------------

DEFAULT_NAMESERVERS = ["1.1.1.1", "8.8.8.8", "9.9.9.9"]
RECORD_TYPES = ("A", "AAAA", "CNAME")

Answer = Dict[str, Union[List[str], Optional[str]]]
Signature = Tuple[Tuple[str, ...], Tuple[str, ...], Optional[str]]
EMPTY_SIGNATURE: Signature = ((), (), None)


def signature(answer: Answer) -> Signature:
    """Order-independent fingerprint of an answer, used to compare names against wildcard replies."""
    return (tuple(sorted(answer.get("A") or [])), tuple(sorted(answer.get("AAAA") or [])), answer.get("CNAME"))


class DnsClient:
    """Bounded-concurrency aiodns resolver. Build it inside a running event loop."""

    def __init__(self, nameservers: Optional[Sequence[str]] = None, timeout: float = DNS_TIMEOUT,
                 max_conc: int = 200):
        self.resolver = aiodns.DNSResolver(
            nameservers=list(nameservers or DEFAULT_NAMESERVERS),
            timeout=timeout, tries=1
        )
        self.sem = asyncio.Semaphore(max_conc)

    async def lookup(self, fqdn: str, rtype: str) -> List[str]:
        async with self.sem:
            try:
                ans = await self.resolver.query(fqdn, rtype)
            except aiodns.error.DNSError:
                # NXDOMAIN, no data and timeouts all count as "does not resolve"
                return []
        if rtype == "CNAME":
            return [ans.cname.rstrip(".")] if ans and getattr(ans, "cname", "") else []
        return [a.host for a in ans]

    async def resolve_all(self, fqdn: str) -> Answer:
        a, aaaa, cname = await asyncio.gather(*(self.lookup(fqdn, rtype) for rtype in RECORD_TYPES))
        return {"A": a, "AAAA": aaaa, "CNAME": cname[0] if cname else None}

    async def detect_wildcard(self, domain: str, samples: int = 5) -> FrozenSet[Signature]:
        """
        Signatures answered for random labels under `domain`.

        Empty when the zone has no wildcard record. Round-robin wildcards yield
        several signatures, so callers must drop names matching any of them.
        """
        labels = [f"nope-{random.randrange(10**9)}" for _ in range(samples)]
        answers = await asyncio.gather(*(self.resolve_all(f"{label}.{domain}") for label in labels))
        return frozenset(s for s in map(signature, answers) if s != EMPTY_SIGNATURE)
