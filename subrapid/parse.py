import re
from typing import List
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup

# CSP source expressions that never name an origin
CSP_KEYWORDS = {
    "self",
    "none",
    "strict-dynamic",
    "report-sample",
    "trusted-types-eval",
    "inline-speculation-rules",
    "wasm-unsafe-eval",
}
CSP_KEYWORD_PREFIXES = ("unsafe-", "nonce-", "sha256-", "sha384-", "sha512-")

HOST_RX = re.compile(r"[a-z0-9_](?:[a-z0-9_\-]*[a-z0-9])?(?:\.[a-z0-9_](?:[a-z0-9_\-]*[a-z0-9])?)+")
SCHEME_ONLY_RX = re.compile(r"[a-z][a-z0-9+.\-]*:")


def extract_links(body: str, base_url: str) -> List[str]:
    """Absolute URLs of every <a href> in `body`, in document order."""
    soup = BeautifulSoup(body, "html.parser")
    out: List[str] = []
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        if not href or href.startswith("#") or href.lower().startswith("javascript:"):
            continue
        try:
            out.append(urljoin(base_url, href))
        except ValueError:
            continue
    return out


def _has_host(url: str) -> bool:
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return False
    return bool(host) and HOST_RX.fullmatch(host) is not None


def extract_csp_links(csp_header: str) -> List[str]:
    """
    Candidate origins named in a Content-Security-Policy header.

    "default-src 'self' https://cdn.example.com; img-src data:" -> ["https://cdn.example.com"]
    """
    out: List[str] = []
    for directive in csp_header.split(";"):
        # first token is the directive name (default-src, script-src, ...)
        for token in directive.split()[1:]:
            token = token.replace("'", "").replace('"', "")
            low = token.lower()
            if not token or low in CSP_KEYWORDS or low.startswith(CSP_KEYWORD_PREFIXES):
                continue
            if SCHEME_ONLY_RX.fullmatch(low) or "*" in token:
                continue
            if "://" in token:
                if _has_host(token):
                    out.append(token)
                continue
            candidate = f"https://{token}"
            if _has_host(candidate):
                out.append(candidate)
    return out
