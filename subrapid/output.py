import json
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from rich.console import Console
from rich.markup import escape

from .console import console, out_console
from .domains import SubdomainMap

# ------------------------------- Output ----------------------------------------


def now_utc() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def print_subdomains(results: SubdomainMap, root_domain: str, target: Optional[Console] = None) -> int:
    """Print hosts under `root_domain`, one per line, with the subdomain label highlighted."""
    target = target or out_console
    hosts = results.hosts_under(root_domain)
    for host in hosts:
        sub = host[: -(len(root_domain) + 1)]
        target.print(f"[bold cyan]{escape(sub)}[/].{escape(root_domain)}", highlight=False)
    return len(hosts)


class OutputManager:
    def __init__(self, outdir: str):
        self.outdir = outdir
        os.makedirs(outdir, exist_ok=True)

    def write_txt(self, root_domain: str, results: SubdomainMap) -> str:
        path = os.path.join(self.outdir, f"{root_domain}_subdomains.txt")
        with open(path, "w", encoding="utf-8") as f:
            for host in results.hosts_under(root_domain):
                f.write(host + "\n")
        console.print(f"[green]✓[/] TXT saved: [cyan]{escape(path)}[/]")
        return path

    def write_json(self, root_domain: str, results: SubdomainMap, meta: Dict[str, Any]) -> str:
        path = os.path.join(self.outdir, f"{root_domain}_results.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"meta": meta, "results": results.to_dict()}, f, ensure_ascii=False, indent=2)
        console.print(f"[green]✓[/] JSON saved: [cyan]{escape(path)}[/]")
        return path
