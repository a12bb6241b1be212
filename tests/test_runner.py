import asyncio
import io
import json

from rich.console import Console

from subrapid.cli import build_parser, config_from_args, main
from subrapid.config import DiscoveryConfig
from subrapid.domains import SubdomainMap
from subrapid.errors import SourceError
from subrapid.observer import ConsoleObserver, CrawlStats
from subrapid.output import OutputManager, print_subdomains
from subrapid.runner import Subrapid
from subrapid.sources.base import DiscoverySource
from subrapid.sources.bruteforce import DnsBruteforceSource

CONFIG = DiscoveryConfig(start_url="https://example.com/", root_domain="example.com")


class StaticSource(DiscoverySource):
    def __init__(self, name, *urls):
        super().__init__()
        self.name = name
        self.urls = urls

    async def discover(self, config):
        results = SubdomainMap()
        for url in self.urls:
            results.add(url, config.root_domain)
        return results


class FailingSource(DiscoverySource):
    name = "broken"

    async def discover(self, config):
        raise SourceError(self.name, "returned non-success status code: 500")


def _results(*urls):
    m = SubdomainMap()
    for url in urls:
        m.add(url, "example.com")
    return m


def _capture():
    buf = io.StringIO()
    return buf, Console(file=buf, width=200, color_system=None)


class TestRunner:
    def test_merges_sources_and_isolates_failures(self):
        recon = Subrapid([
            StaticSource("one", "https://a.example.com/1", "https://example.com/"),
            FailingSource(),
            StaticSource("two", "https://a.example.com/2", "https://b.example.com/"),
        ])
        results = asyncio.run(recon.discover(CONFIG))
        assert results.to_dict() == {
            "a.example.com": ["/1", "/2"],
            "b.example.com": ["/"],
            "example.com": ["/"],
        }
        assert list(recon.failures) == ["broken"]
        assert recon.succeeded == ["one", "two"]
        assert recon.counts == {"one": 1, "two": 2}


class TestOutput:
    def test_print_subdomains(self):
        buf, console = _capture()
        total = print_subdomains(_results("https://www.example.com/", "https://example.com/", "https://api.example.com/"),
                                 "example.com", console)
        assert total == 2
        assert buf.getvalue().splitlines() == ["api.example.com", "www.example.com"]

    def test_write_txt_and_json(self, tmp_path):
        out = OutputManager(str(tmp_path / "out"))
        results = _results("https://www.example.com/a?q=1", "https://example.com/")
        txt = out.write_txt("example.com", results)
        with open(txt, encoding="utf-8") as f:
            assert f.read() == "www.example.com\n"
        path = out.write_json("example.com", results, {"root_domain": "example.com"})
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        assert data["meta"] == {"root_domain": "example.com"}
        assert data["results"] == {"example.com": ["/"], "www.example.com": ["/a"]}


class TestConsoleObserver:
    def test_messages(self):
        buf, console = _capture()
        observer = ConsoleObserver(console=console)
        stats = CrawlStats(queued=3, hosts_seen=2, max_pages_per_host=5)
        observer.on_subdomain_discovered("blog.example.com", "example.com", "crawl", 1, stats)
        observer.on_page_fetched(1, "https://example.com/", 4, stats)
        observer.on_error("https://x.example.com/", RuntimeError("boom"), 0, stats)
        lines = buf.getvalue().splitlines()
        assert lines[0] == "[+] [worker 1 (3 queued, max 10 possible)] Discovered subdomain blog.example.com at example.com via crawl"
        assert "Finished https://example.com/ (4 links)" in lines[1]
        assert lines[2].startswith("[!] [worker 0 (3 queued, max 10 possible)] Error processing https://x.example.com/")

    def test_quiet_skips_page_progress(self):
        buf, console = _capture()
        ConsoleObserver(console=console, quiet=True).on_page_fetched(0, "https://example.com/", 0,
                                                                    CrawlStats(1, 1, 5))
        assert buf.getvalue() == ""


class TestCli:
    def test_config_from_args(self, tmp_path):
        words = tmp_path / "words.txt"
        words.write_text("www\napi\n", encoding="utf-8")
        args = build_parser().parse_args([
            "https://www.example.co.uk/", "--workers", "3", "--max-pages-per-host", "2",
            "--wordlist", str(words), "--nameservers", "1.1.1.1, 8.8.8.8",
        ])
        config = config_from_args(args)
        assert config.root_domain == "example.co.uk"
        assert (config.workers, config.max_pages_per_host) == (3, 2)
        assert config.wordlist == ("www", "api")
        assert config.nameservers == ("1.1.1.1", "8.8.8.8")

    def test_defaults(self):
        args = build_parser().parse_args(["https://example.com"])
        assert args.sources == "crawl,crtsh,wayback"
        assert config_from_args(args).wordlist is None

    def test_config_errors_exit_before_discovery(self):
        assert asyncio.run(main(["https://co.uk/"])) == 2
        assert asyncio.run(main(["not-a-url"])) == 2
        assert asyncio.run(main(["https://example.com/", "--sources", "nope"])) == 2
        assert asyncio.run(main(["https://example.com/", "--sources", "crawl,bruteforce", "--nameservers", "8.8.8,x"])) == 2


class TestRunnerWithBruteforce:
    def test_resolver_setup_failure_is_isolated(self):
        config = DiscoveryConfig(start_url="https://example.com/", root_domain="example.com",
                                 nameservers=("not-an-ip",))
        recon = Subrapid([StaticSource("one", "https://a.example.com/"), DnsBruteforceSource()])
        results = asyncio.run(recon.discover(config))
        assert results.hosts_under("example.com") == ["a.example.com"]
        assert list(recon.failures) == ["dns-bruteforce"]
