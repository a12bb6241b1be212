import pytest

from subrapid.config import DEFAULT_MAX_PAGES_PER_HOST, DEFAULT_WORKERS, DiscoveryConfig, parse_nameservers
from subrapid.errors import ConfigError


class TestDiscoveryConfig:
    def test_defaults_and_normalization(self):
        config = DiscoveryConfig(start_url="https://example.com/", root_domain=" Example.COM. ")
        assert config.root_domain == "example.com"
        assert config.workers == DEFAULT_WORKERS
        assert config.max_pages_per_host == DEFAULT_MAX_PAGES_PER_HOST

    @pytest.mark.parametrize("root", ["", "   ", "localhost", "exa mple.com", "-bad.com", "*.example.com"])
    def test_invalid_root_domain(self, root):
        with pytest.raises(ConfigError):
            DiscoveryConfig(start_url="https://example.com/", root_domain=root)

    @pytest.mark.parametrize("root", ["co.uk", "CO.KR."])
    def test_public_suffix_is_not_a_root_domain(self, root):
        with pytest.raises(ConfigError, match="public suffix"):
            DiscoveryConfig(start_url="https://example.co.uk/", root_domain=root)

    def test_private_root_domain_is_allowed(self):
        config = DiscoveryConfig(start_url="http://wiki.intranet.lan/", root_domain="intranet.lan")
        assert config.root_domain == "intranet.lan"

    @pytest.mark.parametrize("field", ["workers", "max_pages_per_host"])
    def test_bounds(self, field):
        with pytest.raises(ConfigError):
            DiscoveryConfig(start_url="https://example.com/", root_domain="example.com", **{field: 0})

    def test_is_immutable(self):
        config = DiscoveryConfig(start_url="https://example.com/", root_domain="example.com")
        with pytest.raises(AttributeError):
            config.workers = 3


class TestFromStartUrl:
    def test_derives_root_domain(self):
        assert DiscoveryConfig.from_start_url("https://www.stackoverflow.com/questions").root_domain == "stackoverflow.com"
        assert DiscoveryConfig.from_start_url("https://a.b.example.co.uk/").root_domain == "example.co.uk"

    def test_explicit_root_domain_wins(self):
        config = DiscoveryConfig.from_start_url("https://meta.stackexchange.com/", root_domain="StackExchange.com",
                                                workers=2)
        assert config.root_domain == "stackexchange.com"
        assert config.workers == 2

    def test_suffix_only_host_needs_explicit_root(self):
        with pytest.raises(ConfigError, match="--root-domain"):
            DiscoveryConfig.from_start_url("https://co.uk/")

    @pytest.mark.parametrize("url", ["example.com", "ftp://example.com/", "https://", "http://[::1/"])
    def test_unusable_start_url(self, url):
        with pytest.raises(ConfigError):
            DiscoveryConfig.from_start_url(url)

    def test_explicit_public_suffix_root_is_rejected(self):
        with pytest.raises(ConfigError):
            DiscoveryConfig.from_start_url("https://www.example.co.uk/", root_domain="co.uk")


class TestParseNameservers:
    def test_ip_addresses(self):
        assert parse_nameservers("1.1.1.1, 2606:4700:4700::1111,") == ("1.1.1.1", "2606:4700:4700::1111")

    def test_empty(self):
        assert parse_nameservers(None) is None
        assert parse_nameservers(" , ") is None

    def test_rejects_hostnames_and_typos(self):
        with pytest.raises(ConfigError, match="not-an-ip"):
            parse_nameservers("1.1.1.1,not-an-ip")
