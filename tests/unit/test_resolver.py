"""Unit tests for registrable domain lookup."""
import random
import pytest

from regdomain.suffix.index import build_index
from regdomain.suffix.resolver import (
    DomainResolver,
    IndexNotLoadedError,
    is_public_suffix,
    lookup,
    public_suffix
)
from regdomain.suffix.rules import RuleKind, parse_rule


class TestLookup:
    """Test eTLD+1 extraction."""
    
    def test_empty(self, sample_index):
        assert lookup("", sample_index) == ""
    
    def test_simple_domain(self, sample_index):
        assert lookup("google.com", sample_index) == "google.com"
    
    def test_subdomain(self, sample_index):
        assert lookup("www.google.com", sample_index) == "google.com"
    
    def test_multiple_subdomains(self, sample_index):
        assert lookup("a.b.example.com", sample_index) == "example.com"
    
    def test_co_uk_domain(self, sample_index):
        assert lookup("example.co.uk", sample_index) == "example.co.uk"
    
    def test_subdomain_co_uk(self, sample_index):
        assert lookup("www.example.co.uk", sample_index) == "example.co.uk"
    
    def test_private_suffix(self, sample_index):
        assert lookup("x.user.github.io", sample_index) == "user.github.io"
    
    def test_unknown_tld_uses_default_rule(self, sample_index):
        assert lookup("foo.bar.example", sample_index) == "bar.example"
    
    def test_wildcard(self, sample_index):
        assert lookup("foo.bar.ck", sample_index) == "foo.bar.ck"
        assert lookup("a.foo.bar.ck", sample_index) == "foo.bar.ck"
    
    def test_exception(self, sample_index):
        assert lookup("foo.www.ck", sample_index) == "www.ck"
        assert lookup("www.ck", sample_index) == "www.ck"
    
    def test_nested_wildcard_and_exception(self, sample_index):
        assert lookup("a.b.kawasaki.jp", sample_index) == "a.b.kawasaki.jp"
        assert lookup("city.kawasaki.jp", sample_index) == "city.kawasaki.jp"
        assert lookup("x.city.kawasaki.jp", sample_index) == "city.kawasaki.jp"
    
    def test_wildcard_below_plain_labels(self, sample_index):
        assert lookup("a.b.compute.example.net", sample_index) == "a.b.compute.example.net"
        assert lookup("foo.example.net", sample_index) == "example.net"
    
    def test_bare_public_suffix_falls_back_to_input(self, sample_index):
        assert lookup("com", sample_index) == "com"
        assert lookup("co.uk", sample_index) == "co.uk"
        assert lookup("bar.ck", sample_index) == "bar.ck"
    
    def test_public_suffix_fallback_is_cleaned(self, sample_index):
        assert lookup(" com. ", sample_index) == "com"
        assert lookup("co.uk.", sample_index) == "co.uk"
    
    @pytest.mark.parametrize("hostname", [" ", "\t", ".", "...", "   ..  "])
    def test_blank_or_dots(self, sample_index, hostname):
        assert lookup(hostname, sample_index) == ""
    
    def test_trailing_dot(self, sample_index):
        assert lookup("www.example.com.", sample_index) == "example.com"
    
    def test_empty_labels_do_not_crash(self, sample_index):
        assert lookup("a..example.com", sample_index) == "example.com"
    
    def test_root_only_index(self):
        index = build_index([])
        assert lookup("a.b.c", index) == "b.c"
        assert lookup("c", index) == "c"
    
    def test_every_normal_rule_plus_one_label(self, sample_index, sample_rules):
        for rule in sample_rules:
            if rule.kind != RuleKind.NORMAL:
                continue
            hostname = "anylabel." + rule.text
            assert lookup(hostname, sample_index) == hostname
    
    def test_no_index(self):
        with pytest.raises(IndexNotLoadedError, match="not initialized"):
            lookup("example.com", None)


class TestPrecedence:
    """Literal, wildcard and exception precedence."""
    
    def test_literal_preferred_over_wildcard(self):
        index = build_index([parse_rule("*.b"), parse_rule("sub.a.b")])
        
        assert public_suffix("x.a.b", index) == "a.b"
        assert lookup("x.sub.a.b", index) == "x.sub.a.b"
        assert public_suffix("x.sub.a.b", index) == "sub.a.b"
        # "q" only matches through the wildcard, which has no "sub" child
        assert public_suffix("x.sub.q.b", index) == "q.b"
    
    def test_literal_and_wildcard_same_depth(self):
        index = build_index([parse_rule("a.b"), parse_rule("*.b")])
        
        assert lookup("x.a.b", index) == "x.a.b"
        assert public_suffix("x.a.b", index) == "a.b"
        assert public_suffix("x.y.b", index) == "y.b"
    
    def test_longest_normal_rule_wins(self):
        index = build_index([parse_rule("uk"), parse_rule("co.uk")])
        assert public_suffix("a.co.uk", index) == "co.uk"
    
    def test_shorter_rule_kept_when_deeper_path_is_not_a_rule(self):
        index = build_index([parse_rule("uk"), parse_rule("x.b.uk")])
        assert public_suffix("a.b.uk", index) == "uk"
        assert lookup("a.b.uk", index) == "b.uk"
    
    def test_exception_beats_wildcard(self, sample_index):
        assert public_suffix("foo.www.ck", sample_index) == "ck"
        assert public_suffix("foo.bar.ck", sample_index) == "bar.ck"


class TestPublicSuffix:
    """Test the suffix helpers."""
    
    def test_public_suffix(self, sample_index):
        assert public_suffix("a.b.example.com", sample_index) == "com"
        assert public_suffix("example.co.uk", sample_index) == "co.uk"
        assert public_suffix("com", sample_index) == "com"
        assert public_suffix("", sample_index) == ""
    
    def test_is_public_suffix(self, sample_index):
        assert is_public_suffix("com", sample_index) is True
        assert is_public_suffix("co.uk", sample_index) is True
        assert is_public_suffix("bar.ck", sample_index) is True
        assert is_public_suffix("www.ck", sample_index) is False
        assert is_public_suffix("example.com", sample_index) is False
        assert is_public_suffix("", sample_index) is False


class TestDomainResolver:
    """Test index ownership and swapping."""
    
    def test_not_loaded(self):
        resolver = DomainResolver()
        
        assert resolver.is_loaded is False
        with pytest.raises(IndexNotLoadedError):
            resolver.lookup("example.com")
        with pytest.raises(IndexNotLoadedError):
            resolver.index
    
    def test_lookup(self, resolver):
        assert resolver.lookup("www.google.com") == "google.com"
        assert resolver.public_suffix("example.co.uk") == "co.uk"
        assert resolver.is_public_suffix("co.uk") is True
    
    def test_swap_returns_previous(self, sample_index):
        resolver = DomainResolver()
        
        assert resolver.swap(sample_index) is None
        replacement = build_index([parse_rule("example.com")])
        assert resolver.swap(replacement) is sample_index
        assert resolver.lookup("a.b.example.com") == "b.example.com"
    
    def test_old_index_untouched_by_swap(self, sample_index):
        resolver = DomainResolver(sample_index)
        held = resolver.index
        
        resolver.swap(build_index([]))
        
        assert lookup("foo.bar.ck", held) == "foo.bar.ck"
        assert resolver.lookup("foo.bar.ck") == "bar.ck"


class TestOrderIndependence:
    """Indexes built from permuted rules answer identically."""
    
    def test_permutations(self, sample_rules, hostname_corpus):
        reference = build_index(sample_rules)
        rng = random.Random(42)
        
        for _ in range(5):
            shuffled = list(sample_rules)
            rng.shuffle(shuffled)
            index = build_index(shuffled)
            for hostname in hostname_corpus:
                assert lookup(hostname, index) == lookup(hostname, reference)
