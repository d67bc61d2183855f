"""Shared fixtures: a small PSL excerpt and the index built from it."""
import pytest

from regdomain.suffix.index import build_index
from regdomain.suffix.resolver import DomainResolver
from regdomain.suffix.rules import clean_psl_text, parse_rules


SAMPLE_PSL = """\
// This Source Code Form is subject to the terms of the Mozilla Public
// License, v. 2.0.

// ===BEGIN ICANN DOMAINS===

com
net
uk
co.uk
ac.uk

// ck : https://en.wikipedia.org/wiki/.ck
*.ck
!www.ck

jp
*.kawasaki.jp
!city.kawasaki.jp

br
com.br

// ===END ICANN DOMAINS===
// ===BEGIN PRIVATE DOMAINS===

github.io
blogspot.com
*.compute.example.net

// ===END PRIVATE DOMAINS===
"""


@pytest.fixture
def sample_psl():
    return SAMPLE_PSL


@pytest.fixture
def sample_rules(sample_psl):
    return parse_rules(clean_psl_text(sample_psl)).rules


@pytest.fixture
def sample_index(sample_rules):
    return build_index(sample_rules)


@pytest.fixture
def resolver(sample_index):
    return DomainResolver(sample_index)


@pytest.fixture
def hostname_corpus():
    return [
        "example.com",
        "a.b.example.com",
        "example.co.uk",
        "www.example.co.uk",
        "co.uk",
        "foo.bar.ck",
        "bar.ck",
        "foo.www.ck",
        "www.ck",
        "a.b.kawasaki.jp",
        "city.kawasaki.jp",
        "x.city.kawasaki.jp",
        "user.github.io",
        "x.user.github.io",
        "a.b.compute.example.net",
        "foo.bar.example",
        "com",
        "",
    ]
