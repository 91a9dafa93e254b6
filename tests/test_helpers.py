"""
Tests for domain handling, brand tokens, mention classification and dedup.
"""

from models.schemas import MentionReason, RankedSearchHit, SiteProfile
from utils.helpers import (
    brand_tokens,
    classify_mention,
    contains_brand_token,
    deduplicate_queries,
    extract_domain_from_url,
    registrable_domain,
    truncate_text
)


def test_extract_domain_from_url():
    assert extract_domain_from_url("https://www.hellofresh.com/about") == "hellofresh.com"
    assert extract_domain_from_url("http://m.example.com:8080?x=1") == "example.com"
    assert extract_domain_from_url("Example.org") == "example.org"
    assert extract_domain_from_url("") == ""


def test_registrable_domain_drops_subdomains():
    assert registrable_domain("https://blog.zentrix.io/post") == "zentrix.io"
    assert registrable_domain("https://shop.zentrix.co.uk") == "zentrix.co.uk"


def test_brand_tokens_example():
    site = SiteProfile(name="Acme Tools", url="https://www.acme-tools.io")
    tokens = brand_tokens(site)
    assert set(tokens) == {"acme tools", "acme", "tools", "acmetools", "acme-tools"}


def test_short_brand_name_and_domain_root_always_kept():
    assert brand_tokens(SiteProfile(name="HP", url="https://www.hp.com")) == ["hp"]
    assert brand_tokens(SiteProfile(name="3M", url="https://3m.com")) == ["3m"]


def test_short_word_fragments_dropped():
    tokens = brand_tokens(SiteProfile(name="Go Fast Labs", url="https://gofastlabs.com"))
    assert "go fast labs" in tokens
    assert "fast" in tokens
    assert "go" not in tokens


def test_short_tokens_match_whole_words_only():
    assert contains_brand_token("HP LaserJet review", ["hp"])
    assert contains_brand_token("best printer: hp?", ["hp"])
    assert not contains_brand_token("php hosting tutorial", ["hp"])
    assert not contains_brand_token("3mm drill bits", ["3m"])


def test_contains_brand_token_is_case_insensitive():
    assert contains_brand_token("Is ZENTRIX any good?", ["zentrix"])
    assert not contains_brand_token("best sprint tools", ["zentrix"])


def test_classify_mention(site):
    tokens = brand_tokens(site)
    site_domain = registrable_domain(site.url)

    by_domain = RankedSearchHit(rank=1, url="https://docs.zentrix.io/start", domain="docs.zentrix.io")
    by_text = RankedSearchHit(rank=2, domain="g2.com", title="Zentrix Labs reviews")
    unrelated = RankedSearchHit(rank=3, domain="jira.com", title="Jira", snippet="Issue tracking")

    assert classify_mention(by_domain, site_domain, tokens) == MentionReason.DOMAIN
    assert classify_mention(by_text, site_domain, tokens) == MentionReason.BRAND_IN_TEXT
    assert classify_mention(unrelated, site_domain, tokens) == MentionReason.NONE


def test_deduplicate_queries_across_categories():
    direct = ["zentrix review", " project tracking tools "]
    intermediate = ["project tracking tools", "sprint planning tips", ""]
    indirect = ["sprint planning tips ", "team productivity"]

    unique = deduplicate_queries(direct + intermediate + indirect)

    assert unique == ["zentrix review", "project tracking tools", "sprint planning tips", "team productivity"]
    assert len(unique) == len(set(unique))


def test_deduplicate_queries_ignore_case():
    assert deduplicate_queries(["Foo bar", "foo BAR"], ignore_case=True) == ["Foo bar"]
    assert deduplicate_queries(["Foo bar", "foo BAR"]) == ["Foo bar", "foo BAR"]


def test_truncate_text():
    assert truncate_text("This is a very long text", max_length=10) == "This is..."
    assert truncate_text("Short", max_length=10) == "Short"
