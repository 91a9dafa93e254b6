"""
Utility functions and helpers for the Brand Visibility Analysis pipeline.

This module provides the small shared helpers used across components:
identifier generation, URL/domain handling, brand-token derivation and
mention classification, and query deduplication.
"""

import re
import uuid
from typing import Iterable, List, Optional, Tuple

import tldextract

from models.schemas import MentionReason, RankedSearchHit, SiteProfile

MIN_BRAND_TOKEN_LENGTH = 3

# Bundled public suffix snapshot only; no network fetch at runtime.
_extractor: Optional[tldextract.TLDExtract] = None


def _get_extractor() -> tldextract.TLDExtract:
    global _extractor
    if _extractor is None:
        _extractor = tldextract.TLDExtract(suffix_list_urls=())
    return _extractor


def generate_record_id() -> str:
    """
    Generate a unique analysis record identifier.

    Returns:
        str: Unique ID as a string in UUID4 format

    Example:
        >>> record_id = generate_record_id()
        >>> print(record_id)
        '550e8400-e29b-41d4-a716-446655440000'
    """
    return str(uuid.uuid4())


def extract_domain_from_url(url: str) -> str:
    """
    Extract the host name from a URL, lowercased, without ``www.``/``m.``.

    Args:
        url: Full URL string (a bare host is accepted too)

    Returns:
        str: Host without protocol, port and path

    Example:
        >>> extract_domain_from_url("https://www.hellofresh.com/about")
        'hellofresh.com'
        >>> extract_domain_from_url("http://m.example.com:8080?x=1")
        'example.com'
    """
    domain = (url or "").strip().lower()
    domain = re.sub(r"^[a-z][a-z0-9+.-]*://", "", domain)

    domain = domain.split("/")[0].split("?")[0].split("#")[0]
    domain = domain.split("@")[-1].split(":")[0]

    for prefix in ("www.", "m."):
        if domain.startswith(prefix):
            domain = domain[len(prefix):]
            break

    return domain


def registrable_domain(url: str) -> str:
    """
    Registrable domain (domain + public suffix) of a URL or host.

    Example:
        >>> registrable_domain("https://blog.acme-tools.co.uk/post")
        'acme-tools.co.uk'
    """
    host = extract_domain_from_url(url)
    if not host:
        return ""
    extracted = _get_extractor()(host)
    if extracted.domain and extracted.suffix:
        return f"{extracted.domain}.{extracted.suffix}".lower()
    return host


def truncate_text(text: str, max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate text to a maximum length with optional suffix.

    Example:
        >>> truncate_text("This is a very long text", max_length=10)
        'This is...'
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


def _variants(words: List[str]) -> List[str]:
    if not words:
        return []
    variants = list(words)
    if len(words) > 1:
        variants += ["".join(words), "-".join(words), " ".join(words)]
    return variants


def brand_tokens(site: SiteProfile) -> List[str]:
    """
    Lowercase brand fragments used to detect mentions of the site.

    Covers the full name, its words, the registrable-domain root and the
    joined/hyphenated/spaced variants of both. The full name and the domain
    root are always kept; other fragments shorter than three characters are
    dropped.

    Example:
        >>> brand_tokens(SiteProfile(name="Acme Tools", url="https://acme-tools.io"))
        ['acme tools', 'acme', 'tools', 'acmetools', 'acme-tools']
        >>> brand_tokens(SiteProfile(name="HP", url="https://www.hp.com"))
        ['hp']
    """
    # (token, kept regardless of length)
    candidates: List[Tuple[str, bool]] = []

    name = " ".join((site.name or "").lower().split())
    if name:
        candidates.append((name, True))
        candidates += [(variant, False) for variant in _variants(re.findall(r"\w+", name))]

    host = extract_domain_from_url(site.url)
    if host:
        root = _get_extractor()(host).domain or host.split(".")[0]
        candidates.append((root, True))
        candidates += [
            (variant, False)
            for variant in _variants([part for part in re.split(r"[-_]", root) if part])
        ]

    tokens: List[str] = []
    for token, always in candidates:
        token = token.strip()
        if not token or token in tokens:
            continue
        if always or len(token) >= MIN_BRAND_TOKEN_LENGTH:
            tokens.append(token)
    return tokens


def contains_brand_token(text: str, tokens: Iterable[str]) -> bool:
    """
    Case-insensitive token check. Short tokens ("hp", "3m") only match as
    whole words.
    """
    lowered = (text or "").lower()
    for token in tokens:
        if len(token) < MIN_BRAND_TOKEN_LENGTH:
            if re.search(rf"\b{re.escape(token)}\b", lowered):
                return True
        elif token in lowered:
            return True
    return False


def classify_mention(hit: RankedSearchHit, site_domain: str, tokens: Iterable[str]) -> MentionReason:
    """
    Decide whether a search hit is attributable to the site.

    The domain check wins over the text check.
    """
    hit_domain = registrable_domain(hit.domain or hit.url)
    if site_domain and hit_domain == site_domain:
        return MentionReason.DOMAIN
    if contains_brand_token(f"{hit.title} {hit.snippet}", tokens):
        return MentionReason.BRAND_IN_TEXT
    return MentionReason.NONE


def deduplicate_queries(queries: Iterable[str], ignore_case: bool = False) -> List[str]:
    """
    Drop blank and repeated queries, keeping first-seen order.

    Queries are compared after trimming; ``ignore_case`` additionally folds
    case.
    """
    seen = set()
    unique: List[str] = []

    for query in queries:
        if not isinstance(query, str):
            continue
        text = query.strip()
        if not text:
            continue
        key = text.lower() if ignore_case else text
        if key not in seen:
            seen.add(key)
            unique.append(text)

    return unique
