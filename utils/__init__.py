# Utilities package

from .helpers import (
    generate_record_id,
    extract_domain_from_url,
    registrable_domain,
    truncate_text,
    brand_tokens,
    contains_brand_token,
    classify_mention,
    deduplicate_queries
)
from .json_extractor import extract_json, decode_json
from .deadline import Deadline

__all__ = [
    "generate_record_id",
    "extract_domain_from_url",
    "registrable_domain",
    "truncate_text",
    "brand_tokens",
    "contains_brand_token",
    "classify_mention",
    "deduplicate_queries",
    "extract_json",
    "decode_json",
    "Deadline"
]
