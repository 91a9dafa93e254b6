"""
Brand Extractor

Turns free-text research notes into BrandCitation records through a second,
strict-JSON generative call.
"""

import logging
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from models.errors import MalformedBrands
from models.schemas import BrandCitation, ResearchNote
from utils.deadline import Deadline
from utils.json_extractor import decode_json
from utils.llm_client import GenerativeClient

logger = logging.getLogger(__name__)


class BrandPayload(BaseModel):
    """Strict contract: {"brands": [{"name", "url", "citations": [...]}]}"""
    brands: List[BrandCitation] = Field(default_factory=list)

    @field_validator("brands", mode="before")
    @classmethod
    def _drop_nameless(cls, value):
        if value is None:
            return []
        if not isinstance(value, list):
            return value
        return [
            item for item in value
            if isinstance(item, dict) and isinstance(item.get("name"), str) and item["name"].strip()
        ]


def build_extraction_prompt(note: ResearchNote) -> str:
    return f"""You will receive some research notes that summarize web search results for this query:

"{note.query}"

The notes may include brand names, their URLs, and the websites where they were mentioned.

Your job:
- Identify brands that appear.
- For each brand, output:
  - name: the brand name (string)
  - url: the brand's main URL if visible (string, can be empty if unknown)
  - citations: list of domains or full URLs where the brand was mentioned (array of strings)

OUTPUT FORMAT (STRICT):
{{
  "brands": [
    {{
      "name": "...",
      "url": "...",
      "citations": ["...", "..."]
    }}
  ]
}}

RULES:
- Output ONLY valid JSON as above. No extra text, no markdown.
- citations array must not be null; use [] if nothing is known.
- If you find no brands, return {{"brands": []}}.

Research notes:
----------------
{note.text}
"""


def parse_brands(raw_text: str) -> List[BrandCitation]:
    """
    Decode and validate the brands payload.

    Raises:
        MalformedBrands: Not decodable, or not shaped like the contract
    """
    try:
        payload = decode_json(raw_text)
    except ValueError as e:
        logger.error(f"❌ Failed to parse brands JSON: {e}")
        raise MalformedBrands(f"failed to parse brands JSON: {e}", raw_text) from e

    if not isinstance(payload, dict):
        raise MalformedBrands("brands JSON is not an object", raw_text)

    try:
        return BrandPayload.model_validate(payload).brands
    except ValidationError as e:
        logger.error(f"❌ Brands JSON does not match the expected shape: {e}")
        raise MalformedBrands(f"invalid brands JSON: {e}", raw_text) from e


def extract_brands(
    client: GenerativeClient,
    note: ResearchNote,
    model: str,
    deadline: Optional[Deadline] = None
) -> List[BrandCitation]:
    """Extract the brands cited in one query's research notes."""
    logger.info(f"🏷️  Extracting brands for {note.query!r} ({len(note.text)} chars of notes)")

    raw_text = client.generate(model, build_extraction_prompt(note), deadline=deadline)
    brands = parse_brands(raw_text)

    logger.info(f"✓ Extracted {len(brands)} brands for {note.query!r}")
    return brands
