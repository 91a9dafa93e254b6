"""
Data models and schemas for the Brand Visibility Analysis pipeline.

This module defines the Pydantic models shared by both execution strategies:
site inputs, generated queries, brand citations, ranked search hits, score
sets and the persisted analysis record.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

SNIPPET_MAX_CHARS = 180
MAX_HITS_PER_QUERY = 5


class IntentCategory(str, Enum):
    """Search-intent tier relative to brand awareness."""
    DIRECT = "direct"
    INTERMEDIATE = "intermediate"
    INDIRECT = "indirect"


CATEGORY_ORDER = [
    IntentCategory.DIRECT,
    IntentCategory.INTERMEDIATE,
    IntentCategory.INDIRECT,
]


class AnalysisStrategy(str, Enum):
    MULTI_CALL = "multi_call"
    SINGLE_CALL = "single_call"


# Site inputs

class SiteProfile(BaseModel):
    """Immutable description of the site being analyzed."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Brand or site name", examples=["Acme Tools"])
    url: str = Field(..., description="Site URL", examples=["https://acme-tools.io"])
    description: str = Field("", description="Short description of what the site offers")
    language: str = Field("en", description="Language tag used for generated queries")

    @field_validator("description", "language", mode="before")
    @classmethod
    def _none_to_default(cls, value, info):
        if value is None:
            return "en" if info.field_name == "language" else ""
        return value


class SiteRecord(BaseModel):
    """A stored site owned by a user."""
    site_id: str
    owner_id: str
    profile: SiteProfile


class CategoryCounts(BaseModel):
    """Configured query count per intent category."""
    direct: int = 1
    intermediate: int = 1
    indirect: int = 1

    def get(self, category) -> int:
        return getattr(self, IntentCategory(category).value)

    def normalized(self) -> "CategoryCounts":
        """Return a copy where non-positive counts are raised to 1."""
        return CategoryCounts(**{
            category.value: max(self.get(category), 1) for category in CATEGORY_ORDER
        })

    def total(self) -> int:
        return sum(self.get(category) for category in CATEGORY_ORDER)


# Multi-call pipeline artifacts

class GeneratedQuery(BaseModel):
    text: str
    category: IntentCategory
    language: str = "en"


class ResearchNote(BaseModel):
    """Free-text web research findings for one query. Never persisted."""
    query: str
    text: str


class BrandCitation(BaseModel):
    """A brand surfaced for a query, with the places it was cited."""
    name: str
    url: str = ""
    citations: List[str] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("url", mode="before")
    @classmethod
    def _url_none_to_empty(cls, value):
        if value is None:
            return ""
        return value.strip() if isinstance(value, str) else value

    @field_validator("citations", mode="before")
    @classmethod
    def _materialize_citations(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        return [str(item).strip() for item in value if item is not None and str(item).strip()]


class QueryBrandResult(BaseModel):
    query: str
    brands: List[BrandCitation] = Field(default_factory=list)

    @field_validator("brands", mode="before")
    @classmethod
    def _brands_none_to_empty(cls, value):
        return [] if value is None else value


class CategoryGroup(BaseModel):
    queries: List[QueryBrandResult] = Field(default_factory=list)


class FinalAnalysis(BaseModel):
    """One CategoryGroup per intent category; the multi-call terminal artifact."""
    direct: CategoryGroup = Field(default_factory=CategoryGroup)
    intermediate: CategoryGroup = Field(default_factory=CategoryGroup)
    indirect: CategoryGroup = Field(default_factory=CategoryGroup)

    def group(self, category) -> CategoryGroup:
        return getattr(self, IntentCategory(category).value)

    def query_texts(self) -> List[str]:
        return [
            result.query
            for category in CATEGORY_ORDER
            for result in self.group(category).queries
        ]


# Single-call wire schema

class MentionReason(str, Enum):
    DOMAIN = "domain"
    BRAND_IN_TEXT = "brand_in_text"
    NONE = "none"


class RankedSearchHit(BaseModel):
    rank: int = 0
    title: str = ""
    url: str = ""
    domain: str = ""
    snippet: str = ""
    is_mention: bool = False
    mention_reason: MentionReason = MentionReason.NONE

    @field_validator("title", "url", "domain", "snippet", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("snippet")
    @classmethod
    def _bound_snippet(cls, value: str) -> str:
        return value[:SNIPPET_MAX_CHARS]

    @field_validator("is_mention", mode="before")
    @classmethod
    def _none_to_false(cls, value):
        return False if value is None else value

    @field_validator("mention_reason", mode="before")
    @classmethod
    def _unknown_reason_to_none(cls, value):
        if value in {reason.value for reason in MentionReason}:
            return value
        if isinstance(value, MentionReason):
            return value
        return MentionReason.NONE


class PerQueryResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    category: IntentCategory = Field(..., alias="type")
    query: str = ""
    results: List[RankedSearchHit] = Field(default_factory=list)

    @field_validator("category", mode="before")
    @classmethod
    def _lower_category(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("query", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("results", mode="before")
    @classmethod
    def _results_none_to_empty(cls, value):
        return [] if value is None else value


class CategoryQueries(BaseModel):
    direct: List[str] = Field(default_factory=list)
    intermediate: List[str] = Field(default_factory=list)
    indirect: List[str] = Field(default_factory=list)

    @field_validator("direct", "intermediate", "indirect", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        if value is None:
            return []
        return [item for item in value if isinstance(item, str)]

    def get(self, category) -> List[str]:
        return getattr(self, IntentCategory(category).value)


class ServiceScores(BaseModel):
    """Scores as emitted by the generative service."""
    direct_query_score: float = 0.0
    intermediate_context_query_score: float = 0.0
    indirect_query_score: float = 0.0
    visibility_score: float = 0.0

    @field_validator("*", mode="before")
    @classmethod
    def _none_to_zero(cls, value):
        return 0.0 if value is None else value


class SiteScanResult(BaseModel):
    """The single JSON object the single-call scan must return."""
    site: Dict[str, Any] = Field(default_factory=dict)
    queries: CategoryQueries = Field(default_factory=CategoryQueries)
    per_query_results: List[PerQueryResult] = Field(default_factory=list)
    scores: ServiceScores = Field(default_factory=ServiceScores)
    citations: List[str] = Field(default_factory=list)
    keywords_from_the_queries: List[str] = Field(default_factory=list)
    all_of_the_queries_used: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)

    @field_validator("site", "queries", "scores", mode="before")
    @classmethod
    def _object_none_to_empty(cls, value):
        return {} if value is None else value

    @field_validator(
        "citations", "keywords_from_the_queries", "all_of_the_queries_used", "suggestions",
        mode="before",
    )
    @classmethod
    def _list_none_to_empty(cls, value):
        if value is None:
            return []
        return [str(item) for item in value if item is not None]

    @field_validator("per_query_results", mode="before")
    @classmethod
    def _drop_unknown_types(cls, value):
        if value is None:
            return []
        known = {category.value for category in CATEGORY_ORDER}
        return [
            item for item in value
            if isinstance(item, dict) and str(item.get("type", "")).strip().lower() in known
        ]


# Scores and persisted record

class ScoreSet(BaseModel):
    direct: float = 0.0
    intermediate: float = 0.0
    indirect: float = 0.0
    visibility: float = 0.0

    @model_validator(mode="after")
    def _check_bounds(self):
        for value in (self.direct, self.intermediate, self.indirect, self.visibility):
            if value < 0.0 or value > 100.0:
                raise ValueError(f"score {value} outside [0, 100]")
        return self

    def to_wire(self) -> Dict[str, float]:
        return {
            "direct_query_score": self.direct,
            "intermediate_context_query_score": self.intermediate,
            "indirect_query_score": self.indirect,
            "visibility_score": self.visibility,
        }


class WorkflowOptions(BaseModel):
    """Per-run knobs shared by both workflows."""
    query_model: str = "gpt-4.1-mini"
    research_model: str = "gpt-4.1-mini"
    extraction_model: str = "gpt-4.1-mini"
    suggestion_model: str = "gpt-4.1-mini"
    scan_model: str = "gpt-4o-mini"
    query_timeout_seconds: float = 300.0
    max_parallel_queries: int = 1

    @classmethod
    def from_settings(cls, source) -> "WorkflowOptions":
        return cls(
            query_model=source.QUERY_MODEL,
            research_model=source.RESEARCH_MODEL,
            extraction_model=source.EXTRACTION_MODEL,
            suggestion_model=source.SUGGESTION_MODEL,
            scan_model=source.SCAN_MODEL,
            query_timeout_seconds=source.QUERY_TIMEOUT_SECONDS,
            max_parallel_queries=max(source.MAX_PARALLEL_QUERIES, 1)
        )


class AnalysisRecord(BaseModel):
    """Persisted result of one successful run. Immutable once created."""
    record_id: Optional[str] = None
    owner_id: str
    site_id: str
    site_url: str
    strategy: AnalysisStrategy
    scores: ScoreSet
    queries: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    citations: List[str] = Field(default_factory=list)
    analysis: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
