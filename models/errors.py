"""
Error taxonomy for the brand visibility analysis pipeline.

Every failure raised by the core derives from AnalysisError and carries a
stable ``category`` string that the request layer can map to a status code.
"""

from typing import Any, Dict, List, Optional

MAX_RAW_TEXT_CHARS = 2000


class AnalysisError(Exception):
    """Base class for categorized analysis failures."""

    category = "analysis_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "message": self.message}


class TransportError(AnalysisError):
    """The generative call itself failed (network, auth, quota, HTTP timeout)."""

    category = "transport"


class DeadlineExceeded(AnalysisError):
    """A run or per-query deadline expired before the call could be issued."""

    category = "deadline_exceeded"


class EmptyOutput(AnalysisError):
    """A nominally successful generative call produced no text."""

    category = "empty_output"


class MalformedOutput(AnalysisError):
    """Generated text could not be decoded into the expected structure."""

    category = "malformed_output"

    def __init__(self, message: str, raw_text: str = ""):
        self.raw_text = (raw_text or "")[:MAX_RAW_TEXT_CHARS]
        super().__init__(f"{message}; raw={self.raw_text}")

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["raw_text"] = self.raw_text
        return payload


class MalformedQueries(MalformedOutput):
    category = "malformed_queries"


class MalformedBrands(MalformedOutput):
    category = "malformed_brands"


class MalformedSuggestions(MalformedOutput):
    category = "malformed_suggestions"


class MalformedAnalysis(MalformedOutput):
    """The single-call scan response did not match the wire schema."""

    category = "malformed_analysis"


class SiteNotFound(AnalysisError):
    category = "not_found"


class RecordNotFound(AnalysisError):
    category = "not_found"


class PersistenceError(AnalysisError):
    """
    Writing the analysis record failed.

    The fully computed analysis is attached so the caller can still return
    it instead of discarding the work already paid for.
    """

    category = "persistence"

    def __init__(
        self,
        message: str,
        analysis: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        queries: Optional[List[str]] = None,
        scores: Optional[Dict[str, float]] = None,
    ):
        super().__init__(message)
        self.analysis = analysis or {}
        self.suggestions = suggestions or []
        self.queries = queries or []
        self.scores = scores or {}

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload.update({
            "analysis": self.analysis,
            "suggestions": self.suggestions,
            "queries": self.queries,
            "scores": self.scores,
        })
        return payload
