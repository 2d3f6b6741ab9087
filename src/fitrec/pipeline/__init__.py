"""Recommendation pipeline: filtering, repair, memoization and orchestration."""

from .filters import SafetyFilter
from .fingerprint import attributes_fingerprint, result_cache_key
from .models import CategoryState, PipelineOutcome, PipelineResult, SubjectAttributes
from .orchestrator import RecommendationPipeline
from .repair import MediaRepairer

__all__ = [
    "CategoryState",
    "MediaRepairer",
    "PipelineOutcome",
    "PipelineResult",
    "RecommendationPipeline",
    "SafetyFilter",
    "SubjectAttributes",
    "attributes_fingerprint",
    "result_cache_key",
]
