"""Pipeline value types.

Subject attributes that drive filtering and memoization, the per-category
state machine, and the shaped outputs returned by ``RecommendationPipeline.run``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fitrec.services.catalog.models import CatalogItem


class SubjectAttributes(BaseModel):
    """Attributes of the person recommendations are assembled for.

    Attributes:
        health_conditions: Named conditions, e.g. "Knee Injury"; "None" or
            an empty list disables safety filtering
        fitness_goal: Goal label, e.g. "Gain Muscle"
        activity_level: Activity label, e.g. "Sedentary", "Active"
        age: Age in years
        bmi: Body mass index

    Example:
        >>> attrs = SubjectAttributes(health_conditions=["Knee Injury"], age=34)
        >>> attrs.health_conditions
        ['Knee Injury']
    """

    model_config = ConfigDict(frozen=True)

    health_conditions: list[str] = Field(default_factory=list)
    fitness_goal: str | None = None
    activity_level: str | None = None
    age: int | None = Field(default=None, ge=0, le=150)
    bmi: float | None = Field(default=None, gt=0)

    @field_validator("health_conditions")
    @classmethod
    def _strip_conditions(cls, value: list[str]) -> list[str]:
        return [condition.strip() for condition in value if condition.strip()]


class CategoryState(str, Enum):
    """Lifecycle of one category within a pipeline run."""

    PENDING = "pending"
    FETCHING = "fetching"
    FILTERING = "filtering"
    REPAIRING = "repairing"
    SHAPED = "shaped"
    FAILED = "failed"


@dataclass(frozen=True)
class PipelineResult:
    """Display-ready items of one category, in fetch order."""

    category_key: str
    items: tuple[CatalogItem, ...]
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    def to_dict(self) -> dict[str, Any]:
        return {
            "category_key": self.category_key,
            "items": [item.model_dump(mode="json") for item in self.items],
            "generated_at": self.generated_at.isoformat(),
        }


@dataclass(frozen=True)
class PipelineOutcome:
    """Everything a run produced.

    Outcomes are memoized and handed to every caller asking the same
    question, so the containers are read-only copies.

    Attributes:
        results: One result per category that did not fail, in request order
        category_errors: Failure reason per failed category key
        from_cache: True when served from the memoized outcome
    """

    results: tuple[PipelineResult, ...]
    category_errors: Mapping[str, str] = field(default_factory=dict)
    from_cache: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "results", tuple(self.results))
        object.__setattr__(self, "category_errors", MappingProxyType(dict(self.category_errors)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [result.to_dict() for result in self.results],
            "category_errors": dict(self.category_errors),
            "from_cache": self.from_cache,
        }


__all__ = [
    "CategoryState",
    "PipelineOutcome",
    "PipelineResult",
    "SubjectAttributes",
]
