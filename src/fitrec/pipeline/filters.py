"""Health-condition safety filter.

A fixed rule table maps each named condition to a predicate marking
exercises unsafe for it. Filtering is pure and keeps the input order.
Condition names match case-insensitively, with underscores read as spaces;
unknown conditions exclude nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence

from fitrec.services.catalog.models import CatalogItem

logger = logging.getLogger(__name__)

UnsafePredicate = Callable[[str, set[str], set[str]], bool]


def _name_has(name: str, *terms: str) -> bool:
    return any(term in name for term in terms)


def _knee_injury(name: str, body_parts: set[str], equipment: set[str]) -> bool:
    return _name_has(name, "squat", "lunge", "jump") or (
        "upper legs" in body_parts and "body weight" not in equipment
    )


def _back_pain(name: str, body_parts: set[str], equipment: set[str]) -> bool:
    return _name_has(name, "deadlift", "row") or ("back" in body_parts and "barbell" in equipment)


def _heart_condition(name: str, body_parts: set[str], equipment: set[str]) -> bool:
    return "cardio" in body_parts or _name_has(name, "high intensity")


def _hypertension(name: str, body_parts: set[str], equipment: set[str]) -> bool:
    return _name_has(name, "overhead", "heavy") or "barbell" in equipment


def _asthma(name: str, body_parts: set[str], equipment: set[str]) -> bool:
    return "cardio" in body_parts and _name_has(name, "running")


SAFETY_RULES: dict[str, UnsafePredicate] = {
    "knee injury": _knee_injury,
    "back pain": _back_pain,
    "heart condition": _heart_condition,
    "hypertension": _hypertension,
    "asthma": _asthma,
}


def _normalize_condition(condition: str) -> str:
    return " ".join(condition.replace("_", " ").lower().split())


class SafetyFilter:
    """Drops exercises unsafe for any of a subject's health conditions."""

    def __init__(self, rules: dict[str, UnsafePredicate] | None = None) -> None:
        self.rules = dict(SAFETY_RULES if rules is None else rules)

    def apply(
        self,
        items: Sequence[CatalogItem],
        conditions: Iterable[str],
    ) -> list[CatalogItem]:
        normalized = [_normalize_condition(c) for c in conditions]
        if not normalized or "none" in normalized:
            return list(items)

        predicates = [self.rules[c] for c in normalized if c in self.rules]
        if not predicates:
            return list(items)

        kept = [item for item in items if not self._is_unsafe(item, predicates)]
        if len(kept) != len(items):
            logger.debug(
                "Safety filter removed %d of %d items",
                len(items) - len(kept),
                len(items),
            )
        return kept

    @staticmethod
    def _is_unsafe(item: CatalogItem, predicates: list[UnsafePredicate]) -> bool:
        name = item.name.lower()
        body_parts = {part.lower() for part in item.body_parts}
        equipment = {kit.lower() for kit in item.equipment}
        return any(predicate(name, body_parts, equipment) for predicate in predicates)


__all__ = ["SAFETY_RULES", "SafetyFilter"]
