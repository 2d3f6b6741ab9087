"""Goal-based workout planning.

Maps a fitness goal to the catalog categories worth recommending and sizes
the recommendation from a rough fitness level.
"""

from __future__ import annotations

from enum import Enum

from fitrec.pipeline.models import SubjectAttributes

DEFAULT_GOAL = "Maintain Health"

GOAL_CATEGORIES: dict[str, tuple[str, ...]] = {
    "lose weight": ("cardio", "waist", "upper legs"),
    "gain muscle": ("chest", "back", "shoulders", "upper arms", "upper legs"),
    "build muscle": ("chest", "back", "shoulders", "upper arms", "upper legs"),
    "maintain health": ("chest", "back", "upper legs", "waist"),
    "general fitness": ("chest", "back", "upper legs", "waist"),
    "strength": ("chest", "back", "upper legs", "shoulders"),
    "endurance": ("cardio", "upper legs", "waist"),
    "improve endurance": ("cardio", "upper legs", "waist"),
}
FALLBACK_CATEGORIES: tuple[str, ...] = ("chest", "back", "upper legs")

# Used when the attribute is unknown
_DEFAULT_AGE = 30
_DEFAULT_BMI = 25.0
_DEFAULT_ACTIVITY = "sedentary"


class FitnessLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @property
    def exercise_count(self) -> int:
        return _EXERCISE_COUNTS[self]

    @property
    def difficulty_label(self) -> str:
        return self.value.capitalize()


_EXERCISE_COUNTS = {
    FitnessLevel.BEGINNER: 3,
    FitnessLevel.INTERMEDIATE: 4,
    FitnessLevel.ADVANCED: 5,
}


def _normalize_goal(goal: str) -> str:
    return " ".join(goal.replace("_", " ").lower().split())


def categories_for_goal(goal: str | None) -> list[str]:
    """Catalog categories for a goal; unknown goals get a balanced default."""
    key = _normalize_goal(goal or DEFAULT_GOAL)
    return list(GOAL_CATEGORIES.get(key, FALLBACK_CATEGORIES))


def determine_fitness_level(attributes: SubjectAttributes) -> FitnessLevel:
    """Classify the subject as beginner, intermediate or advanced.

    Sedentary subjects, anyone over 60 and a BMI above 30 count as
    beginners; active subjects under 40 with a BMI below 25 are advanced.
    """
    age = attributes.age if attributes.age is not None else _DEFAULT_AGE
    bmi = attributes.bmi if attributes.bmi is not None else _DEFAULT_BMI
    activity = (attributes.activity_level or _DEFAULT_ACTIVITY).strip().lower()

    if activity == "sedentary" or age > 60 or bmi > 30:
        return FitnessLevel.BEGINNER
    if activity == "active" and age < 40 and bmi < 25:
        return FitnessLevel.ADVANCED
    return FitnessLevel.INTERMEDIATE


def exercise_count(attributes: SubjectAttributes) -> int:
    return determine_fitness_level(attributes).exercise_count


__all__ = [
    "DEFAULT_GOAL",
    "FALLBACK_CATEGORIES",
    "GOAL_CATEGORIES",
    "FitnessLevel",
    "categories_for_goal",
    "determine_fitness_level",
    "exercise_count",
]
