"""Exercise catalog response models.

Pydantic models validating the catalog's JSON at the fetch boundary.
Unknown fields are ignored so new upstream fields never break validation;
missing or mistyped required fields become a malformed-response failure.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CatalogBaseModel(BaseModel):
    """Lenient base for models parsed from upstream payloads."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CatalogItem(CatalogBaseModel):
    """One exercise as returned by the catalog.

    Immutable: the repair stage produces a modified copy through
    ``with_fallback``/``with_broken_media`` instead of mutating.

    Attributes:
        item_id: Catalog identifier (``exerciseId`` upstream)
        name: Display name
        media_url: Demonstration media link (``gifUrl`` upstream)
        instructions: Ordered instruction steps
        target_muscles: Primary muscles worked
        secondary_muscles: Secondary muscles worked
        body_parts: Body part categories
        equipment: Equipment needed (``equipments`` upstream)
        fallback_source: Provider that supplied a replacement media link
        fallback_id: Provider-side id of the replacement media
        media_broken: True when the link was unhealthy and no replacement was found

    Example:
        >>> item = CatalogItem.model_validate(
        ...     {"exerciseId": "ex-1", "name": "Push Up", "gifUrl": "https://x/1.gif",
        ...      "bodyParts": ["chest"], "equipments": ["body weight"]}
        ... )
        >>> item.body_parts
        ['chest']
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    item_id: str = Field(..., alias="exerciseId", min_length=1, description="Catalog id")
    name: str = Field(..., min_length=1, description="Exercise name")
    media_url: str = Field(default="", alias="gifUrl", description="Media link")
    instructions: list[str] = Field(default_factory=list)
    target_muscles: list[str] = Field(default_factory=list, alias="targetMuscles")
    secondary_muscles: list[str] = Field(default_factory=list, alias="secondaryMuscles")
    body_parts: list[str] = Field(default_factory=list, alias="bodyParts")
    equipment: list[str] = Field(default_factory=list, alias="equipments")

    fallback_source: str | None = Field(default=None, alias="fallbackGifSource")
    fallback_id: str | None = Field(default=None, alias="fallbackGifId")
    media_broken: bool = Field(default=False, alias="mediaBroken")

    @field_validator("media_url", mode="before")
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        return "" if value is None else value

    def with_fallback(self, url: str, source: str, fallback_id: str) -> CatalogItem:
        """Copy with the media link replaced by a provider result."""
        return self.model_copy(
            update={
                "media_url": url,
                "fallback_source": source,
                "fallback_id": fallback_id,
                "media_broken": False,
            }
        )

    def with_broken_media(self) -> CatalogItem:
        """Copy flagged as carrying a link that could not be repaired."""
        return self.model_copy(update={"media_broken": True})

    def mentions(self, term: str) -> bool:
        """Whether one of the item's body parts or muscles contains ``term``.

        Matching is case-insensitive and by substring, so "legs" matches
        "upper legs".
        """
        needle = term.strip().lower()
        if not needle:
            return False
        return any(
            needle in value.lower()
            for value in (*self.body_parts, *self.target_muscles, *self.secondary_muscles)
        )


class CatalogSearchData(CatalogBaseModel):
    exercises: list[CatalogItem] | None = None
    items: list[CatalogItem] | None = None

    def all_items(self) -> list[CatalogItem]:
        if self.exercises is not None:
            return self.exercises
        return self.items or []


class CatalogSearchResponse(CatalogBaseModel):
    """Envelope of the keyword search endpoint: ``{success, data: {exercises}}``."""

    success: bool
    data: CatalogSearchData = Field(default_factory=CatalogSearchData)


__all__ = [
    "CatalogItem",
    "CatalogSearchData",
    "CatalogSearchResponse",
]
