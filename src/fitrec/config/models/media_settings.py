"""Media provider configuration model.

Credentials for the fallback media providers, their priority order and the
deadlines used when probing and repairing media links.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from fitrec.shared.constants import MediaConfig, ProviderNames


class MediaSettings(BaseModel):
    """Fallback media provider configuration.

    Security: provider credentials are hidden from repr so settings can be
    logged safely. A provider without a credential is treated as always
    failing by the resolver.
    """

    provider_order: list[str] = Field(
        default_factory=lambda: list(MediaConfig.PROVIDER_ORDER),
        description="Providers tried in this order when a media link is broken",
    )

    # Credentials (sensitive - hidden from repr)
    giphy_api_key: str = Field(default="", repr=False, description="GIPHY API key")
    tenor_api_key: str = Field(default="", repr=False, description="Tenor API key")
    unsplash_access_key: str = Field(
        default="",
        repr=False,
        description="Unsplash access key",
    )

    giphy_base_url: str = Field(default=MediaConfig.GIPHY_BASE_URL)
    tenor_base_url: str = Field(default=MediaConfig.TENOR_BASE_URL)
    unsplash_base_url: str = Field(default=MediaConfig.UNSPLASH_BASE_URL)

    provider_timeout: float = Field(
        default=MediaConfig.PROVIDER_TIMEOUT,
        gt=0,
        description="Per-provider request timeout in seconds",
    )
    probe_timeout: float = Field(
        default=MediaConfig.PROBE_TIMEOUT,
        gt=0,
        description="Link health probe timeout in seconds",
    )
    fallback_limit: int = Field(
        default=MediaConfig.FALLBACK_LIMIT,
        gt=0,
        description="Number of fallback media requested per broken item",
    )
    repair_concurrency: int = Field(
        default=MediaConfig.REPAIR_CONCURRENCY,
        gt=0,
        description="Maximum items repaired concurrently",
    )
    provider_rate_limit_per_minute: int | None = Field(
        default=None,
        gt=0,
        description="Optional per-provider request quota per minute",
    )

    @field_validator("provider_order")
    @classmethod
    def _validate_provider_order(cls, value: list[str]) -> list[str]:
        normalized: list[str] = []
        for name in value:
            key = name.strip().lower()
            if key not in ProviderNames.ALL:
                msg = f"Unknown media provider '{name}'. Expected one of {ProviderNames.ALL}"
                raise ValueError(msg)
            if key not in normalized:
                normalized.append(key)
        return normalized

    def credential_for(self, provider: str) -> str:
        """Return the configured credential of a provider ('' when unset)."""
        return {
            ProviderNames.GIPHY: self.giphy_api_key,
            ProviderNames.TENOR: self.tenor_api_key,
            ProviderNames.UNSPLASH: self.unsplash_access_key,
        }.get(provider, "")

    def __repr__(self) -> str:
        """Custom repr that masks provider credentials."""

        def mask(value: str) -> str:
            return "****" if value else "[empty]"

        return (
            f"MediaSettings("
            f"provider_order={self.provider_order}, "
            f"giphy_api_key={mask(self.giphy_api_key)}, "
            f"tenor_api_key={mask(self.tenor_api_key)}, "
            f"unsplash_access_key={mask(self.unsplash_access_key)}, "
            f"provider_timeout={self.provider_timeout}, "
            f"probe_timeout={self.probe_timeout})"
        )


__all__ = ["MediaSettings"]
