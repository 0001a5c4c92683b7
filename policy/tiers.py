"""Quality tier tables for destructive and restorative operations."""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional


class TierFamily(str, Enum):
    DESTRUCTIVE = "destructive"
    RESTORATIVE = "restorative"


@dataclass(frozen=True)
class TierProfile:
    """Concrete settings behind a tier name."""

    name: str
    quality: int
    max_dimension: Optional[int] = None
    target_reduction: float = 0.0
    upscale_factor: Optional[float] = None


DESTRUCTIVE_TIERS: Mapping[str, TierProfile] = MappingProxyType({
    "low": TierProfile("low", quality=50, max_dimension=1280, target_reduction=0.70),
    "medium": TierProfile("medium", quality=65, max_dimension=1920, target_reduction=0.50),
    "high": TierProfile("high", quality=80, max_dimension=2560, target_reduction=0.30),
    "maximum": TierProfile("maximum", quality=95),
})

RESTORATIVE_TIERS: Mapping[str, TierProfile] = MappingProxyType({
    "enhance": TierProfile("enhance", quality=100, upscale_factor=1.5),
    "restore": TierProfile("restore", quality=100, upscale_factor=1.0),
    "maximum": TierProfile("maximum", quality=100),
})

_TABLES = {
    TierFamily.DESTRUCTIVE: (DESTRUCTIVE_TIERS, "medium"),
    TierFamily.RESTORATIVE: (RESTORATIVE_TIERS, "restore"),
}


def get_tier_profile(family: TierFamily | str, tier_name: str | None) -> TierProfile:
    """Look up a tier profile.

    Never fails on the tier name: anything unrecognised (including None)
    resolves to "medium" for destructive tiers and "restore" for
    restorative ones. Matching is exact, so "HIGH" is not "high".

    Raises:
        ValueError: If family is not a known TierFamily.
    """
    table, default = _TABLES[TierFamily(family)]
    return table.get(tier_name, table[default]) if tier_name else table[default]


def destructive_profile(tier_name: str | None) -> TierProfile:
    return get_tier_profile(TierFamily.DESTRUCTIVE, tier_name)


def restorative_profile(tier_name: str | None) -> TierProfile:
    return get_tier_profile(TierFamily.RESTORATIVE, tier_name)
