from __future__ import annotations

from typing import Mapping

from .models.tier import TierInput, TierKind

DEFAULT_TIERS: Mapping[TierKind, TierInput] = {
    TierKind.good: TierInput(
        title="Standard Quality",
        description=(
            "Quality 3-tab asphalt shingles with reliable protection. Perfect for "
            "budget-conscious homeowners who want dependable roofing."
        ),
        warranty="20-year manufacturer warranty with 5-year workmanship guarantee",
        price_per_square=625,
        price_per_square_under16=725,
    ),
    TierKind.better: TierInput(
        title="Premium Quality",
        description=(
            "Premium architectural shingles with enhanced durability and curb appeal. "
            "Superior wind resistance and longer lifespan."
        ),
        warranty="30-year manufacturer warranty with 10-year workmanship guarantee",
        price_per_square=770,
        price_per_square_under16=870,
    ),
    TierKind.best: TierInput(
        title="Elite Quality",
        description=(
            "Top-tier designer shingles with lifetime warranty. Premium materials with "
            "enhanced insulation and comprehensive protection."
        ),
        warranty="Lifetime manufacturer warranty with 15-year workmanship guarantee",
        price_per_square=850,
        price_per_square_under16=950,
    ),
}


__all__ = ["DEFAULT_TIERS"]
