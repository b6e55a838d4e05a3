from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from models.category import Category


@dataclass(frozen=True)
class DistributionRequest:
    product_code: str
    product_name: str
    total: Decimal                     # quantity the weighted total should approximate
    descriptor: str                    # free-text delivery area, e.g. "房县,郧西"
    category: Category
    bi_weekly_float: bool = False
    urban_ratio: Optional[Decimal] = None   # market category only
    rural_ratio: Optional[Decimal] = None   # market category only
