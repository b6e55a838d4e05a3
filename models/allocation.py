from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional

from models.category import AllocationMode
from models.request import DistributionRequest


@dataclass
class AllocationPlan:
    request: DistributionRequest
    targets: List[str]                 # resolver output order
    matrix: List[List[Decimal]]        # one 30-tier row per target
    mode: AllocationMode
    actual_amount: Decimal             # weighted total delivered
    per_target_amounts: Dict[str, Decimal]
    error: Decimal                     # |actual - total|
    error_pct: Decimal                 # error / total * 100, half-up
    expressions: List[str] = field(default_factory=list)
    target_expressions: Dict[str, str] = field(default_factory=dict)  # target -> its group expression
    explanation_steps: List[str] = field(default_factory=list)

    @property
    def product_code(self) -> str:
        return self.request.product_code


@dataclass
class DecodedExpression:
    method: str                        # canonical delivery method name
    delivery_type: Optional[str]       # extended delivery type, None unless method B
    targets: List[str]
    tier_values: List[Decimal]         # 30 values, index 0 = tier 30
