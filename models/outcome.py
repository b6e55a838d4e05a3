from dataclasses import dataclass
from enum import Enum
from typing import Optional

from models.allocation import AllocationPlan


class OutcomeStatus(Enum):
    OK = "ok"
    SKIPPED = "skipped"        # descriptor matched no target
    INVALID = "invalid"        # request or data failed validation
    FAILED = "failed"          # unexpected error or invariant violation
    CANCELLED = "cancelled"    # batch cancelled before this request ran


@dataclass
class DistributionOutcome:
    product_code: str
    status: OutcomeStatus
    plan: Optional[AllocationPlan] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.OK
