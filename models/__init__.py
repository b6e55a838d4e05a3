from models.category import AllocationMode, Category
from models.catalog import CatalogEntry, CatalogSnapshot, CustomerCountMatrix, TargetCatalog
from models.request import DistributionRequest
from models.allocation import AllocationPlan, DecodedExpression
from models.outcome import DistributionOutcome, OutcomeStatus
