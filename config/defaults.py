"""Default configuration constants for the Tiered Distribution Planner."""

from decimal import Decimal

# Tier layout: index 0 is tier 30 (highest), index 29 is tier 1 (lowest)
TIER_COUNT = 30
TIER_LABELS = [f"D{TIER_COUNT - i}" for i in range(TIER_COUNT)]

# Allocation modes
MODE_PLATEAU = "plateau"  # rows non-increasing
MODE_SMOOTH = "smooth"    # rows non-increasing, adjacent drop <= 1

# Refinement caps
MAX_REFINEMENT_ITERATIONS = 100  # hill-climbing steps in smooth mode
MAX_SMOOTH_LEVEL = 10_000        # hard ceiling on leveled fill
NEARBY_TIER_RADIUS = 2           # local adjustment window for plateau candidate (c)

# Market-segment split
DEFAULT_URBAN_RATIO = Decimal("0.4")
DEFAULT_RURAL_RATIO = Decimal("0.6")

# Error reporting
ERROR_PCT_SCALE = 2                       # decimal places for error percentage
ERROR_WARN_THRESHOLD = Decimal("200")     # absolute error above this is logged as a warning

# Batch runner
DEFAULT_MAX_WORKERS = None  # None -> sequential
BATCH_PROGRESS_EVERY = 10   # progress callback cadence (requests)

# Logging
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Optimizer
OPTIMIZER_TIME_LIMIT = 30  # seconds
OPTIMIZER_MAX_CELL_VALUE = 50

# Implicit single target for methods without per-target coding
CITY_WIDE_TARGET = "全市"

# UI
TARGET_COLUMN = "Target"
ACTUAL_COLUMN = "Actual Amount"

# Mode used per category (keys are Category values)
CATEGORY_MODES = {
    "city": MODE_PLATEAU,
    "county": MODE_PLATEAU,
    "market": MODE_SMOOTH,
    "urban_rural": MODE_PLATEAU,
    "business_format": MODE_PLATEAU,
}
