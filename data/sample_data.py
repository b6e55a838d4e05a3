"""Generate synthetic catalogs, customer counts and requests for the planner."""

import random
from decimal import Decimal
from typing import List

import pandas as pd

from config.code_tables import (
    BUSINESS_FORMAT_CODES, COUNTY_CODES, MARKET_CODES, URBAN_RURAL_CODES,
)
from config.defaults import CITY_WIDE_TARGET, TARGET_COLUMN, TIER_COUNT, TIER_LABELS
from data.frames import catalog_from_frame
from models.catalog import CatalogSnapshot
from models.category import Category
from models.request import DistributionRequest

CATALOG_TARGETS = {
    Category.CITY: [CITY_WIDE_TARGET],
    Category.COUNTY: list(COUNTY_CODES),
    Category.MARKET: list(MARKET_CODES),
    Category.URBAN_RURAL: list(URBAN_RURAL_CODES),
    Category.BUSINESS_FORMAT: list(BUSINESS_FORMAT_CODES),
}

# Rough customer base per target, scaled down for the bi-weekly variant
_BASE_CUSTOMERS = {
    Category.CITY: 1200,
    Category.COUNTY: 240,
    Category.MARKET: 600,
    Category.URBAN_RURAL: 170,
    Category.BUSINESS_FORMAT: 200,
}


def _tier_counts(rng: random.Random, base: int) -> List[int]:
    """Few customers in the top tiers, more toward the middle and bottom."""
    counts = []
    for k in range(TIER_COUNT):
        weight = 0.2 + 1.6 * k / (TIER_COUNT - 1)
        counts.append(max(0, round(base / TIER_COUNT * weight * rng.uniform(0.6, 1.4))))
    return counts


def generate_customer_counts_df(category: Category, bi_weekly_float: bool = False) -> pd.DataFrame:
    """Customer counts per target x tier for one catalog variant."""
    seed = 42 + list(Category).index(category) * 2 + int(bi_weekly_float)
    rng = random.Random(seed)
    base = _BASE_CUSTOMERS[category] // (2 if bi_weekly_float else 1)
    rows = []
    for target in CATALOG_TARGETS[category]:
        row = {TARGET_COLUMN: target}
        row.update(dict(zip(TIER_LABELS, _tier_counts(rng, base))))
        rows.append(row)
    return pd.DataFrame(rows, columns=[TARGET_COLUMN] + TIER_LABELS)


def build_sample_snapshot() -> CatalogSnapshot:
    """Snapshot with every category in both bi-weekly variants."""
    entries = []
    for category in Category:
        for bi_weekly in (False, True):
            df = generate_customer_counts_df(category, bi_weekly)
            entries.append(catalog_from_frame(df, category, bi_weekly))
    return CatalogSnapshot.build(entries)


def generate_sample_requests() -> List[DistributionRequest]:
    """A small product list exercising every category, plus one with no match."""
    return [
        DistributionRequest("P1001", "黄鹤楼(硬珍品)", Decimal("5000"), "全市", Category.CITY),
        DistributionRequest("P1002", "黄鹤楼(软蓝)", Decimal("1800"), "房县,郧西,竹山", Category.COUNTY),
        DistributionRequest("P1003", "红金龙(硬神州腾龙)", Decimal("2600"), "丹江、郧阳、竹溪、城区", Category.COUNTY),
        DistributionRequest("P1004", "中华(硬)", Decimal("3000"), "城网+农网", Category.MARKET),
        DistributionRequest(
            "P1005", "利群(新版)", Decimal("1500"), "城网 农网", Category.MARKET,
            urban_ratio=Decimal("0.5"), rural_ratio=Decimal("0.5"),
        ),
        DistributionRequest("P1006", "芙蓉王(硬)", Decimal("900"), "农网", Category.MARKET),
        DistributionRequest("P1007", "玉溪(软)", Decimal("1200"), "主城区/城乡结合区/镇中心区", Category.URBAN_RURAL),
        DistributionRequest("P1008", "云烟(紫)", Decimal("800"), "便利店,超市,烟草专业店", Category.BUSINESS_FORMAT),
        DistributionRequest("P1009", "南京(炫赫门)", Decimal("700"), "房县,竹山", Category.COUNTY, bi_weekly_float=True),
        DistributionRequest("P1010", "真龙(起源)", Decimal("400"), "武汉", Category.COUNTY),
    ]
