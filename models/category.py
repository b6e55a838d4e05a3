from enum import Enum


class AllocationMode(Enum):
    PLATEAU = "plateau"  # non-increasing rows
    SMOOTH = "smooth"    # non-increasing rows, adjacent drop <= 1


class Category(Enum):
    """The five target categories a product can be distributed over."""

    CITY = "city"
    COUNTY = "county"
    MARKET = "market"
    URBAN_RURAL = "urban_rural"
    BUSINESS_FORMAT = "business_format"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    Category.CITY: "City-wide uniform",
    Category.COUNTY: "County",
    Category.MARKET: "Market segment",
    Category.URBAN_RURAL: "Urban/rural class",
    Category.BUSINESS_FORMAT: "Business format",
}
