"""Target catalogs, customer-count matrices and the read-only snapshot."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence, Tuple

from engine.errors import InvalidInputError
from models.category import Category
from models.tiers import ZERO, normalize_row, zero_row

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomerCountMatrix:
    """Target x 30 grid of customer counts, immutable once built."""

    targets: Tuple[str, ...]
    rows: Tuple[Tuple[Decimal, ...], ...]

    def __post_init__(self):
        if len(self.targets) != len(self.rows):
            raise InvalidInputError(
                f"Customer counts: {len(self.targets)} targets but {len(self.rows)} rows"
            )
        if len(set(self.targets)) != len(self.targets):
            raise InvalidInputError("Customer counts: duplicate target names")

    @classmethod
    def from_rows(cls, targets: Sequence[str], rows: Sequence[Sequence]) -> "CustomerCountMatrix":
        """Build from raw rows, converting cells to Decimal and rejecting negatives."""
        if len(targets) != len(rows):
            raise InvalidInputError(
                f"Customer counts: {len(targets)} targets but {len(rows)} rows"
            )
        normalized = []
        for target, row in zip(targets, rows):
            cells = normalize_row(row, label=f"customer counts for '{target}'")
            if any(c < ZERO for c in cells):
                raise InvalidInputError(f"Customer counts for '{target}' contain negative values")
            normalized.append(tuple(cells))
        return cls(targets=tuple(targets), rows=tuple(normalized))

    def __len__(self) -> int:
        return len(self.targets)

    def has(self, target: str) -> bool:
        return target in self.targets

    def row(self, target: str) -> Tuple[Decimal, ...]:
        try:
            return self.rows[self.targets.index(target)]
        except ValueError:
            raise InvalidInputError(f"No customer counts for target '{target}'") from None

    def select(self, targets: Sequence[str]) -> List[List[Decimal]]:
        """Sub-matrix for the given targets, in the given order."""
        return [list(self.row(t)) for t in targets]


@dataclass(frozen=True)
class TargetCatalog:
    category: Category
    bi_weekly_float: bool
    targets: Tuple[str, ...]

    def __len__(self) -> int:
        return len(self.targets)


@dataclass(frozen=True)
class CatalogEntry:
    catalog: TargetCatalog
    customer_counts: CustomerCountMatrix

    @property
    def key(self) -> Tuple[Category, bool]:
        return (self.catalog.category, self.catalog.bi_weekly_float)

    def customer_rows(self, targets: Sequence[str]) -> List[List[Decimal]]:
        """Customer-count rows for resolved targets; absent targets count as zero."""
        rows = []
        for target in targets:
            if self.customer_counts.has(target):
                rows.append(list(self.customer_counts.row(target)))
            else:
                logger.warning(
                    "No customer counts for target '%s' (%s), using zeros",
                    target, self.catalog.category.value,
                )
                rows.append(zero_row())
        return rows


@dataclass(frozen=True)
class CatalogSnapshot:
    """Explicit read-only snapshot of every catalog and customer matrix.

    Built once before any allocation runs; refreshing means building a new
    snapshot and swapping the reference.
    """

    entries: Tuple[CatalogEntry, ...]
    built_at: datetime = field(default_factory=datetime.now)
    _index: Dict[Tuple[Category, bool], CatalogEntry] = field(
        init=False, repr=False, compare=False,
    )

    def __post_init__(self):
        index = {}
        for entry in self.entries:
            if entry.key in index:
                raise InvalidInputError(
                    f"Duplicate catalog for {entry.key[0].value} (bi-weekly={entry.key[1]})"
                )
            index[entry.key] = entry
        object.__setattr__(self, "_index", index)

    @classmethod
    def build(cls, entries: Iterable[CatalogEntry]) -> "CatalogSnapshot":
        snapshot = cls(entries=tuple(entries))
        logger.info("Catalog snapshot built with %d entries", len(snapshot.entries))
        return snapshot

    def keys(self) -> List[Tuple[Category, bool]]:
        return list(self._index.keys())

    def has(self, category: Category, bi_weekly_float: bool = False) -> bool:
        return (category, bi_weekly_float) in self._index

    def entry(self, category: Category, bi_weekly_float: bool = False) -> CatalogEntry:
        try:
            return self._index[(category, bi_weekly_float)]
        except KeyError:
            raise InvalidInputError(
                f"No catalog loaded for {category.value} (bi-weekly={bi_weekly_float})"
            ) from None

    def catalog(self, category: Category, bi_weekly_float: bool = False) -> TargetCatalog:
        return self.entry(category, bi_weekly_float).catalog

    def customer_counts(self, category: Category, bi_weekly_float: bool = False) -> CustomerCountMatrix:
        return self.entry(category, bi_weekly_float).customer_counts
