# salesup/core/entries.py
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Mapping


class PackageTier(str, enum.Enum):
    BASIC = "Basic"
    SMART = "Smart"
    ALL_INCLUSIVE = "All Inclusive"


# Coverage codes bundled in each tier
PACKAGE_COVERAGE: dict[PackageTier, tuple[str, ...]] = {
    PackageTier.BASIC: ("LD",),
    PackageTier.SMART: ("LD", "BF"),
    PackageTier.ALL_INCLUSIVE: ("LD", "BF", "TG", "BC", "BQ"),
}


@dataclass(frozen=True)
class InsurancePackageSale:
    package_type: PackageTier
    count: int
    value: float = 0.0

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "InsurancePackageSale":
        return cls(
            package_type=PackageTier(raw["package_type"]),
            count=int(raw.get("count") or 0),
            value=float(raw.get("value") or 0),
        )

    @property
    def coverage(self) -> tuple[str, ...]:
        return PACKAGE_COVERAGE[self.package_type]

    def to_dict(self) -> dict[str, Any]:
        return {"package_type": self.package_type.value, "count": self.count, "value": self.value}


@dataclass(frozen=True)
class EntryRecord:
    """
    Read-only view of one agent's day, as consumed by the metrics and insight
    engines. Built from a persisted DailyEntry row via `from_model`.
    """

    agent_id: str
    date: date
    contracts_count: int
    upgrades_count: int
    total_upgrade_value: float
    insurance_packages: tuple[InsurancePackageSale, ...] = field(default_factory=tuple)
    notes: str | None = None

    @property
    def insurance_units(self) -> int:
        return sum(p.count for p in self.insurance_packages)

    def check_valid(self) -> None:
        """
        Validation happens upstream (request schemas); this only guards the
        engines against malformed rows. Raises ValueError.
        """
        if self.contracts_count < 0 or self.upgrades_count < 0:
            raise ValueError(f"negative counts in entry for {self.agent_id} on {self.date}")
        if self.total_upgrade_value < 0:
            raise ValueError(f"negative upgrade value in entry for {self.agent_id} on {self.date}")
        for p in self.insurance_packages:
            if p.count < 0 or p.value < 0:
                raise ValueError(f"negative insurance package in entry for {self.agent_id} on {self.date}")

    @classmethod
    def from_model(cls, row: Any) -> "EntryRecord":
        value = row.total_upgrade_value
        if isinstance(value, Decimal):
            value = float(value)
        return cls(
            agent_id=str(row.agent_id),
            date=row.date,
            contracts_count=int(row.contracts_count),
            upgrades_count=int(row.upgrades_count),
            total_upgrade_value=float(value or 0),
            insurance_packages=tuple(InsurancePackageSale.from_dict(p) for p in (row.insurance_packages or [])),
            notes=row.notes,
        )


def to_records(rows: Iterable[Any]) -> list[EntryRecord]:
    return [r if isinstance(r, EntryRecord) else EntryRecord.from_model(r) for r in rows]
