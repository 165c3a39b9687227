# backend/salesup/schemas/daily_entry.py
from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from salesup.core.clock import as_utc, today
from salesup.core.entries import InsurancePackageSale, PackageTier


class InsurancePackageIn(BaseModel):
    package_type: PackageTier
    count: int = Field(ge=0)
    value: Decimal = Field(default=Decimal("0"), ge=0)


class InsurancePackageOut(BaseModel):
    package_type: str
    count: int
    value: float
    coverage: List[str] = []

    @classmethod
    def from_sale(cls, sale: InsurancePackageSale) -> "InsurancePackageOut":
        return cls(**sale.to_dict(), coverage=list(sale.coverage))


class DailyEntryFields(BaseModel):
    model_config = ConfigDict(extra="forbid")

    contracts_count: int = Field(ge=0)
    upgrades_count: int = Field(default=0, ge=0)
    total_upgrade_value: Decimal = Field(default=Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    insurance_packages: List[InsurancePackageIn] = Field(default_factory=list)
    notes: Optional[str] = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def check_upgrades_within_contracts(self) -> "DailyEntryFields":
        if self.upgrades_count > self.contracts_count:
            raise ValueError("upgrades_count cannot exceed contracts_count")
        return self

    def packages_as_json(self) -> list[dict]:
        return [
            InsurancePackageSale(p.package_type, p.count, float(p.value)).to_dict()
            for p in self.insurance_packages
        ]


class DailyEntryCreate(DailyEntryFields):
    date: dt.date

    @field_validator("date")
    @classmethod
    def not_in_future(cls, v: dt.date) -> dt.date:
        if v > today():
            raise ValueError("date cannot be in the future")
        return v


class DailyEntryUpdate(DailyEntryFields):
    """Full overwrite of an existing day; the date itself is immutable."""


class DailyEntryOut(BaseModel):
    id: UUID
    agent_id: UUID
    date: dt.date

    contracts_count: int
    upgrades_count: int
    total_upgrade_value: float
    insurance_packages: List[InsurancePackageOut] = []
    insurance_units: int
    notes: Optional[str] = None

    created_at: dt.datetime
    updated_at: dt.datetime


class TodayEntryOut(BaseModel):
    date: dt.date
    has_filled_today: bool
    entry: Optional[DailyEntryOut] = None


def entry_out(row) -> DailyEntryOut:
    sales = [InsurancePackageSale.from_dict(p) for p in (row.insurance_packages or [])]
    return DailyEntryOut(
        id=row.id,
        agent_id=row.agent_id,
        date=row.date,
        contracts_count=row.contracts_count,
        upgrades_count=row.upgrades_count,
        total_upgrade_value=float(row.total_upgrade_value or 0),
        insurance_packages=[InsurancePackageOut.from_sale(s) for s in sales],
        insurance_units=sum(s.count for s in sales),
        notes=row.notes,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )
