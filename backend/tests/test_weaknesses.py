# tests/test_weaknesses.py
from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta

from salesup.core.entries import EntryRecord
from salesup.core.metrics import MetricsBundle
from salesup.core.weaknesses import identify_weaknesses

GOOD = MetricsBundle(
    total_contracts=300,
    total_upgrades=150,
    total_revenue=60000.0,
    insurance_rate=80.0,
    upgrade_rate=50.0,
    average_upgrade_price=400.0,
    revenue_per_contract=200.0,
    consistency_score=100,
    performance_score=90,
)


def entry(days_ago: int, *, contracts: int, upgrades: int, value: float) -> EntryRecord:
    return EntryRecord(
        agent_id="a1",
        date=date(2026, 3, 31) - timedelta(days=days_ago),
        contracts_count=contracts,
        upgrades_count=upgrades,
        total_upgrade_value=value,
    )


def test_strong_agent_has_no_weaknesses():
    report = identify_weaknesses(GOOD, [entry(i, contracts=10, upgrades=5, value=500) for i in range(5)])

    assert report.weaknesses == ()
    assert report.recommendations == ()


def test_no_recent_entries_only_checks_snapshot():
    report = identify_weaknesses(replace(GOOD, consistency_score=40), [])

    assert report.weaknesses == ("consistency",)
    assert report.recommendations == (
        "Maintain regular daily entries",
        "Focus on consistent performance",
        "Develop daily routine habits",
    )


def test_flags_are_capped_at_five_in_first_seen_order():
    weak = replace(GOOD, insurance_rate=40.0, upgrade_rate=20.0, performance_score=50, consistency_score=50)
    recent = [entry(i, contracts=5, upgrades=1, value=30) for i in range(10)]

    report = identify_weaknesses(weak, recent)

    # objection_handling would be the sixth flag
    assert report.weaknesses == (
        "insurance_rate",
        "upgrade_rate",
        "overall_performance",
        "consistency",
        "upselling",
    )
    assert len(report.recommendations) == 6
    assert report.recommendations[0] == "Practice explaining insurance benefits clearly"
    assert report.recommendations[-1] == "Work on presenting upgrade value effectively"


def test_upselling_needs_contracts():
    report = identify_weaknesses(GOOD, [entry(i, contracts=0, upgrades=0, value=0) for i in range(3)])

    assert "upselling" not in report.weaknesses
    # zero-contract days count as 0 upgrade success
    assert report.weaknesses == ("objection_handling",)


def test_only_ten_most_recent_entries_are_considered():
    recent = [entry(i, contracts=10, upgrades=5, value=500) for i in range(10)]
    older = [entry(i, contracts=10, upgrades=0, value=0) for i in range(10, 40)]

    report = identify_weaknesses(GOOD, recent + older)

    assert report.weaknesses == ()
