# tests/test_metrics.py
from __future__ import annotations

from datetime import date, timedelta

import pytest

from salesup.core.entries import EntryRecord, InsurancePackageSale, PackageTier
from salesup.core.metrics import aggregate, compute_snapshot, round_half_up

AGENT = "agent-1"
END = date(2026, 3, 31)


def rec(
    days_ago: int,
    *,
    contracts: int = 10,
    upgrades: int = 4,
    value: float = 600.0,
    insurance: int = 8,
    agent: str = AGENT,
) -> EntryRecord:
    packages = (InsurancePackageSale(PackageTier.SMART, insurance),) if insurance else ()
    return EntryRecord(
        agent_id=agent,
        date=END - timedelta(days=days_ago),
        contracts_count=contracts,
        upgrades_count=upgrades,
        total_upgrade_value=value,
        insurance_packages=packages,
    )


def test_empty_window_is_no_data_not_zeros():
    assert compute_snapshot(AGENT, [], end_date=END) is None


def test_entries_outside_window_only_is_no_data():
    assert compute_snapshot(AGENT, [rec(31), rec(90)], end_date=END) is None


def test_thirty_identical_days_give_expected_rates():
    snap = compute_snapshot(AGENT, [rec(i) for i in range(30)], end_date=END)

    assert snap is not None
    m = snap.metrics
    assert m.total_contracts == 300
    assert m.insurance_rate == 80.0
    assert m.upgrade_rate == 40.0
    assert m.average_upgrade_price == 150.0
    assert m.revenue_per_contract == 60.0
    assert m.consistency_score == 100
    assert snap.period == "monthly"
    assert snap.start_date == END - timedelta(days=30)
    assert snap.end_date == END


def test_mixed_entries_match_hand_computed_values():
    entries = [
        rec(0, contracts=10, upgrades=4, value=600, insurance=8),
        rec(1, contracts=5, upgrades=1, value=100, insurance=2),
        rec(2, contracts=5, upgrades=0, value=0, insurance=0),
    ]
    m = compute_snapshot(AGENT, entries, end_date=END).metrics

    assert m.total_contracts == 20
    assert m.total_upgrades == 5
    assert m.total_revenue == 700.0
    assert m.insurance_rate == 50.0
    assert m.upgrade_rate == 25.0
    assert m.average_upgrade_price == 140.0
    assert m.revenue_per_contract == 35.0
    assert m.consistency_score == 10
    # 21.875 + 12.5 + 20 + 0.7 + 1
    assert m.performance_score == 56


def test_zero_contracts_and_upgrades_never_divide_by_zero():
    entries = [rec(i, contracts=0, upgrades=0, value=0, insurance=0) for i in range(3)]
    m = compute_snapshot(AGENT, entries, end_date=END).metrics

    assert m.insurance_rate == 0
    assert m.upgrade_rate == 0
    assert m.average_upgrade_price == 0
    assert m.revenue_per_contract == 0
    assert m.consistency_score == 10
    assert m.performance_score == 1


def test_upgrades_without_contracts_still_price_upgrades():
    m = aggregate([rec(0, contracts=0, upgrades=2, value=300, insurance=0)])

    assert m.revenue_per_contract == 0
    assert m.average_upgrade_price == 150.0


def test_score_hits_100_when_every_term_is_capped():
    entries = [rec(i, contracts=2, upgrades=1, value=1000, insurance=2) for i in range(30)]
    m = compute_snapshot(AGENT, entries, end_date=END).metrics

    assert m.performance_score == 100


def test_score_stays_within_bounds():
    for entries in (
        [rec(0, contracts=0, upgrades=0, value=0, insurance=0)],
        [rec(i, contracts=1, upgrades=1, value=10_000, insurance=5) for i in range(40)],
    ):
        m = compute_snapshot(AGENT, entries, end_date=END).metrics
        assert 0 <= m.performance_score <= 100
        assert 0 <= m.consistency_score <= 100


def test_more_entries_than_window_days_caps_consistency():
    entries = [rec(i) for i in range(31)]  # both window edges included
    m = compute_snapshot(AGENT, entries, end_date=END).metrics

    assert m.consistency_score == 100


def test_idempotent_and_input_not_mutated():
    entries = [rec(3), rec(1), rec(2)]
    before = list(entries)

    first = compute_snapshot(AGENT, entries, end_date=END)
    second = compute_snapshot(AGENT, entries, end_date=END)

    assert first == second
    assert entries == before


def test_extra_insurance_unit_never_lowers_insurance_rate():
    base = [rec(0, insurance=3), rec(1, insurance=4)]
    more = [rec(0, insurance=4), rec(1, insurance=4)]

    a = compute_snapshot(AGENT, base, end_date=END).metrics
    b = compute_snapshot(AGENT, more, end_date=END).metrics

    assert b.insurance_rate >= a.insurance_rate


def test_insurance_units_sum_across_package_tiers():
    entry = EntryRecord(
        agent_id=AGENT,
        date=END,
        contracts_count=10,
        upgrades_count=0,
        total_upgrade_value=0,
        insurance_packages=(
            InsurancePackageSale(PackageTier.BASIC, 2),
            InsurancePackageSale(PackageTier.ALL_INCLUSIVE, 3, 90.0),
        ),
    )
    assert entry.insurance_units == 5
    assert aggregate([entry]).insurance_rate == 50.0


def test_entry_for_other_agent_is_rejected():
    with pytest.raises(ValueError):
        compute_snapshot(AGENT, [rec(0), rec(1, agent="someone-else")], end_date=END)


def test_negative_values_are_rejected():
    with pytest.raises(ValueError):
        compute_snapshot(AGENT, [rec(0, contracts=-1)], end_date=END)
    with pytest.raises(ValueError):
        compute_snapshot(AGENT, [rec(0, value=-5)], end_date=END)


def test_window_days_must_be_positive():
    with pytest.raises(ValueError):
        compute_snapshot(AGENT, [rec(0)], window_days=0, end_date=END)


def test_round_half_up_matches_js_math_round():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(0.125, 2) == 0.13


def test_day_with_contracts_but_no_extras_lowers_rates():
    base = [rec(1), rec(2)]
    with_quiet_day = base + [rec(0, contracts=5, upgrades=0, value=0, insurance=0)]

    a = compute_snapshot(AGENT, base, end_date=END).metrics
    b = compute_snapshot(AGENT, with_quiet_day, end_date=END).metrics

    assert b.insurance_rate < a.insurance_rate
    assert b.upgrade_rate < a.upgrade_rate


def test_package_sale_serializes_with_tier_value():
    sale = InsurancePackageSale.from_dict({"package_type": "Smart", "count": "2", "value": None})

    assert sale.to_dict() == {"package_type": "Smart", "count": 2, "value": 0.0}
    assert sale.coverage == ("LD", "BF")
