from __future__ import annotations

import pytest

from stakewatch.domain.errors import ParseError
from stakewatch.domain.merge import merge_events
from tests.helpers.activity import DELEGATOR_A, INDEXER_X, make_raw_event


def test_merge_tags_deposits_and_withdrawals() -> None:
    deposits = [make_raw_event("dep", amount="100", timestamp=1000, transaction_hash="0xtx1")]
    withdrawals = [make_raw_event("wd", amount="40", timestamp="2000")]

    result = merge_events(deposits, withdrawals, cap=100)

    by_id = {activity.id: activity for activity in result.activities}
    deposit = by_id["dep"]
    withdrawal = by_id["wd"]
    assert (deposit.staked_amount, deposit.unstaked_amount) == (100, 0)
    assert (deposit.delegated_at, deposit.undelegated_at) == (1000, 0)
    assert deposit.transaction_hash == "0xtx1"
    assert (withdrawal.staked_amount, withdrawal.unstaked_amount) == (0, 40)
    assert (withdrawal.delegated_at, withdrawal.undelegated_at) == (0, 2000)
    assert withdrawal.transaction_hash is None
    assert result.dropped == []


def test_merge_keeps_exactly_one_non_zero_amount_matching_its_timestamp() -> None:
    deposits = [make_raw_event(f"d{i}", amount=i + 1, timestamp=1000 + i) for i in range(5)]
    withdrawals = [make_raw_event(f"w{i}", amount=i + 1, timestamp=1002 + i) for i in range(5)]

    result = merge_events(deposits, withdrawals, cap=100)

    assert len(result.activities) == 10
    for activity in result.activities:
        assert (activity.staked_amount == 0) != (activity.unstaked_amount == 0)
        if activity.staked_amount:
            assert activity.delegated_at > 0
            assert activity.undelegated_at == 0
        else:
            assert activity.undelegated_at > 0
            assert activity.delegated_at == 0


def test_merge_orders_newest_first_and_applies_cap() -> None:
    deposits = [make_raw_event(f"d{i}", timestamp=1000 + 2 * i) for i in range(60)]
    withdrawals = [make_raw_event(f"w{i}", timestamp=1001 + 2 * i) for i in range(60)]

    result = merge_events(deposits, withdrawals, cap=100)

    timestamps = [activity.effective_timestamp for activity in result.activities]
    assert len(timestamps) == 100
    assert timestamps == sorted(timestamps, reverse=True)
    assert result.activities[0].id == "w59"


def test_merge_scenario_orders_withdrawal_before_deposits() -> None:
    deposits = [
        make_raw_event("dep-1", amount="100", timestamp=1000),
        make_raw_event("dep-2", amount="200", timestamp=2000),
    ]
    withdrawals = [make_raw_event("wd-1", amount="50", timestamp=3000)]

    result = merge_events(deposits, withdrawals, cap=100)

    assert [activity.id for activity in result.activities] == ["wd-1", "dep-2", "dep-1"]


def test_merge_ties_keep_input_order() -> None:
    deposits = [make_raw_event("dep-a", timestamp=500), make_raw_event("dep-b", timestamp=500)]
    withdrawals = [make_raw_event("wd-a", timestamp=500)]

    result = merge_events(deposits, withdrawals, cap=100)

    assert [activity.id for activity in result.activities] == ["dep-a", "dep-b", "wd-a"]


def test_merge_is_deterministic() -> None:
    deposits = [make_raw_event(f"d{i}", timestamp=1000 + (i * 7) % 13) for i in range(20)]
    withdrawals = [make_raw_event(f"w{i}", timestamp=1000 + (i * 5) % 11) for i in range(20)]

    first = merge_events(deposits, withdrawals, cap=25)
    second = merge_events(deposits, withdrawals, cap=25)

    assert first.activities == second.activities


@pytest.mark.parametrize(
    ("amount", "timestamp", "field"),
    [
        ("12abc", 1000, "amount"),
        ("-5", 1000, "amount"),
        (-5, 1000, "amount"),
        ("1.5", 1000, "amount"),
        ("", 1000, "amount"),
        ("100", "soon", "timestamp"),
        ("100", 0, "timestamp"),
        ("100", "", "timestamp"),
    ],
)
def test_merge_drops_unparsable_events(amount: str | int, timestamp: str | int, field: str) -> None:
    deposits = [
        make_raw_event("good", amount="10", timestamp=900),
        make_raw_event("bad", amount=amount, timestamp=timestamp),
    ]

    result = merge_events(deposits, [], cap=100)

    assert [activity.id for activity in result.activities] == ["good"]
    assert result.dropped_count == 1
    dropped = result.dropped[0]
    assert isinstance(dropped, ParseError)
    assert dropped.event_id == "bad"
    assert dropped.field == field


def test_merge_drops_events_without_addresses() -> None:
    deposits = [make_raw_event("blank", delegator="  ")]

    result = merge_events(deposits, [], cap=100)

    assert result.activities == []
    assert result.dropped[0].field == "delegator"


def test_merge_keeps_addresses_verbatim() -> None:
    result = merge_events([make_raw_event("dep")], [], cap=10)

    activity = result.activities[0]
    assert activity.delegator_address == DELEGATOR_A
    assert activity.indexer_address == INDEXER_X


def test_merge_with_empty_inputs() -> None:
    result = merge_events([], [], cap=100)

    assert result.activities == []
    assert result.dropped == []


def test_merge_rejects_negative_cap() -> None:
    with pytest.raises(ValueError, match="non-negative"):
        merge_events([], [], cap=-1)
