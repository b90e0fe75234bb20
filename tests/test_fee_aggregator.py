import pytest

from gas_tracker.core.fee_aggregator import (
    MONTH_MS,
    AggregationResult,
    FeeAggregator,
    aggregate,
    aggregate_stream,
    month_count,
    record_fee_units,
)
from gas_tracker.core.pagination import Page, iter_pages
from tests.helpers import make_ledger, make_record

DAY_MS = 24 * 60 * 60 * 1000
T0 = 1_700_000_000_000


def test_two_page_scenario():
    """100 + 40 records at price 2 x 50 units"""
    pages = [
        Page(records=[make_record(2, 50) for _ in range(100)], cursor="c1", page_size=100),
        Page(records=[make_record(2, 50) for _ in range(40)], cursor="c2", page_size=100),
    ]

    result = aggregate(pages)

    assert result.tx_count == 140
    assert result.total_fee_units == 14000
    assert result.avg_fee_units == 100
    assert result.total_fee_display == "0.000140"
    assert result.avg_fee_display == "0.000001"
    assert result.monthly_avg_fee_display is None


def test_zero_fee_records_still_counted():
    records = [
        make_record(0, 50),
        make_record(2, 0),
        {"header": None},
        {"no_header": True},
        "not even a dict",
        make_record(3, 10),
    ]

    result = aggregate([Page(records=records, cursor=None, page_size=100)])

    assert result.tx_count == 6
    assert result.total_fee_units == 30
    assert result.avg_fee_units == 5


def test_unparseable_fee_fields_contribute_zero():
    records = [
        {"header": {"gas_unit_price": "abc", "max_gas_amount": "10"}},
        {"header": {"gas_unit_price": 1.5, "max_gas_amount": 10}},
        {"header": {"gas_unit_price": 100, "max_gas_amount": 500}},
    ]

    result = aggregate([Page(records=records, cursor=None, page_size=100)])

    assert result.tx_count == 3
    assert result.total_fee_units == 50_000


def test_big_integer_fees_are_exact():
    price = 10**30 + 7
    assert record_fee_units(make_record(price, 3)) == 3 * price


def test_all_zero_fees_give_zero_display():
    records = [make_record(0, 0, ts=T0), make_record(0, 0, ts=T0 + 400 * DAY_MS)]

    result = aggregate([Page(records=records, cursor=None, page_size=100)])

    assert result.tx_count == 2
    assert result.total_fee_units == 0
    assert result.total_fee_display == "0.000000"
    assert result.avg_fee_display == "0.000000"
    assert result.monthly_avg_fee_display is None


def test_empty_history():
    result = aggregate([])

    assert result.tx_count == 0
    assert result.avg_fee_display == "0.000000"
    assert result.latest_timestamp_ms is None


def test_monthly_average_over_three_months():
    records = [
        make_record(10**8, 3, ts=T0),  # 3 SUPRA each
        make_record(10**8, 3, ts=T0 + 45 * DAY_MS),
        make_record(10**8, 3, ts=T0 + 90 * DAY_MS),
    ]

    result = aggregate([Page(records=records, cursor=None, page_size=100)])

    assert result.total_fee_display == "9.000000"
    assert result.avg_fee_display == "3.000000"
    assert result.monthly_avg_fee_display == "3.000000"
    assert result.earliest_timestamp_ms == T0
    assert result.latest_timestamp_ms == T0 + 90 * DAY_MS


def test_single_month_has_no_monthly_average():
    records = [make_record(5, 5, ts=T0), make_record(5, 5, ts=T0 + 40 * DAY_MS)]

    result = aggregate([Page(records=records, cursor=None, page_size=100)])

    assert result.monthly_avg_fee_display is None


def test_missing_timestamps_are_skipped():
    records = [make_record(5, 5), make_record(5, 5, ts=T0 // 1000)]

    result = aggregate([Page(records=records, cursor=None, page_size=100)])

    assert result.latest_timestamp_ms == T0
    assert result.earliest_timestamp_ms == T0


def test_month_count():
    assert month_count(None, T0) == 1
    assert month_count(T0, T0) == 1
    assert month_count(T0 + 1, T0) == 1
    assert month_count(T0, T0 + 10 * DAY_MS) == 1
    # 1.5 months rounds up to 2
    assert month_count(T0, T0 + MONTH_MS + MONTH_MS // 2) == 2
    assert month_count(T0, T0 + 12 * MONTH_MS) == 12


def test_incremental_add_page_matches_aggregate():
    aggregator = FeeAggregator()
    aggregator.add_page(Page(records=[make_record(1, 7)], cursor="c", page_size=1))
    aggregator.add_page(Page(records=[make_record(1, 9)], cursor=None, page_size=1))

    assert aggregator.result().total_fee_units == 16


def test_result_serialization_keeps_big_totals():
    result = AggregationResult(
        tx_count=3,
        total_fee_units=2**80,
        total_fee_display="x",
        avg_fee_display="y",
    )

    data = result.to_dict()

    assert data["total_fee_units"] == str(2**80)
    assert AggregationResult.from_dict(data) == result


@pytest.mark.asyncio
async def test_aggregate_stream_from_ledger():
    client = make_ledger(
        [
            {"record": [make_record(2, 50) for _ in range(100)], "cursor": "c1"},
            {"record": [make_record(2, 50) for _ in range(40)], "cursor": "c2"},
        ]
    )

    result = await aggregate_stream(iter_pages(client, "0xabc", page_size=100))

    assert result.tx_count == 140
    assert result.total_fee_units == 14000
