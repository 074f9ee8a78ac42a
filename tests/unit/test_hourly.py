# tests/unit/test_hourly.py
import io
from decimal import Decimal

from conftest import WALLET
from sol_fee_lookback.domain.models import FeeEntry, TransactionRef
from sol_fee_lookback.domain.time_window import MS_PER_HOUR, LookbackWindow
from sol_fee_lookback.presenters.timeseries_presenter import write_hourly
from sol_fee_lookback.services.timeseries.hourly import hourly_buckets

H0 = 1_700_000_000_000 - 1_700_000_000_000 % MS_PER_HOUR


def _e(sig, ts_ms, fee=10, success=True):
    return FeeEntry(TransactionRef(sig, ts_ms), fee, WALLET, success=success, ts_ms=ts_ms)


def test_buckets_are_gap_free_through_the_hour_after_window_end():
    window = LookbackWindow(H0 + 3 * MS_PER_HOUR + 5, 10)
    entries = [_e("a", H0 + 1), _e("b", H0 + 2, success=False), _e("c", H0 + 2 * MS_PER_HOUR + 7, fee=5)]
    buckets = hourly_buckets(entries, window)
    assert [b.hour_ms for b in buckets] == [H0 + i * MS_PER_HOUR for i in range(5)]
    assert [(b.successful, b.total, b.fee_lamports) for b in buckets] == [(1, 2, 20), (0, 0, 0), (1, 1, 5), (0, 0, 0), (0, 0, 0)]
    assert buckets[0].success_rate == Decimal(50)
    assert buckets[1].success_rate is None


def test_no_entries_no_series():
    assert hourly_buckets([], LookbackWindow(H0, 1)) == []


def test_rendering():
    out = io.StringIO()
    write_hourly(hourly_buckets([_e("a", H0)], LookbackWindow(H0, 1)), out)
    assert out.getvalue().splitlines()[2] == "2023-11-14 22:00,1,1,100.00%,10"


def test_series_extends_past_last_entry_to_window_end():
    window = LookbackWindow(H0 + 2 * MS_PER_HOUR, 3)
    buckets = hourly_buckets([_e("a", H0)], window)
    assert buckets[-1].hour_ms == H0 + 3 * MS_PER_HOUR
    assert len(buckets) == 4
