from datetime import datetime, timezone
from typing import Iterable, TextIO

from ..services.timeseries.hourly import HourlyBucket
from .formatting import pct


def write_hourly(buckets: Iterable[HourlyBucket], out: TextIO) -> None:
    out.write("TIME SERIES ANALYSIS BY HOUR\n")
    out.write("hour,successful,total,success_rate,fee_lamports\n")
    for b in buckets:
        hour = datetime.fromtimestamp(b.hour_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:00")
        rate = pct(b.success_rate) if b.total else "0.00%"
        out.write(f"{hour},{b.successful},{b.total},{rate},{b.fee_lamports}\n")
