from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

NO_DATA = "no data"


def iso_utc(ts_ms: int) -> str:
    return datetime.fromtimestamp(ts_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def human_utc(ts_ms: int) -> str:
    return datetime.fromtimestamp(ts_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def sol(total_sol: Decimal) -> str:
    return f"{total_sol:.9f}"


def pct(rate: Optional[Decimal]) -> str:
    return NO_DATA if rate is None else f"{rate:.2f}%"
