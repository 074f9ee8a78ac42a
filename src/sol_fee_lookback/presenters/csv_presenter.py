# src/sol_fee_lookback/presenters/csv_presenter.py
import csv
from typing import Iterable, TextIO

from ..domain.models import FeeEntry, FeeReport
from .formatting import NO_DATA, human_utc, pct, sol

HEADER = ["timestamp", "signature", "success", "fee_lamports", "compute_units"]


def write_transactions_csv(entries: Iterable[FeeEntry], report: FeeReport, out: TextIO) -> int:
    """Per-transaction rows (oldest first) followed by a summary block."""
    w = csv.writer(out, lineterminator="\n")
    w.writerow(HEADER)
    n = 0
    for e in sorted(entries, key=lambda x: (x.ts_ms or 0, x.tx_ref.signature)):
        w.writerow([
            human_utc(e.ts_ms) if e.ts_ms is not None else "N/A",
            e.tx_ref.signature,
            "true" if e.success else "false",
            e.amount,
            e.compute_units if e.compute_units is not None else "N/A",
        ])
        n += 1

    win = report.window
    out.write("\nSUMMARY STATISTICS\n")
    w.writerow(["Time period", f"{human_utc(win.cutoff_ms)} to {human_utc(win.now_ms)}"])
    w.writerow(["Total transactions", report.entries_count])
    w.writerow(["Successful transactions", report.successful_count])
    w.writerow(["Failed transactions", report.failed_count])
    w.writerow(["Success rate", pct(report.success_rate)])
    w.writerow(["Total fees (SOL)", sol(report.total_sol)])
    w.writerow(["Total fees (lamports)", report.total])
    w.writerow(["Average fee per transaction (lamports)",
                report.average if report.average is not None else NO_DATA])
    return n
