import json
from typing import Any, Dict, TextIO

from ..domain.models import FeeReport
from ..ports.presenter import Presenter
from .formatting import iso_utc, sol


def report_to_dict(report: FeeReport) -> Dict[str, Any]:
    w = report.window
    return {
        "window": {
            "from": iso_utc(w.cutoff_ms),
            "to": iso_utc(w.now_ms),
            "hours": w.hours,
        },
        "has_data": report.has_data,
        "count": report.entries_count,
        "total_lamports": report.total,
        "total_sol": sol(report.total_sol),
        # null, never 0, when there is nothing to average
        "average_lamports": str(report.average) if report.average is not None else None,
        "min_lamports": report.min,
        "max_lamports": report.max,
        "successful": report.successful_count,
        "failed": report.failed_count,
        "skipped": report.skipped_count,
        "scanned": report.scanned_count,
    }


class JsonPresenter(Presenter):
    def render(self, report: FeeReport, out: TextIO) -> None:
        out.write(json.dumps(report_to_dict(report), default=str, ensure_ascii=False, indent=2))
        out.write("\n")
