from typing import TextIO

from ..domain.models import FeeReport
from ..ports.presenter import Presenter
from .formatting import NO_DATA, human_utc, pct, sol


class TextPresenter(Presenter):
    def render(self, report: FeeReport, out: TextIO) -> None:
        w = report.window
        lines = [
            "--- SUMMARY ---",
            f"Time period: {human_utc(w.cutoff_ms)} to {human_utc(w.now_ms)} UTC ({w.hours}h)",
            f"Fee-paying transactions: {report.entries_count}",
            f"Successful transactions: {report.successful_count}",
            f"Failed transactions: {report.failed_count}",
            f"Success rate: {pct(report.success_rate)}",
            f"Skipped (unreadable) transactions: {report.skipped_count}",
            f"Total fees: {report.total} lamports ({sol(report.total_sol)} SOL)",
        ]
        if report.has_data:
            lines += [
                f"Average fee per transaction: {report.average} lamports",
                f"Min fee: {report.min} lamports",
                f"Max fee: {report.max} lamports",
            ]
        else:
            lines += [
                f"Average fee per transaction: {NO_DATA}",
                f"Min fee: {NO_DATA}",
                f"Max fee: {NO_DATA}",
            ]
        out.write("\n".join(lines) + "\n")
