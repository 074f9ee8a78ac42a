import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Tuple

from ..domain.models import FeeEntry, FeeReport, TransactionRef
from ..domain.time_window import LookbackWindow
from ..errors import RecordSkipped
from ..ports.sink import FeeSink
from ..ports.transaction_source import TransactionSource
from ..services.aggregate.fee_aggregator import FeeAggregator
from ..services.discovery.signature_walker import TransactionDiscovery
from ..services.extract.fee_extractor import FeeExtractor
from ..services.ratelimit.rate_limiter import RateLimiter

DEFAULT_WORKERS = 4

_Outcome = Tuple[TransactionRef, Optional[FeeEntry], Optional[str]]


def run(address: str, window: LookbackWindow, source: TransactionSource, limiter: RateLimiter,
        *, workers: int = DEFAULT_WORKERS, sink: Optional[FeeSink] = None) -> FeeReport:
    """Discover the window's transactions, extract fees, return the report.

    Record fetches of one page run on a bounded pool; every call goes through
    `limiter`. Any escaping error (FetchFailedError, PipelineCancelled,
    KeyboardInterrupt) cancels the limiter so in-flight workers stop waiting,
    and no report is produced.
    """
    discovery = TransactionDiscovery(source, limiter)
    extractor = FeeExtractor(source, limiter)
    agg = FeeAggregator(window)

    def _one(ref: TransactionRef) -> _Outcome:
        try:
            return ref, extractor.extract(address, ref), None
        except RecordSkipped as e:
            return ref, None, e.reason

    started = time.monotonic()
    logging.info("address=%s window=[%d, %d] hours=%d",
                 address, window.cutoff_ms, window.now_ms, window.hours)

    pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fee-fetch")
    try:
        for page_no, refs in enumerate(discovery.iter_pages(address, window), start=1):
            agg.note_scanned(len(refs))
            futures = [pool.submit(_one, ref) for ref in refs]
            page_fees = 0
            page_entries = 0
            # folded in discovery order, whatever order the workers finish in
            for fut in futures:
                ref, entry, skipped = fut.result()
                if skipped is not None:
                    agg.skip(ref, skipped)
                    continue
                if entry is None:
                    continue
                agg.add(entry)
                page_fees += entry.amount
                page_entries += 1
                if sink is not None:
                    sink.add(entry)
            logging.info("batch=%d refs=%d fee_entries=%d fees=%d lamports (running total %d over %d)",
                         page_no, len(refs), page_entries, page_fees, agg.total, agg.count)
    except BaseException:
        limiter.cancel()
        pool.shutdown(wait=True, cancel_futures=True)
        raise
    pool.shutdown(wait=True)

    report = agg.report()
    logging.info("address=%s entries=%d skipped=%d total=%d lamports",
                 address, report.entries_count, report.skipped_count, report.total)
    logging.info("analysis completed in %.2fs", time.monotonic() - started)
    return report
