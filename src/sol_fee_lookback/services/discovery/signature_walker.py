# src/sol_fee_lookback/services/discovery/signature_walker.py
import logging
from typing import Iterator, Optional, Set, Tuple

from ...domain.models import TransactionRef
from ...domain.time_window import LookbackWindow
from ...errors import FetchFailedError
from ...ports.transaction_source import TransactionSource
from ..ratelimit.rate_limiter import RateLimiter


class TransactionDiscovery:
    """Walks an address's signature history backwards until the window cutoff."""

    def __init__(self, source: TransactionSource, limiter: RateLimiter):
        self.source = source
        self.limiter = limiter
        self.pages_fetched = 0
        self.refs_listed = 0

    def fetch_page(self, address: str, cursor: Optional[str]):
        what = f"getSignaturesForAddress(before={cursor or 'latest'})"
        try:
            return self.limiter.call(self.source.list_signatures, address, cursor, what=what)
        except FetchFailedError as e:
            logging.error("page fetch failed address=%s cursor=%s: %s", address, cursor, e)
            raise

    def iter_pages(self, address: str, window: LookbackWindow) -> Iterator[Tuple[TransactionRef, ...]]:
        """Yield, page by page, the refs inside the window (newest first).

        Stops at the first ref older than the cutoff or when the history has
        no further page. A page that cannot be fetched aborts the walk.
        """
        cursor: Optional[str] = None
        seen: Set[str] = set()

        while True:
            page = self.fetch_page(address, cursor)
            self.pages_fetched += 1
            self.refs_listed += len(page.refs)

            in_window = []
            crossed = False
            for ref in page.refs:
                if ref.ts_ms is None:
                    logging.warning("signature=%s has no block time, ignoring", ref.signature)
                    continue
                if window.is_before(ref.ts_ms):
                    crossed = True
                    break
                if not window.contains(ref.ts_ms):
                    continue  # newer than the window end
                if ref.signature in seen:
                    continue
                seen.add(ref.signature)
                in_window.append(ref)

            logging.info("page=%d listed=%d in_window=%d cursor=%s",
                         self.pages_fetched, len(page.refs), len(in_window), cursor)
            if in_window:
                yield tuple(in_window)

            if crossed or page.next_cursor is None:
                break
            if page.next_cursor == cursor:
                raise FetchFailedError(f"getSignaturesForAddress(before={cursor})", "stalled")
            cursor = page.next_cursor

        logging.info("address=%s pages=%d refs_listed=%d refs_in_window=%d",
                     address, self.pages_fetched, self.refs_listed, len(seen))
