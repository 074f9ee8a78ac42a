import argparse
import logging
import sys
from typing import List, Optional, TextIO

from solders.pubkey import Pubkey

from .adapters.sinks.memory_sink import MemorySink
from .adapters.solana_client import SolanaRPCClient
from .adapters.solana_rpc_provider import SolanaRPCProvider
from .config import Config, load_config, resolve_rpc_url
from .domain.models import FeeReport
from .domain.time_window import MAX_LOOKBACK_HOURS, LookbackWindow
from .errors import FetchFailedError, InputError, PipelineCancelled
from .logging_setup import setup_logging
from .orchestrators.fee_report_usecase import run
from .ports.transaction_source import TransactionSource
from .presenters.csv_presenter import write_transactions_csv
from .presenters.json_presenter import JsonPresenter
from .presenters.text_presenter import TextPresenter
from .presenters.timeseries_presenter import write_hourly
from .services.ratelimit.rate_limiter import RateLimiter
from .services.timeseries.hourly import hourly_buckets

EXIT_OK = 0
EXIT_FETCH_FAILED = 1
EXIT_INPUT = 2
EXIT_CANCELLED = 130


def validate_address(raw: str) -> str:
    address = (raw or "").strip()
    if not address:
        raise InputError("wallet address is required")
    try:
        Pubkey.from_string(address)
    except ValueError as e:
        raise InputError(f"invalid Solana address {address!r}: {e}") from e
    return address


def parse_hours(raw: str) -> int:
    try:
        hours = int(raw)
    except (TypeError, ValueError) as e:
        raise InputError(f"hours_to_look_back must be a positive integer, got {raw!r}") from e
    if hours <= 0:
        raise InputError(f"hours_to_look_back must be a positive integer, got {hours}")
    if hours > MAX_LOOKBACK_HOURS:
        raise InputError(f"hours_to_look_back must be at most {MAX_LOOKBACK_HOURS}, got {hours}")
    return hours


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="sol-fee-lookback",
        description="Report the network fees a Solana wallet paid over the last N hours.",
    )
    p.add_argument("wallet_address", help="Fee-paying wallet (base58 public key)")
    p.add_argument("hours_to_look_back", help="Lookback window in hours (positive integer)")
    p.add_argument("rpc_endpoint", nargs="?", default=None,
                   help="JSON-RPC endpoint (default: $SOLANA_RPC_URL or mainnet-beta)")
    p.add_argument("--format", choices=("text", "json"), default="text")
    p.add_argument("--workers", type=int, default=None, help="Concurrent transaction fetches per page")
    p.add_argument("--timeout", type=float, default=None, help="HTTP timeout in seconds")
    p.add_argument("--csv", metavar="PATH", default=None, help="Write per-transaction CSV here")
    p.add_argument("--timeseries", metavar="PATH", default=None, help="Write hourly analysis here")
    p.add_argument("--log-level", default="INFO")
    return p


def _write_artifacts(args, sink: Optional[MemorySink], report: FeeReport) -> None:
    if sink is None:
        return
    if args.csv:
        with open(args.csv, "w", newline="", encoding="utf-8") as fh:
            n = write_transactions_csv(sink.entries, report, fh)
        logging.info("transaction data saved to %s (%d rows)", args.csv, n)
    if args.timeseries:
        with open(args.timeseries, "w", encoding="utf-8") as fh:
            write_hourly(hourly_buckets(sink.sorted_by_time(), report.window), fh)
        logging.info("time series analysis saved to %s", args.timeseries)


def execute(args, cfg: Config, source: TransactionSource, limiter: RateLimiter,
            out: TextIO, now_ms: Optional[int] = None) -> FeeReport:
    address = validate_address(args.wallet_address)
    window = LookbackWindow.ending_now(parse_hours(args.hours_to_look_back), now_ms)
    sink = MemorySink() if (args.csv or args.timeseries) else None

    report = run(address, window, source, limiter, workers=cfg.fetch_workers, sink=sink)

    presenter = JsonPresenter() if args.format == "json" else TextPresenter()
    presenter.render(report, out)
    _write_artifacts(args, sink, report)
    return report


def main(argv: Optional[List[str]] = None, *, source: Optional[TransactionSource] = None,
         limiter: Optional[RateLimiter] = None, now_ms: Optional[int] = None,
         out: Optional[TextIO] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    limiter = limiter or RateLimiter()
    out = out or sys.stdout

    try:
        # inputs are checked before any request goes out
        validate_address(args.wallet_address)
        parse_hours(args.hours_to_look_back)
        cfg = load_config(rpc_url=resolve_rpc_url(args.rpc_endpoint),
                          rpc_timeout_sec=args.timeout, fetch_workers=args.workers)
        if source is not None:
            execute(args, cfg, source, limiter, out, now_ms)
        else:
            logging.info("rpc endpoint %s", cfg.rpc_url)
            with SolanaRPCClient(cfg.rpc_url, timeout=cfg.rpc_timeout_sec) as client:
                provider = SolanaRPCProvider(client, page_limit=cfg.page_limit)
                execute(args, cfg, provider, limiter, out, now_ms)
    except InputError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_INPUT
    except FetchFailedError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FETCH_FAILED
    except (KeyboardInterrupt, PipelineCancelled):
        limiter.cancel()
        print("Interrupted.", file=sys.stderr)
        return EXIT_CANCELLED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
