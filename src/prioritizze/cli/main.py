# src/prioritizze/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds ServiceState, then either:
- runs a single reset sweep (--once), or
- runs the hourly reset scheduler until SIGINT/SIGTERM.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
from collections.abc import Sequence

from ..api.errors import friendly_api_error_message
from ..cli.bootstrap import create_service_state, ensure_authenticated
from ..config import get_settings
from ..core.state import ServiceState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _positive_seconds(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {raw!r}") from None
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {raw}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prioritizze-reset",
        description="Reset recurring Prioritizze tasks back to todo when their period elapses.",
    )
    parser.add_argument("--once", action="store_true", help="run a single sweep and exit")
    parser.add_argument(
        "--interval",
        type=_positive_seconds,
        default=None,
        metavar="SECONDS",
        help="polling interval (default: PRIORITIZZE_RESET_INTERVAL_SECONDS or 3600)",
    )
    return parser


async def _run_once(state: ServiceState) -> int:
    report = await state.resetter.run_sweep()
    return 1 if report.fetch_failed else 0


async def _run_forever(state: ServiceState) -> int:
    loop = asyncio.get_running_loop()
    stop_main = asyncio.Event()

    def _handle_signal(signum: int) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _handle_signal, sig)
        except (NotImplementedError, RuntimeError):
            # Windows event loops have no add_signal_handler; Ctrl+C still raises KeyboardInterrupt.
            pass

    stop = state.scheduler.start()
    try:
        await stop_main.wait()
    finally:
        stop()
        await state.scheduler.wait_idle()
    return 0


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    try:
        state = create_service_state(settings=settings, interval_seconds=args.interval)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    try:
        if not await ensure_authenticated(state):
            return 1
        if args.once:
            return await _run_once(state)
        return await _run_forever(state)
    except Exception as e:
        logger.error("%s", friendly_api_error_message(e))
        logger.debug("Fatal error", exc_info=True)
        return 1
    finally:
        await state.api.aclose()


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s recurring reset service...", settings.app_name)

    try:
        code = asyncio.run(run(args))
    except KeyboardInterrupt:
        code = 0

    logger.info("Bye.")
    return code


if __name__ == "__main__":
    raise SystemExit(main())
