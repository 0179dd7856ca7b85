from __future__ import annotations

import argparse
import logging
import time
from typing import Callable, List, Optional, Sequence

import requests

from . import __version__, config, notifier, scraper, store
from .store import InventoryItem
from .utils import NetworkError, get_http_session


def setup_logging(level_name: str = config.LOG_LEVEL) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="inventory-alerts",
        description="Inventory Alerts: watch product pages and report stock changes to Telegram.",
    )
    parser.add_argument("-l", "--log-level", default=config.LOG_LEVEL,
                        help="DEBUG, INFO, WARNING or ERROR (default: %(default)s)")
    parser.add_argument("-m", "--match-file", default=config.MATCH_FILE,
                        help="YAML file with the tracked items (default: %(default)s)")
    parser.add_argument("-u", "--update-period-s", type=float, default=config.UPDATE_PERIOD_S,
                        help="seconds between polls (default: %(default)s)")
    parser.add_argument("--timeout", type=float, default=config.HTTP_TIMEOUT_SECONDS,
                        help="per-request HTTP timeout in seconds (default: %(default)s)")
    parser.add_argument("--isolate-failures", action=argparse.BooleanOptionalAction,
                        default=config.ISOLATE_FETCH_FAILURES,
                        help="keep polling the other items when one page fails to load")
    parser.add_argument("chat_id", type=int, nargs="?", default=config.TELEGRAM_CHAT_ID,
                        help="Telegram chat id to notify (default: $TELEGRAM_CHAT_ID)")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args(argv)
    if args.chat_id is None:
        parser.error("the following arguments are required: chat_id")
    if args.update_period_s <= 0:
        parser.error("--update-period-s must be positive")
    return args


def run_cycle(
    items: List[InventoryItem],
    *,
    match_file: str,
    chat_id: int,
    token: str,
    session: Optional[requests.Session] = None,
    timeout: float = config.HTTP_TIMEOUT_SECONDS,
    isolate_failures: bool = False,
) -> List[InventoryItem]:
    """Perform one poll-and-notify cycle.  Returns the collection to carry into the next tick."""
    logger = logging.getLogger(__name__)
    logger.debug("Start update state")
    try:
        result = scraper.poll_all(
            items, session, timeout=timeout, isolate_failures=isolate_failures
        )
    except NetworkError as e:
        logger.error("Failed to update state: %s", e)
        return items

    if not result.changed:
        logger.debug("State did not change")
        return items

    try:
        store.save(match_file, result.items)
    except OSError:
        logger.exception("Failed to write %s; will retry on the next tick", match_file)
        return items

    notifier.send_inventory(
        notifier.CHANGED_HEADER, result.items, chat_id=chat_id, token=token, session=session
    )
    return result.items


def poll_loop(
    items: List[InventoryItem],
    interval: float,
    *,
    max_ticks: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
    **cycle_kwargs,
) -> List[InventoryItem]:
    """
    Run `run_cycle` every ``interval`` seconds, starting immediately.

    Ticks are anchored to the start time; a tick that overruns its slot
    pushes the next one back instead of overlapping it.  Runs forever
    unless ``max_ticks`` is given.
    """
    logger = logging.getLogger(__name__)
    logger.info("Polling %d items every %.1fs", len(items), interval)

    ticks = 0
    next_tick = clock()
    while max_ticks is None or ticks < max_ticks:
        delay = next_tick - clock()
        if delay > 0:
            sleep(delay)
        items = run_cycle(items, **cycle_kwargs)
        ticks += 1

        next_tick += interval
        now = clock()
        if next_tick < now:
            logger.warning("Poll took longer than %.1fs; next tick delayed", interval)
            next_tick = now
    return items


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Initialise and run the monitoring loop."""
    args = parse_args(argv)
    setup_logging(args.log_level)
    config.validate()
    logger = logging.getLogger(__name__)

    items = store.load(args.match_file)
    logger.info("Loaded %d items from %s", len(items), args.match_file)

    session = get_http_session()
    notifier.send_inventory(
        notifier.BOOT_HEADER, items,
        chat_id=args.chat_id, token=config.TELEGRAM_BOT_TOKEN, session=session,
    )

    try:
        poll_loop(
            items,
            args.update_period_s,
            match_file=args.match_file,
            chat_id=args.chat_id,
            token=config.TELEGRAM_BOT_TOKEN,
            session=session,
            timeout=args.timeout,
            isolate_failures=args.isolate_failures,
        )
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        session.close()


if __name__ == "__main__":
    main()
