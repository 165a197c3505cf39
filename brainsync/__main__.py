"""Command-line entry point: python -m brainsync.

Usage:
    python -m brainsync                       # run the timer headless
    python -m brainsync status                # print timer state and today's stats
    python -m brainsync export --range week   # print a CSV table to stdout
    python -m brainsync reset-stats           # forget statistics and alerts
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys

from .database.db import init_db
from .database.storage import Storage
from .stats.aggregator import EXPORT_RANGES, export_rows, format_csv, recompute_week
from .stats.fatigue import fatigue_level
from .timeutil import format_minutes, format_time


logger = logging.getLogger("brainsync")


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="brainsync",
        description="BrainSync: focus timer with fatigue tracking",
    )
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("run", help="Run the timer (default)")
    sub.add_parser("status", help="Print timer state and today's stats")
    export = sub.add_parser("export", help="Print daily stats as CSV")
    export.add_argument("--range", dest="range_", choices=EXPORT_RANGES, default="all")
    sub.add_parser("reset-stats", help="Delete statistics and alert history")
    return parser


def _run() -> int:
    from PyQt6.QtCore import QCoreApplication

    from .app import BrainSyncApp
    from .timer.state import TimerState

    qt_app = QCoreApplication(sys.argv)
    qt_app.setApplicationName("BrainSync")
    # Let Ctrl+C stop the event loop
    signal.signal(signal.SIGINT, signal.SIG_DFL)

    app = BrainSyncApp()

    def on_tick(remaining: float, state: TimerState) -> None:
        if state in (TimerState.WORKING, TimerState.BREAKING) and int(remaining) % 60 == 0:
            logger.info("%s: %s left", state.value, format_time(remaining))

    app.timer.tick.connect(on_tick)
    app.timer.state_changed.connect(lambda s: logger.info("State: %s", s.value))
    app.work_notice.connect(lambda d: logger.info(
        "Work session done (%d min). Fatigue score %d %s%s",
        d["session"].duration_minutes,
        d["fatigue_score"],
        d["fatigue_level"].label,
        ", long break due" if d["long_break_due"] else "",
    ))
    app.break_notice.connect(lambda d: logger.info("Break over"))
    app.fatigue_alert.connect(lambda d: logger.warning(
        "Fatigue is building up (score %d, %s). Consider stopping for today.",
        d["score"], d["level"].label,
    ))

    app.restore()
    if app.timer.state == TimerState.IDLE:
        app.start()
    try:
        return qt_app.exec()
    finally:
        app.dispose()


def _status() -> int:
    from .timer.state import TimerState

    storage = Storage()
    snapshot = storage.load_timer()
    stats = storage.load_statistics()
    line = f"Timer: {snapshot.state.value} (set {snapshot.set_index})"
    if snapshot.state == TimerState.PAUSED:
        line += f", {format_time(snapshot.remaining_seconds)} left"
    print(line)
    level = fatigue_level(stats.today.fatigue_score)
    print(
        f"Today ({stats.today.date}): {stats.today.sessions_completed} sessions, "
        f"{format_minutes(stats.today.total_focus_minutes)} focus, "
        f"{stats.today.interrupted_sessions} interrupted, "
        f"fatigue {stats.today.fatigue_score} ({level.label})"
    )
    return 0


def _export(range_: str) -> int:
    storage = Storage()
    stats = recompute_week(storage.load_statistics())
    storage.save_statistics(stats)
    print(format_csv(export_rows(stats, range_)))
    return 0


def main(args: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    parsed = build_parser().parse_args(args)
    init_db()

    if parsed.command == "status":
        return _status()
    if parsed.command == "export":
        return _export(parsed.range_)
    if parsed.command == "reset-stats":
        Storage().reset_statistics()
        print("Statistics reset.")
        return 0
    return _run()


if __name__ == "__main__":
    sys.exit(main())
