"""Standalone host: ``python -m pyqt_logtail --file PATH`` or ``--journal [UNIT]``."""

import argparse
import logging
import sys
from typing import Optional, Sequence

from PyQt6.QtWidgets import QApplication, QMainWindow

from pyqt_logtail.core.configuration import TailConfiguration
from pyqt_logtail.exceptions import InvalidConfigurationError
from pyqt_logtail.protocols.tail_config import TailSettings, get_tail_settings
from pyqt_logtail.theming.color_scheme import LogTailColorScheme
from pyqt_logtail.widgets.log_tail_widget import LogTailWidget


def build_parser(settings: TailSettings) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="pyqt_logtail", description="Tail a log file or journalctl stream")
    source = ap.add_mutually_exclusive_group()
    source.add_argument("--file", help="Path to log file to tail")
    source.add_argument("--journal", nargs="?", const="", default=None, metavar="UNIT",
                        help="Follow journalctl, optionally restricted to UNIT")
    ap.add_argument("--max-lines", type=int, default=settings.default_capacity,
                    help=f"Lines to retain, {settings.min_capacity}..{settings.max_capacity}"
                         f" (default {settings.default_capacity})")
    ap.add_argument("--light", action="store_true", help="Use the light color scheme")
    ap.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return ap


def build_configuration(args: argparse.Namespace) -> TailConfiguration:
    if args.file:
        return TailConfiguration.for_file(args.file, capacity=args.max_lines)
    if args.journal is not None:
        return TailConfiguration.for_process(args.journal, capacity=args.max_lines)
    return TailConfiguration.none(capacity=args.max_lines)


def build_color_scheme(args: argparse.Namespace) -> LogTailColorScheme:
    return LogTailColorScheme.create_light_theme() if args.light else LogTailColorScheme()


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = get_tail_settings()
    ap = build_parser(settings)
    args = ap.parse_args(argv)

    if not settings.min_capacity <= args.max_lines <= settings.max_capacity:
        ap.error(f"--max-lines must be between {settings.min_capacity} and {settings.max_capacity}")
    try:
        config = build_configuration(args)
    except InvalidConfigurationError as e:
        ap.error(str(e))

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = QApplication.instance() or QApplication(sys.argv[:1])
    window = QMainWindow()
    window.setWindowTitle("Log Tail")
    widget = LogTailWidget(color_scheme=build_color_scheme(args), parent=window)
    window.setCentralWidget(widget)
    window.resize(520, 300)
    widget.apply_configuration(config)
    window.show()

    try:
        return app.exec()
    finally:
        widget.session.stop()


if __name__ == "__main__":
    sys.exit(main())
