"""Logging setup for the command line."""

from __future__ import annotations

import logging

# httpx logs every request at INFO; that is only interesting with --verbose.
_NOISY_LOGGERS = ("httpx", "httpcore", "hishel")


def configure_logging(*, verbose: bool = False, force: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)
