"""Logging bootstrap for the application."""

from __future__ import annotations

import logging


def configure_logging(*, verbose: bool = False) -> None:
    """Configure root logger once; ``verbose`` enables DEBUG output."""
    root_logger = logging.getLogger()
    level = logging.DEBUG if verbose else logging.INFO
    if root_logger.handlers:
        root_logger.setLevel(level)
        return

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    # httpx logs request URLs at INFO; Canvas file URLs carry verifier tokens.
    logging.getLogger("httpx").setLevel(logging.WARNING)
