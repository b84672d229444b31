"""Application entrypoint."""

from __future__ import annotations

import logging
from uuid import uuid4

from canvai.presentation.cli import app

LOGGER = logging.getLogger(__name__)


def main() -> int:
    """Run the command line application.

    Typer exits through ``SystemExit``; only unexpected failures reach the handler.
    """
    try:
        app(prog_name="canvai")
    except Exception:
        correlation_id = str(uuid4())
        LOGGER.exception("event=cli_failed correlation_id=%s", correlation_id)
        print(f"CanvAI failed unexpectedly. correlation_id={correlation_id}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
