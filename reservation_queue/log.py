"""Process-wide logging setup for the command line entrypoints."""

from __future__ import annotations

import logging
import sys

_CONFIGURED = False


def configure_logging(level: str = "WARNING") -> None:
    """Configure the root logger once; later calls only adjust the level."""
    global _CONFIGURED
    resolved = level.upper()
    if _CONFIGURED:
        logging.getLogger().setLevel(resolved)
        return

    logging.basicConfig(
        level=resolved,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stderr,
    )
    _CONFIGURED = True
