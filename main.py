#!/usr/bin/env python3
"""
Entry point for the photo mirror tool.
"""

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from photomirror.config import load_config
from photomirror.errors import AuthFailure
from photomirror.report import render_summary
from photomirror.syncer import PhotoSync

console = Console()


def main() -> int:
    try:
        config = load_config()
    except ValueError as e:
        console.print(f"❌ Invalid configuration: {e}", style="red")
        return 2

    logging.basicConfig(
        level=config.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    syncer = PhotoSync(config)
    try:
        result = syncer.run()
    except AuthFailure as e:
        logging.getLogger("photomirror").error("Authentication failed: %s", e)
        return 1

    render_summary(result.stats, len(result.inventory), console=console, partial=result.partial)
    return 0


if __name__ == "__main__":
    sys.exit(main())
