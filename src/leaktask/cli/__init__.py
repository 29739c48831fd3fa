"""Command-line interface for leaktask."""

from __future__ import annotations

import sys
from typing import Iterable, Optional


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Entry point for the ``leaktask`` console script."""
    from leaktask.cli.runner import CLIRunner

    return CLIRunner().run(argv)


if __name__ == "__main__":
    sys.exit(main())
