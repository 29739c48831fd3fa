"""Logging setup for leaktask.

Pipeline agents expose a ``System.Debug`` variable (``SYSTEM_DEBUG`` in the
environment); when it is true the task logs at DEBUG regardless of flags.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Mapping, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Agent variable enabling diagnostic output for a whole pipeline run
PIPELINE_DEBUG_ENV = "SYSTEM_DEBUG"


def pipeline_debug_enabled(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Return True when the pipeline requested diagnostic logging."""
    env = os.environ if environ is None else environ
    return env.get(PIPELINE_DEBUG_ENV, "").strip().lower() == "true"


def configure_logging(*, debug: bool = False, verbose: bool = False, quiet: bool = False) -> None:
    """Configure root logging level based on CLI flags.

    Precedence:
    - quiet → ERROR
    - debug (or SYSTEM_DEBUG=true) → DEBUG
    - verbose → INFO
    - default → WARNING

    Logs go to stderr so stdout stays reserved for pipeline logging commands.
    """

    if quiet:
        level = logging.ERROR
    elif debug or pipeline_debug_enabled():
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-level logger."""

    return logging.getLogger(name if name is not None else "leaktask")
