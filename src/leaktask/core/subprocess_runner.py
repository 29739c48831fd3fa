"""Scanner process execution.

The scanner writes straight to the task's stdout/stderr so pipeline logs
show its progress live; only the return code is collected.
"""

from __future__ import annotations

import asyncio
import shlex
from pathlib import Path
from typing import List, Optional, Union

from leaktask.core.logging import get_logger

LOGGER = get_logger(__name__)


async def run_tool(
    cmd: List[str],
    cwd: Optional[Union[str, Path]] = None,
    timeout: Optional[float] = None,
) -> int:
    """Run a command to completion and return its exit code.

    A non-zero exit code is returned, never raised; the caller decides what
    it means.

    Args:
        cmd: Executable followed by its arguments.
        cwd: Working directory for the command.
        timeout: Seconds to wait before killing the process (None waits forever).

    Raises:
        asyncio.TimeoutError: If the command exceeds ``timeout``.
        OSError: If the executable cannot be started.
    """
    LOGGER.info(f"Running: {shlex.join(cmd)}")
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        cwd=str(cwd) if cwd is not None else None,
    )
    try:
        returncode = await asyncio.wait_for(proc.wait(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        LOGGER.error(f"{Path(cmd[0]).name} timed out after {timeout} seconds")
        raise

    LOGGER.debug(f"{Path(cmd[0]).name} exited with code {returncode}")
    return returncode
