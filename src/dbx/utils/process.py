"""Subprocess utilities."""

import asyncio
import logging
import shlex
import subprocess
from typing import List
from dataclasses import dataclass


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Result from running a command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""


async def run_command(
    cmd: List[str],
    check: bool = True,
    capture_output: bool = True,
    **kwargs
) -> CommandResult:
    """Run a command asynchronously and wait for it to exit.

    With ``capture_output=False`` the child inherits this process's stdio,
    which is what interactive backend commands (pull, create) need.
    """
    logger.debug(f"Running command: {shlex.join(cmd)}")
    
    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE if capture_output else None,
        stderr=asyncio.subprocess.PIPE if capture_output else None,
        **kwargs
    )
    stdout, stderr = await process.communicate()
        
    result = CommandResult(
        returncode=process.returncode,
        stdout=stdout.decode() if stdout else "",
        stderr=stderr.decode() if stderr else "",
    )
    
    if check and process.returncode != 0:
        error = subprocess.CalledProcessError(
            process.returncode, cmd
        )
        error.stdout = result.stdout
        error.stderr = result.stderr
        raise error
        
    return result
