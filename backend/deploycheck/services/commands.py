"""
Command Runner - Execute infrastructure commands with a hard timeout.
"""
import asyncio
from dataclasses import dataclass
from typing import Optional, Sequence

from deploycheck.config import settings
from deploycheck.logger import logger


class CommandTimeout(Exception):
    """Command did not finish within its timeout."""


@dataclass
class CommandResult:
    """Captured output of a finished command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stdout and stderr combined, as `2>&1` would show them."""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)


def _kill(proc: asyncio.subprocess.Process) -> None:
    try:
        proc.kill()
    except ProcessLookupError:
        # Exited between the returncode check and the signal
        pass


class CommandRunner:
    """Runs argv-style commands as subprocesses."""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout or settings.COMMAND_TIMEOUT

    async def run(self, args: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
        """Run a command and capture its output.

        Raises:
            CommandTimeout: the process was killed after the timeout
            OSError: the executable could not be started
        """
        limit = timeout or self.timeout
        logger.debug(f"exec: {' '.join(args)}")

        proc = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=limit)
        except asyncio.TimeoutError:
            raise CommandTimeout(f"{args[0]} timed out after {limit}s")
        finally:
            # Also reached on cancellation by an outer timeout
            if proc.returncode is None:
                _kill(proc)
                await proc.wait()

        return CommandResult(
            returncode=proc.returncode,
            stdout=stdout.decode(errors="replace").strip(),
            stderr=stderr.decode(errors="replace").strip()
        )
