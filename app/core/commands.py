"""Subprocess wrapper for the migration tool and seed scripts."""
from __future__ import annotations
import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from app.core.config import settings
from app.core.errors import ExternalToolFailure

log = logging.getLogger(__name__)


def run_command(args: Sequence[str], cwd: Path, timeout: Optional[float] = None) -> str:
    """
    Run an external command and return its combined output.

    Args:
        args: Command and arguments
        cwd: Working directory (the front-end project root)
        timeout: Seconds before the command is killed; falls back to
            ``settings.command_timeout``

    Raises:
        ExternalToolFailure: the command could not be started, timed out or
            exited non-zero
    """
    timeout = timeout if timeout is not None else settings.command_timeout
    log.debug("Running %s in %s", " ".join(args), cwd)
    try:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise ExternalToolFailure(args, None, str(e)) from e
    except subprocess.TimeoutExpired as e:
        raise ExternalToolFailure(args, None, f"timed out after {timeout}s") from e

    output = (completed.stdout or "") + (completed.stderr or "")
    if completed.returncode != 0:
        raise ExternalToolFailure(args, completed.returncode, output)
    return output


def npx(*args: str) -> list[str]:
    return [settings.npx_command, *args]
