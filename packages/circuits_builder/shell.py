# packages/circuits_builder/shell.py
import os
import shutil
import subprocess
from pathlib import Path
from typing import Mapping, Optional, Sequence

from .errors import ToolFailure
from .log import get_logger

logger = get_logger("shell")


def which(tool: str) -> Optional[str]:
    return shutil.which(tool)


def run(
    cmd: Sequence[str],
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    input: Optional[str] = None,
    check: bool = True,
    capture: bool = False,
) -> subprocess.CompletedProcess:
    """Run an external command and block until it finishes.

    ``env`` is merged over the current environment and ``capture`` keeps the
    output off the terminal. A non-zero exit raises ToolFailure unless
    ``check`` is false.
    """
    cmd = [str(c) for c in cmd]
    logger.debug("$ %s (cwd=%s)", " ".join(cmd), cwd or os.getcwd())
    full_env = None
    if env:
        full_env = dict(os.environ)
        full_env.update(env)
    try:
        return subprocess.run(
            cmd, cwd=cwd, env=full_env, input=input, text=True, check=check, capture_output=capture
        )
    except subprocess.CalledProcessError as exc:
        raise ToolFailure(cmd, exc.returncode) from exc
    except FileNotFoundError as exc:
        raise ToolFailure(cmd, detail=f"{cmd[0]} not found") from exc
    except OSError as exc:
        raise ToolFailure(cmd, detail=str(exc)) from exc


def run_shell(script: str, cwd: Optional[Path] = None) -> subprocess.CompletedProcess:
    """Run a shell pipeline (installer one-liners that pipe curl into sh)."""
    logger.debug("$ sh -c %s", script)
    try:
        return subprocess.run(["sh", "-c", script], cwd=cwd, text=True, check=True)
    except subprocess.CalledProcessError as exc:
        raise ToolFailure(["sh", "-c", script], exc.returncode) from exc
    except OSError as exc:
        raise ToolFailure(["sh", "-c", script], detail=str(exc)) from exc
