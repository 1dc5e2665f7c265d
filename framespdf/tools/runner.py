from __future__ import annotations

import subprocess
from typing import Optional, Sequence

from framespdf.core.errors import ToolError, ToolNotFoundError, ToolTimeoutError
from framespdf.core.logging import get_logger

logger = get_logger(component="media_toolkit")


def _decode(stream: str | bytes | None) -> str:
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace")
    return stream


def run_tool(command: Sequence[str], *, timeout: Optional[float] = None) -> subprocess.CompletedProcess[str]:
    """Run one external command to completion and return its captured output.

    On timeout the child is killed before ``ToolTimeoutError`` is raised. A
    non-zero exit raises ``ToolError`` carrying the captured stderr. Output is
    decoded as UTF-8 with undecodable bytes replaced. Nothing is retried.
    """
    argv = [str(part) for part in command]
    tool = argv[0]
    logger.info("tool_run", command=argv, timeout_s=timeout)
    try:
        return subprocess.run(
            argv,
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        logger.error("tool_missing", tool=tool)
        raise ToolNotFoundError(tool) from exc
    except subprocess.TimeoutExpired as exc:
        stderr = _decode(exc.stderr)
        logger.error("tool_timeout", tool=tool, timeout_s=timeout, stderr=stderr)
        raise ToolTimeoutError(tool, exc.timeout, stderr=stderr) from exc
    except subprocess.CalledProcessError as exc:
        stderr = _decode(exc.stderr).strip()
        logger.error("tool_failed", tool=tool, returncode=exc.returncode, stderr=stderr)
        message = f"{tool} exited with status {exc.returncode}"
        if stderr:
            message = f"{message}: {stderr}"
        raise ToolError(tool, message, returncode=exc.returncode, stderr=stderr) from exc
    except OSError as exc:
        logger.error("tool_spawn_failed", tool=tool, error=str(exc))
        raise ToolError(tool, f"{tool} could not be started: {exc}") from exc


__all__ = ["run_tool"]
