"""
PDF engine: WeasyPrint running in a dedicated child interpreter.

One process per document, never reused. The parent owns the lifecycle:
launch (bounded by a startup timeout), render (bounded by a render timeout),
close (kills the process if it is still alive). close() is idempotent.
"""

import asyncio
import os
import sys
from typing import Protocol

import structlog

from stoneledger.core.exceptions import RenderEngineError, RenderTimeoutError

logger = structlog.get_logger()

WORKER_MODULE = "stoneledger.core.pdf.worker"
READY_MARKER = b"READY"

# How much stderr to keep in error messages
_STDERR_TAIL = 2000


class RenderEngine(Protocol):
    """Lifecycle of one rendering engine instance."""

    async def launch(self) -> None: ...

    async def render(self, html: str) -> bytes: ...

    async def close(self) -> None: ...


def _tail(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")[-_STDERR_TAIL:].strip()


class WeasyPrintProcessEngine:
    """Runs `python -m stoneledger.core.pdf.worker` and talks to it over pipes."""

    def __init__(
        self,
        *,
        page_size: str = "A4",
        margin: str = "10mm",
        startup_timeout: float = 30.0,
        render_timeout: float = 90.0,
        interpreter_flags: list[str] | None = None,
        python_executable: str | None = None,
    ) -> None:
        self.page_size = page_size
        self.margin = margin
        self.startup_timeout = startup_timeout
        self.render_timeout = render_timeout
        self.interpreter_flags = list(interpreter_flags or [])
        self.python_executable = python_executable or sys.executable
        self._process: asyncio.subprocess.Process | None = None

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process else None

    def _command(self) -> list[str]:
        return [
            self.python_executable,
            *self.interpreter_flags,
            "-m",
            WORKER_MODULE,
            "--page-size",
            self.page_size,
            "--margin",
            self.margin,
        ]

    def _environment(self) -> dict[str, str]:
        env = dict(os.environ)
        env["PYTHONIOENCODING"] = "utf-8"
        env["PYTHONUNBUFFERED"] = "1"
        return env

    async def launch(self) -> None:
        if self._process is not None:
            raise RenderEngineError("PDF engine already launched")
        try:
            self._process = await asyncio.create_subprocess_exec(
                *self._command(),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self._environment(),
            )
        except OSError as e:
            raise RenderEngineError(f"Could not start PDF engine: {e}") from e

        logger.debug("pdf_engine_spawned", pid=self._process.pid)
        try:
            line = await asyncio.wait_for(self._process.stdout.readline(), timeout=self.startup_timeout)
        except asyncio.TimeoutError as e:
            raise RenderEngineError(
                f"PDF engine did not start within {self.startup_timeout:g}s"
            ) from e

        if line.strip() != READY_MARKER:
            detail = await self._stderr_after_exit()
            raise RenderEngineError(f"PDF engine failed to start: {detail or line!r}")

    async def render(self, html: str) -> bytes:
        if self._process is None:
            raise RenderEngineError("PDF engine is not running")
        try:
            stdout, stderr = await asyncio.wait_for(
                self._process.communicate(html.encode("utf-8")),
                timeout=self.render_timeout,
            )
        except asyncio.TimeoutError as e:
            raise RenderTimeoutError(self.render_timeout) from e
        except (BrokenPipeError, ConnectionResetError) as e:
            raise RenderEngineError(f"PDF engine closed its input: {e}") from e

        if self._process.returncode != 0:
            raise RenderEngineError(
                f"PDF engine exited with code {self._process.returncode}: {_tail(stderr)}"
            )
        return stdout

    async def close(self) -> None:
        process, self._process = self._process, None
        if process is None:
            return
        if process.returncode is None:
            process.kill()
        await process.wait()
        logger.debug("pdf_engine_reaped", pid=process.pid, returncode=process.returncode)

    async def _stderr_after_exit(self) -> str:
        """Stderr of a worker that failed before becoming ready, if it exits promptly."""
        process = self._process
        try:
            await asyncio.wait_for(process.wait(), timeout=5)
        except asyncio.TimeoutError:
            # Still alive and silent; close() will kill it.
            return ""
        return _tail(await process.stderr.read())
