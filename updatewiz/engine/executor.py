"""
Subprocess executor. Launches the maintenance script and streams its output.

Both pipes are read concurrently and merged into a single ordered stream of
``OutputChunk``. Every chunk is also kept in ``ProcessHandle.transcript`` so a
failed run still has its full output.
"""

import asyncio
import logging
import os
from pathlib import Path

from updatewiz.engine.errors import NonZeroExitError, SpawnError
from updatewiz.engine.models import OutputChunk

logger = logging.getLogger(__name__)

DEFAULT_READ_LIMIT = 1024 * 1024
_EOF = object()


def build_environment(env_overrides=None) -> dict:
    env = os.environ.copy()
    if env_overrides:
        env.update({key: str(value) for key, value in env_overrides.items()})
    return env


class ProcessHandle:
    """A running maintenance process. Iterate it for chunks, then ``wait()``."""

    def __init__(self, process: asyncio.subprocess.Process, command):
        self.process = process
        self.command = command
        self.transcript = []
        self._queue = asyncio.Queue()
        self._seq = 0
        self._readers = [
            asyncio.ensure_future(self._pump(process.stdout, "stdout")),
            asyncio.ensure_future(self._pump(process.stderr, "stderr")),
        ]

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def returncode(self):
        return self.process.returncode

    async def _pump(self, stream, name):
        try:
            while True:
                try:
                    data = await stream.readuntil(b"\n")
                except asyncio.IncompleteReadError as e:
                    data = e.partial
                except asyncio.LimitOverrunError as e:
                    data = await stream.read(e.consumed)
                if not data:
                    break
                self._push(data.decode("utf-8", errors="replace"), name)
        finally:
            self._queue.put_nowait(_EOF)

    def _push(self, text, stream):
        chunk = OutputChunk(seq=self._seq, text=text, stream=stream)
        self._seq += 1
        self.transcript.append(chunk)
        self._queue.put_nowait(chunk)

    def __aiter__(self):
        return self.chunks()

    async def chunks(self):
        open_streams = len(self._readers)
        while open_streams:
            item = await self._queue.get()
            if item is _EOF:
                open_streams -= 1
                continue
            yield item

    async def wait(self) -> int:
        """Wait for exit. Returns 0 or raises ``NonZeroExitError``."""
        await asyncio.gather(*self._readers)
        code = await self.process.wait()
        logger.info("Process %s exited with code %s", self.pid, code)
        if code != 0:
            raise NonZeroExitError(code, self.transcript)
        return code

    def terminate(self) -> None:
        if self.process.returncode is None:
            logger.info("Terminating process %s", self.pid)
            try:
                self.process.terminate()
            except ProcessLookupError:
                pass


class SubprocessExecutor:
    def __init__(self, read_limit: int = DEFAULT_READ_LIMIT):
        self.read_limit = read_limit

    async def execute(self, command, env=None) -> ProcessHandle:
        """
        Start ``command`` (an executable path, or an argv list) with the
        inherited environment plus ``env``. No positional arguments are added.
        Raises ``SpawnError`` if the process cannot be started.
        """
        if isinstance(command, (str, Path)):
            argv = [str(command)]
        else:
            argv = [str(arg) for arg in command]
        logger.debug("Executing: %s (overrides=%s)", argv, sorted(env or {}))
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=build_environment(env),
                limit=self.read_limit,
            )
        except (OSError, ValueError) as e:
            logger.error("Failed to start %s: %s", argv[0], e)
            raise SpawnError(argv[0], str(e)) from e
        logger.info("Started %s (pid %s)", argv[0], process.pid)
        return ProcessHandle(process, argv)
