import asyncio
import logging

logger = logging.getLogger(__name__)


class ShellCommandError(RuntimeError):
    def __init__(self, body: str, returncode: int, stdout: str, stderr: str) -> None:
        super().__init__(f"Failed to execute {body!r} (exit {returncode}). Stdout: {stdout!r}. Stderr: {stderr!r}.")
        self.body = body
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


async def exec_shell_script(body: str) -> str:
    """Run ``body`` with ``bash -c`` and return its stdout."""
    process = await asyncio.create_subprocess_exec(
        "bash",
        "-c",
        body,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout_bytes, stderr_bytes = await process.communicate()
    stdout = stdout_bytes.decode("utf-8", errors="replace")
    stderr = stderr_bytes.decode("utf-8", errors="replace")
    if process.returncode != 0:
        raise ShellCommandError(body, process.returncode or 0, stdout, stderr)
    logger.debug("Executed %r (%d bytes of output)", body, len(stdout))
    return stdout
