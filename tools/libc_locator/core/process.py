import logging
import subprocess
import threading
from dataclasses import dataclass

from .errors import ErrorKind, FindError

logger = logging.getLogger(__name__)

MAX_OUTPUT_BYTES = 1024 * 1024
CHUNK_SIZE = 64 * 1024


@dataclass
class ExecResult:
    stdout: str
    stderr: str


class OutputBudget:
    """Byte allowance shared by all captured streams of one process."""

    def __init__(self, limit):
        self.remaining = limit
        self.truncated = False
        self._lock = threading.Lock()

    def take(self, size):
        with self._lock:
            granted = min(size, self.remaining)
            self.remaining -= granted
            if granted < size:
                self.truncated = True
            return granted


def _drain(pipe, budget, chunks):
    # Keeps reading past the budget so the child never blocks on a full pipe
    try:
        while True:
            data = pipe.read1(CHUNK_SIZE)
            if not data:
                break
            keep = budget.take(len(data))
            if keep:
                chunks.append(data[:keep])
    finally:
        pipe.close()


def run_command(argv, max_output_bytes=MAX_OUTPUT_BYTES):
    """
    Runs argv without a shell and returns its captured output.

    Raises FindError with UNABLE_TO_SPAWN_C_COMPILER when the process cannot
    be started, C_COMPILER_EXIT_CODE on a non-zero exit and C_COMPILER_CRASHED
    when it was terminated by a signal. At most `max_output_bytes` of stdout
    and stderr combined are kept; the rest is read and dropped.
    """
    cmd_str = " ".join(argv)
    logger.debug("Running: %s", cmd_str)
    try:
        proc = subprocess.Popen(argv, stdin=subprocess.DEVNULL, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    except OSError as e:
        raise FindError(ErrorKind.UNABLE_TO_SPAWN_C_COMPILER, f"{argv[0]}: {e}") from e

    budget = OutputBudget(max_output_bytes)
    stdout_chunks = []
    stderr_chunks = []
    readers = [
        threading.Thread(target=_drain, args=(proc.stdout, budget, stdout_chunks), daemon=True),
        threading.Thread(target=_drain, args=(proc.stderr, budget, stderr_chunks), daemon=True),
    ]
    for reader in readers:
        reader.start()
    for reader in readers:
        reader.join()
    returncode = proc.wait()

    if budget.truncated:
        logger.debug("Output of '%s' truncated to %d bytes", cmd_str, max_output_bytes)

    if returncode < 0:
        raise FindError(ErrorKind.C_COMPILER_CRASHED, f"'{cmd_str}' terminated by signal {-returncode}")
    if returncode != 0:
        raise FindError(ErrorKind.C_COMPILER_EXIT_CODE, f"'{cmd_str}' exited with code {returncode}")

    return ExecResult(
        stdout=b"".join(stdout_chunks).decode("utf-8", errors="replace"),
        stderr=b"".join(stderr_chunks).decode("utf-8", errors="replace"),
    )
