"""Short-lived introspection probes against candidate interpreters.

SECURITY NOTE: probing launches the candidate file with a ``-c`` script.
Any executable on PATH whose name matches an interpreter mask gets run,
so a file that is not a trusted Python runtime executes with the caller's
privileges. Integrators scanning untrusted directories should be aware
of this.
"""

from __future__ import annotations

import logging
import os
import re
import signal
import subprocess
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from semver import Version

from .specs import SEARCH_PATH_SCRIPT, VERSION_SCRIPT

logger = logging.getLogger(__name__)

DEFAULT_VERSION_TIMEOUT_MS = 500
DEFAULT_LIBRARY_TIMEOUT_MS = 5000

_VERSION_LINE = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")
_REAP_TIMEOUT_S = 1.0


def _session_options() -> Dict[str, Any]:
    """Start the candidate in its own process group so helpers die with it."""
    if sys.platform == "win32":
        return {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
    return {"start_new_session": True}


def _terminate(process: subprocess.Popen) -> None:
    """Kill the candidate and anything it spawned, then reap it."""
    if sys.platform != "win32":
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except OSError as e:
            logger.debug("Cannot kill process group of %s: %s", process.args[0], e)
    process.kill()
    try:
        process.communicate(timeout=_REAP_TIMEOUT_S)
    except subprocess.TimeoutExpired:
        # A grandchild outside the group still holds the pipe open.
        logger.debug("Output of %s left open after kill", process.args[0])


def run_probe(
    interpreter: Union[str, Path],
    script: str,
    timeout_ms: int,
) -> Optional[str]:
    """Run ``interpreter -c script`` and return its stdout.

    Args:
        interpreter: Candidate interpreter binary
        script: Python source passed through ``-c``
        timeout_ms: Upper bound on the wait before the process is killed

    Returns:
        Captured stdout, or None if the candidate could not be launched,
        timed out, or exited with a non-zero status
    """
    command = [str(interpreter), "-c", script]
    try:
        process = subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            **_session_options(),
        )
    except (OSError, ValueError) as e:
        logger.debug("Cannot launch %s: %s", interpreter, e)
        return None

    with process:
        try:
            stdout, _ = process.communicate(timeout=timeout_ms / 1000)
        except subprocess.TimeoutExpired:
            logger.debug("Probe of %s timed out after %d ms", interpreter, timeout_ms)
            _terminate(process)
            return None
        except KeyboardInterrupt:
            _terminate(process)
            raise

    if process.returncode != 0:
        logger.debug("Probe of %s exited with %s", interpreter, process.returncode)
        return None

    return stdout


def parse_version_output(output: Optional[str]) -> Optional[Version]:
    """Parse the single ``major.minor.patch`` line a version probe prints."""
    if not output:
        return None
    lines = output.strip().splitlines()
    if len(lines) != 1:
        return None
    match = _VERSION_LINE.match(lines[0].strip())
    if not match:
        return None
    major, minor, patch = (int(group) for group in match.groups())
    return Version(major, minor, patch)


def parse_path_lines(output: Optional[str]) -> List[Path]:
    """Absolute paths from line-oriented probe output, in order."""
    if not output:
        return []
    paths = []
    for line in output.splitlines():
        line = line.strip()
        if line and Path(line).is_absolute():
            paths.append(Path(line))
    return paths


class ProcessProbe:
    """Probes with the configured timeouts.

    The version probe is the light one; search-path and library probes
    import more of the standard library and get the longer timeout.
    """

    def __init__(
        self,
        version_timeout_ms: int = DEFAULT_VERSION_TIMEOUT_MS,
        library_timeout_ms: int = DEFAULT_LIBRARY_TIMEOUT_MS,
    ):
        self.version_timeout_ms = version_timeout_ms
        self.library_timeout_ms = library_timeout_ms

    def version(self, interpreter: Path) -> Optional[Version]:
        output = run_probe(interpreter, VERSION_SCRIPT, self.version_timeout_ms)
        return parse_version_output(output)

    def search_path(self, interpreter: Path) -> List[Path]:
        output = run_probe(interpreter, SEARCH_PATH_SCRIPT, self.library_timeout_ms)
        return parse_path_lines(output)

    def library_candidates(self, interpreter: Path, script: str) -> Sequence[Path]:
        output = run_probe(interpreter, script, self.library_timeout_ms)
        return parse_path_lines(output)
