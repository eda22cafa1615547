"""Fire-and-forget launching of registered scripts."""

import logging
import subprocess
import sys
from collections.abc import Callable
from pathlib import Path

from sidegauge.errors import LaunchError
from sidegauge.models import LaunchRequest, LaunchResult

logger = logging.getLogger(__name__)

INTERPRETER_FLAGS = ("-NoProfile", "-ExecutionPolicy", "Bypass", "-File")

Spawner = Callable[[LaunchRequest], int]


def popen_spawn(request: LaunchRequest) -> int:
    """
    Start the request as a detached process and return its pid.

    The child gets its own console (Windows) or session (POSIX) and no
    inherited stdio. It is never waited on.

    Raises:
        LaunchError: The interpreter could not be started.
    """
    kwargs: dict = {
        "cwd": str(request.working_directory),
        "stdin": subprocess.DEVNULL,
        "close_fds": True,
    }
    if sys.platform == "win32":
        kwargs["creationflags"] = subprocess.CREATE_NEW_CONSOLE
    else:
        kwargs["stdout"] = subprocess.DEVNULL
        kwargs["stderr"] = subprocess.DEVNULL
        kwargs["start_new_session"] = True

    try:
        process = subprocess.Popen(request.argv, **kwargs)
    except OSError as exc:
        raise LaunchError(exc.strerror or str(exc)) from exc
    return process.pid


class ScriptLauncher:
    """Resolves registered filenames to scripts and starts them."""

    def __init__(
        self,
        scripts_dir: Path,
        interpreter: str,
        spawn: Spawner | None = None,
    ) -> None:
        """
        Initialize the ScriptLauncher.

        Args:
            scripts_dir: Directory the registered filenames are relative to.
            interpreter: Shell binary that runs the scripts.
            spawn: Process-spawning callable. Defaults to ``popen_spawn``.
        """
        self._scripts_dir = Path(scripts_dir)
        self._interpreter = interpreter
        self._spawn = spawn or popen_spawn

    @property
    def scripts_dir(self) -> Path:
        """Directory the registered filenames are relative to."""
        return self._scripts_dir

    def build_request(self, filename: str) -> LaunchRequest:
        """Build the launch request for a registered filename."""
        script_path = self._scripts_dir / filename
        return LaunchRequest(
            executable=self._interpreter,
            arguments=(*INTERPRETER_FLAGS, str(script_path)),
            script_path=script_path,
            working_directory=self._scripts_dir,
        )

    def launch(self, filename: str) -> LaunchResult:
        """Start the script for ``filename``. Never raises."""
        request = self.build_request(filename)

        if not request.script_path.is_file():
            logger.warning("Script not found: %s", request.script_path)
            return LaunchResult(request=request, ok=False, error=f"script not found: {request.script_path}")

        try:
            pid = self._spawn(request)
        except (LaunchError, OSError) as exc:
            logger.warning("Failed to launch %s: %s", request.script_path, exc)
            return LaunchResult(request=request, ok=False, error=str(exc))

        logger.info("Launched %s (pid %s)", request.script_path, pid)
        return LaunchResult(request=request, ok=True, pid=pid)
