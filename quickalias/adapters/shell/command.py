"""
Shell command adapter — run one command line under a hard deadline.

Used for everything that invokes an AI CLI: the headless test, model
discovery, and commit-message generation.  The child process is a
scoped resource (``SupervisedProcess``): the deadline is enforced by
``communicate(timeout=...)`` *and* by a cancelling timer thread, and
the child receives a terminate signal on every exit path where it is
still alive.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import threading
import time
from typing import IO, Any

from quickalias.adapters.base import Adapter, ExecutionContext
from quickalias.core.models.action import Receipt

logger = logging.getLogger(__name__)

# Seconds to wait for a terminated child to release its pipes.
_DRAIN_TIMEOUT = 5


class SupervisedProcess:
    """A child process that cannot outlive its deadline.

    Usage::

        with SupervisedProcess("claude --print 'Say OK'", timeout=60) as child:
            stdout, stderr = child.communicate()
        if child.timed_out:
            ...
    """

    def __init__(
        self,
        command: str | list[str],
        *,
        timeout: float,
        shell: bool = True,
        executable: str | None = None,
        env: dict[str, str] | None = None,
        cwd: str | None = None,
        stdin: int | IO[Any] | None = None,
        input_text: str | None = None,
    ):
        self.command = command
        self.timeout = timeout
        self.timed_out = False
        self.returncode: int | None = None
        self._shell = shell
        self._executable = executable
        self._env = env
        self._cwd = cwd
        self._stdin = subprocess.PIPE if input_text is not None else stdin
        self._input = input_text
        self._proc: subprocess.Popen[str] | None = None
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()
        self._terminated = False

    def __enter__(self) -> SupervisedProcess:
        self._proc = subprocess.Popen(
            self.command,
            shell=self._shell,
            executable=self._executable if self._shell else None,
            stdin=self._stdin,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            env=self._env,
            cwd=self._cwd,
        )
        self._timer = threading.Timer(self.timeout, self._on_deadline)
        self._timer.daemon = True
        self._timer.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self.terminate()
        if self._proc is not None and self._proc.returncode is None:
            try:
                self._proc.wait(timeout=_DRAIN_TIMEOUT)
            except subprocess.TimeoutExpired:
                logger.warning("Child %s ignored SIGTERM", self._proc.pid)

    def communicate(self) -> tuple[str, str]:
        """Wait for the child and return (stdout, stderr)."""
        if self._proc is None:
            raise RuntimeError("communicate() called outside of 'with'")
        try:
            stdout, stderr = self._proc.communicate(self._input, timeout=self.timeout)
        except subprocess.TimeoutExpired:
            self.timed_out = True
            self.terminate()
            try:
                stdout, stderr = self._proc.communicate(timeout=_DRAIN_TIMEOUT)
            except subprocess.TimeoutExpired:
                stdout, stderr = "", ""
        self.returncode = self._proc.returncode
        return stdout or "", stderr or ""

    def terminate(self) -> None:
        """Send SIGTERM once, only if the child is still running."""
        with self._lock:
            if self._terminated or self._proc is None or self._proc.poll() is not None:
                return
            self._terminated = True
        logger.debug("Terminating child %s", self._proc.pid)
        try:
            self._proc.terminate()
        except ProcessLookupError:
            pass

    def _on_deadline(self) -> None:
        if self._proc is not None and self._proc.poll() is None:
            self.timed_out = True
            self.terminate()


class ShellCommandAdapter(Adapter):
    """Execute a command line and capture its output.

    Action params:
        command (str): The command to execute.
        shell (bool): Run through a shell (default: True).
        executable (str): Shell to use (default: the user's $SHELL, else /bin/sh).
        timeout (float): Hard deadline in seconds (default: 60).
        cwd (str): Working directory (default: context.working_dir).
        env (dict): Extra environment variables, merged over os.environ.
        inherit_stdin (bool): Let the child read the terminal (default: False).
        input (str): Text piped to the child's stdin.
    """

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which("sh") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        command = context.params.get("command", "")
        if not command:
            return False, "Missing required param: 'command'"
        timeout = context.params.get("timeout", 60)
        if not isinstance(timeout, (int, float)) or timeout <= 0:
            return False, f"Invalid timeout: {timeout!r}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.params
        command = params["command"]
        timeout = params.get("timeout", 60)
        use_shell = params.get("shell", True)

        env = os.environ.copy()
        env.update({k: str(v) for k, v in params.get("env", {}).items()})

        logger.debug("Executing: %s (cwd=%s, timeout=%ss)", command, context.working_dir, timeout)
        start = time.monotonic()

        try:
            with SupervisedProcess(
                command if use_shell else command.split(),
                timeout=timeout,
                shell=use_shell,
                executable=params.get("executable") or _default_shell(),
                env=env,
                cwd=context.working_dir,
                stdin=None if params.get("inherit_stdin") else subprocess.DEVNULL,
                input_text=params.get("input"),
            ) as child:
                stdout, stderr = child.communicate()
        except FileNotFoundError as e:
            return self._failure(
                context,
                f"Command not found: {e.filename or command}",
                metadata={"command": command},
            )
        except Exception as e:
            logger.exception("Shell adapter error: %s", command)
            return self._failure(
                context,
                f"Command execution error: {e}",
                metadata={"command": command},
            )

        captured = {
            "output": stdout,
            "stderr": stderr,
            "duration_ms": int((time.monotonic() - start) * 1000),
        }

        if child.timed_out:
            return self._failure(
                context,
                f"Command timed out after {_format_seconds(timeout)} seconds",
                timed_out=True,
                metadata={"command": command, "timeout": timeout},
                **captured,
            )

        if child.returncode == 0:
            return self._success(context, exit_code=0, metadata={"command": command}, **captured)

        return self._failure(
            context,
            stderr.strip() or f"Command exited with code {child.returncode}",
            exit_code=child.returncode,
            metadata={"command": command},
            **captured,
        )


def _default_shell() -> str:
    """The user's login shell if it exists, else /bin/sh."""
    shell = os.environ.get("SHELL", "")
    if shell and os.path.isfile(shell):
        return shell
    return "/bin/sh"


def _format_seconds(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)
