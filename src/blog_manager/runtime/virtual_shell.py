"""Virtual shell: run commands sequentially inside one shell process.

blog-manager runtime module

This module provides:
- CommandRunner: spawns one interpreter process, feeds it an ordered list
  of commands through stdin and waits for it to exit
- OutputRelay: background thread forwarding one output stream line by line
- run_shell: one-shot wrapper used by the post/image/publish commands

Key design points:
- The interpreter is spawned at construction time, not in execute()
- All commands share one shell session (cwd, environment, variables)
- An ``exit`` terminator is always written last; without it the shell keeps
  waiting on stdin and execute() never returns
- The exit status is a diagnostic only; failing commands are not detected
- POSIX: start_new_session=True so cleanup can signal the whole group
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import sys
import threading
import time
from collections.abc import Callable, Iterable
from typing import IO, Any

from anyio import to_thread

from .errors import (
    ShellStateError,
    ShellTimeoutError,
    ShellWriteError,
    SpawnError,
)

__all__ = [
    "CommandRunner",
    "OutputRelay",
    "run_shell",
    "default_interpreter",
    "TERMINATOR",
]

logger = logging.getLogger(__name__)

IS_WINDOWS = sys.platform == "win32"

# Last command written to every session
TERMINATOR = "exit"
# Marker printed in front of each command before it is written
ECHO_PREFIX = "➜ "

DEFAULT_TERM_TIMEOUT = 2.0  # seconds to wait after SIGTERM
DEFAULT_KILL_TIMEOUT = 1.0  # seconds to wait after SIGKILL
DEFAULT_RELAY_JOIN_TIMEOUT = 2.0  # seconds to let a relay drain after exit

Sink = Callable[[str], None]

_print_lock = threading.Lock()


def _print_sink(line: str) -> None:
    """Write one line to the process-wide stdout."""
    with _print_lock:
        print(line, flush=True)


def default_interpreter() -> str:
    """Return the user's login shell, falling back to /bin/sh."""
    return os.environ.get("SHELL") or "/bin/sh"


class OutputRelay:
    """Forward lines from one subprocess stream to a sink.

    The relay runs on its own thread once started. ``shutdown()`` only
    sets a flag that is checked between reads, so a relay blocked on a
    read stops when the stream closes. At end of stream the relay closes
    its reader and finishes on its own.
    """

    def __init__(self, stream: IO[str], sink: Sink = _print_sink, name: str = "stdout") -> None:
        self.name = name
        self._stream = stream
        self._sink = sink
        self._running = False
        self._thread: threading.Thread | None = None

    @property
    def started(self) -> bool:
        return self._thread is not None

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            raise ShellStateError(f"{self.name} relay already started")
        self._running = True
        self._thread = threading.Thread(
            target=self.run,
            name=f"shell-{self.name}-relay",
            daemon=True,
        )
        self._thread.start()

    def run(self) -> None:
        try:
            while self._running:
                line = self._stream.readline()
                if not line:
                    break
                self._sink(line.rstrip("\r\n"))
        except (OSError, ValueError) as e:
            logger.debug(f"{self.name} relay stopped on read error: {e}")
        finally:
            self._running = False
            self._stream.close()

    def shutdown(self) -> None:
        self._running = False

    def close(self) -> None:
        """Close the stream of a relay that was never started."""
        if self.started:
            raise ShellStateError(f"{self.name} relay is running; use shutdown()")
        self._stream.close()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the relay thread; returns True once it has finished."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()


class CommandRunner:
    """Run an ordered list of commands inside one interpreter process.

    A runner is single-use: add commands, call ``execute()`` once, and the
    process is gone afterwards. Commands behave as if typed into one
    interactive session, so a ``cd`` affects every later command. A command
    that fails does not stop the sequence.

    In debug mode, a background job that keeps the shell's stdout/stderr
    open (e.g. ``(sleep 3; echo late) &``) outlives ``execute()``: its
    relay stays blocked past ``relay_join_timeout`` and keeps forwarding
    lines to ``sink`` after ``execute()`` returns, interleaving with
    whatever the caller prints next.

    Example:
        runner = CommandRunner(debug=True, interpreter="/bin/zsh")
        runner.add("cd content/posts")
        runner.add("git add .")
        runner.execute()

    Attributes:
        debug: Relay the shell's stdout/stderr through ``sink``
        interpreter: Path of the shell binary
    """

    def __init__(
        self,
        debug: bool = False,
        interpreter: str | None = None,
        *,
        echo: Sink | None = _print_sink,
        sink: Sink = _print_sink,
        term_timeout: float = DEFAULT_TERM_TIMEOUT,
        kill_timeout: float = DEFAULT_KILL_TIMEOUT,
        relay_join_timeout: float = DEFAULT_RELAY_JOIN_TIMEOUT,
    ) -> None:
        """Spawn the interpreter.

        Args:
            debug: Start output relays in execute()
            interpreter: Shell binary (default: ``default_interpreter()``)
            echo: Receives each command, prefixed, before it is written
                (None disables the trace)
            sink: Receives relayed output lines in debug mode
            term_timeout: Seconds to wait after SIGTERM during cleanup
            kill_timeout: Seconds to wait after SIGKILL during cleanup
            relay_join_timeout: Seconds to let each relay drain after exit

        Raises:
            SpawnError: If the interpreter cannot be started
        """
        self.debug = debug
        self.interpreter = interpreter or default_interpreter()
        self.term_timeout = term_timeout
        self.kill_timeout = kill_timeout
        self.relay_join_timeout = relay_join_timeout
        self._echo = echo
        self._commands: list[str] = []
        self._executed = False

        # Output pipes must be drained; without relays nothing reads them
        output = subprocess.PIPE if debug else subprocess.DEVNULL
        try:
            self._process = subprocess.Popen(
                [self.interpreter],
                stdin=subprocess.PIPE,
                stdout=output,
                stderr=output,
                text=True,
                encoding="utf-8",
                errors="replace",
                **self._build_popen_kwargs(),
            )
        except OSError as e:
            raise SpawnError(self.interpreter, e) from e

        logger.debug(f"Started shell pid={self._process.pid} interpreter={self.interpreter}")

        self._relays: list[OutputRelay] = []
        if debug:
            self._relays = [
                OutputRelay(self._process.stdout, sink, "stdout"),
                OutputRelay(self._process.stderr, sink, "stderr"),
            ]

    @property
    def commands(self) -> tuple[str, ...]:
        return tuple(self._commands)

    @property
    def executed(self) -> bool:
        return self._executed

    @property
    def process(self) -> subprocess.Popen:
        return self._process

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        """Raw exit status of the shell, for diagnostics only."""
        return self._process.returncode

    @property
    def is_alive(self) -> bool:
        return self._process.poll() is None

    def add(self, command: str) -> CommandRunner:
        """Append a command; it is passed to the shell verbatim."""
        if self._executed:
            raise ShellStateError("cannot add commands after execute()")
        self._commands.append(command)
        return self

    def extend(self, commands: Iterable[str]) -> CommandRunner:
        for command in commands:
            self.add(command)
        return self

    def execute(self, timeout: float | None = None) -> int | None:
        """Write every command and the terminator, then wait for the shell.

        Cleanup always runs, also when writing or waiting fails.

        Args:
            timeout: Optional deadline in seconds for the whole call,
                writing included (default: none)

        Returns:
            The shell's exit status (diagnostic, not a success flag)

        Raises:
            ShellStateError: If called more than once
            ShellWriteError: If a command cannot be written
            ShellTimeoutError: If the deadline passes
        """
        if self._executed:
            raise ShellStateError("execute() can only be called once per CommandRunner")
        self._executed = True

        deadline = None if timeout is None else time.monotonic() + timeout
        expired = threading.Event()
        watchdog = self._start_watchdog(timeout, expired)
        try:
            for relay in self._relays:
                relay.start()

            try:
                for command in self._commands:
                    self._write(command)
                self._write(TERMINATOR, echo=False)
            except ShellWriteError as e:
                # The watchdog killed a shell that stopped reading stdin
                if expired.is_set():
                    raise ShellTimeoutError(timeout) from e
                raise
            self._close_stdin()

            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            self._wait(remaining, timeout)
            if expired.is_set():
                raise ShellTimeoutError(timeout)
            logger.debug(
                f"Shell exited pid={self._process.pid} "
                f"returncode={self._process.returncode}"
            )
        finally:
            if watchdog is not None:
                watchdog.cancel()
            self._release()

        return self._process.returncode

    async def aexecute(self, timeout: float | None = None) -> int | None:
        """Run ``execute()`` on a worker thread for event-loop callers."""
        return await to_thread.run_sync(self.execute, timeout)

    def close(self) -> None:
        """Release the shell without running anything.

        No-op once ``execute()`` has been called.
        """
        if self._executed:
            return
        self._executed = True
        self._release()

    def __enter__(self) -> CommandRunner:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _build_popen_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if IS_WINDOWS:
            kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP
        else:
            kwargs["start_new_session"] = True
        return kwargs

    def _write(self, command: str, echo: bool = True) -> None:
        if echo and self._echo is not None:
            self._echo(f"{ECHO_PREFIX}{command}")
        logger.debug(f"Writing to shell pid={self._process.pid}: {command}")
        try:
            self._process.stdin.write(command + "\n")
            self._process.stdin.flush()
        except OSError as e:
            raise ShellWriteError(command, e) from e

    def _start_watchdog(
        self,
        timeout: float | None,
        expired: threading.Event,
    ) -> threading.Timer | None:
        """Arm a timer that terminates the shell once the deadline passes.

        Covers the write phase too: a write blocked on a full stdin pipe
        fails with a broken pipe as soon as the shell is gone.
        """
        if timeout is None:
            return None
        watchdog = threading.Timer(timeout, self._expire, args=(expired,))
        watchdog.daemon = True
        watchdog.start()
        return watchdog

    def _expire(self, expired: threading.Event) -> None:
        if self._process.poll() is not None:
            return
        expired.set()
        logger.warning(f"Shell deadline passed pid={self._process.pid}, terminating")
        self._terminate_process()

    def _wait(self, remaining: float | None, timeout: float | None) -> None:
        try:
            self._process.wait(timeout=remaining)
        except subprocess.TimeoutExpired as e:
            raise ShellTimeoutError(timeout) from e

    def _close_stdin(self) -> None:
        stdin = self._process.stdin
        if stdin is None or stdin.closed:
            return
        try:
            stdin.close()
        except OSError as e:
            # Data left in the buffer after a broken pipe
            logger.debug(f"Error closing shell stdin: {e}")

    def _release(self) -> None:
        """Terminate the shell if needed, stop relays and close streams."""
        if self._process.poll() is None:
            self._terminate_process()
        self._stop_relays()
        self._close_stdin()

    def _stop_relays(self) -> None:
        for relay in self._relays:
            if not relay.started:
                relay.close()
                continue
            if relay.join(self.relay_join_timeout):
                continue
            # A background job still holds the stream open
            relay.shutdown()
            logger.warning(
                f"{relay.name} relay still blocked after shell exit "
                f"pid={self._process.pid}"
            )

    def _terminate_process(self) -> None:
        """Terminate the shell gracefully, then forcefully if needed.

        1. SIGTERM to the process group (terminate() on Windows)
        2. Wait up to term_timeout
        3. SIGKILL to the process group (kill() on Windows)
        4. Wait up to kill_timeout
        """
        process = self._process
        pid = process.pid
        logger.debug(f"Terminating shell pid={pid}")

        try:
            self._signal_group(terminate=True)
            try:
                process.wait(timeout=self.term_timeout)
                logger.debug(f"Shell terminated pid={pid} returncode={process.returncode}")
                return
            except subprocess.TimeoutExpired:
                pass

            logger.debug(f"Force killing shell pid={pid}")
            self._signal_group(terminate=False)
            try:
                process.wait(timeout=self.kill_timeout)
            except subprocess.TimeoutExpired:
                logger.warning(f"Shell did not exit after kill pid={pid}")
        except ProcessLookupError:
            logger.debug(f"Shell already exited pid={pid}")

    def _signal_group(self, terminate: bool) -> None:
        process = self._process
        if IS_WINDOWS:
            if terminate:
                process.terminate()
            else:
                process.kill()
            return

        sig = signal.SIGTERM if terminate else signal.SIGKILL
        try:
            # pgid == pid because of start_new_session
            os.killpg(os.getpgid(process.pid), sig)
        except ProcessLookupError:
            pass
        except OSError as e:
            logger.debug(f"killpg failed, falling back to send_signal: {e}")
            process.send_signal(sig)


def run_shell(
    commands: Iterable[str],
    *,
    debug: bool = True,
    interpreter: str | None = None,
    timeout: float | None = None,
    echo: Sink | None = _print_sink,
    sink: Sink = _print_sink,
) -> int | None:
    """Run commands in a fresh shell session and wait for it to exit.

    Args:
        commands: Commands in execution order
        debug: Relay shell output (default: True)
        interpreter: Shell binary
        timeout: Optional deadline for the whole session
        echo: Command trace sink
        sink: Relayed output sink

    Returns:
        The shell's exit status (diagnostic only)
    """
    runner = CommandRunner(debug=debug, interpreter=interpreter, echo=echo, sink=sink)
    runner.extend(commands)
    return runner.execute(timeout=timeout)
