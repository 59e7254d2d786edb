"""Virtual shell 异常类。

每个异常都标明失败所处的阶段（spawn / write / wait / state），
便于排查出问题的 shell 流水线。
"""

from __future__ import annotations

__all__ = [
    "ShellError",
    "SpawnError",
    "ShellWriteError",
    "ShellWaitError",
    "ShellTimeoutError",
    "ShellStateError",
]


class ShellError(Exception):
    """Virtual shell 基础异常。

    Attributes:
        phase: 失败阶段
        message: 错误消息
    """

    phase = "unknown"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"[{self.phase}] {message}")


class SpawnError(ShellError, OSError):
    """解释器进程无法启动。

    Attributes:
        interpreter: 解释器路径
        cause: 底层 OS 错误
    """

    phase = "spawn"

    def __init__(self, interpreter: str, cause: OSError) -> None:
        self.interpreter = interpreter
        self.cause = cause
        super().__init__(f"cannot start interpreter {interpreter!r}: {cause}")


class ShellWriteError(ShellError, OSError):
    """向 shell stdin 写入命令失败（如 broken pipe）。

    Attributes:
        command: 写入失败的命令
        cause: 底层 OS 错误
    """

    phase = "write"

    def __init__(self, command: str, cause: OSError) -> None:
        self.command = command
        self.cause = cause
        super().__init__(f"failed to write {command!r}: {cause}")


class ShellWaitError(ShellError):
    """等待 shell 退出时失败。"""

    phase = "wait"


class ShellTimeoutError(ShellWaitError):
    """shell 未在超时时间内退出。

    Attributes:
        timeout: 超时时间（秒）
    """

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"shell did not exit within {timeout}s")


class ShellStateError(ShellError, RuntimeError):
    """CommandRunner 使用方式错误（重复 execute、execute 后 add）。"""

    phase = "state"
