"""发布博客。

依次在三个独立的 shell 会话中执行：
1. posts: 提交并推送文章仓库
2. website: 清空 public/，重新执行 hugo 构建，提交并推送网站仓库
3. root: 提交并推送博客根仓库

每个会话失败的命令不会中断后续命令，也不会被检测到；
是否发布成功需要查看输出或仓库状态。
"""

from __future__ import annotations

import logging
import shlex
from collections.abc import Sequence

from .config import Config
from .runtime import run_shell
from .utils import format_commit, rebuild_message

__all__ = [
    "posts_commands",
    "website_commands",
    "root_commands",
    "publish",
]

logger = logging.getLogger(__name__)


def _commit(message: str) -> str:
    # 2>&1 | cat: 无可提交内容时 git 会返回非零，但不影响后续命令
    return f"git commit -m {shlex.quote(message)} 2>&1 | cat"


def posts_commands(config: Config, parts: Sequence[str]) -> list[str]:
    return [
        f"cd {shlex.quote(str(config.posts_dir))}",
        "git add .",
        _commit(format_commit(parts)),
        "git push",
    ]


def website_commands(config: Config, parts: Sequence[str]) -> list[str]:
    return [
        f"cd {shlex.quote(str(config.root))}",
        "rm -rf public/*",
        "hugo",
        f"cd {shlex.quote(str(config.website_dir))}",
        "git add .",
        _commit(rebuild_message(parts)),
        "git push",
    ]


def root_commands(config: Config, parts: Sequence[str]) -> list[str]:
    return [
        f"cd {shlex.quote(str(config.root))}",
        "git add .",
        _commit(rebuild_message(parts)),
        "git push",
    ]


def publish(parts: Sequence[str], config: Config) -> None:
    """发布博客网站。

    Args:
        parts: commit 信息片段
        config: 配置

    Raises:
        ValueError: commit 信息为空
        ShellError: 任一 shell 会话失败（后续会话不再执行）
    """
    # 先校验信息，避免执行到一半才失败
    format_commit(parts)

    sessions = [
        ("posts", posts_commands(config, parts)),
        ("website", website_commands(config, parts)),
        ("root", root_commands(config, parts)),
    ]
    for name, commands in sessions:
        logger.info(f"publish: {name} session ({len(commands)} commands)")
        returncode = run_shell(
            commands,
            debug=config.debug,
            interpreter=config.shell,
            timeout=config.shell_timeout,
        )
        logger.debug(f"publish: {name} session exited with {returncode}")
