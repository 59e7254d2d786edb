"""上传截图到图片仓库，并生成 Markdown 图片链接。

流程：
1. 取截图目录中的第一张截图
2. 移动到图片仓库并重命名为 i<毫秒时间戳>.<扩展名>
3. 在图片仓库中 commit + push
4. 把 Markdown 链接复制到剪贴板（如果配置了剪贴板命令）
"""

from __future__ import annotations

import logging
import shlex
import time
from pathlib import Path

from .config import Config
from .runtime import run_shell

__all__ = [
    "pick_capture",
    "image_name_for",
    "image_markdown",
    "build_image_commands",
    "save_image",
]

logger = logging.getLogger(__name__)


def pick_capture(captures_dir: Path) -> Path:
    """按文件名排序取第一张截图，忽略隐藏文件（如 .DS_Store）。

    Raises:
        FileNotFoundError: 截图目录不存在或为空
    """
    if not captures_dir.is_dir():
        raise FileNotFoundError(f"capture directory not found: {captures_dir}")

    captures = sorted(
        p for p in captures_dir.iterdir()
        if p.is_file() and not p.name.startswith(".")
    )
    if not captures:
        raise FileNotFoundError(f"no capture found in {captures_dir}")
    return captures[0]


def image_name_for(capture: Path, millis: int | None = None) -> str:
    """新图片名：i<毫秒时间戳>，保留原扩展名（默认 .png）。"""
    if millis is None:
        millis = time.time_ns() // 1_000_000
    suffix = capture.suffix.lower() or ".png"
    return f"i{millis}{suffix}"


def image_markdown(image_name: str, base_url: str = "") -> str:
    """Markdown 图片链接；base_url 为空时使用站内路径 /images。"""
    prefix = base_url.rstrip("/") if base_url else "/images"
    return f"![{image_name}]({prefix}/{image_name})"


def build_image_commands(config: Config, capture: Path, image_name: str) -> list[str]:
    """图片仓库 shell 会话的命令列表。"""
    images = config.images_dir
    markdown = image_markdown(image_name, config.image_base_url)

    commands = [
        f"mv {shlex.quote(str(capture))} {shlex.quote(str(images / image_name))}",
        f"cd {shlex.quote(str(images))}",
        "git add .",
        f"git commit -m {shlex.quote(f'add {image_name}')} 2>&1 | cat",
        "git push",
    ]
    if config.clipboard_command:
        commands.append(f"printf '%s' {shlex.quote(markdown)} | {config.clipboard_command}")
    return commands


def save_image(config: Config, millis: int | None = None) -> str:
    """上传截图并返回 Markdown 图片链接。

    Args:
        config: 配置
        millis: 图片时间戳（默认当前时间，用于测试）

    Returns:
        Markdown 图片链接

    Raises:
        FileNotFoundError: 没有可用的截图
        ShellError: shell 会话失败
    """
    capture = pick_capture(config.captures_dir)
    image_name = image_name_for(capture, millis)
    logger.info(f"save image: {capture.name} -> {image_name}")

    run_shell(
        build_image_commands(config, capture, image_name),
        debug=config.debug,
        interpreter=config.shell,
        timeout=config.shell_timeout,
    )
    return image_markdown(image_name, config.image_base_url)
