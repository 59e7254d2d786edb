"""BLOG 环境变量配置管理。

环境变量:
    BLOG_ROOT: 博客根目录
        - 默认为当前工作目录

    BLOG_SHELL: 执行命令使用的 shell
        - 默认取 $SHELL，未设置时为 /bin/sh

    BLOG_DEBUG: 是否输出 shell 的 stdout/stderr
        - true/1/yes = 输出 (默认)
        - false/0/no = 只输出命令本身

    BLOG_LOG_DEBUG: 日志调试模式
        - true/1/yes = 开启 (日志输出到临时文件)
        - false/0/no = 关闭 (默认，日志输出到 stderr)

    BLOG_IMAGE_BASE_URL: 图片的公开访问地址前缀
        - 例: "https://raw.githubusercontent.com/<user>/images/main"
        - 默认为空，使用站内路径 /images

    BLOG_CLIPBOARD_CMD: 复制图片链接使用的剪贴板命令
        - macOS 默认 pbcopy，其它平台默认不复制
        - 设置为空字符串可禁用

    BLOG_SHELL_TIMEOUT: 单个 shell 会话的超时时间（秒）
        - 默认不超时
"""

from __future__ import annotations

import os
import sys
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .runtime.virtual_shell import default_interpreter

__all__ = ["Config", "load_config", "get_config", "reload_config"]


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """解析布尔值环境变量。"""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_timeout(value: str | None) -> float | None:
    """解析超时时间环境变量，无效或非正数视为不超时。"""
    if not value:
        return None
    try:
        timeout = float(value)
    except ValueError:
        return None
    return timeout if timeout > 0 else None


def _default_clipboard_command() -> str:
    return "pbcopy" if sys.platform == "darwin" else ""


@dataclass
class Config:
    """BLOG 配置。

    Attributes:
        root: 博客根目录（同时是根仓库）
        shell: 执行命令使用的 shell
        debug: 是否输出 shell 的 stdout/stderr
        log_debug: 日志调试模式（输出到临时文件）
        log_file: 日志文件路径（当 log_debug=True 时自动设置）
        image_base_url: 图片公开地址前缀
        clipboard_command: 剪贴板命令，空字符串表示不复制
        shell_timeout: 单个 shell 会话的超时时间
    """

    root: Path
    shell: str = "/bin/sh"
    debug: bool = True
    log_debug: bool = False
    log_file: str | None = None
    image_base_url: str = ""
    clipboard_command: str = ""
    shell_timeout: float | None = None

    @property
    def posts_dir(self) -> Path:
        """文章仓库。"""
        return self.root / "content" / "posts"

    @property
    def drafts_dir(self) -> Path:
        """草稿目录。"""
        return self.posts_dir / "_draft"

    @property
    def images_dir(self) -> Path:
        """图片仓库。"""
        return self.root / "images"

    @property
    def captures_dir(self) -> Path:
        """截图目录。"""
        return self.images_dir / "_capture"

    @property
    def website_dir(self) -> Path:
        """网站构建输出（public 仓库）。"""
        return self.root / "public"

    def __repr__(self) -> str:
        return (
            f"Config(root={self.root}, "
            f"shell={self.shell}, "
            f"debug={self.debug}, "
            f"log_debug={self.log_debug}, "
            f"log_file={self.log_file}, "
            f"image_base_url={self.image_base_url or '/images'}, "
            f"clipboard_command={self.clipboard_command or 'none'}, "
            f"shell_timeout={self.shell_timeout})"
        )


def _generate_log_file_path() -> str:
    """生成日志文件路径。

    Returns:
        临时目录下的日志文件绝对路径
    """
    log_dir = Path(tempfile.gettempdir()) / "blog-manager"
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"blog_debug_{timestamp}.log"

    return str(log_file.resolve())


def load_config() -> Config:
    """从环境变量加载配置。"""
    log_debug = _parse_bool(os.environ.get("BLOG_LOG_DEBUG"), default=False)
    log_file = _generate_log_file_path() if log_debug else None

    root = os.environ.get("BLOG_ROOT")
    clipboard = os.environ.get("BLOG_CLIPBOARD_CMD")

    return Config(
        root=Path(root).expanduser().resolve() if root else Path.cwd(),
        shell=os.environ.get("BLOG_SHELL") or default_interpreter(),
        debug=_parse_bool(os.environ.get("BLOG_DEBUG"), default=True),
        log_debug=log_debug,
        log_file=log_file,
        image_base_url=os.environ.get("BLOG_IMAGE_BASE_URL", "").strip().rstrip("/"),
        clipboard_command=(
            clipboard.strip() if clipboard is not None else _default_clipboard_command()
        ),
        shell_timeout=_parse_timeout(os.environ.get("BLOG_SHELL_TIMEOUT")),
    )


# 全局配置实例（延迟加载）
_config: Config | None = None


def get_config() -> Config:
    """获取全局配置实例。"""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """重新加载配置（用于测试）。"""
    global _config
    _config = load_config()
    return _config
