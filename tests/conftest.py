"""Pytest 配置和 fixtures。"""

from __future__ import annotations

import shutil
import sys
from pathlib import Path

import pytest

# 项目根目录
PROJECT_ROOT = Path(__file__).parent.parent

# 添加 src 目录到 Python 路径
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from blog_manager.config import Config  # noqa: E402


@pytest.fixture
def sh_path() -> str:
    """POSIX sh 路径。"""
    path = shutil.which("sh")
    if path is None:
        pytest.skip("sh not available")
    return path


@pytest.fixture
def blog_root(tmp_path: Path) -> Path:
    """临时博客根目录（含 posts / images / public 结构）。"""
    root = tmp_path / "blog"
    (root / "content" / "posts" / "_draft").mkdir(parents=True)
    (root / "images" / "_capture").mkdir(parents=True)
    (root / "public").mkdir(parents=True)
    return root


@pytest.fixture
def config(blog_root: Path, sh_path: str) -> Config:
    """指向临时博客根目录的配置，不复制到剪贴板。"""
    return Config(
        root=blog_root,
        shell=sh_path,
        debug=False,
        clipboard_command="",
        shell_timeout=30.0,
    )
