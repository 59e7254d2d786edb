"""Commit 信息格式化。

单条信息原样使用；多条信息（或用分号分隔的单条信息）格式化为编号列表：

    1. 新增文章；
    2. 修改图片；
"""

from __future__ import annotations

import re
from collections.abc import Sequence

__all__ = [
    "format_commit",
    "rebuild_message",
    "REBUILD_HEADER",
]

REBUILD_HEADER = "重新构建："

# 全角或半角分号
_SEPARATOR_RE = re.compile(r"[；;]")


def format_commit(parts: Sequence[str]) -> str:
    """格式化 commit 信息。

    Args:
        parts: 命令行传入的信息片段

    Returns:
        格式化后的 commit 信息

    Raises:
        ValueError: 信息为空
    """
    items = [p.strip() for p in parts if p and p.strip()]
    if not items:
        raise ValueError("commit message is empty")

    if len(items) == 1:
        pieces = [p.strip() for p in _SEPARATOR_RE.split(items[0]) if p.strip()]
        if len(pieces) <= 1:
            return items[0]
        items = pieces

    return "\n".join(f"{i}. {item}；" for i, item in enumerate(items, start=1))


def rebuild_message(parts: Sequence[str]) -> str:
    """网站与根仓库使用的 commit 信息。"""
    return f"{REBUILD_HEADER}\n{format_commit(parts)}"
