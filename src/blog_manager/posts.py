"""新建文章。

在草稿目录下生成带 front matter 的 Markdown 文件：

    ---
    title: "标题"
    date: 2026-10-18T20:15:03+08:00
    draft: true
    slug: p1792325703000
    ---
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import Config

__all__ = ["FrontMatter", "create_post", "post_filename"]

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now().astimezone()


def _epoch_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


class FrontMatter(BaseModel):
    """文章 front matter。

    Attributes:
        title: 文章标题
        date: 创建时间（带时区）
        draft: 是否为草稿
        slug: 文章 URL 标识，格式 p<毫秒时间戳>
    """

    model_config = ConfigDict(extra="forbid")

    title: str
    date: datetime
    draft: bool = True
    slug: str = Field(pattern=r"^[\w-]+$")

    @field_validator("title")
    @classmethod
    def _check_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title is empty")
        if "\n" in value or "\r" in value:
            raise ValueError("title must be a single line")
        return value

    @classmethod
    def for_title(cls, title: str, now: datetime | None = None) -> FrontMatter:
        moment = now or _now()
        return cls(title=title, date=moment, slug=f"p{_epoch_millis(moment)}")

    def render(self) -> str:
        escaped = self.title.replace("\\", "\\\\").replace('"', '\\"')
        date = self.date.replace(microsecond=0).isoformat()
        return "\n".join([
            "---",
            f'title: "{escaped}"',
            f"date: {date}",
            f"draft: {'true' if self.draft else 'false'}",
            f"slug: {self.slug}",
            "---",
        ]) + "\n"


def post_filename(title: str, moment: datetime) -> str:
    """草稿文件名：<YYYY-MM-DD>-<标题>.md"""
    return f"{moment.date().isoformat()}-{title.strip()}.md"


def create_post(title: str, config: Config, now: datetime | None = None) -> Path:
    """新建文章草稿。

    Args:
        title: 文章标题
        config: 配置
        now: 创建时间（默认当前时间，用于测试）

    Returns:
        新文件的绝对路径

    Raises:
        ValueError: 标题为空或包含路径分隔符
        FileExistsError: 同名草稿已存在
    """
    if "/" in title or os.sep in title or "\0" in title:
        raise ValueError(f"title must not contain path separators: {title!r}")

    moment = now or _now()
    front_matter = FrontMatter.for_title(title, moment)

    drafts = config.drafts_dir
    drafts.mkdir(parents=True, exist_ok=True)
    path = (drafts / post_filename(front_matter.title, moment)).resolve()

    # "x" 模式：已存在时抛出 FileExistsError，不覆盖
    with open(path, "x", encoding="utf-8") as f:
        f.write(front_matter.render())

    logger.info(f"create post: {path}")
    return path
