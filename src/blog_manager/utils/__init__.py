"""工具函数模块。"""

from .commit_message import REBUILD_HEADER, format_commit, rebuild_message

__all__ = ["format_commit", "rebuild_message", "REBUILD_HEADER"]
