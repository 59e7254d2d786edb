"""Commit 信息格式化测试。"""

from __future__ import annotations

import pytest

from blog_manager.utils import REBUILD_HEADER, format_commit, rebuild_message


class TestFormatCommit:
    """测试 format_commit。"""

    def test_single_message_unchanged(self):
        assert format_commit(["新增文章"]) == "新增文章"

    def test_multiple_parts_numbered(self):
        assert format_commit(["新增文章", "修改图片"]) == "1. 新增文章；\n2. 修改图片；"

    def test_fullwidth_semicolon_splits(self):
        assert format_commit(["新增文章；修改图片；"]) == "1. 新增文章；\n2. 修改图片；"

    def test_ascii_semicolon_splits(self):
        assert format_commit(["add post; fix typo"]) == "1. add post；\n2. fix typo；"

    def test_single_trailing_semicolon_unchanged(self):
        """只有一段时不生成编号列表。"""
        assert format_commit(["新增文章；"]) == "新增文章；"

    def test_empty_parts_dropped(self):
        assert format_commit(["", "a", "  ", "b"]) == "1. a；\n2. b；"

    @pytest.mark.parametrize("parts", [[], [""], ["  "]])
    def test_empty_message_rejected(self, parts):
        with pytest.raises(ValueError):
            format_commit(parts)


class TestRebuildMessage:
    """测试 rebuild_message。"""

    def test_header_prepended(self):
        assert rebuild_message(["a", "b"]) == f"{REBUILD_HEADER}\n1. a；\n2. b；"

    def test_single(self):
        assert rebuild_message(["新增文章"]) == "重新构建：\n新增文章"
