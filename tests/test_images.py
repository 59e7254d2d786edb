"""图片上传测试。"""

from __future__ import annotations

import shlex
from dataclasses import replace
from pathlib import Path

import pytest

from blog_manager import images
from blog_manager.config import Config
from blog_manager.images import (
    build_image_commands,
    image_markdown,
    image_name_for,
    pick_capture,
    save_image,
)
from blog_manager.runtime import run_shell


class TestPickCapture:
    """测试截图选择。"""

    def test_first_by_name(self, tmp_path: Path):
        (tmp_path / "b.png").write_bytes(b"b")
        (tmp_path / "a.png").write_bytes(b"a")
        assert pick_capture(tmp_path) == tmp_path / "a.png"

    def test_ignores_hidden_and_dirs(self, tmp_path: Path):
        (tmp_path / ".DS_Store").write_bytes(b"")
        (tmp_path / "sub").mkdir()
        (tmp_path / "shot.jpg").write_bytes(b"x")
        assert pick_capture(tmp_path) == tmp_path / "shot.jpg"

    def test_empty_dir(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            pick_capture(tmp_path)

    def test_missing_dir(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            pick_capture(tmp_path / "missing")


class TestNaming:
    """测试图片命名与链接。"""

    def test_keeps_extension(self):
        assert image_name_for(Path("Screen Shot.JPG"), 1234) == "i1234.jpg"

    def test_defaults_to_png(self):
        assert image_name_for(Path("capture"), 1234) == "i1234.png"

    def test_name_from_clock(self):
        name = image_name_for(Path("a.png"))
        assert name.startswith("i") and name.endswith(".png")
        assert name[1:-4].isdigit()

    def test_markdown_site_path(self):
        assert image_markdown("i1.png") == "![i1.png](/images/i1.png)"

    def test_markdown_base_url(self):
        url = "https://raw.githubusercontent.com/someone/images/main/"
        assert image_markdown("i1.png", url) == (
            "![i1.png](https://raw.githubusercontent.com/someone/images/main/i1.png)"
        )


class TestBuildCommands:
    """测试命令列表。"""

    def test_commands(self, config: Config):
        capture = config.captures_dir / "my shot.png"
        commands = build_image_commands(config, capture, "i1.png")

        assert commands == [
            f"mv {shlex.quote(str(capture))} {shlex.quote(str(config.images_dir / 'i1.png'))}",
            f"cd {shlex.quote(str(config.images_dir))}",
            "git add .",
            "git commit -m 'add i1.png' 2>&1 | cat",
            "git push",
        ]

    def test_clipboard_command_appended(self, config: Config):
        config = replace(config, clipboard_command="pbcopy")
        commands = build_image_commands(config, Path("/c/a.png"), "i1.png")
        assert commands[-1] == "printf '%s' '![i1.png](/images/i1.png)' | pbcopy"


class TestSaveImage:
    """测试完整流程（跳过 git 命令，其余命令在真实 shell 中执行）。"""

    @pytest.fixture
    def sessions(self, monkeypatch: pytest.MonkeyPatch) -> list[list[str]]:
        recorded: list[list[str]] = []

        def fake_run_shell(commands, **kwargs):
            commands = list(commands)
            recorded.append(commands)
            kept = [c for c in commands if not c.startswith("git ")]
            return run_shell(kept, echo=None, **kwargs)

        monkeypatch.setattr(images, "run_shell", fake_run_shell)
        return recorded

    def test_moves_capture_and_returns_link(self, config: Config, sessions):
        capture = config.captures_dir / "shot.png"
        capture.write_bytes(b"png")

        link = save_image(config, millis=42)

        assert link == "![i42.png](/images/i42.png)"
        assert not capture.exists()
        assert (config.images_dir / "i42.png").read_bytes() == b"png"
        assert len(sessions) == 1
        assert "git push" in sessions[0]

    def test_clipboard_receives_link(self, config: Config, sessions, tmp_path: Path):
        clip = tmp_path / "clipboard.txt"
        config = replace(config, clipboard_command=f"cat > {shlex.quote(str(clip))}")
        (config.captures_dir / "shot.png").write_bytes(b"png")

        link = save_image(config, millis=7)

        assert clip.read_text() == link

    def test_no_capture(self, config: Config, sessions):
        with pytest.raises(FileNotFoundError):
            save_image(config)
        assert sessions == []
