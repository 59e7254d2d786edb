"""打包元数据测试。"""

from __future__ import annotations

from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")

ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture(scope="module")
def pyproject() -> dict:
    with (ROOT / "pyproject.toml").open("rb") as f:
        return tomllib.load(f)


class TestPyproject:
    """测试 pyproject.toml。"""

    def test_readme_is_project_readme(self, pyproject: dict):
        readme = pyproject["project"]["readme"]
        assert readme == "README.md"
        assert (ROOT / readme).is_file()

    def test_no_unused_markers(self, pyproject: dict):
        declared = pyproject["tool"]["pytest"]["ini_options"].get("markers", [])
        names = [m.split(":", 1)[0].strip() for m in declared]
        sources = "".join(p.read_text(encoding="utf-8") for p in (ROOT / "tests").glob("test_*.py"))
        for name in names:
            assert f"pytest.mark.{name}" in sources
