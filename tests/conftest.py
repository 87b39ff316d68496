from pathlib import Path

import pytest


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def make_project(tmp_path: Path):
    """
    Build a fake frontend project under tmp_path.

    Usage: ``root = make_project("app/page.tsx", "src/views/Guild/Salary.vue")``.
    Every argument is a file path relative to the project root; parent
    directories are created and each file gets a one-line body.
    """

    def _make(*files: str) -> Path:
        root = tmp_path / "project"
        root.mkdir(exist_ok=True)
        for rel in files:
            target = root / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(f"// {rel}\n")
        return root

    return _make
