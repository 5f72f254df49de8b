"""Shared fixtures for lz tests."""

from pathlib import Path

import pytest


def write(path: Path, size: int) -> Path:
    """Create a file of exactly ``size`` bytes, with parents."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    return path


@pytest.fixture
def sample_dir(tmp_path: Path) -> Path:
    """a.txt (10 bytes), b.rs (20 bytes) and sub/c.rs (5 bytes)."""
    root = tmp_path / "x"
    write(root / "a.txt", 10)
    write(root / "b.rs", 20)
    write(root / "sub" / "c.rs", 5)
    return root
