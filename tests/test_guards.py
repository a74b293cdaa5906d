from pathlib import Path

import pytest

from autocli.tools.guards import PathGuard, PathTraversalError, resolve


@pytest.mark.parametrize(
    "relative",
    ["..", "../etc/passwd", "a/../../b", "src/../README.md", "/etc/passwd", "./../x"],
)
def test_resolve_rejects_parent_segments_and_absolute_paths(tmp_path: Path, relative):
    with pytest.raises(PathTraversalError) as excinfo:
        resolve(tmp_path, relative)
    assert "resolves outside project root" in str(excinfo.value)
    assert excinfo.value.relative_path == relative


@pytest.mark.parametrize("relative", [".", "a.txt", "src/main.py", "./docs/guide.md", "a//b"])
def test_resolve_returns_absolute_path_under_root(tmp_path: Path, relative):
    resolved = resolve(tmp_path, relative)
    assert resolved.is_absolute()
    root = str(tmp_path)
    assert str(resolved) == root or str(resolved).startswith(root.rstrip("/") + "/")


def test_error_message_shape(tmp_path: Path):
    with pytest.raises(PathTraversalError) as excinfo:
        resolve(tmp_path, "../x")
    assert str(excinfo.value) == (
        f"Path traversal detected: '../x' resolves outside project root '{tmp_path}'"
    )


def test_sibling_directory_with_common_prefix_is_not_inside(tmp_path: Path):
    root = tmp_path / "proj"
    root.mkdir()
    guard = PathGuard(root)
    assert guard.resolve("projx") == root / "projx"
    with pytest.raises(PathTraversalError):
        guard.resolve(str(tmp_path / "projx"))


def test_relative_rendering(tmp_path: Path):
    guard = PathGuard(tmp_path)
    assert guard.relative(tmp_path) == "."
    assert guard.relative(tmp_path / "a" / "b.txt") == "a/b.txt"
