"""Tests for shared I/O, merge and project-root helpers."""
from __future__ import annotations

from pathlib import Path

import pytest

from packstate.core.exceptions import ConfigError
from packstate.core.utils.io import atomic_write, ensure_directory, iter_yaml_files, read_yaml, write_text, write_yaml
from packstate.core.utils.merge import deep_merge
from packstate.core.utils.paths import get_project_config_dir, resolve_project_root


def test_write_text_creates_parents_and_leaves_no_temp(tmp_path: Path) -> None:
    target = tmp_path / "a" / "b" / "out.txt"
    write_text(target, "hello")
    assert target.read_text(encoding="utf-8") == "hello"
    assert [p.name for p in target.parent.iterdir()] == ["out.txt"]


def test_atomic_write_failure_keeps_original(tmp_path: Path) -> None:
    target = tmp_path / "out.txt"
    target.write_text("original", encoding="utf-8")

    def _boom(f) -> None:
        f.write("partial")
        raise RuntimeError("interrupted")

    with pytest.raises(RuntimeError):
        atomic_write(target, _boom)

    assert target.read_text(encoding="utf-8") == "original"
    assert [p.name for p in tmp_path.iterdir()] == ["out.txt"]


def test_yaml_round_trip_and_defaults(tmp_path: Path) -> None:
    path = tmp_path / "data.yaml"
    write_yaml(path, {"b": 1, "a": "multi\nline"})
    assert read_yaml(path) == {"a": "multi\nline", "b": 1}
    assert read_yaml(tmp_path / "missing.yaml", default={}) == {}
    (tmp_path / "bad.yaml").write_text("a: [", encoding="utf-8")
    assert read_yaml(tmp_path / "bad.yaml", default="fallback") == "fallback"


def test_iter_yaml_files(tmp_path: Path) -> None:
    for name in ("b.yml", "a.yaml", "c.txt"):
        (tmp_path / name).write_text("x: 1\n", encoding="utf-8")
    assert [p.name for p in iter_yaml_files(tmp_path)] == ["a.yaml", "b.yml"]
    assert iter_yaml_files(tmp_path / "missing") == []


def test_ensure_directory(tmp_path: Path) -> None:
    assert ensure_directory(tmp_path / "new" / "deeper").is_dir()
    assert ensure_directory(tmp_path / "new") == tmp_path / "new"
    (tmp_path / "file").write_text("x", encoding="utf-8")
    with pytest.raises(NotADirectoryError):
        ensure_directory(tmp_path / "file")


def test_deep_merge_layers_sections_and_replaces_lists() -> None:
    base = {"packages": {"basePath": "Packages", "stateCache": {"path": "a"}}, "list": [1]}
    override = {"packages": {"stateCache": {"path": "b"}}, "list": [2]}

    merged = deep_merge(base, override)

    assert merged == {
        "packages": {"basePath": "Packages", "stateCache": {"path": "b"}},
        "list": [2],
    }
    assert base["packages"]["stateCache"] == {"path": "a"}


class TestProjectRoot:
    def test_env_root(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PACKSTATE_PROJECT_ROOT", str(tmp_path))
        assert resolve_project_root() == tmp_path.resolve()

    def test_env_root_missing(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PACKSTATE_PROJECT_ROOT", str(tmp_path / "missing"))
        with pytest.raises(ConfigError):
            resolve_project_root()

    def test_env_root_pointing_at_config_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_dir = get_project_config_dir(tmp_path, create=True)
        monkeypatch.setenv("PACKSTATE_PROJECT_ROOT", str(config_dir))
        with pytest.raises(ConfigError):
            resolve_project_root()

    def test_marker_directory_search(self, tmp_path: Path) -> None:
        (tmp_path / ".packstate").mkdir()
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert resolve_project_root(nested) == tmp_path.resolve()
