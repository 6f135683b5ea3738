"""Tests for the ``packstate package`` commands, run through the dispatcher."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from packstate.cli._dispatcher import build_parser, main
from helpers.packages import write_package


@pytest.fixture
def project(isolated_project_env: Path) -> Path:
    base = isolated_project_env / "Packages"
    write_package(base, "Application/Acme.C", "acme/c", dependencies=["acme/b"])
    write_package(base, "Framework/Acme.A", "acme/a")
    write_package(base, "Libraries/Zeta.B", "acme/b", key="Zeta.B", dependencies=["acme/a"])
    return isolated_project_env


def _run(capsys, *argv: str):
    code = main(list(argv))
    out, err = capsys.readouterr()
    return code, out, err


def test_parser_discovers_package_commands() -> None:
    parser = build_parser()
    args = parser.parse_args(["package", "list", "--loading-order"])
    assert args.domain == "package"
    assert args.command == "list"
    assert args.loading_order is True


def test_no_domain_prints_help(capsys) -> None:
    code, out, _ = _run(capsys)
    assert code == 0
    assert "package" in out


def test_list_alphabetical(project: Path, capsys) -> None:
    code, out, _ = _run(capsys, "package", "list", "--repo-root", str(project))
    assert code == 0
    lines = out.splitlines()
    assert lines[0] == "PACKAGES:"
    assert [line.split()[0] for line in lines[1:]] == ["Acme.A", "Acme.C", "Zeta.B"]


def test_list_loading_order(project: Path, capsys) -> None:
    code, out, _ = _run(capsys, "package", "list", "--loading-order", "--repo-root", str(project))
    assert code == 0
    assert [line.split()[0] for line in out.splitlines()[1:]] == ["Acme.A", "Zeta.B", "Acme.C"]


def test_list_json(project: Path, capsys) -> None:
    code, out, _ = _run(capsys, "package", "list", "--loading-order", "--json", "--repo-root", str(project))
    assert code == 0
    payload = json.loads(out)
    assert payload["loadingOrder"] is True
    assert [p["externalName"] for p in payload["packages"]] == ["acme/a", "acme/b", "acme/c"]


def test_rescan(project: Path, capsys) -> None:
    code, out, _ = _run(capsys, "package", "rescan", "--repo-root", str(project))
    assert code == 0
    assert out.splitlines() == [
        "The following packages are registered and will be loaded in this order:",
        "",
        "acme/a",
        "acme/b",
        "acme/c",
        "",
        "Package rescan successful.",
    ]
    assert (project / ".packstate" / "cache" / "PackageStates.py").is_file()


def test_rescan_json(project: Path, capsys) -> None:
    code, out, _ = _run(capsys, "package", "rescan", "--json")
    assert code == 0
    payload = json.loads(out)
    assert payload["status"] == "success"
    assert payload["loadOrder"] == ["acme/a", "acme/b", "acme/c"]
    assert payload["cacheWritten"] is True


def test_create(project: Path, capsys) -> None:
    code, out, _ = _run(capsys, "package", "create", "Acme.Blog", "--repo-root", str(project))
    assert code == 0
    package_dir = project / "Packages" / "Application" / "Acme.Blog"
    assert out.strip() == f'Created new package "Acme.Blog" at "{package_dir}".'
    assert (package_dir / "package.yml").is_file()

    code, out, _ = _run(capsys, "package", "list", "--repo-root", str(project))
    assert "Acme.Blog" in out


def test_create_with_type_and_path(project: Path, capsys) -> None:
    code, out, _ = _run(
        capsys, "package", "create", "Acme.Lib", "--type", "library", "--path", "Libraries", "--json"
    )
    assert code == 0
    payload = json.loads(out)
    assert payload["package"]["packagePath"] == "Libraries/Acme.Lib"


@pytest.mark.parametrize(
    "argv, message",
    [
        (["Acme.A"], 'The package "Acme.A" already exists.'),
        (["acme-blog"], 'The package key "acme-blog" is not valid.'),
        (["Acme.Set", "--type", "package-collection"], "collection"),
    ],
)
def test_create_rejections(project: Path, capsys, argv, message: str) -> None:
    code, out, err = _run(capsys, "package", "create", *argv)
    assert code == 1
    assert out == ""
    assert message in err
    assert err.startswith("Error: ")


def test_structural_error_exits_non_zero(project: Path, capsys) -> None:
    write_package(project / "Packages", "Dup", "acme/a")
    code, out, err = _run(capsys, "package", "rescan")
    assert code == 1
    assert "Error: " in err
    assert "acme/a" in err
