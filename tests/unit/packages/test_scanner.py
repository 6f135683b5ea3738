"""Tests for package discovery.

NO MOCKS - real directory trees under tmp_path.
"""
from __future__ import annotations

from pathlib import Path

import pytest

from packstate.core.exceptions import (
    DiscoveryConflictError,
    InvalidKeyError,
    ManifestIncompleteError,
    ManifestMalformedError,
)
from packstate.core.packages.scanner import PackageScanner, build_records, iter_manifest_dirs
from helpers.packages import write_manifest_file, write_package, write_package_class


def _names(discovered) -> list:
    return sorted(d.manifest.name for d in discovered)


def test_missing_base_path_yields_nothing(tmp_path: Path) -> None:
    assert PackageScanner(tmp_path / "nope").scan() == []


def test_finds_packages_at_any_depth(tmp_path: Path) -> None:
    write_package(tmp_path, "Application/Acme.Blog", "acme/blog")
    write_package(tmp_path, "Libraries/vendor/deep/Lib", "vendor/lib")
    (tmp_path / "Empty" / "Nothing").mkdir(parents=True)

    found = PackageScanner(tmp_path).scan()

    assert _names(found) == ["acme/blog", "vendor/lib"]
    by_name = {d.manifest.name: d for d in found}
    assert by_name["acme/blog"].key.value == "Acme.Blog"
    assert by_name["vendor/lib"].path == tmp_path / "Libraries" / "vendor" / "deep" / "Lib"


def test_stops_descending_at_a_manifest(tmp_path: Path) -> None:
    outer = write_package(tmp_path, "Application/Acme.Outer", "acme/outer")
    write_package(outer, "Resources/Private/Nested", "acme/nested")

    assert _names(PackageScanner(tmp_path).scan()) == ["acme/outer"]


def test_collection_is_traversed_not_registered(tmp_path: Path) -> None:
    bundle = write_package(tmp_path, "Bundles/acme-bundle", "acme/bundle", type="package-collection")
    write_package(bundle, "Acme.One", "acme/one")
    inner = write_package(bundle, "nested/more", "acme/inner-bundle", type="package-collection")
    write_package(inner, "Acme.Two", "acme/two")
    write_package(tmp_path, "Application/Acme.Three", "acme/three")

    assert _names(PackageScanner(tmp_path).scan()) == ["acme/one", "acme/three", "acme/two"]


def test_custom_collection_type(tmp_path: Path) -> None:
    bundle = write_package(tmp_path, "Bundle", "acme/bundle", type="neos-package-collection")
    write_package(bundle, "Acme.One", "acme/one")

    scanner = PackageScanner(tmp_path, collection_type="neos-package-collection")
    assert _names(scanner.scan()) == ["acme/one"]


def test_inactive_directory_is_skipped(tmp_path: Path) -> None:
    write_package(tmp_path, "Inactive/Acme.Old", "acme/old")
    write_package(tmp_path, "Application/Acme.New", "acme/new")

    assert _names(PackageScanner(tmp_path).scan()) == ["acme/new"]
    assert _names(PackageScanner(tmp_path, inactive_directory=None).scan()) == ["acme/new", "acme/old"]


def test_duplicate_external_name_is_a_conflict(tmp_path: Path) -> None:
    write_package(tmp_path, "Application/One", "Acme.Foo")
    write_package(tmp_path, "Libraries/Two", "Acme.Foo")

    with pytest.raises(DiscoveryConflictError) as exc:
        PackageScanner(tmp_path).scan()

    message = str(exc.value)
    assert "Application/One" in message
    assert "Libraries/Two" in message
    assert exc.value.context["name"] == "Acme.Foo"


def test_external_names_equal_ignoring_case_are_a_conflict(tmp_path: Path) -> None:
    write_package(tmp_path, "Application/Upper", "Acme/Foo", key="Acme.Upper")
    write_package(tmp_path, "Application/Lower", "acme/foo", key="Acme.Lower")

    with pytest.raises(DiscoveryConflictError) as exc:
        PackageScanner(tmp_path).scan()

    assert exc.value.context["name"] in ("Acme/Foo", "acme/foo")


def test_keys_equal_ignoring_case_are_a_conflict(tmp_path: Path) -> None:
    write_package(tmp_path, "A", "acme/foo", key="Acme.Foo")
    write_package(tmp_path, "B", "acme/other", key="Acme.FOO")

    with pytest.raises(DiscoveryConflictError):
        PackageScanner(tmp_path).scan()


def test_structural_errors_propagate(tmp_path: Path) -> None:
    (tmp_path / "Broken").mkdir()
    (tmp_path / "Broken" / "package.yml").write_text("name: [oops\n", encoding="utf-8")
    with pytest.raises(ManifestMalformedError):
        PackageScanner(tmp_path).scan()


def test_incomplete_manifest_propagates(tmp_path: Path) -> None:
    write_manifest_file(tmp_path / "NoName", {"type": "library"})
    with pytest.raises(ManifestIncompleteError):
        PackageScanner(tmp_path).scan()


def test_underivable_key_propagates(tmp_path: Path) -> None:
    write_package(tmp_path, "123", "456")
    with pytest.raises(InvalidKeyError):
        PackageScanner(tmp_path).scan()


def test_iter_manifest_dirs_order_and_root(tmp_path: Path) -> None:
    write_manifest_file(tmp_path, {"name": "root/itself"})
    write_package(tmp_path, "b/Pkg", "x/b")
    write_package(tmp_path, "a/Pkg", "x/a")

    found = list(iter_manifest_dirs(tmp_path))

    assert found == [tmp_path / "a" / "Pkg", tmp_path / "b" / "Pkg"]


def test_build_records_detects_capability(tmp_path: Path) -> None:
    plain = write_package(tmp_path, "Acme.Plain", "acme/plain")
    bootable = write_package(tmp_path, "Acme.Boot", "acme/boot", dependencies=["acme/plain"])
    write_package_class(bootable)

    records = {r.external_name: r for r in build_records(tmp_path, PackageScanner(tmp_path).scan())}

    assert records["acme/plain"].capability.value == "plain"
    assert records["acme/plain"].path == "Acme.Plain"
    assert records["acme/boot"].capability.value == "bootable"
    assert records["acme/boot"].dependencies == ("acme/plain",)
    assert plain.is_dir()
