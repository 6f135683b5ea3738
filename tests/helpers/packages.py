"""Helpers that lay out packages on disk for tests."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import yaml


def write_manifest_file(package_dir: Path, data: Dict[str, Any], filename: str = "package.yml") -> Path:
    package_dir.mkdir(parents=True, exist_ok=True)
    path = package_dir / filename
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path


def write_package(
    base: Path,
    relative: str,
    name: str,
    *,
    dependencies: Iterable[str] = (),
    key: Optional[str] = None,
    type: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> Path:
    """Create ``base/relative`` with a manifest declaring ``name``."""
    data: Dict[str, Any] = {"name": name}
    if key is not None:
        data["key"] = key
    if type is not None:
        data["type"] = type
    deps = list(dependencies)
    if deps:
        data["require"] = {dep: "*" for dep in deps}
    if extra:
        data.update(extra)
    package_dir = base / relative
    write_manifest_file(package_dir, data)
    return package_dir


def write_package_class(package_dir: Path, *, bootable: bool = True, body: Optional[str] = None) -> Path:
    """Write ``Classes/Package.py`` into ``package_dir``.

    The bootable variant appends the bootstrap argument to ``bootstrap.booted``.
    """
    classes = package_dir / "Classes"
    classes.mkdir(parents=True, exist_ok=True)
    if body is None:
        if bootable:
            body = (
                "class Package:\n"
                "    def __init__(self, record):\n"
                "        self.record = record\n"
                "\n"
                "    def boot(self, bootstrap):\n"
                "        bootstrap.booted.append(self.record.package_key)\n"
            )
        else:
            body = (
                "class Package:\n"
                "    def __init__(self, record):\n"
                "        self.record = record\n"
            )
    path = classes / "Package.py"
    path.write_text(body, encoding="utf-8")
    return path
