"""Bootstrap class detection and loading.

A package may ship a ``Package`` class in ``Classes/Package.py``. Discovery
inspects that file with :mod:`ast` so scanning never executes package code;
the class is only imported when the package manager boots packages.
"""
from __future__ import annotations

import ast
import importlib.util
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from packstate.core.exceptions import CorruptPackageError

PACKAGE_CLASS_NAME = "Package"
PACKAGE_CLASS_FILE = "Classes/Package.py"
BOOT_METHOD = "boot"


def detect_package_class(package_path: Path) -> Optional[Dict[str, Any]]:
    """Return class information for the package at ``package_path`` or None.

    Raises:
        CorruptPackageError: If the class file exists but is not valid Python.
    """
    class_file = Path(package_path) / PACKAGE_CLASS_FILE
    if not class_file.is_file():
        return None

    try:
        tree = ast.parse(class_file.read_text(encoding="utf-8"), filename=str(class_file))
    except (SyntaxError, ValueError, OSError) as exc:
        raise CorruptPackageError(
            f"The package class file {class_file} could not be parsed: {exc}",
            context={"path": str(class_file)},
        ) from exc

    for node in tree.body:
        if isinstance(node, ast.ClassDef) and node.name == PACKAGE_CLASS_NAME:
            bootable = any(
                isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef)) and item.name == BOOT_METHOD
                for item in node.body
            )
            return {
                "className": PACKAGE_CLASS_NAME,
                "pathAndFilename": PACKAGE_CLASS_FILE,
                "bootable": bootable,
            }
    return None


def load_package_class(package_path: Path, class_info: Mapping[str, Any]) -> type:
    """Import the bootstrap class described by ``class_info``.

    Raises:
        CorruptPackageError: If the module cannot be executed or lacks the class.
    """
    class_file = Path(package_path) / str(class_info.get("pathAndFilename", PACKAGE_CLASS_FILE))
    class_name = str(class_info.get("className", PACKAGE_CLASS_NAME))
    module_name = "_packstate_package_" + "_".join(class_file.parent.parent.parts[-2:]).replace(".", "_")

    spec = importlib.util.spec_from_file_location(module_name, class_file)
    if spec is None or spec.loader is None:
        raise CorruptPackageError(
            f"Cannot load package class file {class_file}",
            context={"path": str(class_file)},
        )
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        raise CorruptPackageError(
            f"Executing package class file {class_file} failed: {exc}",
            context={"path": str(class_file)},
        ) from exc

    cls = getattr(module, class_name, None)
    if not isinstance(cls, type):
        raise CorruptPackageError(
            f"{class_file} does not define class {class_name}",
            context={"path": str(class_file)},
        )
    return cls


__all__ = [
    "PACKAGE_CLASS_NAME",
    "PACKAGE_CLASS_FILE",
    "detect_package_class",
    "load_package_class",
]
