"""
packstate package create command.

SUMMARY: Create a new package with the mandatory directories and manifest
"""

from __future__ import annotations

import argparse
import sys

from packstate.cli import OutputFormatter, add_json_flag, add_repo_root_flag, get_repo_root

SUMMARY = "Create a new package with the mandatory directories and manifest"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("package_key", help="Key of the package to create (e.g. Acme.Blog)")
    parser.add_argument(
        "--type",
        dest="package_type",
        default=None,
        help="Package type written to the manifest (default: configured default type)",
    )
    parser.add_argument(
        "--path",
        dest="packages_path",
        default=None,
        help="Directory to create the package in, relative to the packages base path",
    )
    add_json_flag(parser)
    add_repo_root_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        from packstate.core.packages import PackageManager

        manager = PackageManager.from_config(get_repo_root(args))
        key = str(args.package_key)

        if not manager.is_package_key_valid(key):
            formatter.error(ValueError(key), f'The package key "{key}" is not valid.', error_code="invalid_key")
            return 1
        if manager.is_available(key):
            formatter.error(LookupError(key), f'The package "{key}" already exists.', error_code="key_exists")
            return 1

        package_type = args.package_type or manager.default_type
        if package_type == manager.scanner.collection_type:
            formatter.error(
                ValueError(package_type),
                f'"{package_type}" is a collection type; collections cannot be created as packages.',
                error_code="invalid_type",
            )
            return 1

        record = manager.create_package(key, {"type": package_type}, args.packages_path)
        package_path = record.absolute_path(manager.packages_base_path)
        formatter.success(
            {"package": record.to_state(), "path": str(package_path)},
            f'Created new package "{record.package_key}" at "{package_path}".',
        )
        return 0
    except Exception as e:
        formatter.error(e, error_code="create_error")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    cli_args = parser.parse_args()
    sys.exit(main(cli_args))
