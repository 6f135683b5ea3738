"""
packstate package list command.

SUMMARY: List all locally available packages
"""

from __future__ import annotations

import argparse
import sys

from packstate.cli import OutputFormatter, add_json_flag, add_repo_root_flag, get_repo_root

SUMMARY = "List all locally available packages"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--loading-order",
        action="store_true",
        help="List packages in their loading order instead of alphabetically",
    )
    add_json_flag(parser)
    add_repo_root_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        from packstate.core.packages import PackageManager

        manager = PackageManager.from_config(get_repo_root(args))
        packages = manager.get_available_packages()
        keys = list(packages.keys())
        if not args.loading_order:
            keys.sort()

        if formatter.json_mode:
            formatter.json_output(
                {
                    "loadingOrder": bool(args.loading_order),
                    "packages": [packages[k].to_state() for k in keys],
                }
            )
            return 0

        width = max((len(k) for k in keys), default=0) + 3
        formatter.text("PACKAGES:")
        for key in keys:
            formatter.text(f" {key.ljust(width)}{packages[key].external_name}")
        return 0
    except Exception as e:
        formatter.error(e, error_code="list_error")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    cli_args = parser.parse_args()
    sys.exit(main(cli_args))
