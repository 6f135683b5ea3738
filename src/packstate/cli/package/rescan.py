"""
packstate package rescan command.

SUMMARY: Rescan package availability and rebuild the package state cache
"""

from __future__ import annotations

import argparse
import sys

from packstate.cli import OutputFormatter, add_json_flag, add_repo_root_flag, get_repo_root

SUMMARY = "Rescan package availability and rebuild the package state cache"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_json_flag(parser)
    add_repo_root_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        from packstate.core.packages import PackageManager

        manager = PackageManager.from_config(get_repo_root(args))
        state = manager.rescan_packages()
        save_error = manager.last_save_error

        if formatter.json_mode:
            formatter.success(
                {
                    "version": state.version,
                    "loadOrder": list(state.load_order),
                    "cacheWritten": save_error is None,
                },
                "Package rescan successful.",
                status="success" if save_error is None else "not_written",
            )
            return 0 if save_error is None else 1

        formatter.text("The following packages are registered and will be loaded in this order:")
        formatter.text("")
        for external_name in state.load_order:
            formatter.text(external_name)
        formatter.text("")
        if save_error is not None:
            formatter.error(save_error, error_code="not_writable")
            return 1
        formatter.text("Package rescan successful.")
        return 0
    except Exception as e:
        formatter.error(e, error_code="rescan_error")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    cli_args = parser.parse_args()
    sys.exit(main(cli_args))
